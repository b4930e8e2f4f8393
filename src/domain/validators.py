"""
Field validators - pure predicates over individual form fields.

Validators never raise and never mutate anything. They return a verdict
(or a normalized value) and leave error messaging to the caller.
"""

import re

from .models import RACE_CATEGORIES, Gender, TShirtSize

MOBILE_PATTERN = re.compile(r"^01\d{8,9}$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
IDENTITY_NUMBER_PATTERN = re.compile(r"^\d{12}$")
NAME_PATTERN = re.compile(r"^[^\W\d_]+(?:[ '.\-]+[^\W\d_]+)*\.?$")
OTP_PATTERN = re.compile(r"^\d{4}$")

# One accepted pattern per country, plus the hint shown next to the field.
POSTAL_CODE_FORMATS: dict[str, tuple[re.Pattern, str]] = {
    "India": (re.compile(r"^[1-9]\d{5}$"), "6 digits, e.g. 110001"),
    "Malaysia": (re.compile(r"^\d{5}$"), "5 digits, e.g. 50450"),
    "Singapore": (re.compile(r"^\d{6}$"), "6 digits, e.g. 018956"),
    "United States": (re.compile(r"^\d{5}(-\d{4})?$"), "5 digits or ZIP+4, e.g. 10001"),
    "United Kingdom": (
        re.compile(r"^[A-Z]{1,2}\d[A-Z\d]? ?\d[A-Z]{2}$", re.IGNORECASE),
        "e.g. SW1A 1AA",
    ),
    "Australia": (re.compile(r"^\d{4}$"), "4 digits, e.g. 2000"),
}


def is_valid_mobile(mobile: str | None) -> bool:
    """Malaysian local mobile number: 01 followed by 8 or 9 digits."""
    return bool(mobile) and MOBILE_PATTERN.match(mobile) is not None


def is_valid_email(email: str | None) -> bool:
    """Loose local@domain.tld shape check."""
    return bool(email) and EMAIL_PATTERN.match(email) is not None


def normalize_identity_number(value: str | None) -> str:
    """Strip every non-digit character."""
    if not value:
        return ""
    return re.sub(r"\D", "", value)


def is_valid_identity_number(value: str | None) -> bool:
    """Exactly 12 digits once non-digits are stripped."""
    return IDENTITY_NUMBER_PATTERN.match(normalize_identity_number(value)) is not None


def is_valid_name(name: str | None) -> bool:
    """Letters with space, apostrophe, hyphen or period separators."""
    if not name or not name.strip():
        return False
    return NAME_PATTERN.match(name.strip()) is not None


def is_valid_otp(code: str | None) -> bool:
    return bool(code) and OTP_PATTERN.match(code) is not None


def is_valid_postal_code(code: str | None, country: str | None, whitelist: frozenset[str] = frozenset()) -> bool:
    """
    Validate a postal code against the selected country's pattern.

    Countries without a pattern fail closed unless whitelisted, in which
    case any non-blank code is accepted.
    """
    if not code or not code.strip() or not country:
        return False
    entry = POSTAL_CODE_FORMATS.get(country)
    if entry is None:
        return country in whitelist
    pattern, _ = entry
    return pattern.match(code.strip()) is not None


def postal_code_format(country: str | None) -> str:
    """Human-readable postal code format for a country."""
    entry = POSTAL_CODE_FORMATS.get(country or "")
    if entry is None:
        return "postal code"
    return entry[1]


def race_categories_for(gender: str | None) -> tuple[str, ...]:
    """Race categories offered for a gender (female list for anything else)."""
    if gender == Gender.MALE:
        return RACE_CATEGORIES[Gender.MALE]
    return RACE_CATEGORIES[Gender.FEMALE]


def is_valid_race_category(category: str | None, gender: str | None) -> bool:
    return bool(category) and category in race_categories_for(gender)


def is_valid_gender(gender: str | None) -> bool:
    return gender in {g.value for g in Gender}


def is_valid_t_shirt_size(size: str | None) -> bool:
    return size in {s.value for s in TShirtSize}
