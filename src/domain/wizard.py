"""
Registration wizard - two-step form state machine.

States
======

- RACE_DETAILS (1): contact details and gender, gated on OTP verification
- PERSONAL_DETAILS (2): identity, location and race choices

Transitions:
    RACE_DETAILS -> PERSONAL_DETAILS   advance(), step 1 fields valid
    PERSONAL_DETAILS -> RACE_DETAILS   retreat(), never gated
    any -> RACE_DETAILS                reset() after a successful submission

Validation is pulled, not pushed: set_field() stores values as given and
validate_step() returns an aggregate result mapping every field of the step
to an error message (or None) so the rendering layer can highlight all
problems at once.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any

from .exceptions import (
    InvalidOtpFormat,
    OtpMismatch,
    OtpVerificationRequired,
    UnknownField,
)
from .models import BLOOD_GROUPS, RegistrationForm
from .otp import OtpService, OtpSession
from .validators import (
    is_valid_email,
    is_valid_gender,
    is_valid_identity_number,
    is_valid_mobile,
    is_valid_name,
    is_valid_otp,
    is_valid_postal_code,
    is_valid_race_category,
    is_valid_t_shirt_size,
    normalize_identity_number,
    postal_code_format,
)


class FormStep(IntEnum):
    RACE_DETAILS = 1
    PERSONAL_DETAILS = 2


FIRST_STEP = FormStep.RACE_DETAILS
LAST_STEP = FormStep.PERSONAL_DETAILS

FIELD_LABELS = {
    "gender": "Gender",
    "mobile": "Mobile Number",
    "email": "Email",
    "first_name": "First Name",
    "last_name": "Last Name",
    "date_of_birth": "Date of Birth",
    "identity_card_number": "Identity Card Number",
    "country": "Country",
    "postal_code": "Postal Code",
    "state": "State",
    "city": "City",
    "occupation": "Occupation",
    "race_category": "Race Category",
    "t_shirt_size": "T-Shirt Size",
    "blood_group": "Blood Group",
}

STEP_REQUIRED_FIELDS = {
    FormStep.RACE_DETAILS: ("gender", "mobile", "email"),
    FormStep.PERSONAL_DETAILS: (
        "first_name",
        "last_name",
        "date_of_birth",
        "country",
        "state",
        "city",
        "occupation",
        "race_category",
        "t_shirt_size",
    ),
}

INVALID_MOBILE_MESSAGE = "Please enter a valid Malaysian mobile number (e.g., 0123456789)"
INVALID_EMAIL_MESSAGE = "Please enter a valid email address"
INVALID_IDENTITY_MESSAGE = "Please enter a valid 12-digit IC number"
INVALID_NAME_MESSAGE = "{label} may only contain letters, spaces, apostrophes, hyphens and periods"
INVALID_POSTAL_CODE_MESSAGE = "Please enter a valid postal code ({hint})"
INVALID_CHOICE_MESSAGE = "Please select a valid {label}"


def clamp_step(step: int) -> FormStep:
    """Snap any step number into [RACE_DETAILS, PERSONAL_DETAILS]."""
    return FormStep(min(max(int(step), FIRST_STEP), LAST_STEP))


@dataclass(frozen=True)
class StepValidation:
    """Aggregate validation result for one step."""

    step: FormStep
    errors: dict[str, str | None]
    missing: tuple[str, ...] = ()
    invalid: tuple[str, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.missing and not self.invalid

    def __bool__(self) -> bool:
        return self.is_valid

    @property
    def message(self) -> str | None:
        """Summary shown to the user, or None when the step is valid."""
        if self.missing:
            if self.step == FormStep.RACE_DETAILS:
                return "Please fill in all required fields"
            return "Please fill in: " + ", ".join(FIELD_LABELS[name] for name in self.missing)
        if self.invalid:
            return self.errors[self.invalid[0]]
        return None


class RegistrationWizard:
    """
    Owns one runner's RegistrationForm, current step and OTP gate.

    Passed by reference to the components that need it; reset() returns it
    to the empty default.
    """

    def __init__(self, otp_service: OtpService, form: RegistrationForm | None = None) -> None:
        self.form = form or RegistrationForm()
        self.otp_service = otp_service
        self.reveal_errors = False
        self._step = FIRST_STEP
        self._verified_email: str | None = None

    @property
    def step(self) -> FormStep:
        return self._step

    def go_to(self, step: int) -> FormStep:
        """Render a step, snapping out-of-range numbers to the nearest bound."""
        self._step = clamp_step(step)
        return self._step

    # --- field access ------------------------------------------------------

    def set_field(self, name: str, value: Any) -> None:
        if name not in RegistrationForm.field_names():
            raise UnknownField(name)
        if name == "identity_card_number":
            value = normalize_identity_number(value)
        setattr(self.form, name, value)

    def get_field(self, name: str) -> Any:
        if name not in RegistrationForm.field_names():
            raise UnknownField(name)
        return getattr(self.form, name)

    # --- validation --------------------------------------------------------

    def validate_step(self, step: int | None = None) -> StepValidation:
        """Validate one step without touching wizard state."""
        step = clamp_step(self._step if step is None else step)
        form = self.form
        errors: dict[str, str | None] = {}
        missing = []
        invalid = []

        for name in STEP_REQUIRED_FIELDS[step]:
            if getattr(form, name):
                errors[name] = None
            else:
                errors[name] = f"{FIELD_LABELS[name]} is required"
                missing.append(name)

        if step == FormStep.RACE_DETAILS:
            if form.mobile and not is_valid_mobile(form.mobile):
                errors["mobile"] = INVALID_MOBILE_MESSAGE
                invalid.append("mobile")
        elif is_valid_email(form.email):
            errors["email"] = None
        else:
            errors["email"] = INVALID_EMAIL_MESSAGE
            invalid.append("email")

        return StepValidation(step=step, errors=errors, missing=tuple(missing), invalid=tuple(invalid))

    def validate_all(self) -> list[StepValidation]:
        return [self.validate_step(step) for step in FormStep]

    def validate_entries(self, postal_code_whitelist: frozenset[str] = frozenset()) -> StepValidation:
        """
        Check the format of every filled-in value on the whole form.

        Complements validate_step(), which only checks presence plus the
        mobile and email formats. Blank optional fields (postal code, blood
        group) are skipped; a blank identity number is invalid.
        """
        form = self.form
        errors: dict[str, str | None] = {}

        if not is_valid_identity_number(form.identity_card_number):
            errors["identity_card_number"] = INVALID_IDENTITY_MESSAGE
        for name in ("first_name", "last_name"):
            if getattr(form, name) and not is_valid_name(getattr(form, name)):
                errors[name] = INVALID_NAME_MESSAGE.format(label=FIELD_LABELS[name])
        if form.gender and not is_valid_gender(form.gender):
            errors["gender"] = INVALID_CHOICE_MESSAGE.format(label=FIELD_LABELS["gender"])
        if form.postal_code and not is_valid_postal_code(form.postal_code, form.country, postal_code_whitelist):
            errors["postal_code"] = INVALID_POSTAL_CODE_MESSAGE.format(hint=postal_code_format(form.country))
        if form.race_category and not is_valid_race_category(form.race_category, form.gender):
            errors["race_category"] = INVALID_CHOICE_MESSAGE.format(label=FIELD_LABELS["race_category"])
        if form.t_shirt_size and not is_valid_t_shirt_size(form.t_shirt_size):
            errors["t_shirt_size"] = INVALID_CHOICE_MESSAGE.format(label=FIELD_LABELS["t_shirt_size"])
        if form.blood_group and form.blood_group not in BLOOD_GROUPS:
            errors["blood_group"] = INVALID_CHOICE_MESSAGE.format(label=FIELD_LABELS["blood_group"])

        return StepValidation(step=LAST_STEP, errors=errors, invalid=tuple(errors))

    # --- transitions -------------------------------------------------------

    def advance(self) -> StepValidation:
        """Reveal all field errors, then move forward if the step is valid."""
        self.reveal_errors = True
        result = self.validate_step()
        if result.is_valid:
            self._step = clamp_step(self._step + 1)
        return result

    def retreat(self) -> FormStep:
        self._step = clamp_step(self._step - 1)
        return self._step

    @property
    def otp_verified(self) -> bool:
        """True when the current email has passed OTP verification."""
        return self._verified_email is not None and self._verified_email == self.form.email

    @property
    def can_advance(self) -> bool:
        """Whether the advance action is enabled for the user."""
        return self._step != FormStep.RACE_DETAILS or self.otp_verified

    def advance_gated(self) -> StepValidation:
        """
        The user-facing advance action.

        Raises:
            OtpVerificationRequired: On race details before the email is verified
        """
        if not self.can_advance:
            raise OtpVerificationRequired()
        return self.advance()

    # --- OTP ---------------------------------------------------------------

    def request_otp(self) -> OtpSession:
        return self.otp_service.request_otp(self.form.mobile, self.form.email)

    def verify_otp(self, code: str) -> OtpSession:
        session = self.otp_service.active_session
        if session is None:
            if not is_valid_otp(code):
                raise InvalidOtpFormat()
            raise OtpMismatch()
        session = self.otp_service.verify_otp(session, code)
        self._verified_email = session.email
        return session

    def reset(self) -> None:
        """Clear the form and return to race details."""
        self.form = RegistrationForm()
        self._step = FIRST_STEP
        self.reveal_errors = False
        self._verified_email = None
        self.otp_service.reset()
