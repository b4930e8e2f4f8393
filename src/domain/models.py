"""
Registration data model - form record, stored record and reference data.

RegistrationForm is the single mutable record a runner fills in across the
two form steps. RegistrationRecord is the immutable row the backing store
hands back after a successful insert.
"""

from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from enum import Enum


class Gender(str, Enum):
    """Runner gender; drives which race categories are offered."""

    MALE = "MALE"
    FEMALE = "FEMALE"


class TShirtSize(str, Enum):
    """Event T-shirt sizes."""

    S = "S"
    M = "M"
    L = "L"
    XL = "XL"
    XXL = "XXL"


COMMON_RACE_CATEGORIES = ("5km", "10km", "21km", "30km", "42km")
EXTENDED_RACE_CATEGORIES = COMMON_RACE_CATEGORIES + ("50km", "75km", "100km")

RACE_CATEGORIES: dict[Gender, tuple[str, ...]] = {
    Gender.MALE: EXTENDED_RACE_CATEGORIES,
    Gender.FEMALE: EXTENDED_RACE_CATEGORIES,
}

BLOOD_GROUPS = ("A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-")


@dataclass
class RegistrationForm:
    """
    Mutable registration record for one form session.

    Values are stored exactly as written; validation is pulled by the
    wizard, never pushed at write time.
    """

    # Step 1 - race details / contact
    gender: str = ""
    mobile: str = ""
    email: str = ""
    is_from_bastar: bool = False

    # Step 2 - personal details
    first_name: str = ""
    last_name: str = ""
    date_of_birth: str = ""
    identity_card_number: str = ""
    country: str = ""
    postal_code: str = ""
    state: str = ""
    city: str = ""
    occupation: str = ""
    race_category: str = ""
    t_shirt_size: str = ""

    # Optional
    emergency_contact_name: str = ""
    emergency_contact_number: str = ""
    blood_group: str = ""
    needs_accommodation: bool = False

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        """Names of every settable field, in declaration order."""
        return tuple(f.name for f in fields(cls))

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class RegistrationRecord:
    """Durable registration as written to the backing store."""

    id: str
    created_at: datetime
    data: dict = field(default_factory=dict)

    @classmethod
    def from_form(cls, form: RegistrationForm, id: str, created_at: datetime) -> "RegistrationRecord":
        return cls(id=id, created_at=created_at, data=form.to_dict())

    @property
    def email(self) -> str:
        return self.data.get("email", "")

    @property
    def identity_card_number(self) -> str:
        return self.data.get("identity_card_number", "")
