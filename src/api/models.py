"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
JSON bodies use camelCase keys; snake_case names are accepted as well.
"""

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from src.domain.models import RegistrationForm


class CamelModel(BaseModel):
    """Base model exposing camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CheckIdentityRequest(BaseModel):
    """Request model for the identity number duplicate check."""

    id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("id", "icNumber"),
        description="12-digit identity card number",
    )


class CheckIdentityResponse(BaseModel):
    """Whether the identity number is already registered."""

    exists: bool


class RecipientInfo(CamelModel):
    """Who the email goes to."""

    email: EmailStr
    first_name: str | None = None
    last_name: str | None = None
    mobile: str | None = None


class RaceDetailsOrOtp(CamelModel):
    """Either an OTP to deliver, or the race details to confirm."""

    otp: str | None = Field(default=None, pattern=r"^\d{4}$")
    race_category: str | None = None
    t_shirt_size: str | None = None


class SendEmailRequest(CamelModel):
    """Request model for sending an OTP or confirmation email."""

    recipient_info: RecipientInfo
    race_details: RaceDetailsOrOtp = Field(alias="raceDetailsOrOtp")


class SendEmailResponse(BaseModel):
    ok: bool = True


class ErrorMessage(BaseModel):
    """Error body for the check-identity and send-email endpoints."""

    error: str


class RegistrationRequest(CamelModel):
    """Full registration form as submitted from the second step."""

    gender: str = ""
    mobile: str = ""
    email: str = ""
    is_from_bastar: bool = False
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
    emergency_contact_name: str = ""
    emergency_contact_number: str = ""
    blood_group: str = ""
    needs_accommodation: bool = False

    def form_values(self) -> dict:
        """Field values keyed by RegistrationForm attribute name."""
        return {name: getattr(self, name) for name in RegistrationForm.field_names()}


class RegistrationResponse(BaseModel):
    """Response model for a successful registration."""

    id: str
    message: str


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
    kind: str
    errors: dict[str, str] | None = None


class PostalAddressResponse(BaseModel):
    """Address details resolved from a postal code."""

    state: str
    district: str
    country: str
