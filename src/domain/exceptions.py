"""
Domain exceptions - Semantic error types for marathon registration.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.

Every exception carries a stable ``kind`` string (used by the HTTP layer
and by logs) and a ``user_message`` suitable for showing to the runner.
None of them is fatal: each one hands control back to the user with a
corrective message.
"""


class RegistrationError(Exception):
    """Base class for registration domain errors."""

    kind = "registration_error"
    user_message = (
        "We encountered an issue processing your registration. Please try again "
        "in a few moments. If the problem persists, please contact our support team."
    )

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.user_message)
        self.detail = detail


# --- Form validation -------------------------------------------------------


class ValidationFailed(RegistrationError):
    """One or more form fields are missing or malformed."""

    kind = "validation_failed"
    user_message = "Please fill in all required fields before submitting."

    def __init__(self, result=None, detail: str | None = None) -> None:
        # result is a StepValidation (or a list of them for full-form checks)
        self.result = result
        super().__init__(detail or getattr(result, "message", None))


class UnknownField(RegistrationError, KeyError):
    """Field name does not exist on the registration form."""

    kind = "unknown_field"
    user_message = "Unknown registration field."


# --- OTP -------------------------------------------------------------------


class RateLimited(RegistrationError):
    """An OTP was requested while the resend cooldown is still running."""

    kind = "rate_limited"

    def __init__(self, remaining_seconds: int) -> None:
        self.remaining_seconds = remaining_seconds
        self.user_message = (
            f"Please wait {remaining_seconds} seconds before requesting a new OTP"
        )
        super().__init__(self.user_message)


class MissingContact(RegistrationError):
    """Mobile number or email is absent when requesting an OTP."""

    kind = "missing_contact"
    user_message = "Please enter both mobile number and email"


class InvalidOtpFormat(RegistrationError):
    """Submitted OTP is not exactly four digits."""

    kind = "invalid_format"
    user_message = "Please enter a valid 4-digit OTP"


class OtpMismatch(RegistrationError):
    """Submitted OTP does not match the issued code."""

    kind = "mismatch"
    user_message = "Invalid OTP. Please try again."


class OtpExpired(RegistrationError):
    """Submitted OTP arrived after the advertised validity window."""

    kind = "expired"
    user_message = "This OTP has expired. Please request a new one."


class OtpAlreadyVerified(RegistrationError):
    """The OTP session was already verified; codes are single-use."""

    kind = "already_verified"
    user_message = "This OTP has already been used."


class OtpVerificationRequired(RegistrationError):
    """Race details cannot be left before the email is OTP-verified."""

    kind = "otp_required"
    user_message = "Verify OTP to Continue"


# --- Backing store ---------------------------------------------------------


class DuplicateIdentity(RegistrationError):
    """Identity card number is already registered."""

    kind = "duplicate_identity"
    user_message = (
        "The IC number you entered is already registered in our system. "
        "Please use a different IC number or contact support if you need assistance."
    )


class DuplicateEmail(RegistrationError):
    """Email address is already registered."""

    kind = "duplicate_email"
    user_message = (
        "This email is already registered. Please use a different email address "
        "or contact support if you need assistance."
    )


class StoreUnavailable(RegistrationError):
    """Backing store could not be reached or failed unexpectedly."""

    kind = "store_unavailable"
    user_message = (
        "We couldn't complete your registration. Please try again in a few moments."
    )


class ConstraintViolation(RegistrationError):
    """Store rejected the record on a check or foreign-key constraint."""

    kind = "constraint_violation"
    user_message = (
        "One or more fields contain invalid data. Please check your entries and try again."
    )


class InvalidData(RegistrationError):
    """Store rejected a value it could not parse."""

    kind = "invalid_data"
    user_message = (
        "Please check your information and try again. "
        "Some fields contain invalid characters."
    )


class MissingRequired(RegistrationError):
    """Store rejected the record because a required column was empty."""

    kind = "missing_required"
    user_message = "Please fill in all required fields before submitting."


# --- Collaborators ---------------------------------------------------------


class NotifierFailure(RegistrationError):
    """Email notifier could not deliver a message."""

    kind = "notifier_failure"
    user_message = "Failed to send email"


class UpstreamLookupFailure(RegistrationError):
    """Postal-code lookup failed; the user falls back to manual entry."""

    kind = "upstream_lookup_failure"
    user_message = "Failed to fetch address details. Please check your pincode."


class PostalCodeNotFound(UpstreamLookupFailure):
    """Upstream answered but knows nothing about this postal code."""

    kind = "postal_code_not_found"
    user_message = "Invalid postal code or no data found"


class UnsupportedCountry(UpstreamLookupFailure):
    """Address auto-fill is not available for this country."""

    kind = "unsupported_country"

    def __init__(self, country: str) -> None:
        self.country = country
        self.user_message = f"Auto-fill not supported for {country}"
        super().__init__(self.user_message)
