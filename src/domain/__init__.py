"""
Domain layer - Pure business logic with zero framework imports.

This package contains the core logic of the marathon registration flow:
field validators, the two-step form wizard, the OTP service and the
submission controller. It defines its own port interfaces for
infrastructure abstraction, ensuring true hexagonal architecture decoupling.
"""

from .exceptions import (
    ConstraintViolation,
    DuplicateEmail,
    DuplicateIdentity,
    InvalidData,
    InvalidOtpFormat,
    MissingContact,
    MissingRequired,
    NotifierFailure,
    OtpAlreadyVerified,
    OtpExpired,
    OtpMismatch,
    OtpVerificationRequired,
    PostalCodeNotFound,
    RateLimited,
    RegistrationError,
    StoreUnavailable,
    UnknownField,
    UnsupportedCountry,
    UpstreamLookupFailure,
    ValidationFailed,
)
from .identity_check import IdentityCheckGuard, IdentityCheckResult
from .models import Gender, RegistrationForm, RegistrationRecord, TShirtSize
from .otp import OtpService, OtpSession
from .ports import (
    ConstraintKind,
    EmailNotifier,
    PostalAddress,
    PostalLookup,
    RegistrationStore,
    StoreConstraintError,
    StoreError,
)
from .submission import SubmissionController
from .wizard import FormStep, RegistrationWizard, StepValidation

__all__ = [
    "ConstraintKind",
    "ConstraintViolation",
    "DuplicateEmail",
    "DuplicateIdentity",
    "EmailNotifier",
    "FormStep",
    "Gender",
    "IdentityCheckGuard",
    "IdentityCheckResult",
    "InvalidData",
    "InvalidOtpFormat",
    "MissingContact",
    "MissingRequired",
    "NotifierFailure",
    "OtpAlreadyVerified",
    "OtpExpired",
    "OtpMismatch",
    "OtpService",
    "OtpSession",
    "OtpVerificationRequired",
    "PostalAddress",
    "PostalCodeNotFound",
    "PostalLookup",
    "RateLimited",
    "RegistrationError",
    "RegistrationForm",
    "RegistrationRecord",
    "RegistrationStore",
    "RegistrationWizard",
    "StepValidation",
    "StoreConstraintError",
    "StoreError",
    "StoreUnavailable",
    "SubmissionController",
    "TShirtSize",
    "UnknownField",
    "UnsupportedCountry",
    "UpstreamLookupFailure",
    "ValidationFailed",
]
