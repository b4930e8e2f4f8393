"""
API routes - identity check, email dispatch, registration and postal lookup.

This module defines the HTTP endpoints:
- POST /check-identity - Is this identity card number already registered?
- POST /send-email - Deliver an OTP or confirmation email
- POST /registrations - Submit a completed registration form
- GET /postal-codes/{country}/{code} - Address auto-fill
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from src.api.dependencies import (
    get_notifier,
    get_postal_lookup,
    get_store,
    get_submission_controller,
)
from src.api.models import (
    CheckIdentityRequest,
    CheckIdentityResponse,
    ErrorMessage,
    ErrorResponse,
    PostalAddressResponse,
    RegistrationRequest,
    RegistrationResponse,
    SendEmailRequest,
    SendEmailResponse,
)
from src.config.settings import get_settings
from src.domain.emails import render_email
from src.domain.exceptions import (
    ConstraintViolation,
    DuplicateEmail,
    DuplicateIdentity,
    InvalidData,
    MissingRequired,
    NotifierFailure,
    PostalCodeNotFound,
    RegistrationError,
    StoreUnavailable,
    UnsupportedCountry,
    UpstreamLookupFailure,
    ValidationFailed,
)
from src.domain.otp import OtpService
from src.domain.ports import EmailNotifier, PostalLookup, RegistrationStore, StoreError
from src.domain.submission import SUCCESS_MESSAGE, SubmissionController
from src.domain.validators import normalize_identity_number
from src.domain.wizard import FormStep, RegistrationWizard

logger = logging.getLogger(__name__)

router = APIRouter(tags=["registration"])

_SUBMISSION_STATUS: dict[type[RegistrationError], int] = {
    ValidationFailed: status.HTTP_422_UNPROCESSABLE_ENTITY,
    DuplicateIdentity: status.HTTP_409_CONFLICT,
    DuplicateEmail: status.HTTP_409_CONFLICT,
    StoreUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
    InvalidData: status.HTTP_400_BAD_REQUEST,
    MissingRequired: status.HTTP_400_BAD_REQUEST,
    ConstraintViolation: status.HTTP_400_BAD_REQUEST,
}


def _error_response(error: RegistrationError, status_code: int) -> JSONResponse:
    detail = error.user_message
    errors = None
    if isinstance(error, ValidationFailed) and error.result is not None:
        detail = error.detail or detail
        errors = {name: message for name, message in error.result.errors.items() if message}
    body = ErrorResponse(detail=detail, kind=error.kind, errors=errors)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def _wizard_from_request(request_data: RegistrationRequest, notifier: EmailNotifier) -> RegistrationWizard:
    settings = get_settings()
    wizard = RegistrationWizard(
        OtpService(
            notifier,
            cooldown_seconds=settings.otp_cooldown_seconds,
            ttl_seconds=settings.otp_ttl_seconds,
            enforce_expiry=settings.otp_enforce_expiry,
            event_name=settings.event_name,
        )
    )
    for name, value in request_data.form_values().items():
        wizard.set_field(name, value)
    wizard.go_to(FormStep.PERSONAL_DETAILS)
    return wizard


@router.post(
    "/check-identity",
    response_model=CheckIdentityResponse,
    responses={
        400: {"model": ErrorMessage, "description": "Identity number missing"},
        500: {"model": ErrorMessage, "description": "Store lookup failed"},
    },
    summary="Check whether an identity number is registered",
)
def check_identity(
    request_data: CheckIdentityRequest,
    store: RegistrationStore = Depends(get_store),
):
    """
    Advisory duplicate check used while the runner types their IC number.

    - **id**: identity card number (non-digits are ignored)
    """
    identity_card_number = normalize_identity_number(request_data.id)
    if not identity_card_number:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "IC number is required"},
        )

    try:
        record = store.find_by_identity_number(identity_card_number)
    except StoreError as e:
        logger.error("Error checking IC number: %s", e)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Error checking IC number"},
        )

    return CheckIdentityResponse(exists=record is not None)


@router.post(
    "/send-email",
    response_model=SendEmailResponse,
    responses={
        500: {"model": ErrorMessage, "description": "Email could not be sent"},
        422: {"description": "Validation error"},
    },
    summary="Send an OTP or confirmation email",
    description="Sends the OTP template when raceDetailsOrOtp carries an otp, "
    "otherwise the registration confirmation template.",
)
def send_email(
    request_data: SendEmailRequest,
    notifier: EmailNotifier = Depends(get_notifier),
):
    recipient = request_data.recipient_info
    details = request_data.race_details
    settings = get_settings()
    message = render_email(
        to=recipient.email,
        first_name=recipient.first_name,
        last_name=recipient.last_name,
        mobile=recipient.mobile,
        otp=details.otp,
        race_category=details.race_category,
        t_shirt_size=details.t_shirt_size,
        event_name=settings.event_name,
        support_email=settings.support_email,
    )

    try:
        notifier.send(message.to, message.subject, message.html_body)
    except NotifierFailure as e:
        logger.error("SMTP send error: %s", e)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to send email"},
        )

    return SendEmailResponse(ok=True)


@router.post(
    "/registrations",
    response_model=RegistrationResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Store rejected the data"},
        409: {"model": ErrorResponse, "description": "Identity number or email already registered"},
        422: {"model": ErrorResponse, "description": "Form validation failed"},
        503: {"model": ErrorResponse, "description": "Store unavailable"},
    },
    summary="Submit a registration",
)
def create_registration(
    request_data: RegistrationRequest,
    controller: SubmissionController = Depends(get_submission_controller),
):
    """Validate, check uniqueness, persist and confirm a registration."""
    wizard = _wizard_from_request(request_data, controller.notifier)
    try:
        record_id = controller.submit(wizard)
    except RegistrationError as e:
        status_code = _SUBMISSION_STATUS.get(type(e), status.HTTP_500_INTERNAL_SERVER_ERROR)
        return _error_response(e, status_code)

    return RegistrationResponse(id=record_id, message=SUCCESS_MESSAGE)


@router.get(
    "/postal-codes/{country}/{code}",
    response_model=PostalAddressResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Auto-fill not supported for country"},
        404: {"model": ErrorResponse, "description": "Postal code not found"},
        502: {"model": ErrorResponse, "description": "Upstream lookup failed"},
    },
    summary="Resolve a postal code to state and district",
)
async def lookup_postal_code(
    country: str,
    code: str,
    lookup: PostalLookup = Depends(get_postal_lookup),
):
    try:
        address = await lookup.lookup(code, country)
    except UnsupportedCountry as e:
        return _error_response(e, status.HTTP_400_BAD_REQUEST)
    except PostalCodeNotFound as e:
        return _error_response(e, status.HTTP_404_NOT_FOUND)
    except UpstreamLookupFailure as e:
        return _error_response(e, status.HTTP_502_BAD_GATEWAY)

    return PostalAddressResponse(state=address.state, district=address.district, country=address.country)
