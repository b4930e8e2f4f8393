"""
OTP service - one-time passcode issuance and verification.

A 4-digit code is generated per request, emailed through the notifier and
held as the active session's expected code. Requests are throttled by a
resend cooldown; a resend replaces the expected code of the same session
without otherwise disturbing an in-flight verification.

Cooldown
========

The cooldown is derived from an injected clock rather than a ticking timer:
``cooldown_remaining()`` reports whole seconds left, counting down once per
second and flooring at 0. New requests are refused until it reaches 0.

Expiry
======

The OTP email advertises a 10-minute validity window. Whether verification
enforces it is controlled by ``enforce_expiry``.
"""

import logging
import math
import secrets
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from .emails import render_otp_email
from .exceptions import (
    InvalidOtpFormat,
    MissingContact,
    NotifierFailure,
    OtpAlreadyVerified,
    OtpExpired,
    OtpMismatch,
    RateLimited,
)
from .ports import EmailNotifier
from .validators import is_valid_otp

logger = logging.getLogger(__name__)

DEFAULT_COOLDOWN_SECONDS = 30
DEFAULT_TTL_SECONDS = 600


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_otp_code() -> str:
    """Uniform 4-digit code in 1000-9999 (no leading zero)."""
    return str(1000 + secrets.randbelow(9000))


@dataclass
class OtpSession:
    """Ephemeral OTP state for the active form session."""

    email: str
    mobile: str
    code: str
    issued_at: datetime
    expires_at: datetime
    cooldown_until: datetime | None = None
    verified: bool = False


class OtpService:
    """
    Issues and verifies OTPs bound to the current contact email.

    One instance belongs to one form session.
    """

    def __init__(
        self,
        notifier: EmailNotifier,
        cooldown_seconds: int = DEFAULT_COOLDOWN_SECONDS,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        enforce_expiry: bool = True,
        clock: Callable[[], datetime] = utcnow,
        code_factory: Callable[[], str] = generate_otp_code,
        event_name: str = "ApizRace 2025",
    ) -> None:
        self._notifier = notifier
        self._cooldown = timedelta(seconds=cooldown_seconds)
        self._ttl = timedelta(seconds=ttl_seconds)
        self._enforce_expiry = enforce_expiry
        self._clock = clock
        self._code_factory = code_factory
        self._event_name = event_name
        self._cooldown_until: datetime | None = None
        self.active_session: OtpSession | None = None

    def cooldown_remaining(self) -> int:
        """Whole seconds left before another OTP may be requested."""
        if self._cooldown_until is None:
            return 0
        left = (self._cooldown_until - self._clock()).total_seconds()
        if left <= 0:
            self._cooldown_until = None
            return 0
        return math.ceil(left)

    def request_otp(self, mobile: str | None, email: str | None) -> OtpSession:
        """
        Generate a code, email it and start the resend cooldown.

        Args:
            mobile: Runner's mobile number (shown in the OTP email)
            email: Address the code is sent to

        Returns:
            The active OtpSession holding the new expected code

        Raises:
            RateLimited: If the cooldown from a prior request is still running
            MissingContact: If mobile or email is blank
            NotifierFailure: If the email could not be sent; the new code
                stays in place and no cooldown starts
        """
        remaining = self.cooldown_remaining()
        if remaining > 0:
            raise RateLimited(remaining)

        if not mobile or not mobile.strip() or not email or not email.strip():
            raise MissingContact()

        now = self._clock()
        code = self._code_factory()

        session = self.active_session
        if session is None or session.verified or session.email != email:
            session = OtpSession(
                email=email,
                mobile=mobile,
                code=code,
                issued_at=now,
                expires_at=now + self._ttl,
            )
            self.active_session = session
        else:
            # Resend: only the expected code and its window change
            session.mobile = mobile
            session.code = code
            session.issued_at = now
            session.expires_at = now + self._ttl

        message = render_otp_email(
            email,
            code,
            mobile=mobile,
            event_name=self._event_name,
            ttl_minutes=int(self._ttl.total_seconds() // 60),
        )
        try:
            self._notifier.send(message.to, message.subject, message.html_body)
        except NotifierFailure:
            logger.warning("OTP email dispatch failed for %s", email)
            raise

        self._cooldown_until = now + self._cooldown
        session.cooldown_until = self._cooldown_until
        logger.info("OTP sent to %s", email)
        return session

    def verify_otp(self, session: OtpSession, submitted_code: str | None) -> OtpSession:
        """
        Check a submitted code against the session's expected code.

        Returns:
            The session, now marked verified

        Raises:
            InvalidOtpFormat: Code is not exactly 4 digits
            OtpMismatch: Code differs from the expected code
            OtpAlreadyVerified: Session already succeeded once
            OtpExpired: Window elapsed and expiry is enforced
        """
        if not is_valid_otp(submitted_code):
            raise InvalidOtpFormat()

        if not secrets.compare_digest(session.code.encode(), submitted_code.encode()):
            raise OtpMismatch()

        if session.verified:
            raise OtpAlreadyVerified()

        if self._enforce_expiry and self._clock() > session.expires_at:
            raise OtpExpired()

        session.verified = True
        if self.active_session is session:
            self.active_session = None
        logger.info("OTP verified for %s", session.email)
        return session

    def reset(self) -> None:
        """Drop the active session and any running cooldown."""
        self.active_session = None
        self._cooldown_until = None
