"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- A controllable clock for OTP cooldown/expiry tests
- Mocked email notifier and in-memory store
- Wizards pre-filled with a valid registration
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest

from src.adapters.repository.memory import InMemoryRegistrationStore
from src.domain.otp import OtpService
from src.domain.wizard import RegistrationWizard

VALID_FORM = {
    "gender": "MALE",
    "mobile": "0123456789",
    "email": "runner@example.com",
    "first_name": "Aiman",
    "last_name": "Rahman",
    "date_of_birth": "1990-05-17",
    "identity_card_number": "900517101234",
    "country": "Malaysia",
    "postal_code": "24000",
    "state": "Terengganu",
    "city": "Kemaman",
    "occupation": "Engineer",
    "race_category": "21km",
    "t_shirt_size": "L",
}


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 3, 1, 8, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def valid_form() -> dict:
    """Field values for a complete, valid registration."""
    return dict(VALID_FORM)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def notifier() -> Mock:
    """Email notifier that records every send."""
    return Mock()


@pytest.fixture
def store() -> InMemoryRegistrationStore:
    return InMemoryRegistrationStore()


@pytest.fixture
def otp_service(notifier: Mock, clock: FakeClock) -> OtpService:
    return OtpService(notifier, clock=clock)


@pytest.fixture
def wizard(otp_service: OtpService) -> RegistrationWizard:
    return RegistrationWizard(otp_service)


@pytest.fixture
def filled_wizard(wizard: RegistrationWizard) -> RegistrationWizard:
    """Wizard holding a complete, valid registration."""
    for name, value in VALID_FORM.items():
        wizard.set_field(name, value)
    return wizard
