"""
Unit tests for API routes.

Tests endpoint responses with overridden dependencies.
"""

from unittest.mock import AsyncMock, MagicMock, Mock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.adapters.repository.memory import InMemoryRegistrationStore
from src.adapters.smtp.sender import SmtpEmailNotifier
from src.api.dependencies import get_notifier, get_postal_lookup, get_store, get_submission_controller
from src.config.settings import get_settings
from src.api.routes import router
from src.domain.exceptions import (
    NotifierFailure,
    PostalCodeNotFound,
    UnsupportedCountry,
    UpstreamLookupFailure,
)
from src.domain.models import RegistrationForm
from src.domain.ports import ConstraintKind, PostalAddress, StoreConstraintError, StoreError


def camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


@pytest.fixture
def app(store: InMemoryRegistrationStore, notifier: Mock) -> FastAPI:
    """Create test FastAPI application with the registration router."""
    test_app = FastAPI()
    test_app.include_router(router)
    test_app.state.store = store
    test_app.dependency_overrides[get_notifier] = lambda: notifier
    return test_app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create test client for the application."""
    return TestClient(app)


@pytest.fixture
def registration_payload(valid_form: dict) -> dict:
    return {camel(name): value for name, value in valid_form.items()}


class TestCheckIdentityEndpoint:
    """Tests for POST /check-identity."""

    def test_unknown_identity(self, client: TestClient) -> None:
        response = client.post("/check-identity", json={"id": "900517101234"})
        assert response.status_code == 200
        assert response.json() == {"exists": False}

    def test_known_identity(
        self, client: TestClient, store: InMemoryRegistrationStore, valid_form: dict
    ) -> None:
        store.insert(RegistrationForm(**valid_form))

        response = client.post("/check-identity", json={"id": "900517-10-1234"})

        assert response.json() == {"exists": True}

    def test_accepts_ic_number_key(self, client: TestClient) -> None:
        response = client.post("/check-identity", json={"icNumber": "900517101234"})
        assert response.status_code == 200

    def test_missing_id_returns_400(self, client: TestClient) -> None:
        response = client.post("/check-identity", json={})
        assert response.status_code == 400
        assert response.json() == {"error": "IC number is required"}

    def test_store_error_returns_500(self, app: FastAPI) -> None:
        failing = Mock()
        failing.find_by_identity_number.side_effect = StoreError("down")
        app.dependency_overrides[get_store] = lambda: failing

        response = TestClient(app).post("/check-identity", json={"id": "900517101234"})

        assert response.status_code == 500
        assert response.json() == {"error": "Error checking IC number"}


class TestSendEmailEndpoint:
    """Tests for POST /send-email."""

    def test_otp_email(self, client: TestClient, notifier: Mock) -> None:
        response = client.post(
            "/send-email",
            json={
                "recipientInfo": {"email": "runner@example.com", "mobile": "0123456789"},
                "raceDetailsOrOtp": {"otp": "4821"},
            },
        )

        assert response.status_code == 200
        assert response.json() == {"ok": True}
        to, subject, html_body = notifier.send.call_args[0]
        assert to == "runner@example.com"
        assert "OTP Verification" in html_body
        assert "4821" in html_body

    def test_confirmation_email(self, client: TestClient, notifier: Mock) -> None:
        response = client.post(
            "/send-email",
            json={
                "recipientInfo": {"email": "runner@example.com", "firstName": "Aiman", "lastName": "Rahman"},
                "raceDetailsOrOtp": {"raceCategory": "42km", "tShirtSize": "M"},
            },
        )

        assert response.status_code == 200
        html_body = notifier.send.call_args[0][2]
        assert "Registration Confirmation" in html_body
        assert "42km" in html_body

    def test_notifier_failure_returns_500(self, client: TestClient, notifier: Mock) -> None:
        notifier.send.side_effect = NotifierFailure("relay down")

        response = client.post(
            "/send-email",
            json={"recipientInfo": {"email": "runner@example.com"}, "raceDetailsOrOtp": {"otp": "4821"}},
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to send email"}

    def test_validates_email(self, client: TestClient) -> None:
        response = client.post(
            "/send-email",
            json={"recipientInfo": {"email": "invalid"}, "raceDetailsOrOtp": {"otp": "4821"}},
        )
        assert response.status_code == 422

    def test_validates_otp_shape(self, client: TestClient) -> None:
        response = client.post(
            "/send-email",
            json={"recipientInfo": {"email": "runner@example.com"}, "raceDetailsOrOtp": {"otp": "48"}},
        )
        assert response.status_code == 422


class TestRegistrationEndpoint:
    """Tests for POST /registrations."""

    def test_success_returns_201(
        self, client: TestClient, store: InMemoryRegistrationStore, registration_payload: dict, notifier: Mock
    ) -> None:
        response = client.post("/registrations", json=registration_payload)

        assert response.status_code == 201
        body = response.json()
        assert body["id"]
        assert "Thank you for registering" in body["message"]
        assert len(store) == 1
        notifier.send.assert_called_once()

    def test_duplicate_identity_returns_409(
        self, client: TestClient, registration_payload: dict
    ) -> None:
        client.post("/registrations", json=registration_payload)

        response = client.post(
            "/registrations", json={**registration_payload, "email": "second@example.com"}
        )

        assert response.status_code == 409
        assert response.json()["kind"] == "duplicate_identity"

    def test_duplicate_email_returns_409(self, client: TestClient, registration_payload: dict) -> None:
        client.post("/registrations", json=registration_payload)

        response = client.post(
            "/registrations", json={**registration_payload, "identityCardNumber": "111111111111"}
        )

        assert response.status_code == 409
        assert response.json()["kind"] == "duplicate_email"

    def test_validation_failure_returns_422_with_field_errors(
        self, client: TestClient, registration_payload: dict
    ) -> None:
        response = client.post("/registrations", json={**registration_payload, "mobile": "01234567"})

        assert response.status_code == 422
        body = response.json()
        assert body["kind"] == "validation_failed"
        assert "mobile" in body["errors"]
        assert "gender" not in body["errors"]

    def test_malformed_identity_returns_422(
        self, client: TestClient, store: InMemoryRegistrationStore, registration_payload: dict
    ) -> None:
        response = client.post("/registrations", json={**registration_payload, "identityCardNumber": "123"})

        assert response.status_code == 422
        body = response.json()
        assert body["errors"] == {"identity_card_number": "Please enter a valid 12-digit IC number"}
        assert len(store) == 0

    def test_store_unavailable_returns_503(
        self, client: TestClient, store: InMemoryRegistrationStore, registration_payload: dict
    ) -> None:
        store.available = False
        response = client.post("/registrations", json=registration_payload)
        assert response.status_code == 503
        assert response.json()["kind"] == "store_unavailable"

    def test_invalid_data_returns_400(self, app: FastAPI, registration_payload: dict) -> None:
        failing = MagicMock()
        failing.probe.return_value = True
        failing.find_by_identity_number.return_value = None
        failing.insert.side_effect = StoreConstraintError(ConstraintKind.INVALID_TEXT, "date_of_birth")
        app.dependency_overrides[get_store] = lambda: failing

        response = TestClient(app).post("/registrations", json=registration_payload)

        assert response.status_code == 400
        assert response.json()["kind"] == "invalid_data"


class TestPostalCodeEndpoint:
    """Tests for GET /postal-codes/{country}/{code}."""

    def override_lookup(self, app: FastAPI, **kwargs) -> AsyncMock:
        lookup = MagicMock()
        lookup.lookup = AsyncMock(**kwargs)
        app.dependency_overrides[get_postal_lookup] = lambda: lookup
        return lookup.lookup

    def test_success(self, app: FastAPI) -> None:
        lookup = self.override_lookup(
            app, return_value=PostalAddress(state="Terengganu", district="Kemaman", country="Malaysia")
        )

        response = TestClient(app).get("/postal-codes/Malaysia/24000")

        assert response.status_code == 200
        assert response.json() == {"state": "Terengganu", "district": "Kemaman", "country": "Malaysia"}
        lookup.assert_awaited_once_with("24000", "Malaysia")

    @pytest.mark.parametrize(
        "error,status_code",
        [
            (UnsupportedCountry("Thailand"), 400),
            (PostalCodeNotFound(), 404),
            (UpstreamLookupFailure("timeout"), 502),
        ],
    )
    def test_failures(self, app: FastAPI, error: Exception, status_code: int) -> None:
        self.override_lookup(app, side_effect=error)

        response = TestClient(app).get("/postal-codes/India/110001")

        assert response.status_code == status_code
        assert response.json()["kind"] == error.kind


class TestDependencies:
    """Settings reach the objects built for each request."""

    @pytest.fixture(autouse=True)
    def fresh_settings(self):
        get_settings.cache_clear()
        get_notifier.cache_clear()
        yield
        get_settings.cache_clear()
        get_notifier.cache_clear()

    def test_submission_controller_from_settings(
        self, monkeypatch: pytest.MonkeyPatch, store: InMemoryRegistrationStore, notifier: Mock
    ) -> None:
        monkeypatch.setenv("SUPPORT_EMAIL", "help@apizrace.test")
        monkeypatch.setenv("POSTAL_CODE_WHITELIST", '["Thailand"]')

        controller = get_submission_controller(store=store, notifier=notifier)

        assert controller.support_email == "help@apizrace.test"
        assert controller.postal_code_whitelist == frozenset({"Thailand"})

    def test_smtp_notifier_from_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("EMAIL_BACKEND", "smtp")
        monkeypatch.setenv("SMTP_HOST", "relay.internal")
        monkeypatch.setenv("SENDER_ADDRESS", "noreply@apizrace.test")

        notifier = get_notifier()

        assert isinstance(notifier, SmtpEmailNotifier)
        assert notifier.from_address == '"ApizRace" <noreply@apizrace.test>'
