"""
Integration tests for the assembled application.

Runs the real app (lifespan included) on the in-memory store and checks
the OpenAPI schema and an end-to-end registration.
"""

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from src.api.dependencies import get_notifier
from src.api.main import app
from src.config.settings import get_settings


@pytest.fixture
def client(monkeypatch: pytest.MonkeyPatch) -> Generator[TestClient, None, None]:
    """Test client running the app lifespan against the in-memory store."""
    monkeypatch.setenv("STORE_BACKEND", "memory")
    monkeypatch.setenv("EMAIL_BACKEND", "console")
    get_settings.cache_clear()
    get_notifier.cache_clear()
    with TestClient(app) as test_client:
        yield test_client
    get_settings.cache_clear()
    get_notifier.cache_clear()


class TestOpenAPISchema:
    """Tests for OpenAPI schema generation."""

    def test_title_and_version(self, client: TestClient) -> None:
        schema = client.get("/openapi.json").json()
        assert schema["info"]["title"] == "apizrace-registration"
        assert schema["info"]["version"] == "0.1.0"

    @pytest.mark.parametrize(
        "path,method",
        [
            ("/check-identity", "post"),
            ("/send-email", "post"),
            ("/registrations", "post"),
            ("/postal-codes/{country}/{code}", "get"),
            ("/health", "get"),
        ],
    )
    def test_endpoint_documented(self, client: TestClient, path: str, method: str) -> None:
        schema = client.get("/openapi.json").json()
        assert method in schema["paths"][path]


class TestHealth:
    def test_healthy_with_memory_store(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_unhealthy_when_store_down(self, client: TestClient) -> None:
        client.app.state.store.available = False
        response = client.get("/health")
        assert response.status_code == 503


class TestRegistrationFlow:
    """Identity check, registration, then the duplicate check sees it."""

    PAYLOAD = {
        "gender": "FEMALE",
        "mobile": "01123456789",
        "email": "siti@example.com",
        "firstName": "Siti",
        "lastName": "Aminah",
        "dateOfBirth": "1994-02-11",
        "identityCardNumber": "940211-03-5678",
        "country": "Malaysia",
        "postalCode": "24000",
        "state": "Terengganu",
        "city": "Kemaman",
        "occupation": "Teacher",
        "raceCategory": "10km",
        "tShirtSize": "S",
        "isFromBastar": True,
    }

    def test_register_then_identity_exists(self, client: TestClient) -> None:
        before = client.post("/check-identity", json={"id": "940211035678"})
        assert before.json() == {"exists": False}

        created = client.post("/registrations", json=self.PAYLOAD)
        assert created.status_code == 201

        after = client.post("/check-identity", json={"icNumber": "940211-03-5678"})
        assert after.json() == {"exists": True}

        duplicate = client.post("/registrations", json={**self.PAYLOAD, "email": "other@example.com"})
        assert duplicate.status_code == 409
