"""
End-to-end tests for the HTTP surface (FastAPI TestClient).

A real Container is wired against a temp registry file; only the mail
transport is swapped for an AsyncMock.
"""

import json

import pytest
from fastapi.testclient import TestClient

import main_api
from emailassist.infrastructure.config import RegistryWritePolicy
from emailassist.infrastructure.container import Container
from tests.conftest import make_config, make_send_email_result


# ─────────────────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def container(registry_path, mock_email_sender):
    c = Container(make_config(registry_path=str(registry_path)))
    c.confirmation_use_case.email_sender = mock_email_sender
    return c


@pytest.fixture
def client(container):
    main_api.configure(container)
    with TestClient(main_api.app) as test_client:
        yield test_client
    main_api._container = None
    main_api._startup_error = None


def read_registry(registry_path):
    if not registry_path.exists():
        return None
    return json.loads(registry_path.read_text(encoding="utf-8"))


# ─────────────────────────────────────────────────────────────────────────────
# GET /health
# ─────────────────────────────────────────────────────────────────────────────


class TestHealth:
    def test_health_reports_campaign(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"ok": True, "campaign": "Jamaica We Rise"}


# ─────────────────────────────────────────────────────────────────────────────
# POST /api/donation-email
# ─────────────────────────────────────────────────────────────────────────────


class TestDonationEmailSuccess:
    def test_success_records_donor(self, client, registry_path, mock_email_sender):
        response = client.post(
            "/api/donation-email",
            json={"email": "d@x.com", "soulmark": "SM1234567890"},
        )
        assert response.status_code == 200
        assert response.json() == {"ok": True}

        mock_email_sender.send.assert_awaited_once()
        registry = read_registry(registry_path)
        assert len(registry) == 1
        assert registry[0]["email"] == "d@x.com"
        assert len(registry[0]["donations"]) == 1
        assert registry[0]["donations"][0]["soulmark"] == "SM1234567890"

    def test_optional_fields_are_persisted(self, client, registry_path):
        client.post(
            "/api/donation-email",
            json={
                "name": "Dana",
                "email": "d@x.com",
                "soulmark": "SM1234567890",
                "amount": 25,
                "currency": "JMD",
                "sessionId": "cs_test_42",
            },
        )
        donor = read_registry(registry_path)[0]
        assert donor["name"] == "Dana"
        donation = donor["donations"][0]
        assert donation["amount"] == 25
        assert donation["currency"] == "JMD"
        assert donation["sessionId"] == "cs_test_42"
        assert donation["campaign"] == "Jamaica We Rise"

    def test_repeat_donor_with_different_casing(self, client, registry_path):
        client.post("/api/donation-email", json={"email": "D@X.com", "soulmark": "SM1234567890"})
        client.post("/api/donation-email", json={"email": "d@x.com", "soulmark": "SM0987654321"})
        registry = read_registry(registry_path)
        assert len(registry) == 1
        assert len(registry[0]["donations"]) == 2

    def test_email_body_is_masked(self, client, mock_email_sender):
        client.post("/api/donation-email", json={"email": "d@x.com", "soulmark": "SM1234567890"})
        message = mock_email_sender.send.await_args.args[0]
        assert "SM1234567890" not in message.html


class TestDonationEmailValidation:
    def test_missing_email_is_400(self, client, registry_path, mock_email_sender):
        response = client.post("/api/donation-email", json={"soulmark": "SM1234567890"})
        assert response.status_code == 400
        assert response.json() == {"error": "email and soulmark are required fields."}
        mock_email_sender.send.assert_not_called()
        assert read_registry(registry_path) is None

    def test_missing_soulmark_is_400(self, client, mock_email_sender):
        response = client.post("/api/donation-email", json={"email": "d@x.com"})
        assert response.status_code == 400
        assert "error" in response.json()
        mock_email_sender.send.assert_not_called()

    def test_malformed_body_is_400(self, client, mock_email_sender):
        response = client.post(
            "/api/donation-email",
            json={"email": "d@x.com", "soulmark": "SM1234567890", "amount": {"x": 1}},
        )
        assert response.status_code == 400
        assert "amount" in response.json()["error"]
        mock_email_sender.send.assert_not_called()

    def test_non_json_body_is_400(self, client):
        response = client.post(
            "/api/donation-email",
            content=b"not json",
            headers={"content-type": "application/json"},
        )
        assert response.status_code == 400


class TestDonationEmailFailures:
    def test_send_failure_is_500_and_registry_untouched(
        self, client, registry_path, mock_email_sender
    ):
        mock_email_sender.send.return_value = make_send_email_result(
            success=False, error="SMTP timeout"
        )
        response = client.post(
            "/api/donation-email",
            json={"email": "d@x.com", "soulmark": "SM1234567890"},
        )
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to send donation email."}
        assert read_registry(registry_path) is None

    def test_unexpected_exception_is_generic_500(self, client, mock_email_sender):
        mock_email_sender.send.side_effect = RuntimeError("boom")
        response = client.post(
            "/api/donation-email",
            json={"email": "d@x.com", "soulmark": "SM1234567890"},
        )
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to send donation email."}

    def test_strict_write_failure_is_500(self, registry_path, mock_email_sender, tmp_path):
        # The registry path is a directory, so every write fails.
        blocked = tmp_path / "blocked"
        blocked.mkdir()
        c = Container(make_config(
            registry_path=str(blocked),
            registry_write_policy=RegistryWritePolicy.STRICT,
        ))
        c.confirmation_use_case.email_sender = mock_email_sender
        main_api.configure(c)
        try:
            with TestClient(main_api.app) as client:
                response = client.post(
                    "/api/donation-email",
                    json={"email": "d@x.com", "soulmark": "SM1234567890"},
                )
        finally:
            main_api._container = None
        assert response.status_code == 500
        mock_email_sender.send.assert_awaited_once()

    def test_best_effort_write_failure_is_200(self, mock_email_sender, tmp_path):
        blocked = tmp_path / "blocked"
        blocked.mkdir()
        c = Container(make_config(registry_path=str(blocked)))
        c.confirmation_use_case.email_sender = mock_email_sender
        main_api.configure(c)
        try:
            with TestClient(main_api.app) as client:
                response = client.post(
                    "/api/donation-email",
                    json={"email": "d@x.com", "soulmark": "SM1234567890"},
                )
        finally:
            main_api._container = None
        assert response.status_code == 200


class TestMisconfigured:
    def test_donation_endpoint_is_503_when_startup_failed(self, monkeypatch):
        main_api._container = None
        monkeypatch.setattr(main_api, "_startup_error", "Missing SMTP_USER")
        client = TestClient(main_api.app)
        response = client.post(
            "/api/donation-email",
            json={"email": "d@x.com", "soulmark": "SM1234567890"},
        )
        assert response.status_code == 503
        assert "Missing SMTP_USER" in response.json()["error"]
