"""
Root conftest.py — shared fixtures and helpers for the entire test suite.

Provides:
- Donor / DonationEvent factory helpers
- Config factory helper
- Mock gateway / repository factories (for use-case tests)
- A real JsonRegistryAdapter on a temp file (for workflow tests)
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional
from unittest.mock import AsyncMock

import pytest

from emailassist.adapters.json_registry_adapter import JsonRegistryAdapter
from emailassist.domain.entities.donor import DonationEvent, Donor
from emailassist.domain.entities.inbound_message import InboundMessage
from emailassist.domain.interfaces.i_email_sender_gateway import SendEmailResult
from emailassist.domain.interfaces.i_registry_repository import SaveRegistryResult
from emailassist.infrastructure.config import Config, MailProvider

FIXED_NOW = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


# ─────────────────────────────────────────────────────────────────────────────
# Domain object factories
# ─────────────────────────────────────────────────────────────────────────────


def make_donation(
    campaign: str = "Jamaica We Rise",
    soulmark: str = "SM1234567890",
    timestamp: datetime = FIXED_NOW,
    amount=None,
    currency: Optional[str] = None,
    session_id: Optional[str] = None,
) -> DonationEvent:
    return DonationEvent(
        campaign=campaign,
        soulmark=soulmark,
        timestamp=timestamp,
        amount=amount,
        currency=currency,
        session_id=session_id,
    )


def make_donor(
    email: str = "donor@example.com",
    name: str = "Dana Donor",
    donations: Optional[List[DonationEvent]] = None,
    created_at: datetime = FIXED_NOW,
    last_contact: datetime = FIXED_NOW,
) -> Donor:
    """Create a Donor with sensible test defaults."""
    return Donor(
        email=email,
        name=name,
        donations=donations if donations is not None else [make_donation()],
        created_at=created_at,
        last_contact=last_contact,
    )


def make_inbound_message(
    uid: int = 1,
    sender: str = "helpme@example.com",
    subject: str = "Question about my donation",
    body: str = "Hi, I never received my dashboard link.",
) -> InboundMessage:
    return InboundMessage(uid=uid, sender=sender, subject=subject, body=body)


def make_config(**overrides) -> Config:
    """Config with no real credentials; SMTP by default."""
    values = dict(
        campaign_name="Jamaica We Rise",
        dashboard_url="https://dashboard.example.org/auth",
        mail_provider=MailProvider.SMTP,
        smtp_user="mailer@example.org",
        smtp_pass="app-password",
        alias_support="support@example.org",
        registry_path="./registry/test_donors.json",
    )
    values.update(overrides)
    return Config(**values)


def make_send_email_result(
    success: bool = True,
    email: str = "donor@example.com",
    error: Optional[str] = None,
) -> SendEmailResult:
    return SendEmailResult(success=success, email=email, error=error)


class StepClock:
    """Deterministic clock: each call advances by one minute."""

    def __init__(self, start: datetime = FIXED_NOW):
        self.current = start - timedelta(minutes=1)

    def __call__(self) -> datetime:
        self.current += timedelta(minutes=1)
        return self.current


# ─────────────────────────────────────────────────────────────────────────────
# Mock gateway fixtures (inject into use-case tests)
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def mock_email_sender():
    """AsyncMock for IEmailSenderGateway. Defaults to successful send."""
    mock = AsyncMock()
    mock.send.return_value = make_send_email_result()
    return mock


@pytest.fixture
def failing_email_sender():
    """AsyncMock for IEmailSenderGateway that always fails."""
    mock = AsyncMock()
    mock.send.return_value = make_send_email_result(
        success=False, error="550 mailbox unavailable"
    )
    return mock


@pytest.fixture
def mock_registry():
    """AsyncMock for IRegistryRepository backed by an in-memory list."""
    store: List[Donor] = []
    mock = AsyncMock()

    async def _load():
        return list(store)

    async def _save(donors):
        store[:] = list(donors)
        return SaveRegistryResult(success=True, donor_count=len(donors))

    mock.load.side_effect = _load
    mock.save.side_effect = _save
    mock.store = store
    return mock


@pytest.fixture
def mock_inbox():
    """AsyncMock for IInboxGateway. Defaults to an empty inbox."""
    mock = AsyncMock()
    mock.fetch_since.return_value = []
    return mock


@pytest.fixture
def registry_path(tmp_path):
    return tmp_path / "registry" / "donors_verified.json"


@pytest.fixture
def json_registry(registry_path):
    return JsonRegistryAdapter(path=str(registry_path))


@pytest.fixture
def clock():
    return StepClock()
