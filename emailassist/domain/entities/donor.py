"""
Donor Entity - Core domain object of the registry.
No framework dependencies. Business logic lives here.

A Donor owns its DonationEvents outright: events are embedded in the donor
record and never shared or referenced anywhere else.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

Amount = Union[int, float, str]

_DONOR_KEYS = ("email", "name", "donations", "createdAt", "lastContact")
_DONATION_KEYS = ("campaign", "amount", "currency", "soulmark", "sessionId", "timestamp")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Serialize as UTC ISO-8601 with millisecond precision and a Z suffix."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: Optional[str]) -> datetime:
    if value is None or value == "":
        raise ValueError("timestamp is missing")
    if not isinstance(value, str):
        raise ValueError(f"timestamp is not a string: {value!r}")
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_optional_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Like parse_timestamp, but a null or missing value stays None."""
    if value is None or value == "":
        return None
    return parse_timestamp(value)


@dataclass
class DonationEvent:
    """One recorded contribution. Optional fields are persisted only when given."""

    campaign: str
    soulmark: str
    timestamp: Optional[datetime]
    amount: Optional[Amount] = None
    currency: Optional[str] = None
    session_id: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"campaign": self.campaign}
        if self.amount is not None:
            data["amount"] = self.amount
        if self.currency is not None:
            data["currency"] = self.currency
        data["soulmark"] = self.soulmark
        if self.session_id is not None:
            data["sessionId"] = self.session_id
        data["timestamp"] = format_timestamp(self.timestamp)
        data.update(self.extra)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DonationEvent":
        if not isinstance(data, dict):
            raise ValueError("donation entry is not an object")
        return cls(
            campaign=data.get("campaign", ""),
            soulmark=data.get("soulmark", ""),
            timestamp=parse_optional_timestamp(data.get("timestamp")),
            amount=data.get("amount"),
            currency=data.get("currency"),
            session_id=data.get("sessionId"),
            extra={k: v for k, v in data.items() if k not in _DONATION_KEYS},
        )


@dataclass
class Donor:
    """
    A donor in the registry, identified by email (case-insensitive).
    The first-seen casing of the email is the one stored.
    """

    email: str
    name: str = ""
    donations: List[DonationEvent] = field(default_factory=list)
    created_at: Optional[datetime] = field(default_factory=utc_now)
    last_contact: Optional[datetime] = field(default_factory=utc_now)
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(cls, email: str, name: Optional[str], now: datetime) -> "Donor":
        """Factory for a first sighting: no donations yet, both timestamps = now."""
        return cls(
            email=email,
            name=name or "",
            donations=[],
            created_at=now,
            last_contact=now,
        )

    def matches(self, email: str) -> bool:
        return self.email.lower() == email.lower()

    def record_donation(
        self,
        event: DonationEvent,
        name: Optional[str] = None,
    ) -> None:
        """
        Append a donation and refresh contact metadata.
        An empty or missing name never overwrites a stored one.
        created_at is left untouched.
        """
        if name:
            self.name = name
        self.last_contact = event.timestamp
        self.donations.append(event)

    @property
    def donation_count(self) -> int:
        return len(self.donations)

    @property
    def missing_timestamps(self) -> bool:
        """True when a hand-edited record left a timestamp null or absent."""
        if self.created_at is None or self.last_contact is None:
            return True
        return any(d.timestamp is None for d in self.donations)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "email": self.email,
            "name": self.name,
            "donations": [d.to_dict() for d in self.donations],
            "createdAt": format_timestamp(self.created_at),
            "lastContact": format_timestamp(self.last_contact),
        }
        data.update(self.extra)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Donor":
        if not isinstance(data, dict):
            raise ValueError("donor entry is not an object")
        email = data.get("email")
        if not isinstance(email, str):
            raise ValueError("donor entry has no string email")
        donations = data.get("donations") or []
        if not isinstance(donations, list):
            raise ValueError(f"donations for {email} is not a list")
        return cls(
            email=email,
            name=data.get("name") or "",
            donations=[DonationEvent.from_dict(d) for d in donations],
            created_at=parse_optional_timestamp(data.get("createdAt")),
            last_contact=parse_optional_timestamp(data.get("lastContact")),
            extra={k: v for k, v in data.items() if k not in _DONOR_KEYS},
        )


def find_donor(donors: List[Donor], email: str) -> Optional[Donor]:
    """Linear, case-insensitive lookup by email."""
    for donor in donors:
        if donor.matches(email):
            return donor
    return None
