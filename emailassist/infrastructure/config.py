"""
Configuration — reads all settings from environment variables once at startup.
Never hardcodes credentials. Uses python-dotenv for local dev.
The resulting Config is immutable and injected into every component.
"""

import os
from dataclasses import dataclass
from enum import Enum
from typing import List

from dotenv import load_dotenv

load_dotenv()

DEFAULT_CAMPAIGN_NAME = "Jamaica We Rise"
DEFAULT_DASHBOARD_URL = "https://jamaica-we-rise.vercel.app/iascendai-auth.html"
DEFAULT_REGISTRY_PATH = "./registry/donors_verified.json"


class MailProvider(str, Enum):
    SMTP = "smtp"
    RESEND = "resend"


class RegistryWritePolicy(str, Enum):
    BEST_EFFORT = "best_effort"  # log and carry on, as the donor was already emailed
    STRICT = "strict"  # fail the request


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() == "true"


def _enum(enum_cls, name: str, default: str):
    raw = os.getenv(name, default).strip().lower()
    try:
        return enum_cls(raw)
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise EnvironmentError(f"{name}={raw!r} is not one of: {allowed}")


# Process-level settings, readable without mail credentials.


def registry_path_from_env() -> str:
    return os.getenv("REGISTRY_PATH") or DEFAULT_REGISTRY_PATH


def http_port_from_env() -> int:
    return int(os.getenv("PORT") or "4000")


def cors_origins_from_env() -> List[str]:
    origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
    return origins or ["*"]


@dataclass(frozen=True)
class Config:
    # Campaign
    campaign_name: str = DEFAULT_CAMPAIGN_NAME
    campaign_domain: str = ""
    dashboard_url: str = DEFAULT_DASHBOARD_URL
    escalation_email: str = ""

    # Outbound mail
    mail_provider: MailProvider = MailProvider.SMTP
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_secure: bool = False  # True = implicit TLS; False = STARTTLS
    smtp_user: str = ""
    smtp_pass: str = ""
    resend_api_key: str = ""

    # Sender aliases
    alias_support: str = ""
    alias_donate: str = ""
    alias_info: str = ""

    # Registry
    registry_path: str = DEFAULT_REGISTRY_PATH
    registry_write_policy: RegistryWritePolicy = RegistryWritePolicy.BEST_EFFORT

    # Support inbox
    enable_imap: bool = False
    imap_host: str = "imap.gmail.com"
    imap_port: int = 993
    imap_user: str = ""
    imap_pass: str = ""
    imap_poll_interval_ms: int = 60000

    @property
    def support_sender(self) -> str:
        return self.alias_support or self.smtp_user

    @property
    def imap_poll_interval_seconds(self) -> float:
        return self.imap_poll_interval_ms / 1000

    @classmethod
    def from_env(cls) -> "Config":
        mail_provider = _enum(MailProvider, "MAIL_PROVIDER", "smtp")
        enable_imap = _flag("ENABLE_IMAP")

        required = []
        if mail_provider is MailProvider.SMTP:
            required += ["SMTP_USER", "SMTP_PASS"]
        if enable_imap:
            required += ["IMAP_USER", "IMAP_PASS"]

        missing = [key for key in required if not os.getenv(key)]
        if missing:
            raise EnvironmentError(
                f"Missing required environment variables: {', '.join(missing)}\n"
                f"Copy .env.example to .env and fill in the values."
            )

        return cls(
            campaign_name=os.getenv("CAMPAIGN_NAME") or DEFAULT_CAMPAIGN_NAME,
            campaign_domain=os.getenv("CAMPAIGN_DOMAIN", ""),
            dashboard_url=os.getenv("DASHBOARD_URL") or DEFAULT_DASHBOARD_URL,
            escalation_email=os.getenv("ESCALATION_EMAIL", ""),
            mail_provider=mail_provider,
            smtp_host=os.getenv("SMTP_HOST") or "smtp.gmail.com",
            smtp_port=int(os.getenv("SMTP_PORT") or "587"),
            smtp_secure=_flag("SMTP_SECURE"),
            smtp_user=os.getenv("SMTP_USER", ""),
            smtp_pass=os.getenv("SMTP_PASS", ""),
            resend_api_key=os.getenv("RESEND_API_KEY", ""),
            alias_support=os.getenv("ALIAS_SUPPORT", ""),
            alias_donate=os.getenv("ALIAS_DONATE", ""),
            alias_info=os.getenv("ALIAS_INFO", ""),
            registry_path=registry_path_from_env(),
            registry_write_policy=_enum(
                RegistryWritePolicy, "REGISTRY_WRITE_POLICY", "best_effort"
            ),
            enable_imap=enable_imap,
            imap_host=os.getenv("IMAP_HOST") or "imap.gmail.com",
            imap_port=int(os.getenv("IMAP_PORT") or "993"),
            imap_user=os.getenv("IMAP_USER", ""),
            imap_pass=os.getenv("IMAP_PASS", ""),
            imap_poll_interval_ms=int(os.getenv("IMAP_POLL_INTERVAL_MS") or "60000"),
        )
