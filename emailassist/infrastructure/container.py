"""
Dependency Injection Container.
Wires all adapters to their interfaces and composes use cases.
This is the ONLY place that knows about concrete implementations.
The domain and use case layers remain framework-agnostic.
"""

from .config import Config, MailProvider, RegistryWritePolicy
from ..adapters.json_registry_adapter import JsonRegistryAdapter
from ..adapters.smtp_email_adapter import SmtpEmailAdapter
from ..adapters.resend_email_adapter import ResendEmailAdapter
from ..adapters.imap_inbox_adapter import ImapInboxAdapter
from ..use_cases.send_donation_confirmation import SendDonationConfirmationUseCase
from ..use_cases.upsert_donor import UpsertDonorUseCase
from ..use_cases.process_donation import ProcessDonationUseCase
from ..use_cases.poll_support_inbox import PollSupportInboxUseCase, build_poller


class Container:
    """
    Composes the full application object graph.
    Swap any adapter by changing a single line here.
    """

    def __init__(self, config: Config):
        self.config = config

        # ── Adapters (Ports & Adapters layer) ─────────────────────────────
        self.registry = JsonRegistryAdapter(path=config.registry_path)
        if config.mail_provider is MailProvider.RESEND:
            self.email_sender = ResendEmailAdapter(
                api_key=config.resend_api_key,
                reply_to=config.alias_info,
            )
        else:
            self.email_sender = SmtpEmailAdapter(
                host=config.smtp_host,
                port=config.smtp_port,
                user=config.smtp_user,
                password=config.smtp_pass,
                secure=config.smtp_secure,
            )
        self.inbox = (
            ImapInboxAdapter(
                host=config.imap_host,
                port=config.imap_port,
                user=config.imap_user,
                password=config.imap_pass,
            )
            if config.enable_imap
            else None
        )

        # ── Use Cases (Application layer) ──────────────────────────────────
        self.confirmation_use_case = SendDonationConfirmationUseCase(
            email_sender=self.email_sender,
            campaign_name=config.campaign_name,
            sender_address=config.support_sender,
            dashboard_url=config.dashboard_url,
        )
        self.upsert_donor_use_case = UpsertDonorUseCase(
            registry=self.registry,
            campaign_name=config.campaign_name,
        )
        self.process_donation_use_case = ProcessDonationUseCase(
            confirmation=self.confirmation_use_case,
            upsert=self.upsert_donor_use_case,
            strict_writes=config.registry_write_policy is RegistryWritePolicy.STRICT,
        )
        self.poll_inbox_use_case = (
            PollSupportInboxUseCase(
                inbox=self.inbox,
                escalation_email=config.escalation_email,
            )
            if self.inbox is not None
            else None
        )
        self.inbox_poller = build_poller(
            enabled=config.enable_imap,
            use_case=self.poll_inbox_use_case,
            interval_seconds=config.imap_poll_interval_seconds,
        )
