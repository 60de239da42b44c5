"""
Support inbox polling.

PollSupportInboxUseCase.execute() is a single poll: fetch what arrived since
the last poll, log it, and return it. It never touches the donor registry.

Whether polling runs at all is decided once, at construction, by picking
DisabledPoller or EnabledPoller (see build_poller).
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ..domain.entities.inbound_message import InboundMessage
from ..domain.interfaces.i_inbox_gateway import IInboxGateway

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS = 60.0


@dataclass
class PollResult:
    fetched: int = 0
    messages: List[InboundMessage] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None


class PollSupportInboxUseCase:
    """
    Tracks the highest UID seen, so polling twice without new mail is a no-op.
    """

    def __init__(self, inbox: IInboxGateway, escalation_email: str = ""):
        self.inbox = inbox
        self.escalation_email = escalation_email
        self.last_uid = 0

    async def execute(self) -> PollResult:
        try:
            messages = await self.inbox.fetch_since(self.last_uid)
        except Exception as e:
            logger.error(f"[Inbox] Poll failed: {e}")
            return PollResult(error=str(e))

        messages = [m for m in messages if m.uid > self.last_uid]
        for message in messages:
            logger.info(
                f"[Inbox] #{message.uid} from {message.sender}: "
                f"{message.subject!r} | {message.preview}"
            )
        if messages:
            self.last_uid = max(m.uid for m in messages)
            if self.escalation_email:
                logger.info(
                    f"[Inbox] {len(messages)} new support message(s); "
                    f"escalation contact is {self.escalation_email}"
                )

        return PollResult(fetched=len(messages), messages=messages)


class DisabledPoller:
    """Inbox polling switched off (ENABLE_IMAP=false)."""

    enabled = False

    def start(self) -> None:
        logger.info("[Inbox] IMAP disabled (ENABLE_IMAP=false). Skipping polling.")

    async def stop(self) -> None:
        return None


class EnabledPoller:
    """Runs one poll immediately, then every interval_seconds."""

    enabled = True

    def __init__(
        self,
        use_case: PollSupportInboxUseCase,
        interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
    ):
        self.use_case = use_case
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None

    def start(self) -> None:
        if self._task is not None and not self._task.done():
            return
        logger.info(
            f"[Inbox] Support inbox polling every {self.interval_seconds:g}s"
        )
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _run(self) -> None:
        while True:
            await self.use_case.execute()
            await asyncio.sleep(self.interval_seconds)


def build_poller(
    enabled: bool,
    use_case: Optional[PollSupportInboxUseCase],
    interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
):
    if not enabled or use_case is None:
        return DisabledPoller()
    return EnabledPoller(use_case, interval_seconds=interval_seconds)
