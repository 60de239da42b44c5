"""
ImapInboxAdapter - Implements IInboxGateway with imaplib over SSL.
Fetches by UID so repeated polls only see messages that arrived since.
"""

import asyncio
import email
import imaplib
import logging
from email.header import decode_header, make_header
from email.message import Message
from email.utils import parseaddr, parsedate_to_datetime
from typing import List, Optional

from ..domain.entities.inbound_message import InboundMessage
from ..domain.interfaces.i_inbox_gateway import IInboxGateway

logger = logging.getLogger(__name__)

MAILBOX = "INBOX"


def _decode(value: Optional[str]) -> str:
    if not value:
        return ""
    return str(make_header(decode_header(value)))


def _text_body(msg: Message) -> str:
    """First text/plain part, falling back to text/html."""
    parts = list(msg.walk()) if msg.is_multipart() else [msg]
    for content_type in ("text/plain", "text/html"):
        for part in parts:
            if part.get_content_type() != content_type:
                continue
            if part.get_content_disposition() == "attachment":
                continue
            payload = part.get_payload(decode=True) or b""
            charset = part.get_content_charset() or "utf-8"
            return payload.decode(charset, errors="replace")
    return ""


def parse_message(uid: int, raw: bytes) -> InboundMessage:
    msg = email.message_from_bytes(raw)
    received_at = None
    if msg.get("Date"):
        try:
            received_at = parsedate_to_datetime(msg["Date"])
        except (TypeError, ValueError):
            received_at = None
    return InboundMessage(
        uid=uid,
        sender=parseaddr(msg.get("From", ""))[1],
        subject=_decode(msg.get("Subject")),
        body=_text_body(msg),
        received_at=received_at,
    )


class ImapInboxAdapter(IInboxGateway):
    def __init__(self, host: str, port: int, user: str, password: str):
        self.host = host
        self.port = port
        self.user = user
        self.password = password

    async def fetch_since(self, last_uid: int) -> List[InboundMessage]:
        return await asyncio.to_thread(self._fetch_sync, last_uid)

    def _fetch_sync(self, last_uid: int) -> List[InboundMessage]:
        messages: List[InboundMessage] = []
        with imaplib.IMAP4_SSL(self.host, self.port) as client:
            client.login(self.user, self.password)
            client.select(MAILBOX, readonly=True)

            status, data = client.uid("search", None, f"UID {last_uid + 1}:*")
            if status != "OK":
                raise imaplib.IMAP4.error(f"UID search failed: {status}")

            # "n:*" always matches the newest message, even when its UID <= n.
            uids = sorted(int(u) for u in data[0].split() if int(u) > last_uid)
            for uid in uids:
                status, fetched = client.uid("fetch", str(uid), "(RFC822)")
                if status != "OK" or not fetched or not isinstance(fetched[0], tuple):
                    logger.warning(f"[IMAP] Could not fetch UID {uid}: {status}")
                    continue
                messages.append(parse_message(uid, fetched[0][1]))

        logger.debug(f"[IMAP] {len(messages)} new message(s) in {MAILBOX} since UID {last_uid}")
        return messages
