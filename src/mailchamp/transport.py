"""
Mail transport facade used by the console flows.

INV-TRANSPORT-01: one connection per call, always closed.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from src.mailchamp.config import FETCH_LIMIT
from src.mailchamp.imap_client import MailboxReader
from src.mailchamp.smtp_client import MailSender

if TYPE_CHECKING:
    from contracts import MailCredential, OutgoingMessage, ReceivedMessage
    from src.mailchamp.config import Settings

logger = logging.getLogger("mailchamp")


class MailTransport:
    """Sends through SMTP and reads through IMAP."""

    def __init__(self, settings: Settings, reader_factory=MailboxReader, sender_factory=MailSender) -> None:
        self._settings = settings
        self._reader_factory = reader_factory
        self._sender_factory = sender_factory

    def send_message(self, credentials: MailCredential, message: OutgoingMessage) -> None:
        # Log counts only, never subject or body (INV-READ-02)
        logger.info("Sending message to %d recipient(s) via %s",
                    len(message.recipients), self._settings.smtp_server)
        self._sender_factory(self._settings).send(credentials, message)

    def fetch_recent(self, credentials: MailCredential, limit: int = FETCH_LIMIT) -> list[ReceivedMessage]:
        reader = self._reader_factory()
        try:
            reader.connect(self._settings, credentials)
            messages = reader.fetch_recent(limit=limit)
        finally:
            reader.disconnect()
        logger.info("Fetched %d message(s) from %s", len(messages), self._settings.imap_server)
        return messages
