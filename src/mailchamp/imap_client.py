"""
IMAP Mailbox Reader
===================

Reads the most recent messages of a mailbox for display.

INVARIANTS:
- INV-READ-01: Fetch does NOT mark messages as read
- INV-READ-02: No logging of message bodies
"""

from __future__ import annotations

import email
import email.utils
import html
import re
from datetime import datetime
from email.header import decode_header
from typing import TYPE_CHECKING

from imapclient import IMAPClient

from contracts import (
    AuthFailedError,
    ConnectionFailedError,
    EmailAddress,
    FetchFailedError,
    NotConnectedError,
    ReceivedMessage,
)
from src.mailchamp.config import FETCH_LIMIT

if TYPE_CHECKING:
    from contracts import MailCredential
    from src.mailchamp.config import Settings

_TAG_RE = re.compile(r"<[^>]+>")
_BREAK_RE = re.compile(r"<\s*(br|/p|/div|/tr|/li)\b[^>]*>", re.IGNORECASE)
_HIDDEN_RE = re.compile(r"<(style|script)\b.*?</\1\s*>", re.IGNORECASE | re.DOTALL)


class MailboxReader:
    """Read-only IMAP client."""

    def __init__(self) -> None:
        self._client: IMAPClient | None = None
        self._server: str = ""
        self._connected: bool = False

    @property
    def connected(self) -> bool:
        """Check if connected to server."""
        return self._connected and self._client is not None

    def connect(self, settings: Settings, credentials: MailCredential) -> None:
        """
        Connect and authenticate to the IMAP server.

        POST: connection established and authenticated
        """
        try:
            self._client = IMAPClient(settings.imap_server, port=settings.imap_port, ssl=True)
            self._server = settings.imap_server
        except Exception as e:
            raise ConnectionFailedError(f"Failed to connect to {settings.imap_server}: {e}") from e

        try:
            credentials.login_imap(self._client)
            self._connected = True
        except Exception as e:
            self._client = None
            raise AuthFailedError(f"Authentication failed: {e}") from e

    def disconnect(self) -> None:
        """Disconnect from server."""
        if self._client:
            try:
                self._client.logout()
            except Exception:
                pass
            finally:
                self._client = None
                self._connected = False

    def _require_connection(self) -> IMAPClient:
        """Ensure connected, raise NotConnectedError if not."""
        if not self._connected or self._client is None:
            raise NotConnectedError("Not connected to mail server")
        return self._client

    def fetch_recent(self, *, limit: int = FETCH_LIMIT, folder: str = "INBOX") -> list[ReceivedMessage]:
        """
        Fetch the newest messages of a folder.

        PRE: 1 <= limit
        POST: len(messages) <= limit
        POST: messages ordered newest first (highest UID first)

        INV-READ-01: folder selected readonly, bodies fetched with BODY.PEEK
        """
        client = self._require_connection()

        try:
            client.select_folder(folder, readonly=True)
        except Exception as e:
            raise FetchFailedError(f"Cannot open folder {folder} on {self._server}: {e}") from e

        try:
            uids = sorted(client.search(["ALL"]), reverse=True)[:limit]
            if not uids:
                return []
            fetch_data = client.fetch(uids, ["INTERNALDATE", "BODY.PEEK[]"])
        except Exception as e:
            raise FetchFailedError(f"Cannot read messages from {folder} on {self._server}: {e}") from e

        messages = []
        for uid in uids:
            data = fetch_data.get(uid)
            if data is None:
                continue
            msg = self._parse_message(data)
            if msg:
                messages.append(msg)
        return messages

    def _parse_message(self, data: dict) -> ReceivedMessage | None:
        """Parse raw IMAP data into ReceivedMessage."""
        try:
            raw = data.get(b"BODY[]") or data.get(b"BODY.PEEK[]")
            if not raw:
                return None

            msg = email.message_from_bytes(raw)

            received = data.get(b"INTERNALDATE")
            if received is None:
                try:
                    received = email.utils.parsedate_to_datetime(msg.get("Date", ""))
                except (TypeError, ValueError):
                    received = datetime.now()

            body_plain = None
            body_html = None
            if msg.is_multipart():
                for part in msg.walk():
                    if "attachment" in str(part.get("Content-Disposition", "")):
                        continue
                    content_type = part.get_content_type()
                    if content_type == "text/plain" and body_plain is None:
                        body_plain = self._decode_payload(part)
                    elif content_type == "text/html" and body_html is None:
                        body_html = self._decode_payload(part)
            else:
                content_type = msg.get_content_type()
                if content_type == "text/plain":
                    body_plain = self._decode_payload(msg)
                elif content_type == "text/html":
                    body_html = self._decode_payload(msg)

            if body_plain is None and body_html is not None:
                body_plain = html_to_text(body_html)

            return ReceivedMessage(
                received=received,
                sender=self._parse_address(msg.get("From", "")),
                subject=self._decode_header(msg.get("Subject", "")),
                body_text=body_plain or "",
            )
        except Exception:
            return None

    def _parse_address(self, addr_str: str) -> EmailAddress:
        """Parse a single email address."""
        if not addr_str:
            return EmailAddress(address="")

        name, address = email.utils.parseaddr(addr_str)
        return EmailAddress(
            address=address,
            name=self._decode_header(name) if name else None,
        )

    def _decode_header(self, header: str) -> str:
        """Decode RFC 2047 encoded header."""
        if not header:
            return ""

        decoded_parts = []
        for part, charset in decode_header(header):
            if isinstance(part, bytes):
                decoded_parts.append(part.decode(charset or "utf-8", errors="replace"))
            else:
                decoded_parts.append(part)
        return " ".join(decoded_parts)

    def _decode_payload(self, part: email.message.Message) -> str:
        """Decode message payload."""
        payload = part.get_payload(decode=True)
        if payload is None:
            return ""

        charset = part.get_content_charset() or "utf-8"
        return payload.decode(charset, errors="replace")


def html_to_text(markup: str) -> str:
    """Reduce an HTML body to readable plain text."""
    text = _HIDDEN_RE.sub("", markup)
    text = _BREAK_RE.sub("\n", text)
    text = _TAG_RE.sub("", text)
    text = html.unescape(text)
    lines = [line.strip() for line in text.splitlines()]
    return "\n".join(line for line in lines if line)
