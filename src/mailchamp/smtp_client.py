"""
SMTP Sender
===========

Submits composed messages over STARTTLS. The body is sent as HTML so users
can include markup.
"""

from __future__ import annotations

import smtplib
import ssl
from email.message import EmailMessage
from typing import TYPE_CHECKING

from contracts import AuthFailedError, ConnectionFailedError, SendFailedError

if TYPE_CHECKING:
    from contracts import MailCredential, OutgoingMessage
    from src.mailchamp.config import Settings


def build_mime_message(message: OutgoingMessage) -> EmailMessage:
    """Convert an OutgoingMessage into a MIME message."""
    mime = EmailMessage()
    mime["From"] = message.sender
    mime["To"] = ", ".join(r.address for r in message.recipients)
    mime["Subject"] = message.subject
    mime.set_content(message.body, subtype="html")
    return mime


class MailSender:
    """Sends one message per connection."""

    def __init__(self, settings: Settings, smtp_factory=smtplib.SMTP) -> None:
        self._settings = settings
        self._smtp_factory = smtp_factory

    def send(self, credentials: MailCredential, message: OutgoingMessage) -> None:
        """
        Authenticate and submit a message.

        ERRORS:
        - ConnectionFailedError: server unreachable or TLS negotiation failed
        - AuthFailedError: server rejected the credentials
        - SendFailedError: server refused the sender, recipients or data
        """
        mime = build_mime_message(message)

        try:
            smtp = self._smtp_factory(self._settings.smtp_server, self._settings.smtp_port)
        except (OSError, smtplib.SMTPException) as e:
            raise ConnectionFailedError(
                f"Failed to connect to {self._settings.smtp_server}: {e}"
            ) from e

        with smtp:
            try:
                smtp.ehlo()
                smtp.starttls(context=ssl.create_default_context())
                smtp.ehlo()
            except (OSError, smtplib.SMTPException) as e:
                raise ConnectionFailedError(f"TLS negotiation failed: {e}") from e

            try:
                credentials.login_smtp(smtp)
            except smtplib.SMTPException as e:
                raise AuthFailedError(f"Authentication failed: {e}") from e

            try:
                smtp.send_message(mime)
            except smtplib.SMTPException as e:
                raise SendFailedError(f"Message was not sent: {e}") from e
