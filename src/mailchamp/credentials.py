"""
Credentials Management
======================

Two ways to hold a mailbox sign-in: an interactive OAuth bearer token or a
manually entered address and password. Both authenticate IMAP and SMTP
connections themselves, so callers never branch on which one they hold.

INV-CRED-01: Credentials held in memory only, never written to disk or logs.
INV-AUTH-01: Session credentials written at most once per process.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import smtplib

    from imapclient import IMAPClient

    from contracts import MailCredential


def xoauth2_string(username: str, access_token: str) -> str:
    """SASL XOAUTH2 initial client response (unencoded)."""
    return f"user={username}\x01auth=Bearer {access_token}\x01\x01"


@dataclass(frozen=True)
class TokenCredentials:
    """Bearer token issued by the identity provider."""

    username: str
    access_token: str = field(repr=False)

    def login_imap(self, client: IMAPClient) -> None:
        client.oauth2_login(self.username, self.access_token)

    def login_smtp(self, smtp: smtplib.SMTP) -> None:
        auth_string = xoauth2_string(self.username, self.access_token)
        smtp.auth("XOAUTH2", lambda challenge=None: auth_string, initial_response_ok=True)


@dataclass(frozen=True)
class PasswordCredentials:
    """Address and password typed at the console."""

    username: str
    password: str = field(repr=False)

    def login_imap(self, client: IMAPClient) -> None:
        client.login(self.username, self.password)

    def login_smtp(self, smtp: smtplib.SMTP) -> None:
        smtp.login(self.username, self.password)


@dataclass
class Session:
    """Sign-in state shared by every menu cycle of one process."""

    credentials: MailCredential | None = None

    @property
    def authenticated(self) -> bool:
        return self.credentials is not None

    def remember(self, credentials: MailCredential) -> None:
        if self.credentials is not None:
            raise RuntimeError("Session credentials already established")
        self.credentials = credentials
