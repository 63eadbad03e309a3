"""
MailChamp
=========

Console tool to send email or read the most recent messages of an
Office 365 mailbox.
"""

__version__ = "0.1.0"

from src.mailchamp.app import MailChampApp, create_app, main
from src.mailchamp.auth import resolve_credentials
from src.mailchamp.credentials import PasswordCredentials, Session, TokenCredentials
from src.mailchamp.transport import MailTransport

__all__ = [
    "MailChampApp",
    "create_app",
    "main",
    "resolve_credentials",
    "MailTransport",
    "PasswordCredentials",
    "TokenCredentials",
    "Session",
]
