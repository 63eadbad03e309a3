"""
Authentication
==============

Interactive OAuth through msal first; manual address + password entry when
OAuth is not configured or fails.

More info: https://learn.microsoft.com/en-us/exchange/client-developer/legacy-protocols/how-to-authenticate-an-imap-pop-smtp-application-by-using-oauth
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import msal

from contracts import ConfigurationMissingError, InteractiveAuthError
from src.mailchamp.config import MAIL_SCOPES
from src.mailchamp.console import read_masked
from src.mailchamp.credentials import PasswordCredentials, TokenCredentials
from src.mailchamp.validation import is_valid_email

if TYPE_CHECKING:
    from contracts import MailCredential
    from src.mailchamp.config import Settings
    from src.mailchamp.console import Console
    from src.mailchamp.credentials import Session

logger = logging.getLogger("mailchamp")


def acquire_interactive_token(
    settings: Settings,
    app_factory: Callable[..., Any] = msal.PublicClientApplication,
) -> TokenCredentials:
    """
    Sign in through the system browser and return a bearer token.

    PRE: client and tenant identifiers configured
    POST: TokenCredentials for the signed-in account

    ERRORS:
    - ConfigurationMissingError: client or tenant identifier absent
    - InteractiveAuthError: provider returned no token or no account name
    """
    if not settings.oauth_configured:
        raise ConfigurationMissingError("Client ID or Tenant ID not configured")

    app = app_factory(settings.client_id, authority=settings.authority)
    logger.info("Requesting interactive token from %s", settings.authority)
    result = app.acquire_token_interactive(list(MAIL_SCOPES))

    if "access_token" not in result:
        error = result.get("error", "unknown_error")
        description = result.get("error_description", "")
        raise InteractiveAuthError(f"{error}: {description}" if description else error)

    claims = result.get("id_token_claims") or {}
    username = claims.get("preferred_username")
    if not username:
        raise InteractiveAuthError("Token response did not identify the signed-in account")

    logger.info("Interactive sign-in succeeded")  # No token logged (INV-CRED-01)
    return TokenCredentials(username=username, access_token=result["access_token"])


def prompt_manual_credentials(console: Console) -> PasswordCredentials:
    """Ask for an address until it is valid, then for a non-empty password."""
    while True:
        console.write_line("Please enter your valid Office 365 Email ID")
        email_id = console.read_line()
        if is_valid_email(email_id):
            break

    while True:
        console.write_line("Please enter your Office 365 Password")
        password = read_masked(console)
        if password:
            break

    return PasswordCredentials(username=email_id, password=password)


def resolve_credentials(
    console: Console,
    settings: Settings,
    session: Session,
    argv: list[str] | None = None,
    app_factory: Callable[..., Any] = msal.PublicClientApplication,
) -> MailCredential:
    """
    Return credentials for this menu cycle.

    Cached interactive credentials are reused. Otherwise interactive sign-in
    is attempted and, on any failure, the user is asked for credentials.
    """
    if session.authenticated:
        return session.credentials

    logger.debug("Resolving credentials (argv=%s)", argv or [])
    console.write_line("Please login to your Microsoft account! \n")
    try:
        credentials = acquire_interactive_token(settings, app_factory=app_factory)
    except ConfigurationMissingError:
        console.write_line("Please set the environment variables for ClientID and Tenant ID.")
    except InteractiveAuthError as e:
        console.write_line(f"Error acquiring access token: {e}")
    except Exception as e:
        logger.warning("Interactive sign-in failed: %s", e.__class__.__name__)
        console.write_line(f"Error: {e}")
    else:
        session.remember(credentials)
        return credentials

    console.write_line("We could not process your request! Falling back to manual authentication. \n")
    return prompt_manual_credentials(console)
