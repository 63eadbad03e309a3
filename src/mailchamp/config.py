"""
Configuration
=============

Settings are read from environment variables once at startup.

AZ_ClientID / AZ_TenantId enable interactive sign-in; without them the
console falls back to manual credential entry.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass

from contracts import InvalidConfigurationError

CLIENT_ID_VAR = "AZ_ClientID"
TENANT_ID_VAR = "AZ_TenantId"

MAIL_SCOPES = (
    "https://outlook.office.com/IMAP.AccessAsUser.All",
    "https://outlook.office.com/SMTP.Send",
)
AUTHORITY_TEMPLATE = "https://login.microsoftonline.com/{tenant}"
FETCH_LIMIT = 100


@dataclass(frozen=True)
class Settings:
    """Runtime settings. Holds no secrets."""

    client_id: str | None = None
    tenant_id: str | None = None
    imap_server: str = "outlook.office365.com"
    imap_port: int = 993
    smtp_server: str = "smtp.office365.com"
    smtp_port: int = 587
    log_level: str = "WARNING"

    @property
    def oauth_configured(self) -> bool:
        return bool(self.client_id) and bool(self.tenant_id)

    @property
    def authority(self) -> str:
        return AUTHORITY_TEMPLATE.format(tenant=self.tenant_id)


def _port(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise InvalidConfigurationError(f"{name} must be an integer, got {raw!r}") from e


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """
    Build Settings from the environment.

    ERRORS:
    - InvalidConfigurationError: a port variable is not an integer
    """
    if environ is None:
        environ = os.environ

    defaults = Settings()
    return Settings(
        client_id=environ.get(CLIENT_ID_VAR) or None,
        tenant_id=environ.get(TENANT_ID_VAR) or None,
        imap_server=environ.get("MAILCHAMP_IMAP_SERVER") or defaults.imap_server,
        imap_port=_port(environ, "MAILCHAMP_IMAP_PORT", defaults.imap_port),
        smtp_server=environ.get("MAILCHAMP_SMTP_SERVER") or defaults.smtp_server,
        smtp_port=_port(environ, "MAILCHAMP_SMTP_PORT", defaults.smtp_port),
        log_level=(environ.get("MAILCHAMP_LOG_LEVEL") or defaults.log_level).upper(),
    )
