"""
MailChamp Console Contract
==========================

Interactive console tool to send email or read the 100 most recent messages
of an Office 365 mailbox.

This contract defines the required behavior of all public interfaces.
Implementation SHALL perform ONLY declared behaviors.

CONSTITUTIONAL REFERENCE:
- CL12: Design by Contract (PRE/POST/INV/ERRORS mandatory)
- CL12-E: Test Traceability (all tests must cite clause IDs)

AUTHORITY: This file is the SINGLE authoritative source for MailChamp behavior.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, auto
from typing import Protocol, runtime_checkable


# =============================================================================
# DOMAIN TYPES
# =============================================================================

class MenuOption(Enum):
    """Operations offered by the main menu."""
    COMPOSE = 1
    READ = 2


class DispatchState(Enum):
    """States of the operation dispatcher."""
    START = auto()
    AWAITING_SELECTION = auto()
    COMPOSING = auto()
    READING_AND_DISPLAYING = auto()
    INVALID_SELECTION = auto()


@dataclass(frozen=True)
class EmailAddress:
    """Structured email address."""
    address: str
    name: str | None = None


@dataclass(frozen=True)
class OutgoingMessage:
    """Message composed at the console, held only for one send."""
    sender: str
    recipients: tuple[EmailAddress, ...]
    subject: str
    body: str  # may contain HTML


@dataclass(frozen=True)
class ReceivedMessage:
    """Message fetched from the mailbox, used for display only."""
    received: datetime
    sender: EmailAddress
    subject: str
    body_text: str


# =============================================================================
# ERROR TYPES
# =============================================================================

class MailChampError(Exception):
    """Base error for all MailChamp operations."""
    code: str
    message: str


class ConfigurationMissingError(MailChampError):
    """
    ERRORS-AUTH-01: OAuth client or tenant identifier not configured.

    RECOVERY: Reported. Fall back to manual credential entry.
    """
    code = "CONFIG_MISSING"


class InvalidConfigurationError(MailChampError):
    """
    ERRORS-CONFIG-01: A configuration value cannot be parsed.

    RECOVERY: Fatal. User must correct the environment.
    """
    code = "CONFIG_INVALID"


class InteractiveAuthError(MailChampError):
    """
    ERRORS-AUTH-02: Identity provider did not issue a usable token.

    RECOVERY: Reported. Fall back to manual credential entry.
    """
    code = "INTERACTIVE_AUTH_FAILED"


class AuthFailedError(MailChampError):
    """
    ERRORS-TRANSPORT-01: Mail server rejected the credentials.

    RECOVERY: Reported at top level. User may restart from the main menu.
    """
    code = "AUTH_FAILED"


class ConnectionFailedError(MailChampError):
    """
    ERRORS-TRANSPORT-02: Network unreachable or host not found.

    RECOVERY: Reported at top level. User may restart from the main menu.
    """
    code = "CONNECTION_FAILED"


class NotConnectedError(MailChampError):
    """
    ERRORS-TRANSPORT-03: Mailbox operation attempted before connect.

    RECOVERY: Programming error. Reported at top level.
    """
    code = "NOT_CONNECTED"


class SendFailedError(MailChampError):
    """
    ERRORS-TRANSPORT-04: Server refused the message or its recipients.

    RECOVERY: Reported at top level. Nothing was sent.
    """
    code = "SEND_FAILED"


class FetchFailedError(MailChampError):
    """
    ERRORS-TRANSPORT-05: Mailbox could not be selected or read.

    RECOVERY: Reported at top level. Nothing was displayed.
    """
    code = "FETCH_FAILED"


# =============================================================================
# INPUT CONTRACTS
# =============================================================================

@runtime_checkable
class AddressValidatorContract(Protocol):
    """
    Function: is_valid_email

    POST-VALIDATE-01: True iff value is local "@" domain, domain has a dot
    POST-VALIDATE-02: Any value with whitespace returns False
    POST-VALIDATE-03: None or non-string returns False

    INV-VALIDATE-01 (Pure): Same input = same output, no side effects

    ERRORS: None (malformed input yields False)
    """

    def __call__(self, value: object) -> bool:
        ...


@runtime_checkable
class MaskedReaderContract(Protocol):
    """
    Function: read_masked

    POST-MASK-01: Returns typed characters up to Enter, without terminator
    POST-MASK-02: Delete removes last character (no-op when empty)
    POST-MASK-03: Arrow and function keys (multi-character sequences) are skipped

    INV-MASK-01 (Secrecy): Only mask characters and retractions are written,
                never the plaintext

    ERRORS: None
    """

    def __call__(self, console: object, mask: str = "*") -> str:
        ...


@runtime_checkable
class RecipientCollectorContract(Protocol):
    """
    Function: collect_recipients

    PRE-RECIPIENTS-01: Console can supply lines

    POST-RECIPIENTS-01: Empty input re-prompts until non-empty
    POST-RECIPIENTS-02: Single address: singleton if valid, else empty list
    POST-RECIPIENTS-03: Comma list: each candidate trimmed then validated,
                        valid ones kept in input order
    POST-RECIPIENTS-04: One warning per invalid candidate naming its text

    INV-RECIPIENTS-01: EmailAddress never built from an unvalidated string

    ERRORS: None
    """

    def __call__(self, console: object) -> list[EmailAddress]:
        ...


# =============================================================================
# AUTHENTICATION CONTRACT
# =============================================================================

@runtime_checkable
class MailCredential(Protocol):
    """
    Capability: anything that can authenticate a mail connection.

    INV-CRED-01 (Memory Only): Never written to disk, environment or logs
    INV-CRED-02 (Immutable): Frozen once obtained
    """

    username: str

    def login_imap(self, client: object) -> None:
        ...

    def login_smtp(self, smtp: object) -> None:
        ...


@runtime_checkable
class AuthResolverContract(Protocol):
    """
    Function: resolve_credentials

    SEQUENCE:
    1. Cached session credentials are returned unchanged
    2. Interactive OAuth when client and tenant identifiers are configured
    3. Manual address + masked password entry otherwise

    POST-AUTH-01: Returns a MailCredential
    POST-AUTH-02: Successful interactive credentials cached in session
    POST-AUTH-03: Missing configuration reported, fallback used
    POST-AUTH-04: Interactive failure reported, fallback used

    INV-AUTH-01 (Single Sign-in): Session written at most once per process
    INV-AUTH-02 (Never Fatal): Interactive failures never abort the cycle

    ERRORS:
    - CONFIG_MISSING: handled internally → fallback
    - INTERACTIVE_AUTH_FAILED: handled internally → fallback
    """

    def __call__(self, console: object, settings: object, session: object,
                 argv: list[str] | None = None) -> MailCredential:
        ...


# =============================================================================
# OPERATION CONTRACTS
# =============================================================================

@runtime_checkable
class DispatcherContract(Protocol):
    """
    Operation: dispatch

    STATES: START → AWAITING_SELECTION → COMPOSING | READING_AND_DISPLAYING
            AWAITING_SELECTION → INVALID_SELECTION → AWAITING_SELECTION

    POST-DISPATCH-01: "1" runs compose, "2" runs read-and-display
    POST-DISPATCH-02: Any other input re-prompts with same credentials

    INV-DISPATCH-01: No retry cap on invalid selections
    """

    def dispatch(self, credentials: MailCredential) -> DispatchState:
        ...


@runtime_checkable
class SendFlowContract(Protocol):
    """
    Operation: compose_email

    POST-SEND-01: No valid recipients → reported, nothing sent
    POST-SEND-02: Subject and body default to "" when input is absent
    POST-SEND-03: Success reported only after transport returns

    INV-SEND-01: Transport errors propagate to the top-level handler

    ERRORS:
    - AUTH_FAILED, CONNECTION_FAILED, SEND_FAILED (propagated)
    """

    def compose_email(self, credentials: MailCredential) -> None:
        ...


@runtime_checkable
class ReadDisplayContract(Protocol):
    """
    Operation: read_emails

    POST-READ-01: At most 100 messages requested from transport
    POST-READ-02: Messages rendered in transport order, numbered from 1
    POST-READ-03: Timestamp rendered dd/Mon/yyyy HH:MM

    INV-READ-01 (Read-Only): Fetch MUST NOT modify message flags
    INV-READ-02 (No Content Logging): Bodies never logged

    ERRORS:
    - AUTH_FAILED, CONNECTION_FAILED, FETCH_FAILED (propagated)
    """

    def read_emails(self, credentials: MailCredential) -> None:
        ...


@runtime_checkable
class MailTransportContract(Protocol):
    """
    Collaborator: mail transport

    POST-TRANSPORT-01: send_message returns None or raises
    POST-TRANSPORT-02: fetch_recent returns newest first, len <= limit

    INV-TRANSPORT-01: One connection per call, always closed
    """

    def send_message(self, credentials: MailCredential, message: OutgoingMessage) -> None:
        ...

    def fetch_recent(self, credentials: MailCredential, limit: int = 100) -> list[ReceivedMessage]:
        ...


# =============================================================================
# TOP-LEVEL LOOP
# =============================================================================

"""
INV-LOOP-01 (Single Handler): Any fault during a menu cycle is caught once at
             the outermost level and its message printed.

INV-LOOP-02 (Human Recovery): After success or fault, "c" restarts from the
             main menu, any other key quits.

INV-LOOP-03 (Session Reuse): A restarted cycle reuses cached credentials.
"""


# =============================================================================
# TEST CASE INDEX (CL12-E Traceability)
# =============================================================================

TEST_CASES = {
    # Address validator
    "test_validate_accepts_conventional_addresses": {
        "contract": "AddressValidatorContract",
        "enforces": ["POST-VALIDATE-01"],
    },
    "test_validate_rejects_missing_at_or_dot": {
        "contract": "AddressValidatorContract",
        "enforces": ["POST-VALIDATE-01"],
    },
    "test_validate_rejects_whitespace": {
        "contract": "AddressValidatorContract",
        "enforces": ["POST-VALIDATE-02"],
    },
    "test_validate_rejects_non_strings": {
        "contract": "AddressValidatorContract",
        "enforces": ["POST-VALIDATE-03"],
    },
    "test_validate_is_pure": {
        "contract": "AddressValidatorContract",
        "enforces": ["INV-VALIDATE-01"],
    },

    # Masking reader
    "test_masked_read_with_delete": {
        "contract": "MaskedReaderContract",
        "enforces": ["POST-MASK-01", "POST-MASK-02"],
    },
    "test_masked_read_never_echoes_plaintext": {
        "contract": "MaskedReaderContract",
        "enforces": ["INV-MASK-01"],
        "adversarial": True,
        "description": "Verify typed characters never reach console output",
    },
    "test_masked_read_skips_posix_escape_sequences": {
        "contract": "MaskedReaderContract",
        "enforces": ["POST-MASK-03", "INV-MASK-01"],
    },
    "test_masked_read_skips_windows_prefixed_keys": {
        "contract": "MaskedReaderContract",
        "enforces": ["POST-MASK-03", "INV-MASK-01"],
    },

    # Recipient collector
    "test_recipients_reprompt_on_empty": {
        "contract": "RecipientCollectorContract",
        "enforces": ["PRE-RECIPIENTS-01", "POST-RECIPIENTS-01"],
    },
    "test_recipients_single_address": {
        "contract": "RecipientCollectorContract",
        "enforces": ["POST-RECIPIENTS-02"],
    },
    "test_recipients_mixed_list": {
        "contract": "RecipientCollectorContract",
        "enforces": ["POST-RECIPIENTS-03", "POST-RECIPIENTS-04", "INV-RECIPIENTS-01"],
    },

    # Authentication
    "test_auth_interactive_success": {
        "contract": "AuthResolverContract",
        "enforces": ["POST-AUTH-01", "POST-AUTH-02"],
    },
    "test_auth_missing_configuration_falls_back": {
        "contract": "AuthResolverContract",
        "enforces": ["POST-AUTH-03", "ERRORS: CONFIG_MISSING"],
    },
    "test_auth_interactive_failure_falls_back": {
        "contract": "AuthResolverContract",
        "enforces": ["POST-AUTH-04", "INV-AUTH-02", "ERRORS: INTERACTIVE_AUTH_FAILED"],
    },
    "test_auth_session_written_once": {
        "contract": "AuthResolverContract",
        "enforces": ["INV-AUTH-01"],
        "adversarial": True,
    },
    "test_credentials_are_frozen": {
        "contract": "MailCredential",
        "enforces": ["INV-CRED-02"],
    },
    "test_credentials_not_logged": {
        "contract": "MailCredential",
        "enforces": ["INV-CRED-01"],
        "adversarial": True,
        "description": "Verify password and token never appear in log output",
    },

    # Dispatcher
    "test_dispatch_invalid_then_compose": {
        "contract": "DispatcherContract",
        "enforces": ["POST-DISPATCH-01", "POST-DISPATCH-02"],
    },
    "test_dispatch_non_numeric_loops": {
        "contract": "DispatcherContract",
        "enforces": ["INV-DISPATCH-01"],
    },

    # Send flow
    "test_send_no_valid_recipients": {
        "contract": "SendFlowContract",
        "enforces": ["POST-SEND-01"],
    },
    "test_send_success": {
        "contract": "SendFlowContract",
        "enforces": ["POST-SEND-02", "POST-SEND-03"],
    },
    "test_send_defaults_at_end_of_input": {
        "contract": "SendFlowContract",
        "enforces": ["POST-SEND-02"],
    },

    # Read/display flow
    "test_read_renders_in_order": {
        "contract": "ReadDisplayContract",
        "enforces": ["POST-READ-01", "POST-READ-02", "POST-READ-03"],
    },
    "test_fetch_does_not_mark_read": {
        "contract": "ReadDisplayContract",
        "enforces": ["INV-READ-01"],
        "adversarial": True,
        "description": "Verify folder selected readonly and BODY.PEEK used",
    },
    "test_fetch_no_body_logging": {
        "contract": "ReadDisplayContract",
        "enforces": ["INV-READ-02"],
        "adversarial": True,
    },

    # Transport
    "test_smtp_send_success": {
        "contract": "MailTransportContract",
        "enforces": ["POST-TRANSPORT-01"],
    },
    "test_transport_closes_connection": {
        "contract": "MailTransportContract",
        "enforces": ["INV-TRANSPORT-01"],
    },
    "test_fetch_newest_first": {
        "contract": "MailTransportContract",
        "enforces": ["POST-TRANSPORT-02"],
    },

    # Top-level loop
    "test_loop_reports_fault_and_restarts": {
        "contract": "INV-LOOP-01",
        "enforces": ["INV-LOOP-01", "INV-LOOP-02", "INV-SEND-01"],
    },
    "test_loop_reuses_session": {
        "contract": "INV-LOOP-03",
        "enforces": ["INV-LOOP-03"],
    },
    "test_loop_restart_key_from_pipe": {
        "contract": "INV-LOOP-02",
        "enforces": ["INV-LOOP-02"],
    },
}
