"""
MailChamp Contract Verification Tests
=====================================

CL12-E TRACEABILITY: Every test cites specific contract clause IDs.
Covers the pure input layer: address validation, masked reads and recipient
parsing, plus the contract module itself.

CONTRACT AUTHORITY: contracts/mail_console_contract.py
"""

import dataclasses
import io
import sys
from unittest.mock import MagicMock, patch

import pytest

# Contract imports - ALWAYS from index, never direct
from contracts import (
    TEST_CASES,
    AuthFailedError,
    ConfigurationMissingError,
    ConnectionFailedError,
    EmailAddress,
    FetchFailedError,
    InteractiveAuthError,
    InvalidConfigurationError,
    MailChampError,
    MailCredential,
    NotConnectedError,
    SendFailedError,
)
from src.mailchamp.console import TerminalConsole, read_masked
from src.mailchamp.credentials import PasswordCredentials, TokenCredentials
from src.mailchamp.validation import collect_recipients, is_valid_email


# =============================================================================
# ADDRESS VALIDATOR TESTS
# =============================================================================

class TestAddressValidatorContract:
    """Tests for is_valid_email."""

    @pytest.mark.parametrize(
        "value",
        [
            "a@b.com",
            "x@y.co",
            "first.last+tag@mail.example.org",
            "user_name@sub-domain.example.co.uk",
        ],
    )
    def test_validate_accepts_conventional_addresses(self, value):
        """
        Contract: AddressValidatorContract
        Enforces: POST-VALIDATE-01
        """
        assert is_valid_email(value) is True

    @pytest.mark.parametrize(
        "value",
        [
            "",
            "plainaddress",
            "a@b",
            "@b.com",
            "a@.com",
            "a@b.",
            "a@@b.com",
            "a@b@c.com",
        ],
    )
    def test_validate_rejects_missing_at_or_dot(self, value):
        """
        Contract: AddressValidatorContract
        Enforces: POST-VALIDATE-01
        """
        assert is_valid_email(value) is False

    @pytest.mark.parametrize("value", ["a b@c.com", "a@b .com", " a@b.com", "a@b.com\t"])
    def test_validate_rejects_whitespace(self, value):
        """
        Contract: AddressValidatorContract
        Enforces: POST-VALIDATE-02
        """
        assert is_valid_email(value) is False

    @pytest.mark.parametrize("value", [None, 42, b"a@b.com", ["a@b.com"]])
    def test_validate_rejects_non_strings(self, value):
        """
        Contract: AddressValidatorContract
        Enforces: POST-VALIDATE-03
        """
        assert is_valid_email(value) is False

    def test_validate_is_pure(self):
        """
        Contract: AddressValidatorContract
        Enforces: INV-VALIDATE-01
        """
        for value in ["a@b.com", "bad", ""]:
            assert is_valid_email(value) == is_valid_email(value)


# =============================================================================
# MASKED READER TESTS
# =============================================================================

class TestMaskedReaderContract:
    """Tests for read_masked."""

    def test_masked_read_with_delete(self, make_console):
        """
        Contract: MaskedReaderContract
        Enforces: POST-MASK-01, POST-MASK-02
        """
        console = make_console(keys=["a", "b", "\x7f", "c", "\r"])

        assert read_masked(console) == "ac"
        assert console.text == "**\b \b*"

    def test_masked_read_delete_on_empty_is_noop(self, make_console):
        """
        Contract: MaskedReaderContract
        Enforces: POST-MASK-02
        """
        console = make_console(keys=["\b", "x", "\n"])

        assert read_masked(console) == "x"
        assert console.text == "*"

    def test_masked_read_never_echoes_plaintext(self, make_console):
        """
        Contract: MaskedReaderContract
        Enforces: INV-MASK-01
        Adversarial: True
        """
        secret = "S3cr3t!pw"
        console = make_console(keys=list(secret) + ["\r"])

        assert read_masked(console, mask="#") == secret
        assert console.text == "#" * len(secret)
        for char in set(secret):
            assert char not in console.text

    def test_masked_read_skips_posix_escape_sequences(self):
        """
        Contract: MaskedReaderContract
        Enforces: POST-MASK-03, INV-MASK-01
        """
        stdin = MagicMock(encoding="utf-8")
        stdin.isatty.return_value = True
        stdin.fileno.return_value = 0
        stdout = io.StringIO()
        console = TerminalConsole(stdin=stdin, stdout=stdout)

        raw_terminal = {"termios": MagicMock(), "tty": MagicMock(), "msvcrt": None}
        with patch.dict(sys.modules, raw_terminal), \
                patch("src.mailchamp.console.os.read", side_effect=[b"\x1b", b"[", b"A", b"a", b"\r"]), \
                patch("src.mailchamp.console.select.select", return_value=([0], [], [])):
            assert read_masked(console) == "a"

        assert stdout.getvalue() == "*"

    def test_masked_read_skips_windows_prefixed_keys(self):
        """
        Contract: MaskedReaderContract
        Enforces: POST-MASK-03, INV-MASK-01
        """
        stdin = MagicMock()
        stdin.isatty.return_value = True
        stdout = io.StringIO()
        msvcrt = MagicMock()
        msvcrt.getwch.side_effect = ["\xe0", "H", "\x00", ";", "b", "\r"]

        with patch.dict(sys.modules, {"msvcrt": msvcrt}):
            assert read_masked(TerminalConsole(stdin=stdin, stdout=stdout)) == "b"

        assert stdout.getvalue() == "*"


# =============================================================================
# RECIPIENT COLLECTOR TESTS
# =============================================================================

class TestRecipientCollectorContract:
    """Tests for collect_recipients."""

    def test_recipients_reprompt_on_empty(self, make_console):
        """
        Contract: RecipientCollectorContract
        Enforces: PRE-RECIPIENTS-01, POST-RECIPIENTS-01
        """
        console = make_console(lines=["", "   ", "x@y.com"])

        assert collect_recipients(console) == [EmailAddress(address="x@y.com")]
        assert console.text.count("Enter recipients email address(es)") == 3

    def test_recipients_single_address(self, make_console):
        """
        Contract: RecipientCollectorContract
        Enforces: POST-RECIPIENTS-02
        """
        assert collect_recipients(make_console(lines=["  x@y.com  "])) == [
            EmailAddress(address="x@y.com")
        ]

        console = make_console(lines=["not-an-address"])
        assert collect_recipients(console) == []
        assert "Invalid:" not in console.text

    def test_recipients_mixed_list(self, make_console):
        """
        Contract: RecipientCollectorContract
        Enforces: POST-RECIPIENTS-03, POST-RECIPIENTS-04, INV-RECIPIENTS-01
        """
        console = make_console(lines=["a@b.com, bad, c@d.org"])

        result = collect_recipients(console)

        assert result == [EmailAddress(address="a@b.com"), EmailAddress(address="c@d.org")]
        assert console.text.count("Invalid:") == 1
        assert "Invalid:  bad. Ignored from the recipients list" in console.text

    def test_recipients_all_invalid_returns_empty(self, make_console):
        """
        Contract: RecipientCollectorContract
        Enforces: POST-RECIPIENTS-03
        """
        console = make_console(lines=["one,two"])

        assert collect_recipients(console) == []
        assert console.text.count("Invalid:") == 2


# =============================================================================
# CREDENTIAL CONTRACT TESTS
# =============================================================================

class TestMailCredentialContract:
    """Both credential variants satisfy the same capability."""

    def test_both_variants_are_mail_credentials(self):
        """
        Contract: MailCredential
        Enforces: POST-AUTH-01
        """
        assert isinstance(TokenCredentials("me@contoso.com", "tok"), MailCredential)
        assert isinstance(PasswordCredentials("me@contoso.com", "pw"), MailCredential)

    def test_credentials_are_frozen(self):
        """
        Contract: MailCredential
        Enforces: INV-CRED-02
        """
        creds = PasswordCredentials("me@contoso.com", "pw")
        with pytest.raises(dataclasses.FrozenInstanceError):
            creds.password = "other"

    def test_secrets_hidden_from_repr(self):
        """
        Contract: MailCredential
        Enforces: INV-CRED-01
        Adversarial: True
        """
        assert "secret-token" not in repr(TokenCredentials("me@contoso.com", "secret-token"))
        assert "hunter2" not in repr(PasswordCredentials("me@contoso.com", "hunter2"))


# =============================================================================
# ERROR TAXONOMY
# =============================================================================

@pytest.mark.parametrize(
    "error_cls, code",
    [
        (ConfigurationMissingError, "CONFIG_MISSING"),
        (InvalidConfigurationError, "CONFIG_INVALID"),
        (InteractiveAuthError, "INTERACTIVE_AUTH_FAILED"),
        (AuthFailedError, "AUTH_FAILED"),
        (ConnectionFailedError, "CONNECTION_FAILED"),
        (NotConnectedError, "NOT_CONNECTED"),
        (SendFailedError, "SEND_FAILED"),
        (FetchFailedError, "FETCH_FAILED"),
    ],
)
def test_error_codes(error_cls, code):
    assert issubclass(error_cls, MailChampError)
    assert error_cls.code == code
    assert str(error_cls("boom")) == "boom"


# =============================================================================
# CONTRACT COVERAGE AUDIT
# =============================================================================

def test_contract_coverage():
    """
    Meta-test: Verify all contract clauses have test coverage.
    """
    from contracts import audit_contract_coverage

    coverage = audit_contract_coverage()

    print(f"\nContract Coverage: {coverage['coverage_pct']}%")
    print(f"Tests defined: {coverage['test_count']}")

    assert coverage["test_count"] == len(TEST_CASES)
    assert coverage["uncovered"] == [], f"Uncovered clauses: {coverage['uncovered']}"
