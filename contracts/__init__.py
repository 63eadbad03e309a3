"""
MailChamp Contract Index
========================

AUTHORITY: This file is the SINGLE authoritative entrypoint for all
MailChamp contracts. Import from here, not from individual contract files.

CONSTITUTIONAL REFERENCE: CL12-C (Single Authoritative Source)
"""

from contracts.mail_console_contract import (
    # Test Case Index
    TEST_CASES,
    # Contracts (Protocols)
    AddressValidatorContract,
    AuthFailedError,
    AuthResolverContract,
    ConfigurationMissingError,
    ConnectionFailedError,
    DispatcherContract,
    # Domain Types
    DispatchState,
    EmailAddress,
    FetchFailedError,
    InteractiveAuthError,
    InvalidConfigurationError,
    MailCredential,
    # Error Types
    MailChampError,
    MailTransportContract,
    MaskedReaderContract,
    MenuOption,
    NotConnectedError,
    OutgoingMessage,
    ReadDisplayContract,
    ReceivedMessage,
    RecipientCollectorContract,
    SendFailedError,
    SendFlowContract,
)

__all__ = [
    # Domain Types
    "MenuOption",
    "DispatchState",
    "EmailAddress",
    "OutgoingMessage",
    "ReceivedMessage",
    # Error Types
    "MailChampError",
    "ConfigurationMissingError",
    "InvalidConfigurationError",
    "InteractiveAuthError",
    "AuthFailedError",
    "ConnectionFailedError",
    "NotConnectedError",
    "SendFailedError",
    "FetchFailedError",
    # Contracts
    "AddressValidatorContract",
    "MaskedReaderContract",
    "RecipientCollectorContract",
    "MailCredential",
    "AuthResolverContract",
    "DispatcherContract",
    "SendFlowContract",
    "ReadDisplayContract",
    "MailTransportContract",
    # Test Traceability
    "TEST_CASES",
    # Functions
    "audit_contract_coverage",
]


def audit_contract_coverage() -> dict:
    """
    Audit which contract clauses have test coverage.

    Returns dict with:
    - covered: clauses with at least one test
    - uncovered: clauses with no tests
    - test_count: total tests defined
    """
    covered_clauses = set()
    for test_name, test_info in TEST_CASES.items():
        for clause in test_info.get("enforces", []):
            covered_clauses.add(clause)

    # All PRE/POST/INV/ERRORS clauses from contracts
    all_clauses = set()

    # Input clauses
    all_clauses.update(
        [
            "POST-VALIDATE-01",
            "POST-VALIDATE-02",
            "POST-VALIDATE-03",
            "INV-VALIDATE-01",
            "POST-MASK-01",
            "POST-MASK-02",
            "POST-MASK-03",
            "INV-MASK-01",
            "PRE-RECIPIENTS-01",
            "POST-RECIPIENTS-01",
            "POST-RECIPIENTS-02",
            "POST-RECIPIENTS-03",
            "POST-RECIPIENTS-04",
            "INV-RECIPIENTS-01",
        ]
    )

    # Authentication clauses
    all_clauses.update(
        [
            "INV-CRED-01",
            "INV-CRED-02",
            "POST-AUTH-01",
            "POST-AUTH-02",
            "POST-AUTH-03",
            "POST-AUTH-04",
            "INV-AUTH-01",
            "INV-AUTH-02",
            "ERRORS: CONFIG_MISSING",
            "ERRORS: INTERACTIVE_AUTH_FAILED",
        ]
    )

    # Operation clauses
    all_clauses.update(
        [
            "POST-DISPATCH-01",
            "POST-DISPATCH-02",
            "INV-DISPATCH-01",
            "POST-SEND-01",
            "POST-SEND-02",
            "POST-SEND-03",
            "INV-SEND-01",
            "POST-READ-01",
            "POST-READ-02",
            "POST-READ-03",
            "INV-READ-01",
            "INV-READ-02",
            "POST-TRANSPORT-01",
            "POST-TRANSPORT-02",
            "INV-TRANSPORT-01",
        ]
    )

    # Top-level loop
    all_clauses.update(
        [
            "INV-LOOP-01",
            "INV-LOOP-02",
            "INV-LOOP-03",
        ]
    )

    uncovered = all_clauses - covered_clauses

    return {
        "covered": sorted(covered_clauses),
        "uncovered": sorted(uncovered),
        "test_count": len(TEST_CASES),
        "coverage_pct": round(len(covered_clauses) / len(all_clauses) * 100, 1),
    }
