"""
Address validation and recipient parsing.

INV-RECIPIENTS-01: EmailAddress is only built from strings that passed
is_valid_email.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from contracts import EmailAddress

if TYPE_CHECKING:
    from src.mailchamp.console import Console

_EMAIL_RE = re.compile(r"[^@\s]+@[^@\s.]+(?:\.[^@\s.]+)+")

RECIPIENTS_PROMPT = "Enter recipients email address(es) as comma(,) separated"
SEPARATOR = ","


def is_valid_email(value: object) -> bool:
    """Return True if ``value`` looks like local@domain.tld."""
    if not isinstance(value, str):
        return False
    return _EMAIL_RE.fullmatch(value) is not None


def collect_recipients(console: Console) -> list[EmailAddress]:
    """
    Read a comma separated recipient list from the console.

    A line without commas is one address: returned as a singleton when
    valid, otherwise an empty list. With commas, every candidate is trimmed
    and validated on its own; invalid ones are reported and skipped.
    """
    while True:
        console.write_line(RECIPIENTS_PROMPT)
        line = (console.read_line() or "").strip()
        if line:
            break

    if SEPARATOR not in line:
        if not is_valid_email(line):
            return []
        return [EmailAddress(address=line)]

    recipients = []
    for candidate in line.split(SEPARATOR):
        address = candidate.strip()
        if is_valid_email(address):
            recipients.append(EmailAddress(address=address))
        else:
            console.write_line(f"Invalid: {candidate}. Ignored from the recipients list")
    return recipients
