"""
MailChamp Console
=================

Interactive menu: sign in, then compose an email or read the 100 most
recent ones. Faults from a menu cycle are reported once here and the user
chooses to restart or quit.

INVARIANTS ENFORCED:
- INV-DISPATCH-01: Invalid selections re-prompt without limit
- INV-LOOP-01: Single top-level fault handler
- INV-LOOP-03: Restarted cycles reuse the session
- INV-READ-02: No logging of message bodies
"""

from __future__ import annotations

import logging
import re
import sys
from typing import TYPE_CHECKING

from contracts import (
    DispatchState,
    InvalidConfigurationError,
    MenuOption,
    OutgoingMessage,
    ReceivedMessage,
)
from src.mailchamp.auth import resolve_credentials
from src.mailchamp.config import FETCH_LIMIT, Settings, load_settings
from src.mailchamp.console import ENTER_KEYS, TerminalConsole
from src.mailchamp.credentials import Session
from src.mailchamp.transport import MailTransport
from src.mailchamp.validation import collect_recipients

if TYPE_CHECKING:
    from contracts import MailCredential, MailTransportContract
    from src.mailchamp.console import Console

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger("mailchamp")

MENU = "\n1) Enter 1 to Compose Email\n2) Enter 2 to Read Top 100 Emails"
RESTART_PROMPT = "Please press c to start from main menu. Any other key to quit\n"
MESSAGE_HEADER = "---------------------------------------- Message {index} ----------------------------------------------"
MESSAGE_FOOTER = "---------------------------------------- End of Message ----------------------------------------------\n\n"
RECEIVED_FORMAT = "%d/%b/%Y %H:%M"

_MENU_NUMBER_RE = re.compile(r"[+-]?[0-9]+")

_OPERATION_STATES = (DispatchState.COMPOSING, DispatchState.READING_AND_DISPLAYING)


def parse_menu_selection(raw: str | None) -> MenuOption | None:
    """Map a menu answer to an option, or None when it is not one."""
    if raw is None:
        return None
    stripped = raw.strip()
    # ASCII digits only; int() would also take "0_1" and other scripts' digits
    if not _MENU_NUMBER_RE.fullmatch(stripped):
        return None
    try:
        return MenuOption(int(stripped))
    except ValueError:
        return None


def format_received_message(index: int, message: ReceivedMessage) -> str:
    """Render one fetched message as a bordered text block."""
    return "\n".join(
        [
            MESSAGE_HEADER.format(index=index),
            f"On: {message.received.strftime(RECEIVED_FORMAT)}",
            f"From: {message.sender.address}",
            f"Subject: {message.subject}",
            f"Message: {message.body_text}",
            MESSAGE_FOOTER,
        ]
    )


class MailChampApp:
    """Console session: one sign-in, any number of menu cycles."""

    def __init__(
        self,
        console: Console,
        transport: MailTransportContract,
        settings: Settings,
        session: Session | None = None,
        auth_resolver=resolve_credentials,
    ) -> None:
        self._console = console
        self._transport = transport
        self._settings = settings
        self._session = session if session is not None else Session()
        self._resolve = auth_resolver

    @property
    def session(self) -> Session:
        return self._session

    def run(self, argv: list[str] | None = None) -> int:
        """Run menu cycles until the user quits or input ends."""
        while True:
            try:
                self.run_cycle(argv)
            except (EOFError, KeyboardInterrupt):
                return 0
            except Exception as e:
                logger.info("Menu cycle failed: %s", e.__class__.__name__)
                self._console.write_line(str(e))

            try:
                if not self._ask_restart():
                    return 0
            except (EOFError, KeyboardInterrupt):
                return 0
            self._console.clear()

    def run_cycle(self, argv: list[str] | None = None) -> DispatchState:
        self._console.write_line(
            "Welcome to MailChamp! You can send or receive Email using this program.\n"
        )
        credentials = self._resolve(self._console, self._settings, self._session, argv)
        return self.dispatch(credentials)

    def _ask_restart(self) -> bool:
        self._console.write_line(RESTART_PROMPT)
        key = self._console.read_key()
        if key not in ENTER_KEYS:
            self._console.discard_line()
        return key.lower() == "c"

    def dispatch(self, credentials: MailCredential) -> DispatchState:
        """
        Show the menu until a valid option is chosen, then run it.

        Returns the state the dispatcher finished in.
        """
        state = DispatchState.START
        while state not in _OPERATION_STATES:
            state = DispatchState.AWAITING_SELECTION
            self._console.write_line(MENU)
            option = parse_menu_selection(self._console.read_line())

            if option is MenuOption.COMPOSE:
                state = DispatchState.COMPOSING
            elif option is MenuOption.READ:
                state = DispatchState.READING_AND_DISPLAYING
            else:
                state = DispatchState.INVALID_SELECTION
                self._console.write_line("Invalid Option! Please try again!")
            logger.debug("Dispatcher state: %s", state.name)

        if state is DispatchState.COMPOSING:
            self.compose_email(credentials)
        else:
            self.read_emails(credentials)
        return state

    def compose_email(self, credentials: MailCredential) -> None:
        """Collect recipients, subject and body, then send."""
        recipients = collect_recipients(self._console)
        if not recipients:
            self._console.write_line("No valid recipients were found!")
            return

        self._console.write_line("Enter the subject")
        subject = self._read_optional_line()

        self._console.write_line(
            "Please enter the message you want to send. You can include HTML tags also!"
        )
        body = self._read_optional_line()

        message = OutgoingMessage(
            sender=credentials.username,
            recipients=tuple(recipients),
            subject=subject,
            body=body,
        )
        self._transport.send_message(credentials, message)
        self._console.write_line("Email Sent successfully")

    def _read_optional_line(self) -> str:
        """Read a line that may be left empty; end of input counts as empty."""
        try:
            return self._console.read_line() or ""
        except EOFError:
            return ""

    def read_emails(self, credentials: MailCredential) -> None:
        """Fetch the most recent messages and print them in order."""
        messages = self._transport.fetch_recent(credentials, limit=FETCH_LIMIT)
        self.display_received(messages)

    def display_received(self, messages: list[ReceivedMessage]) -> None:
        for index, message in enumerate(messages, start=1):
            self._console.write_line(format_received_message(index, message))


def configure_logging(level_name: str) -> None:
    """Configure the process logger. Never log credentials or bodies."""
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT)


def create_app(settings: Settings, console: Console | None = None) -> MailChampApp:
    """Create an app wired to the real terminal and mail servers."""
    return MailChampApp(
        console=console or TerminalConsole(),
        transport=MailTransport(settings),
        settings=settings,
    )


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    try:
        settings = load_settings()
    except InvalidConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    configure_logging(settings.log_level)
    return create_app(settings).run(argv)
