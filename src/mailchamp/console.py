"""
Console I/O
===========

Thin seam over the terminal so prompts and key reads can be scripted in tests.

INV-MASK-01: read_masked never writes the characters it reads.
"""

from __future__ import annotations

import codecs
import os
import select
import sys
from typing import Protocol

ENTER_KEYS = frozenset({"\r", "\n"})
DELETE_KEYS = frozenset({"\x7f", "\b"})
INTERRUPT_KEY = "\x03"
ESCAPE_KEY = "\x1b"
# getwch() returns one of these before the scan code of a function or arrow key
WINDOWS_PREFIX_KEYS = frozenset({"\x00", "\xe0"})
ESCAPE_TIMEOUT = 0.05


class Console(Protocol):
    """Line and key oriented console."""

    def write(self, text: str) -> None:
        ...

    def write_line(self, text: str = "") -> None:
        ...

    def read_line(self) -> str | None:
        ...

    def read_key(self) -> str:
        ...

    def discard_line(self) -> None:
        ...

    def clear(self) -> None:
        ...


class TerminalConsole:
    """Console backed by the process's stdin/stdout."""

    def __init__(self, stdin=None, stdout=None) -> None:
        self._stdin = stdin or sys.stdin
        self._stdout = stdout or sys.stdout

    def write(self, text: str) -> None:
        self._stdout.write(text)
        self._stdout.flush()

    def write_line(self, text: str = "") -> None:
        self.write(text + "\n")

    def read_line(self) -> str | None:
        line = self._stdin.readline()
        if line == "":
            raise EOFError("End of input")
        return line.rstrip("\r\n")

    def read_key(self) -> str:
        """
        Read one key press without echo.

        Arrow and function keys arrive as several characters; they are
        skipped and the next real key is returned.
        """
        if not self._stdin.isatty():
            key = self._stdin.read(1)
            if key == "":
                raise EOFError("End of input")
            return key

        try:
            import msvcrt
        except ImportError:
            key = self._read_posix_key()
        else:
            key = self._read_windows_key(msvcrt)

        if key == INTERRUPT_KEY:
            raise KeyboardInterrupt
        return key

    def discard_line(self) -> None:
        """Drop what is left of the current line after a piped key read."""
        if not self._stdin.isatty():
            self._stdin.readline()

    @staticmethod
    def _read_windows_key(msvcrt) -> str:
        while True:
            key = msvcrt.getwch()
            if key not in WINDOWS_PREFIX_KEYS:
                return key
            msvcrt.getwch()

    def _read_posix_key(self) -> str:
        import termios
        import tty

        fd = self._stdin.fileno()
        previous = termios.tcgetattr(fd)
        try:
            tty.setraw(fd)
            while True:
                key = self._read_char(fd)
                if key != ESCAPE_KEY or not self._pending(fd):
                    return key
                self._skip_escape_sequence(fd)
        finally:
            termios.tcsetattr(fd, termios.TCSADRAIN, previous)

    def _read_char(self, fd: int) -> str:
        # Unbuffered so select() sees the rest of an escape sequence
        encoding = getattr(self._stdin, "encoding", None) or "utf-8"
        decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        while True:
            data = os.read(fd, 1)
            if not data:
                raise EOFError("End of input")
            char = decoder.decode(data)
            if char:
                return char

    @staticmethod
    def _pending(fd: int) -> bool:
        readable, _, _ = select.select([fd], [], [], ESCAPE_TIMEOUT)
        return bool(readable)

    def _skip_escape_sequence(self, fd: int) -> None:
        """Consume a CSI or SS3 sequence up to its final byte."""
        if self._read_char(fd) not in ("[", "O"):
            return
        while True:
            char = self._read_char(fd)
            if "@" <= char <= "~":
                return

    def clear(self) -> None:
        if self._stdout.isatty():
            self.write("\033[2J\033[H")


def read_masked(console: Console, mask: str = "*") -> str:
    """
    Read a secret one key at a time, echoing ``mask`` for each character.

    Delete removes the last character and retracts one mask from the screen.
    Enter accepts; the terminator is not part of the result.
    """
    chars: list[str] = []
    while True:
        key = console.read_key()
        if key in ENTER_KEYS:
            break
        if key in DELETE_KEYS:
            if chars:
                chars.pop()
                console.write("\b \b")
            continue
        chars.append(key)
        console.write(mask)
    return "".join(chars)
