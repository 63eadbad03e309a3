"""Shared test doubles."""

import pytest


class ScriptedConsole:
    """Console that replays scripted lines and keys and records output."""

    def __init__(self, lines=(), keys=()):
        self.lines = list(lines)
        self.keys = list(keys)
        self.output = []
        self.clears = 0

    def write(self, text):
        self.output.append(text)

    def write_line(self, text=""):
        self.output.append(text + "\n")

    def read_line(self):
        if not self.lines:
            raise EOFError("script exhausted")
        return self.lines.pop(0)

    def read_key(self):
        if not self.keys:
            raise EOFError("script exhausted")
        return self.keys.pop(0)

    def discard_line(self):
        pass

    def clear(self):
        self.clears += 1

    @property
    def text(self):
        return "".join(self.output)


@pytest.fixture
def make_console():
    """Factory for scripted consoles."""
    return ScriptedConsole
