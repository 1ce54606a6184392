"""Console output abstraction.

Services report progress (release created, asset uploaded, login lookup
skipped) through ConsoleProtocol instead of printing, so the CLI can pick
Rich output, a quiet mode, or a capturing console in tests.

Levelled messages share one label table, so what a test asserts on
(`"warning: ..."`) is what a user reads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

__all__ = [
    "Style",
    "ConsoleProtocol",
    "RichConsole",
    "QuietConsole",
    "MockConsole",
    "OutputRecord",
]


class Style(Enum):
    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    DIM = auto()
    HEADER = auto()

    def __str__(self) -> str:
        return self.name.lower()


_LABELS: dict[Style, str] = {
    Style.SUCCESS: "OK",
    Style.ERROR: "error:",
    Style.WARNING: "warning:",
    Style.INFO: "info:",
}

_RICH_STYLES: dict[Style, str] = {
    Style.SUCCESS: "green",
    Style.ERROR: "red bold",
    Style.WARNING: "yellow",
    Style.INFO: "cyan",
    Style.DIM: "dim",
    Style.HEADER: "blue bold",
}


def _labelled(style: Style, message: str) -> str:
    return f"{_LABELS[style]} {message}"


class ConsoleProtocol(Protocol):
    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        """Print a message verbatim; `message` is never parsed as markup."""
        ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def header(self, message: str) -> None: ...

    def newline(self) -> None: ...


class RichConsole:
    """Rich-backed console.

    `stderr=True` keeps stdout free for `--json` and `--print-md`.
    """

    def __init__(self, *, stderr: bool = False) -> None:
        from rich.console import Console

        self._console = Console(stderr=stderr, highlight=False)

    def _levelled(self, style: Style, message: str) -> None:
        from rich.text import Text

        line = Text(_LABELS[style], style=_RICH_STYLES[style])
        line.append(f" {message}")
        self._console.print(line)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self._console.print(message, style=_RICH_STYLES.get(style), markup=False)

    def success(self, message: str) -> None:
        self._levelled(Style.SUCCESS, message)

    def error(self, message: str) -> None:
        self._levelled(Style.ERROR, message)

    def warning(self, message: str) -> None:
        self._levelled(Style.WARNING, message)

    def info(self, message: str) -> None:
        self._levelled(Style.INFO, message)

    def header(self, message: str) -> None:
        self._console.print()
        self.print(message, Style.HEADER)

    def newline(self) -> None:
        self._console.print()


class QuietConsole:
    """`--quiet`: forwards errors, drops the rest."""

    def __init__(self, inner: ConsoleProtocol) -> None:
        self._inner = inner

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        if style is Style.ERROR:
            self._inner.print(message, style)

    def error(self, message: str) -> None:
        self._inner.error(message)

    def success(self, message: str) -> None:
        del message

    def warning(self, message: str) -> None:
        del message

    def info(self, message: str) -> None:
        del message

    def header(self, message: str) -> None:
        del message

    def newline(self) -> None:
        pass


@dataclass
class OutputRecord:
    message: str
    style: Style


def _empty_outputs() -> list[OutputRecord]:
    return []


@dataclass
class MockConsole:
    """Captures output for tests."""

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)

    def _record(self, message: str, style: Style) -> None:
        self.outputs.append(OutputRecord(message, style))

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self._record(message, style)

    def success(self, message: str) -> None:
        self._record(_labelled(Style.SUCCESS, message), Style.SUCCESS)

    def error(self, message: str) -> None:
        self._record(_labelled(Style.ERROR, message), Style.ERROR)

    def warning(self, message: str) -> None:
        self._record(_labelled(Style.WARNING, message), Style.WARNING)

    def info(self, message: str) -> None:
        self._record(_labelled(Style.INFO, message), Style.INFO)

    def header(self, message: str) -> None:
        self._record(message, Style.HEADER)

    def newline(self) -> None:
        self._record("", Style.DEFAULT)

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    def has_error(self) -> bool:
        return any(o.style is Style.ERROR for o in self.outputs)

    def has_warning(self) -> bool:
        return any(o.style is Style.WARNING for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        return [o for o in self.outputs if substring in o.message]
