"""Console output abstraction.

Commands write through ``ConsoleProtocol`` so they can be exercised with
``MockConsole`` in tests and ``RichConsole`` in production.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "OutputRecord",
    "RichConsole",
    "Style",
]


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    ERROR = auto()

    def __str__(self) -> str:
        return self.name.lower()


class ConsoleProtocol(Protocol):
    """Where command output goes."""

    @property
    def width(self) -> int | None:
        """Terminal width in columns, or None when not writing to a terminal."""
        ...

    def print(self, message: str) -> None:
        """Print one line verbatim (no markup or emoji codes interpreted)."""
        ...

    def error(self, message: str) -> None: ...


class RichConsole:
    """Console implementation using Rich.

    Report text goes to stdout, errors to stderr. Repository paths may
    contain ``[...]`` or ``:name:`` sequences, so markup and emoji codes are
    both disabled.
    """

    def __init__(self) -> None:
        from rich.console import Console

        self._out = Console(highlight=False, soft_wrap=True, emoji=False)
        self._err = Console(stderr=True, highlight=False, soft_wrap=True, emoji=False)
        self._style_map = {
            Style.DEFAULT: "",
            Style.ERROR: "red bold",
        }

    @property
    def width(self) -> int | None:
        if not self._out.is_terminal:
            return None
        return self._out.width

    def print(self, message: str) -> None:
        self._out.print(message, markup=False, emoji=False)

    def error(self, message: str) -> None:
        self._err.print(f"{Style.ERROR}:", style=self._style_map[Style.ERROR], end=" ")
        self._err.print(message, markup=False, emoji=False)


@dataclass
class OutputRecord:
    """A single output record for MockConsole."""

    message: str
    style: Style


def _empty_outputs() -> list[OutputRecord]:
    return []


@dataclass
class MockConsole:
    """Console implementation that captures output for testing."""

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)
    terminal_width: int | None = None

    @property
    def width(self) -> int | None:
        return self.terminal_width

    def print(self, message: str) -> None:
        self.outputs.append(OutputRecord(message, Style.DEFAULT))

    def error(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"{Style.ERROR}: {message}", Style.ERROR))

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        """All output as a single newline-separated string."""
        return "\n".join(self.messages)

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)
