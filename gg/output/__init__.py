"""Output abstractions."""

from .console import ConsoleProtocol, MockConsole, RichConsole, Style
from .logs import configure_logging

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "RichConsole",
    "Style",
    "configure_logging",
]
