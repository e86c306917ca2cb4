"""Logging setup for the command line.

Library modules only call ``logging.getLogger(__name__)``; handlers are
installed here, once, by the CLI.
"""

from __future__ import annotations

import logging

__all__ = ["configure_logging"]

_HANDLER_NAME = "git-global"


def configure_logging(verbose: bool = False) -> None:
    """Send gg.* log records to stderr through Rich.

    WARNING and above by default; DEBUG with ``verbose``. Calling this again
    replaces the handler instead of stacking a second one.
    """
    from rich.console import Console
    from rich.logging import RichHandler

    logger = logging.getLogger("gg")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    for existing in list(logger.handlers):
        if existing.get_name() == _HANDLER_NAME:
            logger.removeHandler(existing)

    handler = RichHandler(
        console=Console(stderr=True, emoji=False),
        show_time=verbose,
        show_path=False,
        markup=False,
    )
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
