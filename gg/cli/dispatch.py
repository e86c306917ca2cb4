"""Map subcommand names to actions that produce a Report.

Query subcommands (status, staged, unstaged, stashed, ahead, list) share one
path: repository set from the cache, fan-out through the executor, merge
into a Report, then drop repositories that turned out to be deleted from
the cache. The remaining subcommands only produce overall messages.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta

from gg import __version__
from gg.cli.context import CLIContext
from gg.core.config import load_config, save_config
from gg.core.errors import ErrorCode
from gg.core.result import Err, Ok, Result
from gg.git.inspector import QueryKind
from gg.query.report import Report, aggregate, message_report

__all__ = [
    "COMMANDS",
    "DispatchError",
    "format_age",
    "run_command",
]

logger = logging.getLogger(__name__)

COMMANDS: dict[str, str] = {
    "ahead": "Shows repos with commits that are not pushed to their upstream",
    "ignore": "Adds a pattern to the list of ignored paths",
    "ignored": "Lists the ignored path patterns",
    "info": "Shows meta-information about git-global",
    "list": "Lists all known repos",
    "scan": "Updates cache of known repos",
    "staged": "Shows git index status for repos with staged changes",
    "stashed": "Shows repos with stashed changes",
    "status": "Shows status (`git status -s`) for repos with any changes",
    "unstaged": "Shows working dir status for repos with unstaged changes",
}

_QUERY_KINDS = {kind.value: kind for kind in QueryKind}


@dataclass(frozen=True, slots=True)
class DispatchError:
    """A program-level failure (never a single repository's failure)."""

    message: str
    code: ErrorCode


def run_command(
    name: str, ctx: CLIContext, *, pattern: str | None = None
) -> Result[Report, DispatchError]:
    """Run a subcommand by name.

    Args:
        name: Subcommand name
        ctx: Resolved context
        pattern: Argument of the ``ignore`` subcommand
    """
    kind = _QUERY_KINDS.get(name)
    if kind is not None:
        return _run_query(kind, ctx)

    match name:
        case "scan":
            return _scan(ctx)
        case "info":
            return _info(ctx)
        case "ignore":
            if not pattern or not pattern.strip():
                return Err(DispatchError("ignore requires a pattern argument", ErrorCode.USER_ERROR))
            return _ignore(ctx, pattern.strip())
        case "ignored":
            return _ignored(ctx)
        case _:
            return Err(DispatchError(f"Unknown subcommand, {name}.", ErrorCode.USER_ERROR))


def _run_query(kind: QueryKind, ctx: CLIContext) -> Result[Report, DispatchError]:
    loaded = ctx.cache.load_or_scan()
    if isinstance(loaded, Err):
        return Err(DispatchError(loaded.error.message, ErrorCode.CONFIG_ERROR))

    repos = loaded.value
    outcomes = ctx.executor.run(repos, kind, include_untracked=ctx.config.show_untracked)
    report = aggregate(kind, outcomes)

    missing = report.missing()
    if missing:
        logger.info("%d repos no longer exist; run `git global scan` to rescan", len(missing))
        ctx.cache.forget(repos, missing)
    return Ok(report)


def _scan(ctx: CLIContext) -> Result[Report, DispatchError]:
    result = ctx.cache.rescan()
    if isinstance(result, Err):
        return Err(DispatchError(result.error.message, ErrorCode.CONFIG_ERROR))
    count = len(result.value)
    return Ok(message_report(f"Found {count} repos. Use `git global list` to show them."))


def _info(ctx: CLIContext) -> Result[Report, DispatchError]:
    loaded = ctx.cache.load_or_scan()
    if isinstance(loaded, Err):
        return Err(DispatchError(loaded.error.message, ErrorCode.CONFIG_ERROR))

    config = ctx.config
    lines = [
        f"git-global {__version__}",
        "=" * 18,
        f"Number of repos: {len(loaded.value)}",
        f"Base directory: {config.discovery.root}",
        f"Cache file: {ctx.cache.path}",
    ]
    age = ctx.cache.age()
    if age is not None:
        lines.append(f"Cache file age: {format_age(age)}")
    lines.append("Ignored patterns:")
    lines.extend(f"  {pattern}" for pattern in config.discovery.ignore)
    lines.append(f"Default command: {config.default_cmd}")
    lines.append(f"Show untracked: {str(config.show_untracked).lower()}")
    return Ok(message_report(*lines))


def _ignore(ctx: CLIContext, pattern: str) -> Result[Report, DispatchError]:
    path = ctx.config.config_path
    if path is None:
        return Err(DispatchError("No config file location is known", ErrorCode.CONFIG_ERROR))

    # Command-line overrides (--root, -u, -t) must not end up in the file.
    stored = load_config(path)
    if isinstance(stored, Err):
        return Err(DispatchError(stored.error.message, ErrorCode.CONFIG_ERROR))
    config = stored.value
    if pattern in config.discovery.ignore:
        return Ok(message_report(f"'{pattern}' is already ignored."))

    saved = save_config(config.with_ignored(pattern), path)
    if isinstance(saved, Err):
        return Err(DispatchError(saved.error.message, ErrorCode.IO_ERROR))
    return Ok(
        message_report(
            f"Added '{pattern}' to the ignore list. Run `git global scan` to update the cache."
        )
    )


def _ignored(ctx: CLIContext) -> Result[Report, DispatchError]:
    patterns = ctx.config.discovery.ignore
    if not patterns:
        return Ok(message_report("No patterns are currently ignored."))
    return Ok(
        message_report(f"Ignored patterns ({len(patterns)}):", *(f"  {p}" for p in patterns))
    )


def format_age(age: timedelta) -> str:
    """Format a duration as ``Xd, Xh, Xm, Xs``."""
    total = int(age.total_seconds())
    days, rest = divmod(total, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{days}d, {hours}h, {minutes}m, {seconds}s"
