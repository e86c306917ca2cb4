from __future__ import annotations

import json
from dataclasses import dataclass, replace
from pathlib import Path

import typer

from gg.core.config import Config, ConfigError, load_config
from gg.core.errors import ErrorCode
from gg.core.result import Err, Ok, Result
from gg.discovery.cache import RepoCache
from gg.output.console import ConsoleProtocol, RichConsole
from gg.platform.paths import default_config_path
from gg.query.executor import QueryExecutor


@dataclass(frozen=True, slots=True)
class GlobalOptions:
    """Flags given before the subcommand; None means "use the config file"."""

    json: bool = False
    untracked: bool | None = None
    verbose: bool = False
    config_path: Path | None = None
    root: Path | None = None
    workers: int | None = None


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: Config
    console: ConsoleProtocol
    cache: RepoCache
    executor: QueryExecutor


def resolve_config(options: GlobalOptions) -> Result[Config, ConfigError]:
    """Load the config file and apply command-line overrides."""
    path = options.config_path or default_config_path()
    result = load_config(path)
    if isinstance(result, Err):
        return result

    config = replace(result.value, json_output=options.json, verbose=options.verbose)
    if options.untracked is not None:
        config = replace(config, show_untracked=options.untracked)
    if options.root is not None:
        root = options.root.expanduser().absolute()
        config = replace(config, discovery=replace(config.discovery, root=root))
    return Ok(config)


def build_context(options: GlobalOptions, console: ConsoleProtocol | None = None) -> CLIContext:
    out = console or RichConsole()
    result = resolve_config(options)
    if isinstance(result, Err):
        report_fatal(out, result.error.message, as_json=options.json)
        raise typer.Exit(code=int(ErrorCode.CONFIG_ERROR))

    config = result.value
    return CLIContext(
        config=config,
        console=out,
        cache=RepoCache(config.cache_path, config.discovery),
        executor=QueryExecutor(max_workers=options.workers),
    )


def report_fatal(console: ConsoleProtocol, message: str, *, as_json: bool) -> None:
    """Print a program-level error once, as text or as a JSON object on stderr."""
    if as_json:
        typer.echo(json.dumps({"error": True, "message": message}, indent=2), err=True)
    else:
        console.error(message)
