from __future__ import annotations

import json
from pathlib import Path

import click
import typer
from typer.core import TyperGroup

from gg import __version__
from gg.cli.context import CLIContext, GlobalOptions, build_context, report_fatal
from gg.cli.dispatch import COMMANDS, run_command
from gg.core.errors import ErrorCode
from gg.core.result import Err
from gg.output.logs import configure_logging
from gg.query.report import Report, render_json, render_text


class _CommandGroup(TyperGroup):
    """Report unknown subcommands as a user error instead of a usage error."""

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[str | None, click.Command | None, list[str]]:
        name = args[0] if args else ""
        if name and not name.startswith("-") and self.get_command(ctx, name) is None:
            typer.echo(f"error: Unknown subcommand, {name}.", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))
        return super().resolve_command(ctx, args)


app = typer.Typer(
    cls=_CommandGroup,
    add_completion=False,
    invoke_without_command=True,
    help="Keep track of all the git repositories on your machine.",
)


def _options(ctx: typer.Context) -> GlobalOptions:
    if isinstance(ctx.obj, GlobalOptions):
        return ctx.obj
    return GlobalOptions()


def emit(report: Report, cli: CLIContext) -> None:
    """Write a report to stdout as text or JSON."""
    if cli.config.json_output:
        typer.echo(json.dumps(render_json(report), indent=2))
        return
    for line in render_text(report, width=cli.console.width):
        cli.console.print(line)


def execute(
    name: str,
    options: GlobalOptions,
    *,
    pattern: str | None = None,
    cli: CLIContext | None = None,
) -> None:
    """Run one subcommand and print its report."""
    cli = cli or build_context(options)
    result = run_command(name, cli, pattern=pattern)
    if isinstance(result, Err):
        report_fatal(cli.console, result.error.message, as_json=options.json)
        raise typer.Exit(code=int(result.error.code))
    emit(result.value, cli)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose mode."),
    json_output: bool = typer.Option(
        False, "--json", "-j", help="Output subcommand results in JSON."
    ),
    untracked: bool = typer.Option(
        False, "--untracked", "-u", help="Show untracked files in output."
    ),
    nountracked: bool = typer.Option(
        False, "--nountracked", "-t", help="Don't show untracked files in output."
    ),
    root: Path | None = typer.Option(
        None, "--root", help="Directory to scan for repos (overrides the config file)."
    ),
    config: Path | None = typer.Option(
        None, "--config", envvar="GIT_GLOBAL_CONFIG", help="Path to config.toml."
    ),
    workers: int | None = typer.Option(
        None, "--workers", min=1, help="Maximum number of repos queried at once."
    ),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    if untracked and nountracked:
        typer.echo("error: --untracked and --nountracked cannot be used together", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    configure_logging(verbose)
    options = GlobalOptions(
        json=json_output,
        untracked=True if untracked else False if nountracked else None,
        verbose=verbose,
        config_path=config,
        root=root,
        workers=workers,
    )
    ctx.obj = options

    if ctx.invoked_subcommand is None:
        cli = build_context(options)
        name = cli.config.default_cmd
        if name not in COMMANDS or name == "ignore":
            report_fatal(cli.console, f"Invalid default command: {name}", as_json=json_output)
            raise typer.Exit(code=int(ErrorCode.CONFIG_ERROR))
        execute(name, options, cli=cli)


@app.command(help=COMMANDS["status"])
def status(ctx: typer.Context) -> None:
    execute("status", _options(ctx))


@app.command(help=COMMANDS["staged"])
def staged(ctx: typer.Context) -> None:
    execute("staged", _options(ctx))


@app.command(help=COMMANDS["unstaged"])
def unstaged(ctx: typer.Context) -> None:
    execute("unstaged", _options(ctx))


@app.command(help=COMMANDS["stashed"])
def stashed(ctx: typer.Context) -> None:
    execute("stashed", _options(ctx))


@app.command(help=COMMANDS["ahead"])
def ahead(ctx: typer.Context) -> None:
    execute("ahead", _options(ctx))


@app.command("list", help=COMMANDS["list"])
def list_repos(ctx: typer.Context) -> None:
    execute("list", _options(ctx))


@app.command(help=COMMANDS["scan"])
def scan(ctx: typer.Context) -> None:
    execute("scan", _options(ctx))


@app.command(help=COMMANDS["info"])
def info(ctx: typer.Context) -> None:
    execute("info", _options(ctx))


@app.command(help=COMMANDS["ignore"])
def ignore(
    ctx: typer.Context,
    pattern: str = typer.Argument(..., help="Glob pattern of directories to skip when scanning."),
) -> None:
    execute("ignore", _options(ctx), pattern=pattern)


@app.command(help=COMMANDS["ignored"])
def ignored(ctx: typer.Context) -> None:
    execute("ignored", _options(ctx))


def main() -> None:
    app()
