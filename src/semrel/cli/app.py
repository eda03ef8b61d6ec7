from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from semrel import __version__
from semrel.cli.commands import ShowTarget, run_check, run_show, run_update
from semrel.cli.state import CLIState
from semrel.core.version import BumpLevel
from semrel.exceptions import InvalidRuleError
from semrel.logging import configure_logging

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    help="Compute the next semantic version and release notes from conventional commits.",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    ctx: typer.Context,
    path: Path = typer.Option(Path("."), "--path", "-p", help="Project directory or manifest file."),
    rule: list[str] = typer.Option(
        [],
        "--rule",
        "-r",
        help="Bump rule [cyan]type=level[/], repeatable or comma separated.",
    ),
    bump: str | None = typer.Option(None, "--bump", "-b", help="Force a bump level: major|minor|patch|none."),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        envvar="SEMREL_CONFIG",
        help="Configuration file (replaces the configuration search).",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors."),
    json_log: bool = typer.Option(False, "--json-log", help="Log as JSON lines."),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit."
    ),
) -> None:
    configure_logging(verbose=verbose, quiet=quiet, json_log=json_log)

    forced: BumpLevel | None = None
    if bump is not None:
        try:
            forced = BumpLevel.parse(bump)
        except InvalidRuleError as e:
            err_console.print(f"[red]Error:[/] invalid --bump: {e}", highlight=False)
            raise SystemExit(1) from e

    ctx.obj = CLIState(path=path, rules=list(rule), bump=forced, config_file=config)


@app.command()
def show(
    ctx: typer.Context,
    target: ShowTarget = typer.Argument(..., help="Value to print."),
) -> None:
    """Print one release value: current, next, bump, changed, log, notes, manifest, rules or release-commit."""
    run_show(target, ctx.obj, console, err_console)


@app.command()
def check(
    ctx: typer.Context,
    message: str | None = typer.Argument(None, help="Commit message (default: stdin, then HEAD)."),
) -> None:
    """Show how a single commit message would bump the current version."""
    run_check(message, ctx.obj, console, err_console)


@app.command()
def update(
    ctx: typer.Context,
    execute: bool = typer.Option(False, "--execute", help="Write the new version (default is a dry run)."),
) -> None:
    """Update the manifest to the next version."""
    run_update(execute, ctx.obj, console, err_console)


def main() -> None:
    app()
