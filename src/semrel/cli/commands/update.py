"""Implementation of the 'update' command.

The update command writes the next version into the project manifest.
It previews by default and only touches files with ``--execute``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.panel import Panel

from semrel.cli.state import CLIState, prepare_or_exit
from semrel.core.changelog import RELEASE_COMMIT_TYPE
from semrel.exceptions import SemrelError
from semrel.release import apply_release

if TYPE_CHECKING:
    from rich.console import Console


def run_update(execute: bool, state: CLIState, console: Console, err_console: Console) -> None:
    """Run the update command.

    Args:
        execute: Whether to actually write the manifest
        state: Global CLI options
        console: Console for standard output
        err_console: Console for error output
    """
    plan = prepare_or_exit(state, err_console)
    result = plan.result
    manifest = plan.manifest_path.name

    if not result.version_changed:
        console.print(
            f"[yellow]No releasable changes found since {result.current_version}.[/]\n"
            "[dim]Use [cyan]--bump[/] to force a release.[/]"
        )
        return

    mode_str = "[green]EXECUTING[/]" if execute else "[yellow]DRY-RUN[/]"
    console.print(
        f"\n{mode_str} - Updating from [cyan]{result.current_version}[/] to [green]{result.next_version}[/] "
        f"([magenta]{result.bump_level}[/], {len(result.in_scope_commits)} commits)\n"
    )

    if not execute:
        console.print(
            Panel(
                "[bold]Would make the following changes:[/]\n\n"
                f"  • Update version in [cyan]{manifest}[/] to [green]{result.next_version}[/]",
                title="[yellow]Dry Run Preview[/]",
                border_style="yellow",
            )
        )
        console.print("\n[dim]Run with [cyan]--execute[/] to apply these changes.[/]")
        return

    try:
        apply_release(plan)
        console.print(f"  [green]✓[/] Updated version in {manifest}")
    except SemrelError as e:
        err_console.print(f"[red]Error updating {manifest}:[/] {e}", highlight=False)
        raise SystemExit(1) from e

    console.print(
        Panel(
            f"[green]Successfully updated to version {result.next_version}![/]\n\n"
            "Next steps:\n"
            "  1. Review the changes\n"
            f"  2. Commit: [cyan]git add {manifest} && git commit -m "
            f"'{RELEASE_COMMIT_TYPE}: release {result.next_version}'[/]",
            title="[green]Update Complete[/]",
            border_style="green",
        )
    )
