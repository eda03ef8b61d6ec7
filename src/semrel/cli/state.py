from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from semrel.core.version import BumpLevel
from semrel.exceptions import SemrelError
from semrel.release import ReleasePlan, prepare_release

if TYPE_CHECKING:
    from rich.console import Console


@dataclass(frozen=True)
class CLIState:
    """Global options shared by every command."""

    path: Path = Path(".")
    rules: list[str] = field(default_factory=list)
    bump: BumpLevel | None = None
    config_file: Path | None = None


def prepare_or_exit(state: CLIState, err_console: Console, *, message: str | None = None) -> ReleasePlan:
    """Resolve the release plan, reporting fatal errors and exiting with status 1."""
    try:
        plan = prepare_release(
            state.path,
            rules=state.rules,
            bump=state.bump,
            config_file=state.config_file,
            message=message,
        )
    except SemrelError as e:
        err_console.print(f"[red]Error:[/] {e}", highlight=False)
        raise SystemExit(1) from e

    for diagnostic in plan.result.diagnostics:
        err_console.print(f"[yellow]Warning:[/] {diagnostic}", highlight=False)
    return plan
