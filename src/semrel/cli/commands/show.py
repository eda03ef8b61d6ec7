"""Implementation of the 'show' command.

Each target prints a single plain value to stdout so CI steps can capture
it, e.g. ``next_version=$(semrel show next)``.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from semrel.cli.state import CLIState, prepare_or_exit
from semrel.core.changelog import format_commit_log, format_release_commit, format_release_notes

if TYPE_CHECKING:
    from rich.console import Console

    from semrel.release import ReleasePlan


class ShowTarget(StrEnum):
    current = "current"
    next = "next"
    bump = "bump"
    changed = "changed"
    log = "log"
    notes = "notes"
    manifest = "manifest"
    rules = "rules"
    release_commit = "release-commit"


def run_show(target: ShowTarget, state: CLIState, console: Console, err_console: Console) -> None:
    """Run the show command.

    Args:
        target: Value to print
        state: Global CLI options
        console: Console for standard output
        err_console: Console for error output
    """
    plan = prepare_or_exit(state, err_console)
    emit(console, render_target(target, plan))


def render_target(target: ShowTarget, plan: ReleasePlan) -> str:
    result = plan.result
    match target:
        case ShowTarget.current:
            return str(result.current_version)
        case ShowTarget.next:
            return str(result.next_version)
        case ShowTarget.bump:
            return str(result.bump_level)
        case ShowTarget.changed:
            return "true" if result.version_changed else "false"
        case ShowTarget.log:
            return format_commit_log(result).rstrip("\n")
        case ShowTarget.notes:
            return format_release_notes(result.next_version, plan.groups).rstrip("\n")
        case ShowTarget.manifest:
            return str(plan.manifest_path)
        case ShowTarget.rules:
            return "\n".join(f"{commit_type} = {level} ({source})" for commit_type, level, source in plan.rules)
        case ShowTarget.release_commit:
            return format_release_commit(result.next_version, plan.groups).rstrip("\n")


def emit(console: Console, text: str) -> None:
    """Print ``text`` verbatim: no markup, highlighting or wrapping."""
    console.print(text, markup=False, highlight=False, emoji=False, soft_wrap=True)
