"""Implementation of the 'check' command.

Resolves a single commit message against the current manifest version,
without walking the history.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from semrel.cli.commands.show import emit
from semrel.cli.state import CLIState, prepare_or_exit
from semrel.core.commits import parse_commit
from semrel.core.rules import resolve_commit
from semrel.exceptions import SemrelError
from semrel.vcs import GitRepository

if TYPE_CHECKING:
    from rich.console import Console


def read_message(message: str | None, state: CLIState, err_console: Console) -> str:
    """Pick the message to check: argument, then piped stdin, then ``HEAD``."""
    if message:
        return message.strip()
    if not sys.stdin.isatty():
        piped = sys.stdin.read().strip()
        if piped:
            return piped
    try:
        return GitRepository(state.path).head_message()
    except SemrelError as e:
        err_console.print(f"[red]Error:[/] no commit message given and {e}", highlight=False)
        raise SystemExit(1) from e


def run_check(message: str | None, state: CLIState, console: Console, err_console: Console) -> None:
    """Run the check command.

    Prints ``<message> => [<type>] <level>`` followed by ``<old> -> <new>``.
    """
    text = read_message(message, state, err_console)
    plan = prepare_or_exit(state, err_console, message=text)

    commit = parse_commit(text)
    level = resolve_commit(commit, plan.rules)
    commit_type = commit.commit_type if commit.compliant else "non-compliant"
    result = plan.result
    emit(console, f"{text} => [{commit_type}] {level}")
    emit(console, f"{result.current_version} -> {result.next_version}")
