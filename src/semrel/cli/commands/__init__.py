"""CLI command implementations."""

from __future__ import annotations

from semrel.cli.commands.check import run_check
from semrel.cli.commands.show import ShowTarget, run_show
from semrel.cli.commands.update import run_update

__all__ = ["ShowTarget", "run_check", "run_show", "run_update"]
