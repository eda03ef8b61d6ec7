"""Command line interface for semrel."""

from __future__ import annotations
