"""Cargo.toml version manipulation."""

from __future__ import annotations

from semrel.core.version import Version
from semrel.exceptions import VersionNotFoundError
from semrel.project.tables import parse_table_version, replace_table_version

FILENAME = "Cargo.toml"

_TABLES = ("package", "workspace.package")


def parse_version(content: str) -> Version:
    """Read ``[package].version`` (or ``[workspace.package].version``)."""
    return parse_table_version(content, FILENAME, _TABLES)


def update_version(content: str, version: Version) -> str:
    for table in _TABLES:
        updated = replace_table_version(content, table, version)
        if updated is not None:
            return updated
    raise VersionNotFoundError(f"Could not find version to update in {FILENAME}. Expected [package].version.")
