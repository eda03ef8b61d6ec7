"""pyproject.toml version manipulation.

Supports PEP 621 (``[project]``) first, then Poetry (``[tool.poetry]``).
Writes preserve formatting and comments by using a regex replacement
inside the owning table rather than re-serialising the document.
"""

from __future__ import annotations

from semrel.core.version import Version
from semrel.exceptions import VersionNotFoundError
from semrel.project.tables import load_toml_text, parse_table_version, replace_table_version

FILENAME = "pyproject.toml"

_TABLES = ("project", "tool.poetry")


def parse_version(content: str) -> Version:
    """Read the version from PEP 621 or Poetry metadata.

    Raises:
        VersionNotFoundError: If the version is missing or declared dynamic
    """
    data = load_toml_text(content, FILENAME)
    if "version" in data.get("project", {}).get("dynamic", []):
        raise VersionNotFoundError(f"Version in {FILENAME} is dynamic; a static [project].version is required.")
    return parse_table_version(content, FILENAME, _TABLES)


def update_version(content: str, version: Version) -> str:
    """Return ``content`` with the project version replaced.

    Raises:
        VersionNotFoundError: If neither table has a version line
    """
    for table in _TABLES:
        updated = replace_table_version(content, table, version)
        if updated is not None:
            return updated
    raise VersionNotFoundError(
        f"Could not find version to update in {FILENAME}. Expected [project].version or [tool.poetry].version."
    )
