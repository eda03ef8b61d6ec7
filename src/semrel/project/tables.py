"""Version lookup and rewrite inside TOML tables.

Reads go through :mod:`tomllib`. Writes are a targeted regex replacement
inside the owning table so comments, ordering and quoting elsewhere in
the file survive untouched.
"""

from __future__ import annotations

import re
import tomllib
from typing import Any

from semrel.core.version import Version
from semrel.exceptions import InvalidVersionError, ProjectError, VersionNotFoundError

_VERSION_LINE = re.compile(r'^(version\s*=\s*)(["\'])[^"\']*\2', re.MULTILINE)


def load_toml_text(content: str, filename: str) -> dict[str, Any]:
    try:
        return tomllib.loads(content)
    except tomllib.TOMLDecodeError as e:
        raise ProjectError(f"Invalid TOML in {filename}: {e}") from e


def table_version(data: dict[str, Any], table: str) -> str | None:
    """Return ``data[table]["version"]`` for a dotted table name, if it is a string."""
    node: Any = data
    for key in table.split("."):
        if not isinstance(node, dict) or key not in node:
            return None
        node = node[key]
    version = node.get("version") if isinstance(node, dict) else None
    return version if isinstance(version, str) else None


def parse_table_version(content: str, filename: str, tables: tuple[str, ...]) -> Version:
    """Parse the version from the first of ``tables`` that declares one.

    Raises:
        ProjectError: If the content is not valid TOML
        VersionNotFoundError: If no table declares a string version
        InvalidVersionError: If the declared version is not ``x.y.z``
    """
    data = load_toml_text(content, filename)
    for table in tables:
        raw = table_version(data, table)
        if raw is None:
            continue
        try:
            return Version.parse(raw)
        except InvalidVersionError as e:
            raise InvalidVersionError(f"Invalid version {raw!r} in [{table}] of {filename}") from e
    expected = " or ".join(f"[{table}].version" for table in tables)
    raise VersionNotFoundError(f"Could not find version in {filename}. Expected {expected}.")


def replace_table_version(content: str, table: str, version: Version) -> str | None:
    """Rewrite ``version = "..."`` inside ``[table]``.

    Returns:
        The updated content, or None when the table or its version line is missing
    """

    def replace(match: re.Match[str]) -> str:
        return _VERSION_LINE.sub(rf'\g<1>\g<2>{version}\g<2>', match.group(0), count=1)

    # The table body runs up to the next table header or EOF.
    pattern = rf"^\[{re.escape(table)}\][ \t]*(?:#[^\n]*)?$.*?(?=^\[|\Z)"
    section = re.search(pattern, content, flags=re.MULTILINE | re.DOTALL)
    if section is None or _VERSION_LINE.search(section.group(0)) is None:
        return None
    return content[: section.start()] + replace(section) + content[section.end() :]
