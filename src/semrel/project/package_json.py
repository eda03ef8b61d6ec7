"""package.json version manipulation.

The file is rewritten through :mod:`json`, keeping key order, the
detected indentation and the trailing newline.
"""

from __future__ import annotations

import json
import re
from typing import Any

from semrel.core.version import Version
from semrel.exceptions import InvalidVersionError, ProjectError, VersionNotFoundError

FILENAME = "package.json"

_INDENT = re.compile(r"^([ \t]+)\S", re.MULTILINE)


def _load(content: str) -> dict[str, Any]:
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ProjectError(f"Invalid JSON in {FILENAME}: {e}") from e
    if not isinstance(data, dict):
        raise ProjectError(f"{FILENAME} must contain a JSON object")
    return data


def parse_version(content: str) -> Version:
    data = _load(content)
    raw = data.get("version")
    if not isinstance(raw, str):
        raise VersionNotFoundError(f"Could not find version in {FILENAME}. Expected a top-level \"version\" string.")
    try:
        return Version.parse(raw)
    except InvalidVersionError as e:
        raise InvalidVersionError(f"Invalid version {raw!r} in {FILENAME}") from e


def update_version(content: str, version: Version) -> str:
    data = _load(content)
    if "version" not in data:
        raise VersionNotFoundError(f"Could not find version to update in {FILENAME}.")
    data["version"] = str(version)

    match = _INDENT.search(content)
    indent: str | int = match.group(1) if match else 2
    rendered = json.dumps(data, indent=indent, ensure_ascii=False)
    return rendered + "\n" if content.endswith("\n") else rendered
