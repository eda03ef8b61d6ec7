"""Project manifest handling (Cargo.toml, package.json, pyproject.toml)."""

from __future__ import annotations

from semrel.project.manifest import (
    MANIFEST_FILENAMES,
    find_manifest,
    find_repo_root,
    get_filename,
    get_version,
    read_version,
    set_version,
)

__all__ = [
    "MANIFEST_FILENAMES",
    "find_manifest",
    "find_repo_root",
    "get_filename",
    "get_version",
    "read_version",
    "set_version",
]
