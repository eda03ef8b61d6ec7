"""Uniform access to the version of a project manifest.

A path may name the manifest itself, a directory containing one, or a
directory inside a repository whose root holds one. Supported manifests
are tried in the order of :data:`MANIFEST_FILENAMES`.
"""

from __future__ import annotations

from pathlib import Path
from types import ModuleType

from semrel.core.version import Version
from semrel.exceptions import ManifestNotFoundError, ProjectError
from semrel.logging import get_logger
from semrel.project import cargo, package_json, pyproject

log = get_logger(__name__)

_DIALECTS: dict[str, ModuleType] = {
    cargo.FILENAME: cargo,
    package_json.FILENAME: package_json,
    pyproject.FILENAME: pyproject,
}

MANIFEST_FILENAMES: tuple[str, ...] = tuple(_DIALECTS)


def find_repo_root(path: Path) -> Path | None:
    """Return the closest ancestor of ``path`` (inclusive) holding a ``.git`` entry."""
    start = path.resolve()
    for candidate in (start, *start.parents):
        if (candidate / ".git").exists():
            return candidate
    return None


def find_manifest(path: Path | str) -> Path:
    """Locate the manifest for ``path``.

    Raises:
        ManifestNotFoundError: If no supported manifest is found
    """
    path = Path(path)
    if path.is_file():
        if path.name in _DIALECTS:
            return path
        raise ManifestNotFoundError(f"Unsupported manifest {path}. Expected one of: {', '.join(MANIFEST_FILENAMES)}")

    if path.is_dir():
        search = [path]
        root = find_repo_root(path)
        if root is not None and root != path.resolve():
            search.append(root)
        for directory in search:
            for filename in MANIFEST_FILENAMES:
                candidate = directory / filename
                if candidate.is_file():
                    log.debug("manifest found", path=str(candidate))
                    return candidate

    raise ManifestNotFoundError(f"No manifest found for {path}. Expected one of: {', '.join(MANIFEST_FILENAMES)}")


def get_filename(path: Path | str) -> str:
    return find_manifest(path).name


def read_version(filename: str, content: str) -> Version:
    """Parse the version from the text of a manifest named ``filename``.

    Raises:
        ManifestNotFoundError: If ``filename`` is not a supported manifest
        VersionNotFoundError: If the manifest declares no version
        InvalidVersionError: If the version is not ``x.y.z``
    """
    dialect = _dialect(filename)
    return dialect.parse_version(content)


def get_version(path: Path | str) -> Version:
    """Return the version recorded in the manifest for ``path``."""
    manifest = find_manifest(path)
    return read_version(manifest.name, _read(manifest))


def set_version(path: Path | str, version: Version) -> Path:
    """Write ``version`` into the manifest for ``path``.

    Returns:
        Path to the updated manifest
    """
    manifest = find_manifest(path)
    content = _read(manifest)
    updated = _dialect(manifest.name).update_version(content, version)
    try:
        manifest.write_text(updated, encoding="utf-8")
    except OSError as e:
        raise ProjectError(f"Failed to write {manifest}: {e}") from e
    log.debug("manifest updated", path=str(manifest), version=str(version))
    return manifest


def _dialect(filename: str) -> ModuleType:
    try:
        return _DIALECTS[Path(filename).name]
    except KeyError:
        raise ManifestNotFoundError(f"Unsupported manifest {filename}") from None


def _read(manifest: Path) -> str:
    try:
        return manifest.read_text(encoding="utf-8")
    except OSError as e:
        raise ProjectError(f"Failed to read {manifest}: {e}") from e
