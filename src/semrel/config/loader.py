"""Configuration discovery and loading.

Configuration is layered. Files are read lowest precedence first and
merged key by key, so a project can override a single rule without
repeating the rest:

1. ``/etc/semrel/config.toml``
2. ``$XDG_CONFIG_HOME/semrel/config.toml`` (``~/.config`` by default)
3. ``.semrel.toml`` at the repository root
4. ``[tool.semrel]`` in the project's ``pyproject.toml``
5. ``.semrel.toml`` in the project directory

An explicit file (``--config`` or ``SEMREL_CONFIG``) replaces the search.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from semrel.config.models import SemrelConfig
from semrel.exceptions import ConfigNotFoundError, ConfigValidationError
from semrel.logging import get_logger
from semrel.project.manifest import find_repo_root

log = get_logger(__name__)

CONFIG_FILENAME = ".semrel.toml"
CONFIG_ENV_VAR = "SEMREL_CONFIG"
SYSTEM_CONFIG = Path("/etc/semrel/config.toml")


def user_config_path() -> Path:
    base = os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config"
    return Path(base) / "semrel" / "config.toml"


def load_toml(path: Path) -> dict[str, Any]:
    """Load and parse a TOML file.

    Raises:
        ConfigNotFoundError: If the file doesn't exist
        ConfigValidationError: If the file is not valid TOML
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"Configuration file not found: {path}")
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigValidationError(f"Invalid TOML in {path}: {e}") from e


def extract_semrel_config(data: dict[str, Any]) -> dict[str, Any]:
    """Return the ``[semrel]`` table, or ``[tool.semrel]`` for pyproject data."""
    if "semrel" in data:
        return data["semrel"]
    return data.get("tool", {}).get("semrel", {})


def find_config_files(path: Path) -> list[Path]:
    """Return existing configuration files for ``path``, lowest precedence first."""
    project_dir = (path if path.is_dir() else path.parent).resolve()
    candidates = [SYSTEM_CONFIG, user_config_path()]
    root = find_repo_root(project_dir)
    if root is not None:
        candidates.append(root / CONFIG_FILENAME)
    candidates.append(project_dir / "pyproject.toml")
    candidates.append(project_dir / CONFIG_FILENAME)

    # A file listed twice keeps its highest-precedence position.
    found: list[Path] = []
    for candidate in candidates:
        if not candidate.is_file():
            continue
        resolved = candidate.resolve()
        if resolved in found:
            found.remove(resolved)
        found.append(resolved)
    return found


def merge_config(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge ``overlay`` into a copy of ``base``."""
    merged = dict(base)
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: Path | str, config_file: Path | str | None = None) -> SemrelConfig:
    """Load the effective configuration for a project path.

    Args:
        path: Project directory or manifest path
        config_file: Explicit configuration file, replacing the search

    Returns:
        Validated configuration (defaults when no file sets anything)

    Raises:
        ConfigNotFoundError: If an explicit file does not exist
        ConfigValidationError: If any file is invalid
    """
    explicit = config_file or os.environ.get(CONFIG_ENV_VAR)
    files = [Path(explicit)] if explicit else find_config_files(Path(path))

    merged: dict[str, Any] = {}
    for file in files:
        section = extract_semrel_config(load_toml(file))
        if not isinstance(section, dict):
            raise ConfigValidationError(f"Invalid configuration in {file}: [semrel] must be a table")
        log.debug("config loaded", path=str(file), keys=sorted(section))
        merged = merge_config(merged, section)

    try:
        return SemrelConfig.model_validate(merged)
    except ValidationError as e:
        sources = ", ".join(str(file) for file in files) or "<defaults>"
        raise ConfigValidationError(f"Invalid configuration ({sources}): {e}") from e
