"""Configuration management for semrel."""

from __future__ import annotations

from semrel.config.loader import load_config
from semrel.config.models import ChangelogConfig, SemrelConfig

__all__ = [
    "ChangelogConfig",
    "SemrelConfig",
    "load_config",
]
