"""Pydantic models for semrel configuration.

Configuration lives in ``.semrel.toml`` under ``[semrel]``, or in
``pyproject.toml`` under ``[tool.semrel]``::

    [semrel.rules]
    feat = "minor"
    ENG-1234 = "major"

    [semrel.changelog]
    ignored_types = ["semrel"]
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from semrel.core.version import BumpLevel
from semrel.exceptions import InvalidRuleError


class ChangelogConfig(BaseModel):
    """Release notes settings."""

    model_config = ConfigDict(extra="forbid")

    ignored_types: list[str] = Field(
        default_factory=lambda: ["semrel"],
        description="Commit type prefixes left out of the release notes",
    )


class SemrelConfig(BaseModel):
    """Root configuration model."""

    model_config = ConfigDict(extra="forbid")

    rules: dict[str, BumpLevel] = Field(
        default_factory=dict,
        description="Bump level per commit type, layered over the default rules",
    )
    changelog: ChangelogConfig = Field(default_factory=ChangelogConfig)

    @field_validator("rules", mode="before")
    @classmethod
    def _parse_levels(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        parsed: dict[str, BumpLevel] = {}
        for commit_type, level in value.items():
            if isinstance(level, BumpLevel):
                parsed[str(commit_type)] = level
                continue
            if not isinstance(level, str):
                raise ValueError(f"rule {commit_type!r} must be a level name, got {level!r}")
            try:
                parsed[str(commit_type)] = BumpLevel.parse(level)
            except InvalidRuleError as e:
                raise ValueError(f"rule {commit_type!r}: {e}") from e
        return parsed
