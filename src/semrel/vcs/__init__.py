"""Version control access."""

from __future__ import annotations

from semrel.vcs.git import GitRepository

__all__ = ["GitRepository"]
