"""Core business logic for semrel.

This module contains the pure building blocks:
- Version and bump level value types
- Conventional commit parsing
- Bump rule resolution
- Next-version resolution over a commit history
- Changelog grouping and rendering
"""

from __future__ import annotations

from semrel.core.changelog import (
    RELEASE_COMMIT_TYPE,
    ChangelogEntry,
    ChangelogGroup,
    format_commit_log,
    format_release_commit,
    format_release_notes,
    render,
)
from semrel.core.commits import STANDARD_TYPES, ParsedCommit, parse_commit, parse_commits, prune_message
from semrel.core.engine import (
    Diagnostic,
    HistoryEntry,
    ReleaseResult,
    is_version_checkpoint,
    resolve_next_version,
    resolve_single_message,
)
from semrel.core.rules import DEFAULT_RULES, RuleSet, RuleSource, parse_rules, resolve_bump, resolve_commit
from semrel.core.version import BumpLevel, Version, classify_change

__all__ = [
    # Version
    "BumpLevel",
    "Version",
    "classify_change",
    # Commits
    "STANDARD_TYPES",
    "ParsedCommit",
    "parse_commit",
    "parse_commits",
    "prune_message",
    # Rules
    "DEFAULT_RULES",
    "RuleSet",
    "RuleSource",
    "parse_rules",
    "resolve_bump",
    "resolve_commit",
    # Engine
    "Diagnostic",
    "HistoryEntry",
    "ReleaseResult",
    "is_version_checkpoint",
    "resolve_next_version",
    "resolve_single_message",
    # Changelog
    "RELEASE_COMMIT_TYPE",
    "ChangelogEntry",
    "ChangelogGroup",
    "format_commit_log",
    "format_release_commit",
    "format_release_notes",
    "render",
]
