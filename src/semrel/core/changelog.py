"""Release notes from resolved commits.

Commits are grouped by type, never by bump level: rules decide how far a
version moves, not where a commit is listed. Groups come out in a fixed
order for the standard types, followed by non-compliant commits and then
any custom type tokens in the order they were first seen.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, date as Date, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from semrel.core.commits import ParsedCommit
    from semrel.core.engine import ReleaseResult
    from semrel.core.version import Version

NON_COMPLIANT = "non-compliant"

# Type of the commits semrel suggests for releases. No rule bumps it and the
# default ignored_types hide it.
RELEASE_COMMIT_TYPE = "semrel"

GROUP_TITLES: dict[str, str] = {
    "feat": "Features",
    "fix": "Fixes",
    "perf": "Performance",
    "refactor": "Refactor",
    "revert": "Revert",
    "style": "Style",
    "test": "Test",
    "chore": "Chore",
    "build": "Build",
    "ci": "Continuous Integration",
    "cd": "Deployment",
    "docs": "Documentation",
    NON_COMPLIANT: "Non Compliant",
}

# Dict order is the canonical group order.
_CANONICAL_ORDER = {key: index for index, key in enumerate(GROUP_TITLES)}


@dataclass(frozen=True)
class ChangelogEntry:
    """One line of release notes."""

    scope: str | None
    subject: str
    sha: str = ""
    breaking: bool = False


@dataclass(frozen=True)
class ChangelogGroup:
    """All in-scope commits sharing a type.

    Attributes:
        key: Type token, or ``non-compliant``
        title: Heading shown in the release notes
        breaking_changes: Breaking-change descriptions, listed before the entries
        entries: Every commit of the group, newest first
    """

    key: str
    title: str
    breaking_changes: tuple[str, ...] = ()
    entries: tuple[ChangelogEntry, ...] = ()

    def scoped(self) -> dict[str, list[ChangelogEntry]]:
        """Entries that have a scope, by scope in first-seen order."""
        by_scope: dict[str, list[ChangelogEntry]] = {}
        for entry in self.entries:
            if entry.scope:
                by_scope.setdefault(entry.scope, []).append(entry)
        return by_scope

    def unscoped(self) -> list[ChangelogEntry]:
        return [entry for entry in self.entries if not entry.scope]


def render(result: ReleaseResult, *, ignored_types: Iterable[str] = ()) -> list[ChangelogGroup]:
    """Group the in-scope commits of ``result`` for the release notes.

    Args:
        result: Resolution result whose ``in_scope_commits`` are listed
        ignored_types: Type prefixes to leave out (e.g. the tool's own
            release commits)

    Returns:
        Groups in canonical order, custom groups last in first-seen order
    """
    return group_commits(result.in_scope_commits, ignored_types=ignored_types)


def group_commits(
    commits: Iterable[ParsedCommit],
    *,
    ignored_types: Iterable[str] = (),
) -> list[ChangelogGroup]:
    """Partition commits into ordered :class:`ChangelogGroup` objects."""
    ignored = tuple(ignored_types)
    buckets: dict[str, list[ParsedCommit]] = {}
    for commit in commits:
        if commit.commit_type is not None and ignored and commit.commit_type.startswith(ignored):
            continue
        key = commit.commit_type if commit.compliant and commit.commit_type else NON_COMPLIANT
        buckets.setdefault(key, []).append(commit)

    seen = list(buckets)
    ordered = sorted(seen, key=lambda key: (_CANONICAL_ORDER.get(key, len(_CANONICAL_ORDER)), seen.index(key)))

    groups = []
    for key in ordered:
        members = buckets[key]
        groups.append(
            ChangelogGroup(
                key=key,
                title=GROUP_TITLES.get(key, key),
                breaking_changes=tuple(c.breaking_description or c.subject for c in members if c.breaking),
                entries=tuple(
                    ChangelogEntry(scope=c.scope, subject=c.subject, sha=c.sha, breaking=c.breaking) for c in members
                ),
            )
        )
    return groups


def format_release_notes(
    version: Version,
    groups: Iterable[ChangelogGroup],
    *,
    date: Date | None = None,
) -> str:
    """Render groups as a Markdown release notes document.

    Args:
        version: Version being released
        groups: Output of :func:`render`
        date: Release date, defaults to today (UTC)

    Returns:
        Markdown text ending with a newline
    """
    day = date or datetime.now(UTC).date()
    lines = [f"# Release notes: {version} ({day.isoformat()})", ""]

    for group in groups:
        lines.append(f"## {group.title}")
        lines.append("")

        if group.breaking_changes:
            lines.append("**BREAKING CHANGES**")
            lines.append("")
            for description in group.breaking_changes:
                first, *rest = description.splitlines() or [""]
                lines.append(f"- {first}")
                lines.extend(f"  {line}" for line in rest)
            lines.append("")

        for scope, entries in group.scoped().items():
            lines.append(f"### {scope}")
            lines.append("")
            lines.extend(f"- {entry.subject}" for entry in entries)
            lines.append("")

        unscoped = group.unscoped()
        if unscoped:
            lines.extend(f"- {entry.subject}" for entry in unscoped)
            lines.append("")

    return "\n".join(lines).rstrip() + "\n"


def format_release_commit(
    version: Version,
    groups: Iterable[ChangelogGroup],
    *,
    date: Date | None = None,
) -> str:
    """Message for the commit that records ``version``: a ``semrel`` header, then the release notes."""
    header = f"{RELEASE_COMMIT_TYPE}: release {version}"
    return f"{header}\n\n{format_release_notes(version, groups, date=date)}"


def format_commit_log(result: ReleaseResult) -> str:
    """One ``<short sha> <header>`` line per in-scope commit, newest first."""
    lines = []
    for commit in result.in_scope_commits:
        short = commit.sha[:7] if commit.sha else "-------"
        lines.append(f"{short} {commit.header}")
    return "\n".join(lines) + ("\n" if lines else "")
