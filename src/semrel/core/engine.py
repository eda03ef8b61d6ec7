"""Next-version resolution.

The engine walks the current branch backwards (newest first), parsing
each commit and tracking the highest bump level seen so far. It stops at
the first *checkpoint*: a commit that recorded a release in the manifest
whose magnitude covers that level. The commits it consumed are the ones
being released; the checkpoint's recorded version is the base that gets
bumped.

Escalation is what makes this subtle. If a ``feat`` shows up after only
``fix`` commits were seen, a patch release found further back is no
longer a valid base: the walk keeps going until it reaches a release at
least as large as the change it has to describe::

    HEAD  feat: add export          -> target MINOR
          chore(release): 1.3.1     (1.3.0 -> 1.3.1 is a patch release; keep going)
          fix: handle empty input
          chore(release): 1.3.0     (1.2.4 -> 1.3.0 covers MINOR; stop)

    next version = 1.3.0 bumped by MINOR = 1.4.0

A release commit's own type only counts when the release it records is
smaller than that type asks for. A ``chore(release): 1.3.0`` commit that
recorded 1.2.0 -> 1.3.0 already shipped its own change, so it ends the walk
without raising the level. A ``fix!:`` commit that recorded only a patch
release did not, so it escalates and the walk goes on.

The history is consumed lazily and never restarted, so the cost is the
distance back to the checkpoint rather than the size of the repository.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field

from semrel.core.commits import ParsedCommit, parse_commit
from semrel.core.rules import RuleSet, resolve_commit
from semrel.core.version import BumpLevel, Version, classify_change
from semrel.logging import get_logger

log = get_logger(__name__)

MALFORMED_SCOPE = "malformed-scope"


@dataclass(frozen=True)
class HistoryEntry:
    """One commit as supplied by a commit history source.

    Attributes:
        sha: Commit identifier (opaque)
        message: Raw commit message
        version: Manifest version recorded by this commit, if it changed the manifest
        parent_version: Manifest version at the first parent, if known
    """

    sha: str
    message: str
    version: Version | None = None
    parent_version: Version | None = None


@dataclass(frozen=True)
class Diagnostic:
    """A per-commit anomaly that does not stop resolution."""

    kind: str
    sha: str
    message: str

    def __str__(self) -> str:
        where = self.sha[:12] if self.sha else "<message>"
        return f"{where}: {self.message}"


@dataclass(frozen=True)
class ReleaseResult:
    """Outcome of a resolution: versions, level and the commits behind them."""

    current_version: Version
    next_version: Version
    bump_level: BumpLevel
    in_scope_commits: tuple[ParsedCommit, ...] = ()
    checkpoint_version: Version | None = None
    checkpoint_sha: str | None = None
    forced: bool = False
    diagnostics: tuple[Diagnostic, ...] = field(default_factory=tuple)

    @property
    def version_changed(self) -> bool:
        return self.next_version != self.current_version


CheckpointPredicate = Callable[[HistoryEntry, BumpLevel], bool]


def is_version_checkpoint(entry: HistoryEntry, target_level: BumpLevel) -> bool:
    """Default checkpoint test: did this commit record a release covering ``target_level``?

    When the parent's manifest version is known, the recorded change must be
    a real increase whose magnitude is at least ``target_level``. When it is
    not (the manifest first appears in this commit), the recorded version's
    shape decides: a major checkpoint looks like ``x.0.0``, a minor one like
    ``x.y.0``.
    """
    if entry.version is None:
        return False
    if entry.parent_version is not None:
        change = classify_change(entry.parent_version, entry.version)
        return change is not BumpLevel.NONE and change >= target_level
    match target_level:
        case BumpLevel.MAJOR:
            return entry.version.minor == 0 and entry.version.patch == 0
        case BumpLevel.MINOR:
            return entry.version.patch == 0
        case _:
            return True


def resolve_next_version(
    commits: Iterable[HistoryEntry | tuple[str, str] | str],
    current_version: Version,
    rules: RuleSet,
    *,
    forced: BumpLevel | None = None,
    is_checkpoint: CheckpointPredicate = is_version_checkpoint,
) -> ReleaseResult:
    """Compute the next version from a newest-first commit sequence.

    Args:
        commits: Commits along the current branch, newest first. Items may be
            :class:`HistoryEntry` objects, ``(sha, message)`` pairs or bare
            messages (which can never be checkpoints).
        current_version: Version currently recorded in the manifest
        rules: Resolved bump rules
        forced: Skip level detection and bump ``current_version`` by this
            level. The history is still scanned to collect the commits for
            the release notes.
        is_checkpoint: Predicate deciding whether a commit is a release
            checkpoint for a given target level

    Returns:
        The resolved :class:`ReleaseResult`
    """
    target_level = BumpLevel.NONE
    checkpoint_version: Version | None = None
    checkpoint_sha: str | None = None
    in_scope: list[ParsedCommit] = []
    diagnostics: list[Diagnostic] = []

    for entry in _entries(commits):
        parsed = parse_commit(entry.message, entry.sha)
        level = resolve_commit(parsed, rules)
        in_scope.append(parsed)
        if parsed.has_invalid_scope:
            diagnostics.append(_malformed_scope(parsed))

        escalated = max(target_level, level)
        if is_checkpoint(entry, escalated):
            checkpoint_version = entry.version
            checkpoint_sha = entry.sha
            log.debug("checkpoint found", sha=entry.sha, version=str(entry.version), level=str(target_level))
            break

        if escalated > target_level:
            log.debug("escalating", sha=entry.sha, level=str(escalated), previous=str(target_level))
            target_level = escalated

    base = checkpoint_version if checkpoint_version is not None else current_version
    if forced is not None:
        next_version = current_version.bump(forced)
        bump_level = forced
    else:
        next_version = base.bump(target_level)
        bump_level = target_level

    log.debug(
        "resolved next version",
        current=str(current_version),
        next=str(next_version),
        level=str(bump_level),
        commits=len(in_scope),
    )
    return ReleaseResult(
        current_version=current_version,
        next_version=next_version,
        bump_level=bump_level,
        in_scope_commits=tuple(in_scope),
        checkpoint_version=checkpoint_version,
        checkpoint_sha=checkpoint_sha,
        forced=forced is not None,
        diagnostics=tuple(diagnostics),
    )


def resolve_single_message(
    message: str,
    current_version: Version,
    rules: RuleSet,
    *,
    forced: BumpLevel | None = None,
) -> ReleaseResult:
    """Resolve one literal commit message against ``current_version``."""
    return resolve_next_version(
        [HistoryEntry(sha="", message=message)],
        current_version,
        rules,
        forced=forced,
        is_checkpoint=_never,
    )


def _entries(commits: Iterable[HistoryEntry | tuple[str, str] | str]) -> Iterator[HistoryEntry]:
    for item in commits:
        if isinstance(item, HistoryEntry):
            yield item
        elif isinstance(item, str):
            yield HistoryEntry(sha="", message=item)
        else:
            sha, message = item
            yield HistoryEntry(sha=sha, message=message)


def _never(entry: HistoryEntry, target_level: BumpLevel) -> bool:
    return False


def _malformed_scope(commit: ParsedCommit) -> Diagnostic:
    message = f"scope {commit.scope!r} is a commit type; do not use a standard commit type as a scope"
    log.warning("malformed scope", sha=commit.sha, scope=commit.scope, subject=commit.subject)
    return Diagnostic(kind=MALFORMED_SCOPE, sha=commit.sha, message=message)
