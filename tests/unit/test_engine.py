"""Tests for next-version resolution."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from semrel.core.engine import (
    MALFORMED_SCOPE,
    HistoryEntry,
    is_version_checkpoint,
    resolve_next_version,
    resolve_single_message,
)
from semrel.core.rules import RuleSet
from semrel.core.version import BumpLevel, Version


def release(sha: str, version: str, parent: str | None, message: str | None = None) -> HistoryEntry:
    """A commit that recorded ``version`` in the manifest."""
    return HistoryEntry(
        sha=sha,
        message=message or f"chore(release): {version}",
        version=Version.parse(version),
        parent_version=Version.parse(parent) if parent else None,
    )


@pytest.fixture
def rules() -> RuleSet:
    return RuleSet()


class TestScenarios:
    """End-to-end resolution over message sequences."""

    def test_minor_from_feat(self, sample_messages: list[str], rules: RuleSet):
        """The highest level in the window wins."""
        result = resolve_next_version(sample_messages, Version(0, 2, 0), rules)

        assert result.bump_level is BumpLevel.MINOR
        assert result.next_version == Version(0, 3, 0)
        assert len(result.in_scope_commits) == len(sample_messages)
        assert result.checkpoint_version is None

    def test_single_message_with_custom_rule(self):
        """A custom token can bump through an ad-hoc rule."""
        rules = RuleSet.build(cli_rules=[("ENG-1234", BumpLevel.MINOR)])
        result = resolve_single_message("ENG-1234: add new feature", Version(0, 2, 5), rules)

        assert result.next_version == Version(0, 3, 0)
        assert result.bump_level is BumpLevel.MINOR
        assert len(result.in_scope_commits) == 1

    def test_empty_history(self, rules: RuleSet):
        """No commits means no change."""
        result = resolve_next_version([], Version(1, 4, 2), rules)

        assert result.next_version == Version(1, 4, 2)
        assert result.bump_level is BumpLevel.NONE
        assert result.in_scope_commits == ()
        assert result.version_changed is False

    def test_only_non_bumping_commits(self, rules: RuleSet):
        """Docs and tests alone do not release."""
        result = resolve_next_version(["docs: a", "test: b", "JohnDoe - c"], Version(1, 0, 0), rules)

        assert result.bump_level is BumpLevel.NONE
        assert result.next_version == Version(1, 0, 0)

    def test_breaking_is_major(self, rules: RuleSet):
        """A breaking change anywhere in the window is major."""
        result = resolve_next_version(["fix: a", "docs!: drop old docs", "feat: b"], Version(1, 4, 2), rules)

        assert result.bump_level is BumpLevel.MAJOR
        assert result.next_version == Version(2, 0, 0)

    def test_idempotent(self, sample_messages: list[str], rules: RuleSet):
        """Resolving the same history twice gives the same result."""
        first = resolve_next_version(sample_messages, Version(0, 2, 0), rules)
        second = resolve_next_version(sample_messages, Version(0, 2, 0), rules)

        assert first == second

    def test_pairs_keep_shas(self, rules: RuleSet):
        """(sha, message) pairs are accepted."""
        result = resolve_next_version([("s2", "fix: a"), ("s1", "feat: b")], Version(1, 0, 0), rules)

        assert [c.sha for c in result.in_scope_commits] == ["s2", "s1"]


class TestCheckpoints:
    """Tests for stopping at recorded releases."""

    def test_stops_at_patch_release(self, rules: RuleSet):
        """A patch release covers a patch-level window."""
        history = [
            HistoryEntry("c5", "fix: a"),
            release("c4", "1.3.1", "1.3.0"),
            HistoryEntry("c3", "feat: already released"),
            release("c2", "1.3.0", "1.2.4"),
        ]
        result = resolve_next_version(history, Version(1, 3, 1), rules)

        assert result.next_version == Version(1, 3, 2)
        assert result.checkpoint_version == Version(1, 3, 1)
        assert result.checkpoint_sha == "c4"
        assert [c.sha for c in result.in_scope_commits] == ["c5", "c4"]

    def test_escalation_skips_shallow_release(self, rules: RuleSet):
        """A feat after a patch release keeps walking to a minor release."""
        history = [
            HistoryEntry("c6", "feat: add export"),
            release("c4", "1.3.1", "1.3.0"),
            HistoryEntry("c3", "fix: handle empty input"),
            release("c2", "1.3.0", "1.2.4"),
            HistoryEntry("c1", "feat: much older"),
        ]
        result = resolve_next_version(history, Version(1, 3, 1), rules)

        assert result.bump_level is BumpLevel.MINOR
        assert result.checkpoint_sha == "c2"
        assert result.next_version == Version(1, 4, 0)
        assert [c.sha for c in result.in_scope_commits] == ["c6", "c4", "c3", "c2"]

    def test_escalation_on_checkpoint_commit(self, rules: RuleSet):
        """A release commit that is itself breaking is not a patch checkpoint."""
        history = [
            HistoryEntry("c4", "fix: a"),
            release("c3", "1.3.1", "1.3.0", message="fix!: remove flag"),
            HistoryEntry("c2", "fix: b"),
            release("c1", "1.0.0", "0.9.0"),
        ]
        result = resolve_next_version(history, Version(1, 3, 1), rules)

        assert result.bump_level is BumpLevel.MAJOR
        assert result.checkpoint_sha == "c1"
        assert result.next_version == Version(2, 0, 0)

    def test_release_commit_type_is_already_released(self, rules: RuleSet):
        """A chore release commit does not bump the release it recorded."""
        history = [
            HistoryEntry("c3", "docs: typo"),
            release("c2", "1.3.0", "1.2.0"),
            release("c1", "1.2.0", "1.1.0"),
        ]
        result = resolve_next_version(history, Version(1, 3, 0), rules)

        assert result.bump_level is BumpLevel.NONE
        assert result.checkpoint_sha == "c2"
        assert result.next_version == Version(1, 3, 0)
        assert result.version_changed is False

    def test_release_commit_type_bigger_than_release(self, rules: RuleSet):
        """A release commit asking for more than it recorded escalates."""
        history = [
            release("c2", "1.3.1", "1.3.0", message="feat: ship export with 1.3.1"),
            release("c1", "1.3.0", "1.2.4"),
        ]
        result = resolve_next_version(history, Version(1, 3, 1), rules)

        assert result.bump_level is BumpLevel.MINOR
        assert result.checkpoint_sha == "c1"
        assert result.next_version == Version(1, 4, 0)

    def test_exhausted_history_uses_current(self, rules: RuleSet):
        """Without a covering release the current version is the base."""
        history = [HistoryEntry("c2", "feat: a"), release("c1", "0.1.1", "0.1.0")]
        result = resolve_next_version(history, Version(0, 1, 1), rules)

        assert result.checkpoint_version is None
        assert result.next_version == Version(0, 2, 0)
        assert len(result.in_scope_commits) == 2

    def test_stops_pulling_at_checkpoint(self, rules: RuleSet):
        """Nothing past the checkpoint is read from the history."""

        def guarded() -> Iterator[HistoryEntry]:
            yield HistoryEntry("c2", "fix: a")
            yield release("c1", "1.0.1", "1.0.0")
            raise AssertionError("history read past the checkpoint")

        result = resolve_next_version(guarded(), Version(1, 0, 1), rules)

        assert result.next_version == Version(1, 0, 2)

    def test_custom_predicate(self, rules: RuleSet):
        """The checkpoint test is pluggable."""
        history = [
            HistoryEntry("c3", "fix: a"),
            HistoryEntry("c2", "chore: tag", version=Version(2, 0, 0)),
            HistoryEntry("c1", "fix: b"),
        ]
        result = resolve_next_version(
            history,
            Version(2, 0, 0),
            rules,
            is_checkpoint=lambda entry, level: entry.sha == "c2",
        )

        assert result.checkpoint_sha == "c2"
        assert result.next_version == Version(2, 0, 1)


class TestForcedBump:
    """Tests for forced bump levels."""

    def test_forced_overrides_detection(self, sample_messages: list[str], rules: RuleSet):
        """A forced level bumps the current version."""
        result = resolve_next_version(sample_messages, Version(0, 2, 0), rules, forced=BumpLevel.MAJOR)

        assert result.forced is True
        assert result.bump_level is BumpLevel.MAJOR
        assert result.next_version == Version(1, 0, 0)
        assert len(result.in_scope_commits) == len(sample_messages)

    def test_forced_still_stops_at_checkpoint(self, rules: RuleSet):
        """The scan for release notes is still bounded."""

        def guarded() -> Iterator[HistoryEntry]:
            yield HistoryEntry("c2", "fix: a")
            yield release("c1", "1.0.1", "1.0.0")
            raise AssertionError("history read past the checkpoint")

        result = resolve_next_version(guarded(), Version(1, 0, 1), rules, forced=BumpLevel.MINOR)

        assert result.next_version == Version(1, 1, 0)
        assert len(result.in_scope_commits) == 2

    def test_forced_single_message(self, rules: RuleSet):
        """Single-message mode honours a forced level."""
        result = resolve_single_message("docs: x", Version(1, 0, 0), rules, forced=BumpLevel.PATCH)

        assert result.next_version == Version(1, 0, 1)


class TestDiagnostics:
    """Tests for per-commit diagnostics."""

    def test_malformed_scope_reported(self, rules: RuleSet):
        """A standard type used as a scope is reported but kept."""
        result = resolve_next_version([("abc123", "fix(feat): x"), ("def456", "fix: y")], Version(1, 0, 0), rules)

        assert len(result.diagnostics) == 1
        diagnostic = result.diagnostics[0]
        assert diagnostic.kind == MALFORMED_SCOPE
        assert diagnostic.sha == "abc123"
        assert "feat" in str(diagnostic)
        assert len(result.in_scope_commits) == 2
        assert result.next_version == Version(1, 0, 1)

    def test_clean_history_has_no_diagnostics(self, sample_messages: list[str], rules: RuleSet):
        """Ordinary scopes produce no diagnostics."""
        assert resolve_next_version(sample_messages, Version(0, 2, 0), rules).diagnostics == ()


class TestIsVersionCheckpoint:
    """Tests for the default checkpoint predicate."""

    def test_requires_recorded_version(self):
        """Commits that did not change the manifest are never checkpoints."""
        assert is_version_checkpoint(HistoryEntry("a", "fix: x"), BumpLevel.NONE) is False

    @pytest.mark.parametrize(
        ("parent", "version", "level", "expected"),
        [
            ("1.2.3", "1.2.4", BumpLevel.PATCH, True),
            ("1.2.3", "1.2.4", BumpLevel.MINOR, False),
            ("1.2.3", "1.3.0", BumpLevel.MINOR, True),
            ("1.2.3", "1.3.0", BumpLevel.PATCH, True),
            ("1.2.3", "2.0.0", BumpLevel.MAJOR, True),
            ("1.2.3", "1.2.3", BumpLevel.NONE, False),
            ("1.2.3", "1.2.0", BumpLevel.NONE, False),
        ],
    )
    def test_with_parent(self, parent: str, version: str, level: BumpLevel, expected: bool):
        """The recorded change must be an increase at least as large as the level."""
        entry = release("a", version, parent)

        assert is_version_checkpoint(entry, level) is expected

    @pytest.mark.parametrize(
        ("version", "level", "expected"),
        [
            ("2.0.0", BumpLevel.MAJOR, True),
            ("2.1.0", BumpLevel.MAJOR, False),
            ("2.1.0", BumpLevel.MINOR, True),
            ("2.1.1", BumpLevel.MINOR, False),
            ("2.1.1", BumpLevel.PATCH, True),
            ("2.1.1", BumpLevel.NONE, True),
        ],
    )
    def test_without_parent(self, version: str, level: BumpLevel, expected: bool):
        """A newly introduced manifest is judged by the version's shape."""
        entry = release("a", version, None)

        assert is_version_checkpoint(entry, level) is expected
