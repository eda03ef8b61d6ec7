"""Bump rules: which commit types move the version, and how far.

Rules come from three places, lowest precedence first: the built-in
default table, the merged configuration files, and ad-hoc rules given on
the command line. :meth:`RuleSet.build` flattens them once into a single
mapping so resolving a commit is one dictionary lookup.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING

from semrel.core.commits import normalize_type
from semrel.core.version import BumpLevel
from semrel.exceptions import InvalidRuleError
from semrel.logging import get_logger

if TYPE_CHECKING:
    from semrel.core.commits import ParsedCommit

log = get_logger(__name__)

DEFAULT_RULES: Mapping[str, BumpLevel] = MappingProxyType(
    {
        "build": BumpLevel.NONE,
        "cd": BumpLevel.NONE,
        "chore": BumpLevel.PATCH,
        "ci": BumpLevel.NONE,
        "docs": BumpLevel.NONE,
        "feat": BumpLevel.MINOR,
        "fix": BumpLevel.PATCH,
        "perf": BumpLevel.PATCH,
        "refactor": BumpLevel.PATCH,
        "revert": BumpLevel.PATCH,
        "style": BumpLevel.PATCH,
        "test": BumpLevel.NONE,
    }
)


class RuleSource(str, Enum):
    """Where a rule in a :class:`RuleSet` came from."""

    DEFAULT = "default"
    CONFIG = "config"
    CLI = "cli"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class RuleSet:
    """Flat, read-only mapping from commit type to bump level."""

    rules: Mapping[str, BumpLevel] = field(default_factory=lambda: DEFAULT_RULES)
    sources: Mapping[str, RuleSource] = field(
        default_factory=lambda: MappingProxyType(dict.fromkeys(DEFAULT_RULES, RuleSource.DEFAULT))
    )

    @classmethod
    def build(
        cls,
        config_rules: Iterable[tuple[str, BumpLevel]] | Mapping[str, BumpLevel] = (),
        cli_rules: Iterable[tuple[str, BumpLevel]] | Mapping[str, BumpLevel] = (),
    ) -> RuleSet:
        """Overlay config rules, then CLI rules, on top of the defaults.

        Later entries for the same type replace earlier ones.
        """
        rules: dict[str, BumpLevel] = dict(DEFAULT_RULES)
        sources: dict[str, RuleSource] = dict.fromkeys(DEFAULT_RULES, RuleSource.DEFAULT)
        for overlay, source in ((config_rules, RuleSource.CONFIG), (cli_rules, RuleSource.CLI)):
            pairs = overlay.items() if isinstance(overlay, Mapping) else overlay
            for commit_type, level in pairs:
                commit_type = normalize_type(commit_type)
                rules[commit_type] = level
                sources[commit_type] = source
        return cls(MappingProxyType(rules), MappingProxyType(sources))

    def lookup(self, commit_type: str) -> BumpLevel | None:
        return self.rules.get(commit_type)

    def source_of(self, commit_type: str) -> RuleSource | None:
        return self.sources.get(commit_type)

    def __contains__(self, commit_type: object) -> bool:
        return commit_type in self.rules

    def __iter__(self) -> Iterator[tuple[str, BumpLevel, RuleSource]]:
        for commit_type in sorted(self.rules):
            yield commit_type, self.rules[commit_type], self.sources[commit_type]

    def __len__(self) -> int:
        return len(self.rules)


def parse_rules(specs: Iterable[str]) -> list[tuple[str, BumpLevel]]:
    """Parse ad-hoc ``type=level`` rules.

    Each spec may hold several comma-separated rules, e.g.
    ``"build=major,fix=minor"``.

    Raises:
        InvalidRuleError: If a rule has no ``=``, an empty type, or an
            unknown level name
    """
    parsed: list[tuple[str, BumpLevel]] = []
    for spec in specs:
        for rule in spec.split(","):
            rule = rule.strip()
            if not rule:
                continue
            commit_type, sep, level = rule.partition("=")
            commit_type = commit_type.strip()
            if not sep or not commit_type:
                raise InvalidRuleError(f"Invalid rule {rule!r}, expected <type>=<level>")
            try:
                parsed.append((commit_type, BumpLevel.parse(level)))
            except InvalidRuleError as e:
                raise InvalidRuleError(f"Invalid bump rule for {commit_type}: {e}") from e
    return parsed


def resolve_bump(commit_type: str | None, breaking: bool, rules: RuleSet) -> BumpLevel:
    """Return the bump level a single commit asks for.

    A breaking change is always ``MAJOR``. A commit without a type never
    bumps. Types with no rule at all resolve to ``NONE``.
    """
    if breaking:
        return BumpLevel.MAJOR
    if commit_type is None:
        return BumpLevel.NONE
    level = rules.lookup(commit_type)
    if level is None:
        log.debug("no bump rule", commit_type=commit_type)
        return BumpLevel.NONE
    return level


def resolve_commit(commit: ParsedCommit, rules: RuleSet) -> BumpLevel:
    return resolve_bump(commit.commit_type, commit.breaking, rules)
