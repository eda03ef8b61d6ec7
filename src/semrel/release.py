"""Release planning for a project path.

:func:`prepare_release` gathers everything needed to answer "what is the
next version and why": configuration, rules, the manifest and the commit
history. Nothing is written until :func:`apply_release` is called.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from semrel.config import SemrelConfig, load_config
from semrel.core.changelog import ChangelogGroup, render
from semrel.core.engine import ReleaseResult, resolve_next_version, resolve_single_message
from semrel.core.rules import RuleSet, parse_rules
from semrel.core.version import BumpLevel
from semrel.exceptions import GitError, RepositoryError
from semrel.logging import get_logger
from semrel.project import find_manifest, get_version, set_version
from semrel.vcs import GitRepository

log = get_logger(__name__)


@dataclass(frozen=True)
class ReleasePlan:
    """A resolved, not yet applied, release."""

    manifest_path: Path
    config: SemrelConfig
    rules: RuleSet
    result: ReleaseResult
    groups: list[ChangelogGroup]


def build_rules(config: SemrelConfig, rule_specs: Iterable[str] = ()) -> RuleSet:
    """Layer configured rules and ad-hoc ``type=level`` specs over the defaults.

    Raises:
        InvalidRuleError: If an ad-hoc rule is malformed
    """
    return RuleSet.build(config_rules=config.rules, cli_rules=parse_rules(rule_specs))


def prepare_release(
    path: Path | str,
    *,
    rules: Iterable[str] = (),
    bump: BumpLevel | None = None,
    config_file: Path | str | None = None,
    message: str | None = None,
) -> ReleasePlan:
    """Resolve the next release for the project at ``path``.

    Args:
        path: Project directory or manifest path
        rules: Ad-hoc ``type=level`` rule specs
        bump: Forced bump level
        config_file: Explicit configuration file
        message: Resolve this single commit message instead of the history

    Returns:
        The release plan

    Raises:
        ConfigError: If the configuration or rules are invalid
        ProjectError: If the manifest or its version cannot be read
        GitError: If a repository exists but its history cannot be read
    """
    path = Path(path)
    config = load_config(path, config_file)
    rule_set = build_rules(config, rules)

    manifest = find_manifest(path)
    current = get_version(manifest)
    log.debug("current version", manifest=str(manifest), version=str(current))

    if message is not None:
        result = resolve_single_message(message, current, rule_set, forced=bump)
    else:
        try:
            repo = GitRepository(manifest.parent)
        except GitError:
            raise
        except RepositoryError as e:
            # No reachable history: nothing has changed since the manifest version.
            log.warning("no commit history", path=str(manifest.parent), reason=str(e))
            result = resolve_next_version((), current, rule_set, forced=bump)
        else:
            history = repo.history(manifest)
            try:
                result = resolve_next_version(history, current, rule_set, forced=bump)
            finally:
                history.close()

    groups = render(result, ignored_types=config.changelog.ignored_types)
    return ReleasePlan(manifest_path=manifest, config=config, rules=rule_set, result=result, groups=groups)


def apply_release(plan: ReleasePlan) -> Path:
    """Write the planned next version into the manifest."""
    return set_version(plan.manifest_path, plan.result.next_version)
