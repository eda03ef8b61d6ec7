"""Exception hierarchy for semrel.

Parsing never raises: a malformed commit message is still a commit.
Everything else that prevents a trustworthy answer (bad rules, an
unreadable manifest, a broken repository) is raised as one of the
errors below and left to the caller to turn into an exit status.
"""

from __future__ import annotations


class SemrelError(Exception):
    """Base class for all semrel errors."""


# Configuration


class ConfigError(SemrelError):
    """Configuration could not be loaded."""


class ConfigNotFoundError(ConfigError):
    """An explicitly requested configuration file does not exist."""


class ConfigValidationError(ConfigError):
    """Configuration content is invalid."""


class InvalidRuleError(ConfigValidationError):
    """A bump rule is malformed or names an unknown bump level."""


# Project / manifest


class ProjectError(SemrelError):
    """Project manifest could not be read or written."""


class ManifestNotFoundError(ProjectError):
    """No supported manifest was found for a path."""


class VersionNotFoundError(ProjectError):
    """The manifest does not declare a version."""


class InvalidVersionError(ProjectError):
    """A version string could not be parsed."""


# Repository


class RepositoryError(SemrelError):
    """The commit history could not be read."""


class GitError(RepositoryError):
    """A git command failed."""

    def __init__(self, message: str, stderr: str | None = None) -> None:
        super().__init__(message)
        self.stderr = stderr

    def __str__(self) -> str:
        message = super().__str__()
        if self.stderr:
            return f"{message}: {self.stderr.strip()}"
        return message


class GitTimeoutError(GitError):
    """A git command did not finish in time."""
