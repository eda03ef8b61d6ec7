"""Version and bump level value types.

Versions are plain ``major.minor.patch`` triples. Pre-release and build
metadata are not modelled: manifests that carry them are rejected when
read, since no bump arithmetic is defined for them here.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntEnum

from semrel.exceptions import InvalidRuleError, InvalidVersionError

_VERSION_PATTERN = re.compile(r"^v?(?P<major>\d+)(?:\.(?P<minor>\d+))?(?:\.(?P<patch>\d+))?$")


class BumpLevel(IntEnum):
    """Severity of a change, ordered ``NONE < PATCH < MINOR < MAJOR``."""

    NONE = 0
    PATCH = 1
    MINOR = 2
    MAJOR = 3

    def __str__(self) -> str:
        return self.name.lower()

    def __format__(self, format_spec: str) -> str:
        return format(str(self), format_spec)

    @classmethod
    def parse(cls, name: str) -> BumpLevel:
        """Parse a level name (``major``, ``minor``, ``patch`` or ``none``).

        Raises:
            InvalidRuleError: If the name is not one of the four levels
        """
        try:
            return cls[name.strip().upper()]
        except KeyError:
            valid = "|".join(str(level) for level in sorted(cls, reverse=True))
            raise InvalidRuleError(f"Unknown bump level {name!r}, expected one of {valid}") from None


@dataclass(frozen=True, order=True)
class Version:
    """A semantic version triple. Ordering is lexicographic on the fields."""

    major: int = 0
    minor: int = 0
    patch: int = 0

    def __post_init__(self) -> None:
        if min(self.major, self.minor, self.patch) < 0:
            raise InvalidVersionError(f"Version parts must be non-negative: {self.major}.{self.minor}.{self.patch}")

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse ``1``, ``1.2`` or ``1.2.3`` (optionally prefixed with ``v``).

        Missing minor/patch parts default to zero.

        Raises:
            InvalidVersionError: If the text is not a simple version
        """
        match = _VERSION_PATTERN.match(text.strip())
        if match is None:
            raise InvalidVersionError(f"Invalid version string: {text!r}")
        return cls(
            int(match.group("major")),
            int(match.group("minor") or 0),
            int(match.group("patch") or 0),
        )

    def bump(self, level: BumpLevel) -> Version:
        """Return the version incremented by ``level``; lower fields reset to zero."""
        match level:
            case BumpLevel.MAJOR:
                return Version(self.major + 1, 0, 0)
            case BumpLevel.MINOR:
                return Version(self.major, self.minor + 1, 0)
            case BumpLevel.PATCH:
                return Version(self.major, self.minor, self.patch + 1)
            case _:
                return self


def classify_change(old: Version, new: Version) -> BumpLevel:
    """Return the magnitude of the change from ``old`` to ``new``.

    Only forward changes count; an unchanged or decreased version is ``NONE``.
    """
    if new <= old:
        return BumpLevel.NONE
    if new.major != old.major:
        return BumpLevel.MAJOR
    if new.minor != old.minor:
        return BumpLevel.MINOR
    return BumpLevel.PATCH
