"""Commit message grammar.

Commit messages are written by people, so the parser is total: every
input produces a :class:`ParsedCommit`. Two forms are recognised, tried
in order:

**Conventional form**::

    type[(scope)][!]: subject

    body paragraphs...

    footer

``type`` and ``scope`` are runs of characters other than whitespace and
``: ( ) ? & % ^ $ # @ ! { } + =``. A ``!`` directly before or after the
type or scope marks a breaking change. Any token is accepted as a type,
so ``ENG-1234: fix login`` is compliant with type ``ENG-1234``.

**Non-compliant form**: anything else. The whole first line becomes the
subject and the commit has no type.

Lines starting with ``BREAKING CHANGE`` (or ``BREAKING-CHANGE``) anywhere
after the header, or the phrase anywhere in the header, mark the commit
as breaking regardless of its type.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

STANDARD_TYPES: frozenset[str] = frozenset(
    {
        "build",
        "cd",
        "chore",
        "ci",
        "docs",
        "feat",
        "fix",
        "perf",
        "refactor",
        "revert",
        "style",
        "test",
    }
)

_TOKEN = r"[^\s:()?&%^$#@!{}+=]+"

_HEADER_PATTERN = re.compile(
    rf"^(?P<lead>!)?(?P<type>{_TOKEN})"
    r"(?P<type_bang>!)?"
    rf"(?:\((?P<scope>{_TOKEN})\))?"
    r"(?P<scope_bang>!)?"
    r":[ \t]*(?P<subject>.*)$"
)

_BREAKING_PHRASE = re.compile(r"BREAKING[ -]CHANGES?")
_BREAKING_LINE = re.compile(r"^BREAKING[ -]CHANGES?(?:[ \t]*:)?[ \t]*(?P<text>.*)$")

# Lines git (or a squash merge) may prepend before the real message.
_GIT_HEADER_PREFIXES = (
    "author",
    "co-authored-by",
    "change-id",
    "commit",
    "committer",
    "date",
    "merge",
    "parent",
    "reviewed-by",
    "tree",
)
_GIT_HEADER_LINE = re.compile(rf"^(?:{'|'.join(_GIT_HEADER_PREFIXES)})(?::|\s)", re.IGNORECASE)


@dataclass(frozen=True)
class ParsedCommit:
    """A commit message broken into its conventional parts."""

    sha: str
    raw_message: str
    commit_type: str | None
    scope: str | None
    subject: str
    body: str | None = None
    footer: str | None = None
    breaking: bool = False
    compliant: bool = False
    breaking_description: str | None = None

    @classmethod
    def from_message(cls, message: str, sha: str = "") -> ParsedCommit:
        """Parse a raw commit message. Never raises."""
        text = prune_message(message) or message.strip()
        first_line, _, rest = text.partition("\n")
        sections = _split_sections(rest)

        header = _HEADER_PATTERN.match(first_line)
        if header is not None:
            commit_type = normalize_type(header.group("type"))
            scope = header.group("scope")
            subject = header.group("subject").strip()
            marked = any(header.group(name) for name in ("lead", "type_bang", "scope_bang"))
            compliant = True
        else:
            commit_type = None
            scope = None
            subject = first_line.strip()
            marked = False
            compliant = False

        body: str | None = None
        footer: str | None = None
        if len(sections) == 1:
            body = sections[0]
        elif len(sections) > 1:
            body = "\n\n".join(sections[:-1])
            footer = sections[-1]

        description = _find_breaking_description(sections)
        header_marked = _BREAKING_PHRASE.search(first_line) is not None
        breaking = marked or header_marked or description is not None
        if header_marked and description is None:
            line = _BREAKING_LINE.match(first_line)
            description = line.group("text").strip() if line else ""
        if breaking and not description:
            description = subject

        return cls(
            sha=sha,
            raw_message=message,
            commit_type=commit_type,
            scope=scope,
            subject=subject,
            body=body,
            footer=footer,
            breaking=breaking,
            compliant=compliant,
            breaking_description=description if breaking else None,
        )

    @property
    def has_invalid_scope(self) -> bool:
        """True when the scope is itself a standard type, e.g. ``fix(feat): ...``."""
        return self.scope is not None and self.scope.lower() in STANDARD_TYPES

    @property
    def header(self) -> str:
        """The first line, rebuilt from the parsed parts."""
        if not self.compliant:
            return self.subject
        scope = f"({self.scope})" if self.scope else ""
        bang = "!" if self.breaking else ""
        return f"{self.commit_type}{scope}{bang}: {self.subject}"


def parse_commit(message: str, sha: str = "") -> ParsedCommit:
    """Parse a single raw commit message into a :class:`ParsedCommit`."""
    return ParsedCommit.from_message(message, sha)


def parse_commits(messages: Iterable[str | tuple[str, str]]) -> list[ParsedCommit]:
    """Parse raw messages or ``(sha, message)`` pairs, preserving order."""
    parsed = []
    for item in messages:
        if isinstance(item, str):
            parsed.append(parse_commit(item))
        else:
            sha, message = item
            parsed.append(parse_commit(message, sha))
    return parsed


def prune_message(message: str) -> str:
    """Strip git header preamble lines and surrounding whitespace.

    Only lines before the first real line are candidates for removal, so a
    body paragraph starting with "Merge" or "Date" is kept.
    """
    kept: list[str] = []
    past_preamble = False
    for line in message.splitlines():
        stripped = line.strip()
        if not past_preamble and stripped:
            if _GIT_HEADER_LINE.match(stripped):
                continue
            past_preamble = True
        kept.append(stripped)
    return "\n".join(kept).strip()


def normalize_type(token: str) -> str:
    """Lowercase standard type tokens; custom tokens keep their spelling."""
    lowered = token.lower()
    return lowered if lowered in STANDARD_TYPES else token


def _split_sections(text: str) -> list[str]:
    """Split the text after the header into blank-line separated sections."""
    sections: list[str] = []
    current: list[str] = []
    for line in text.splitlines():
        if line.strip():
            current.append(line.strip())
        elif current:
            sections.append("\n".join(current))
            current = []
    if current:
        sections.append("\n".join(current))
    return sections


def _find_breaking_description(sections: list[str]) -> str | None:
    """Return the text after the first ``BREAKING CHANGE`` line, or None if absent."""
    for section in sections:
        lines = section.splitlines()
        for index, line in enumerate(lines):
            match = _BREAKING_LINE.match(line)
            if match is None:
                continue
            parts = [match.group("text").strip(), *lines[index + 1 :]]
            return "\n".join(part for part in parts if part)
    return None
