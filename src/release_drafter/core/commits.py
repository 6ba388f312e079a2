"""Conventional commit parsing.

Turns raw commit messages into typed change records following the
Conventional Commits specification: https://www.conventionalcommits.org/

Every line of a message is considered, so a squash-merge body listing
several ``type: description`` lines yields one record per line.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from types import MappingProxyType

# Groups: type, scope, breaking marker, description, trailing PR number
SEMANTIC_COMMIT_PATTERN: re.Pattern[str] = re.compile(
    r"^(?P<type>\w+)"
    r"(?:\((?P<scope>[^)]+)\))?"
    r"(?P<breaking>!)?"
    r":\s*(?P<description>.+?)"
    r"(?:\s*\(#(?P<pr_number>\d+)\))?$"
)

BREAKING_CHANGE_MARKER = "BREAKING CHANGE:"

# Category token that matches breaking changes of any type
BREAKING_CATEGORY_TOKEN = "breaking"


@dataclass(frozen=True)
class CommitType:
    """Changelog title and version bump for a commit type."""

    title: str
    bump: str


COMMIT_TYPES: MappingProxyType[str, CommitType] = MappingProxyType(
    {
        "feat": CommitType("Features", "minor"),
        "fix": CommitType("Bug Fixes", "patch"),
        "docs": CommitType("Documentation", "patch"),
        "style": CommitType("Styles", "patch"),
        "refactor": CommitType("Code Refactoring", "patch"),
        "perf": CommitType("Performance Improvements", "patch"),
        "test": CommitType("Tests", "patch"),
        "build": CommitType("Build System", "patch"),
        "ci": CommitType("Continuous Integration", "patch"),
        "chore": CommitType("Chores", "patch"),
        "revert": CommitType("Reverts", "patch"),
    }
)


def _sentence_case(title: str) -> str:
    if not title:
        return title
    return title[0].upper() + title[1:]


TITLE_POST_PROCESSORS: MappingProxyType[str, Callable[[str], str]] = MappingProxyType(
    {"sentence-case": _sentence_case}
)


def apply_title_post_processors(title: str, processors: Iterable[str] = ()) -> str:
    """Apply named title transforms in order, ignoring unknown names."""
    result = title
    for name in processors:
        processor = TITLE_POST_PROCESSORS.get(name)
        if processor is not None:
            result = processor(result)
    return result


@dataclass(frozen=True)
class ParsedLine:
    """One conventional commit line extracted from a message.

    Attributes:
        type: Lowercased commit type
        scope: Optional scope from ``type(scope):``
        description: Subject with any trailing ``(#123)`` removed
        breaking: ``!`` marker on the line or a breaking footer in the message
        raw: The stripped source line
        pr_number_from_commit: Number from a trailing ``(#123)``
    """

    type: str
    description: str
    breaking: bool
    raw: str
    scope: str | None = None
    pr_number_from_commit: int | None = None


@dataclass(frozen=True)
class ChangeRecord:
    """A single changelog entry derived from one commit line."""

    type: str
    description: str
    breaking: bool
    raw: str = ""
    scope: str | None = None
    commit_sha: str | None = None
    pr_number: int | None = None
    author: str | None = None
    body: str = ""
    base_ref_name: str = ""
    head_ref_name: str = ""

    @property
    def category(self) -> CommitType | None:
        return COMMIT_TYPES.get(self.type)

    @property
    def category_title(self) -> str:
        category = self.category
        return category.title if category else "Other"

    @property
    def bump(self) -> str:
        """Bump this change alone would cause: major, minor or patch."""
        if self.breaking:
            return "major"
        category = self.category
        return category.bump if category else "patch"

    @property
    def short_sha(self) -> str | None:
        return self.commit_sha[:7] if self.commit_sha else None


def parse_semantic_commit(message: str | None) -> list[ParsedLine]:
    """Parse every conventional commit line of a message.

    Lines that do not match ``type(scope)!: description`` or whose type
    is not a known commit type are skipped. A ``BREAKING CHANGE:`` footer
    anywhere in the message marks every parsed line as breaking.

    Args:
        message: Full commit message, may be ``None``

    Returns:
        Parsed lines in message order, possibly empty
    """
    if not message:
        return []

    has_breaking_footer = BREAKING_CHANGE_MARKER in message
    results: list[ParsedLine] = []

    for line in message.split("\n"):
        stripped = line.strip()
        if not stripped:
            continue

        match = SEMANTIC_COMMIT_PATTERN.match(stripped)
        if not match:
            continue

        commit_type = match.group("type").lower()
        if commit_type not in COMMIT_TYPES:
            continue

        pr_number = match.group("pr_number")
        results.append(
            ParsedLine(
                type=commit_type,
                scope=match.group("scope") or None,
                description=match.group("description").strip(),
                breaking=bool(match.group("breaking")) or has_breaking_footer,
                raw=stripped,
                pr_number_from_commit=int(pr_number) if pr_number else None,
            )
        )

    return results
