"""Semantic version parsing and manipulation.

Versions follow SemVer 2.0.0. A release increment on a prerelease
promotes it (``1.0.0-rc.1`` -> ``1.0.0`` for ``major``) and prerelease
increments advance the last numeric identifier.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import StrEnum

from release_drafter.exceptions import InvalidVersionError, VersionError

_NUMERIC = r"0|[1-9]\d*"
_PRERELEASE_IDENTIFIER = r"(?:0|[1-9]\d*|\d*[a-zA-Z-][a-zA-Z0-9-]*)"

SEMVER_PATTERN: re.Pattern[str] = re.compile(
    rf"^[=v]?(?P<major>{_NUMERIC})\.(?P<minor>{_NUMERIC})\.(?P<patch>{_NUMERIC})"
    rf"(?:-(?P<prerelease>{_PRERELEASE_IDENTIFIER}(?:\.{_PRERELEASE_IDENTIFIER})*))?"
    r"(?:\+(?P<build>[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)

# First MAJOR[.MINOR[.PATCH]] run of digits not embedded in a longer number
COERCE_PATTERN: re.Pattern[str] = re.compile(
    r"(?:^|[^\d])(\d{1,16})(?:\.(\d{1,16}))?(?:\.(\d{1,16}))?(?:$|[^\d])"
)

PrereleaseIdentifier = int | str


class BumpType(StrEnum):
    """Kinds of version increment."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    PREMAJOR = "premajor"
    PREMINOR = "preminor"
    PREPATCH = "prepatch"
    PRERELEASE = "prerelease"

    @property
    def is_prerelease(self) -> bool:
        """Whether this increment produces a prerelease version."""
        return self.value.startswith("pre")

    def as_prerelease(self) -> BumpType:
        """Return the ``pre``-prefixed counterpart of a release increment."""
        if self.is_prerelease:
            return self
        return BumpType(f"pre{self.value}")


def _parse_identifier(identifier: str) -> PrereleaseIdentifier:
    return int(identifier) if identifier.isdigit() else identifier


@dataclass(frozen=True, eq=False)
class Version:
    """A semantic version.

    Equality and ordering follow SemVer precedence: build metadata is
    ignored and a prerelease sorts before its release.

    Attributes:
        major: Major version number
        minor: Minor version number
        patch: Patch version number
        prerelease: Dot-separated prerelease identifiers, numeric ones as ints
        build: Build metadata identifiers
    """

    major: int
    minor: int
    patch: int
    prerelease: tuple[PrereleaseIdentifier, ...] = field(default_factory=tuple)
    build: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def parse(cls, value: str) -> Version:
        """Parse a strict semantic version.

        A leading ``v`` and surrounding whitespace are tolerated.

        Args:
            value: Version string such as ``"1.2.3"`` or ``"v2.0.0-rc.1"``

        Returns:
            Parsed version

        Raises:
            InvalidVersionError: If the string is not a semantic version
        """
        match = SEMVER_PATTERN.match(value.strip())
        if not match:
            raise InvalidVersionError(f"Invalid semantic version: {value!r}")

        prerelease = match.group("prerelease")
        build = match.group("build")
        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor")),
            patch=int(match.group("patch")),
            prerelease=tuple(_parse_identifier(p) for p in prerelease.split("."))
            if prerelease
            else (),
            build=tuple(build.split(".")) if build else (),
        )

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    @property
    def prerelease_string(self) -> str:
        """Prerelease identifiers joined by dots, empty for releases."""
        return ".".join(str(p) for p in self.prerelease)

    def _precedence_key(self) -> tuple:
        identifiers = tuple(
            (0, p, "") if isinstance(p, int) else (1, 0, p) for p in self.prerelease
        )
        return (self.major, self.minor, self.patch, 0 if self.prerelease else 1, identifiers)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._precedence_key() == other._precedence_key()

    def __hash__(self) -> int:
        return hash(self._precedence_key())

    def __lt__(self, other: Version) -> bool:
        return self._precedence_key() < other._precedence_key()

    def __le__(self, other: Version) -> bool:
        return self._precedence_key() <= other._precedence_key()

    def __gt__(self, other: Version) -> bool:
        return self._precedence_key() > other._precedence_key()

    def __ge__(self, other: Version) -> bool:
        return self._precedence_key() >= other._precedence_key()

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            return f"{base}-{self.prerelease_string}"
        return base

    def increment(self, bump: BumpType | str, identifier: str | None = None) -> Version:
        """Return the next version for the given increment.

        ``major``, ``minor`` and ``patch`` reset lower components and
        promote a prerelease to its release where applicable
        (``1.0.0-rc.1`` -> ``1.0.0`` for ``major``). The ``pre*``
        increments append or advance a prerelease counter, switching to
        ``identifier`` when it differs from the current one.

        Args:
            bump: Kind of increment
            identifier: Prerelease identifier such as ``"rc"``

        Returns:
            New version without build metadata

        Raises:
            VersionError: If the increment kind is unknown
        """
        try:
            bump = BumpType(bump)
        except ValueError as e:
            raise VersionError(f"Unknown version increment: {bump!r}") from e

        major, minor, patch = self.major, self.minor, self.patch
        prerelease = list(self.prerelease)

        if bump is BumpType.PREMAJOR:
            major, minor, patch = major + 1, 0, 0
            prerelease = _increment_prerelease([], identifier)
        elif bump is BumpType.PREMINOR:
            minor, patch = minor + 1, 0
            prerelease = _increment_prerelease([], identifier)
        elif bump is BumpType.PREPATCH:
            patch += 1
            prerelease = _increment_prerelease([], identifier)
        elif bump is BumpType.PRERELEASE:
            if not prerelease:
                patch += 1
            prerelease = _increment_prerelease(prerelease, identifier)
        elif bump is BumpType.MAJOR:
            if minor != 0 or patch != 0 or not prerelease:
                major += 1
            minor, patch, prerelease = 0, 0, []
        elif bump is BumpType.MINOR:
            if patch != 0 or not prerelease:
                minor += 1
            patch, prerelease = 0, []
        else:
            if not prerelease:
                patch += 1
            prerelease = []

        return Version(major, minor, patch, tuple(prerelease))


def _increment_prerelease(
    prerelease: list[PrereleaseIdentifier],
    identifier: str | None,
) -> list[PrereleaseIdentifier]:
    if not prerelease:
        prerelease = [0]
    else:
        for index in range(len(prerelease) - 1, -1, -1):
            if isinstance(prerelease[index], int):
                prerelease[index] += 1
                break
        else:
            prerelease.append(0)

    if identifier:
        if str(prerelease[0]) == identifier:
            if len(prerelease) < 2 or not isinstance(prerelease[1], int):
                prerelease = [identifier, 0]
        else:
            prerelease = [identifier, 0]

    return prerelease


def parse_version(value: str | None) -> Version | None:
    """Parse a strict semantic version, returning ``None`` when invalid."""
    if not value:
        return None
    try:
        return Version.parse(value)
    except InvalidVersionError:
        return None


def coerce_version(value: str | None) -> Version | None:
    """Best-effort conversion of a string to a version.

    Strict parsing is tried first so prerelease identifiers survive.
    Otherwise the first ``MAJOR[.MINOR[.PATCH]]`` group in the string is
    used with missing components defaulting to zero; any prerelease is
    lost in that case.

    Args:
        value: Arbitrary tag or version string

    Returns:
        Version, or ``None`` if no digits were found
    """
    if not value:
        return None

    strict = parse_version(value)
    if strict is not None:
        return strict

    match = COERCE_PATTERN.search(value)
    if not match:
        return None
    major, minor, patch = match.groups()
    return Version(int(major), int(minor or 0), int(patch or 0))
