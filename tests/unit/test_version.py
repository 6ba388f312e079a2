"""Tests for semantic version parsing and increments."""

from __future__ import annotations

import pytest

from release_drafter.core.version import (
    BumpType,
    Version,
    coerce_version,
    parse_version,
)
from release_drafter.exceptions import InvalidVersionError, VersionError


class TestVersionParse:
    """Tests for Version.parse()."""

    def test_parse_simple(self):
        """Parse a plain version."""
        v = Version.parse("1.2.3")

        assert (v.major, v.minor, v.patch) == (1, 2, 3)
        assert not v.is_prerelease

    def test_parse_leading_v(self):
        """Leading v is tolerated."""
        assert Version.parse("v2.0.0") == Version(2, 0, 0)

    def test_parse_leading_equals(self):
        """Leading = is tolerated and keeps the prerelease."""
        v = Version.parse("=1.0.0-rc.1")

        assert v == Version(1, 0, 0, prerelease=("rc", 1))
        assert str(coerce_version("=1.0.0-rc.1")) == "1.0.0-rc.1"

    def test_parse_prerelease_and_build(self):
        """Prerelease identifiers are split, numeric ones become ints."""
        v = Version.parse("1.0.0-rc.1+build.5")

        assert v.prerelease == ("rc", 1)
        assert v.build == ("build", "5")
        assert str(v) == "1.0.0-rc.1"

    @pytest.mark.parametrize("value", ["1.2", "01.2.3", "1.2.3-", "release", ""])
    def test_parse_invalid(self, value: str):
        """Invalid versions raise InvalidVersionError."""
        with pytest.raises(InvalidVersionError):
            Version.parse(value)

    def test_parse_version_returns_none(self):
        """parse_version swallows invalid input."""
        assert parse_version("not-a-version") is None
        assert parse_version(None) is None


class TestVersionOrdering:
    """Tests for SemVer precedence."""

    def test_prerelease_sorts_before_release(self):
        """1.0.0-rc.1 < 1.0.0."""
        assert Version.parse("1.0.0-rc.1") < Version.parse("1.0.0")

    def test_numeric_identifiers_compare_numerically(self):
        """rc.2 < rc.10."""
        assert Version.parse("1.0.0-rc.2") < Version.parse("1.0.0-rc.10")

    def test_numeric_before_alphanumeric(self):
        """Numeric identifiers have lower precedence."""
        assert Version.parse("1.0.0-1") < Version.parse("1.0.0-alpha")

    def test_build_metadata_ignored(self):
        """Build metadata does not affect equality."""
        assert Version.parse("1.0.0+a") == Version.parse("1.0.0+b")


class TestIncrement:
    """Tests for Version.increment()."""

    @pytest.mark.parametrize(
        ("version", "bump", "identifier", "expected"),
        [
            ("1.2.3", "major", None, "2.0.0"),
            ("1.2.3", "minor", None, "1.3.0"),
            ("1.2.3", "patch", None, "1.2.4"),
            ("1.0.0-rc.1", "major", None, "1.0.0"),
            ("1.2.0-rc.1", "minor", None, "1.2.0"),
            ("1.2.3-rc.1", "patch", None, "1.2.3"),
            ("1.2.3", "premajor", "rc", "2.0.0-rc.0"),
            ("1.2.3", "preminor", "rc", "1.3.0-rc.0"),
            ("1.2.3", "prepatch", "rc", "1.2.4-rc.0"),
            ("1.2.3", "prerelease", "rc", "1.2.4-rc.0"),
            ("1.2.4-rc.0", "prerelease", "rc", "1.2.4-rc.1"),
            ("1.2.4-beta.3", "prerelease", "rc", "1.2.4-rc.0"),
            ("1.2.4-rc.0", "prerelease", None, "1.2.4-rc.1"),
            ("1.2.3", "prepatch", None, "1.2.4-0"),
        ],
    )
    def test_increment(self, version: str, bump: str, identifier: str | None, expected: str):
        """Increments reset lower fields and advance prerelease counters."""
        assert str(Version.parse(version).increment(bump, identifier)) == expected

    def test_increment_unknown(self):
        """Unknown increment kinds raise VersionError."""
        with pytest.raises(VersionError):
            Version(1, 0, 0).increment("huge")

    def test_as_prerelease(self):
        """Release increments map to their pre form."""
        assert BumpType.MINOR.as_prerelease() is BumpType.PREMINOR
        assert BumpType.PRERELEASE.as_prerelease() is BumpType.PRERELEASE


class TestCoerceVersion:
    """Tests for coerce_version()."""

    def test_strict_keeps_prerelease(self):
        """Strict versions are parsed with their prerelease."""
        assert str(coerce_version("v1.0.0-rc.2")) == "1.0.0-rc.2"

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("release-2.1", "2.1.0"),
            ("v3", "3.0.0"),
            ("Version 1.4.2 final", "1.4.2"),
        ],
    )
    def test_coerce(self, value: str, expected: str):
        """Loose strings are coerced from their first digits."""
        assert str(coerce_version(value)) == expected

    def test_coerce_no_digits(self):
        """Strings without digits give None."""
        assert coerce_version("latest") is None
        assert coerce_version("") is None
