"""Next version resolution.

Three sources compete for the version of the next release:

1. an explicit version supplied by the caller (input override),
2. the version already written on the draft release, possibly edited
   by hand,
3. the version computed by bumping the last published release
   according to the changes since then.

:func:`resolve_version_info` settles them in one place:

- an override carrying a prerelease tag wins outright;
- otherwise a draft carrying a prerelease tag is kept verbatim;
- otherwise the computed version is used, raised to the override (or,
  without an override, to the draft version) when that one is higher.
  Override and draft act as floors, never as ceilings.

All named versions are exposed as template variables such as
``$RESOLVED_VERSION`` or ``$NEXT_MINOR_VERSION_PATCH``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from release_drafter.core.template import render_template
from release_drafter.core.version import BumpType, Version, coerce_version

if TYPE_CHECKING:
    from release_drafter.models import Release

logger = logging.getLogger(__name__)

DEFAULT_VERSION_TEMPLATE = "$MAJOR.$MINOR.$PATCH"
PRERELEASE_VERSION_TEMPLATE = "$MAJOR.$MINOR.$PATCH$PRERELEASE"

DEFAULT_PRERELEASE_IDENTIFIER = "rc"

VERSION_POINT_NAMES = (
    "NEXT_MAJOR_VERSION",
    "NEXT_MINOR_VERSION",
    "NEXT_PATCH_VERSION",
    "NEXT_PRERELEASE_VERSION",
    "INPUT_VERSION",
    "RESOLVED_VERSION",
)

_SINGLE_FIELDS = ("MAJOR", "MINOR", "PATCH")

_LEADING_MAJOR_PATTERN = re.compile(r"v?(\d+)")


def resolve_version_bump(
    *,
    has_breaking_changes: bool,
    has_features: bool,
    pre_one_zero_minor_for_breaking: bool = True,
    no_auto_major: bool = True,
    current_major: int = 0,
) -> str:
    """Decide the bump for a set of changes.

    Breaking changes bump the minor version while the project is below
    1.0 (with ``pre_one_zero_minor_for_breaking``) or while
    ``no_auto_major`` is set; only with both guards off do they bump the
    major version. Features bump the minor version, anything else the
    patch version.

    Args:
        has_breaking_changes: Whether any change is breaking
        has_features: Whether any change is a feature
        pre_one_zero_minor_for_breaking: Use minor for breaking changes below 1.0
        no_auto_major: Never bump the major version automatically
        current_major: Major version of the last release

    Returns:
        ``"major"``, ``"minor"`` or ``"patch"``
    """
    if has_breaking_changes:
        if current_major == 0 and pre_one_zero_minor_for_breaking:
            return "minor"
        if no_auto_major:
            return "minor"
        return "major"
    if has_features:
        return "minor"
    return "patch"


def current_major_from_tag(tag_name: str | None) -> int:
    """Leading major version number of a tag such as ``v2.1.0``, 0 if none."""
    if not tag_name:
        return 0
    match = _LEADING_MAJOR_PATTERN.search(tag_name)
    return int(match.group(1)) if match else 0


def _strip_prefix(value: str, tag_prefix: str) -> str:
    if tag_prefix and value.startswith(tag_prefix):
        return value[len(tag_prefix) :]
    return value


def coerce_tag_version(value: Release | str | None, tag_prefix: str = "") -> Version | None:
    """Turn a release, tag or version string into a version.

    The tag prefix is removed first. For releases the tag name is tried
    before the release name.

    Args:
        value: Release, tag name or version string
        tag_prefix: Prefix to strip, such as ``"app-"``

    Returns:
        Version, or ``None`` when nothing usable was found
    """
    if value is None:
        return None
    if isinstance(value, str):
        return coerce_version(_strip_prefix(value, tag_prefix)) if value else None

    candidates = (value.tag_name, value.name)
    for candidate in candidates:
        if candidate:
            version = coerce_version(_strip_prefix(candidate, tag_prefix))
            if version is not None:
                return version
    return None


@dataclass(frozen=True)
class VersionPoint:
    """A named version together with the template used to print it.

    The template may use ``$MAJOR``, ``$MINOR``, ``$PATCH``,
    ``$PRERELEASE`` (``-rc.1`` or empty) and ``$COMPLETE``.
    """

    version: Version
    template: str = DEFAULT_VERSION_TEMPLATE

    @property
    def major(self) -> int:
        return self.version.major

    @property
    def minor(self) -> int:
        return self.version.minor

    @property
    def patch(self) -> int:
        return self.version.patch

    @property
    def prerelease(self) -> str:
        suffix = self.version.prerelease_string
        return f"-{suffix}" if suffix else ""

    @property
    def complete(self) -> str:
        return str(self.version)

    def variables(self) -> dict[str, object]:
        return {
            "$MAJOR": self.major,
            "$MINOR": self.minor,
            "$PATCH": self.patch,
            "$PRERELEASE": self.prerelease,
            "$COMPLETE": self.complete,
        }

    def with_template(self, template: str) -> VersionPoint:
        return replace(self, template=template)

    def render(self) -> str:
        return render_template(self.template, self.variables())

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True)
class VersionInfo:
    """Every named version of a release draft.

    ``resolved`` is always set. The ``next_*`` points are the versions
    the last release would bump to, and ``input`` is the explicit
    override, if one was given.
    """

    next_major: VersionPoint
    next_minor: VersionPoint
    next_patch: VersionPoint
    next_prerelease: VersionPoint
    input: VersionPoint | None
    resolved: VersionPoint

    def points(self) -> dict[str, VersionPoint | None]:
        """Version points keyed by their template name."""
        return dict(
            zip(
                VERSION_POINT_NAMES,
                (
                    self.next_major,
                    self.next_minor,
                    self.next_patch,
                    self.next_prerelease,
                    self.input,
                    self.resolved,
                ),
                strict=True,
            )
        )

    def variables(self) -> dict[str, VersionPoint | None]:
        """Template variables for all points.

        Each point ``NAME`` yields ``$NAME`` plus ``$NAME_MAJOR``,
        ``$NAME_MINOR`` and ``$NAME_PATCH`` rendering a single field.
        Absent points map to ``None`` and render empty.
        """
        variables: dict[str, VersionPoint | None] = {}
        for name, point in self.points().items():
            variables[f"${name}"] = point
            for single in _SINGLE_FIELDS:
                variables[f"${name}_{single}"] = (
                    point.with_template(f"${single}") if point is not None else None
                )
        return variables


def default_version_info(version_key_increment: BumpType | str | None = None) -> VersionInfo:
    """Versions used when there is no previous release, override or draft.

    The resolved version is ``0.1.0``, or ``0.1.0-rc.0`` when a
    prerelease increment was requested.
    """
    next_prerelease = VersionPoint(
        Version(0, 1, 0, (DEFAULT_PRERELEASE_IDENTIFIER, 0)), PRERELEASE_VERSION_TEMPLATE
    )
    next_patch = VersionPoint(Version(0, 1, 0), DEFAULT_VERSION_TEMPLATE)

    increment = BumpType(version_key_increment or BumpType.PATCH)
    return VersionInfo(
        next_major=VersionPoint(Version(1, 0, 0), DEFAULT_VERSION_TEMPLATE),
        next_minor=VersionPoint(Version(0, 1, 0), DEFAULT_VERSION_TEMPLATE),
        next_patch=next_patch,
        next_prerelease=next_prerelease,
        input=None,
        resolved=next_prerelease if increment.is_prerelease else next_patch,
    )


def resolve_version_info(
    release: Release | str | None,
    template: str | None,
    input_version: Release | str | None = None,
    version_key_increment: BumpType | str | None = None,
    tag_prefix: str = "",
    prerelease_identifier: str | None = None,
    draft_version: Release | str | None = None,
) -> VersionInfo:
    """Resolve all named versions of the next release.

    Args:
        release: Last published release, or its tag
        template: Template for printing versions
        input_version: Explicit version override
        version_key_increment: Increment to apply to the last release,
            such as ``"minor"`` or ``"preminor"``
        tag_prefix: Prefix to strip from tags before parsing
        prerelease_identifier: Identifier for prerelease increments, e.g. ``"rc"``
        draft_version: Existing draft release, or its tag

    Returns:
        Resolved versions; the documented defaults when no version
        source is available
    """
    template = template or PRERELEASE_VERSION_TEMPLATE
    identifier = prerelease_identifier or None
    increment = BumpType(version_key_increment or BumpType.PATCH)

    version = coerce_tag_version(release, tag_prefix)
    override = coerce_tag_version(input_version, tag_prefix)
    draft = coerce_tag_version(draft_version, tag_prefix)

    defaults = default_version_info(increment)
    if version is None and override is None and draft is None:
        logger.debug("No previous, input or draft version, using defaults")
        return defaults

    if increment.is_prerelease and version is not None and version.is_prerelease:
        increment = BumpType.PRERELEASE

    if version is not None:
        next_major = VersionPoint(version.increment(BumpType.MAJOR), template)
        next_minor = VersionPoint(version.increment(BumpType.MINOR), template)
        next_patch = VersionPoint(version.increment(BumpType.PATCH), template)
        next_prerelease = VersionPoint(
            version.increment(BumpType.PRERELEASE, identifier), template
        )
        computed = VersionPoint(version.increment(increment, identifier), template)
    else:
        next_major = defaults.next_major
        next_minor = defaults.next_minor
        next_patch = defaults.next_patch
        next_prerelease = defaults.next_prerelease
        computed = defaults.resolved.with_template(template)

    input_point = VersionPoint(override, template) if override is not None else None

    if override is not None and override.is_prerelease:
        logger.debug("Input version %s is a prerelease, using it as is", override)
        resolved = input_point
    elif override is None and draft is not None and draft.is_prerelease:
        logger.debug("Draft version %s is a prerelease, keeping it", draft)
        resolved = VersionPoint(draft, template)
    elif override is not None:
        resolved = input_point if override > computed.version else computed
    elif draft is not None and draft > computed.version:
        logger.debug("Draft version %s is above computed %s", draft, computed.version)
        resolved = VersionPoint(draft, template)
    else:
        resolved = computed

    return VersionInfo(
        next_major=next_major,
        next_minor=next_minor,
        next_patch=next_patch,
        next_prerelease=next_prerelease,
        input=input_point,
        resolved=resolved,
    )
