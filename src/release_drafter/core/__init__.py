"""Core business logic for release-drafter.

This module contains the fundamental building blocks:
- Semantic commit parsing into change records
- Change collections and changelog rendering
- Version parsing, bumping and next-version resolution
- Template rendering with replacers
- Release draft assembly
"""

from __future__ import annotations

from release_drafter.core.changelog import contributors_sentence, render_changes
from release_drafter.core.changes import ChangeCollection
from release_drafter.core.commits import ChangeRecord, parse_semantic_commit
from release_drafter.core.release import (
    ReleaseInfo,
    find_releases,
    find_releases_for_config,
    generate_release_info,
    sort_releases,
    update_release_parameters,
)
from release_drafter.core.resolver import VersionInfo, VersionPoint, resolve_version_info
from release_drafter.core.template import render_template
from release_drafter.core.version import BumpType, Version, parse_version

__all__ = [
    # Version
    "BumpType",
    # Changes
    "ChangeCollection",
    "ChangeRecord",
    # Release
    "ReleaseInfo",
    "Version",
    "VersionInfo",
    "VersionPoint",
    "contributors_sentence",
    "find_releases",
    "find_releases_for_config",
    "generate_release_info",
    "parse_semantic_commit",
    "parse_version",
    "render_changes",
    # Template
    "render_template",
    "resolve_version_info",
    "sort_releases",
    "update_release_parameters",
]
