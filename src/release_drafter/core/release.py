"""Release draft assembly.

Combines the change collection, the version resolver and the template
renderer into the name, tag and body of the next release. Also holds
the pure helpers used around it: picking the last release and the
existing draft out of a release list, and building the update payload
for an existing draft.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from release_drafter.core.changelog import contributors_sentence
from release_drafter.core.changes import ChangeCollection
from release_drafter.core.resolver import current_major_from_tag, resolve_version_info
from release_drafter.core.template import render_template
from release_drafter.core.version import BumpType, parse_version
from release_drafter.exceptions import MissingTemplateError

if TYPE_CHECKING:
    from release_drafter.config.models import ReleaseDrafterConfig
    from release_drafter.models import Commit, PullRequest, Release

logger = logging.getLogger(__name__)

TAG_REF_PREFIX = "refs/tags/"
HEAD_REF_PREFIX = "refs/heads/"


@dataclass(frozen=True)
class ReleaseInfo:
    """Everything needed to create or update the draft release.

    Attributes:
        name: Release title
        tag: Tag name of the release
        body: Rendered release notes
        target_commitish: Branch or commit the tag will point at, empty
            for the default branch
        prerelease: Whether the release is a prerelease
        make_latest: ``"true"``, ``"false"`` or ``"legacy"``
        draft: Whether the release stays a draft
        resolved_version: The resolved version, without template
        major_version: Major component of the resolved version
        minor_version: Minor component of the resolved version
        patch_version: Patch component of the resolved version
    """

    name: str
    tag: str
    body: str
    target_commitish: str
    prerelease: bool
    make_latest: str
    draft: bool
    resolved_version: str
    major_version: int
    minor_version: int
    patch_version: int

    def to_outputs(self) -> dict[str, str]:
        """Outputs in the shape a CI step exposes them."""
        return {
            "resolved_version": self.resolved_version,
            "major_version": str(self.major_version),
            "minor_version": str(self.minor_version),
            "patch_version": str(self.patch_version),
            "tag_name": self.tag,
            "name": self.name,
            "body": self.body,
        }


def merged_pull_requests(commits: Iterable[Commit]) -> list[PullRequest]:
    """Merged pull requests of the commits, each once, in commit order."""
    seen: set[int | None] = set()
    pull_requests: list[PullRequest] = []
    for commit in commits:
        for pull_request in commit.associated_pull_requests:
            if not pull_request.merged:
                continue
            key = pull_request.number
            if key is not None and key in seen:
                continue
            seen.add(key)
            pull_requests.append(pull_request)
    return pull_requests


def resolve_version_key_increment(
    changes: ChangeCollection,
    config: ReleaseDrafterConfig,
    is_prerelease: bool,
    last_release: Release | None,
) -> BumpType:
    """Increment to apply to the last release.

    The bump comes from the changes, or from ``version-resolver.default``
    when there are none. Prereleases with a prerelease identifier use the
    ``pre`` form of the bump (``preminor`` and so on).
    """
    resolver = config.version_resolver
    if changes:
        bump = changes.resolve_version_bump(
            pre_one_zero_minor_for_breaking=resolver.pre_one_zero_minor_for_breaking,
            no_auto_major=resolver.no_auto_major,
            current_major=current_major_from_tag(last_release.tag_name if last_release else None),
        )
    else:
        bump = resolver.default

    increment = BumpType(bump)
    logger.debug("Version key increment: %s", increment)

    if is_prerelease and config.prerelease_identifier:
        return increment.as_prerelease()
    return increment


def generate_release_info(
    commits: Sequence[Commit],
    config: ReleaseDrafterConfig,
    last_release: Release | None = None,
    draft_release: Release | None = None,
    *,
    version: str | None = None,
    tag: str | None = None,
    name: str | None = None,
    owner: str = "",
    repository: str = "",
    is_prerelease: bool | None = None,
    target_commitish: str = "",
    should_draft: bool = True,
) -> ReleaseInfo:
    """Assemble the next release from commits and configuration.

    The body is ``header + template + footer`` rendered in two passes:
    first ``$CHANGES``, ``$CONTRIBUTORS``, ``$PREVIOUS_TAG``, ``$OWNER``
    and ``$REPOSITORY`` with the configured replacers, then the version
    variables. The tag and name come from their templates unless given
    explicitly, in which case they are still expanded with the version
    variables. The result only depends on the arguments, so running it
    again with the same input yields the same release.

    Args:
        commits: Commits since the last release, oldest first
        config: Validated configuration
        last_release: Last published release
        draft_release: Existing draft release, if any
        version: Explicit version override
        tag: Explicit tag, may contain version variables
        name: Explicit name, may contain version variables
        owner: Repository owner
        repository: Repository name
        is_prerelease: Overrides ``config.prerelease`` when given
        target_commitish: Branch or ref to release from
        should_draft: Keep the release as a draft

    Returns:
        Release information

    Raises:
        MissingTemplateError: If the configuration has no body template
    """
    if config.template is None:
        raise MissingTemplateError("Configuration is missing the required 'template' field")

    prerelease = config.prerelease if is_prerelease is None else is_prerelease
    changes = ChangeCollection.from_commits(commits)
    pull_requests = merged_pull_requests(commits)

    body = config.header + config.template + config.footer
    body = render_template(
        body,
        {
            "$PREVIOUS_TAG": last_release.tag_name if last_release else "",
            "$CHANGES": changes.render_with_config(config, owner, repository),
            "$CONTRIBUTORS": contributors_sentence(
                commits,
                pull_requests,
                exclude=config.exclude_contributors,
                fallback=config.no_contributors_template,
            ),
            "$OWNER": owner,
            "$REPOSITORY": repository,
        },
        config.replacers,
    )

    increment = resolve_version_key_increment(changes, config, prerelease, last_release)
    logger.info("Version bump type: %s", increment)

    # The most specific override identifies the version
    input_version = version or tag or name
    version_info = resolve_version_info(
        last_release,
        config.version_template,
        input_version,
        increment,
        config.tag_prefix,
        config.prerelease_identifier,
        draft_release if input_version is None else None,
    )
    resolved = version_info.resolved
    logger.info("Calculated version: %s", resolved.complete)

    variables = version_info.variables()
    body = render_template(body, variables)

    if tag is None:
        tag = render_template(config.tag_template, variables)
    else:
        tag = render_template(tag, variables)

    if name is None:
        name = render_template(config.name_template, variables)
    else:
        name = render_template(name, variables)

    if target_commitish.startswith(TAG_REF_PREFIX):
        logger.info(
            "%s is not supported as release target, falling back to default branch",
            target_commitish,
        )
        target_commitish = ""

    logger.info("Generated release draft: tag=%s name=%s version=%s", tag, name, resolved.complete)
    logger.debug("Release body:\n%s", body)

    return ReleaseInfo(
        name=name,
        tag=tag,
        body=body,
        target_commitish=target_commitish,
        prerelease=prerelease,
        make_latest="false" if prerelease else config.latest,
        draft=should_draft,
        resolved_version=resolved.complete,
        major_version=resolved.major,
        minor_version=resolved.minor,
        patch_version=resolved.patch,
    )


# =============================================================================
# Release selection
# =============================================================================


def _strip_tag_prefix(tag_name: str, tag_prefix: str) -> str:
    if tag_prefix and tag_name.startswith(tag_prefix):
        return tag_name[len(tag_prefix) :]
    return tag_name


def _created_at(release: Release) -> datetime:
    if not release.created_at:
        return datetime.min.replace(tzinfo=UTC)
    created = datetime.fromisoformat(release.created_at.replace("Z", "+00:00"))
    if created.tzinfo is None:
        return created.replace(tzinfo=UTC)
    return created.astimezone(UTC)


def sort_releases(releases: Iterable[Release], tag_prefix: str = "") -> list[Release]:
    """Sort releases from oldest to newest.

    Releases whose tags are both semantic versions (after removing the
    prefix) are ordered by version, others by creation time.
    """

    def compare(a: Release, b: Release) -> int:
        version_a = parse_version(_strip_tag_prefix(a.tag_name, tag_prefix))
        version_b = parse_version(_strip_tag_prefix(b.tag_name, tag_prefix))
        if version_a is not None and version_b is not None:
            return (version_a > version_b) - (version_a < version_b)
        created_a, created_b = _created_at(a), _created_at(b)
        return (created_a > created_b) - (created_a < created_b)

    return sorted(releases, key=functools.cmp_to_key(compare))


def find_releases(
    releases: Iterable[Release],
    target_commitish: str = "",
    *,
    filter_by_commitish: bool = False,
    include_pre_releases: bool = False,
    tag_prefix: str = "",
) -> tuple[Release | None, Release | None]:
    """Pick the existing draft and the last release from a release list.

    Args:
        releases: All releases of the repository
        target_commitish: Branch being released, ``refs/heads/`` optional
        filter_by_commitish: Only consider releases targeting that branch
        include_pre_releases: Consider prereleases as last release, and
            look for a prerelease draft instead of a regular one
        tag_prefix: Only consider tags with this prefix

    Returns:
        Tuple of (draft release, last release), each possibly ``None``
    """
    candidates = list(releases)
    logger.info("Found %d releases", len(candidates))

    if filter_by_commitish:
        branch = target_commitish.removeprefix(HEAD_REF_PREFIX)
        candidates = [
            r for r in candidates if r.target_commitish.removeprefix(HEAD_REF_PREFIX) == branch
        ]
    if tag_prefix:
        candidates = [r for r in candidates if r.tag_name.startswith(tag_prefix)]

    published = sort_releases(
        (r for r in candidates if not r.draft and (not r.prerelease or include_pre_releases)),
        tag_prefix,
    )
    draft_release = next(
        (r for r in candidates if r.draft and r.prerelease == include_pre_releases), None
    )
    last_release = published[-1] if published else None

    if draft_release:
        logger.info("Draft release: %s", draft_release.tag_name)
    else:
        logger.info("No draft release found")
    if last_release:
        logger.info(
            "Last release%s: %s",
            " (including prerelease)" if include_pre_releases else "",
            last_release.tag_name,
        )
    else:
        logger.info("No last release found")

    return draft_release, last_release


def find_releases_for_config(
    releases: Iterable[Release],
    config: ReleaseDrafterConfig,
    target_commitish: str | None = None,
) -> tuple[Release | None, Release | None]:
    """Pick the draft and the last release with the configured filters.

    Args:
        releases: All releases of the repository
        config: Validated configuration
        target_commitish: Branch being released, defaults to ``commitish``

    Returns:
        Tuple of (draft release, last release), each possibly ``None``
    """
    return find_releases(
        releases,
        target_commitish or config.commitish,
        filter_by_commitish=config.filter_by_commitish,
        include_pre_releases=config.should_include_pre_releases,
        tag_prefix=config.tag_prefix,
    )


def update_release_parameters(draft_release: Release, release_info: ReleaseInfo) -> dict[str, Any]:
    """Payload for updating an existing draft release.

    An empty name or tag keeps the draft's current one, and an empty
    target is left out so the existing target is kept.
    """
    parameters: dict[str, Any] = {
        "release_id": draft_release.id,
        "body": release_info.body,
        "draft": release_info.draft,
        "prerelease": release_info.prerelease,
        "make_latest": release_info.make_latest,
    }
    name = release_info.name or draft_release.name
    tag_name = release_info.tag or draft_release.tag_name
    if name:
        parameters["name"] = name
    if tag_name:
        parameters["tag_name"] = tag_name
    if release_info.target_commitish:
        parameters["target_commitish"] = release_info.target_commitish
    return parameters

