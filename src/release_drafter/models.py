"""Data handed to the drafting core by its collaborators.

Commits, pull requests and releases arrive already materialized, either
from the hosting API or from a local git checkout. They are plain frozen
values; nothing in the core mutates them.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Author:
    """A pull request author as reported by the hosting API."""

    login: str
    url: str = ""
    is_bot: bool = False


@dataclass(frozen=True)
class PullRequest:
    """A pull request associated with a commit.

    ``author`` is an :class:`Author` when it comes from the API and a
    plain string when it was synthesized from local git history.
    """

    number: int | None
    merged: bool = False
    title: str = ""
    url: str = ""
    author: Author | str | None = None
    body: str = ""
    base_ref_name: str = ""
    head_ref_name: str = ""

    @property
    def author_login(self) -> str | None:
        """Author handle as a plain string."""
        if self.author is None:
            return None
        if isinstance(self.author, str):
            return self.author
        return self.author.login


@dataclass(frozen=True)
class Commit:
    """A commit reachable since the previous release.

    Attributes:
        sha: Full commit hash
        message: Full commit message (subject and body)
        author_name: Display name of the commit author
        author_login: Hosting account handle, ``None`` when the author
            has no linked account
        associated_pull_requests: Pull requests that contain the commit
        committed_date: ISO-8601 commit timestamp
    """

    sha: str
    message: str
    author_name: str = ""
    author_login: str | None = None
    associated_pull_requests: tuple[PullRequest, ...] = field(default_factory=tuple)
    committed_date: str = ""

    @property
    def merged_pull_request(self) -> PullRequest | None:
        """First associated pull request that was merged."""
        return next((pr for pr in self.associated_pull_requests if pr.merged), None)


@dataclass(frozen=True)
class Release:
    """A release record, published or draft."""

    tag_name: str
    name: str = ""
    created_at: str = ""
    draft: bool = False
    prerelease: bool = False
    target_commitish: str = ""
    id: int | None = None
