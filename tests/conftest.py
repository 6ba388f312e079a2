"""Shared fixtures for release-drafter tests."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from release_drafter.config.models import ReleaseDrafterConfig
from release_drafter.models import Author, Commit, PullRequest


@pytest.fixture
def config() -> ReleaseDrafterConfig:
    """Minimal configuration with short change lines."""
    return ReleaseDrafterConfig(
        template="$CHANGES",
        change_template="* $TITLE",
        tag_template="v$RESOLVED_VERSION",
        name_template="v$RESOLVED_VERSION",
    )


@pytest.fixture
def make_commit() -> Callable[..., Commit]:
    """Factory for commits, optionally merged through a pull request."""

    def factory(
        message: str,
        sha: str = "abc1234def5678",
        *,
        pr_number: int | None = None,
        pr_author: str | None = None,
        author_login: str | None = None,
        author_name: str = "",
    ) -> Commit:
        pull_requests: tuple[PullRequest, ...] = ()
        if pr_number is not None:
            pull_requests = (
                PullRequest(
                    number=pr_number,
                    merged=True,
                    author=Author(login=pr_author) if pr_author else None,
                ),
            )
        return Commit(
            sha=sha,
            message=message,
            author_name=author_name,
            author_login=author_login,
            associated_pull_requests=pull_requests,
        )

    return factory
