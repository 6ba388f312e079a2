"""Commits from a local git checkout.

Without access to a hosting API every commit is treated as its own
merged pull request. The pull request number is taken from a trailing
``(#123)`` in the subject, which is how squash merges are usually
titled.
"""

from __future__ import annotations

import logging
import re
import subprocess
from datetime import UTC, datetime
from pathlib import Path

from release_drafter.core.commits import parse_semantic_commit
from release_drafter.exceptions import GitError
from release_drafter.models import Commit, PullRequest, Release

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = "\x1f"
RECORD_SEPARATOR = "\x1e"
LOG_FORMAT = "%H%x1f%an%x1f%aI%x1f%B%x1e"

PR_REFERENCE_PATTERN = re.compile(r"\s*\(#(\d+)\)\s*$")


class GitRepository:
    """A local git work tree.

    Args:
        path: Directory inside the work tree

    Raises:
        GitError: If ``path`` is not inside a git work tree
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._run("rev-parse", "--is-inside-work-tree")

    def _run(self, *args: str) -> str:
        try:
            result = subprocess.run(
                ["git", *args],
                capture_output=True,
                text=True,
                check=True,
                cwd=self.path,
            )
        except FileNotFoundError as e:
            raise GitError("git executable not found") from e
        except subprocess.CalledProcessError as e:
            raise GitError(
                f"git {args[0]} failed with exit code {e.returncode}",
                stderr=e.stderr,
            ) from e
        return result.stdout

    def get_commits(self, base_ref: str | None = None) -> list[Commit]:
        """Commits reachable from HEAD, oldest first.

        Args:
            base_ref: Only list commits after this ref (``base_ref..HEAD``)

        Returns:
            Commits, each with one synthetic merged pull request
        """
        args = ["log", "--reverse", f"--format={LOG_FORMAT}"]
        if base_ref:
            logger.info("Getting commits since %s", base_ref)
            args.append(f"{base_ref}..HEAD")

        output = self._run(*args)
        commits = [
            _parse_record(record)
            for record in output.split(RECORD_SEPARATOR)
            if record.strip()
        ]
        logger.info("Found %d commits in %s", len(commits), self.path)
        return commits


def _parse_record(record: str) -> Commit:
    sha, author_name, committed_date, message = record.strip("\n").split(FIELD_SEPARATOR, 3)
    message = message.strip()
    subject = message.splitlines()[0] if message else ""

    match = PR_REFERENCE_PATTERN.search(subject)
    number = int(match.group(1)) if match else None
    subject_without_pr = PR_REFERENCE_PATTERN.sub("", subject)

    parsed = parse_semantic_commit(subject_without_pr)
    title = parsed[0].description if parsed else subject_without_pr

    pull_request = PullRequest(
        number=number,
        merged=True,
        title=title,
        author=author_name,
    )
    return Commit(
        sha=sha,
        message=message,
        author_name=author_name,
        associated_pull_requests=(pull_request,),
        committed_date=committed_date,
    )


def create_mock_last_release(version: str | None, tag_prefix: str = "") -> Release | None:
    """Stand-in for the last release when only its version is known.

    Args:
        version: Version or tag, such as ``"1.2.0"`` or ``"v1.2.0"``
        tag_prefix: Prefix added to the tag when missing

    Returns:
        Published release tagged with the version, ``None`` without a version
    """
    if not version:
        return None
    tag_name = version if version.startswith(tag_prefix) else f"{tag_prefix}{version}"
    return Release(
        tag_name=tag_name,
        name=tag_name,
        created_at=datetime.now(UTC).isoformat(),
        id=0,
    )
