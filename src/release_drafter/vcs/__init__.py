"""Version control access for release-drafter."""

from __future__ import annotations

from release_drafter.vcs.git import GitRepository, create_mock_last_release

__all__ = ["GitRepository", "create_mock_last_release"]
