"""Tests for change collections."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from release_drafter.core.changes import ChangeCollection
from release_drafter.core.commits import ChangeRecord
from release_drafter.models import Commit, PullRequest


def _record(type_: str, breaking: bool = False, description: str = "change") -> ChangeRecord:
    return ChangeRecord(type=type_, description=description, breaking=breaking)


class TestFromCommits:
    """Tests for ChangeCollection.from_commits()."""

    def test_records_in_commit_order(self, make_commit: Callable[..., Commit]):
        """Records keep commit order, then line order within a commit."""
        commits = [
            make_commit("fix: first", sha="1111111aaa"),
            make_commit("feat: second\nperf: third", sha="2222222bbb"),
        ]
        changes = ChangeCollection.from_commits(commits)

        assert changes.map(lambda r: r.description) == ["first", "second", "third"]
        assert changes[1].commit_sha == "2222222bbb"

    def test_pull_request_number_wins(self, make_commit: Callable[..., Commit]):
        """Merged pull request number beats an inline reference."""
        commit = make_commit("feat: add thing (#5)", pr_number=42, pr_author="octocat")
        [record] = ChangeCollection.from_commits([commit])

        assert record.pr_number == 42
        assert record.author == "octocat"

    def test_pull_request_fields_carried(self):
        """Body and branch names of the merged pull request reach every record."""
        pull_request = PullRequest(
            number=3,
            merged=True,
            body="Details",
            base_ref_name="main",
            head_ref_name="feat/search",
        )
        commit = Commit(
            sha="abc1234def5678",
            message="feat: search\nfix: typo",
            associated_pull_requests=(pull_request,),
        )
        records = ChangeCollection.from_commits([commit])

        assert [(r.body, r.base_ref_name, r.head_ref_name) for r in records] == [
            ("Details", "main", "feat/search"),
            ("Details", "main", "feat/search"),
        ]

    def test_inline_number_without_pull_request(self, make_commit: Callable[..., Commit]):
        """Inline (#N) is used when no merged pull request exists."""
        [record] = ChangeCollection.from_commits([make_commit("fix: crash (#7)")])

        assert record.pr_number == 7
        assert record.author is None

    def test_non_conventional_commits_ignored(self, make_commit: Callable[..., Commit]):
        """Commits without conventional lines add nothing."""
        changes = ChangeCollection.from_commits([make_commit("Update README")])

        assert len(changes) == 0
        assert not changes


class TestCollectionBehaviour:
    """Tests for the sequence behaviour of ChangeCollection."""

    def test_slice_returns_collection(self):
        """Slicing keeps the collection type."""
        changes = ChangeCollection([_record("feat"), _record("fix"), _record("docs")])

        sliced = changes[1:]

        assert isinstance(sliced, ChangeCollection)
        assert [r.type for r in sliced] == ["fix", "docs"]

    def test_filter_preserves_order(self):
        """Filtering returns a new collection in the original order."""
        changes = ChangeCollection(
            [_record("fix", description="a"), _record("feat"), _record("fix", description="b")]
        )

        fixes = changes.get_by_type("fix")

        assert [r.description for r in fixes] == ["a", "b"]
        assert len(changes) == 3

    def test_equality(self):
        """Collections with equal records are equal and hash alike."""
        a = ChangeCollection([_record("feat")])
        b = ChangeCollection([_record("feat")])

        assert a == b
        assert hash(a) == hash(b)

    def test_breaking_and_features(self):
        """Query helpers look at every record."""
        changes = ChangeCollection([_record("fix", breaking=True), _record("feat")])

        assert changes.has_breaking_changes
        assert changes.has_features
        assert len(changes.get_breaking_changes()) == 1
        assert changes.to_list()[0].type == "fix"


class TestResolveVersionBump:
    """Tests for ChangeCollection.resolve_version_bump()."""

    @pytest.mark.parametrize(
        ("records", "kwargs", "expected"),
        [
            ([_record("fix")], {}, "patch"),
            ([_record("docs"), _record("feat")], {}, "minor"),
            ([_record("fix", breaking=True)], {}, "minor"),
            (
                [_record("fix", breaking=True)],
                {"pre_one_zero_minor_for_breaking": False, "no_auto_major": False},
                "major",
            ),
            (
                [_record("fix", breaking=True)],
                {"no_auto_major": False, "current_major": 0},
                "minor",
            ),
            (
                [_record("fix", breaking=True)],
                {"no_auto_major": False, "current_major": 2},
                "major",
            ),
            (
                [_record("fix", breaking=True)],
                {"pre_one_zero_minor_for_breaking": False, "current_major": 3},
                "minor",
            ),
        ],
    )
    def test_bump(self, records: list[ChangeRecord], kwargs: dict, expected: str):
        """Breaking changes only bump major with both guards off or above 1.0."""
        assert ChangeCollection(records).resolve_version_bump(**kwargs) == expected


class TestCategorizeByType:
    """Tests for ChangeCollection.categorize_by_type()."""

    def test_groups_known_types(self):
        """Known types are grouped; unknown ones are returned separately."""
        changes = ChangeCollection([_record("feat"), _record("wip"), _record("feat")])

        categories, uncategorized = changes.categorize_by_type()

        assert len(categories["feat"]["items"]) == 2
        assert categories["feat"]["title"] == "Features"
        assert categories["fix"]["items"] == []
        assert [r.type for r in uncategorized] == ["wip"]
