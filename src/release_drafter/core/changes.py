"""Ordered, immutable collections of change records."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Sequence
from typing import TYPE_CHECKING, Any, TypeVar, overload

from release_drafter.core.changelog import render_changes
from release_drafter.core.commits import COMMIT_TYPES, ChangeRecord, parse_semantic_commit
from release_drafter.core.resolver import resolve_version_bump

if TYPE_CHECKING:
    from release_drafter.config.models import ReleaseDrafterConfig
    from release_drafter.models import Commit

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ChangeCollection(Sequence[ChangeRecord]):
    """Change records in commit order.

    The collection never changes after construction; filtering returns
    a new collection with the original ordering preserved.
    """

    __slots__ = ("_items",)

    def __init__(self, items: Iterable[ChangeRecord] = ()) -> None:
        self._items: tuple[ChangeRecord, ...] = tuple(items)

    @classmethod
    def from_commits(cls, commits: Iterable[Commit]) -> ChangeCollection:
        """Build a collection from commits, oldest first.

        The number of the first merged pull request of a commit wins over
        a ``(#123)`` reference in the message. Its author, body and branch
        names are carried by every record of that commit.

        Args:
            commits: Commits in chronological order

        Returns:
            One record per conventional commit line
        """
        items: list[ChangeRecord] = []

        for commit in commits:
            pull_request = commit.merged_pull_request
            author = pull_request.author_login if pull_request else None

            for parsed in parse_semantic_commit(commit.message):
                pr_number = (pull_request.number if pull_request else None) or (
                    parsed.pr_number_from_commit
                )
                item = ChangeRecord(
                    type=parsed.type,
                    scope=parsed.scope,
                    description=parsed.description,
                    breaking=parsed.breaking,
                    raw=parsed.raw,
                    commit_sha=commit.sha,
                    pr_number=pr_number,
                    author=author,
                    body=pull_request.body if pull_request else "",
                    base_ref_name=pull_request.base_ref_name if pull_request else "",
                    head_ref_name=pull_request.head_ref_name if pull_request else "",
                )
                items.append(item)
                logger.debug("Parsed change item: %s", item)

        return cls(items)

    @overload
    def __getitem__(self, index: int) -> ChangeRecord: ...

    @overload
    def __getitem__(self, index: slice) -> ChangeCollection: ...

    def __getitem__(self, index: int | slice) -> ChangeRecord | ChangeCollection:
        if isinstance(index, slice):
            return ChangeCollection(self._items[index])
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[ChangeRecord]:
        return iter(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ChangeCollection):
            return NotImplemented
        return self._items == other._items

    def __hash__(self) -> int:
        return hash(self._items)

    def __repr__(self) -> str:
        return f"ChangeCollection({list(self._items)!r})"

    @property
    def has_breaking_changes(self) -> bool:
        return any(item.breaking for item in self._items)

    @property
    def has_features(self) -> bool:
        return any(item.type == "feat" for item in self._items)

    def filter(self, predicate: Callable[[ChangeRecord], bool]) -> ChangeCollection:
        return ChangeCollection(item for item in self._items if predicate(item))

    def map(self, transform: Callable[[ChangeRecord], T]) -> list[T]:
        return [transform(item) for item in self._items]

    def to_list(self) -> list[ChangeRecord]:
        return list(self._items)

    def get_by_type(self, commit_type: str) -> ChangeCollection:
        return self.filter(lambda item: item.type == commit_type)

    def get_breaking_changes(self) -> ChangeCollection:
        return self.filter(lambda item: item.breaking)

    def resolve_version_bump(
        self,
        *,
        pre_one_zero_minor_for_breaking: bool = True,
        no_auto_major: bool = True,
        current_major: int = 0,
    ) -> str:
        """Bump implied by the whole collection: major, minor or patch.

        Breaking changes only produce a major bump when both safety
        guards are off; see :func:`release_drafter.core.resolver.resolve_version_bump`.
        """
        return resolve_version_bump(
            has_breaking_changes=self.has_breaking_changes,
            has_features=self.has_features,
            pre_one_zero_minor_for_breaking=pre_one_zero_minor_for_breaking,
            no_auto_major=no_auto_major,
            current_major=current_major,
        )

    def categorize_by_type(self) -> tuple[dict[str, dict[str, Any]], list[ChangeRecord]]:
        """Group records under the built-in commit types.

        Returns:
            Tuple of a mapping from every known type to its ``title``,
            ``bump``, ``type`` and ``items``, and the records whose type
            is not a known commit type
        """
        categories: dict[str, dict[str, Any]] = {
            type_key: {
                "title": commit_type.title,
                "bump": commit_type.bump,
                "type": type_key,
                "items": [],
            }
            for type_key, commit_type in COMMIT_TYPES.items()
        }
        uncategorized: list[ChangeRecord] = []

        for item in self._items:
            if item.type in categories:
                categories[item.type]["items"].append(item)
            else:
                uncategorized.append(item)

        return categories, uncategorized

    def render_with_config(
        self,
        config: ReleaseDrafterConfig,
        owner: str | None = None,
        repository: str | None = None,
    ) -> str:
        """Render the changelog body fragment (``$CHANGES``).

        Args:
            config: Release drafter configuration
            owner: Repository owner, used for pull request links
            repository: Repository name, used for pull request links

        Returns:
            Rendered markdown
        """
        return render_changes(
            self,
            categories=config.categories,
            change_template=config.change_template,
            category_template=config.category_template,
            no_changes_template=config.no_changes_template,
            change_title_escapes=config.change_title_escapes,
            owner=owner,
            repository=repository,
        )
