"""Changelog rendering.

Renders change records into the markdown fragment substituted for
``$CHANGES`` in the release body, and builds the contributors sentence
substituted for ``$CONTRIBUTORS``.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Protocol

from release_drafter.core.commits import (
    BREAKING_CATEGORY_TOKEN,
    ChangeRecord,
    apply_title_post_processors,
)
from release_drafter.core.template import render_template

if TYPE_CHECKING:
    from release_drafter.models import Author, Commit, PullRequest

DEFAULT_AUTHOR = "ghost"

# Appended to @ and # so markdown renderers do not turn them into mentions or links
AUTOLINK_BREAKER = "<!---->"


class Category(Protocol):
    """A configured changelog category."""

    title: str
    collapse_after: int
    commit_types: list[str]


def escape_title(title: str, escapes: str) -> str:
    """Escape markdown-sensitive characters in a change title.

    Every character of ``escapes`` is prefixed with a backslash, except
    ``@`` and ``#`` which are followed by an empty HTML comment instead.
    Text inside backtick code spans is left as is.

    Args:
        title: Change title
        escapes: Characters to escape, empty to disable escaping

    Returns:
        Escaped title
    """
    if not escapes:
        return title

    pattern = re.compile(f"[{re.escape(escapes)}]|`.*?`")

    def replace(match: re.Match[str]) -> str:
        text = match.group(0)
        if len(text) > 1:
            return text
        if text in ("@", "#"):
            return f"{text}{AUTOLINK_BREAKER}"
        return f"\\{text}"

    return pattern.sub(replace, title)


def pull_request_url(owner: str | None, repository: str | None, number: int | None) -> str:
    if not (owner and repository and number):
        return ""
    return f"https://github.com/{owner}/{repository}/pull/{number}"


def render_change(
    item: ChangeRecord,
    change_template: str,
    change_title_escapes: str = "",
    owner: str | None = None,
    repository: str | None = None,
) -> str:
    """Render one change line through the change template."""
    title = apply_title_post_processors(item.description, ["sentence-case"])
    short_sha = item.short_sha or ""
    return render_template(
        change_template,
        {
            "$TITLE": escape_title(title, change_title_escapes),
            "$NUMBER": item.pr_number or "",
            "$AUTHOR": item.author or DEFAULT_AUTHOR,
            "$SHA": short_sha,
            "$COMMIT": short_sha,
            "$URL": pull_request_url(owner, repository, item.pr_number),
            "$BODY": item.body,
            "$BASE_REF_NAME": item.base_ref_name,
            "$HEAD_REF_NAME": item.head_ref_name,
        },
    )


def _summary(count: int) -> str:
    return "1 change" if count == 1 else f"{count} changes"


def render_changes(
    items: Sequence[ChangeRecord],
    *,
    categories: Sequence[Category],
    change_template: str,
    category_template: str,
    no_changes_template: str,
    change_title_escapes: str = "",
    owner: str | None = None,
    repository: str | None = None,
) -> str:
    """Render change records as a categorized markdown changelog.

    Each record goes to the first category listing its type, or listing
    ``breaking`` when the record is a breaking change. Records matching
    no category are rendered first, then each non-empty category with its
    header. A category holding more items than its ``collapse_after``
    threshold (when positive) has all of its items folded into a
    ``<details>`` block.

    Args:
        items: Change records in commit order
        categories: Configured categories in display order
        change_template: Template for each change line
        category_template: Template for category headers
        no_changes_template: Returned verbatim when there are no records
        change_title_escapes: Characters to escape in titles
        owner: Repository owner for pull request links
        repository: Repository name for pull request links

    Returns:
        Rendered changelog
    """
    if not items:
        return no_changes_template

    grouped: list[tuple[Category, list[ChangeRecord]]] = [(c, []) for c in categories]
    uncategorized: list[ChangeRecord] = []

    for item in items:
        for category, matched in grouped:
            commit_types = category.commit_types or []
            if item.type in commit_types or (
                item.breaking and BREAKING_CATEGORY_TOKEN in commit_types
            ):
                matched.append(item)
                break
        else:
            uncategorized.append(item)

    def render_all(records: Iterable[ChangeRecord]) -> str:
        return "\n".join(
            render_change(r, change_template, change_title_escapes, owner, repository)
            for r in records
        )

    changelog: list[str] = []

    if uncategorized:
        changelog.append(render_all(uncategorized) + "\n\n")

    rendered_categories = 0
    for category, matched in grouped:
        if not matched:
            continue

        if rendered_categories > 0:
            changelog.append("\n\n")

        changelog.append(render_template(category_template, {"$TITLE": category.title}))
        changelog.append("\n\n")

        rendered_items = render_all(matched)
        collapse_after = category.collapse_after or 0
        if collapse_after > 0 and len(matched) > collapse_after:
            changelog.append(
                f"<details>\n<summary>{_summary(len(matched))}</summary>\n\n"
                f"{rendered_items}\n</details>"
            )
        else:
            changelog.append(rendered_items)

        rendered_categories += 1

    return "".join(changelog).strip()


def _author_handle(author: Author | str) -> str:
    if isinstance(author, str):
        return f"@{author}"
    if author.is_bot:
        return f"[{author.login}[bot]]({author.url})"
    return f"@{author.login}"


def contributors_sentence(
    commits: Iterable[Commit],
    pull_requests: Iterable[PullRequest],
    exclude: Sequence[str] = (),
    fallback: str = "No contributors",
) -> str:
    """Build the ``$CONTRIBUTORS`` sentence.

    Commit authors with an account and pull request authors are listed
    as ``@handle``, bots as a link to their app page, and commit authors
    without an account by name. Handles in ``exclude`` are skipped.

    Args:
        commits: Commits of the release
        pull_requests: Merged pull requests of the release
        exclude: Logins or names to leave out
        fallback: Returned when nobody is left

    Returns:
        ``"@a, @b and @c"`` style sentence, sorted
    """
    contributors: set[str] = set()

    for commit in commits:
        if commit.author_login:
            if commit.author_login not in exclude:
                contributors.add(f"@{commit.author_login}")
        elif commit.author_name and commit.author_name not in exclude:
            contributors.add(commit.author_name)

    for pull_request in pull_requests:
        login = pull_request.author_login
        if pull_request.author is None or not login or login in exclude:
            continue
        contributors.add(_author_handle(pull_request.author))

    ordered = sorted(contributors)
    if len(ordered) > 1:
        return ", ".join(ordered[:-1]) + " and " + ordered[-1]
    if ordered:
        return ordered[0]
    return fallback
