"""Implementation of the 'draft' command.

The draft command reads the local git history and prints the release
that would be drafted. Nothing is published.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from release_drafter.config import load_config
from release_drafter.core.release import generate_release_info
from release_drafter.exceptions import ReleaseDrafterError
from release_drafter.vcs import GitRepository, create_mock_last_release

if TYPE_CHECKING:
    from rich.console import Console

    from release_drafter.config.models import ReleaseDrafterConfig


def apply_overrides(config: ReleaseDrafterConfig, **overrides: Any) -> ReleaseDrafterConfig:
    """Copy of ``config`` with every override that is not ``None`` applied."""
    update = {key: value for key, value in overrides.items() if value is not None}
    if not update:
        return config
    return config.model_copy(update=update)


def run_draft(
    path: str | None,
    *,
    config_name: str | None,
    base_ref: str | None,
    base_version: str | None,
    version: str | None,
    tag: str | None,
    name: str | None,
    prerelease: bool | None,
    prerelease_identifier: str | None,
    header: str | None,
    footer: str | None,
    commitish: str | None,
    owner: str,
    repository: str,
    as_json: bool,
    console: Console,
    err_console: Console,
) -> None:
    """Run the draft command.

    Args:
        path: Optional path to project directory
        config_name: Configuration file name inside ``.github``
        base_ref: Only consider commits after this ref, also the version
            of the last release when ``base_version`` is not given
        base_version: Version of the last release
        version: Explicit version override
        tag: Explicit tag
        name: Explicit release name
        prerelease: Overrides the configured prerelease flag
        prerelease_identifier: Overrides the configured identifier
        header: Overrides the configured header
        footer: Overrides the configured footer
        commitish: Overrides the configured target
        owner: Repository owner
        repository: Repository name
        as_json: Print outputs as JSON instead of panels
        console: Console for standard output
        err_console: Console for error output
    """
    project_path = Path(path) if path else Path.cwd()

    try:
        config = apply_overrides(
            load_config(project_path, config_name),
            prerelease=prerelease,
            prerelease_identifier=prerelease_identifier,
            header=header,
            footer=footer,
            commitish=commitish,
        )
    except ReleaseDrafterError as e:
        err_console.print(f"[red]Error loading config:[/] {e}")
        raise SystemExit(1) from e

    last_release = create_mock_last_release(base_version or base_ref, config.tag_prefix)

    try:
        repo = GitRepository(project_path)
        commits = repo.get_commits(base_ref)
        release_info = generate_release_info(
            commits,
            config,
            last_release,
            version=version,
            tag=tag,
            name=name,
            owner=owner,
            repository=repository,
            target_commitish=config.commitish,
        )
    except ReleaseDrafterError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    if as_json:
        outputs = {
            **release_info.to_outputs(),
            "prerelease": release_info.prerelease,
            "make_latest": release_info.make_latest,
            "target_commitish": release_info.target_commitish,
        }
        console.print_json(json.dumps(outputs))
        return

    summary = Table.grid(padding=(0, 2))
    summary.add_column(style="dim")
    summary.add_column()
    summary.add_row("Tag", release_info.tag or "[dim]-[/]")
    summary.add_row("Name", release_info.name or "[dim]-[/]")
    summary.add_row("Version", f"[green]{release_info.resolved_version}[/]")
    summary.add_row("Prerelease", "yes" if release_info.prerelease else "no")
    summary.add_row("Commits", str(len(commits)))

    console.print(
        Panel(summary, title="[yellow]Release Draft (dry run)[/]", border_style="yellow")
    )
    console.print(Panel(Text(release_info.body), title="[bold]Body[/]", border_style="blue"))
