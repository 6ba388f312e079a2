"""Click application and logging setup."""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from release_drafter import __version__
from release_drafter.cli.commands.draft import run_draft

console = Console()
err_console = Console(stderr=True)


def configure_logging(verbose: bool) -> None:
    """Send log records to the error console through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="release-drafter")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """Draft the next release from conventional commits."""
    configure_logging(verbose)


@cli.command("draft")
@click.argument("path", required=False, type=click.Path(exists=True, file_okay=False))
@click.option(
    "--config",
    "config_name",
    help="Configuration file name inside .github (default: pyproject.toml).",
)
@click.option(
    "--base-ref",
    help="Only consider commits after this git ref. Also the last version unless --base-version is given.",
)
@click.option("--base-version", help="Version of the last release, e.g. 1.2.0.")
@click.option("--version", "version", help="Explicit version of the next release.")
@click.option("--tag", help="Tag of the next release, may use version variables.")
@click.option("--name", help="Name of the next release, may use version variables.")
@click.option(
    "--prerelease/--no-prerelease",
    default=None,
    help="Mark the release as a prerelease.",
)
@click.option("--prerelease-identifier", help="Prerelease identifier, e.g. rc or beta.")
@click.option("--header", help="Text prepended to the body template.")
@click.option("--footer", help="Text appended to the body template.")
@click.option("--commitish", help="Branch or commit the release targets.")
@click.option("--owner", default="", help="Repository owner used in links.")
@click.option("--repository", default="", help="Repository name used in links.")
@click.option("--json", "as_json", is_flag=True, help="Print outputs as JSON.")
def draft(
    path: str | None,
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
) -> None:
    """Draft the next release from the local git history.

    Nothing is published; the drafted release is printed.
    """
    run_draft(
        path,
        config_name=config_name,
        base_ref=base_ref,
        base_version=base_version,
        version=version,
        tag=tag,
        name=name,
        prerelease=prerelease,
        prerelease_identifier=prerelease_identifier,
        header=header,
        footer=footer,
        commitish=commitish,
        owner=owner,
        repository=repository,
        as_json=as_json,
        console=console,
        err_console=err_console,
    )

