"""Command-line interface for release-drafter."""

from __future__ import annotations

from release_drafter.cli.app import cli

__all__ = ["cli"]
