"""Exception hierarchy for release-drafter.

All errors raised on purpose derive from :class:`ReleaseDrafterError`
so that the command line can report them uniformly.
"""

from __future__ import annotations


class ReleaseDrafterError(Exception):
    """Base class for all release-drafter errors."""


# =============================================================================
# Configuration
# =============================================================================


class ConfigError(ReleaseDrafterError):
    """Configuration could not be used."""


class ConfigNotFoundError(ConfigError):
    """No configuration file was found."""


class ConfigValidationError(ConfigError):
    """Configuration failed validation.

    Args:
        message: Summary of the failure
        errors: Human-readable messages, one per invalid field
    """

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        self.errors = errors or []
        if self.errors:
            message = message + "\n" + "\n".join(f"  - {e}" for e in self.errors)
        super().__init__(message)


# =============================================================================
# Templates
# =============================================================================


class TemplateError(ReleaseDrafterError):
    """A template could not be rendered."""


class MissingTemplateError(TemplateError):
    """A required template is absent from the configuration."""


# =============================================================================
# Versions
# =============================================================================


class VersionError(ReleaseDrafterError):
    """Version handling failed."""


class InvalidVersionError(VersionError):
    """A string is not a valid semantic version."""


# =============================================================================
# Git
# =============================================================================


class GitError(ReleaseDrafterError):
    """A git command failed.

    Args:
        message: Summary of the failure
        stderr: Captured standard error of the git process, if any
    """

    def __init__(self, message: str, stderr: str | None = None) -> None:
        self.stderr = stderr
        if stderr:
            message = f"{message}: {stderr.strip()}"
        super().__init__(message)
