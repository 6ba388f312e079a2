"""Configuration loading.

Configuration is read from ``[tool.release-drafter]`` in
``pyproject.toml`` or from a standalone ``.github/release-drafter.toml``
whose top-level table is the configuration itself.
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from release_drafter.config.models import ReleaseDrafterConfig
from release_drafter.exceptions import ConfigNotFoundError, ConfigValidationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "release-drafter.toml"
TOOL_TABLE = "release-drafter"


def find_pyproject_toml(start: Path | None = None) -> Path:
    """Find pyproject.toml in ``start`` or one of its parents.

    Args:
        start: Directory to start searching from, defaults to the cwd

    Returns:
        Path to pyproject.toml

    Raises:
        ConfigNotFoundError: If no pyproject.toml exists up to the root
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    raise ConfigNotFoundError(f"No pyproject.toml found in {current} or its parents")


def load_toml(path: Path) -> dict[str, Any]:
    """Read a TOML file.

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigValidationError: If the file is not valid TOML
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"Configuration file not found: {path}")
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigValidationError(f"Invalid TOML in {path}: {e}") from e


def extract_release_drafter_config(pyproject: dict[str, Any]) -> dict[str, Any]:
    """Return the ``[tool.release-drafter]`` table, empty if missing."""
    return pyproject.get("tool", {}).get(TOOL_TABLE, {})


def find_config_file(project_path: Path, config_name: str | None = None) -> Path:
    """Locate the configuration file for a project.

    A standalone ``.github/<config_name>`` wins over pyproject.toml.

    Args:
        project_path: Project directory
        config_name: File name inside ``.github``, defaults to release-drafter.toml

    Returns:
        Path to the configuration file

    Raises:
        ConfigNotFoundError: If neither file exists
    """
    standalone = project_path / ".github" / (config_name or DEFAULT_CONFIG_NAME)
    if standalone.is_file():
        return standalone
    if config_name:
        raise ConfigNotFoundError(f"Configuration file {standalone} not found")
    return find_pyproject_toml(project_path)


def parse_config(data: dict[str, Any], source: Path | str = "<config>") -> ReleaseDrafterConfig:
    """Validate raw configuration data.

    Raises:
        ConfigValidationError: With one message per invalid field
    """
    try:
        return ReleaseDrafterConfig.model_validate(data)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        ]
        raise ConfigValidationError(f"Invalid configuration in {source}", errors) from e


def load_config(project_path: Path | None = None, config_name: str | None = None) -> ReleaseDrafterConfig:
    """Load and validate the configuration of a project.

    Args:
        project_path: Project directory, defaults to the cwd
        config_name: Standalone configuration file name inside ``.github``

    Returns:
        Validated configuration

    Raises:
        ConfigNotFoundError: If no configuration file exists
        ConfigValidationError: If the configuration is invalid
    """
    path = find_config_file(project_path or Path.cwd(), config_name)
    data = load_toml(path)
    if path.name == "pyproject.toml":
        data = extract_release_drafter_config(data)
    logger.debug("Loaded configuration from %s", path)
    return parse_config(data, path)
