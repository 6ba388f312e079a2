"""Tests for configuration loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from release_drafter.config.loader import (
    extract_release_drafter_config,
    find_config_file,
    find_pyproject_toml,
    load_config,
    load_toml,
    parse_config,
)
from release_drafter.config.models import (
    CategoryConfig,
    ReleaseDrafterConfig,
    VersionResolverConfig,
)
from release_drafter.core.commits import COMMIT_TYPES
from release_drafter.exceptions import ConfigNotFoundError, ConfigValidationError

PYPROJECT = """\
[project]
name = "demo"

[tool.release-drafter]
template = "## Changes\\n\\n$CHANGES"
name-template = "v$RESOLVED_VERSION"
tag-prefix = "v"
exclude-contributors = ["ci-bot"]

[[tool.release-drafter.categories]]
title = "New"
commit-types = "feat"
collapse-after = 3

[tool.release-drafter.version-resolver]
no-auto-major = false
default = "minor"

[[tool.release-drafter.replacers]]
search = "/JIRA-(\\\\d+)/g"
replace = "[JIRA-$1](https://jira.example.com/JIRA-$1)"
"""


@pytest.fixture
def project_with_pyproject(tmp_path: Path) -> Path:
    """Project directory with release-drafter config in pyproject.toml."""
    (tmp_path / "pyproject.toml").write_text(PYPROJECT)
    return tmp_path


class TestReleaseDrafterConfig:
    """Tests for ReleaseDrafterConfig model."""

    def test_default_config(self):
        """Default configuration has sensible values."""
        config = ReleaseDrafterConfig()

        assert config.template is None
        assert config.change_template == "* $TITLE ($SHA) (#$NUMBER) @$AUTHOR"
        assert config.category_template == "## $TITLE"
        assert config.no_changes_template == "* No changes"
        assert config.version_template == "$MAJOR.$MINOR.$PATCH$PRERELEASE"
        assert config.latest == "true"

    def test_default_categories(self):
        """Every known commit type gets its own category by default."""
        config = ReleaseDrafterConfig()

        assert [c.commit_types for c in config.categories] == [[key] for key in COMMIT_TYPES]
        assert config.categories[0].title == "Features"

    def test_empty_categories_use_defaults(self):
        """An empty category list falls back to the defaults."""
        config = ReleaseDrafterConfig(categories=[])

        assert len(config.categories) == len(COMMIT_TYPES)

    def test_kebab_case_aliases(self):
        """Kebab-case keys map to snake_case attributes."""
        config = ReleaseDrafterConfig.model_validate(
            {"change-template": "- $TITLE", "prerelease-identifier": "beta"}
        )

        assert config.change_template == "- $TITLE"
        assert config.prerelease_identifier == "beta"

    def test_should_include_pre_releases(self):
        """A prerelease identifier implies looking at prereleases."""
        assert not ReleaseDrafterConfig().should_include_pre_releases
        assert ReleaseDrafterConfig(prerelease_identifier="rc").should_include_pre_releases
        assert ReleaseDrafterConfig(include_pre_releases=True).should_include_pre_releases

    def test_frozen(self):
        """Configuration objects are immutable."""
        config = ReleaseDrafterConfig()

        with pytest.raises(ValueError):
            config.template = "x"  # type: ignore[misc]


class TestCategoryConfig:
    """Tests for CategoryConfig model."""

    def test_single_commit_type(self):
        """A single commit type string becomes a list."""
        category = CategoryConfig.model_validate({"title": "Fixes", "commit-types": "fix"})

        assert category.commit_types == ["fix"]
        assert category.collapse_after == 0

    def test_negative_collapse_after_rejected(self):
        """collapse-after must not be negative."""
        with pytest.raises(ValueError):
            CategoryConfig.model_validate({"title": "x", "collapse-after": -1})


class TestVersionResolverConfig:
    """Tests for VersionResolverConfig model."""

    def test_defaults(self):
        """Both guards are on and patch is the default."""
        resolver = VersionResolverConfig()

        assert resolver.pre_one_zero_minor_for_breaking is True
        assert resolver.no_auto_major is True
        assert resolver.default == "patch"


class TestParseConfig:
    """Tests for parse_config()."""

    def test_validation_errors_listed(self):
        """Each invalid field is reported."""
        with pytest.raises(ConfigValidationError) as exc_info:
            parse_config(
                {"latest": "sometimes", "version-resolver": {"default": "huge"}},
                "test.toml",
            )

        assert "test.toml" in str(exc_info.value)
        assert len(exc_info.value.errors) == 2
        assert any(e.startswith("latest") for e in exc_info.value.errors)

    def test_empty_replacer_search_rejected(self):
        """Replacers need a search string."""
        with pytest.raises(ConfigValidationError):
            parse_config({"replacers": [{"search": "", "replace": "x"}]})

    def test_unknown_keys_ignored(self):
        """Unknown keys do not fail validation."""
        assert parse_config({"template": "x", "autolabeler": []}).template == "x"


class TestLoadToml:
    """Tests for load_toml()."""

    def test_load_nonexistent_raises(self, tmp_path: Path):
        """Missing files raise ConfigNotFoundError."""
        with pytest.raises(ConfigNotFoundError):
            load_toml(tmp_path / "nonexistent.toml")

    def test_invalid_toml(self, tmp_path: Path):
        """Broken TOML raises ConfigValidationError."""
        path = tmp_path / "broken.toml"
        path.write_text("template = ")

        with pytest.raises(ConfigValidationError):
            load_toml(path)


class TestFindConfigFile:
    """Tests for configuration discovery."""

    def test_find_in_parent_dir(self, project_with_pyproject: Path):
        """pyproject.toml is found from a subdirectory."""
        subdir = project_with_pyproject / "src" / "pkg"
        subdir.mkdir(parents=True)

        assert find_pyproject_toml(subdir) == (project_with_pyproject / "pyproject.toml").resolve()

    def test_standalone_file_wins(self, project_with_pyproject: Path):
        """.github/release-drafter.toml is preferred over pyproject.toml."""
        github = project_with_pyproject / ".github"
        github.mkdir()
        (github / "release-drafter.toml").write_text('template = "standalone"\n')

        assert find_config_file(project_with_pyproject) == github / "release-drafter.toml"

    def test_named_file_missing(self, project_with_pyproject: Path):
        """An explicitly named file must exist."""
        with pytest.raises(ConfigNotFoundError):
            find_config_file(project_with_pyproject, "drafter.toml")


class TestExtractReleaseDrafterConfig:
    """Tests for extract_release_drafter_config()."""

    def test_extract_existing_config(self):
        """The tool table is returned."""
        data = {"tool": {"release-drafter": {"template": "x"}}}

        assert extract_release_drafter_config(data) == {"template": "x"}

    def test_extract_missing_config(self):
        """A missing table gives an empty dict."""
        assert extract_release_drafter_config({"project": {"name": "demo"}}) == {}


class TestLoadConfig:
    """Tests for load_config()."""

    def test_load_from_pyproject(self, project_with_pyproject: Path):
        """All aliases in pyproject.toml are applied."""
        config = load_config(project_with_pyproject)

        assert config.template == "## Changes\n\n$CHANGES"
        assert config.name_template == "v$RESOLVED_VERSION"
        assert config.tag_prefix == "v"
        assert config.exclude_contributors == ["ci-bot"]
        assert config.categories == [
            CategoryConfig(title="New", commit_types=["feat"], collapse_after=3)
        ]
        assert config.version_resolver.no_auto_major is False
        assert config.version_resolver.default == "minor"
        assert config.replacers[0].search == "/JIRA-(\\d+)/g"

    def test_load_standalone(self, tmp_path: Path):
        """A standalone file is the configuration table itself."""
        github = tmp_path / ".github"
        github.mkdir()
        (github / "drafter.toml").write_text('template = "$CHANGES"\nprerelease = true\n')

        config = load_config(tmp_path, "drafter.toml")

        assert config.template == "$CHANGES"
        assert config.prerelease is True

    def test_pyproject_without_table(self, tmp_path: Path):
        """A pyproject.toml without the tool table gives the defaults."""
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "demo"\n')

        assert load_config(tmp_path) == ReleaseDrafterConfig()
