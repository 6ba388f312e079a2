"""Configuration models.

Keys are written in kebab-case in configuration files
(``change-template``) and exposed as snake_case attributes
(``change_template``). Both spellings are accepted when constructing
models in code.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from release_drafter.core.commits import COMMIT_TYPES


class _Model(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class CategoryConfig(_Model):
    """A changelog category.

    ``commit_types`` lists the commit types collected in the category;
    the special type ``breaking`` collects breaking changes of any type.
    When the category holds more than ``collapse_after`` changes (and
    ``collapse_after`` is positive) they are folded into a collapsible
    block.
    """

    title: str
    collapse_after: int = Field(default=0, ge=0, alias="collapse-after")
    commit_types: list[str] = Field(default_factory=list, alias="commit-types")

    @field_validator("commit_types", mode="before")
    @classmethod
    def _single_type_as_list(cls, value: object) -> object:
        if isinstance(value, str):
            return [value]
        return value


def _default_categories() -> list[CategoryConfig]:
    return [
        CategoryConfig(title=commit_type.title, collapse_after=0, commit_types=[type_key])
        for type_key, commit_type in COMMIT_TYPES.items()
    ]


class VersionResolverConfig(_Model):
    """Policy for turning changes into a version bump."""

    pre_one_zero_minor_for_breaking: bool = Field(
        default=True, alias="pre-one-zero-minor-for-breaking"
    )
    no_auto_major: bool = Field(default=True, alias="no-auto-major")
    default: Literal["major", "minor", "patch"] = "patch"


class ReplacerConfig(_Model):
    """Search/replace rule applied to the rendered body.

    ``search`` is matched literally unless written as ``/pattern/flags``.
    """

    search: str = Field(min_length=1)
    replace: str = ""


class ReleaseDrafterConfig(_Model):
    """Root configuration for drafting a release."""

    template: str | None = None
    header: str = ""
    footer: str = ""

    name_template: str = Field(default="", alias="name-template")
    tag_template: str = Field(default="", alias="tag-template")
    tag_prefix: str = Field(default="", alias="tag-prefix")
    version_template: str = Field(
        default="$MAJOR.$MINOR.$PATCH$PRERELEASE", alias="version-template"
    )

    change_template: str = Field(
        default="* $TITLE ($SHA) (#$NUMBER) @$AUTHOR", alias="change-template"
    )
    change_title_escapes: str = Field(default="", alias="change-title-escapes")
    no_changes_template: str = Field(default="* No changes", alias="no-changes-template")
    category_template: str = Field(default="## $TITLE", alias="category-template")
    categories: list[CategoryConfig] = Field(default_factory=_default_categories)

    exclude_contributors: list[str] = Field(default_factory=list, alias="exclude-contributors")
    no_contributors_template: str = Field(
        default="No contributors", alias="no-contributors-template"
    )

    replacers: list[ReplacerConfig] = Field(default_factory=list)

    version_resolver: VersionResolverConfig = Field(
        default_factory=VersionResolverConfig, alias="version-resolver"
    )

    prerelease: bool = False
    prerelease_identifier: str = Field(default="", alias="prerelease-identifier")
    include_pre_releases: bool = Field(default=False, alias="include-pre-releases")
    latest: Literal["true", "false", "legacy", ""] = "true"

    filter_by_commitish: bool = Field(default=False, alias="filter-by-commitish")
    commitish: str = ""

    @field_validator("categories", mode="before")
    @classmethod
    def _empty_categories_use_defaults(cls, value: object) -> object:
        if value is None or value == []:
            return _default_categories()
        return value

    @property
    def should_include_pre_releases(self) -> bool:
        """Prerelease drafts are looked up when a prerelease identifier is set."""
        return self.include_pre_releases or bool(self.prerelease_identifier)
