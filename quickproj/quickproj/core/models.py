"""Domain models for template definitions."""

from __future__ import annotations

from pathlib import Path
from typing import Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# A declared variable is either a single string or an ordered list of strings.
VariableValue = Union[str, list[str]]

CURRENT_DIRECTORY = "."


class SourceRecord(BaseModel):
    """A directory to copy from the template root into the project root."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    from_path: str = Field(..., alias="from", description="Path inside the template")
    to_path: str = Field(..., alias="to", description="Path inside the project")

    @property
    def targets_project_root(self) -> bool:
        return self.to_path in (CURRENT_DIRECTORY, f"{CURRENT_DIRECTORY}/", "")

    def resolve_from(self, template_root: Path) -> Path:
        if self.from_path in (CURRENT_DIRECTORY, f"{CURRENT_DIRECTORY}/"):
            return template_root
        return template_root / self.from_path


class FilesConfig(BaseModel):
    """The `files` section of a template config."""

    sources: list[SourceRecord] = Field(..., description="Copy records")
    directories: list[str] = Field(default_factory=list)
    templates: dict[str, str] = Field(
        default_factory=dict, description="Logical name to content template path"
    )
    generated: list[str] = Field(default_factory=list)

    @field_validator("sources")
    @classmethod
    def _require_sources(cls, value: list[SourceRecord]) -> list[SourceRecord]:
        if not value:
            raise ValueError(
                "Sources can't be empty. Please, specify at least one record with "
                "a directory or a file which have to be copied to the target directory."
            )
        return value


class ScriptsConfig(BaseModel):
    after_init: list[str] = Field(default_factory=list)


class TemplateDefinition(BaseModel):
    """A validated template config.

    The on-disk layout groups paths under `files` and hooks under
    `scripts`; the properties below expose the flat view the installer
    works with.
    """

    files: FilesConfig
    variables: dict[str, VariableValue] = Field(default_factory=dict)
    scripts: ScriptsConfig = Field(default_factory=ScriptsConfig)

    @field_validator("variables", mode="before")
    @classmethod
    def _check_variable_shapes(cls, value: object) -> object:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValueError("variables must be a mapping of names to values")
        for name, default in value.items():
            if isinstance(default, str):
                continue
            if isinstance(default, list) and all(isinstance(i, str) for i in default):
                continue
            raise ValueError(
                f"Variable `{name}` must be a string or a list of strings, "
                f"got {type(default).__name__}"
            )
        return value

    @property
    def sources(self) -> list[SourceRecord]:
        return self.files.sources

    @property
    def directories(self) -> list[str]:
        return self.files.directories

    @property
    def generated_files(self) -> list[str]:
        return self.files.generated

    @property
    def content_templates(self) -> dict[str, str]:
        return self.files.templates

    @property
    def post_init_hooks(self) -> list[str]:
        return self.scripts.after_init
