"""Installation task: materializes one template into a project root."""

from __future__ import annotations

import logging
import time
from enum import Enum
from pathlib import Path
from typing import Callable, Mapping

from pydantic import BaseModel, Field

from ..core.context import Context, build_context
from ..core.errors import (
    ConfigurationError,
    InstallationError,
    QuickprojError,
    TemplateIOError,
)
from ..core.expansion import generate_subcontexts, merge_contexts
from ..core.models import TemplateDefinition, VariableValue
from ..rendering.engine import read_template, render_template, write_rendered
from ..rendering.io import copy_directory_contents, ensure_directory
from ..rendering.variables import extract_variables

logger = logging.getLogger(__name__)


class InstallStage(str, Enum):
    """Stages of an installation task, in execution order."""

    CREATED = "created"
    BUILDING_CONTEXT = "building_context"
    CREATING_DECLARED_DIRECTORIES = "creating_declared_directories"
    CREATING_SOURCE_DIRECTORIES = "creating_source_directories"
    COPYING_FILES = "copying_files"
    GENERATING_FILES = "generating_files"
    FINISHED = "finished"


WORK_STAGES = (
    InstallStage.CREATING_DECLARED_DIRECTORIES,
    InstallStage.CREATING_SOURCE_DIRECTORIES,
    InstallStage.COPYING_FILES,
    InstallStage.GENERATING_FILES,
)

STAGE_DESCRIPTIONS = {
    InstallStage.BUILDING_CONTEXT: "Preparing contexts for the task...",
    InstallStage.CREATING_DECLARED_DIRECTORIES: (
        "Creating directories based on template definitions..."
    ),
    InstallStage.CREATING_SOURCE_DIRECTORIES: "Creating directories for the sources...",
    InstallStage.COPYING_FILES: "Copying files into the target directory...",
    InstallStage.GENERATING_FILES: "Generating files from the templates...",
}


class StageEvent(BaseModel):
    """Progress notification emitted on every stage transition."""

    template_name: str
    stage: InstallStage
    step: int = Field(0, description="Index of the work stage, 0 outside them")
    total: int = Field(len(WORK_STAGES), description="Number of work stages")
    description: str
    elapsed: float | None = Field(None, description="Seconds, set when finished")

    @property
    def label(self) -> str:
        if self.step:
            return f"[{self.step}/{self.total}]"
        return ""


ProgressCallback = Callable[[StageEvent], None]


def log_progress(event: StageEvent) -> None:
    """Default progress sink."""
    if event.label:
        logger.info(f"{event.label} {event.description}")
    else:
        logger.info(event.description)


class InstallResult(BaseModel):
    """Paths materialized by one installation task."""

    template_name: str
    project_root: Path
    directories: list[Path] = Field(default_factory=list)
    copied: list[Path] = Field(default_factory=list)
    generated: list[Path] = Field(default_factory=list)
    elapsed: float = 0.0


class InstallationTask:
    """Drives one template through every installation stage exactly once."""

    def __init__(
        self,
        project_root: Path,
        template_root: Path,
        definition: TemplateDefinition,
        *,
        project_name: str | None = None,
        template_name: str | None = None,
        overrides: Mapping[str, VariableValue] | None = None,
        progress: ProgressCallback | None = None,
    ) -> None:
        self.project_root = Path(project_root)
        self.template_root = Path(template_root)
        self.definition = definition
        self.project_name = project_name or self.project_root.name
        self.template_name = template_name or self.template_root.name
        self.overrides = dict(overrides or {})
        self.progress = progress or log_progress
        self.stage = InstallStage.CREATED
        self._result = InstallResult(
            template_name=self.template_name, project_root=self.project_root
        )

    def run(self) -> InstallResult:
        """Run every stage in order and return what was produced."""
        if self.stage is not InstallStage.CREATED:
            raise RuntimeError("An installation task can only run once")

        started = time.monotonic()

        self._enter(InstallStage.BUILDING_CONTEXT)
        context = build_context(
            self.project_name,
            self.template_name,
            self.definition.variables,
            self.overrides,
        )

        self._enter(InstallStage.CREATING_DECLARED_DIRECTORIES)
        self._guarded(self.create_declared_directories, context)

        self._enter(InstallStage.CREATING_SOURCE_DIRECTORIES)
        self._guarded(self.create_source_directories)

        self._enter(InstallStage.COPYING_FILES)
        self._guarded(self.copy_files)

        self._enter(InstallStage.GENERATING_FILES)
        self._guarded(self.generate_files, context)

        self._result.elapsed = time.monotonic() - started
        self.stage = InstallStage.FINISHED
        self.progress(
            StageEvent(
                template_name=self.template_name,
                stage=InstallStage.FINISHED,
                description=(
                    f"Installation of the `{self.template_name}` template has been "
                    f"completed in {self._result.elapsed:.2f}s."
                ),
                elapsed=self._result.elapsed,
            )
        )
        return self._result

    def _enter(self, stage: InstallStage) -> None:
        self.stage = stage
        step = WORK_STAGES.index(stage) + 1 if stage in WORK_STAGES else 0
        self.progress(
            StageEvent(
                template_name=self.template_name,
                stage=stage,
                step=step,
                description=STAGE_DESCRIPTIONS[stage],
            )
        )

    def _guarded(self, action: Callable[..., None], *args: object) -> None:
        try:
            action(*args)
        except (QuickprojError, OSError) as e:
            raise InstallationError(
                self.template_name, STAGE_DESCRIPTIONS[self.stage].rstrip(".").lower(), e
            ) from e

    def _inside_project(self, relative: str | Path) -> Path:
        """Join a path onto the project root, refusing anything that leaves it."""
        path = self.project_root / relative
        if not path.resolve().is_relative_to(self.project_root.resolve()):
            raise ConfigurationError(
                f"Path `{relative}` resolves outside the project root {self.project_root}"
            )
        return path

    def _make_directory(self, path: Path, *, record: bool = True) -> None:
        try:
            ensure_directory(path)
        except OSError as e:
            raise TemplateIOError(path, e) from e
        if record:
            logger.debug(f"Created directory {path}")
            self._result.directories.append(path)

    def create_declared_directories(self, context: Context) -> None:
        """Create the directories listed in the template definition."""
        for pattern in self.definition.directories:
            variables = extract_variables(pattern)
            if not variables:
                self._make_directory(self._inside_project(pattern))
                continue

            subcontexts = generate_subcontexts(context, variables)
            if not subcontexts:
                logger.debug(f"No values to expand directory pattern: {pattern}")
            for subcontext in subcontexts:
                relative = render_template(pattern, subcontext, filename=pattern)
                self._make_directory(self._inside_project(relative))

    def create_source_directories(self) -> None:
        """Create every `to` directory of the source records."""
        for record in self.definition.sources:
            if record.targets_project_root:
                continue
            self._make_directory(self._inside_project(record.to_path))

    def copy_files(self) -> None:
        """Copy the contents of each source into its destination."""
        for record in self.definition.sources:
            source = record.resolve_from(self.template_root)
            destination = (
                self.project_root
                if record.targets_project_root
                else self._inside_project(record.to_path)
            )
            try:
                copied = copy_directory_contents(source, destination)
            except OSError as e:
                raise TemplateIOError(source, e) from e
            logger.debug(f"Copied {len(copied)} entr(ies) from {source} to {destination}")
            self._result.copied.extend(copied)

    def _generation_targets(
        self, logical_name: str, context: Context
    ) -> dict[Path, Mapping[str, object]]:
        """Map every concrete output path of a content template to its context."""
        targets: dict[Path, Mapping[str, object]] = {}
        for pattern in self.definition.generated_files:
            # The logical name must match whole trailing path components.
            if pattern != logical_name and not pattern.endswith(f"/{logical_name}"):
                continue

            path_variables = extract_variables(pattern)
            if not path_variables:
                targets[self._inside_project(pattern)] = context
                continue

            for subcontext in generate_subcontexts(context, path_variables):
                relative = render_template(pattern, subcontext, filename=pattern)
                # Later duplicates overwrite earlier ones.
                targets[self._inside_project(relative)] = merge_contexts(
                    subcontext, context, path_variables
                )
        return targets

    def generate_files(self, context: Context) -> None:
        """Render each content template into its generated file paths."""
        for logical_name, relative_path in self.definition.content_templates.items():
            template_path = self.template_root / relative_path
            template_text, mode = read_template(template_path)
            logger.debug(
                f"Template {logical_name} references {sorted(extract_variables(template_text))}"
            )

            for out_path, file_context in self._generation_targets(
                logical_name, context
            ).items():
                self._make_directory(out_path.parent, record=False)
                write_rendered(
                    template_text,
                    file_context,
                    out_path,
                    filename=str(template_path),
                    mode=mode,
                )
                self._result.generated.append(out_path)


def install(
    project_root: Path,
    template_root: Path,
    definition: TemplateDefinition,
    *,
    project_name: str | None = None,
    template_name: str | None = None,
    overrides: Mapping[str, VariableValue] | None = None,
    progress: ProgressCallback | None = None,
) -> InstallResult:
    """Materialize one template into the shared project root.

    Args:
        project_root: Root directory of the generated project
        template_root: Directory holding the template
        definition: Validated template definition
        project_name: Defaults to the project root's directory name
        template_name: Defaults to the template root's directory name
        overrides: User-supplied variable values
        progress: Receives a StageEvent on every stage transition

    Returns:
        Summary of created directories, copied entries and generated files
    """
    task = InstallationTask(
        project_root,
        template_root,
        definition,
        project_name=project_name,
        template_name=template_name,
        overrides=overrides,
        progress=progress,
    )
    return task.run()
