"""Inventory of templates installed in the local template store."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Iterable, Mapping, Sequence

from ..config.loader import find_config
from ..core.errors import TemplateNotFoundError

logger = logging.getLogger(__name__)


def _is_hidden(path: Path) -> bool:
    return path.name.startswith(".")


def is_template_directory(path: Path, config_names: Sequence[str] | None = None) -> bool:
    return path.is_dir() and find_config(path, config_names) is not None


def get_templates_map(
    templates_dir: Path, config_names: Sequence[str] | None = None
) -> dict[str, Path]:
    """Map template names to their directories.

    Every directory below the store that carries a config file is a
    template; hidden directories are not searched.
    """
    if not templates_dir.is_dir():
        return {}

    templates: dict[str, Path] = {}
    pending = [templates_dir]
    while pending:
        current = pending.pop()
        for entry in sorted(current.iterdir()):
            if not entry.is_dir() or _is_hidden(entry):
                continue
            if is_template_directory(entry, config_names):
                templates[entry.name] = entry
            pending.append(entry)

    logger.debug(f"Found {len(templates)} template(s) in {templates_dir}")
    return dict(sorted(templates.items()))


def get_repositories_map(
    templates_dir: Path, config_names: Sequence[str] | None = None
) -> dict[str, Path]:
    """Map first-level repository directories (non-templates) to their paths."""
    if not templates_dir.is_dir():
        return {}

    return {
        entry.name: entry
        for entry in sorted(templates_dir.iterdir())
        if entry.is_dir()
        and not _is_hidden(entry)
        and not is_template_directory(entry, config_names)
    }


def check_template_list(requested: Iterable[str], available: Mapping[str, Path]) -> None:
    """Ensure every requested template is available."""
    names = list(requested)
    if not names:
        raise TemplateNotFoundError(
            "Please, specify at least one used template and try again."
        )

    missing = [name for name in names if name not in available]
    if missing:
        raise TemplateNotFoundError(
            "The templates with the following names weren't found or not available: "
            + ", ".join(missing)
        )


def delete_template(template_path: Path) -> None:
    logger.debug(f"Removing template at {template_path}")
    shutil.rmtree(template_path)
