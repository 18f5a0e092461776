"""Template config discovery, parsing and validation."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Sequence

import yaml
from pydantic import ValidationError

from ..core.errors import ConfigurationError
from ..core.models import TemplateDefinition

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAMES = ("config.json", "config.yaml", "config.yml")


def find_config(
    template_root: Path, config_names: Sequence[str] | None = None
) -> Path | None:
    """Return the first config file present in the template root."""
    for name in config_names or DEFAULT_CONFIG_NAMES:
        candidate = template_root / name
        if candidate.is_file():
            return candidate
    return None


def _parse(config_path: Path) -> Any:
    try:
        raw = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Unable to read config: {e}", config_path) from e

    try:
        if config_path.suffix in (".yaml", ".yml"):
            return yaml.safe_load(raw) or {}
        return json.loads(raw)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Invalid config syntax: {e}", config_path) from e


def _describe(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "config"
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)


def load_config_file(config_path: Path) -> TemplateDefinition:
    """Parse and validate a single config file."""
    data = _parse(config_path)
    if not isinstance(data, dict):
        raise ConfigurationError("Config must be a mapping", config_path)

    try:
        definition = TemplateDefinition.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(_describe(e), config_path) from e

    logger.debug(
        f"Loaded {config_path}: {len(definition.sources)} source(s), "
        f"{len(definition.content_templates)} content template(s)"
    )
    return definition


def load_definition(
    template_root: Path, config_names: Sequence[str] | None = None
) -> TemplateDefinition:
    """Load the validated definition of the template stored at `template_root`.

    Args:
        template_root: Template directory
        config_names: Accepted config file names, in lookup order

    Returns:
        Validated template definition
    """
    config_path = find_config(template_root, config_names)
    if config_path is None:
        names = ", ".join(config_names or DEFAULT_CONFIG_NAMES)
        raise ConfigurationError(f"No config file found (looked for {names})", template_root)
    return load_config_file(config_path)
