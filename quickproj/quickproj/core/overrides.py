"""User-supplied variable overrides."""

from __future__ import annotations

from typing import Iterable, Mapping

from .errors import ConfigurationError
from .models import TemplateDefinition, VariableValue


def split_list_value(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


def coerce_override(raw: str, default: VariableValue) -> VariableValue | None:
    """Coerce a raw override to the shape of the declared default.

    Returns:
        The override value, or None when the raw value is blank and the
        default applies
    """
    value = raw.strip()
    if not value:
        return None
    if isinstance(default, str):
        return value

    items = split_list_value(value)
    if not items:
        raise ConfigurationError(f"List override must contain at least one item: {raw!r}")
    return items


def collect_overrides(
    overrides: Iterable[tuple[str, str, str]],
    definitions: Mapping[str, TemplateDefinition],
) -> dict[str, dict[str, VariableValue]]:
    """Group (template, variable, raw value) triples per template.

    Args:
        overrides: Parsed override triples
        definitions: Definitions of the templates being installed

    Returns:
        Mapping of template name to its variable overrides
    """
    collected: dict[str, dict[str, VariableValue]] = {name: {} for name in definitions}
    for template_name, variable, raw in overrides:
        definition = definitions.get(template_name)
        if definition is None:
            raise ConfigurationError(
                f"Override targets a template that is not being installed: {template_name}"
            )
        if variable not in definition.variables:
            raise ConfigurationError(
                f"Template `{template_name}` does not declare variable `{variable}`"
            )
        value = coerce_override(raw, definition.variables[variable])
        if value is not None:
            collected[template_name][variable] = value
    return collected
