"""Rendering context construction."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Mapping, Union

from .models import VariableValue

logger = logging.getLogger(__name__)

PROJECT_NAME_KEY = "project_name"
TEMPLATE_NAME_KEY = "template_name"
RESERVED_KEYS = frozenset({PROJECT_NAME_KEY, TEMPLATE_NAME_KEY})

ContextValue = Union[str, tuple[str, ...]]
Context = Mapping[str, ContextValue]


def _freeze(value: VariableValue) -> ContextValue:
    if isinstance(value, str):
        return value
    return tuple(value)


def build_context(
    project_name: str,
    template_name: str,
    declared_variables: Mapping[str, VariableValue],
    user_overrides: Mapping[str, VariableValue] | None = None,
) -> Context:
    """Build the read-only rendering context for one template instance.

    Args:
        project_name: Name of the generated project
        template_name: Name of the template being installed
        declared_variables: Defaults declared by the template config
        user_overrides: Values supplied by the user, keyed by variable name

    Returns:
        Immutable mapping of variable names to string or tuple values
    """
    overrides = user_overrides or {}
    context: dict[str, ContextValue] = {}

    for name, default in declared_variables.items():
        if name in RESERVED_KEYS:
            logger.debug(f"Ignoring declared variable shadowing reserved key: {name}")
            continue
        context[name] = _freeze(overrides.get(name, default))

    context[PROJECT_NAME_KEY] = project_name
    context[TEMPLATE_NAME_KEY] = template_name

    logger.debug(
        f"Built context for {template_name}: {sorted(context)}"
    )
    return MappingProxyType(context)
