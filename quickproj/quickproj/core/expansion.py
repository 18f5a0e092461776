"""Cartesian expansion of multi-valued variables and context merging."""

from __future__ import annotations

import logging
from typing import Iterable, Mapping

from .context import Context

logger = logging.getLogger(__name__)

# Substituted for array elements that are not strings.
UNSUPPORTED_TYPE_VALUE = "unsupported type"

Subcontext = dict[str, str]


def _variable_subcontexts(name: str, value: object) -> list[Subcontext] | None:
    """Return one single-key subcontext per value, or None if unsupported."""
    if isinstance(value, str):
        return [{name: value}]
    if isinstance(value, (list, tuple)):
        return [
            {name: item if isinstance(item, str) else UNSUPPORTED_TYPE_VALUE}
            for item in value
        ]
    return None


def _product(
    accumulated: list[Subcontext], dimension: list[Subcontext]
) -> list[Subcontext]:
    if not accumulated:
        return [dict(entry) for entry in dimension]
    return [{**left, **right} for left in accumulated for right in dimension]


def generate_subcontexts(
    context: Mapping[str, object], variable_names: Iterable[str]
) -> list[Subcontext]:
    """Expand the referenced variables into every single-valued combination.

    Variables that are missing from the context, or hold a value that is
    neither a string nor an array, contribute no dimension: they are left
    for the rendering pass against the full context. When no variable is
    retained the result is empty and no multiplication occurs.

    Names are visited in sorted order and array elements in their declared
    order, so identical input always yields the same list.

    Args:
        context: Full rendering context
        variable_names: Names referenced by one path, filename or content unit

    Returns:
        List of flat subcontexts, one per combination
    """
    dimensions: list[list[Subcontext]] = []
    for name in sorted(set(variable_names)):
        if name not in context:
            continue
        subcontexts = _variable_subcontexts(name, context[name])
        if subcontexts is None:
            logger.debug(f"Skipping variable with unsupported type: {name}")
            continue
        dimensions.append(subcontexts)

    if not dimensions:
        return []

    result: list[Subcontext] = []
    for dimension in dimensions:
        # An empty array leaves nothing to combine with.
        if not dimension:
            return []
        result = _product(result, dimension)

    logger.debug(f"Expanded {len(dimensions)} variable(s) into {len(result)} subcontext(s)")
    return result


def merge_contexts(
    subcontext: Mapping[str, str],
    full_context: Context,
    protected_keys: Iterable[str] = (),
) -> dict[str, object]:
    """Fill a subcontext with every other key of the full context.

    Keys listed in `protected_keys` that the subcontext already holds keep
    their expanded value; every other key is taken from the full context.
    """
    protected = set(protected_keys)
    merged: dict[str, object] = dict(subcontext)
    for key, value in full_context.items():
        if key in protected and key in subcontext:
            continue
        merged[key] = value
    return merged
