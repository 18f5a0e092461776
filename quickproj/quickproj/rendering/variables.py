"""Placeholder discovery in paths, filenames and file contents."""

from __future__ import annotations

import re

TEMPLATE_VARIABLE_PATTERN = re.compile(r"\{\{\s*(?P<name>[\w-]+)\s*\}\}")


def extract_variables(text: str) -> set[str]:
    """Return the distinct placeholder names referenced in the text."""
    return {match.group("name") for match in TEMPLATE_VARIABLE_PATTERN.finditer(text)}
