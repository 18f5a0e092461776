"""CLI argument parsers and validators."""

from __future__ import annotations

from pathlib import Path

import typer


def parse_override(value: str) -> tuple[str, str, str]:
    """Parse a variable override in format TEMPLATE:NAME=VALUE."""
    if "=" not in value:
        raise typer.BadParameter(f"Must be TEMPLATE:NAME=VALUE, got: {value!r}")
    key, raw = value.split("=", 1)
    if ":" not in key:
        raise typer.BadParameter(f"Must be TEMPLATE:NAME=VALUE, got: {value!r}")
    template_name, variable = (part.strip() for part in key.split(":", 1))
    if not template_name or not variable:
        raise typer.BadParameter(f"Template and variable names are required: {value!r}")
    return template_name, variable, raw


def parse_project_name(value: str) -> str:
    """Reject project names that are not a single path component."""
    name = value.strip()
    if not name or name in (".", "..") or Path(name).name != name:
        raise typer.BadParameter(f"Invalid project name: {value!r}")
    return name
