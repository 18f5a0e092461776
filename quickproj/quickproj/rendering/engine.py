"""Placeholder substitution that leaves unknown placeholders untouched."""

from __future__ import annotations

import logging
import re
import stat
from pathlib import Path
from typing import Mapping

from jinja2 import Environment, StrictUndefined, TemplateError

from ..core.errors import TemplateIOError, TemplateRenderError
from .io import atomic_write_text
from .variables import TEMPLATE_VARIABLE_PATTERN

logger = logging.getLogger(__name__)

# Anything Jinja2 would interpret, in order of preference: a placeholder
# (same grammar as extraction), any other `{{ ... }}` expression that does
# not span another opener, a stray opener, or a carriage return (Jinja2
# normalizes line endings).
_TOKEN_PATTERN = re.compile(
    r"(?P<placeholder>" + TEMPLATE_VARIABLE_PATTERN.pattern + r")"
    r"|\{\{(?:(?!\{\{|\}\}).)+?\}\}"
    r"|\{[{%#]"
    r"|\r"
)

# Private use code points never produced by the substitution pass.
_ESCAPE_START = "\ue000"
_ESCAPE_END = "\ue001"
_CARRIAGE_RETURN = "\ue002"

_SCOPE = "quickproj_context"

_ENVIRONMENT = Environment(
    undefined=StrictUndefined,
    autoescape=False,
    keep_trailing_newline=True,
)


def _string_values(context: Mapping[str, object]) -> dict[str, str]:
    """Only string values can be interpolated into text."""
    return {key: value for key, value in context.items() if isinstance(value, str)}


def _reconcile(text: str, values: Mapping[str, str]) -> tuple[str, list[tuple[str, str]]]:
    """Rewrite known placeholders into lookups and escape everything else.

    Returns:
        Jinja2 source and the (token, original) pairs to restore afterwards
    """
    escapes: list[tuple[str, str]] = []

    def _substitute(match: re.Match[str]) -> str:
        original = match.group(0)
        if original == "\r":
            return _CARRIAGE_RETURN
        if match.group("placeholder") is not None:
            name = match.group("name")
            if name in values:
                return "{{ %s[%r] }}" % (_SCOPE, name)
        token = f"{_ESCAPE_START}{len(escapes)}{_ESCAPE_END}"
        escapes.append((token, original))
        return token

    return _TOKEN_PATTERN.sub(_substitute, text), escapes


def _restore(rendered: str, escapes: list[tuple[str, str]]) -> str:
    for token, original in escapes:
        rendered = rendered.replace(token, original, 1)
    return rendered.replace(_CARRIAGE_RETURN, "\r")


def render_template(
    text: str, context: Mapping[str, object], filename: str = "<string>"
) -> str:
    """Substitute string-valued context keys into placeholders.

    Placeholders that are not defined in the context (or hold an array)
    are emitted character for character.

    Args:
        text: Text containing `{{name}}` placeholders
        context: Rendering context
        filename: Name reported if the substitution pass fails

    Returns:
        Rendered text
    """
    values = _string_values(context)
    source, escapes = _reconcile(text, values)
    try:
        rendered = _ENVIRONMENT.from_string(source).render({_SCOPE: values})
    except TemplateError as e:
        raise TemplateRenderError(filename, e) from e
    return _restore(rendered, escapes)


def read_template(template_path: Path) -> tuple[str, int]:
    """Return the text and permission bits of a content template."""
    try:
        text = template_path.read_text(encoding="utf-8")
        mode = stat.S_IMODE(template_path.stat().st_mode)
    except OSError as e:
        raise TemplateIOError(template_path, e) from e
    return text, mode


def write_rendered(
    text: str,
    context: Mapping[str, object],
    out_path: Path,
    *,
    filename: str,
    mode: int = 0o644,
) -> Path:
    """Render already loaded template text into `out_path`.

    The parent directory of `out_path` must already exist.
    """
    rendered = render_template(text, context, filename=filename)

    try:
        atomic_write_text(out_path, rendered, mode=mode)
    except OSError as e:
        raise TemplateIOError(out_path, e) from e

    logger.debug(f"Rendered {filename} → {out_path}")
    return out_path


def generate_file_from_template(
    context: Mapping[str, object], template_path: Path, out_path: Path
) -> Path:
    """Render a content template into a file.

    The parent directory of `out_path` must already exist. The output
    keeps the permission bits of the template.

    Args:
        context: Rendering context
        template_path: Content template to read
        out_path: Destination file path

    Returns:
        Output file path
    """
    logger.debug(f"Rendering template: {template_path}")

    text, mode = read_template(template_path)
    return write_rendered(
        text, context, out_path, filename=str(template_path), mode=mode
    )
