"""Main CLI application."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from .. import hooks
from ..config import loader
from ..core.errors import QuickprojError
from ..core.overrides import collect_overrides
from ..rendering.io import ensure_directory
from ..settings import get_settings
from ..store import inventory
from ..tasks.installation import install
from .parsers import parse_override, parse_project_name

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="quickproj",
    help="Scaffold new projects from reusable templates.",
)


def _templates_dir(override: Optional[Path]) -> Path:
    return override or get_settings().resolved_templates_dir


def _fail(error: Exception) -> None:
    typer.secho(f"Error: {error}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


@app.callback()
def configure(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging."),
    ] = False,
) -> None:
    """Scaffold new projects from reusable templates."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )


@app.command()
def init(
    project_name: Annotated[
        str,
        typer.Argument(help="Name of the project directory to create."),
    ],
    templates: Annotated[
        list[str],
        typer.Argument(help="Templates used for the project generation."),
    ],
    dest: Annotated[
        Optional[Path],
        typer.Option("--dest", help="Parent directory of the project (default: cwd).", metavar="DIR"),
    ] = None,
    variables: Annotated[
        list[str],
        typer.Option(
            "--var",
            help="Override a template variable (format: TEMPLATE:NAME=VALUE, "
            "comma-separated for lists). Repeatable.",
            metavar="TEMPLATE:NAME=VALUE",
        ),
    ] = [],
    run_hooks: Annotated[
        bool,
        typer.Option("--run-hooks", help="Run post-init hooks after generation."),
    ] = False,
    templates_dir: Annotated[
        Optional[Path],
        typer.Option("--templates-dir", help="Template store location.", metavar="DIR"),
    ] = None,
) -> None:
    """Initialize a new project with the specified templates."""
    started = time.monotonic()
    settings = get_settings()
    name = parse_project_name(project_name)
    parsed_overrides = [parse_override(value) for value in variables]

    try:
        available = inventory.get_templates_map(
            _templates_dir(templates_dir), settings.config_names
        )
        inventory.check_template_list(templates, available)

        definitions = {
            template: loader.load_definition(available[template], settings.config_names)
            for template in templates
        }
        overrides = collect_overrides(parsed_overrides, definitions)

        project_root = ensure_directory((dest or Path.cwd()) / name)
        logger.debug(f"Project root: {project_root}")

        for template in templates:
            install(
                project_root,
                available[template],
                definitions[template],
                project_name=name,
                template_name=template,
                overrides=overrides[template],
            )

        if run_hooks:
            for template in templates:
                hooks.run_hooks(
                    definitions[template].post_init_hooks,
                    project_root,
                    settings.hook_shell,
                )
    except (QuickprojError, OSError) as e:
        _fail(e)

    typer.echo(f"✨ Done in {time.monotonic() - started:.2f}s")


@app.command("list")
def list_templates(
    templates_dir: Annotated[
        Optional[Path],
        typer.Option("--templates-dir", help="Template store location.", metavar="DIR"),
    ] = None,
) -> None:
    """Show the list of available templates."""
    settings = get_settings()
    templates = inventory.get_templates_map(
        _templates_dir(templates_dir), settings.config_names
    )
    if not templates:
        typer.echo("The templates folder is empty. Please, install templates first.")
        return

    typer.echo("Available templates:")
    for name in templates:
        typer.echo(f"  {name}")


@app.command()
def delete(
    template_name: Annotated[str, typer.Argument(help="Template to remove.")],
    templates_dir: Annotated[
        Optional[Path],
        typer.Option("--templates-dir", help="Template store location.", metavar="DIR"),
    ] = None,
) -> None:
    """Delete an installed template."""
    settings = get_settings()
    templates = inventory.get_templates_map(
        _templates_dir(templates_dir), settings.config_names
    )
    try:
        inventory.check_template_list([template_name], templates)
        inventory.delete_template(templates[template_name])
    except (QuickprojError, OSError) as e:
        _fail(e)

    typer.echo(f"✨ Deleted template `{template_name}`")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
