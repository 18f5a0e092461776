"""Shared test fixtures for quickproj tests."""

import json
from pathlib import Path

import pytest

from quickproj.core.models import TemplateDefinition


@pytest.fixture
def project_root(tmp_path):
    """Empty project root inside the test's temporary directory."""
    root = tmp_path / "demo"
    root.mkdir()
    return root


@pytest.fixture
def python_config():
    """Config of a template producing one module package per value."""
    return {
        "files": {
            "sources": [{"from": "files", "to": "."}],
            "directories": ["src/{{module}}", "docs"],
            "templates": {"main.py": "templates/main.py"},
            "generated": ["src/{{module}}/main.py"],
        },
        "variables": {"module": ["a", "b"], "author": "me"},
        "scripts": {"after_init": ["echo done"]},
    }


@pytest.fixture
def make_template(tmp_path):
    """Factory writing a template directory with config and files."""

    def _make(
        name: str,
        config: dict,
        files: dict[str, str] | None = None,
        parent: Path | None = None,
    ) -> Path:
        root = (parent or tmp_path / "store") / name
        root.mkdir(parents=True)
        (root / "config.json").write_text(json.dumps(config))
        for relative, content in (files or {}).items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        return root

    return _make


@pytest.fixture
def python_template(make_template, python_config):
    """Template root and definition for the python template."""
    root = make_template(
        "python",
        python_config,
        {
            "files/README.md": "# readme\n",
            "files/.gitignore": "*.pyc\n",
            "templates/main.py": (
                '"""{{module}} module of {{project_name}} by {{ author }}."""\n'
                "VALUE = '{{unknown}}'\n"
            ),
        },
    )
    return root, TemplateDefinition.model_validate(python_config)
