"""Tests for the installation task."""

import pytest

from quickproj.core.errors import (
    ConfigurationError,
    InstallationError,
    TemplateIOError,
)
from quickproj.core.models import TemplateDefinition
from quickproj.tasks.installation import (
    InstallationTask,
    InstallStage,
    StageEvent,
    install,
)


def _definition(**files):
    files.setdefault("sources", [{"from": "files", "to": "."}])
    variables = files.pop("variables", {})
    return TemplateDefinition.model_validate({"files": files, "variables": variables})


class TestDeclaredDirectories:
    def test_expanded_directories(self, make_template, project_root):
        template_root = make_template("dirs", {}, {"files/keep.txt": ""})
        definition = _definition(
            directories=["src/{{module}}"], variables={"module": ["a", "b"]}
        )

        install(project_root, template_root, definition)

        created = sorted(p.name for p in (project_root / "src").iterdir())
        assert created == ["a", "b"]

    def test_literal_and_nested_directories(self, make_template, project_root):
        template_root = make_template("dirs", {}, {"files/keep.txt": ""})
        definition = _definition(
            directories=["docs", "{{project_name}}/{{kind}}/{{env}}"],
            variables={"kind": ["api", "web"], "env": ["dev", "prod"]},
        )

        install(project_root, template_root, definition, project_name="demo")

        assert (project_root / "docs").is_dir()
        for kind in ("api", "web"):
            for env in ("dev", "prod"):
                assert (project_root / "demo" / kind / env).is_dir()

    def test_absent_variables_create_nothing(self, make_template, project_root):
        template_root = make_template("dirs", {}, {"files/keep.txt": ""})
        definition = _definition(directories=["src/{{missing}}"])

        result = install(project_root, template_root, definition)

        assert not (project_root / "src").exists()
        assert result.directories == []

    def test_directory_creation_is_idempotent(self, make_template, project_root):
        template_root = make_template("dirs", {}, {"files/keep.txt": ""})
        definition = _definition(
            directories=["src/{{module}}", "docs"],
            sources=[{"from": "files", "to": "lib"}],
            variables={"module": ["a", "b"]},
        )

        first = InstallationTask(project_root, template_root, definition)
        first.create_declared_directories(
            {"module": ("a", "b"), "project_name": "demo", "template_name": "dirs"}
        )
        install(project_root, template_root, definition)
        install(project_root, template_root, definition)

        assert (project_root / "src" / "a").is_dir()
        assert (project_root / "lib" / "keep.txt").is_file()


class TestSourcesAndCopy:
    def test_copies_into_project_root(self, python_template, project_root):
        template_root, definition = python_template

        result = install(project_root, template_root, definition)

        assert (project_root / "README.md").read_text() == "# readme\n"
        assert (project_root / ".gitignore").is_file()
        assert project_root / "README.md" in result.copied

    def test_copies_into_target_directory(self, make_template, project_root):
        template_root = make_template(
            "copy", {}, {"files/pkg/mod.py": "x = 1\n", "files/top.txt": "top"}
        )
        definition = _definition(sources=[{"from": "files", "to": "vendor/lib"}])

        install(project_root, template_root, definition)

        assert (project_root / "vendor" / "lib" / "pkg" / "mod.py").read_text() == "x = 1\n"
        assert (project_root / "vendor" / "lib" / "top.txt").read_text() == "top"

    def test_copy_overwrites_existing_entries(self, make_template, project_root):
        template_root = make_template("copy", {}, {"files/top.txt": "new"})
        (project_root / "top.txt").write_text("old")
        definition = _definition()

        install(project_root, template_root, definition)

        assert (project_root / "top.txt").read_text() == "new"

    def test_current_directory_source_copies_template_root(
        self, make_template, project_root
    ):
        template_root = make_template("whole", {}, {"setup.cfg": "[metadata]\n"})
        definition = _definition(sources=[{"from": ".", "to": "."}])

        install(project_root, template_root, definition)

        assert (project_root / "setup.cfg").is_file()

    def test_missing_source_aborts(self, make_template, project_root):
        template_root = make_template("broken", {})
        definition = _definition(sources=[{"from": "absent", "to": "."}])

        with pytest.raises(InstallationError) as excinfo:
            install(project_root, template_root, definition)

        assert isinstance(excinfo.value.cause, TemplateIOError)
        assert excinfo.value.stage == "copying files into the target directory"


class TestGeneratedFiles:
    def test_expanded_generation(self, python_template, project_root):
        template_root, definition = python_template

        result = install(project_root, template_root, definition, project_name="demo")

        for module in ("a", "b"):
            content = (project_root / "src" / module / "main.py").read_text()
            assert content == (
                f'"""{module} module of demo by me."""\n'
                "VALUE = '{{unknown}}'\n"
            )
        assert sorted(p.relative_to(project_root).as_posix() for p in result.generated) == [
            "src/a/main.py",
            "src/b/main.py",
        ]

    def test_static_path_uses_full_context(self, make_template, project_root):
        template_root = make_template(
            "static",
            {},
            {"files/keep.txt": "", "tpl/README.md": "{{project_name}}: {{modules}}\n"},
        )
        definition = _definition(
            templates={"README.md": "tpl/README.md"},
            generated=["README.md"],
            variables={"modules": ["a", "b"]},
        )

        install(project_root, template_root, definition, project_name="demo")

        assert (project_root / "README.md").read_text() == "demo: {{modules}}\n"

    def test_overrides_change_generated_paths(self, python_template, project_root):
        template_root, definition = python_template

        install(
            project_root,
            template_root,
            definition,
            project_name="demo",
            overrides={"module": ["core"], "author": "you"},
        )

        assert sorted(p.name for p in (project_root / "src").iterdir()) == ["core"]
        assert "by you" in (project_root / "src" / "core" / "main.py").read_text()

    def test_only_paths_ending_with_logical_name(self, make_template, project_root):
        template_root = make_template(
            "multi",
            {},
            {"files/keep.txt": "", "t/a.txt": "A {{x}}", "t/b.txt": "B {{x}}"},
        )
        definition = _definition(
            templates={"a.txt": "t/a.txt", "b.txt": "t/b.txt"},
            generated=["out/{{x}}/a.txt", "out/b.txt"],
            variables={"x": ["1", "2"]},
        )

        install(project_root, template_root, definition)

        out = project_root / "out"
        assert sorted(p.name for p in out.iterdir()) == ["1", "2", "b.txt"]
        assert (out / "1" / "a.txt").read_text() == "A 1"
        assert (out / "b.txt").read_text() == "B {{x}}"

    def test_logical_name_matches_whole_path_components(
        self, make_template, project_root
    ):
        template_root = make_template(
            "suffix",
            {},
            {"files/keep.txt": "", "t/ab.txt": "AB", "t/b.txt": "B"},
        )
        definition = _definition(
            templates={"ab.txt": "t/ab.txt", "b.txt": "t/b.txt"},
            generated=["ab.txt", "sub/b.txt"],
        )

        install(project_root, template_root, definition)

        assert (project_root / "ab.txt").read_text() == "AB"
        assert (project_root / "sub" / "b.txt").read_text() == "B"

    def test_dynamic_file_name_as_logical_name(self, make_template, project_root):
        template_root = make_template(
            "names",
            {},
            {"files/keep.txt": "", "t/module.py": "NAME = '{{module}}'\n"},
        )
        definition = _definition(
            templates={"{{module}}.py": "t/module.py"},
            generated=["src/{{module}}.py"],
            variables={"module": ["a", "b"]},
        )

        install(project_root, template_root, definition)

        assert (project_root / "src" / "a.py").read_text() == "NAME = 'a'\n"
        assert (project_root / "src" / "b.py").read_text() == "NAME = 'b'\n"

    def test_generated_file_keeps_template_mode(self, make_template, project_root):
        template_root = make_template(
            "scripts",
            {},
            {"files/keep.txt": "", "t/run.sh": "#!/bin/sh\necho {{project_name}}\n"},
        )
        (template_root / "t" / "run.sh").chmod(0o755)
        definition = _definition(
            templates={"run.sh": "t/run.sh"}, generated=["scripts/run.sh"]
        )

        install(project_root, template_root, definition)

        script = project_root / "scripts" / "run.sh"
        assert script.read_text() == "#!/bin/sh\necho demo\n"
        assert script.stat().st_mode & 0o777 == 0o755

    def test_missing_content_template_aborts(self, make_template, project_root):
        template_root = make_template("broken", {}, {"files/keep.txt": ""})
        definition = _definition(
            templates={"main.py": "missing/main.py"}, generated=["main.py"]
        )

        with pytest.raises(InstallationError) as excinfo:
            install(project_root, template_root, definition)

        assert isinstance(excinfo.value.cause, TemplateIOError)
        assert excinfo.value.stage == "generating files from the templates"


class TestProjectRootContainment:
    @pytest.mark.parametrize(
        "directories, variables",
        [
            (["../up"], {}),
            (["../{{x}}"], {"x": ["escaped"]}),
            (["src/{{x}}"], {"x": ["../../escaped"]}),
        ],
    )
    def test_directory_outside_root_aborts(
        self, make_template, project_root, tmp_path, directories, variables
    ):
        template_root = make_template("dirs", {}, {"files/keep.txt": ""})
        definition = _definition(directories=directories, variables=variables)

        with pytest.raises(InstallationError) as excinfo:
            install(project_root, template_root, definition)

        assert isinstance(excinfo.value.cause, ConfigurationError)
        assert excinfo.value.stage == "creating directories based on template definitions"
        assert not (tmp_path / "up").exists()
        assert not (tmp_path / "escaped").exists()

    def test_absolute_directory_aborts(self, make_template, project_root, tmp_path):
        template_root = make_template("dirs", {}, {"files/keep.txt": ""})
        definition = _definition(directories=[str(tmp_path / "outside")])

        with pytest.raises(InstallationError) as excinfo:
            install(project_root, template_root, definition)

        assert isinstance(excinfo.value.cause, ConfigurationError)
        assert not (tmp_path / "outside").exists()

    def test_source_destination_outside_root_aborts(
        self, make_template, project_root, tmp_path
    ):
        template_root = make_template("copy", {}, {"files/top.txt": "top"})
        definition = _definition(sources=[{"from": "files", "to": "../out"}])

        with pytest.raises(InstallationError) as excinfo:
            install(project_root, template_root, definition)

        assert isinstance(excinfo.value.cause, ConfigurationError)
        assert excinfo.value.stage == "creating directories for the sources"
        assert not (tmp_path / "out").exists()

    @pytest.mark.parametrize(
        "generated, variables",
        [
            (["../main.py"], {}),
            (["{{x}}/main.py"], {"x": ["../leak"]}),
        ],
    )
    def test_generated_file_outside_root_aborts(
        self, make_template, project_root, tmp_path, generated, variables
    ):
        template_root = make_template(
            "gen", {}, {"files/keep.txt": "", "t/main.py": "x = 1\n"}
        )
        definition = _definition(
            templates={"main.py": "t/main.py"}, generated=generated, variables=variables
        )

        with pytest.raises(InstallationError) as excinfo:
            install(project_root, template_root, definition)

        assert isinstance(excinfo.value.cause, ConfigurationError)
        assert excinfo.value.stage == "generating files from the templates"
        assert not (tmp_path / "main.py").exists()
        assert not (tmp_path / "leak").exists()

    def test_dot_segments_that_stay_inside_are_allowed(self, make_template, project_root):
        template_root = make_template("dirs", {}, {"files/keep.txt": ""})
        definition = _definition(directories=["src/../docs"])

        install(project_root, template_root, definition)

        assert (project_root / "docs").is_dir()


class TestStageSequence:
    def test_progress_events_in_order(self, python_template, project_root):
        template_root, definition = python_template
        events: list[StageEvent] = []

        install(
            project_root,
            template_root,
            definition,
            template_name="python",
            progress=events.append,
        )

        assert [event.stage for event in events] == [
            InstallStage.BUILDING_CONTEXT,
            InstallStage.CREATING_DECLARED_DIRECTORIES,
            InstallStage.CREATING_SOURCE_DIRECTORIES,
            InstallStage.COPYING_FILES,
            InstallStage.GENERATING_FILES,
            InstallStage.FINISHED,
        ]
        assert [event.label for event in events[1:5]] == [
            "[1/4]",
            "[2/4]",
            "[3/4]",
            "[4/4]",
        ]
        assert events[-1].elapsed is not None
        assert "`python` template has been completed" in events[-1].description

    def test_task_runs_once(self, python_template, project_root):
        template_root, definition = python_template
        task = InstallationTask(project_root, template_root, definition)

        task.run()

        assert task.stage is InstallStage.FINISHED
        with pytest.raises(RuntimeError):
            task.run()

    def test_default_names(self, python_template, project_root):
        template_root, definition = python_template

        result = install(project_root, template_root, definition)

        assert result.template_name == "python"
        assert '"""a module of demo by me."""' in (
            project_root / "src" / "a" / "main.py"
        ).read_text()
