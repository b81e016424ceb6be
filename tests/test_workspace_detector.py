"""Tests for detectors/workspace.py — Gradle project discovery."""

from __future__ import annotations

from typing import TYPE_CHECKING

from jacoco_config.detectors.workspace import (
    GradleProject,
    discover_projects,
    parse_includes,
    parse_project_dirs,
)

if TYPE_CHECKING:
    from pathlib import Path


class TestParseIncludes:
    def test_kotlin_dsl_multiple_args(self) -> None:
        assert parse_includes('include(":app", ":core")\n') == [":app", ":core"]

    def test_groovy_without_parens(self) -> None:
        assert parse_includes("include ':app', 'lib'\n") == [":app", ":lib"]

    def test_nested_paths_and_dedupe(self) -> None:
        text = 'include(":feature:login")\ninclude(":feature:login")\n'
        assert parse_includes(text) == [":feature:login"]

    def test_kotlin_dsl_arguments_over_several_lines(self) -> None:
        text = 'include(\n    ":app",\n    ":lib",\n)\n'
        assert parse_includes(text) == [":app", ":lib"]

    def test_groovy_continuation_lines(self) -> None:
        text = "include ':app',\n        ':lib'\ninclude ':docs'\n"
        assert parse_includes(text) == [":app", ":lib", ":docs"]

    def test_ignores_include_build_and_comments(self) -> None:
        text = 'includeBuild("build-logic")\n// include(":old")\ninclude(":app")\n'
        assert parse_includes(text) == [":app"]


class TestParseProjectDirs:
    def test_kotlin_dsl_file(self) -> None:
        text = 'project(":app").projectDir = file("modules/app")\n'
        assert parse_project_dirs(text) == {":app": "modules/app"}

    def test_groovy_new_file(self) -> None:
        text = "project(':lib').projectDir = new File(rootDir, 'libs/lib')\n"
        assert parse_project_dirs(text) == {":lib": "libs/lib"}


class TestDiscoverProjects:
    def test_single_project(self, tmp_path: Path) -> None:
        projects = discover_projects(tmp_path)
        assert projects == [GradleProject(path=":", directory=".", name=tmp_path.name)]
        assert projects[0].is_root

    def test_root_name_from_settings(self, tmp_path: Path) -> None:
        (tmp_path / "settings.gradle.kts").write_text('rootProject.name = "shop"\n')
        assert discover_projects(tmp_path)[0].name == "shop"

    def test_multi_project(self, tmp_path: Path) -> None:
        (tmp_path / "app").mkdir()
        (tmp_path / "feature" / "login").mkdir(parents=True)
        (tmp_path / "settings.gradle.kts").write_text(
            'rootProject.name = "shop"\ninclude(":app", ":feature:login", ":missing")\n'
        )
        projects = discover_projects(tmp_path)
        assert [p.path for p in projects] == [":", ":app", ":feature:login"]
        login = projects[2]
        assert login.directory == "feature/login"
        assert login.name == "login"
        assert not login.is_root

    def test_multi_line_include(self, tmp_path: Path) -> None:
        (tmp_path / "app").mkdir()
        (tmp_path / "lib").mkdir()
        (tmp_path / "settings.gradle.kts").write_text('include(\n    ":app",\n    ":lib",\n)\n')
        assert [p.path for p in discover_projects(tmp_path)] == [":", ":app", ":lib"]

    def test_project_dir_override(self, tmp_path: Path) -> None:
        (tmp_path / "modules" / "app").mkdir(parents=True)
        (tmp_path / "settings.gradle").write_text(
            "include ':app'\nproject(':app').projectDir = file('modules/app')\n"
        )
        projects = discover_projects(tmp_path)
        assert projects[1] == GradleProject(path=":app", directory="modules/app", name="app")
