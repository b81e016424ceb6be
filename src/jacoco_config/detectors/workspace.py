"""Workspace detector — enumerate the projects of a Gradle build."""

from __future__ import annotations

import contextlib
import logging
import re
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

SETTINGS_SCRIPT_NAMES: tuple[str, ...] = ("settings.gradle.kts", "settings.gradle")
ROOT_PROJECT_PATH = ":"

# ``include(":app", ":lib")`` or ``include ':app', ':lib'``; either form may
# continue over several lines.
_INCLUDE_RE = re.compile(
    r"""^\s*include\b\s*"""
    r"""(?:\(([^)]*)\)|((?:['"][^'"\n]+['"]\s*,\s*)*['"][^'"\n]+['"]))""",
    re.MULTILINE,
)
_QUOTED_RE = re.compile(r"""['"]([^'"]+)['"]""")
# ``project(":app").projectDir = file("modules/app")``
_PROJECT_DIR_RE = re.compile(
    r"""project\s*\(\s*['"]([^'"]+)['"]\s*\)\s*\.projectDir\s*=\s*"""
    r"""(?:file\s*\(\s*)?(?:new\s+File\s*\(\s*(?:rootDir|settingsDir)\s*,\s*)?['"]([^'"]+)['"]"""
)
_ROOT_NAME_RE = re.compile(r"""rootProject\.name\s*=\s*['"]([^'"]+)['"]""")
_LINE_COMMENT_RE = re.compile(r"//[^\n]*")


@dataclass(frozen=True)
class GradleProject:
    """A project of a Gradle build."""

    path: str
    """Gradle project path (``":"`` for the root, ``":feature:login"``)."""
    directory: str
    """Directory relative to the build root (``"."`` for the root project)."""
    name: str

    @property
    def is_root(self) -> bool:
        return self.path == ROOT_PROJECT_PATH


def _read_settings(root: Path) -> str:
    for name in SETTINGS_SCRIPT_NAMES:
        settings = root / name
        if settings.is_file():
            with contextlib.suppress(OSError):
                return settings.read_text(encoding="utf-8")
    return ""


def parse_includes(settings_text: str) -> list[str]:
    """Return the project paths included by a settings script, in order."""
    text = _LINE_COMMENT_RE.sub("", settings_text)
    paths: list[str] = []
    for call_args, bare_args in _INCLUDE_RE.findall(text):
        for include in _QUOTED_RE.findall(call_args or bare_args):
            path = include if include.startswith(":") else f":{include}"
            if path not in paths:
                paths.append(path)
    return paths


def parse_project_dirs(settings_text: str) -> dict[str, str]:
    """Return ``projectDir`` overrides keyed by project path."""
    result: dict[str, str] = {}
    for project_path, directory in _PROJECT_DIR_RE.findall(settings_text):
        path = project_path if project_path.startswith(":") else f":{project_path}"
        result[path] = directory.strip("/") or "."
    return result


def discover_projects(root: str | Path) -> list[GradleProject]:
    """Return the root project followed by every existing included project."""
    root_path = Path(root).resolve()
    text = _read_settings(root_path)

    name_match = _ROOT_NAME_RE.search(text)
    projects = [
        GradleProject(
            path=ROOT_PROJECT_PATH,
            directory=".",
            name=name_match.group(1) if name_match else root_path.name,
        )
    ]

    overrides = parse_project_dirs(text)
    for path in parse_includes(text):
        # Gradle uses colon-separated paths; ":feature:login" -> "feature/login".
        directory = overrides.get(path, path.lstrip(":").replace(":", "/"))
        if not (root_path / directory).is_dir():
            logger.warning("Included project %s has no directory %s; skipping", path, directory)
            continue
        projects.append(
            GradleProject(path=path, directory=directory, name=path.rsplit(":", 1)[-1])
        )
    return projects
