"""Report task specifications and the plans that hold them."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Any

from jacoco_config.models.capabilities import ProjectKind

REPORT_TASK_GROUP = "Reporting"
ROOT_REPORT_TASK_NAME = "jacocoAggregatedReport"
ROOT_REPORT_SOURCE_NAME = "aggregated"
ALL_REPORT_FORMATS: tuple[str, ...] = ("xml", "csv", "html")


def join_path(base: str, path: str) -> str:
    """Join two logical, ``/``-separated paths; ``"."`` and ``""`` mean *here*.

    An absolute *path* is returned unchanged.
    """
    if base in {"", "."} or PurePath(path).is_absolute():
        return path
    return f"{base.rstrip('/')}/{path}"


def qualify_task(project_path: str, task_name: str) -> str:
    """Return the task path of *task_name* inside *project_path*."""
    if project_path in {"", ":"}:
        return task_name
    return f"{project_path}:{task_name}"


@dataclass(frozen=True)
class ClassDirectoryTree:
    """A file tree rooted at a build output directory, filtered by globs."""

    root: str
    includes: tuple[str, ...] = ()
    excludes: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "root": self.root,
            "includes": list(self.includes),
            "excludes": list(self.excludes),
        }


@dataclass(frozen=True)
class ReportOutputs:
    """Report output locations; ``None`` marks a disabled format."""

    xml: str | None = None
    csv: str | None = None
    html: str | None = None

    @classmethod
    def under(
        cls,
        build_dir: str,
        source_name: str,
        formats: tuple[str, ...] = ALL_REPORT_FORMATS,
    ) -> ReportOutputs:
        """Place outputs under ``<build_dir>/reports/jacoco/<source_name>``."""
        destination = join_path(build_dir, f"reports/jacoco/{source_name}")
        return cls(
            xml=f"{destination}/jacoco.xml" if "xml" in formats else None,
            csv=f"{destination}/jacoco.csv" if "csv" in formats else None,
            html=f"{destination}/html" if "html" in formats else None,
        )

    def to_dict(self) -> dict[str, str | None]:
        return {"xml": self.xml, "csv": self.csv, "html": self.html}


@dataclass(frozen=True)
class ReportTaskSpec:
    """Everything the host needs to materialise one report task."""

    task_name: str
    source_name: str
    test_task_name: str
    source_directories: tuple[str, ...] = ()
    class_directories: tuple[ClassDirectoryTree, ...] = ()
    execution_data_paths: tuple[str, ...] = ()
    depends_on: tuple[str, ...] = ()
    feeds_root_report: bool = False
    outputs: ReportOutputs = field(default_factory=ReportOutputs)
    group: str = REPORT_TASK_GROUP
    description: str = ""

    @property
    def class_directory_includes(self) -> tuple[str, ...]:
        return _flatten(tree.includes for tree in self.class_directories)

    @property
    def class_directory_excludes(self) -> tuple[str, ...]:
        return _flatten(tree.excludes for tree in self.class_directories)

    @property
    def depends_on_test_task(self) -> str:
        return self.test_task_name

    def to_dict(self) -> dict[str, Any]:
        """Serialise the spec to a JSON-compatible dict."""
        return {
            "task_name": self.task_name,
            "source_name": self.source_name,
            "test_task_name": self.test_task_name,
            "source_directories": list(self.source_directories),
            "class_directories": [tree.to_dict() for tree in self.class_directories],
            "execution_data_paths": list(self.execution_data_paths),
            "depends_on": list(self.depends_on),
            "feeds_root_report": self.feeds_root_report,
            "outputs": self.outputs.to_dict(),
            "group": self.group,
            "description": self.description,
        }


def _flatten(groups: Any) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for group in groups:
        for item in group:
            seen.setdefault(item, None)
    return tuple(seen)


@dataclass
class ReportPlan:
    """Report tasks derived for a single project."""

    project_path: str = ":"
    project_dir: str = "."
    kind: ProjectKind = ProjectKind.NONE
    tool_version: str = ""
    build_dir: str = "build"
    formats: tuple[str, ...] = ALL_REPORT_FORMATS
    tasks: list[ReportTaskSpec] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.tasks

    @property
    def task_names(self) -> list[str]:
        return [task.task_name for task in self.tasks]

    def get(self, task_name: str) -> ReportTaskSpec | None:
        """Return the spec named *task_name*, if planned."""
        for task in self.tasks:
            if task.task_name == task_name:
                return task
        return None

    def root_report(self) -> ReportTaskSpec | None:
        """Return the root report this plan alone would feed, if any."""
        accumulator = RootReportAccumulator(build_dir=self.build_dir, formats=self.formats)
        for task in self.tasks:
            if task.feeds_root_report:
                accumulator.merge(task, project_path=self.project_path, project_dir=self.project_dir)
        return accumulator.build()

    def to_dict(self) -> dict[str, Any]:
        """Serialise the plan to a JSON-compatible dict."""
        return {
            "project_path": self.project_path,
            "project_dir": self.project_dir,
            "kind": self.kind.value,
            "tool_version": self.tool_version,
            "tasks": [task.to_dict() for task in self.tasks],
            "warnings": list(self.warnings),
        }


class RootReportAccumulator:
    """Collects the specs that feed the aggregated root report.

    Merging is a set union, so the order in which projects contribute does
    not change the result and merging the same spec twice is a no-op. The
    root spec itself only exists once something has been merged.
    """

    def __init__(
        self,
        *,
        build_dir: str = "build",
        formats: tuple[str, ...] = ALL_REPORT_FORMATS,
        task_name: str = ROOT_REPORT_TASK_NAME,
    ) -> None:
        self.build_dir = build_dir
        self.formats = formats
        self.task_name = task_name
        self._lock = threading.Lock()
        self._source_directories: set[str] = set()
        self._execution_data: set[str] = set()
        self._depends_on: set[str] = set()
        self._class_trees: dict[str, tuple[set[str], set[str]]] = {}

    @property
    def is_empty(self) -> bool:
        with self._lock:
            return not self._depends_on

    def merge(self, spec: ReportTaskSpec, *, project_path: str = ":", project_dir: str = ".") -> None:
        """Union *spec* into the root report.

        Paths are re-rooted at *project_dir* and task names qualified with
        *project_path*, so contributions from sibling projects stay distinct.
        """
        with self._lock:
            self._source_directories.update(
                join_path(project_dir, path) for path in spec.source_directories
            )
            self._execution_data.update(
                join_path(project_dir, path) for path in spec.execution_data_paths
            )
            self._depends_on.add(qualify_task(project_path, spec.task_name))
            self._depends_on.update(qualify_task(project_path, dep) for dep in spec.depends_on)
            for tree in spec.class_directories:
                root = join_path(project_dir, tree.root)
                includes, excludes = self._class_trees.setdefault(root, (set(), set()))
                includes.update(tree.includes)
                excludes.update(tree.excludes)

    def build(self) -> ReportTaskSpec | None:
        """Return the root spec, or ``None`` if nothing feeds it."""
        with self._lock:
            if not self._depends_on:
                return None
            trees = tuple(
                ClassDirectoryTree(
                    root=root,
                    includes=tuple(sorted(includes)),
                    excludes=tuple(sorted(excludes)),
                )
                for root, (includes, excludes) in sorted(self._class_trees.items())
            )
            return ReportTaskSpec(
                task_name=self.task_name,
                source_name=ROOT_REPORT_SOURCE_NAME,
                test_task_name="",
                source_directories=tuple(sorted(self._source_directories)),
                class_directories=trees,
                execution_data_paths=tuple(sorted(self._execution_data)),
                depends_on=tuple(sorted(self._depends_on)),
                feeds_root_report=False,
                outputs=ReportOutputs.under(
                    self.build_dir, ROOT_REPORT_SOURCE_NAME, self.formats
                ),
                description="Generate Jacoco coverage reports for default variants.",
            )
