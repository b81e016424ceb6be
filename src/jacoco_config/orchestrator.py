"""Build orchestrator — plan every project and own the aggregated report."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from jacoco_config.detectors.plugins import detect_capabilities
from jacoco_config.detectors.workspace import GradleProject, discover_projects
from jacoco_config.errors import InvalidConfiguration
from jacoco_config.models.plan import ReportPlan, ReportTaskSpec, RootReportAccumulator
from jacoco_config.planner import plan_reports

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from jacoco_config.config import ReportOptions
    from jacoco_config.models.capabilities import BuildCapabilities
    from jacoco_config.models.variant import VariantDescriptor

logger = logging.getLogger(__name__)


@dataclass
class ProjectInput:
    """Snapshot of one project taken after the host finished evaluating it."""

    project: GradleProject
    capabilities: BuildCapabilities
    variants: list[VariantDescriptor] = field(default_factory=list)


@dataclass
class BuildPlan:
    """Plans of all projects plus the aggregated root report."""

    tool_version: str = ""
    plans: list[ReportPlan] = field(default_factory=list)
    root_report: ReportTaskSpec | None = None
    errors: dict[str, str] = field(default_factory=dict)
    """Error message per project path whose planning was aborted."""
    skipped: list[str] = field(default_factory=list)
    """Project paths excluded through ``ignore``."""

    @property
    def ok(self) -> bool:
        return not self.errors

    def get(self, project_path: str) -> ReportPlan | None:
        for plan in self.plans:
            if plan.project_path == project_path:
                return plan
        return None

    def to_dict(self) -> dict[str, Any]:
        """Serialise the build plan to a JSON-compatible dict."""
        return {
            "tool_version": self.tool_version,
            "projects": [plan.to_dict() for plan in self.plans],
            "root_report": self.root_report.to_dict() if self.root_report else None,
            "errors": dict(self.errors),
            "skipped": list(self.skipped),
        }


def plan_build(projects: Sequence[ProjectInput], options: ReportOptions) -> BuildPlan:
    """Plan every project of a build against one shared root accumulator.

    In a multi-project build the root project only owns the aggregated
    report; in a single-project build the root project is planned itself.
    An ``InvalidConfiguration`` aborts planning of the offending project
    only and is recorded in ``BuildPlan.errors``.
    """
    accumulator = RootReportAccumulator(build_dir=options.build_dir, formats=options.formats)
    result = BuildPlan(tool_version=options.coverage_tool_version)
    multi_project = any(not item.project.is_root for item in projects)

    for item in projects:
        project = item.project
        if project.is_root and multi_project:
            if item.variants:
                logger.warning(
                    "Ignoring %d variant(s) of the root project: it only owns the aggregated "
                    "report in a multi-project build",
                    len(item.variants),
                )
            continue
        if options.is_ignored(project.path, project.name):
            logger.info("Skipping ignored project %s", project.path)
            result.skipped.append(project.path)
            continue
        try:
            plan = plan_reports(
                item.capabilities,
                item.variants,
                options,
                root=accumulator,
                project_path=project.path,
                project_dir=project.directory,
            )
        except InvalidConfiguration as exc:
            logger.error("Cannot plan coverage reports: %s", exc)
            result.errors[project.path] = str(exc)
            continue
        result.plans.append(plan)

    result.root_report = accumulator.build()
    return result


def collect_projects(
    root: str | Path,
    project_variants: Mapping[str, Sequence[VariantDescriptor]] | None = None,
) -> list[ProjectInput]:
    """Detect projects and capabilities of the build rooted at *root*."""
    root_path = Path(root).resolve()
    project_variants = project_variants or {}
    inputs: list[ProjectInput] = []
    for project in discover_projects(root_path):
        capabilities = detect_capabilities(root_path / project.directory)
        variants = list(project_variants.get(project.path, []))
        inputs.append(ProjectInput(project=project, capabilities=capabilities, variants=variants))

    known = {item.project.path for item in inputs}
    for project_path in sorted(set(project_variants) - known):
        logger.warning(
            "Variants declared for %s, but the build has no such project; ignoring them",
            project_path,
        )
    return inputs


def _has_match(base: Path, pattern: str) -> bool:
    candidate = Path(pattern)
    if candidate.is_absolute():
        # Path.glob only accepts relative patterns; glob from the anchor.
        anchor = Path(candidate.anchor)
        return any(anchor.glob(str(candidate.relative_to(anchor))))
    return any(base.glob(pattern))


def missing_execution_data(spec: ReportTaskSpec, base_dir: str | Path) -> list[str]:
    """Return execution-data paths of *spec* that match no file under *base_dir*.

    Missing data is expected before tests ran, so it is only logged.
    """
    base = Path(base_dir)
    missing: list[str] = []
    for pattern in spec.execution_data_paths:
        if _has_match(base, pattern):
            continue
        logger.info(
            "Execution data is registered for %s, but missing: %s", spec.task_name, pattern
        )
        missing.append(pattern)
    return missing
