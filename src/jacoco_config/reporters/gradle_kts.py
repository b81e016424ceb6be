"""Render report plans as Gradle Kotlin-DSL scripts.

Each planned project gets a ``jacoco-config.gradle.kts`` script that the
project applies with ``apply(from = "jacoco-config.gradle.kts")``. The root
project's script registers the aggregated report.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from jacoco_config.models.plan import ReportPlan, ReportTaskSpec
    from jacoco_config.orchestrator import BuildPlan

SCRIPT_NAME = "jacoco-config.gradle.kts"
_HEADER = "// Generated by jacoco-config. Do not edit; re-run `jacoco-config render`.\n"
_INDENT = "    "


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("$", "\\$")
    return f'"{escaped}"'


def _args(values: Iterable[str]) -> str:
    return ", ".join(_quote(value) for value in values)


def _report_lines(spec: ReportTaskSpec) -> list[str]:
    outputs = spec.outputs
    lines = [f"{_INDENT}reports {{"]
    for fmt, location, kind in (
        ("xml", outputs.xml, "file"),
        ("csv", outputs.csv, "file"),
        ("html", outputs.html, "dir"),
    ):
        if location is None:
            lines.append(f"{_INDENT * 2}{fmt}.required.set(false)")
            continue
        lines.append(f"{_INDENT * 2}{fmt}.required.set(true)")
        lines.append(
            f"{_INDENT * 2}{fmt}.outputLocation.set(layout.projectDirectory.{kind}({_quote(location)}))"
        )
    lines.append(f"{_INDENT}}}")
    return lines


def render_task(spec: ReportTaskSpec) -> str:
    """Render a ``tasks.register<JacocoReport>`` block for *spec*."""
    lines = [f"tasks.register<JacocoReport>({_quote(spec.task_name)}) {{"]
    lines.append(f"{_INDENT}group = {_quote(spec.group)}")
    if spec.description:
        lines.append(f"{_INDENT}description = {_quote(spec.description)}")
    if spec.depends_on:
        lines.append(f"{_INDENT}dependsOn({_args(spec.depends_on)})")
    lines.append(f"{_INDENT}sourceDirectories.setFrom(files({_args(spec.source_directories)}))")
    lines.append(f"{_INDENT}classDirectories.setFrom(")
    lines.append(f"{_INDENT * 2}files(")
    for tree in spec.class_directories:
        lines.append(f"{_INDENT * 3}fileTree({_quote(tree.root)}) {{")
        if tree.includes:
            lines.append(f"{_INDENT * 4}include({_args(tree.includes)})")
        if tree.excludes:
            lines.append(f"{_INDENT * 4}exclude({_args(tree.excludes)})")
        lines.append(f"{_INDENT * 3}}},")
    lines.append(f"{_INDENT * 2})")
    lines.append(f"{_INDENT})")
    lines.append(f"{_INDENT}executionData.setFrom(files({_args(spec.execution_data_paths)}))")
    lines.extend(_report_lines(spec))
    lines.append("}")
    return "\n".join(lines) + "\n"


def _tool_version_lines(plan: ReportPlan) -> list[str]:
    version = _quote(plan.tool_version)
    lines = [
        'apply(plugin = "jacoco")',
        "",
        "configure<JacocoPluginExtension> {",
        f"{_INDENT}toolVersion = {version}",
        "}",
    ]
    if plan.kind.is_android:
        lines += [
            "",
            "extensions.configure<com.android.build.api.dsl.CommonExtension<*, *, *, *, *>>"
            '("android") {',
            f"{_INDENT}testCoverage.jacocoVersion = {version}",
            "}",
        ]
    return lines


def render_project(plan: ReportPlan, root_report: ReportTaskSpec | None = None) -> str:
    """Render the script of one project, optionally with the root report."""
    parts = [
        _HEADER,
        "import org.gradle.testing.jacoco.plugins.JacocoPluginExtension",
        "import org.gradle.testing.jacoco.tasks.JacocoReport",
        "",
        *_tool_version_lines(plan),
        "",
    ]
    for spec in plan.tasks:
        parts.append(render_task(spec))
        parts.append(f'tasks.named("check") {{ dependsOn({_quote(spec.task_name)}) }}\n')
    if root_report is not None:
        parts.append(render_task(root_report))
    return "\n".join(parts)


def render_root(tool_version: str, root_report: ReportTaskSpec) -> str:
    """Render the root project's script holding the aggregated report."""
    return "\n".join(
        [
            _HEADER,
            "import org.gradle.testing.jacoco.plugins.JacocoPluginExtension",
            "import org.gradle.testing.jacoco.tasks.JacocoReport",
            "",
            'apply(plugin = "jacoco")',
            "",
            "configure<JacocoPluginExtension> {",
            f"{_INDENT}toolVersion = {_quote(tool_version)}",
            "}",
            "",
            render_task(root_report),
        ]
    )


def render_build(build_plan: BuildPlan) -> dict[str, str]:
    """Return script text keyed by project directory (``"."`` for the root)."""
    scripts: dict[str, str] = {}
    root_report = build_plan.root_report
    for plan in build_plan.plans:
        if plan.is_empty:
            continue
        owns_root = plan.project_path == ":"
        scripts[plan.project_dir] = render_project(plan, root_report if owns_root else None)
    if root_report is not None and "." not in scripts:
        scripts["."] = render_root(build_plan.tool_version, root_report)
    return scripts
