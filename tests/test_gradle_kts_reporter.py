"""Tests for reporters/gradle_kts.py — Kotlin-DSL rendering of plans."""

from __future__ import annotations

from jacoco_config.config import ReportOptions
from jacoco_config.detectors.workspace import GradleProject
from jacoco_config.models.capabilities import BuildCapabilities
from jacoco_config.models.variant import VariantDescriptor
from jacoco_config.orchestrator import ProjectInput, plan_build
from jacoco_config.planner import plan_reports
from jacoco_config.reporters.gradle_kts import render_build, render_project, render_task

_DEBUG = VariantDescriptor(name="debug", build_type="debug")
_ANDROID = BuildCapabilities(has_android_library=True)


class TestRenderTask:
    def test_registers_report_task(self) -> None:
        options = ReportOptions(global_class_excludes=["**/R$*.class"])
        spec = plan_reports(_ANDROID, [_DEBUG], options).tasks[0]
        text = render_task(spec)
        assert text.startswith('tasks.register<JacocoReport>("jacocoTestReportDebug") {')
        assert 'group = "Reporting"' in text
        assert 'dependsOn("testDebug")' in text
        assert 'include("**/tmp/kotlin-classes/debug/**")' in text
        assert 'exclude("**/R\\$*.class")' in text
        assert 'executionData.setFrom(files("build/jacoco/testDebug.exec"))' in text
        assert 'fileTree("build")' in text

    def test_report_toggles(self) -> None:
        options = ReportOptions(csv_enabled=False)
        spec = plan_reports(_ANDROID, [_DEBUG], options).tasks[0]
        text = render_task(spec)
        assert "csv.required.set(false)" in text
        assert "xml.required.set(true)" in text
        assert 'layout.projectDirectory.dir("build/reports/jacoco/debug/html")' in text
        assert 'layout.projectDirectory.file("build/reports/jacoco/debug/jacoco.xml")' in text


class TestRenderProject:
    def test_android_sets_test_coverage_version(self) -> None:
        plan = plan_reports(_ANDROID, [_DEBUG], ReportOptions(coverage_tool_version="0.8.11"))
        text = render_project(plan)
        assert 'toolVersion = "0.8.11"' in text
        assert 'testCoverage.jacocoVersion = "0.8.11"' in text
        assert 'tasks.named("check") { dependsOn("jacocoTestReportDebug") }' in text

    def test_jvm_has_no_android_block(self) -> None:
        plan = plan_reports(BuildCapabilities(has_java_plugin=True), [], ReportOptions())
        assert "testCoverage" not in render_project(plan)


class TestRenderBuild:
    def test_multi_project_scripts(self) -> None:
        inputs = [
            ProjectInput(project=GradleProject(":", ".", "shop"), capabilities=BuildCapabilities()),
            ProjectInput(
                project=GradleProject(":app", "app", "app"),
                capabilities=_ANDROID,
                variants=[_DEBUG],
            ),
        ]
        scripts = render_build(plan_build(inputs, ReportOptions()))
        assert set(scripts) == {".", "app"}
        assert 'tasks.register<JacocoReport>("jacocoAggregatedReport")' in scripts["."]
        assert 'dependsOn(":app:jacocoTestReportDebug", ":app:testDebug")' in scripts["."]
        assert "jacocoAggregatedReport" not in scripts["app"]

    def test_single_project_keeps_root_in_one_script(self) -> None:
        inputs = [
            ProjectInput(
                project=GradleProject(":", ".", "lib"),
                capabilities=BuildCapabilities(has_java_plugin=True),
            )
        ]
        scripts = render_build(plan_build(inputs, ReportOptions()))
        assert list(scripts) == ["."]
        assert '"jacocoTestReport"' in scripts["."]
        assert '"jacocoAggregatedReport"' in scripts["."]

    def test_nothing_to_render(self) -> None:
        inputs = [ProjectInput(project=GradleProject(":", ".", "x"), capabilities=BuildCapabilities())]
        assert render_build(plan_build(inputs, ReportOptions())) == {}
