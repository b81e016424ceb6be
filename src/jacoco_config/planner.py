"""Variant report planner — derive Jacoco report tasks for one project.

The planner is a pure function of a project's capabilities, its build
variants and the report options: it performs no I/O, never checks whether
directories or tasks exist, and returns equal plans for equal inputs. The
only shared state it touches is an optional ``RootReportAccumulator`` owned
by the caller.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from jacoco_config.errors import InvalidConfiguration, MissingCapability
from jacoco_config.models.capabilities import ProjectKind
from jacoco_config.models.plan import (
    ClassDirectoryTree,
    ReportOutputs,
    ReportPlan,
    ReportTaskSpec,
    join_path,
)
from jacoco_config.models.variant import (
    DEFAULT_JVM_VARIANT,
    DEFAULT_KMP_VARIANT,
    VariantDescriptor,
    capitalize,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from jacoco_config.config import ReportOptions
    from jacoco_config.models.capabilities import BuildCapabilities
    from jacoco_config.models.plan import RootReportAccumulator

logger = logging.getLogger(__name__)

LANGUAGES: tuple[str, ...] = ("java", "kotlin")
REPORT_TASK_PREFIX = "jacocoTestReport"
JVM_CLASS_INCLUDE = "**/classes/**/main/**"
KMP_SOURCE_DIRECTORIES: tuple[str, ...] = ("src/commonMain/kotlin", "src/jvmMain/kotlin")


def _source_set_dirs(source_set: str) -> list[str]:
    return [f"src/{source_set}/{lang}" for lang in LANGUAGES]


def _dedupe(items: Sequence[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(items))


def android_source_directories(variant: VariantDescriptor) -> tuple[str, ...]:
    """Return main, variant, flavor and build-type source directories."""
    dirs = _source_set_dirs("main") + _source_set_dirs(variant.name)
    if variant.product_flavor:
        dirs += _source_set_dirs(variant.product_flavor)
    if variant.build_type:
        dirs += _source_set_dirs(variant.build_type)
    return _dedupe(dirs)


def android_class_includes(variant: VariantDescriptor) -> tuple[str, ...]:
    """Return Kotlin class output globs for an Android variant.

    Kotlin-Android plugin versions stage flavored output either under
    ``<flavor>/<buildType>`` or under the flat variant name, so both globs
    are emitted whenever a flavor is present.
    """
    nested = "/".join(part for part in (variant.product_flavor, variant.build_type) if part)
    includes = [f"**/tmp/kotlin-classes/{nested or variant.name}/**"]
    if variant.product_flavor:
        includes.append(f"**/tmp/kotlin-classes/{variant.name}/**")
    return _dedupe(includes)


def android_test_task_name(variant: VariantDescriptor, suffix: str = "") -> str:
    return f"test{capitalize(variant.source_name)}{suffix}"


def execution_data_path(build_dir: str, test_task_name: str) -> str:
    return join_path(build_dir, f"jacoco/{test_task_name}.exec")


def _validate_variants(
    variants: Sequence[VariantDescriptor],
    project_path: str,
) -> None:
    # Keyed on the capitalized name: "debug" and "Debug" share task names.
    seen: dict[str, VariantDescriptor] = {}
    for variant in variants:
        if not variant.name.strip():
            raise InvalidConfiguration(
                f"variant {variant!r} has an empty name", project_path=project_path
            )
        task_name = REPORT_TASK_PREFIX + capitalize(variant.source_name)
        previous = seen.get(task_name)
        if previous is not None:
            raise InvalidConfiguration(
                f"variants {previous.name!r} and {variant.name!r} both map to "
                f"report task {task_name!r}",
                project_path=project_path,
            )
        seen[task_name] = variant


def _android_spec(variant: VariantDescriptor, options: ReportOptions) -> ReportTaskSpec:
    source_name = variant.source_name
    test_task = android_test_task_name(variant, options.test_task_suffix)
    return ReportTaskSpec(
        task_name=REPORT_TASK_PREFIX + capitalize(source_name),
        source_name=source_name,
        test_task_name=test_task,
        source_directories=android_source_directories(variant),
        class_directories=(
            ClassDirectoryTree(
                root=options.build_dir,
                includes=android_class_includes(variant),
                excludes=tuple(options.global_class_excludes),
            ),
        ),
        execution_data_paths=(execution_data_path(options.build_dir, test_task),),
        depends_on=(test_task,),
        feeds_root_report=options.feeds_root_report(variant),
        outputs=ReportOutputs.under(options.build_dir, source_name, options.formats),
        description=f"Generate Jacoco coverage reports after running {variant.name} tests.",
    )


def _jvm_spec(
    variant: VariantDescriptor,
    options: ReportOptions,
    *,
    task_name: str,
    source_directories: tuple[str, ...],
) -> ReportTaskSpec:
    test_task = variant.name
    return ReportTaskSpec(
        task_name=task_name,
        source_name=variant.source_name,
        test_task_name=test_task,
        source_directories=source_directories,
        class_directories=(
            ClassDirectoryTree(
                root=options.build_dir,
                includes=(JVM_CLASS_INCLUDE,),
                excludes=tuple(options.global_class_excludes),
            ),
        ),
        execution_data_paths=(execution_data_path(options.build_dir, test_task),),
        depends_on=(test_task,),
        feeds_root_report=True,
        outputs=ReportOutputs.under(options.build_dir, variant.source_name, options.formats),
        description=f"Generate Jacoco coverage reports after running {test_task} tests.",
    )


def plan_reports(
    capabilities: BuildCapabilities,
    variants: Sequence[VariantDescriptor],
    options: ReportOptions,
    *,
    root: RootReportAccumulator | None = None,
    project_path: str = ":",
    project_dir: str = ".",
    strict: bool = False,
) -> ReportPlan:
    """Derive the report tasks of one project.

    Args:
        capabilities: Plugin capabilities of the project.
        variants: Registered build variants. Must be non-empty for Android
            projects and empty for JVM / Kotlin-Multiplatform projects, which
            use an implicit default descriptor.
        options: User report options.
        root: Accumulator of the aggregated report; specs that feed the root
            report are merged into it.
        project_path: Gradle path of the project (``":app"``).
        project_dir: Project directory relative to the build root.
        strict: Raise ``MissingCapability`` instead of returning an empty plan
            when no coverage-relevant plugin is applied.

    Returns:
        The project's ``ReportPlan``.

    Raises:
        InvalidConfiguration: Variant data is missing or ambiguous.
        MissingCapability: No capability is set and ``strict`` is True.
    """
    kind = capabilities.kind
    plan = ReportPlan(
        project_path=project_path,
        project_dir=project_dir,
        kind=kind,
        tool_version=options.coverage_tool_version,
        build_dir=options.build_dir,
        formats=options.formats,
    )

    if kind is ProjectKind.NONE:
        message = f"{project_path}: no Java, Kotlin or Android plugin applied; nothing to report"
        if strict:
            raise MissingCapability(message)
        logger.warning(message)
        plan.warnings.append(message)
        return plan

    if kind.is_android:
        if not variants:
            raise InvalidConfiguration(
                "Android plugin applied but no build variants were supplied",
                project_path=project_path,
            )
        _validate_variants(variants, project_path)
        plan.tasks = [_android_spec(variant, options) for variant in variants]
    elif variants:
        raise InvalidConfiguration(
            f"build variants supplied for a {kind.value} project, which has none",
            project_path=project_path,
        )
    elif kind is ProjectKind.KOTLIN_MULTIPLATFORM_JVM:
        plan.tasks = [
            _jvm_spec(
                DEFAULT_KMP_VARIANT,
                options,
                task_name=REPORT_TASK_PREFIX + "Jvm",
                source_directories=KMP_SOURCE_DIRECTORIES,
            )
        ]
    else:
        plan.tasks = [
            _jvm_spec(
                DEFAULT_JVM_VARIANT,
                options,
                task_name=REPORT_TASK_PREFIX,
                source_directories=_dedupe(_source_set_dirs("main")),
            )
        ]

    for spec in plan.tasks:
        logger.debug(
            "%s: planned %s (depends on %s, feeds root: %s)",
            project_path,
            spec.task_name,
            spec.test_task_name,
            spec.feeds_root_report,
        )
        if root is not None and spec.feeds_root_report:
            root.merge(spec, project_path=project_path, project_dir=project_dir)

    return plan
