"""jacoco-config CLI — top-level command group."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click
import yaml
from rich.console import Console
from rich.logging import RichHandler

from jacoco_config import __version__
from jacoco_config.config import (
    ReportOptions,
    load_options,
    load_project_variants,
    validate_options,
)
from jacoco_config.errors import JacocoConfigError
from jacoco_config.models.variant import VariantDescriptor
from jacoco_config.orchestrator import (
    BuildPlan,
    collect_projects,
    missing_execution_data,
    plan_build,
)
from jacoco_config.reporters.gradle_kts import SCRIPT_NAME, render_build
from jacoco_config.reporters.terminal import reporter

logger = logging.getLogger(__name__)
console = Console()

_PATH_OPTION = click.option(
    "--path",
    default=".",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    help="Gradle build root directory.",
)


def _parse_variant_option(value: str) -> tuple[str, VariantDescriptor]:
    """Parse ``[PROJECT=]name[:buildType[:productFlavor]]``."""
    project_path, sep, spec = value.partition("=")
    if not sep:
        project_path, spec = ":", value
    if not project_path.startswith(":"):
        project_path = f":{project_path}"
    try:
        return project_path, VariantDescriptor.parse(spec)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--variant") from e


def _load_options_or_abort(path: str) -> ReportOptions:
    try:
        return load_options(path)
    except (OSError, yaml.YAMLError) as e:
        reporter.print_error(f"Failed to load configuration: {e}")
        raise click.Abort from e


def _build_plan(path: str, variant_args: tuple[str, ...]) -> BuildPlan:
    options = _load_options_or_abort(path)
    project_variants = {key: list(value) for key, value in load_project_variants(path).items()}
    for value in variant_args:
        project_path, variant = _parse_variant_option(value)
        project_variants.setdefault(project_path, []).append(variant)

    try:
        projects = collect_projects(path, project_variants)
        return plan_build(projects, options)
    except JacocoConfigError as e:
        reporter.print_error(str(e))
        raise click.Abort from e


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log planning decisions.")
@click.version_option(version=__version__, prog_name="jacoco-config")
@click.pass_context
def cli(ctx: click.Context, *, verbose: bool) -> None:
    """jacoco-config — plan Jacoco coverage reports for Gradle builds."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )


@cli.command()
@_PATH_OPTION
@click.option(
    "--variant",
    "variants",
    multiple=True,
    metavar="[PROJECT=]NAME[:TYPE[:FLAVOR]]",
    help="Build variant of an Android project (repeatable).",
)
@click.option("--json-output", "as_json", is_flag=True, help="Output raw JSON instead of tables.")
def plan(path: str, variants: tuple[str, ...], *, as_json: bool) -> None:
    """Show the report tasks planned for every project.

    Example:
      jacoco-config plan --variant app=debug:debug --variant app=paidRelease:release:paid
    """
    build_plan = _build_plan(path, variants)

    if as_json:
        click.echo(json.dumps(build_plan.to_dict(), indent=2))
    else:
        reporter.print_build_plan(build_plan)

    if not build_plan.ok:
        raise SystemExit(1)


@cli.command()
@_PATH_OPTION
@click.option(
    "--variant",
    "variants",
    multiple=True,
    metavar="[PROJECT=]NAME[:TYPE[:FLAVOR]]",
    help="Build variant of an Android project (repeatable).",
)
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, resolve_path=True),
    default=None,
    help="Write scripts below this directory instead of the build tree.",
)
def render(path: str, variants: tuple[str, ...], output_dir: str | None) -> None:
    """Write a jacoco-config.gradle.kts script for every planned project."""
    build_plan = _build_plan(path, variants)
    if not build_plan.ok:
        for message in build_plan.errors.values():
            reporter.print_error(message)
        raise SystemExit(1)

    target_root = Path(output_dir) if output_dir else Path(path)
    scripts = render_build(build_plan)
    if not scripts:
        reporter.print_warning("Nothing to render: no project has coverage-relevant plugins.")
        return

    for directory, text in sorted(scripts.items()):
        destination = target_root / directory / SCRIPT_NAME
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_text(text, encoding="utf-8")
        reporter.print_success(f"Wrote {destination}")


@cli.command()
@_PATH_OPTION
@click.option(
    "--variant",
    "variants",
    multiple=True,
    metavar="[PROJECT=]NAME[:TYPE[:FLAVOR]]",
    help="Build variant of an Android project (repeatable).",
)
def check(path: str, variants: tuple[str, ...]) -> None:
    """Report execution data that is registered but not on disk yet."""
    build_plan = _build_plan(path, variants)
    root_path = Path(path)
    total_missing = 0

    for project_plan in build_plan.plans:
        project_dir = root_path / project_plan.project_dir
        for spec in project_plan.tasks:
            for pattern in missing_execution_data(spec, project_dir):
                total_missing += 1
                reporter.print_warning(f"{project_plan.project_path}:{spec.task_name} → {pattern}")

    if build_plan.root_report is not None:
        for pattern in missing_execution_data(build_plan.root_report, root_path):
            total_missing += 1
            reporter.print_warning(f"{build_plan.root_report.task_name} → {pattern}")

    if total_missing == 0:
        reporter.print_success("All registered execution data is present.")
    else:
        reporter.print_info(f"{total_missing} execution data file(s) missing; run the tests first.")


@cli.group("config")
def config_group() -> None:
    """Inspect `.jacoco-config.yml` configuration values."""


@config_group.command("show")
@_PATH_OPTION
@click.option("--json-output", "as_json", is_flag=True, help="Output as JSON instead of YAML.")
def config_show(path: str, *, as_json: bool) -> None:
    """Display the resolved report options.

    Includes overrides from gradle.properties and the environment.
    """
    options = _load_options_or_abort(path)
    options_dict = options.to_dict()
    if as_json:
        click.echo(json.dumps(options_dict, indent=2))
        return
    console.print()
    console.print("[bold cyan]Report options:[/bold cyan]")
    console.print()
    click.echo(yaml.safe_dump(options_dict, sort_keys=False, default_flow_style=False))


@config_group.command("validate")
@_PATH_OPTION
def config_validate(path: str) -> None:
    """Validate `.jacoco-config.yml` configuration values."""
    options = _load_options_or_abort(path)
    errors = validate_options(options)

    if not errors:
        reporter.print_success("Configuration is valid!")
        return

    reporter.print_error(f"Found {len(errors)} configuration error(s):")
    console.print()
    for idx, error in enumerate(errors, start=1):
        console.print(f"  {idx}. [red]{error}[/red]")
    console.print()
    raise click.Abort


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
