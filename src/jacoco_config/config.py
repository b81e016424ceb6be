"""Configuration parsing from ``.jacoco-config.yml`` and ``gradle.properties``."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from jacoco_config.models.plan import ALL_REPORT_FORMATS
from jacoco_config.models.variant import VariantDescriptor

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".jacoco-config.yml"
DEFAULT_TOOL_VERSION = "0.8.7"

PROPERTY_VERSION = "jacocoConfig.version"
PROPERTY_XML_DISABLED = "jacocoConfig.xml.disabled"
PROPERTY_CSV_DISABLED = "jacocoConfig.csv.disabled"
PROPERTY_HTML_DISABLED = "jacocoConfig.html.disabled"

ENV_VERSION = "JACOCO_CONFIG_VERSION"
ENV_XML_DISABLED = "JACOCO_CONFIG_XML_DISABLED"
ENV_CSV_DISABLED = "JACOCO_CONFIG_CSV_DISABLED"
ENV_HTML_DISABLED = "JACOCO_CONFIG_HTML_DISABLED"

_ENV_VAR_RE = re.compile(r"\$\{(\w+)\}")
_VERSION_RE = re.compile(r"^\d+\.\d+\.\d+(?:[.-][\w.]+)?$")
_PROPERTY_RE = re.compile(r"^([^=:\s]+)\s*[=:]\s*(.*)$")
_TRUTHY = {"1", "true", "yes", "on"}


def _resolve_env_vars(value: str) -> str:
    """Replace ``${VAR_NAME}`` placeholders with environment variable values."""

    def _replace(match: re.Match[str]) -> str:
        var = match.group(1)
        resolved = os.environ.get(var)
        if resolved is None:
            logger.warning("Environment variable %s is not set (referenced in config)", var)
            return ""
        return resolved

    return _ENV_VAR_RE.sub(_replace, value)


def _resolve_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively resolve environment variables in a dictionary."""
    result: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, str):
            result[key] = _resolve_env_vars(value)
        elif isinstance(value, dict):
            result[key] = _resolve_dict(value)
        elif isinstance(value, list):
            result[key] = [
                _resolve_env_vars(item)
                if isinstance(item, str)
                else _resolve_dict(item)
                if isinstance(item, dict)
                else item
                for item in value
            ]
        else:
            result[key] = value
    return result


@dataclass(frozen=True)
class RootReportSelector:
    """Declarative choice of the variants that feed the aggregated report.

    Explicit ``variant_names`` win. Otherwise a variant is selected when its
    build type is listed and its product flavor is either listed or, with no
    flavors listed, absent.
    """

    build_types: tuple[str, ...] = ("debug",)
    """Build types to aggregate."""

    product_flavors: tuple[str, ...] = ()
    """Product flavors to aggregate (empty = only flavorless variants)."""

    variant_names: tuple[str, ...] = ()
    """Exact variant names to aggregate (overrides the attribute filters)."""

    def __call__(self, variant: VariantDescriptor) -> bool:
        if self.variant_names:
            return variant.name in self.variant_names
        if variant.build_type not in self.build_types:
            return False
        if self.product_flavors:
            return variant.product_flavor in self.product_flavors
        return not variant.product_flavor

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "build_types": list(self.build_types),
            "product_flavors": list(self.product_flavors),
            "variants": list(self.variant_names),
        }


@dataclass
class ReportOptions:
    """User-configurable options consumed by the planner."""

    coverage_tool_version: str = DEFAULT_TOOL_VERSION
    """Jacoco version configured on the Jacoco and Android plugins."""

    global_class_excludes: list[str] = field(default_factory=list)
    """Glob patterns excluded from every class-directory tree, in order."""

    xml_enabled: bool = True
    csv_enabled: bool = True
    html_enabled: bool = True

    root_report_selector: RootReportSelector = field(default_factory=RootReportSelector)
    """Selector loaded from configuration; the default predicate."""

    root_aggregation_predicate: Callable[[VariantDescriptor], bool] | None = None
    """Programmatic override of ``root_report_selector``."""

    build_dir: str = "build"
    """Build output directory, relative to each project."""

    test_task_suffix: str = ""
    """Suffix of Android unit-test task names (``"UnitTest"`` for AGP)."""

    ignore: list[str] = field(default_factory=list)
    """Project paths or names that are never planned."""

    def feeds_root_report(self, variant: VariantDescriptor) -> bool:
        """Return True if *variant* should feed the aggregated report."""
        predicate = self.root_aggregation_predicate or self.root_report_selector
        return bool(predicate(variant))

    @property
    def formats(self) -> tuple[str, ...]:
        """Enabled report formats, in canonical order."""
        enabled = {"xml": self.xml_enabled, "csv": self.csv_enabled, "html": self.html_enabled}
        return tuple(fmt for fmt in ALL_REPORT_FORMATS if enabled[fmt])

    def is_ignored(self, project_path: str, project_name: str = "") -> bool:
        candidates = {project_path, project_path.lstrip(":")}
        if project_name:
            candidates.add(project_name)
        return any(entry in candidates for entry in self.ignore)

    def to_dict(self) -> dict[str, Any]:
        return {
            "coverage_tool_version": self.coverage_tool_version,
            "exclude_patterns": list(self.global_class_excludes),
            "reports": {
                "xml": self.xml_enabled,
                "csv": self.csv_enabled,
                "html": self.html_enabled,
            },
            "root_report": self.root_report_selector.to_dict(),
            "custom_root_predicate": self.root_aggregation_predicate is not None,
            "build_dir": self.build_dir,
            "test_task_suffix": self.test_task_suffix,
            "ignore": list(self.ignore),
        }


def _str_list(value: Any) -> list[str]:
    if isinstance(value, list):
        return [str(item) for item in value]
    if isinstance(value, str) and value:
        return [value]
    return []


def _read_raw(root_path: Path) -> dict[str, Any]:
    config_file = root_path / CONFIG_FILE_NAME
    if not config_file.is_file():
        return {}
    parsed = yaml.safe_load(config_file.read_text(encoding="utf-8"))
    if isinstance(parsed, dict):
        return _resolve_dict(parsed)
    logger.warning("Ignoring %s: top level is not a mapping", config_file)
    return {}


def read_gradle_properties(root: str | Path) -> dict[str, str]:
    """Parse ``gradle.properties`` (``key=value`` / ``key: value`` lines)."""
    properties_file = Path(root) / "gradle.properties"
    if not properties_file.is_file():
        return {}
    result: dict[str, str] = {}
    for raw_line in properties_file.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith(("#", "!")):
            continue
        match = _PROPERTY_RE.match(line)
        if match is None:
            result[line] = ""
            continue
        result[match.group(1)] = match.group(2)
    return result


def _parse_root_selector(raw: dict[str, Any]) -> RootReportSelector:
    selector_raw = raw.get("root_report", {})
    if not isinstance(selector_raw, dict):
        selector_raw = {}
    default = RootReportSelector()
    build_types = selector_raw.get("build_types", list(default.build_types))
    return RootReportSelector(
        build_types=tuple(_str_list(build_types)),
        product_flavors=tuple(_str_list(selector_raw.get("product_flavors", []))),
        variant_names=tuple(_str_list(selector_raw.get("variants", []))),
    )


def _apply_overrides(options: ReportOptions, root_path: Path) -> None:
    """Apply ``gradle.properties`` and environment overrides, env last."""
    properties = read_gradle_properties(root_path)
    if PROPERTY_VERSION in properties and properties[PROPERTY_VERSION]:
        options.coverage_tool_version = properties[PROPERTY_VERSION]
    # The presence of a *.disabled property disables the format, like -P flags.
    if PROPERTY_XML_DISABLED in properties:
        options.xml_enabled = False
    if PROPERTY_CSV_DISABLED in properties:
        options.csv_enabled = False
    if PROPERTY_HTML_DISABLED in properties:
        options.html_enabled = False

    version = os.environ.get(ENV_VERSION, "").strip()
    if version:
        options.coverage_tool_version = version
    if os.environ.get(ENV_XML_DISABLED, "").strip().lower() in _TRUTHY:
        options.xml_enabled = False
    if os.environ.get(ENV_CSV_DISABLED, "").strip().lower() in _TRUTHY:
        options.csv_enabled = False
    if os.environ.get(ENV_HTML_DISABLED, "").strip().lower() in _TRUTHY:
        options.html_enabled = False


def load_options(root: str | Path) -> ReportOptions:
    """Load ``ReportOptions`` for the build rooted at *root*.

    Falls back to defaults when ``.jacoco-config.yml`` is missing or
    incomplete; ``gradle.properties`` and environment variables override it.
    """
    root_path = Path(root).resolve()
    raw = _read_raw(root_path)

    reports_raw = raw.get("reports", {})
    if not isinstance(reports_raw, dict):
        reports_raw = {}

    options = ReportOptions(
        coverage_tool_version=str(raw.get("coverage_tool_version", DEFAULT_TOOL_VERSION)),
        global_class_excludes=_str_list(raw.get("exclude_patterns", [])),
        xml_enabled=bool(reports_raw.get("xml", True)),
        csv_enabled=bool(reports_raw.get("csv", True)),
        html_enabled=bool(reports_raw.get("html", True)),
        root_report_selector=_parse_root_selector(raw),
        build_dir=str(raw.get("build_dir", "build")),
        test_task_suffix=str(raw.get("test_task_suffix", "")),
        ignore=_str_list(raw.get("ignore", [])),
    )
    _apply_overrides(options, root_path)
    return options


def _parse_variant(entry: Any) -> VariantDescriptor | None:
    if isinstance(entry, str):
        return VariantDescriptor.parse(entry)
    if not isinstance(entry, dict):
        return None
    return VariantDescriptor(
        name=str(entry.get("name", "")),
        build_type=str(entry.get("build_type", "") or ""),
        product_flavor=str(entry.get("product_flavor", "") or ""),
    )


def load_project_variants(root: str | Path) -> dict[str, list[VariantDescriptor]]:
    """Return the variants declared per project under ``projects:``.

    Keys are normalised to Gradle project paths (``":app"``).
    """
    raw = _read_raw(Path(root).resolve())
    projects_raw = raw.get("projects", {})
    if not isinstance(projects_raw, dict):
        return {}

    result: dict[str, list[VariantDescriptor]] = {}
    for key, project_raw in projects_raw.items():
        if not isinstance(project_raw, dict):
            continue
        path = str(key)
        if not path.startswith(":"):
            path = ":" + path.replace("/", ":")
        entries = project_raw.get("variants") or []
        if not isinstance(entries, list):
            logger.warning(
                "Ignoring variants of project %s: expected a list, got %r", path, entries
            )
            entries = []
        result[path] = [
            variant
            for variant in (_parse_variant(entry) for entry in entries)
            if variant is not None
        ]
    return result


def validate_options(options: ReportOptions) -> list[str]:
    """Validate report options.

    Returns:
        List of error messages (empty if valid)
    """
    errors: list[str] = []

    if not _VERSION_RE.match(options.coverage_tool_version):
        errors.append(
            f"coverage_tool_version {options.coverage_tool_version!r} "
            "is not a version like 0.8.7"
        )

    errors.extend(
        f"exclude_patterns[{idx}] must be a non-empty glob"
        for idx, pattern in enumerate(options.global_class_excludes)
        if not pattern.strip()
    )

    if not options.formats:
        errors.append("reports: at least one of xml, csv or html must be enabled")

    if not options.build_dir.strip():
        errors.append("build_dir must not be empty")

    selector = options.root_report_selector
    if not selector.variant_names and not selector.build_types:
        errors.append("root_report: build_types or variants must select at least one variant")

    return errors
