"""Data models shared by the planner, detectors and reporters."""

from jacoco_config.models.capabilities import BuildCapabilities, PluginId, ProjectKind
from jacoco_config.models.plan import (
    ClassDirectoryTree,
    ReportOutputs,
    ReportPlan,
    ReportTaskSpec,
    RootReportAccumulator,
)
from jacoco_config.models.variant import VariantDescriptor

__all__ = [
    "BuildCapabilities",
    "ClassDirectoryTree",
    "PluginId",
    "ProjectKind",
    "ReportOutputs",
    "ReportPlan",
    "ReportTaskSpec",
    "RootReportAccumulator",
    "VariantDescriptor",
]
