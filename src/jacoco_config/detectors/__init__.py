"""Detectors for Gradle plugin capabilities and build workspaces."""

from jacoco_config.detectors.plugins import detect_capabilities, has_jvm_target, read_plugin_ids
from jacoco_config.detectors.workspace import GradleProject, discover_projects

__all__ = [
    "GradleProject",
    "detect_capabilities",
    "discover_projects",
    "has_jvm_target",
    "read_plugin_ids",
]
