"""Reporters that present or materialise report plans."""

from jacoco_config.reporters.gradle_kts import render_build, render_project, render_task
from jacoco_config.reporters.terminal import CLIReporter, reporter

__all__ = ["CLIReporter", "render_build", "render_project", "render_task", "reporter"]
