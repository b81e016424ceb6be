"""Errors raised while planning coverage report tasks."""

from __future__ import annotations


class JacocoConfigError(Exception):
    """Base class for planning errors."""


class InvalidConfiguration(JacocoConfigError):
    """Variant data is missing or ambiguous for a project."""

    def __init__(self, message: str, *, project_path: str = "") -> None:
        self.project_path = project_path
        prefix = f"{project_path}: " if project_path else ""
        super().__init__(f"{prefix}{message}")


class MissingCapability(JacocoConfigError):
    """No coverage-relevant plugin is applied to a project."""
