"""Terminal reporter with rich output formatting."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

if TYPE_CHECKING:
    from jacoco_config.models.plan import ReportTaskSpec
    from jacoco_config.orchestrator import BuildPlan

console = Console()

_MAX_PATHS_DISPLAY = 4


def _format_paths(paths: tuple[str, ...]) -> str:
    """Join paths one per line, eliding the tail of long lists."""
    if len(paths) <= _MAX_PATHS_DISPLAY:
        return "\n".join(paths)
    shown = "\n".join(paths[:_MAX_PATHS_DISPLAY])
    return f"{shown}\n[dim]… {len(paths) - _MAX_PATHS_DISPLAY} more[/dim]"


class CLIReporter:
    """Rich terminal output reporter for report plans."""

    def __init__(self, output: Console | None = None) -> None:
        self.console = output or console

    def print_header(self, title: str) -> None:
        """Print a bold header."""
        self.console.print(f"\n[bold cyan]{title}[/bold cyan]\n")

    def print_success(self, message: str) -> None:
        """Print a success message."""
        self.console.print(f"[green]✓[/green] {message}")

    def print_error(self, message: str) -> None:
        """Print an error message."""
        self.console.print(f"[red]✗[/red] {message}")

    def print_warning(self, message: str) -> None:
        """Print a warning message."""
        self.console.print(f"[yellow]⚠[/yellow] {message}")

    def print_info(self, message: str) -> None:
        """Print an info message."""
        self.console.print(f"[dim]{message}[/dim]")

    def _task_table(self, title: str, specs: list[ReportTaskSpec]) -> Table:
        table = Table(title=title, show_lines=True)
        table.add_column("Task", style="cyan", no_wrap=True)
        table.add_column("Depends on")
        table.add_column("Sources")
        table.add_column("Classes")
        table.add_column("Execution data")
        table.add_column("Root", justify="center")
        for spec in specs:
            table.add_row(
                spec.task_name,
                "\n".join(spec.depends_on),
                _format_paths(spec.source_directories),
                _format_paths(spec.class_directory_includes),
                _format_paths(spec.execution_data_paths),
                "[green]✓[/green]" if spec.feeds_root_report else "",
            )
        return table

    def print_build_plan(self, build_plan: BuildPlan) -> None:
        """Print one table per project plus the aggregated report."""
        self.console.print(
            Panel(
                f"[bold white]Jacoco {build_plan.tool_version}[/bold white]",
                border_style="cyan",
                padding=(0, 2),
            )
        )
        for plan in build_plan.plans:
            if plan.is_empty:
                for warning in plan.warnings:
                    self.print_warning(warning)
                continue
            title = f"{plan.project_path} ({plan.kind.value})"
            self.console.print(self._task_table(title, plan.tasks))

        if build_plan.root_report is not None:
            self.console.print(self._task_table("Aggregated report", [build_plan.root_report]))
        else:
            self.print_info("No variant feeds the aggregated report.")

        for path in build_plan.skipped:
            self.print_info(f"Skipped ignored project {path}")
        for message in build_plan.errors.values():
            self.print_error(message)


reporter = CLIReporter()
