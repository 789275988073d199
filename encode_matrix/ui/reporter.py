"""
Summary reporting for batch results.

This module provides rich console output for the probed source, the planned
sweep and the final matrix of results.
"""

from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..models import BatchSummary, CellStatus, Resolution, SourceInfo
from ..utils import format_duration, format_size, get_logger
from .progress import Snapshot, render_matrix

logger = get_logger(__name__)


class SummaryReporter:
    """
    Reporter for displaying batch results.

    This class creates formatted console output for:
    - Source information
    - Sweep plan
    - Result matrix with output sizes
    - Failure details
    - Overview statistics
    """

    def __init__(self, console: Optional[Console] = None):
        """
        Initialize summary reporter.

        Args:
            console: Rich console instance (creates new if not provided)
        """
        self.console = console or Console()

    def display_source(self, source: SourceInfo) -> None:
        """
        Display probed source information.

        Args:
            source: Probed source information
        """
        table = Table(title="Source", show_header=False, box=None)
        table.add_column("Property", style="cyan", width=20)
        table.add_column("Value", style="white")

        table.add_row("File", source.path.name)
        table.add_row("Resolution", source.resolution)
        table.add_row("Frame Rate", f"{source.frame_rate:.2f} fps")
        table.add_row("Duration", format_duration(source.duration))
        table.add_row("Size", format_size(source.size))
        if source.pix_fmt:
            table.add_row("Pixel Format", source.pix_fmt)

        if source.has_audio:
            tracks = ", ".join(
                f"{a.codec} {a.sample_rate} Hz {a.channels}ch" for a in source.audio_streams
            )
            table.add_row("Audio", tracks)
        else:
            table.add_row("Audio", Text("none", style="yellow"))

        available = Resolution.available_for(source.width, source.height)
        table.add_row(
            "Usable Resolutions",
            ", ".join(res.label for res in available) if available else "none",
        )

        self.console.print(table)
        self.console.print()

    def display_plan(
        self,
        row_labels: Sequence[str],
        column_labels: Sequence[str],
        max_concurrency: int,
        output_dir: Path,
    ) -> None:
        """
        Display the planned sweep.

        Args:
            row_labels: Row headers (quality levels)
            column_labels: Column headers (resolutions)
            max_concurrency: Maximum encodes in flight
            output_dir: Output directory
        """
        table = Table(title="Sweep Plan", show_header=False, box=None)
        table.add_column("Property", style="cyan", width=20)
        table.add_column("Value", style="white")

        table.add_row("Resolutions", ", ".join(column_labels))
        table.add_row("Quality Levels", ", ".join(row_labels))
        table.add_row("Encodes", str(len(row_labels) * len(column_labels)))
        table.add_row("Parallel Jobs", str(max_concurrency))
        table.add_row("Output", str(output_dir))

        self.console.print(table)
        self.console.print()

    def display_summary(
        self,
        summary: BatchSummary,
        snapshot: Snapshot,
        row_labels: Sequence[str],
        column_labels: Sequence[str],
        output_dir: Optional[Path] = None,
    ) -> None:
        """
        Display complete batch summary.

        Args:
            summary: Batch summary
            snapshot: Final matrix snapshot
            row_labels: Row headers
            column_labels: Column headers
            output_dir: Optional output directory to show
        """
        self.console.print()
        if summary.was_cancelled:
            self.console.rule("[bold yellow]Batch Cancelled", style="yellow")
        elif summary.has_failures:
            self.console.rule("[bold red]Batch Finished With Failures", style="red")
        else:
            self.console.rule("[bold green]Batch Complete", style="green")
        self.console.print()

        self.console.print(render_matrix(snapshot, row_labels, column_labels, title="Results"))
        self.console.print()

        self._display_overview(summary, snapshot)

        if summary.failures:
            self._display_failures(summary, row_labels, column_labels)

        if output_dir is not None:
            self.display_info(f"Output directory: {output_dir}")

        self.console.print()

    def _display_overview(self, summary: BatchSummary, snapshot: Snapshot) -> None:
        """
        Display overview statistics.

        Args:
            summary: Batch summary
            snapshot: Final matrix snapshot
        """
        sizes = [
            cell.result.output_size or 0
            for row in snapshot
            for cell in row
            if cell.status == CellStatus.SUCCEEDED and cell.result is not None
        ]

        table = Table(title="Overview", show_header=False, box=None)
        table.add_column("Metric", style="cyan", width=20)
        table.add_column("Value", style="white")

        table.add_row("Succeeded", f"{summary.success_count}/{summary.total_tasks}")
        if summary.failed_count:
            table.add_row("Failed", Text(str(summary.failed_count), style="red"))
        if summary.skipped_count:
            table.add_row("Not Run", Text(str(summary.skipped_count), style="yellow"))
        table.add_row("Success Rate", f"{summary.success_rate:.1f}%")
        if sizes:
            table.add_row("Total Output Size", format_size(sum(sizes)))
            table.add_row("Smallest Output", format_size(min(sizes)))
            table.add_row("Largest Output", format_size(max(sizes)))
        table.add_row("Duration", format_duration(summary.duration))

        self.console.print(table)
        self.console.print()

    def _display_failures(
        self,
        summary: BatchSummary,
        row_labels: Sequence[str],
        column_labels: Sequence[str],
    ) -> None:
        """
        Display failed cells.

        Args:
            summary: Batch summary
            row_labels: Row headers
            column_labels: Column headers
        """
        table = Table(title="Failures", show_header=True)
        table.add_column("Quality", style="magenta", no_wrap=True)
        table.add_column("Resolution", style="yellow", no_wrap=True)
        table.add_column("Kind", style="cyan", no_wrap=True)
        table.add_column("Error", style="red")

        for failure in summary.failures:
            table.add_row(
                row_labels[failure.row],
                column_labels[failure.col],
                failure.kind.value,
                failure.error,
            )

        self.console.print(table)
        self.console.print()

    def display_error(self, message: str, error: Optional[Exception] = None) -> None:
        """
        Display error message.

        Args:
            message: Error message
            error: Optional exception object
        """
        error_text = Text(f"✗ {message}", style="bold red")

        if error:
            error_text.append(Text(f"\n{error}", style="red"))

        self.console.print()
        self.console.print(Panel(error_text, title="Error", border_style="red"))
        self.console.print()

    def display_success(self, message: str) -> None:
        """Display success message."""
        success_text = Text(f"✓ {message}", style="bold green")
        self.console.print(Panel(success_text, title="Success", border_style="green"))

    def display_warning(self, message: str) -> None:
        """Display warning message."""
        self.console.print(Text(f"⚠ {message}", style="yellow"))

    def display_info(self, message: str) -> None:
        """Display info message."""
        self.console.print(Text(f"ℹ {message}", style="cyan"))


def create_summary_table(summary: BatchSummary) -> Table:
    """
    Create a compact table for a batch summary.

    Args:
        summary: Batch summary

    Returns:
        Rich Table object
    """
    table = Table(title="Batch Summary", show_header=True)
    table.add_column("State", style="cyan")
    table.add_column("Succeeded", style="green")
    table.add_column("Failed", style="red")
    table.add_column("Not Run", style="yellow")
    table.add_column("Duration", style="white")

    table.add_row(
        summary.state.value,
        str(summary.success_count),
        str(summary.failed_count),
        str(summary.skipped_count),
        format_duration(summary.duration),
    )
    return table
