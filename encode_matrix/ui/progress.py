"""
Live matrix monitoring for running batches.

This module renders ResultMatrix snapshots as a Rich table that is refreshed
while the batch runs, with:
- One cell per encode, coloured by status
- An overall progress bar
- Log messages below the matrix
"""

from collections import deque
from typing import Optional, Sequence

from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table
from rich.text import Text

from ..models import CellState, CellStatus, FailureKind
from ..utils import format_size, get_logger

logger = get_logger(__name__)

Snapshot = Sequence[Sequence[CellState]]

FAILURE_LABELS = {
    FailureKind.VALIDATION: "skipped",
    FailureKind.ENCODE: "failed",
    FailureKind.POST_ENCODE_IO: "io error",
}


def render_cell(state: CellState) -> Text:
    """
    Render one matrix cell.

    Args:
        state: Cell snapshot

    Returns:
        Styled cell text
    """
    if state.status == CellStatus.PENDING:
        return Text("·", style="dim")
    if state.status == CellStatus.RUNNING:
        return Text("⟳ encoding", style="yellow")

    result = state.result
    if result is not None and result.success:
        return Text(f"✓ {format_size(result.output_size or 0)}", style="green")

    kind = result.failure_kind if result is not None else None
    label = FAILURE_LABELS.get(kind, "failed")
    style = "dim red" if kind == FailureKind.VALIDATION else "bold red"
    return Text(f"✗ {label}", style=style)


def render_matrix(
    snapshot: Snapshot,
    row_labels: Sequence[str],
    column_labels: Sequence[str],
    title: Optional[str] = None,
) -> Table:
    """
    Render a matrix snapshot as a table.

    Rows are quality levels and columns are resolutions.

    Args:
        snapshot: Rows of cell snapshots
        row_labels: Row headers
        column_labels: Column headers
        title: Optional table title

    Returns:
        Rich Table
    """
    table = Table(title=title, show_header=True, header_style="bold cyan", expand=False)
    table.add_column("", style="bold magenta", no_wrap=True)
    for label in column_labels:
        table.add_column(label, justify="center", no_wrap=True)

    for label, row in zip(row_labels, snapshot):
        table.add_row(label, *(render_cell(cell) for cell in row))

    return table


class MatrixMonitor:
    """
    Rich-based live monitor for a batch.

    The monitor never reads the ResultMatrix itself; the caller pushes
    snapshots through update().
    """

    def __init__(
        self,
        row_labels: Sequence[str],
        column_labels: Sequence[str],
        console: Optional[Console] = None,
        max_log_lines: Optional[int] = None,
    ):
        """
        Initialize matrix monitor.

        Args:
            row_labels: Row headers (quality levels)
            column_labels: Column headers (resolutions)
            console: Rich console (creates new if None)
            max_log_lines: Maximum number of log lines to display (auto-calculated if None)
        """
        self.console = console or Console()
        self.row_labels = list(row_labels)
        self.column_labels = list(column_labels)
        self.total = len(self.row_labels) * len(self.column_labels)

        self._snapshot: Snapshot = tuple(
            tuple(CellState(CellStatus.PENDING) for _ in self.column_labels)
            for _ in self.row_labels
        )
        self._completed = 0
        self._progress: Optional[Progress] = None
        self._progress_task: Optional[TaskID] = None
        self._live: Optional[Live] = None

        if max_log_lines is None:
            # Leave room for the matrix, the progress bar and borders
            terminal_height = self.console.size.height
            max_log_lines = max(5, min(20, terminal_height - len(self.row_labels) - 16))

        self._log_lines: deque[str] = deque(maxlen=max_log_lines)
        self._max_log_lines = max_log_lines

    def create_progress(self) -> Progress:
        """Create the overall progress bar."""
        return Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(bar_width=None),
            MofNCompleteColumn(),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            TimeElapsedColumn(),
            console=self.console,
            expand=True,
        )

    def start(self) -> None:
        """Start the live display."""
        from ..utils import set_active_monitor

        self._progress = self.create_progress()
        self._progress_task = self._progress.add_task("Encoding", total=self.total)
        self._live = Live(
            self._generate_layout(),
            console=self.console,
            refresh_per_second=4,
            transient=False,
        )
        self._live.start()

        set_active_monitor(self)
        logger.debug("Matrix monitor started")

    def stop(self) -> None:
        """Stop the live display."""
        from ..utils import set_active_monitor

        set_active_monitor(None)

        if self._live:
            self._live.update(self._generate_layout())
            self._live.stop()
            self._live = None
        self._progress = None
        self._progress_task = None
        logger.debug("Matrix monitor stopped")

    @property
    def is_running(self) -> bool:
        """Check if the live display is active."""
        return self._live is not None

    @property
    def completed(self) -> int:
        """Get last reported number of finished cells."""
        return self._completed

    def update(self, snapshot: Snapshot, completed: int) -> None:
        """
        Show a new matrix snapshot.

        Args:
            snapshot: Rows of cell snapshots
            completed: Number of finished cells
        """
        self._snapshot = snapshot
        self._completed = completed

        if self._progress is not None and self._progress_task is not None:
            self._progress.update(self._progress_task, completed=completed)
        if self._live:
            self._live.update(self._generate_layout())

    def add_log(self, message: str) -> None:
        """
        Add a log message to display below the matrix.

        Args:
            message: Log message to display
        """
        self._log_lines.append(message)
        if self._live:
            self._live.update(self._generate_layout())

    def _generate_layout(self) -> Group:
        """
        Generate layout with the matrix, progress bar and logs.

        Returns:
            Rich Group of panels
        """
        parts: list = [render_matrix(self._snapshot, self.row_labels, self.column_labels)]
        if self._progress is not None:
            parts.append(self._progress)

        matrix_panel = Panel(
            Group(*parts),
            title="[bold cyan]Encode Matrix[/bold cyan]",
            subtitle=self._generate_statistics(),
            border_style="cyan",
        )

        if not self._log_lines:
            return Group(matrix_panel)

        log_panel = Panel(
            Text.from_markup("\n".join(self._log_lines), overflow="fold"),
            title="[bold yellow]📋 Logs[/bold yellow]",
            subtitle=f"[dim]Last {len(self._log_lines)} entries[/dim]",
            border_style="yellow",
            padding=(0, 1),
        )
        return Group(matrix_panel, log_panel)

    def _generate_statistics(self) -> str:
        """
        Generate statistics text.

        Returns:
            Formatted statistics string
        """
        counts = {status: 0 for status in CellStatus}
        for row in self._snapshot:
            for cell in row:
                counts[cell.status] += 1

        parts = []
        if counts[CellStatus.RUNNING]:
            parts.append(f"[yellow]Running: {counts[CellStatus.RUNNING]}[/yellow]")
        if counts[CellStatus.SUCCEEDED]:
            parts.append(f"[green]Succeeded: {counts[CellStatus.SUCCEEDED]}[/green]")
        if counts[CellStatus.FAILED]:
            parts.append(f"[red]Failed: {counts[CellStatus.FAILED]}[/red]")
        parts.append(f"Total: {self.total}")

        return " | ".join(parts)

    def __enter__(self) -> "MatrixMonitor":
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.stop()
