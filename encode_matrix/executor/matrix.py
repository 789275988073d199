"""
Thread-safe result store for one batch.

The matrix is the only mutable state shared between workers. Every cell is
written at most once, and a single counter tracks finished cells. Renderers
read immutable snapshots and never hold the lock.
"""

import threading
from typing import Optional

from ..models import CellResult, CellState, CellStatus
from ..utils import DuplicateResultError, get_logger

logger = get_logger(__name__)


class ResultMatrix:
    """
    Sparse rows x cols store of per-cell results.

    A cell is PENDING until marked running, RUNNING while its encode is in
    flight, and SUCCEEDED or FAILED once set_result() has been called.
    """

    def __init__(self, rows: int, cols: int):
        """
        Initialize an empty matrix.

        Args:
            rows: Number of rows (quality levels)
            cols: Number of columns (resolutions)
        """
        if rows < 0 or cols < 0:
            raise ValueError(f"Matrix dimensions must be non-negative, got {rows}x{cols}")

        self.rows = rows
        self.cols = cols
        self._lock = threading.Lock()
        self._results: dict[tuple[int, int], CellResult] = {}
        self._running: set[tuple[int, int]] = set()
        self._completed = 0
        self._succeeded = 0

    @property
    def total(self) -> int:
        """Get total number of cells."""
        return self.rows * self.cols

    def _check_bounds(self, row: int, col: int) -> None:
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise IndexError(f"Cell ({row}, {col}) outside {self.rows}x{self.cols} matrix")

    def mark_running(self, row: int, col: int) -> None:
        """
        Mark a cell as running.

        Idempotent; has no effect once the cell has a result.

        Args:
            row: Row index
            col: Column index
        """
        self._check_bounds(row, col)
        with self._lock:
            if (row, col) not in self._results:
                self._running.add((row, col))

    def set_result(self, row: int, col: int, result: CellResult) -> int:
        """
        Record the final result of a cell.

        Args:
            row: Row index
            col: Column index
            result: Final cell result

        Returns:
            Completed count after this write

        Raises:
            DuplicateResultError: If the cell already has a result
        """
        self._check_bounds(row, col)
        with self._lock:
            if (row, col) in self._results:
                raise DuplicateResultError(row, col)

            self._results[(row, col)] = result
            self._running.discard((row, col))
            self._completed += 1
            if result.success:
                self._succeeded += 1
            return self._completed

    def get(self, row: int, col: int) -> Optional[CellResult]:
        """Get the result of a cell, or None if it has not finished."""
        self._check_bounds(row, col)
        with self._lock:
            return self._results.get((row, col))

    def status(self, row: int, col: int) -> CellStatus:
        """Get the current status of a cell."""
        self._check_bounds(row, col)
        with self._lock:
            return self._status_locked(row, col)

    def _status_locked(self, row: int, col: int) -> CellStatus:
        result = self._results.get((row, col))
        if result is not None:
            return result.status
        if (row, col) in self._running:
            return CellStatus.RUNNING
        return CellStatus.PENDING

    @property
    def completed_count(self) -> int:
        """Get number of cells with a result."""
        with self._lock:
            return self._completed

    def success_count(self) -> int:
        """Get number of succeeded cells."""
        with self._lock:
            return self._succeeded

    def failed_count(self) -> int:
        """Get number of failed cells."""
        with self._lock:
            return self._completed - self._succeeded

    def running_count(self) -> int:
        """Get number of cells currently running."""
        with self._lock:
            return len(self._running)

    @property
    def progress(self) -> float:
        """Get fraction of finished cells (0.0 to 1.0)."""
        if self.total == 0:
            return 1.0
        return self.completed_count / self.total

    @property
    def is_complete(self) -> bool:
        """Check if every cell has a result."""
        return self.completed_count == self.total

    def results(self) -> dict[tuple[int, int], CellResult]:
        """Get a copy of all recorded results keyed by (row, col)."""
        with self._lock:
            return dict(self._results)

    def snapshot(self) -> tuple[tuple[CellState, ...], ...]:
        """
        Get an immutable view of every cell.

        Returns:
            Tuple of rows, each a tuple of CellState
        """
        with self._lock:
            return tuple(
                tuple(
                    CellState(
                        status=self._status_locked(row, col),
                        result=self._results.get((row, col)),
                    )
                    for col in range(self.cols)
                )
                for row in range(self.rows)
            )
