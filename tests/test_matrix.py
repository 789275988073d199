"""
Tests for the thread-safe result matrix.
"""

import threading
from pathlib import Path

import pytest

from encode_matrix.executor import ResultMatrix
from encode_matrix.models import CellResult, CellStatus, FailureKind
from encode_matrix.utils import DuplicateResultError


def _ok(size: int = 100) -> CellResult:
    return CellResult.succeeded(Path("out.mp4"), size)


def _fail(message: str = "boom") -> CellResult:
    return CellResult.failed(message, FailureKind.ENCODE)


class TestResultMatrix:
    """Test ResultMatrix class."""

    def test_initial_state(self):
        """Test a fresh matrix is empty."""
        matrix = ResultMatrix(2, 3)

        assert matrix.total == 6
        assert matrix.completed_count == 0
        assert matrix.success_count() == 0
        assert matrix.failed_count() == 0
        assert matrix.progress == 0.0
        assert not matrix.is_complete
        assert matrix.status(1, 2) == CellStatus.PENDING
        assert matrix.get(1, 2) is None

    def test_set_result(self):
        """Test recording results updates counters."""
        matrix = ResultMatrix(2, 2)

        assert matrix.set_result(0, 0, _ok()) == 1
        assert matrix.set_result(1, 1, _fail()) == 2

        assert matrix.completed_count == 2
        assert matrix.success_count() == 1
        assert matrix.failed_count() == 1
        assert matrix.status(0, 0) == CellStatus.SUCCEEDED
        assert matrix.status(1, 1) == CellStatus.FAILED
        assert matrix.get(1, 1).error == "boom"
        assert matrix.progress == 0.5

    def test_duplicate_result_rejected(self):
        """Test a cell can only be written once."""
        matrix = ResultMatrix(1, 1)
        matrix.set_result(0, 0, _ok())

        with pytest.raises(DuplicateResultError, match=r"Cell \(0, 0\) already has a result"):
            matrix.set_result(0, 0, _fail())

        assert matrix.completed_count == 1
        assert matrix.get(0, 0).success

    def test_running_state(self):
        """Test running cells are tracked until a result arrives."""
        matrix = ResultMatrix(1, 2)

        matrix.mark_running(0, 1)
        matrix.mark_running(0, 1)
        assert matrix.status(0, 1) == CellStatus.RUNNING
        assert matrix.running_count() == 1

        matrix.set_result(0, 1, _ok())
        assert matrix.status(0, 1) == CellStatus.SUCCEEDED
        assert matrix.running_count() == 0

    def test_mark_running_after_result(self):
        """Test a finished cell never goes back to running."""
        matrix = ResultMatrix(1, 1)
        matrix.set_result(0, 0, _ok())
        matrix.mark_running(0, 0)

        assert matrix.status(0, 0) == CellStatus.SUCCEEDED
        assert matrix.running_count() == 0

    @pytest.mark.parametrize("cell", [(2, 0), (0, 2), (-1, 0)])
    def test_out_of_bounds(self, cell):
        """Test coordinates outside the matrix are rejected."""
        matrix = ResultMatrix(2, 2)
        with pytest.raises(IndexError):
            matrix.set_result(*cell, _ok())

    def test_negative_dimensions(self):
        """Test negative sizes are rejected."""
        with pytest.raises(ValueError):
            ResultMatrix(-1, 2)

    def test_snapshot(self):
        """Test snapshots reflect every cell and are detached."""
        matrix = ResultMatrix(2, 2)
        matrix.mark_running(0, 1)
        matrix.set_result(1, 0, _fail("bad"))

        snapshot = matrix.snapshot()

        assert len(snapshot) == 2
        assert all(len(row) == 2 for row in snapshot)
        assert snapshot[0][0].status == CellStatus.PENDING
        assert snapshot[0][1].status == CellStatus.RUNNING
        assert snapshot[1][0].status == CellStatus.FAILED
        assert snapshot[1][0].result.error == "bad"

        matrix.set_result(0, 0, _ok())
        assert snapshot[0][0].status == CellStatus.PENDING

    def test_complete(self):
        """Test completion once every cell has a result."""
        matrix = ResultMatrix(1, 2)
        matrix.set_result(0, 0, _ok())
        matrix.set_result(0, 1, _ok())

        assert matrix.is_complete
        assert matrix.progress == 1.0
        assert set(matrix.results()) == {(0, 0), (0, 1)}

    def test_concurrent_writes(self):
        """Test concurrent writers produce exact counts."""
        rows, cols = 20, 20
        matrix = ResultMatrix(rows, cols)
        counts: list[int] = []
        lock = threading.Lock()

        def writer(row: int) -> None:
            for col in range(cols):
                result = _ok() if (row + col) % 3 else _fail()
                completed = matrix.set_result(row, col, result)
                with lock:
                    counts.append(completed)

        threads = [threading.Thread(target=writer, args=(row,)) for row in range(rows)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert matrix.completed_count == rows * cols
        assert sorted(counts) == list(range(1, rows * cols + 1))
        expected_failures = sum(1 for r in range(rows) for c in range(cols) if (r + c) % 3 == 0)
        assert matrix.failed_count() == expected_failures

    def test_concurrent_duplicate_writes(self):
        """Test exactly one of many racing writers wins a cell."""
        matrix = ResultMatrix(1, 1)
        errors: list[Exception] = []
        barrier = threading.Barrier(8)

        def writer() -> None:
            barrier.wait()
            try:
                matrix.set_result(0, 0, _ok())
            except DuplicateResultError as e:
                errors.append(e)

        threads = [threading.Thread(target=writer) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert matrix.completed_count == 1
        assert len(errors) == 7


class TestCellResult:
    """Test CellResult model."""

    def test_non_terminal_status_rejected(self):
        """Test results require a finished status."""
        with pytest.raises(ValueError):
            CellResult(status=CellStatus.RUNNING)

    def test_size_in_mb(self):
        """Test size conversion."""
        assert _ok(3 * 1024 * 1024).output_size_mb == 3.0
        assert _fail().output_size_mb == 0.0
