"""
Data models for matrix cell and batch results.

This module contains the tagged per-cell state used by the result matrix and
the batch-level summary returned to callers.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from .grid import EncodeConfig


class CellStatus(Enum):
    """Status of a matrix cell."""

    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_finished(self) -> bool:
        """Check if the status is terminal."""
        return self in (CellStatus.SUCCEEDED, CellStatus.FAILED)


class FailureKind(Enum):
    """Why a cell failed."""

    VALIDATION = "validation"
    ENCODE = "encode"
    POST_ENCODE_IO = "post_encode_io"


class BatchState(Enum):
    """Lifecycle state of a batch run."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        """Check if no further transition is possible."""
        return self in (BatchState.COMPLETED, BatchState.CANCELLED)


@dataclass(frozen=True)
class CellResult:
    """Final outcome of one matrix cell."""

    status: CellStatus
    output_path: Optional[Path] = None
    output_size: Optional[int] = None
    error: Optional[str] = None
    failure_kind: Optional[FailureKind] = None
    duration: float = 0.0

    def __post_init__(self) -> None:
        """Only terminal statuses carry a result."""
        if not self.status.is_finished:
            raise ValueError(f"CellResult status must be terminal, got {self.status.value}")

    @classmethod
    def succeeded(cls, output_path: Path, output_size: int, duration: float = 0.0) -> "CellResult":
        """Create a successful result."""
        return cls(
            status=CellStatus.SUCCEEDED,
            output_path=output_path,
            output_size=output_size,
            duration=duration,
        )

    @classmethod
    def failed(cls, error: str, kind: FailureKind, duration: float = 0.0) -> "CellResult":
        """Create a failed result."""
        return cls(status=CellStatus.FAILED, error=error, failure_kind=kind, duration=duration)

    @property
    def success(self) -> bool:
        """Check if the cell succeeded."""
        return self.status == CellStatus.SUCCEEDED

    @property
    def output_size_mb(self) -> float:
        """Get output size in megabytes."""
        return (self.output_size or 0) / (1024 * 1024)


@dataclass(frozen=True)
class CellState:
    """Point-in-time view of one cell, as handed to renderers."""

    status: CellStatus
    result: Optional[CellResult] = None


@dataclass(frozen=True)
class CellFailure:
    """Failure detail for one cell."""

    row: int
    col: int
    config: EncodeConfig
    error: str
    kind: FailureKind


@dataclass
class BatchSummary:
    """Summary of a finished (or cancelled) batch."""

    total_tasks: int
    success_count: int
    failed_count: int
    state: BatchState
    duration: float = 0.0
    failures: list[CellFailure] = field(default_factory=list)

    @property
    def skipped_count(self) -> int:
        """Tasks that never ran because the batch was cancelled."""
        return self.total_tasks - self.success_count - self.failed_count

    @property
    def success_rate(self) -> float:
        """Calculate success rate."""
        if self.total_tasks == 0:
            return 0.0
        return (self.success_count / self.total_tasks) * 100

    @property
    def has_failures(self) -> bool:
        """Check if any tasks failed."""
        return self.failed_count > 0

    @property
    def was_cancelled(self) -> bool:
        """Check if the batch was cancelled."""
        return self.state == BatchState.CANCELLED

    def as_tuple(self) -> tuple[int, int]:
        """Get (success_count, total_tasks)."""
        return (self.success_count, self.total_tasks)
