"""
Bounded-concurrency batch scheduling for matrix encodes.

This module runs every grid task at most once with at most N encodes in
flight, records exactly one result per finished task in the ResultMatrix,
and drives the batch state machine. A failing task never affects its
siblings.
"""

from __future__ import annotations

import asyncio
import functools
import inspect
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional, Sequence

from ..models import (
    BatchState,
    BatchSummary,
    CellFailure,
    CellResult,
    FailureKind,
    GridTask,
    SourceInfo,
)
from ..utils import (
    BatchStateError,
    ValidationError,
    build_output_path,
    ensure_directory,
    get_logger,
)
from ..validator import check_encode_config
from .matrix import ResultMatrix

if TYPE_CHECKING:
    from ..transcoder.base import Encoder

logger = get_logger(__name__)

ProgressCallback = Callable[[int, int], None]


class BatchScheduler:
    """
    Executes a list of grid tasks against an encoder.

    Tasks failing validation are recorded immediately without taking a worker
    slot. The rest run under a semaphore of size max_concurrency; blocking
    encoders run on a dedicated thread pool of the same size.
    """

    def __init__(
        self,
        source: SourceInfo,
        tasks: Sequence[GridTask],
        matrix: ResultMatrix,
        encoder: Encoder,
        output_dir: Path,
        max_concurrency: int,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        """
        Initialize scheduler.

        Args:
            source: Probed source information
            tasks: Grid tasks, one per matrix cell
            matrix: Result store sized to the grid
            encoder: Encoder collaborator
            output_dir: Directory receiving the encodes
            max_concurrency: Maximum encodes in flight (>= 1)
            progress_callback: Called with (completed, total) after each result
        """
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be at least 1, got {max_concurrency}")

        self.source = source
        self.tasks = tuple(tasks)
        self.matrix = matrix
        self.encoder = encoder
        self.output_dir = output_dir
        self.max_concurrency = max_concurrency
        self.progress_callback = progress_callback

        self._state = BatchState.NOT_STARTED
        self._failures: list[CellFailure] = []
        self._started_at: Optional[float] = None
        self._run_called = False

    @property
    def state(self) -> BatchState:
        """Get current batch state."""
        return self._state

    @property
    def total_tasks(self) -> int:
        """Get number of tasks in the batch."""
        return len(self.tasks)

    @property
    def is_cancelled(self) -> bool:
        """Check if the batch was cancelled."""
        return self._state == BatchState.CANCELLED

    def cancel(self) -> bool:
        """
        Request cancellation.

        Tasks that have not started are skipped; encodes already in flight run
        to completion and still record their results. Once every cell has a
        result the batch is COMPLETED and cancel has no effect.

        Returns:
            True if the batch moved to CANCELLED, False if it was not running
        """
        if self._state != BatchState.RUNNING:
            logger.debug(f"Ignoring cancel in state {self._state.value}")
            return False

        self._state = BatchState.CANCELLED
        logger.warning(
            f"Batch cancelled with {self.matrix.completed_count}/{self.total_tasks} tasks finished"
        )
        return True

    def begin(self) -> None:
        """
        Move the batch to RUNNING.

        Lets a caller accept cancel() before run() gets scheduled. Called by
        run() when it has not been called already.

        Raises:
            BatchStateError: If the scheduler was already started
        """
        if self._state != BatchState.NOT_STARTED:
            raise BatchStateError(f"Batch already started (state: {self._state.value})")

        self._state = BatchState.RUNNING
        self._started_at = time.time()

    async def run(self) -> BatchSummary:
        """
        Run every task and wait for all workers to finish.

        Returns:
            BatchSummary for the batch

        Raises:
            BatchStateError: If the batch was already run
        """
        if self._run_called:
            raise BatchStateError(f"Batch already run (state: {self._state.value})")
        self._run_called = True
        if self._state == BatchState.NOT_STARTED:
            self.begin()

        ensure_directory(self.output_dir)

        logger.info(
            f"Starting batch of {self.total_tasks} tasks "
            f"(max concurrency: {self.max_concurrency})"
        )

        semaphore = asyncio.Semaphore(self.max_concurrency)
        pool: Optional[ThreadPoolExecutor] = None
        if not inspect.iscoroutinefunction(self.encoder.encode):
            pool = ThreadPoolExecutor(
                max_workers=self.max_concurrency, thread_name_prefix="encode-worker"
            )

        try:
            workers = []
            for task in self.tasks:
                if self.is_cancelled:
                    break
                message = check_encode_config(self.source, task.config)
                if message is not None:
                    logger.warning(f"Skipping {task.config.describe()}: {message}")
                    self._record(task, CellResult.failed(message, FailureKind.VALIDATION))
                    continue
                workers.append(self._execute(task, semaphore, pool))

            await asyncio.gather(*workers)
        finally:
            if pool is not None:
                pool.shutdown(wait=False)

        if self._state == BatchState.RUNNING:
            self._state = BatchState.COMPLETED

        summary = self.summarize()
        logger.info(
            f"Batch {summary.state.value}: {summary.success_count}/{summary.total_tasks} "
            f"succeeded in {summary.duration:.2f}s"
        )
        return summary

    async def _execute(
        self,
        task: GridTask,
        semaphore: asyncio.Semaphore,
        pool: Optional[ThreadPoolExecutor],
    ) -> None:
        """
        Run one task inside a worker slot.

        Args:
            task: Task to execute
            semaphore: Concurrency limiter
            pool: Thread pool for blocking encoders
        """
        async with semaphore:
            if self.is_cancelled:
                logger.debug(f"Task {task.task_id} skipped (batch cancelled)")
                return

            self.matrix.mark_running(task.row, task.col)
            output_path = build_output_path(
                self.output_dir, self.source.path, task.config.file_suffix
            )
            logger.info(f"Task {task.task_id} started: {task.config.describe()}")

            start = time.time()
            try:
                await self._invoke_encoder(task, output_path, pool)
            except ValidationError as e:
                result = CellResult.failed(str(e), FailureKind.VALIDATION, time.time() - start)
            except Exception as e:
                result = CellResult.failed(
                    str(e) or e.__class__.__name__, FailureKind.ENCODE, time.time() - start
                )
            else:
                try:
                    size = output_path.stat().st_size
                except OSError as e:
                    result = CellResult.failed(
                        f"Failed to read output file size: {e}",
                        FailureKind.POST_ENCODE_IO,
                        time.time() - start,
                    )
                else:
                    result = CellResult.succeeded(output_path, size, time.time() - start)

            self._record(task, result)

    async def _invoke_encoder(
        self,
        task: GridTask,
        output_path: Path,
        pool: Optional[ThreadPoolExecutor],
    ) -> None:
        """Call the encoder, off the event loop when it blocks."""
        if pool is None:
            await self.encoder.encode(self.source, task.config, output_path)
            return

        loop = asyncio.get_running_loop()
        await loop.run_in_executor(
            pool,
            functools.partial(self.encoder.encode, self.source, task.config, output_path),
        )

    def _record(self, task: GridTask, result: CellResult) -> None:
        """Write a result and notify the progress listener."""
        completed = self.matrix.set_result(task.row, task.col, result)
        if completed == self.total_tasks and self._state == BatchState.RUNNING:
            self._state = BatchState.COMPLETED

        if result.success:
            logger.info(f"Task {task.task_id} succeeded ({result.output_size} bytes)")
        else:
            self._failures.append(
                CellFailure(
                    row=task.row,
                    col=task.col,
                    config=task.config,
                    error=result.error or "",
                    kind=result.failure_kind or FailureKind.ENCODE,
                )
            )
            logger.error(f"Task {task.task_id} failed: {result.error}")

        if self.progress_callback:
            try:
                self.progress_callback(completed, self.total_tasks)
            except Exception as e:
                logger.warning(f"Progress callback failed: {e}")

    def summarize(self) -> BatchSummary:
        """
        Build a summary from the current matrix contents.

        Returns:
            BatchSummary
        """
        duration = time.time() - self._started_at if self._started_at else 0.0
        return BatchSummary(
            total_tasks=self.total_tasks,
            success_count=self.matrix.success_count(),
            failed_count=self.matrix.failed_count(),
            state=self._state,
            duration=duration,
            failures=sorted(self._failures, key=lambda f: (f.row, f.col)),
        )
