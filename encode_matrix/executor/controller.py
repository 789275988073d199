"""
Public entry point for running an encode matrix.

BatchController turns two axis specifications into a grid, allocates the
result matrix and launches a BatchScheduler as an asyncio task. Callers get
a BatchHandle to cancel, observe progress and await the summary.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional, Union

from ..models import (
    AxisSpec,
    BatchState,
    BatchSummary,
    EncodeConfig,
    GridTask,
    Resolution,
    SourceInfo,
    VideoCodec,
)
from ..planner import (
    build_grid,
    column_labels,
    generate_quality_axis,
    generate_resolution_axis,
    repeated_values,
    row_labels,
)
from ..utils import ConfigurationError, get_logger
from .matrix import ResultMatrix
from .scheduler import BatchScheduler

if TYPE_CHECKING:
    from ..transcoder.base import Encoder

logger = get_logger(__name__)

ProgressListener = Callable[[int, int], None]


class BatchHandle:
    """Handle to one running batch."""

    def __init__(
        self,
        scheduler: BatchScheduler,
        resolutions: list[Resolution],
        quality_levels: list[int],
    ):
        self._scheduler = scheduler
        self._resolutions = resolutions
        self._quality_levels = quality_levels
        self._listeners: list[ProgressListener] = []
        self._task: Optional[asyncio.Task[BatchSummary]] = None

        scheduler.progress_callback = self._notify

    def _attach(self, task: "asyncio.Task[BatchSummary]") -> None:
        self._task = task

    @property
    def matrix(self) -> ResultMatrix:
        """Get the live result matrix."""
        return self._scheduler.matrix

    @property
    def tasks(self) -> tuple[GridTask, ...]:
        """Get the grid tasks in row-major order."""
        return self._scheduler.tasks

    @property
    def resolutions(self) -> list[Resolution]:
        """Get the resolution axis (columns)."""
        return list(self._resolutions)

    @property
    def quality_levels(self) -> list[int]:
        """Get the quality axis (rows)."""
        return list(self._quality_levels)

    @property
    def row_labels(self) -> list[str]:
        return row_labels(self._quality_levels)

    @property
    def column_labels(self) -> list[str]:
        return column_labels(self._resolutions)

    @property
    def state(self) -> BatchState:
        """Get current batch state."""
        return self._scheduler.state

    @property
    def done(self) -> bool:
        """Check if the batch has finished and its summary is available."""
        return self._task is not None and self._task.done()

    def cancel(self) -> bool:
        """
        Cancel the batch cooperatively.

        Returns:
            True if the batch moved to CANCELLED
        """
        return self._scheduler.cancel()

    def subscribe_progress(self, listener: ProgressListener) -> Callable[[], None]:
        """
        Register a progress listener.

        The listener is called with (completed, total) after each cell result.

        Args:
            listener: Progress callback

        Returns:
            Function removing the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, completed: int, total: int) -> None:
        for listener in list(self._listeners):
            try:
                listener(completed, total)
            except Exception as e:
                logger.warning(f"Progress listener failed: {e}")

    async def wait(self) -> BatchSummary:
        """
        Wait for every worker to finish.

        Returns:
            BatchSummary for the batch
        """
        if self._task is None:
            raise RuntimeError("Batch has not been started")
        return await self._task

    async def await_summary(self) -> tuple[int, int]:
        """
        Wait for the batch and return (success_count, total_tasks).
        """
        summary = await self.wait()
        return summary.as_tuple()


class BatchController:
    """
    Starts matrix batches against an encoder.

    Example:
        >>> controller = BatchController(FFmpegEncoder())
        >>> handle = controller.start(
        ...     source,
        ...     AxisSpec("480p", "1080p", 3),
        ...     AxisSpec(20, 30, 3),
        ...     max_concurrency=4,
        ...     output_dir=Path("out"),
        ... )
        >>> success, total = await handle.await_summary()
    """

    def __init__(self, encoder: "Encoder"):
        """
        Initialize controller.

        Args:
            encoder: Encoder used for every cell
        """
        self.encoder = encoder

    def start(
        self,
        source: SourceInfo,
        resolution_axis: AxisSpec[Union[Resolution, str]],
        quality_axis: AxisSpec[int],
        max_concurrency: int,
        output_dir: Path,
        frame_rate: int = 30,
        keep_audio: bool = True,
        codec: VideoCodec = VideoCodec.H264,
    ) -> BatchHandle:
        """
        Plan the grid and start the batch on the running event loop.

        Args:
            source: Probed source information
            resolution_axis: Resolution sweep (columns)
            quality_axis: CRF sweep (rows)
            max_concurrency: Maximum encodes in flight
            output_dir: Directory receiving the encodes
            frame_rate: Output frame rate for every cell
            keep_audio: Whether cells keep the audio track
            codec: Codec family for every cell

        Returns:
            BatchHandle for the running batch

        Raises:
            InvalidAxisError: If an axis specification is invalid
            ConfigurationError: If max_concurrency < 1
            RuntimeError: If called without a running event loop
        """
        if isinstance(max_concurrency, bool) or not isinstance(max_concurrency, int):
            raise ConfigurationError(f"max_concurrency must be an integer, got {max_concurrency!r}")
        if max_concurrency < 1:
            raise ConfigurationError(f"max_concurrency must be at least 1, got {max_concurrency}")

        resolutions = generate_resolution_axis(resolution_axis)
        quality_levels = generate_quality_axis(quality_axis)

        repeated_res = repeated_values(resolutions)
        repeated_crf = repeated_values(quality_levels)
        if repeated_res or repeated_crf:
            repeated = [res.label for res in repeated_res] + [f"CRF {q}" for q in repeated_crf]
            logger.warning(
                f"Axis values repeat ({', '.join(repeated)}); "
                "their cells share an output file and overwrite each other"
            )

        base_config = EncodeConfig(
            resolution=resolutions[0],
            frame_rate=frame_rate,
            keep_audio=keep_audio,
            codec=codec,
        )
        tasks = build_grid(resolutions, quality_levels, base_config)
        matrix = ResultMatrix(len(quality_levels), len(resolutions))

        scheduler = BatchScheduler(
            source=source,
            tasks=tasks,
            matrix=matrix,
            encoder=self.encoder,
            output_dir=Path(output_dir),
            max_concurrency=max_concurrency,
        )
        handle = BatchHandle(scheduler, resolutions, quality_levels)

        loop = asyncio.get_running_loop()
        scheduler.begin()
        handle._attach(loop.create_task(scheduler.run()))

        logger.info(
            f"Started {len(quality_levels)}x{len(resolutions)} matrix for {source.path.name}"
        )
        return handle
