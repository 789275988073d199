"""
Grid construction from two sweep axes.
"""

from dataclasses import replace
from typing import Sequence, TypeVar

from ..models import EncodeConfig, GridTask, Resolution
from ..utils import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def build_grid(
    resolutions: Sequence[Resolution],
    quality_levels: Sequence[int],
    base_config: EncodeConfig,
) -> list[GridTask]:
    """
    Build the cartesian product of both axes as an ordered task list.

    Rows follow the quality axis and columns follow the resolution axis; tasks
    are emitted row-major. Identical inputs always produce an identical list.

    Args:
        resolutions: Resolution axis (columns)
        quality_levels: Quality axis (rows)
        base_config: Template supplying frame rate, audio and codec

    Returns:
        List of len(quality_levels) * len(resolutions) tasks
    """
    tasks = [
        GridTask(
            row=row,
            col=col,
            config=replace(base_config, resolution=resolution, quality=quality),
        )
        for row, quality in enumerate(quality_levels)
        for col, resolution in enumerate(resolutions)
    ]

    logger.debug(
        f"Built grid of {len(quality_levels)}x{len(resolutions)} = {len(tasks)} tasks"
    )
    return tasks


def row_labels(quality_levels: Sequence[int]) -> list[str]:
    """Get row headers (e.g., 'CRF 35')."""
    return [f"CRF {quality}" for quality in quality_levels]


def column_labels(resolutions: Sequence[Resolution]) -> list[str]:
    """Get column headers (e.g., '720p (HD)')."""
    return [res.display_name for res in resolutions]


def repeated_values(values: Sequence[T]) -> list[T]:
    """
    Get values that occur more than once on an axis, in the order they first repeat.

    Repeated samples produce cells with the same output file name.
    """
    seen: list[T] = []
    repeated: list[T] = []
    for value in values:
        if value in seen:
            if value not in repeated:
                repeated.append(value)
        else:
            seen.append(value)
    return repeated
