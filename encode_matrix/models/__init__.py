"""Data models for encode matrix."""

from encode_matrix.models.grid import (
    AxisSpec,
    EncodeConfig,
    GridTask,
    Resolution,
    VideoCodec,
    default_config,
)
from encode_matrix.models.media import AudioStream, SourceInfo
from encode_matrix.models.results import (
    BatchState,
    BatchSummary,
    CellFailure,
    CellResult,
    CellState,
    CellStatus,
    FailureKind,
)

__all__ = [
    # Media models
    "AudioStream",
    "SourceInfo",
    # Grid models
    "AxisSpec",
    "EncodeConfig",
    "GridTask",
    "Resolution",
    "VideoCodec",
    "default_config",
    # Result models
    "BatchState",
    "BatchSummary",
    "CellFailure",
    "CellResult",
    "CellState",
    "CellStatus",
    "FailureKind",
]
