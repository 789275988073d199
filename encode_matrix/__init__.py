"""
Encode Matrix

A tool for sweeping a video through a grid of resolutions and CRF values,
encoding every cell in parallel and reporting the result matrix.
"""

__version__ = "0.1.0"

from encode_matrix.executor import BatchController, BatchHandle, ResultMatrix
from encode_matrix.models import (
    AxisSpec,
    BatchState,
    BatchSummary,
    CellResult,
    EncodeConfig,
    Resolution,
    SourceInfo,
    VideoCodec,
)
from encode_matrix.utils import (
    ConfigurationError,
    EncodeError,
    InvalidAxisError,
    MatrixError,
    ProbeError,
    ValidationError,
    get_logger,
    setup_logger,
)

__all__ = [
    "__version__",
    # Execution
    "BatchController",
    "BatchHandle",
    "ResultMatrix",
    # Models
    "AxisSpec",
    "BatchState",
    "BatchSummary",
    "CellResult",
    "EncodeConfig",
    "Resolution",
    "SourceInfo",
    "VideoCodec",
    # Utils
    "ConfigurationError",
    "EncodeError",
    "InvalidAxisError",
    "MatrixError",
    "ProbeError",
    "ValidationError",
    "get_logger",
    "setup_logger",
]
