"""Utility functions and helpers."""

from encode_matrix.utils.errors import (
    BatchStateError,
    ConfigurationError,
    DuplicateResultError,
    EncodeError,
    FFmpegError,
    InvalidAxisError,
    MatrixError,
    ProbeError,
    ValidationError,
)
from encode_matrix.utils.helpers import (
    build_output_path,
    ensure_directory,
    format_duration,
    format_size,
    parse_frame_rate,
    round_half_up,
    split_file_name,
)
from encode_matrix.utils.logger import (
    get_active_monitor,
    get_logger,
    log_performance,
    set_active_monitor,
    setup_logger,
)

__all__ = [
    # Errors
    "BatchStateError",
    "ConfigurationError",
    "DuplicateResultError",
    "EncodeError",
    "FFmpegError",
    "InvalidAxisError",
    "MatrixError",
    "ProbeError",
    "ValidationError",
    # Helpers
    "build_output_path",
    "ensure_directory",
    "format_duration",
    "format_size",
    "parse_frame_rate",
    "round_half_up",
    "split_file_name",
    # Logging
    "get_active_monitor",
    "get_logger",
    "log_performance",
    "set_active_monitor",
    "setup_logger",
]
