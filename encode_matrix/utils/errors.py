"""
Custom exceptions for encode matrix.

This module defines the exception hierarchy used throughout the application.
Batch-level errors (axis, configuration, probe) are raised to the caller before
a batch starts; task-level errors are absorbed into per-cell results.
"""


class MatrixError(Exception):
    """Base exception for all encode matrix errors."""

    pass


class InvalidAxisError(MatrixError):
    """Axis specification is malformed (bad step count or unknown resolution)."""

    pass


class ConfigurationError(MatrixError):
    """Configuration is invalid or missing."""

    pass


class ProbeError(MatrixError):
    """Failed to probe the source media file."""

    pass


class ValidationError(MatrixError):
    """Encode configuration is not achievable for the source (upscaling, missing audio)."""

    pass


class EncodeError(MatrixError):
    """Encoding process failed."""

    pass


class FFmpegError(EncodeError):
    """FFmpeg command execution failed."""

    def __init__(self, message: str, command: list[str] | None = None, stderr: str | None = None):
        """
        Initialize FFmpeg error with command details.

        Args:
            message: Error message
            command: FFmpeg command that failed
            stderr: Standard error output from FFmpeg
        """
        super().__init__(message)
        self.command = command
        self.stderr = stderr


class DuplicateResultError(MatrixError):
    """A result was written twice for the same matrix cell."""

    def __init__(self, row: int, col: int):
        super().__init__(f"Cell ({row}, {col}) already has a result")
        self.row = row
        self.col = col


class BatchStateError(MatrixError):
    """Batch was driven through an invalid state transition."""

    pass
