"""Batch execution and process management."""

from encode_matrix.executor.subprocess import AsyncFFmpegProcess, FFmpegCommandBuilder
from encode_matrix.executor.matrix import ResultMatrix
from encode_matrix.executor.scheduler import BatchScheduler
from encode_matrix.executor.controller import BatchController, BatchHandle

__all__ = [
    "AsyncFFmpegProcess",
    "BatchController",
    "BatchHandle",
    "BatchScheduler",
    "FFmpegCommandBuilder",
    "ResultMatrix",
]
