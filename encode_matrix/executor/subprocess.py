"""
Async subprocess wrapper for FFmpeg execution.

This module provides asynchronous process management for FFmpeg commands,
including stderr capture, error extraction and cleanup on interruption.
"""

import asyncio
import re
from pathlib import Path
from typing import Optional

from ..utils import FFmpegError, get_logger

logger = get_logger(__name__)


class AsyncFFmpegProcess:
    """
    Async wrapper for FFmpeg subprocess execution.

    The process runs until FFmpeg exits; there is no timeout. If the awaiting
    coroutine is cancelled (event loop shutdown, Ctrl-C) the child process is
    terminated before the cancellation propagates.
    """

    ERROR_PATTERNS = [
        r"Error while (opening|decoding|encoding)",
        r"Invalid data found",
        r"No such file or directory",
        r"Permission denied",
        r"Unknown encoder",
        r"Codec .* is not supported",
        r"Invalid argument",
    ]

    def __init__(self, command: list[str]):
        """
        Initialize async FFmpeg process.

        Args:
            command: FFmpeg command as list of arguments
        """
        self.command = command
        self._process: Optional[asyncio.subprocess.Process] = None
        self._stderr_lines: list[str] = []

    async def run(self) -> tuple[str, str]:
        """
        Run FFmpeg command and wait for completion.

        Returns:
            Tuple of (stdout, stderr) as strings

        Raises:
            FFmpegError: If the process cannot start or exits non-zero
        """
        logger.debug(f"Running command: {' '.join(self.command)}")

        try:
            self._process = await asyncio.create_subprocess_exec(
                *self.command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise FFmpegError(
                f"Failed to start {self.command[0]}: {e}", command=self.command
            ) from e

        try:
            stdout_bytes, stderr_bytes = await self._process.communicate()
        except asyncio.CancelledError:
            await self.terminate()
            raise

        stdout = stdout_bytes.decode(errors="replace") if stdout_bytes else ""
        stderr = stderr_bytes.decode(errors="replace") if stderr_bytes else ""
        self._stderr_lines = [line for line in stderr.splitlines() if line.strip()]

        if self._process.returncode != 0:
            error_msg = self._extract_error_message(stderr)
            raise FFmpegError(
                f"FFmpeg failed with code {self._process.returncode}: {error_msg}",
                command=self.command,
                stderr=stderr,
            )

        return stdout, stderr

    def _extract_error_message(self, stderr: str) -> str:
        """
        Extract meaningful error message from stderr.

        Args:
            stderr: Complete stderr output

        Returns:
            Extracted error message or the last stderr lines
        """
        lines = stderr.split("\n")

        for pattern in self.ERROR_PATTERNS:
            match = re.search(pattern, stderr, re.IGNORECASE)
            if match:
                for i, line in enumerate(lines):
                    if match.group() in line:
                        return " | ".join(lines[i : i + 3])

        non_empty = [line for line in lines if line.strip()]
        return " | ".join(non_empty[-3:]) if non_empty else "Unknown error"

    async def terminate(self) -> None:
        """
        Terminate the process gracefully.

        Sends SIGTERM, waits briefly, then sends SIGKILL if needed.
        """
        if not self._process or self._process.returncode is not None:
            return

        logger.info("Terminating FFmpeg process...")
        try:
            self._process.terminate()
        except ProcessLookupError:
            return

        try:
            await asyncio.wait_for(self._process.wait(), timeout=5.0)
        except asyncio.TimeoutError:
            logger.warning("Forcing process termination...")
            self._process.kill()
            await self._process.wait()

    @property
    def is_running(self) -> bool:
        """Check if process is currently running."""
        return self._process is not None and self._process.returncode is None

    @property
    def returncode(self) -> Optional[int]:
        """Get process return code."""
        return self._process.returncode if self._process else None

    @property
    def stderr_output(self) -> list[str]:
        """Get captured stderr lines."""
        return self._stderr_lines.copy()


class FFmpegCommandBuilder:
    """
    Builder for constructing FFmpeg commands.

    Provides a fluent interface for building FFmpeg commands.
    """

    def __init__(self, binary: str = "ffmpeg"):
        """
        Initialize command builder.

        Args:
            binary: FFmpeg executable
        """
        self._command = [binary, "-hide_banner"]
        self._input_options: list[str] = []
        self._output_options: list[str] = []
        self._inputs: list[str] = []
        self._outputs: list[str] = []

    def global_option(self, option: str, value: Optional[str] = None) -> "FFmpegCommandBuilder":
        """
        Add global FFmpeg option.

        Args:
            option: Option name (e.g., "-y", "-loglevel")
            value: Option value (if applicable)

        Returns:
            Self for chaining
        """
        self._command.append(option)
        if value is not None:
            self._command.append(value)
        return self

    def input(
        self,
        file: Path,
        options: Optional[dict[str, str]] = None,
    ) -> "FFmpegCommandBuilder":
        """
        Add input file with options.

        Args:
            file: Input file path
            options: Input options as dict

        Returns:
            Self for chaining
        """
        if options:
            for key, value in options.items():
                self._input_options.append(f"-{key}")
                self._input_options.append(value)

        self._inputs.append(str(file))
        return self

    def output(
        self,
        file: Path,
        options: Optional[dict[str, str]] = None,
    ) -> "FFmpegCommandBuilder":
        """
        Add output file with options.

        Args:
            file: Output file path
            options: Output options as dict; empty values become bare flags

        Returns:
            Self for chaining
        """
        if options:
            for key, value in options.items():
                self._output_options.append(f"-{key}")
                if value:
                    self._output_options.append(value)

        self._outputs.append(str(file))
        return self

    def build(self) -> list[str]:
        """
        Build final command list.

        Returns:
            Complete FFmpeg command as list
        """
        command = self._command.copy()

        for input_file in self._inputs:
            if self._input_options:
                command.extend(self._input_options)
            command.extend(["-i", input_file])

        if self._output_options:
            command.extend(self._output_options)

        command.extend(self._outputs)
        return command
