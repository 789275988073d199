"""
Tests for async subprocess wrapper.
"""

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from encode_matrix.executor import AsyncFFmpegProcess, FFmpegCommandBuilder
from encode_matrix.utils import FFmpegError


@pytest.fixture
def sample_command():
    """Sample FFmpeg command for testing."""
    return [
        "ffmpeg",
        "-i",
        "input.mp4",
        "-c:v",
        "libx264",
        "-crf",
        "23",
        "output.mp4",
    ]


class TestAsyncFFmpegProcess:
    """Test AsyncFFmpegProcess class."""

    def test_initialization(self, sample_command):
        """Test process initialization."""
        process = AsyncFFmpegProcess(sample_command)
        assert process.command == sample_command
        assert not process.is_running
        assert process.returncode is None
        assert process.stderr_output == []

    @pytest.mark.asyncio
    async def test_run_success(self, sample_command):
        """Test successful command execution."""
        mock_process = AsyncMock()
        mock_process.returncode = 0
        mock_process.communicate = AsyncMock(
            return_value=(b"output", b"frame=  300 fps= 30\nvideo:3000kB audio:200kB\n")
        )

        with patch("asyncio.create_subprocess_exec", return_value=mock_process) as create:
            process = AsyncFFmpegProcess(sample_command)
            stdout, stderr = await process.run()

        create.assert_called_once()
        assert create.call_args.args == tuple(sample_command)
        assert stdout == "output"
        assert "video:3000kB" in stderr
        assert process.returncode == 0
        assert process.stderr_output == ["frame=  300 fps= 30", "video:3000kB audio:200kB"]

    @pytest.mark.asyncio
    async def test_run_failure(self, sample_command):
        """Test command execution failure."""
        mock_process = AsyncMock()
        mock_process.returncode = 1
        mock_process.communicate = AsyncMock(
            return_value=(b"", b"input.mp4: Invalid data found when processing input")
        )

        with patch("asyncio.create_subprocess_exec", return_value=mock_process):
            process = AsyncFFmpegProcess(sample_command)

            with pytest.raises(FFmpegError, match="FFmpeg failed with code 1") as exc_info:
                await process.run()

        assert "Invalid data found" in str(exc_info.value)
        assert exc_info.value.command == sample_command
        assert "Invalid data found" in exc_info.value.stderr

    @pytest.mark.asyncio
    async def test_run_missing_binary(self, sample_command):
        """Test a binary that cannot be started."""
        with patch(
            "asyncio.create_subprocess_exec",
            side_effect=FileNotFoundError("No such file or directory: 'ffmpeg'"),
        ):
            process = AsyncFFmpegProcess(sample_command)

            with pytest.raises(FFmpegError, match="Failed to start ffmpeg"):
                await process.run()

    @pytest.mark.asyncio
    async def test_cancel_terminates_process(self, sample_command):
        """Test cancellation kills the child before propagating."""
        mock_process = MagicMock()
        mock_process.returncode = None
        mock_process.communicate = AsyncMock(side_effect=asyncio.CancelledError())
        mock_process.terminate = MagicMock()
        mock_process.wait = AsyncMock()

        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=mock_process)):
            process = AsyncFFmpegProcess(sample_command)

            with pytest.raises(asyncio.CancelledError):
                await process.run()

        mock_process.terminate.assert_called_once()

    @pytest.mark.asyncio
    async def test_terminate(self, sample_command):
        """Test process termination."""
        mock_process = AsyncMock()
        mock_process.returncode = None
        mock_process.terminate = MagicMock()
        mock_process.wait = AsyncMock()

        process = AsyncFFmpegProcess(sample_command)
        process._process = mock_process

        await process.terminate()

        mock_process.terminate.assert_called_once()
        mock_process.wait.assert_called_once()

    @pytest.mark.asyncio
    async def test_terminate_force_kill(self, sample_command):
        """Test forced process termination."""
        mock_process = AsyncMock()
        mock_process.returncode = None
        mock_process.terminate = MagicMock()
        mock_process.kill = MagicMock()

        async def wait_side_effect():
            if mock_process.wait.call_count == 1:
                raise asyncio.TimeoutError()
            return None

        mock_process.wait = AsyncMock(side_effect=wait_side_effect)

        process = AsyncFFmpegProcess(sample_command)
        process._process = mock_process

        await process.terminate()

        mock_process.terminate.assert_called_once()
        mock_process.kill.assert_called_once()

    @pytest.mark.asyncio
    async def test_terminate_finished_process(self, sample_command):
        """Test terminate is a no-op once the process exited."""
        mock_process = MagicMock()
        mock_process.returncode = 0

        process = AsyncFFmpegProcess(sample_command)
        process._process = mock_process

        await process.terminate()

        mock_process.terminate.assert_not_called()

    def test_extract_error_message(self, sample_command):
        """Test error lines are found by pattern."""
        process = AsyncFFmpegProcess(sample_command)
        stderr = (
            "ffmpeg version 6.0\n"
            "[libx264 @ 0x1] Error while opening encoder for output stream #0:0\n"
            "Conversion failed!"
        )

        message = process._extract_error_message(stderr)

        assert message.startswith("[libx264 @ 0x1] Error while opening encoder")
        assert "Conversion failed!" in message

    def test_extract_error_message_fallback(self, sample_command):
        """Test last lines are used when no pattern matches."""
        process = AsyncFFmpegProcess(sample_command)

        assert process._extract_error_message("a\nb\nc\nd\n") == "b | c | d"
        assert process._extract_error_message("") == "Unknown error"


class TestFFmpegCommandBuilder:
    """Test FFmpegCommandBuilder class."""

    def test_basic_command(self):
        """Test building a basic command."""
        command = (
            FFmpegCommandBuilder()
            .global_option("-y")
            .input(Path("in.mp4"))
            .output(Path("out.mp4"), {"c:v": "libx264", "crf": "23"})
            .build()
        )

        assert command == [
            "ffmpeg",
            "-hide_banner",
            "-y",
            "-i",
            "in.mp4",
            "-c:v",
            "libx264",
            "-crf",
            "23",
            "out.mp4",
        ]

    def test_bare_flag(self):
        """Test empty option values become bare flags."""
        command = FFmpegCommandBuilder().input(Path("in.mp4")).output(
            Path("out.mp4"), {"an": ""}
        ).build()

        assert command[-2:] == ["-an", "out.mp4"]

    def test_input_options_and_binary(self):
        """Test custom binary and input options."""
        command = (
            FFmpegCommandBuilder("/opt/ffmpeg")
            .global_option("-loglevel", "error")
            .input(Path("in.mp4"), {"ss": "5"})
            .output(Path("out.mp4"))
            .build()
        )

        assert command == [
            "/opt/ffmpeg",
            "-hide_banner",
            "-loglevel",
            "error",
            "-ss",
            "5",
            "-i",
            "in.mp4",
            "out.mp4",
        ]
