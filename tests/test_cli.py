"""
Tests for the command-line interface.
"""

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
import yaml
from typer.testing import CliRunner

from encode_matrix import __version__
from encode_matrix.cli import app
from encode_matrix.config import ConfigManager
from encode_matrix.models import AudioStream, SourceInfo

runner = CliRunner()


class WritingEncoder:
    """Encoder that writes a small file instead of running FFmpeg."""

    def __init__(self, *args, **kwargs):
        self.calls = []

    async def encode(self, source, config, output_path: Path) -> None:
        self.calls.append(config)
        output_path.write_bytes(b"x" * config.quality)


# === Fixtures ===


@pytest.fixture
def config_file(tmp_path):
    """Default configuration written to disk."""
    return ConfigManager().init_default_config(tmp_path / "config.yaml")


@pytest.fixture
def input_file(tmp_path):
    """Placeholder input video."""
    path = tmp_path / "clip.mp4"
    path.write_bytes(b"\x00" * 64)
    return path


@pytest.fixture
def source(input_file):
    """Probed 720p source."""
    return SourceInfo(
        path=input_file,
        width=1280,
        height=720,
        frame_rate=30.0,
        duration=10.0,
        size=64,
        audio_streams=(AudioStream("aac", 48000, 2),),
    )


@pytest.fixture
def mock_inspector(source):
    """Patch the CLI inspector to return the fixture source."""
    with patch("encode_matrix.cli.main.MediaInspector") as inspector_cls:
        inspector_cls.return_value.inspect = AsyncMock(return_value=source)
        yield inspector_cls


class TestInfoCommands:
    """Test commands that only print information."""

    def test_version(self):
        """Test version output."""
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_resolutions(self):
        """Test resolution listing."""
        result = runner.invoke(app, ["resolutions"])
        assert result.exit_code == 0
        assert "1280x720" in result.output
        assert "4320p" in result.output

    def test_presets(self, config_file):
        """Test preset listing."""
        result = runner.invoke(app, ["presets", "--config", str(config_file)])
        assert result.exit_code == 0
        assert "quick_test" in result.output
        assert "webm" in result.output


class TestConfigCommand:
    """Test config command."""

    def test_init(self, tmp_path):
        """Test default configuration creation."""
        target = tmp_path / "new.yaml"

        result = runner.invoke(app, ["config", "init", "--output", str(target)])

        assert result.exit_code == 0
        assert "standard" in yaml.safe_load(target.read_text())["presets"]

    def test_init_existing(self, config_file):
        """Test existing files are kept without --force."""
        result = runner.invoke(app, ["config", "init", "--output", str(config_file)])
        assert result.exit_code == 1
        assert "already exists" in result.output

        result = runner.invoke(app, ["config", "init", "--output", str(config_file), "--force"])
        assert result.exit_code == 0

    def test_show(self, config_file):
        """Test configuration display."""
        result = runner.invoke(app, ["config", "show", "--config", str(config_file)])
        assert result.exit_code == 0
        assert "default: standard" in result.output

    def test_unknown_action(self):
        """Test unknown actions fail."""
        result = runner.invoke(app, ["config", "explode"])
        assert result.exit_code == 1
        assert "Unknown action" in result.output


class TestProbeCommand:
    """Test probe command."""

    def test_missing_file(self, tmp_path):
        """Test a missing input is rejected by argument checks."""
        result = runner.invoke(app, ["probe", str(tmp_path / "missing.mp4")])
        assert result.exit_code != 0

    def test_probe(self, input_file, config_file, mock_inspector):
        """Test source display."""
        result = runner.invoke(app, ["probe", str(input_file), "--config", str(config_file)])

        assert result.exit_code == 0
        assert "1280x720" in result.output
        mock_inspector.assert_called_once_with("ffprobe")


class TestSweepCommand:
    """Test sweep command."""

    def _invoke(self, input_file, config_file, output_dir, *extra):
        return runner.invoke(
            app,
            [
                "sweep",
                str(input_file),
                "--config",
                str(config_file),
                "--output",
                str(output_dir),
                "--min-crf",
                "20",
                "--max-crf",
                "30",
                "--crf-steps",
                "2",
                "-j",
                "2",
                "--yes",
                *extra,
            ],
        )

    def test_sweep_success(self, tmp_path, input_file, config_file, mock_inspector):
        """Test a clean sweep writes every cell and exits 0."""
        output_dir = tmp_path / "out"
        encoder = WritingEncoder()

        with patch("encode_matrix.cli.main.FFmpegEncoder", return_value=encoder):
            result = self._invoke(
                input_file,
                config_file,
                output_dir,
                "--min-res",
                "480p",
                "--max-res",
                "720p",
                "--res-steps",
                "2",
            )

        assert result.exit_code == 0, result.output
        assert len(encoder.calls) == 4
        assert sorted(p.name for p in output_dir.iterdir()) == [
            "clip--res-1280x720--fps-30--crf-20.mp4",
            "clip--res-1280x720--fps-30--crf-30.mp4",
            "clip--res-854x480--fps-30--crf-20.mp4",
            "clip--res-854x480--fps-30--crf-30.mp4",
        ]
        assert "Batch Complete" in result.output

    def test_sweep_with_upscaled_cells(self, tmp_path, input_file, config_file, mock_inspector):
        """Test upscaled cells fail and the exit code reports it."""
        output_dir = tmp_path / "out"
        encoder = WritingEncoder()

        with patch("encode_matrix.cli.main.FFmpegEncoder", return_value=encoder):
            result = self._invoke(
                input_file,
                config_file,
                output_dir,
                "--min-res",
                "720p",
                "--max-res",
                "1080p",
                "--res-steps",
                "2",
            )

        assert result.exit_code == 1
        assert len(encoder.calls) == 2
        assert "would upscale" in result.output
        assert "Batch Finished With Failures" in result.output

    def test_sweep_invalid_override(self, tmp_path, input_file, config_file, mock_inspector):
        """Test invalid option values are reported as errors."""
        result = self._invoke(
            input_file, config_file, tmp_path / "out", "--min-res", "1080p", "--max-res", "480p"
        )

        assert result.exit_code == 1
        assert "Invalid sweep settings" in result.output
        mock_inspector.return_value.inspect.assert_not_called()

    def test_sweep_no_audio_source(self, tmp_path, input_file, config_file):
        """Test --no-audio lets a silent source encode."""
        silent = SourceInfo(
            path=input_file, width=1280, height=720, frame_rate=30.0, duration=1.0, size=64
        )
        encoder = WritingEncoder()

        with patch("encode_matrix.cli.main.MediaInspector") as inspector_cls, patch(
            "encode_matrix.cli.main.FFmpegEncoder", return_value=encoder
        ):
            inspector_cls.return_value.inspect = AsyncMock(return_value=silent)
            result = self._invoke(
                input_file,
                config_file,
                tmp_path / "out",
                "--min-res",
                "720p",
                "--max-res",
                "720p",
                "--res-steps",
                "1",
                "--no-audio",
            )

        assert result.exit_code == 0, result.output
        assert all(config.keep_audio is False for config in encoder.calls)

    def test_sweep_repeated_resolution_warns(
        self, tmp_path, input_file, config_file, mock_inspector
    ):
        """Test repeated axis values are flagged in the plan."""
        output_dir = tmp_path / "out"
        encoder = WritingEncoder()

        with patch("encode_matrix.cli.main.FFmpegEncoder", return_value=encoder):
            result = self._invoke(
                input_file,
                config_file,
                output_dir,
                "--min-res",
                "720p",
                "--max-res",
                "720p",
                "--res-steps",
                "2",
            )

        assert result.exit_code == 0, result.output
        assert "720p repeat on the axis" in result.output
        assert len(encoder.calls) == 4
        assert len(list(output_dir.iterdir())) == 2
