"""
Tests for media inspector module.
"""

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from encode_matrix.inspector import MediaInspector
from encode_matrix.models import AudioStream, SourceInfo
from encode_matrix.transcoder import Prober
from encode_matrix.utils import ProbeError


@pytest.fixture
def sample_ffprobe_output():
    """Sample ffprobe JSON output for testing."""
    return {
        "format": {
            "filename": "/path/to/video.mp4",
            "format_name": "mov,mp4,m4a,3gp,3g2,mj2",
            "duration": "120.5",
            "size": "10485760",
        },
        "streams": [
            {
                "index": 0,
                "codec_type": "video",
                "codec_name": "h264",
                "width": 1920,
                "height": 1080,
                "avg_frame_rate": "30000/1001",
                "r_frame_rate": "30/1",
                "pix_fmt": "yuv420p",
                "duration": "120.5",
            },
            {
                "index": 1,
                "codec_type": "audio",
                "codec_name": "aac",
                "sample_rate": "48000",
                "channels": 2,
            },
            {
                "index": 2,
                "codec_type": "audio",
                "codec_name": "ac3",
                "sample_rate": "48000",
                "channels": 6,
            },
            {
                "index": 3,
                "codec_type": "subtitle",
                "codec_name": "subrip",
            },
        ],
    }


@pytest.fixture
def inspector():
    """Create MediaInspector instance."""
    return MediaInspector()


@pytest.fixture
def video_file(tmp_path):
    """Small placeholder media file."""
    path = tmp_path / "video.mp4"
    path.write_bytes(b"\x00" * 2048)
    return path


class TestMediaInspector:
    """Test MediaInspector class."""

    def test_satisfies_protocol(self, inspector):
        """Test the inspector matches the Prober protocol."""
        assert isinstance(inspector, Prober)

    @pytest.mark.asyncio
    async def test_inspect_nonexistent_file(self, inspector):
        """Test inspection of non-existent file."""
        with pytest.raises(ProbeError, match="probe failed: file not found"):
            await inspector.inspect(Path("/nonexistent/video.mp4"))

    @pytest.mark.asyncio
    async def test_inspect_directory(self, inspector, tmp_path):
        """Test inspection of a directory instead of a file."""
        with pytest.raises(ProbeError, match="probe failed: not a file"):
            await inspector.inspect(tmp_path)

    @pytest.mark.asyncio
    async def test_inspect_success(self, inspector, sample_ffprobe_output, video_file):
        """Test successful media inspection."""
        with patch.object(
            inspector, "_run_ffprobe", AsyncMock(return_value=sample_ffprobe_output)
        ):
            source = await inspector.inspect(video_file)

        assert isinstance(source, SourceInfo)
        assert source.path == video_file
        assert source.width == 1920
        assert source.height == 1080
        assert source.frame_rate == pytest.approx(29.97, abs=0.01)
        assert source.duration == 120.5
        assert source.size == 10485760
        assert source.pix_fmt == "yuv420p"
        assert source.audio_streams == (
            AudioStream("aac", 48000, 2),
            AudioStream("ac3", 48000, 6),
        )
        assert source.has_audio

    @pytest.mark.asyncio
    async def test_run_ffprobe_success(self, inspector, sample_ffprobe_output):
        """Test successful ffprobe execution."""
        mock_process = AsyncMock()
        mock_process.returncode = 0
        mock_process.communicate = AsyncMock(
            return_value=(json.dumps(sample_ffprobe_output).encode(), b"")
        )

        with patch("asyncio.create_subprocess_exec", return_value=mock_process) as create:
            result = await inspector._run_ffprobe(Path("/path/to/video.mp4"))

        assert result == sample_ffprobe_output
        assert create.call_args.args[0] == "ffprobe"
        assert create.call_args.args[-1] == "/path/to/video.mp4"

    @pytest.mark.asyncio
    async def test_run_ffprobe_failure(self, inspector):
        """Test ffprobe execution failure."""
        mock_process = AsyncMock()
        mock_process.returncode = 1
        mock_process.communicate = AsyncMock(return_value=(b"", b"Error: Invalid file"))

        with patch("asyncio.create_subprocess_exec", return_value=mock_process):
            with pytest.raises(
                ProbeError, match="probe failed: ffprobe exited with code 1: Error: Invalid file"
            ):
                await inspector._run_ffprobe(Path("/path/to/video.mp4"))

    @pytest.mark.asyncio
    async def test_run_ffprobe_json_error(self, inspector):
        """Test ffprobe JSON parsing error."""
        mock_process = AsyncMock()
        mock_process.returncode = 0
        mock_process.communicate = AsyncMock(return_value=(b"not json", b""))

        with patch("asyncio.create_subprocess_exec", return_value=mock_process):
            with pytest.raises(ProbeError, match="invalid ffprobe output"):
                await inspector._run_ffprobe(Path("/path/to/video.mp4"))

    @pytest.mark.asyncio
    async def test_run_ffprobe_missing_binary(self):
        """Test a missing ffprobe binary."""
        inspector = MediaInspector(ffprobe_path="/missing/ffprobe")

        with patch("asyncio.create_subprocess_exec", side_effect=FileNotFoundError("nope")):
            with pytest.raises(ProbeError, match="probe failed: nope"):
                await inspector._run_ffprobe(Path("/path/to/video.mp4"))


class TestParseProbeData:
    """Test MediaInspector.parse_probe_data."""

    def test_no_video_stream(self, inspector, video_file):
        """Test audio-only input is rejected."""
        data = {"streams": [{"codec_type": "audio", "codec_name": "aac"}], "format": {}}

        with pytest.raises(ProbeError, match="^no video stream found$"):
            inspector.parse_probe_data(video_file, data)

    def test_invalid_dimensions(self, inspector, video_file):
        """Test zero-sized video is rejected."""
        data = {"streams": [{"codec_type": "video", "width": 0, "height": 0}]}

        with pytest.raises(ProbeError, match="invalid video dimensions 0x0"):
            inspector.parse_probe_data(video_file, data)

    def test_fallbacks(self, inspector, video_file):
        """Test duration, size and frame rate fallbacks."""
        data = {
            "streams": [
                {
                    "codec_type": "video",
                    "width": 1280,
                    "height": 720,
                    "avg_frame_rate": "0/0",
                    "r_frame_rate": "25/1",
                    "duration": "9.5",
                }
            ],
            "format": {},
        }

        source = inspector.parse_probe_data(video_file, data)

        assert source.frame_rate == 25.0
        assert source.duration == 9.5
        assert source.size == 2048
        assert source.pix_fmt is None
        assert not source.has_audio

    def test_first_video_stream_used(self, inspector, video_file):
        """Test only the first video stream is considered."""
        data = {
            "streams": [
                {"codec_type": "video", "width": 640, "height": 360, "r_frame_rate": "24/1"},
                {"codec_type": "video", "width": 1920, "height": 1080, "r_frame_rate": "60/1"},
            ],
            "format": {"duration": "1", "size": "10"},
        }

        source = inspector.parse_probe_data(video_file, data)

        assert source.resolution == "640x360"
        assert source.frame_rate == 24.0

    def test_unreadable_audio_metadata_kept(self, inspector, video_file):
        """Test an audio track with unreadable metadata still counts as audio."""
        data = {
            "streams": [
                {"codec_type": "video", "width": 640, "height": 360, "r_frame_rate": "24/1"},
                {"codec_type": "audio", "codec_name": "aac", "sample_rate": "N/A", "channels": "?"},
            ],
            "format": {"duration": "1", "size": "10"},
        }

        source = inspector.parse_probe_data(video_file, data)

        assert source.audio_streams == (AudioStream("aac", 0, 0),)
        assert source.has_audio
        assert source.audio_track_count == 1
