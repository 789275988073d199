"""
Source inspection using FFprobe.

This module extracts the dimensions, frame rate, duration, size and audio
tracks of the input video into an immutable SourceInfo.
"""

import asyncio
import json
from pathlib import Path

from ..models import AudioStream, SourceInfo
from ..utils import ProbeError, get_logger, parse_frame_rate

logger = get_logger(__name__)


class MediaInspector:
    """
    Inspects media files using FFprobe.

    Only the first video stream is considered; every audio stream is kept
    so that audio-track requirements can be checked before encoding.
    """

    def __init__(self, ffprobe_path: str = "ffprobe"):
        """
        Initialize media inspector.

        Args:
            ffprobe_path: Path to ffprobe executable (default: "ffprobe")
        """
        self._ffprobe_path = ffprobe_path

    async def inspect(self, input_file: Path) -> SourceInfo:
        """
        Inspect media file and extract source information.

        Args:
            input_file: Path to media file to inspect

        Returns:
            SourceInfo for the file

        Raises:
            ProbeError: If the file is missing, FFprobe fails or there is no video stream
        """
        if not input_file.exists():
            raise ProbeError(f"probe failed: file not found: {input_file}")

        if not input_file.is_file():
            raise ProbeError(f"probe failed: not a file: {input_file}")

        logger.info(f"Inspecting media file: {input_file.name}")

        probe_data = await self._run_ffprobe(input_file)
        source = self.parse_probe_data(input_file, probe_data)

        logger.info(f"Successfully inspected: {input_file.name}")
        logger.debug(
            f"{source.resolution} @ {source.frame_rate:.2f}fps, "
            f"{source.audio_track_count} audio stream(s)"
        )
        return source

    async def _run_ffprobe(self, input_file: Path) -> dict:
        """
        Run ffprobe and return parsed JSON output.

        Args:
            input_file: Path to media file

        Returns:
            Dictionary containing ffprobe output

        Raises:
            ProbeError: If ffprobe cannot run, fails or prints invalid JSON
        """
        try:
            process = await asyncio.create_subprocess_exec(
                self._ffprobe_path,
                "-v",
                "quiet",
                "-print_format",
                "json",
                "-show_format",
                "-show_streams",
                str(input_file),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ProbeError(f"probe failed: {e}") from e

        stdout, stderr = await process.communicate()

        if process.returncode != 0:
            error_msg = stderr.decode(errors="replace").strip() if stderr else ""
            raise ProbeError(
                f"probe failed: ffprobe exited with code {process.returncode}"
                + (f": {error_msg}" if error_msg else "")
            )

        try:
            return json.loads(stdout.decode(errors="replace"))
        except json.JSONDecodeError as e:
            raise ProbeError(f"probe failed: invalid ffprobe output: {e}") from e

    def parse_probe_data(self, input_file: Path, probe_data: dict) -> SourceInfo:
        """
        Build a SourceInfo from ffprobe JSON output.

        Args:
            input_file: Inspected file
            probe_data: FFprobe JSON output

        Returns:
            SourceInfo

        Raises:
            ProbeError: If there is no usable video stream
        """
        streams = probe_data.get("streams", [])
        video = next(
            (s for s in streams if s.get("codec_type", "").lower() == "video"),
            None,
        )
        if video is None:
            raise ProbeError("no video stream found")

        width = int(video.get("width", 0) or 0)
        height = int(video.get("height", 0) or 0)
        if width <= 0 or height <= 0:
            raise ProbeError(f"probe failed: invalid video dimensions {width}x{height}")

        audio_streams = tuple(
            self._parse_audio_stream(s)
            for s in streams
            if s.get("codec_type", "").lower() == "audio"
        )

        format_data = probe_data.get("format", {})
        duration = self._to_float(format_data.get("duration")) or self._to_float(
            video.get("duration")
        )

        size = int(format_data.get("size", 0) or 0)
        if size == 0:
            size = input_file.stat().st_size

        return SourceInfo(
            path=input_file,
            width=width,
            height=height,
            frame_rate=self._parse_fps(video),
            duration=duration,
            size=size,
            audio_streams=audio_streams,
            pix_fmt=video.get("pix_fmt") or None,
        )

    def _parse_fps(self, stream: dict) -> float:
        """Get frame rate, preferring avg_frame_rate over r_frame_rate."""
        for key in ("avg_frame_rate", "r_frame_rate"):
            fps = parse_frame_rate(stream.get(key, "") or "")
            if fps > 0:
                return fps
        return 0.0

    def _parse_audio_stream(self, stream: dict) -> AudioStream:
        """
        Parse audio stream information.

        Unreadable sample rate or channel count becomes 0; the track still
        counts as present.

        Args:
            stream: Stream data from ffprobe

        Returns:
            AudioStream object
        """
        return AudioStream(
            codec=stream.get("codec_name") or "unknown",
            sample_rate=self._to_int(stream.get("sample_rate")),
            channels=self._to_int(stream.get("channels")),
        )

    @staticmethod
    def _to_float(value: object) -> float:
        try:
            return float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return 0.0

    @staticmethod
    def _to_int(value: object) -> int:
        try:
            return int(float(value))  # type: ignore[arg-type]
        except (TypeError, ValueError, OverflowError):
            return 0
