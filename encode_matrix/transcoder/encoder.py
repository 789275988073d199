"""
FFmpeg-backed encoder for matrix cells.

Each call performs one complete encode of the source at the cell's
resolution, frame rate and CRF, writing a single output file.
"""

from pathlib import Path
from typing import Optional

from ..executor.subprocess import AsyncFFmpegProcess, FFmpegCommandBuilder
from ..models import EncodeConfig, SourceInfo, VideoCodec
from ..utils import EncodeError, FFmpegError, ensure_directory, get_logger, log_performance
from ..validator import validate_encode_config

logger = get_logger(__name__)

# (video codec options, audio codec) per codec family
CODEC_OPTIONS: dict[VideoCodec, tuple[dict[str, str], str]] = {
    VideoCodec.H264: ({"c:v": "libx264"}, "aac"),
    VideoCodec.WEBM: ({"c:v": "libvpx-vp9", "b:v": "0"}, "libopus"),
    VideoCodec.AV1: ({"c:v": "libaom-av1", "b:v": "0"}, "aac"),
}


class FFmpegEncoder:
    """
    Encodes one source/config pair with FFmpeg.

    The configuration is re-validated before any work is started, so an
    upscaling or impossible audio request is never executed even if the
    caller skipped validation.
    """

    def __init__(self, ffmpeg_path: str = "ffmpeg", preset: Optional[str] = "medium"):
        """
        Initialize encoder.

        Args:
            ffmpeg_path: Path to ffmpeg executable
            preset: libx264 speed preset (ignored by other codecs)
        """
        self.ffmpeg_path = ffmpeg_path
        self.preset = preset

    @log_performance()
    async def encode(self, source: SourceInfo, config: EncodeConfig, output_path: Path) -> None:
        """
        Encode the source with the given configuration.

        Args:
            source: Probed source information
            config: Cell configuration
            output_path: File to write

        Raises:
            ValidationError: If the configuration would upscale or needs missing audio
            EncodeError: If FFmpeg fails
        """
        validate_encode_config(source, config)

        ensure_directory(output_path.parent)
        command = self.build_command(source, config, output_path)

        logger.info(f"Starting encoding: {output_path.name}")
        try:
            await AsyncFFmpegProcess(command).run()
        except FFmpegError as e:
            raise EncodeError(f"Encoding failed: {e}") from e

        logger.info(f"Encoding completed: {output_path.name}")

    def build_command(
        self,
        source: SourceInfo,
        config: EncodeConfig,
        output_path: Path,
    ) -> list[str]:
        """
        Build the FFmpeg command for one cell.

        Args:
            source: Probed source information
            config: Cell configuration
            output_path: File to write

        Returns:
            FFmpeg command as list of arguments
        """
        video_options, audio_codec = CODEC_OPTIONS[config.codec]

        options: dict[str, str] = dict(video_options)
        if config.codec == VideoCodec.H264 and self.preset:
            options["preset"] = self.preset
        options["s"] = config.resolution.file_name
        options["r"] = str(config.frame_rate)
        options["crf"] = str(config.quality)

        if config.keep_audio and source.has_audio:
            options["c:a"] = audio_codec
        else:
            options["an"] = ""

        builder = FFmpegCommandBuilder(self.ffmpeg_path)
        builder.global_option("-y")
        builder.input(source.path)
        builder.output(output_path, options)

        command = builder.build()
        logger.debug(f"Built command: {' '.join(command)}")
        return command
