"""
Data models for source media information.

This module contains dataclasses describing the probed source video. A
SourceInfo is produced once before a batch starts and is read-only afterwards.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ..utils.helpers import split_file_name


@dataclass(frozen=True)
class AudioStream:
    """Information about an audio stream."""

    codec: str
    sample_rate: int
    channels: int


@dataclass(frozen=True)
class SourceInfo:
    """Immutable description of the input media."""

    path: Path
    width: int
    height: int
    frame_rate: float
    duration: float
    size: int
    audio_streams: tuple[AudioStream, ...] = field(default_factory=tuple)
    pix_fmt: Optional[str] = None

    @property
    def has_audio(self) -> bool:
        """Check if the source has at least one audio track."""
        return len(self.audio_streams) > 0

    @property
    def audio_track_count(self) -> int:
        """Get number of audio tracks."""
        return len(self.audio_streams)

    @property
    def resolution(self) -> str:
        """Get resolution as string (e.g., '1920x1080')."""
        return f"{self.width}x{self.height}"

    @property
    def base_name(self) -> str:
        """Get file name without extension."""
        return split_file_name(self.path)[0]

    @property
    def extension(self) -> str:
        """Get file extension without the dot."""
        return split_file_name(self.path)[1]
