"""
Data models for the parameter grid.

This module contains the resolution enum, axis specifications, per-cell encode
configurations and grid tasks.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar, Union

from ..utils.errors import InvalidAxisError

V = TypeVar("V")

_DIMENSIONS_PATTERN = re.compile(r"^(\d+)\s*[xX]\s*(\d+)$")


class Resolution(Enum):
    """Standard 16:9 output resolutions, ordered from smallest to largest."""

    R240P = (426, 240, "240p (SD)")
    R360P = (640, 360, "360p (SD)")
    R480P = (854, 480, "480p (SD)")
    R720P = (1280, 720, "720p (HD)")
    R1080P = (1920, 1080, "1080p (FHD)")
    R1440P = (2560, 1440, "1440p (QHD)")
    R2160P = (3840, 2160, "2160p (4K)")
    R4320P = (7680, 4320, "4320p (8K)")

    def __init__(self, width: int, height: int, display_name: str):
        self.width = width
        self.height = height
        self.display_name = display_name

    @property
    def label(self) -> str:
        """Get short label (e.g., '720p')."""
        return f"{self.height}p"

    @property
    def file_name(self) -> str:
        """Get file name fragment (e.g., '1280x720')."""
        return f"{self.width}x{self.height}"

    @property
    def index(self) -> int:
        """Position in the canonical ordered list."""
        return Resolution.ordered().index(self)

    @classmethod
    def ordered(cls) -> list["Resolution"]:
        """Get the canonical ordered list of resolutions."""
        return list(cls)

    @classmethod
    def parse(cls, value: Union[str, "Resolution"]) -> "Resolution":
        """
        Parse a resolution from '720p', 'R720P' or '1280x720'.

        Args:
            value: Resolution name or member

        Returns:
            Matching Resolution

        Raises:
            InvalidAxisError: If value is not a supported resolution
        """
        if isinstance(value, Resolution):
            return value

        text = str(value).strip()
        upper = text.upper()

        if upper in cls.__members__:
            return cls[upper]

        for res in cls:
            if res.label.upper() == upper:
                return res

        match = _DIMENSIONS_PATTERN.match(text)
        if match:
            width, height = int(match.group(1)), int(match.group(2))
            for res in cls:
                if res.width == width and res.height == height:
                    return res

        valid = ", ".join(res.label for res in cls)
        raise InvalidAxisError(f"Unsupported resolution: {value} (expected one of {valid})")

    @classmethod
    def available_for(cls, width: int, height: int) -> list["Resolution"]:
        """
        List resolutions that fit within a source without upscaling.

        Args:
            width: Source width
            height: Source height

        Returns:
            Ordered list of resolutions no larger than the source
        """
        return [res for res in cls if res.width <= width and res.height <= height]

    def __str__(self) -> str:
        return self.display_name


class VideoCodec(str, Enum):
    """Codec family used for an encode."""

    H264 = "h264"
    WEBM = "webm"
    AV1 = "av1"


@dataclass(frozen=True)
class AxisSpec(Generic[V]):
    """Inclusive range and step count for one sweep axis."""

    minimum: V
    maximum: V
    steps: int


@dataclass(frozen=True)
class EncodeConfig:
    """Parameters for one matrix cell."""

    resolution: Resolution
    frame_rate: int = 30
    quality: int = 23
    keep_audio: bool = True
    codec: VideoCodec = VideoCodec.H264

    @property
    def file_suffix(self) -> str:
        """Get file name suffix encoding the parameters."""
        return (
            f"--res-{self.resolution.file_name}"
            f"--fps-{self.frame_rate}"
            f"--crf-{self.quality}"
        )

    def describe(self) -> str:
        """Get short human-readable description."""
        return f"{self.resolution.label} CRF {self.quality} @ {self.frame_rate}fps"


@dataclass(frozen=True)
class GridTask:
    """One grid cell: quality row, resolution column and its configuration."""

    row: int
    col: int
    config: EncodeConfig

    @property
    def cell(self) -> tuple[int, int]:
        """Get (row, col) coordinate."""
        return (self.row, self.col)

    @property
    def task_id(self) -> str:
        """Get stable task identifier."""
        return f"r{self.row}c{self.col}"


def default_config(resolution: Optional[Resolution] = None) -> EncodeConfig:
    """Get the base encode configuration (720p, 30 fps, CRF 23, keep audio)."""
    return EncodeConfig(resolution=resolution or Resolution.R720P)
