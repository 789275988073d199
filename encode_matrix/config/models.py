"""
Configuration models using Pydantic.

This module defines the configuration structure for encode matrix sweeps.
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ..models import AxisSpec, Resolution, VideoCodec
from ..utils import InvalidAxisError


class FFmpegConfig(BaseModel):
    """FFmpeg binaries and encoder tuning."""

    ffmpeg_path: str = Field(default="ffmpeg", description="Path to ffmpeg executable")
    ffprobe_path: str = Field(default="ffprobe", description="Path to ffprobe executable")
    preset: str = Field(
        default="medium",
        description="libx264 preset: ultrafast, superfast, veryfast, faster, fast, medium, slow, slower, veryslow",
    )

    @field_validator("preset")
    @classmethod
    def validate_preset(cls, v: str) -> str:
        """Validate encoding preset."""
        valid_presets = [
            "ultrafast",
            "superfast",
            "veryfast",
            "faster",
            "fast",
            "medium",
            "slow",
            "slower",
            "veryslow",
        ]
        if v.lower() not in valid_presets:
            raise ValueError(f"preset must be one of {valid_presets}")
        return v.lower()


class SweepPreset(BaseModel):
    """Named sweep: both axes, concurrency and per-cell settings."""

    keep_audio: bool = Field(default=True, description="Keep the audio track in every cell")
    codec: VideoCodec = Field(default=VideoCodec.H264, description="Codec family: h264, webm, av1")
    min_res: str = Field(default="480p", description="Smallest resolution of the sweep")
    max_res: str = Field(default="1080p", description="Largest resolution of the sweep")
    res_steps: int = Field(default=3, ge=1, le=8, description="Resolution samples")
    min_crf: int = Field(default=20, ge=0, le=63, description="Lowest CRF (best quality)")
    max_crf: int = Field(default=30, ge=0, le=63, description="Highest CRF (smallest output)")
    crf_steps: int = Field(default=3, ge=1, le=64, description="CRF samples")
    max_threads: int = Field(default=4, ge=1, le=32, description="Maximum concurrent encodes")
    frame_rate: int = Field(default=30, ge=1, le=240, description="Output frame rate")

    @field_validator("min_res", "max_res")
    @classmethod
    def validate_resolution(cls, v: str) -> str:
        """Validate resolution name."""
        try:
            return Resolution.parse(v).label
        except InvalidAxisError as e:
            raise ValueError(str(e)) from e

    @field_validator("codec", mode="before")
    @classmethod
    def validate_codec(cls, v: object) -> object:
        """Accept codec names case-insensitively."""
        if isinstance(v, str):
            return v.lower()
        return v

    @model_validator(mode="after")
    def validate_ranges(self) -> "SweepPreset":
        """Reject inverted ranges."""
        if Resolution.parse(self.min_res).index > Resolution.parse(self.max_res).index:
            raise ValueError(f"min_res {self.min_res} is larger than max_res {self.max_res}")
        if self.min_crf > self.max_crf:
            raise ValueError(f"min_crf {self.min_crf} is larger than max_crf {self.max_crf}")
        return self

    def resolution_axis(self) -> AxisSpec[Resolution]:
        """Get the resolution axis specification."""
        return AxisSpec(
            Resolution.parse(self.min_res), Resolution.parse(self.max_res), self.res_steps
        )

    def quality_axis(self) -> AxisSpec[int]:
        """Get the CRF axis specification."""
        return AxisSpec(self.min_crf, self.max_crf, self.crf_steps)

    @property
    def cell_count(self) -> int:
        """Get number of encodes in the sweep."""
        return self.res_steps * self.crf_steps


class OutputConfig(BaseModel):
    """Output configuration."""

    directory: Optional[Path] = Field(
        default=None,
        description="Directory for encodes (default: '<input>_matrix' next to the input)",
    )


class MatrixConfig(BaseModel):
    """Main encode matrix configuration."""

    ffmpeg: FFmpegConfig = Field(default_factory=FFmpegConfig)
    default_preset: str = Field(default="standard", description="Preset used by sweep")
    presets: dict[str, SweepPreset] = Field(default_factory=dict)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @classmethod
    def create_default(cls) -> "MatrixConfig":
        """Create default configuration with predefined presets."""
        config = cls()

        config.presets["high_quality"] = SweepPreset(
            min_res="720p", max_res="1080p", res_steps=2,
            min_crf=15, max_crf=25, crf_steps=3, max_threads=4,
        )
        config.presets["standard"] = SweepPreset(
            min_res="480p", max_res="1080p", res_steps=3,
            min_crf=20, max_crf=30, crf_steps=3, max_threads=4,
        )
        config.presets["low_quality"] = SweepPreset(
            min_res="360p", max_res="720p", res_steps=2,
            min_crf=25, max_crf=35, crf_steps=3, max_threads=4,
        )
        config.presets["webm_high"] = SweepPreset(
            codec=VideoCodec.WEBM, min_res="720p", max_res="1080p", res_steps=2,
            min_crf=15, max_crf=25, crf_steps=3, max_threads=4,
        )
        config.presets["av1"] = SweepPreset(
            codec=VideoCodec.AV1, min_res="720p", max_res="1080p", res_steps=2,
            min_crf=20, max_crf=30, crf_steps=3, max_threads=2,
        )
        config.presets["full_range"] = SweepPreset(
            min_res="240p", max_res="2160p", res_steps=5,
            min_crf=15, max_crf=35, crf_steps=5, max_threads=8,
        )
        config.presets["quick_test"] = SweepPreset(
            min_res="480p", max_res="720p", res_steps=2,
            min_crf=20, max_crf=25, crf_steps=2, max_threads=2,
        )

        return config

    def get_preset(self, name: str) -> Optional[SweepPreset]:
        """Get sweep preset by name."""
        return self.presets.get(name)

    def add_preset(self, name: str, preset: SweepPreset) -> None:
        """Add or update a sweep preset."""
        self.presets[name] = preset

    def remove_preset(self, name: str) -> bool:
        """Remove a sweep preset."""
        if name in self.presets:
            del self.presets[name]
            return True
        return False
