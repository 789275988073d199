"""Configuration management for encode matrix."""

from encode_matrix.config.manager import (
    ConfigManager,
    get_config,
    get_config_manager,
)
from encode_matrix.config.models import (
    FFmpegConfig,
    MatrixConfig,
    OutputConfig,
    SweepPreset,
)

__all__ = [
    # Manager
    "ConfigManager",
    "get_config",
    "get_config_manager",
    # Models
    "FFmpegConfig",
    "MatrixConfig",
    "OutputConfig",
    "SweepPreset",
]
