"""
Encode configuration validation against the probed source.

A configuration is rejected when it would upscale the source (resolution or
frame rate) or asks to keep audio from a source that has none.
"""

from typing import Optional

from ..models import EncodeConfig, SourceInfo
from ..utils import ValidationError, get_logger

logger = get_logger(__name__)


def check_encode_config(source: SourceInfo, config: EncodeConfig) -> Optional[str]:
    """
    Check an encode configuration against the source.

    Args:
        source: Probed source information
        config: Configuration for one cell

    Returns:
        Failure message, or None if the configuration is achievable
    """
    res = config.resolution
    if res.width > source.width or res.height > source.height:
        return (
            f"Resolution upscaling detected: {res.display_name} > "
            f"{source.width}x{source.height}"
        )

    if config.frame_rate > source.frame_rate:
        return f"FPS upscaling detected: {config.frame_rate} > {source.frame_rate:.2f}"

    if config.keep_audio and not source.has_audio:
        return "Audio required but not present in source video"

    return None


def validate_encode_config(source: SourceInfo, config: EncodeConfig) -> None:
    """
    Validate an encode configuration against the source.

    Args:
        source: Probed source information
        config: Configuration for one cell

    Raises:
        ValidationError: If the configuration cannot be honoured
    """
    message = check_encode_config(source, config)
    if message is not None:
        logger.debug(f"Rejected {config.describe()}: {message}")
        raise ValidationError(message)
