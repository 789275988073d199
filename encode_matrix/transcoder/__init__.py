"""
Encoder contracts and the FFmpeg encoder.
"""

from .base import Encoder, Prober
from .encoder import CODEC_OPTIONS, FFmpegEncoder

__all__ = [
    "CODEC_OPTIONS",
    "Encoder",
    "FFmpegEncoder",
    "Prober",
]
