"""
Helper functions for encode matrix.

This module contains utility functions used throughout the application.
"""

from fractions import Fraction
from pathlib import Path


def format_size(bytes: int) -> str:
    """
    Format file size in human-readable format.

    Args:
        bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 GB")
    """
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if bytes < 1024.0:
            return f"{bytes:.1f} {unit}"
        bytes /= 1024.0  # type: ignore
    return f"{bytes:.1f} PB"


def format_duration(seconds: float) -> str:
    """
    Format duration as HH:MM:SS.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted duration string (e.g., "01:30:45")
    """
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def parse_frame_rate(value: str) -> float:
    """
    Parse an ffprobe frame rate ("30000/1001", "25/1" or "29.97").

    Args:
        value: Frame rate string

    Returns:
        Frame rate as float, 0.0 if unparseable
    """
    if not value:
        return 0.0
    try:
        if "/" in value:
            num, den = value.split("/", 1)
            if float(den) == 0:
                return 0.0
            return float(num) / float(den)
        return float(value)
    except ValueError:
        return 0.0


def round_half_up(numerator: int, denominator: int) -> int:
    """
    Round numerator/denominator to the nearest integer, ties going up.

    Exact rational arithmetic, so results never depend on float error.

    Args:
        numerator: Dividend
        denominator: Positive divisor

    Returns:
        floor(numerator / denominator + 1/2)
    """
    return int((Fraction(numerator, denominator) + Fraction(1, 2)) // 1)


def split_file_name(path: Path) -> tuple[str, str]:
    """
    Split a file name into base name and extension (without the dot).

    Args:
        path: File path

    Returns:
        Tuple of (name, extension); extension is "" when there is none
    """
    name = path.name
    if "." not in name:
        return name, ""
    base, ext = name.rsplit(".", 1)
    return base, ext


def build_output_path(output_dir: Path, source_path: Path, suffix: str) -> Path:
    """
    Build the output path for one encode.

    Layout: <output_dir>/<sourceBaseName><suffix>.<sourceExtension>

    Args:
        output_dir: Directory receiving the encodes
        source_path: Source media file
        suffix: Parameter suffix (e.g., "--res-1280x720--fps-30--crf-23")

    Returns:
        Output file path
    """
    base, ext = split_file_name(source_path)
    file_name = f"{base}{suffix}.{ext}" if ext else f"{base}{suffix}"
    return output_dir / file_name


def ensure_directory(path: Path) -> Path:
    """
    Ensure directory exists, create if it doesn't.

    Args:
        path: Directory path

    Returns:
        Resolved directory path
    """
    path.mkdir(parents=True, exist_ok=True)
    return path.resolve()
