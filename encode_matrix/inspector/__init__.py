"""Source media inspection."""

from encode_matrix.inspector.analyzer import MediaInspector

__all__ = ["MediaInspector"]
