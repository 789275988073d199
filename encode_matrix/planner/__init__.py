"""Sweep axis generation and grid planning."""

from encode_matrix.planner.axis import (
    generate_quality_axis,
    generate_quality_levels,
    generate_resolution_axis,
    generate_resolutions,
)
from encode_matrix.planner.grid import build_grid, column_labels, repeated_values, row_labels

__all__ = [
    "build_grid",
    "column_labels",
    "generate_quality_axis",
    "generate_quality_levels",
    "generate_resolution_axis",
    "generate_resolutions",
    "repeated_values",
    "row_labels",
]
