"""UI components and live matrix monitoring."""

from encode_matrix.ui.progress import MatrixMonitor, render_cell, render_matrix
from encode_matrix.ui.reporter import SummaryReporter, create_summary_table

__all__ = [
    "MatrixMonitor",
    "SummaryReporter",
    "create_summary_table",
    "render_cell",
    "render_matrix",
]
