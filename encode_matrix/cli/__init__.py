"""Command-line interface."""

from encode_matrix.cli.main import app, main

__all__ = ["app", "main"]
