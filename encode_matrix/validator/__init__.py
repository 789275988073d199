"""Encode configuration validation."""

from encode_matrix.validator.checker import check_encode_config, validate_encode_config

__all__ = [
    "check_encode_config",
    "validate_encode_config",
]
