"""Utility modules for AquaSmith."""

from aquasmith.utils.errors import (
    AlignmentError,
    AquaSmithError,
    ConfigError,
    CRSError,
    FormatError,
    OverlapError,
    format_parameter_error,
    format_validation_error,
    raise_config_error,
)

__all__ = [
    "AquaSmithError",
    "AlignmentError",
    "ConfigError",
    "CRSError",
    "FormatError",
    "OverlapError",
    "format_parameter_error",
    "format_validation_error",
    "raise_config_error",
]
