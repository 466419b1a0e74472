"""Standardized errors for AquaSmith.

Every failure in the pipeline is fatal and surfaces as one of the
exceptions below. Messages are built with the ``format_*`` helpers so that
they read the same across modules.
"""

from typing import Any, Optional


class AquaSmithError(Exception):
    """Base exception for AquaSmith errors."""

    def __init__(
        self,
        message: str,
        suggestion: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        """Initialize AquaSmith error.

        Args:
            message: Primary error message.
            suggestion: Optional suggestion for fixing the error.
            details: Optional dictionary with additional error details.
        """
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        """Format error message with suggestion if available."""
        if self.suggestion:
            return f"{self.message}\n\nSuggestion: {self.suggestion}"
        return self.message


class FormatError(AquaSmithError):
    """Input file is missing, unreadable or has unexpected content."""

    pass


class CRSError(AquaSmithError):
    """Coordinate reference system is missing, invalid or mismatched."""

    pass


class AlignmentError(AquaSmithError):
    """Rasters do not share CRS, extent and resolution."""

    pass


class ConfigError(AquaSmithError):
    """Parameters or configuration values are malformed."""

    pass


class OverlapError(AquaSmithError):
    """A point lies inside more than one polygon of a join layer."""

    pass


def format_validation_error(
    message: str,
    expected: Optional[str] = None,
    received: Optional[str] = None,
    suggestion: Optional[str] = None,
) -> str:
    """Format a standardized validation error message.

    Args:
        message: Primary error message.
        expected: What was expected (optional).
        received: What was received (optional).
        suggestion: How to fix the error (optional).

    Returns:
        Formatted error message string.
    """
    parts = [message]
    if expected and received:
        parts.append(f"Expected: {expected}, Received: {received}")
    elif expected:
        parts.append(f"Expected: {expected}")
    elif received:
        parts.append(f"Received: {received}")
    if suggestion:
        parts.append(f"Suggestion: {suggestion}")
    return "\n".join(parts)


def format_parameter_error(
    parameter_name: str,
    value: Any,
    valid_values: Optional[list[str]] = None,
    constraint: Optional[str] = None,
) -> str:
    """Format a standardized parameter error message.

    Args:
        parameter_name: Name of the invalid parameter.
        value: Invalid value that was provided.
        valid_values: List of valid values (optional).
        constraint: Constraint that was violated (optional).

    Returns:
        Formatted error message string.
    """
    parts = [f"Invalid value for parameter '{parameter_name}': {value}"]
    if valid_values:
        parts.append(f"Valid values: {', '.join(map(str, valid_values))}")
    if constraint:
        parts.append(f"Constraint: {constraint}")
    return "\n".join(parts)


def raise_config_error(
    parameter_name: str,
    value: Any,
    valid_values: Optional[list[str]] = None,
    constraint: Optional[str] = None,
    suggestion: Optional[str] = None,
) -> None:
    """Raise a standardized configuration error.

    Args:
        parameter_name: Name of the invalid parameter.
        value: Invalid value that was provided.
        valid_values: List of valid values (optional).
        constraint: Constraint that was violated (optional).
        suggestion: How to fix the error (optional).

    Raises:
        ConfigError: Always raises this exception.
    """
    error_msg = format_parameter_error(parameter_name, value, valid_values, constraint)
    raise ConfigError(
        error_msg,
        suggestion=suggestion,
        details={"parameter": parameter_name, "value": value},
    )
