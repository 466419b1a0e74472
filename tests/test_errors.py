"""Tests for the error taxonomy."""

import pytest

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


class TestErrors:
    """Tests for AquaSmith exceptions."""

    @pytest.mark.parametrize(
        "error_cls", [FormatError, CRSError, AlignmentError, ConfigError, OverlapError]
    )
    def test_hierarchy(self, error_cls):
        """Test that every error derives from AquaSmithError."""
        assert issubclass(error_cls, AquaSmithError)

    def test_suggestion_in_message(self):
        """Test that the suggestion is appended to str()."""
        error = CRSError("CRS missing", suggestion="set it")
        assert str(error) == "CRS missing\n\nSuggestion: set it"
        assert error.message == "CRS missing"

    def test_details_default(self):
        """Test that details default to an empty dict."""
        assert FormatError("bad").details == {}

    def test_format_validation_error(self):
        """Test validation message layout."""
        message = format_validation_error("Mismatch", expected="a", received="b")
        assert message == "Mismatch\nExpected: a, Received: b"

    def test_format_parameter_error(self):
        """Test parameter message layout."""
        message = format_parameter_error("op", "pow", valid_values=["add", "multiply"])
        assert "Invalid value for parameter 'op': pow" in message
        assert "Valid values: add, multiply" in message

    def test_raise_config_error(self):
        """Test that raise_config_error raises ConfigError with details."""
        with pytest.raises(ConfigError, match="resampling") as exc_info:
            raise_config_error("resampling", "fancy")
        assert exc_info.value.details == {"parameter": "resampling", "value": "fancy"}
