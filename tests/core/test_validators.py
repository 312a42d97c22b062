#!/usr/bin/env python3
"""Tests for option normalization and validation."""

import re

import pytest

from callermatch.core.constants import ErrorCode
from callermatch.core.validators import (
    ConfigurationError,
    compile_pattern,
    normalize_boolean,
    validate_frame_depth,
)


class TestConfigurationError:
    """Tests for ConfigurationError exception."""

    def test_error_attributes(self):
        """Carries message, code and key."""
        error = ConfigurationError("bad", ErrorCode.NOT_FOUND, key="SubToMatch")
        assert error.message == "bad"
        assert error.error_code == ErrorCode.NOT_FOUND
        assert error.key == "SubToMatch"
        assert str(error) == "bad"

    def test_error_defaults(self):
        """Defaults to INVALID_INPUT with no key."""
        error = ConfigurationError("bad")
        assert error.error_code == ErrorCode.INVALID_INPUT
        assert error.key is None


class TestNormalizeBoolean:
    """Tests for normalize_boolean()."""

    @pytest.mark.parametrize(
        "value", [True, 1, "1", "true", "TRUE", "True", "yes", "Yes", "on", " true "]
    )
    def test_truthy_values(self, value):
        """Recognized truthy spellings normalize to True."""
        assert normalize_boolean(value, "AcceptOnMatch") is True

    @pytest.mark.parametrize("value", [False, 0, "0", "false", "FALSE", "no", "No", "off"])
    def test_falsy_values(self, value):
        """Recognized falsy spellings normalize to False."""
        assert normalize_boolean(value, "AcceptOnMatch") is False

    @pytest.mark.parametrize("value", ["maybe", "", "2", 2, -1, None, 1.0, []])
    def test_unrecognized_values(self, value):
        """Anything else is a configuration error."""
        with pytest.raises(ConfigurationError) as exc_info:
            normalize_boolean(value, "AcceptOnMatch")
        assert exc_info.value.key == "AcceptOnMatch"
        assert "AcceptOnMatch" in str(exc_info.value)


class TestValidateFrameDepth:
    """Tests for validate_frame_depth()."""

    def test_integer(self):
        """Non-negative integers pass through."""
        assert validate_frame_depth(0, "CallFrame") == 0
        assert validate_frame_depth(7, "CallFrame") == 7

    def test_numeric_string(self):
        """Decimal strings from config files are converted."""
        assert validate_frame_depth("3", "MaxCallFrame") == 3
        assert validate_frame_depth(" 12 ", "MaxCallFrame") == 12

    def test_negative_rejected(self):
        """Negative depths are rejected."""
        with pytest.raises(ConfigurationError, match="non-negative"):
            validate_frame_depth(-1, "MinCallFrame")
        with pytest.raises(ConfigurationError, match="non-negative"):
            validate_frame_depth("-2", "MinCallFrame")

    @pytest.mark.parametrize("value", ["two", "1.5", 1.5, None, True, ""])
    def test_non_integer_rejected(self, value):
        """Non-integers, including booleans, are rejected."""
        with pytest.raises(ConfigurationError) as exc_info:
            validate_frame_depth(value, "CallFrame")
        assert exc_info.value.key == "CallFrame"


class TestCompilePattern:
    """Tests for compile_pattern()."""

    def test_valid_pattern(self):
        """Valid regex compiles."""
        compiled = compile_pattern(r"^handle_\w+$", "SubToMatch")
        assert isinstance(compiled, re.Pattern)
        assert compiled.search("handle_request")

    def test_invalid_pattern(self):
        """Invalid regex raises ConfigurationError naming the option."""
        with pytest.raises(ConfigurationError, match="SubToMatch") as exc_info:
            compile_pattern("(unclosed", "SubToMatch")
        assert exc_info.value.error_code == ErrorCode.INVALID_INPUT

    @pytest.mark.parametrize("value,text", [(500, "500"), (1.5, "1.5"), (0, "0")])
    def test_numeric_pattern(self, value, text):
        """Numbers are compiled from their text."""
        compiled = compile_pattern(value, "StringToMatch")
        assert compiled.pattern == text
        assert compiled.search(f"status {text}")

    @pytest.mark.parametrize("value", [["a"], {"a": 1}, True])
    def test_non_string_pattern(self, value):
        """Lists, mappings and booleans are rejected."""
        with pytest.raises(ConfigurationError, match="string pattern"):
            compile_pattern(value, "StringToMatch")
