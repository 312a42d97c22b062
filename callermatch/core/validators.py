"""
callermatch Core: Input Validators.

This module provides the normalization and validation functions applied to
filter options before a predicate is built. Every failure is reported as a
ConfigurationError carrying the offending option key.
"""
import re
from typing import Any, Optional, Pattern

from callermatch.core.constants import FALSE_STRINGS, TRUE_STRINGS, ErrorCode


class ConfigurationError(Exception):
    """Raised when filter options or configuration files cannot be used."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INVALID_INPUT,
        key: Optional[str] = None,
    ):
        """Initialize ConfigurationError.

        Args:
            message: Error message
            error_code: Associated error code
            key: Option or configuration key that failed, if known
        """
        self.message = message
        self.error_code = error_code
        self.key = key
        super().__init__(message)


def normalize_boolean(value: Any, key: Optional[str] = None) -> bool:
    """Normalize a boolean-ish option value.

    Accepts real booleans, the integers 1 and 0, and the strings
    true/false, yes/no, on/off, 1/0 in any case.

    Args:
        value: Raw option value
        key: Option name for error reporting

    Returns:
        Normalized boolean

    Raises:
        ConfigurationError: If value cannot be interpreted as a boolean
    """
    if isinstance(value, bool):
        return value

    if isinstance(value, int):
        if value in (0, 1):
            return bool(value)
        raise ConfigurationError(f"Invalid boolean value for {key}: {value!r}", key=key)

    if isinstance(value, str):
        text = value.strip().lower()
        if text in TRUE_STRINGS:
            return True
        if text in FALSE_STRINGS:
            return False

    raise ConfigurationError(f"Invalid boolean value for {key}: {value!r}", key=key)


def validate_frame_depth(value: Any, key: Optional[str] = None) -> int:
    """Validate a call frame depth.

    Args:
        value: Integer or decimal-integer string
        key: Option name for error reporting

    Returns:
        Depth as a non-negative integer

    Raises:
        ConfigurationError: If value is not a non-negative integer
    """
    # bool is an int subclass, but True is not a depth
    if isinstance(value, bool):
        raise ConfigurationError(f"{key} must be an integer, got {value!r}", key=key)

    if isinstance(value, int):
        depth = value
    elif isinstance(value, str) and re.fullmatch(r"\s*[+-]?\d+\s*", value):
        depth = int(value)
    else:
        raise ConfigurationError(f"{key} must be an integer, got {value!r}", key=key)

    if depth < 0:
        raise ConfigurationError(f"{key} must be non-negative, got {depth}", key=key)

    return depth


def compile_pattern(pattern: Any, key: Optional[str] = None) -> Pattern:
    """Compile a regular expression option.

    Numbers are compiled from their text, so a YAML value such as
    ``StringToMatch: 500`` matches "500".

    Args:
        pattern: Pattern text or number
        key: Option name for error reporting

    Returns:
        Compiled pattern

    Raises:
        ConfigurationError: If pattern is not text or a number, or does not compile
    """
    if isinstance(pattern, (int, float)) and not isinstance(pattern, bool):
        pattern = str(pattern)

    if not isinstance(pattern, str):
        raise ConfigurationError(
            f"{key} must be a string pattern, got {type(pattern).__name__}", key=key
        )

    try:
        return re.compile(pattern)
    except re.error as e:
        raise ConfigurationError(
            f"Invalid regular expression for {key}: {pattern!r} ({e})", key=key
        )
