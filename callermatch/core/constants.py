"""
callermatch Core: Constants and Type Definitions

This module provides package-wide constants, error codes, option keys and
default values shared by the predicate, the configuration layer and the CLI.
"""
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Callable, Dict, Optional, TypeAlias

# Version information
CALLERMATCH_VERSION = "1.0.0"


@dataclass(frozen=True)
class FrameInfo:
    """Caller information observed at one stack depth."""

    module: str  # Module name (frame globals __name__)
    subroutine: str  # Fully qualified function name, "module.qualname"


# Given a depth, returns the frame there or None past the top of the stack
FrameInspector: TypeAlias = Callable[[int], Optional[FrameInfo]]


class ErrorCode(IntEnum):
    """Standardized error codes for callermatch operations."""

    SUCCESS = 0  # Operation completed successfully
    INVALID_INPUT = 1  # Bad pattern, boolean or frame value
    NOT_FOUND = 2  # Config file or filter section doesn't exist
    INTERNAL_ERROR = 6  # Unexpected failure while loading


class OptionKey:
    """Filter option names as they appear in Log4perl-style configuration."""

    SUB_TO_MATCH = "SubToMatch"
    PACKAGE_TO_MATCH = "PackageToMatch"
    STRING_TO_MATCH = "StringToMatch"
    ACCEPT_ON_MATCH = "AcceptOnMatch"
    CALL_FRAME = "CallFrame"
    MIN_CALL_FRAME = "MinCallFrame"
    MAX_CALL_FRAME = "MaxCallFrame"

    # Properties-only key naming the filter implementation
    CLASS = "class"


# Snake-case spellings accepted from Python callers
OPTION_ALIASES: Dict[str, str] = {
    "sub_to_match": OptionKey.SUB_TO_MATCH,
    "package_to_match": OptionKey.PACKAGE_TO_MATCH,
    "string_to_match": OptionKey.STRING_TO_MATCH,
    "accept_on_match": OptionKey.ACCEPT_ON_MATCH,
    "call_frame": OptionKey.CALL_FRAME,
    "min_call_frame": OptionKey.MIN_CALL_FRAME,
    "max_call_frame": OptionKey.MAX_CALL_FRAME,
}

KNOWN_OPTIONS = frozenset(OPTION_ALIASES.values())

# Class names (last "::" or "." component) built as caller-match filters
CALLER_MATCH_CLASSES = frozenset({"CallerMatch", "CallerMatchFilter"})


class Defaults:
    """Default option values."""

    ACCEPT_ON_MATCH = True
    MIN_CALL_FRAME = 0
    MAX_CALL_FRAME = 5

    # Log4perl's $JOIN_MSG_ARRAY_CHAR
    JOIN_MSG_ARRAY_CHAR = ""

    # Modules skipped before depth 0 when inspecting a live stack
    SKIP_MODULES = ("logging", "callermatch")


# Boolean spellings understood by normalize_boolean()
TRUE_STRINGS = frozenset({"true", "yes", "on", "1"})
FALSE_STRINGS = frozenset({"false", "no", "off", "0"})


class ConfigKey:
    """Configuration keys (dot-notation paths)."""

    ROOT = "callermatch"
    LOGGING_LEVEL = "callermatch.logging.level"
    LOGGING_FILE = "callermatch.logging.file"
    FILTERS = "callermatch.filters"

    # Environment variable prefix (CALLERMATCH_LOGGING_LEVEL=DEBUG)
    ENV_PREFIX = "CALLERMATCH_"


DEFAULT_CONFIG: Dict[str, Any] = {
    "callermatch": {
        "logging": {
            "level": "INFO",
            "file": None,
        },
        "filters": {},
    }
}
