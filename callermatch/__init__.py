"""callermatch - filter log events by the call frames that produced them.

A CallerPredicate scans a small window of call frames and accepts (or
rejects) a log event when a frame's function name, its module name and
the message text all match their patterns.

Usage:
    import logging
    from callermatch import CallerMatchFilter

    handler = logging.StreamHandler()
    handler.addFilter(CallerMatchFilter(PackageToMatch=r"^billing\\.", AcceptOnMatch=False))
"""

from callermatch.core.constants import CALLERMATCH_VERSION, ErrorCode, FrameInfo, FrameInspector
from callermatch.core.validators import ConfigurationError
from callermatch.infrastructure.config_manager import ConfigManager
from callermatch.integration.frames import stack_inspector, synthetic_inspector
from callermatch.integration.logging_filter import CallerMatchFilter, join_message
from callermatch.rules.engine import CallerPredicate, create
from callermatch.rules.patterns import FieldMatcher

__version__ = CALLERMATCH_VERSION

__all__ = [
    "CallerMatchFilter",
    "CallerPredicate",
    "ConfigManager",
    "ConfigurationError",
    "ErrorCode",
    "FieldMatcher",
    "FrameInfo",
    "FrameInspector",
    "create",
    "join_message",
    "stack_inspector",
    "synthetic_inspector",
]
