#!/usr/bin/env python3
"""Standard library logging adapter for the caller predicate.

CallerMatchFilter plugs a CallerPredicate into Python's logging module.
It can be attached to a logger or a handler, and can be declared in a
dictConfig "filters" section:

    LOGGING = {
        "version": 1,
        "filters": {
            "billing_only": {
                "()": "callermatch.CallerMatchFilter",
                "PackageToMatch": "^billing\\\\.",
            },
        },
        ...
    }

The stack is inspected in the thread that runs the filter. Handlers fed
by a QueueListener run in the listener thread and see its stack instead
of the caller's.
"""

import logging
from typing import Any, Iterable, Optional, Sequence

from callermatch.core.constants import Defaults
from callermatch.integration.frames import stack_inspector
from callermatch.rules.engine import CallerPredicate


def join_message(parts: Iterable[Any], separator: str = Defaults.JOIN_MSG_ARRAY_CHAR) -> str:
    """Render a multi-part message into one string.

    Args:
        parts: Message fragments
        separator: Text placed between fragments

    Returns:
        Joined message
    """
    return separator.join(str(part) for part in parts)


def render_message(record: logging.LogRecord) -> str:
    """Render a record's message without raising.

    Args:
        record: Log record being filtered

    Returns:
        record.getMessage(), else str(record.msg), else the object repr of msg
    """
    # Rendering errors are reported later by the handler's emit()
    try:
        return record.getMessage()
    except Exception:
        pass

    try:
        return str(record.msg)
    except Exception:
        return object.__repr__(record.msg)


class CallerMatchFilter(logging.Filter):
    """logging.Filter that accepts or rejects records by their call frames."""

    def __init__(
        self,
        predicate: Optional[CallerPredicate] = None,
        name: str = "",
        skip_modules: Sequence[str] = Defaults.SKIP_MODULES,
        **options: Any,
    ):
        """Initialize the filter.

        Args:
            predicate: Prebuilt predicate; mutually exclusive with options
            name: logging.Filter name (logger-name prefix restriction)
            skip_modules: Modules skipped before depth 0
            **options: Predicate options (SubToMatch, AcceptOnMatch, ...)

        Raises:
            ConfigurationError: If options are invalid
            ValueError: If both a predicate and options are given
        """
        super().__init__(name)
        if predicate is not None and options:
            raise ValueError("Pass either a predicate or filter options, not both")

        self.predicate = predicate if predicate is not None else CallerPredicate.create(options)
        self.skip_modules = tuple(skip_modules)

    def filter(self, record: logging.LogRecord) -> bool:
        """Decide whether the record is logged.

        Args:
            record: Log record being filtered

        Returns:
            True to let the record through
        """
        if not super().filter(record):
            return False

        inspector = stack_inspector(self.skip_modules)
        return self.predicate.evaluate(render_message(record), inspector)

    def __repr__(self) -> str:
        return f"CallerMatchFilter({self.predicate.describe()})"
