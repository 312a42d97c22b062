"""callermatch Rules System.

This module provides the caller-matching predicate and its pattern matching:
- FieldMatcher: Compiled regex for one predicate dimension
- CallerPredicate: Accept/reject decision over a window of call frames

A predicate is built once from filter options and evaluated for every
candidate log event.
"""

from .engine import CallerPredicate, create
from .patterns import CATCH_ALL, FieldMatcher

__all__ = [
    # Pattern matching
    "CATCH_ALL",
    "FieldMatcher",
    # Predicate
    "CallerPredicate",
    "create",
]
