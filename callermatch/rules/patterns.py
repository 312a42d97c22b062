#!/usr/bin/env python3
r"""Pattern matching for call frame fields and log messages.

This module provides the matcher used for each of the three predicate
dimensions (subroutine, module, message):
- Regex patterns searched anywhere in the value, like Perl's =~
- Catch-all default when no pattern (or an empty one) is configured
- Missing values matched as empty text

Example:
    >>> matcher = FieldMatcher.from_option(r"^billing\.", name="PackageToMatch")
    >>> matcher.matches("billing.invoices")
    True
    >>> FieldMatcher.catch_all().matches(None)
    True
"""

import re
from dataclasses import dataclass, field
from typing import Any, Optional, Pattern

from callermatch.core.validators import compile_pattern

# Matches any string, including the empty one
CATCH_ALL = ".*"


@dataclass(frozen=True)
class FieldMatcher:
    """A compiled pattern bound to one predicate dimension.

    Instances are immutable and hold their own compiled pattern, so two
    predicates never share matcher state.
    """

    pattern: Optional[str]
    compiled: Pattern = field(compare=False, repr=False)
    name: Optional[str] = None

    @classmethod
    def catch_all(cls, name: Optional[str] = None) -> "FieldMatcher":
        """Create a matcher that accepts every value.

        Args:
            name: Optional option name for diagnostics

        Returns:
            Catch-all matcher
        """
        return cls(pattern=None, compiled=re.compile(CATCH_ALL, re.DOTALL), name=name)

    @classmethod
    def from_option(cls, pattern: Any, name: Optional[str] = None) -> "FieldMatcher":
        """Build a matcher from a raw option value.

        Args:
            pattern: Pattern text or number; None or "" selects the catch-all
            name: Option name, used in error messages

        Returns:
            Compiled matcher

        Raises:
            ConfigurationError: If the pattern does not compile
        """
        if pattern is None or pattern == "":
            return cls.catch_all(name)

        compiled = compile_pattern(pattern, name)
        return cls(pattern=compiled.pattern, compiled=compiled, name=name)

    @property
    def is_catch_all(self) -> bool:
        """Return True if this matcher was built without a pattern."""
        return self.pattern is None

    def matches(self, value: Optional[str]) -> bool:
        """Check if value satisfies the pattern.

        Args:
            value: Field value; None (unavailable) is matched as ""

        Returns:
            True if the pattern is found in the value
        """
        if value is None:
            value = ""

        return self.compiled.search(value) is not None

    def __str__(self) -> str:
        """Return the pattern text, or '*' for the catch-all."""
        return "*" if self.pattern is None else self.pattern
