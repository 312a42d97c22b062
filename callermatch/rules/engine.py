#!/usr/bin/env python3
"""Caller-matching predicate for log event filtering.

This module provides the accept/reject decision used by a logging
pipeline's filter stage:
- Subroutine, module and message patterns that must all hold for a frame
- A window of call frames scanned from the innermost depth outward
- First-match-wins evaluation with configurable polarity

Example:
    >>> predicate = CallerPredicate.create({"SubToMatch": r"\\.handle_request$"})
    >>> predicate.evaluate("request done", inspector)
    True
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Tuple

from callermatch.core.constants import (
    KNOWN_OPTIONS,
    OPTION_ALIASES,
    Defaults,
    FrameInspector,
    OptionKey,
)
from callermatch.core.validators import (
    ConfigurationError,
    normalize_boolean,
    validate_frame_depth,
)
from callermatch.infrastructure.logger import get_logger
from callermatch.rules.patterns import FieldMatcher


def _canonical_options(options: Mapping[str, Any]) -> dict:
    """Map snake-case aliases onto Log4perl option names.

    Args:
        options: Raw options

    Returns:
        Options keyed by canonical names
    """
    canonical = {}
    for key, value in options.items():
        canonical[OPTION_ALIASES.get(key, key)] = value
    return canonical


@dataclass(frozen=True)
class CallerPredicate:
    """Immutable accept/reject predicate over call frames.

    A frame matches when its subroutine name, its module name and the
    rendered message all satisfy their patterns. Frames are probed from
    ``min_frame`` to ``max_frame`` inclusive; the first matching frame
    decides. When no frame matches the opposite decision is returned.
    """

    subroutine_pattern: FieldMatcher = field(
        default_factory=lambda: FieldMatcher.catch_all(OptionKey.SUB_TO_MATCH)
    )
    module_pattern: FieldMatcher = field(
        default_factory=lambda: FieldMatcher.catch_all(OptionKey.PACKAGE_TO_MATCH)
    )
    message_pattern: FieldMatcher = field(
        default_factory=lambda: FieldMatcher.catch_all(OptionKey.STRING_TO_MATCH)
    )
    accept_on_match: bool = Defaults.ACCEPT_ON_MATCH
    min_frame: int = Defaults.MIN_CALL_FRAME
    max_frame: int = Defaults.MAX_CALL_FRAME

    def __post_init__(self):
        if not isinstance(self.accept_on_match, bool):
            raise ConfigurationError(
                f"accept_on_match must be a bool, got {self.accept_on_match!r}",
                key=OptionKey.ACCEPT_ON_MATCH,
            )

        for key, depth in (
            (OptionKey.MIN_CALL_FRAME, self.min_frame),
            (OptionKey.MAX_CALL_FRAME, self.max_frame),
        ):
            if isinstance(depth, bool) or not isinstance(depth, int) or depth < 0:
                raise ConfigurationError(
                    f"{key} must be a non-negative integer, got {depth!r}", key=key
                )

    @classmethod
    def create(cls, options: Optional[Mapping[str, Any]] = None) -> "CallerPredicate":
        """Build a predicate from filter options.

        Option keys follow Log4perl naming (SubToMatch, PackageToMatch,
        StringToMatch, AcceptOnMatch, CallFrame, MinCallFrame,
        MaxCallFrame); snake-case spellings are accepted too. CallFrame
        pins both bounds and wins over MinCallFrame/MaxCallFrame.

        Args:
            options: Filter options, all optional

        Returns:
            Fully built predicate

        Raises:
            ConfigurationError: If a pattern does not compile, AcceptOnMatch
                is not boolean-like, or a frame value is not a
                non-negative integer
        """
        logger = get_logger()
        opts = _canonical_options(options or {})

        unknown = sorted(k for k in opts if k not in KNOWN_OPTIONS and k != OptionKey.CLASS)
        if unknown:
            logger.warning("Ignoring unknown filter options", options=",".join(unknown))

        subroutine_pattern = FieldMatcher.from_option(
            opts.get(OptionKey.SUB_TO_MATCH), OptionKey.SUB_TO_MATCH
        )
        module_pattern = FieldMatcher.from_option(
            opts.get(OptionKey.PACKAGE_TO_MATCH), OptionKey.PACKAGE_TO_MATCH
        )
        message_pattern = FieldMatcher.from_option(
            opts.get(OptionKey.STRING_TO_MATCH), OptionKey.STRING_TO_MATCH
        )

        accept_on_match = normalize_boolean(
            opts.get(OptionKey.ACCEPT_ON_MATCH, Defaults.ACCEPT_ON_MATCH),
            OptionKey.ACCEPT_ON_MATCH,
        )

        if opts.get(OptionKey.CALL_FRAME) is not None:
            min_frame = max_frame = validate_frame_depth(
                opts[OptionKey.CALL_FRAME], OptionKey.CALL_FRAME
            )
        else:
            min_frame = validate_frame_depth(
                opts.get(OptionKey.MIN_CALL_FRAME, Defaults.MIN_CALL_FRAME),
                OptionKey.MIN_CALL_FRAME,
            )
            max_frame = validate_frame_depth(
                opts.get(OptionKey.MAX_CALL_FRAME, Defaults.MAX_CALL_FRAME),
                OptionKey.MAX_CALL_FRAME,
            )

        predicate = cls(
            subroutine_pattern=subroutine_pattern,
            module_pattern=module_pattern,
            message_pattern=message_pattern,
            accept_on_match=accept_on_match,
            min_frame=min_frame,
            max_frame=max_frame,
        )

        logger.debug("Built caller predicate", predicate=predicate.describe())
        if min_frame > max_frame:
            logger.debug(
                "Empty frame range, predicate always returns the no-match decision",
                min_frame=min_frame,
                max_frame=max_frame,
            )

        return predicate

    @property
    def frame_range(self) -> Tuple[int, int]:
        """Inclusive (min_frame, max_frame) pair."""
        return (self.min_frame, self.max_frame)

    def matching_frame(self, message: str, frame_inspector: FrameInspector) -> Optional[int]:
        """Find the first depth at which all three patterns hold.

        Args:
            message: Rendered log message
            frame_inspector: Returns the frame at a depth, or None past the stack

        Returns:
            Matching depth, or None if no frame in range matches
        """
        for depth in range(self.min_frame, self.max_frame + 1):
            frame = frame_inspector(depth)
            if frame is None:
                module, subroutine = None, None
            else:
                module, subroutine = frame.module, frame.subroutine

            if (
                self.subroutine_pattern.matches(subroutine)
                and self.module_pattern.matches(module)
                and self.message_pattern.matches(message)
            ):
                return depth

        return None

    def evaluate(self, message: str, frame_inspector: FrameInspector) -> bool:
        """Decide whether a log event is accepted.

        Args:
            message: Rendered log message
            frame_inspector: Returns the frame at a depth, or None past the stack

        Returns:
            accept_on_match if some frame in range matches, else its negation
        """
        if self.matching_frame(message, frame_inspector) is not None:
            return self.accept_on_match
        return not self.accept_on_match

    __call__ = evaluate

    def describe(self) -> str:
        """Summarize the configuration on one line."""
        return (
            f"sub={self.subroutine_pattern} package={self.module_pattern} "
            f"string={self.message_pattern} "
            f"frames={self.min_frame}..{self.max_frame} "
            f"on_match={'accept' if self.accept_on_match else 'reject'}"
        )


def create(options: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> CallerPredicate:
    """Build a CallerPredicate from a mapping and/or keyword options.

    Keyword options override entries of the same name in ``options``.

    Example:
        >>> create(PackageToMatch="^billing\\.", AcceptOnMatch="false")
    """
    merged = dict(options or {})
    merged.update(kwargs)
    return CallerPredicate.create(merged)
