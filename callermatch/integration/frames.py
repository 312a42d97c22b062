#!/usr/bin/env python3
"""Frame inspectors for the caller predicate.

A frame inspector answers "which module and function are running at
depth i?" for the thread that is evaluating a log event. This module
provides:
- stack_inspector(): a snapshot of the live CPython stack
- synthetic_inspector(): a fixed list of frames, for tests and dry runs

Depth 0 of a live stack is the first frame outside the skipped modules
(by default the logging package and callermatch itself), i.e. the code
that issued the logging call.
"""

import sys
from types import FrameType
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from callermatch.core.constants import Defaults, FrameInfo, FrameInspector


def frame_info(frame: FrameType) -> FrameInfo:
    """Describe a CPython frame.

    Args:
        frame: Live frame object

    Returns:
        FrameInfo with the frame's module and qualified function name
    """
    module = frame.f_globals.get("__name__", "")
    return FrameInfo(module=module, subroutine=f"{module}.{frame.f_code.co_qualname}")


def _is_skipped(module: str, skip_modules: Sequence[str]) -> bool:
    return any(module == name or module.startswith(name + ".") for name in skip_modules)


def stack_inspector(
    skip_modules: Sequence[str] = Defaults.SKIP_MODULES,
    frame: Optional[FrameType] = None,
) -> FrameInspector:
    """Capture the calling thread's stack as a frame inspector.

    Leading frames belonging to ``skip_modules`` are dropped; the first
    remaining frame becomes depth 0. Later frames are kept even if they
    belong to a skipped module. Frames are described lazily, only as deep
    as the inspector is queried.

    Args:
        skip_modules: Module names (and their submodules) to skip
        frame: Starting frame; defaults to the caller's frame

    Returns:
        Inspector over the captured stack
    """
    if frame is None:
        frame = sys._getframe(1)

    while frame is not None and _is_skipped(frame.f_globals.get("__name__", ""), skip_modules):
        frame = frame.f_back

    described: List[FrameInfo] = []
    cursor = [frame]

    def inspect(depth: int) -> Optional[FrameInfo]:
        if depth < 0:
            return None
        while len(described) <= depth and cursor[0] is not None:
            described.append(frame_info(cursor[0]))
            cursor[0] = cursor[0].f_back
        if depth < len(described):
            return described[depth]
        return None

    return inspect


FrameSpec = Union[FrameInfo, Tuple[str, str], None]


def synthetic_inspector(frames: Iterable[FrameSpec]) -> FrameInspector:
    """Build an inspector over a fixed stack, innermost frame first.

    Args:
        frames: FrameInfo objects, (module, subroutine) pairs, or None for
            a frame that should report as unavailable

    Returns:
        Inspector returning None for depths beyond the list
    """
    stack: List[Optional[FrameInfo]] = []
    for spec in frames:
        if spec is None or isinstance(spec, FrameInfo):
            stack.append(spec)
        else:
            module, subroutine = spec
            stack.append(FrameInfo(module=module, subroutine=subroutine))

    def inspect(depth: int) -> Optional[FrameInfo]:
        if 0 <= depth < len(stack):
            return stack[depth]
        return None

    return inspect
