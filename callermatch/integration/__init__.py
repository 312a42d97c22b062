"""callermatch Integration Layer.

This layer connects the predicate to its host environment:
- Frame inspectors: live CPython stack and synthetic stacks
- CallerMatchFilter: logging.Filter adapter for the standard library

These components build on the Rules layer and are the entry points most
applications use.
"""

from .frames import frame_info, stack_inspector, synthetic_inspector
from .logging_filter import CallerMatchFilter, join_message, render_message

__all__ = [
    # Frame inspection
    "frame_info",
    "stack_inspector",
    "synthetic_inspector",
    # logging adapter
    "CallerMatchFilter",
    "join_message",
    "render_message",
]
