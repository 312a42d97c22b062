"""callermatch Infrastructure Layer.

This layer provides services used around the predicate:
- Logger: Structured logging for package diagnostics
- ConfigManager: Layered configuration that builds named filters

The logger is imported by the rules layer, so this package only re-exports
it; import the configuration manager from its module:

    from callermatch.infrastructure.config_manager import ConfigManager
"""

from .logger import Logger, LogLevel, get_logger, set_global_logger

__all__ = [
    "Logger",
    "LogLevel",
    "get_logger",
    "set_global_logger",
]
