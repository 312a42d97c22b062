"""callermatch Core - Shared constants and validation.

Import specific names from submodules:
    from callermatch.core.constants import ErrorCode, OptionKey
    from callermatch.core.validators import ConfigurationError
"""

from callermatch.core import constants, validators

__all__ = [
    "constants",
    "validators",
]
