"""
greyout Utilities Package.

Common utilities for error handling and source locations.
"""

from greyout.utils.errors import (
    EngineStateError,
    FactUnavailable,
    GreyoutError,
    InvalidSpan,
    PassAbandoned,
    RuleFault,
    SourceLocation,
)

__all__ = [
    # Errors
    "GreyoutError",
    "InvalidSpan",
    "FactUnavailable",
    "RuleFault",
    "PassAbandoned",
    "EngineStateError",
    "SourceLocation",
]
