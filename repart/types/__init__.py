"""
repart type definitions.

This module exports the shared value types and the error hierarchy.
"""

# Core types
from .core import EXACTLY_ONCE, Quantifier, Span

# Error types
from .errors import (
    ErrorCode,
    ErrorContext,
    ErrorSeverity,
    FormatError,
    GroupNameError,
    RecoveryAction,
    RepartError,
    StallWarning,
    StructureError,
)

__all__ = [
    # Core types
    "EXACTLY_ONCE",
    "Quantifier",
    "Span",
    # Error types
    "ErrorCode",
    "ErrorSeverity",
    "RecoveryAction",
    "ErrorContext",
    "RepartError",
    "StructureError",
    "FormatError",
    "GroupNameError",
    "StallWarning",
]
