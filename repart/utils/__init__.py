"""
repart utility modules.

This package provides shared utilities used across the repart codebase:
- Logging (loguru, with debug tracing gated by REPART_DEBUG)
"""

from .logger import (
    TraceContext,
    get_trace_context,
    is_debug_enabled,
    logger,
    with_trace_context,
)

__all__ = [
    "TraceContext",
    "get_trace_context",
    "is_debug_enabled",
    "logger",
    "with_trace_context",
]
