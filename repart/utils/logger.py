"""
Logging utility for repart.

All modules log through the loguru logger exported here. Debug-level
tracing of per-group transformation resolution is gated behind the
``REPART_DEBUG`` environment variable, since it fires once per node
of every parse.

Trace Context:
- Uses contextvars to remember which pattern source is being processed
- Use with_trace_context() to scope it around a match call
"""

import os
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Generator

from loguru import logger as loguru_logger

from repart.constants import DEBUG_ENV_VAR

# ============================================================================
# Trace Context
# ============================================================================


@dataclass
class TraceContext:
    """Context for tracing one pipeline run."""

    source: str
    depth: int = 0


_trace_context: ContextVar[TraceContext | None] = ContextVar(
    "trace_context", default=None
)


def get_trace_context() -> TraceContext | None:
    """Get the current trace context (if any)."""
    return _trace_context.get()


@contextmanager
def with_trace_context(source: str) -> Generator[TraceContext, None, None]:
    """
    Context manager scoping a trace context around a pipeline stage.

    Nested scopes (cascading matches) increase ``depth`` so debug output
    can be indented by how deep the cascade runs.

    Args:
        source: Source text of the pattern being processed

    Yields:
        The TraceContext object
    """
    parent = _trace_context.get()
    context = TraceContext(
        source=source,
        depth=(parent.depth + 1) if parent else 0,
    )
    token = _trace_context.set(context)
    try:
        yield context
    finally:
        _trace_context.reset(token)


# ============================================================================
# Logger Configuration
# ============================================================================


def is_debug_enabled() -> bool:
    """Check if transformation tracing is enabled."""
    return os.environ.get(DEBUG_ENV_VAR, "").lower() in ("1", "true", "yes")


# Export loguru logger for direct use
logger = loguru_logger
