"""Parser resolver: applies per-group transformations to a RawMatch tree.

For each node the producing pattern's map is consulted under the group
name, then under the unnest-marked name. Cascade entries re-run the
matcher on the group's text; the result replaces the node but keeps
its key in the parent.
"""

from __future__ import annotations

import json
from typing import Any

from repart.transformations import (
    Cascade,
    Function,
    Ignore,
    PassThrough,
    local_name,
)
from repart.utils.logger import is_debug_enabled, logger, with_trace_context

from .executor import execute_match
from .results import ParsedChild, ParsedNode, RawMatch


def default_transform(text: str) -> Any:
    """Decode JSON objects and arrays; keep any other text unchanged."""
    stripped = text.strip()
    if stripped[:1] in ("{", "["):
        try:
            return json.loads(stripped)
        except json.JSONDecodeError:
            return text
    return text


def _parse_node(raw: RawMatch, unnest: bool, depth: int) -> ParsedChild:
    pattern = raw.pattern
    transformation, marked = pattern.lookup(raw.name)
    unnest = unnest or marked

    if is_debug_enabled():
        logger.debug(
            "{}parse {} -> {}{}",
            "  " * depth,
            raw.name or "<root>",
            type(transformation).__name__ if transformation else "default",
            " (unnest)" if unnest else "",
        )

    if isinstance(transformation, Cascade):
        sub = execute_match(raw.text, transformation.pattern, offset=raw.start)
        if sub is None:
            logger.debug("Cascade for {} found no match in {!r}", raw.name, raw.text)
        return parse(sub, unnest=unnest)

    if isinstance(transformation, Ignore):
        return ParsedNode(raw=raw, parsed={}, groups={}, unnest=True)

    if isinstance(transformation, Function):
        parsed = transformation(raw.text, raw.start)
    elif isinstance(transformation, PassThrough):
        parsed = raw.text
    else:
        parsed = default_transform(raw.text)

    groups: dict[str, ParsedChild] = {}
    for name, child in raw.groups.items():
        groups[local_name(name, raw.name)] = _parse_node(child, False, depth + 1)

    return ParsedNode(
        raw=raw,
        parsed=parsed,
        groups=groups,
        unnest=unnest,
        groups_hook=pattern.hook_for(raw.name),
    )


def parse(
    raw: RawMatch | list[RawMatch] | None, unnest: bool = False
) -> ParsedChild | list[ParsedChild]:
    """Parse a RawMatch, a list of them, or None.

    Args:
        raw: Output of ``execute_match``.
        unnest: Mark the resulting node(s) for merging into the parent.

    Returns:
        A ParsedNode, a list of parsed elements, or None. A cascading
        root may itself resolve to a list or None.
    """
    if raw is None:
        return None
    if isinstance(raw, list):
        return [parse(r, unnest=unnest) for r in raw]
    with with_trace_context(raw.pattern.source) as trace:
        if is_debug_enabled():
            logger.debug("{}parsing pattern {}", "  " * trace.depth, trace.source)
        return _parse_node(raw, unnest, trace.depth)
