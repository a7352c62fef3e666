"""Match executor: runs a Pattern over input text.

Produces RawMatch trees with absolute spans. Multi-match runs iterate
from a cursor and stop at the requested count, at the end of the
matches, or when the cursor stops advancing (zero-width matches).
"""

from __future__ import annotations

import math
import re
import warnings

from repart.constants import SCOPE_SEPARATOR
from repart.flags import Flag, FlagsLike
from repart.pattern import Pattern, as_pattern
from repart.types.errors import StallWarning
from repart.utils.logger import logger

from .results import RawMatch, RawMatches


def _resolve_max_matches(pattern: Pattern, max_matches: int | float | None) -> int | float:
    if max_matches is None:
        return math.inf if Flag.GLOBAL in pattern.flags else 1
    if max_matches < 0:
        raise ValueError(f"max_matches must be non-negative, got {max_matches}")
    return max_matches


def _build_match(m: re.Match, pattern: Pattern, offset: int) -> RawMatch:
    """Create the RawMatch tree for one engine match.

    A named group nests under its nearest enclosing named group whose
    name scopes it (``a`` for ``a____b``); other named groups sit under
    the root.
    """
    root = RawMatch(
        name=None,
        text=m.group(0),
        start=m.start() + offset,
        end=m.end() + offset,
        offset=offset,
        next_position=m.end(),
        pattern=pattern,
    )
    index = pattern.index
    nodes: dict[int, RawMatch] = {}
    for group in index.named_groups:
        start, end = m.span(group.name)
        if start == -1:
            continue
        node = RawMatch(
            name=group.name,
            text=m.group(group.name),
            start=start + offset,
            end=end + offset,
            offset=offset,
            next_position=end,
            pattern=pattern,
        )
        parent = root
        for i in reversed(group.named_parent_indices):
            if i in nodes and group.name.startswith(index[i].name + SCOPE_SEPARATOR):
                parent = nodes[i]
                break
        parent.groups[group.name] = node
        nodes[group.index] = node
    return root


def execute_match(
    input: str,
    pattern: Pattern | str,
    *,
    max_matches: int | float | None = None,
    offset: int = 0,
    flags: FlagsLike = None,
    start_position: int = 0,
    cache_input: bool = False,
) -> RawMatch | RawMatches | None:
    """Run ``pattern`` over ``input``.

    Args:
        input: Text to search.
        pattern: Pattern or regex source.
        max_matches: Number of matches to collect. None means one, or
            all when the pattern has the GLOBAL flag; ``math.inf`` means all.
        offset: Added to every reported span (used for cascading matches).
        flags: Replaces the pattern's flags for this run.
        start_position: Where the search starts.
        cache_input: Keep a reference to ``input`` on the result.

    Returns:
        A RawMatch or None when one match was requested, otherwise a
        (possibly empty) RawMatches list.
    """
    pattern = as_pattern(pattern)
    if flags is not None:
        pattern = pattern.with_flags(flags)
    limit = _resolve_max_matches(pattern, max_matches)
    if limit > 1 and Flag.GLOBAL not in pattern.flags:
        pattern = pattern.add_flags(Flag.GLOBAL)

    compiled = pattern.compiled
    search = compiled.match if Flag.STICKY in pattern.flags else compiled.search

    matches: list[RawMatch] = []
    position = start_position
    while len(matches) < limit:
        m = search(input, position)
        if m is None:
            break
        matches.append(_build_match(m, pattern, offset))
        # an empty match leaves the cursor where the next search finds it again
        if m.end() == m.start() and len(matches) < limit:
            warnings.warn(
                f"Match cursor stalled at {m.end()} for pattern {pattern.source!r}; "
                f"returning {len(matches)} match(es)",
                StallWarning,
                stacklevel=2,
            )
            logger.debug(
                "Stall guard stopped matching at {} after {} match(es): {}",
                m.end(),
                len(matches),
                pattern.source,
            )
            break
        position = m.end()

    cached = input if cache_input else None
    if limit == 1:
        result = matches[0] if matches else None
        if result is not None:
            result.input = cached
        return result
    return RawMatches(matches, input=cached)
