"""Match, parse and extract pipeline.

Stages:
- execute_match: Pattern + input -> RawMatch / RawMatches / None
- parse: RawMatch tree -> ParsedNode tree (transformations applied)
- extract: ParsedNode tree -> plain dicts, lists and scalars

Usage:
    from repart.matching import match, match_and_extract

    match_and_extract("name: John, age: 25", r"name: (?P<name>\\w+), age: (?P<age>\\d+)")
    # {"name": "John", "age": "25"}

    result = match("a=1 b=2", pattern, max_matches=math.inf)
    result.raw, result.parsed, result.extracted
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from typing import Any

from repart.pattern import Pattern, as_pattern

from .executor import execute_match
from .extractor import collapse, extract
from .parser import default_transform, parse
from .results import ParsedChild, ParsedNode, RawMatch, RawMatches


@dataclass(frozen=True)
class MatchResult:
    """Lazy view of one pipeline run; each stage is computed on first access."""

    input: str
    pattern: Pattern
    options: dict[str, Any] = field(default_factory=dict)

    @cached_property
    def raw(self) -> RawMatch | RawMatches | None:
        return execute_match(self.input, self.pattern, **self.options)

    @cached_property
    def parsed(self) -> ParsedChild | list[ParsedChild]:
        return parse(self.raw)

    @cached_property
    def extracted(self) -> Any:
        return extract(self.parsed)

    @property
    def matched(self) -> bool:
        """True if at least one match was found."""
        return bool(self.raw) if isinstance(self.raw, list) else self.raw is not None


def match(input: str, pattern: Pattern | str, **options: Any) -> MatchResult:
    """Match ``pattern`` against ``input``; stages run lazily.

    ``options`` are passed to ``execute_match`` (max_matches, offset,
    flags, start_position, cache_input).
    """
    return MatchResult(input, as_pattern(pattern), dict(options))


def match_and_extract(input: str, pattern: Pattern | str, **options: Any) -> Any:
    """Match, parse and extract in one call."""
    return match(input, pattern, **options).extracted


__all__ = [
    "MatchResult",
    "ParsedNode",
    "RawMatch",
    "RawMatches",
    "collapse",
    "default_transform",
    "execute_match",
    "extract",
    "match",
    "match_and_extract",
    "parse",
]
