"""Result types for the match, parse and extract stages.

RawMatch records where one match (or named group) sits in the input.
ParsedNode pairs a RawMatch with its transformed value and parsed
children. Both are plain dataclasses that live for a single call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterable, Union

from repart.types.core import Span

if TYPE_CHECKING:
    from repart.pattern import Pattern
    from repart.transformations import GroupsHook


@dataclass
class RawMatch:
    """One match occurrence, or one named group within it.

    ``start`` and ``end`` are absolute: the engine span plus ``offset``.
    ``next_position`` is where the engine would resume searching.
    Named groups that did not take part in the match are absent from
    ``groups``.
    """

    name: str | None
    text: str
    start: int
    end: int
    offset: int
    next_position: int
    pattern: Pattern
    groups: dict[str, RawMatch] = field(default_factory=dict)
    input: str | None = None

    @property
    def span(self) -> Span:
        return Span(self.start, self.end)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "text": self.text,
            "start": self.start,
            "end": self.end,
            "offset": self.offset,
            "next_position": self.next_position,
            "pattern": self.pattern.source,
            "groups": {k: v.to_dict() for k, v in self.groups.items()},
        }


class RawMatches(list):
    """Every occurrence from a multi-match run, in input order."""

    def __init__(self, matches: Iterable[RawMatch] = (), input: str | None = None) -> None:
        super().__init__(matches)
        self.input = input

    def to_dict(self) -> list[dict]:
        return [m.to_dict() for m in self]


ParsedChild = Union["ParsedNode", list["ParsedNode"], None]


@dataclass
class ParsedNode:
    """A raw match with its transformed value and parsed children.

    ``groups`` is keyed by local group name. A child may be a list or
    None when a cascading sub-pattern matched several times or not at
    all. ``unnest`` merges this node into its parent on extraction.
    """

    raw: RawMatch
    parsed: Any
    groups: dict[str, ParsedChild] = field(default_factory=dict)
    unnest: bool = False
    groups_hook: GroupsHook | None = None

    @property
    def name(self) -> str | None:
        return self.raw.name

    @property
    def text(self) -> str:
        return self.raw.text

    @property
    def start(self) -> int:
        return self.raw.start

    @property
    def end(self) -> int:
        return self.raw.end

    @property
    def pattern(self) -> Pattern:
        return self.raw.pattern

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""

        def child_dict(child: ParsedChild) -> Any:
            if child is None:
                return None
            if isinstance(child, list):
                return [c.to_dict() for c in child]
            return child.to_dict()

        return {
            "name": self.name,
            "text": self.text,
            "start": self.start,
            "end": self.end,
            "parsed": self.parsed,
            "unnest": self.unnest,
            "groups": {k: child_dict(v) for k, v in self.groups.items()},
        }
