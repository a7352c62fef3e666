"""Hierarchical index of the groups in a pattern's source.

Consumes scanner tokens and produces one GroupDescriptor per group,
sorted by start position, with parent links, nesting level, capture
number and trailing quantifier. The index is a pure function of the
source string and is memoised per source.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterator

from repart.types.core import EXACTLY_ONCE, Quantifier
from repart.types.errors import (
    ErrorCode,
    ErrorContext,
    FormatError,
    RecoveryAction,
    StructureError,
)

from .scanner import GroupKind, iter_tokens

_BRACE_BODY = re.compile(r"(?P<low>\d*)(?:(?P<comma>,)(?P<high>\d*))?")

# re rejects repetition counts at or above this bound
MAX_REPEAT = 2**32 - 1


@dataclass(frozen=True)
class GroupDescriptor:
    """Location, kind and nesting of one group in a pattern source.

    Indices are offsets into the source: ``start`` is the opening
    parenthesis, ``content_start`` the first character after the group
    prefix (``(?P<name>``, ``(?:`` ...), ``end`` is just past the closing
    parenthesis and ``quantified_end`` just past any trailing quantifier.
    """

    index: int
    start: int
    content_start: int
    end: int
    quantified_end: int
    kind: GroupKind
    name: str | None
    capture_number: int | None
    parent_indices: tuple[int, ...]
    capturing_parent_indices: tuple[int, ...]
    named_parent_indices: tuple[int, ...]
    level: int
    quantifier: Quantifier = EXACTLY_ONCE

    @property
    def is_capturing(self) -> bool:
        return self.kind.is_capturing

    @property
    def has_quantifier(self) -> bool:
        return self.quantified_end > self.end

    @property
    def parent_index(self) -> int | None:
        """Index of the nearest enclosing group, if any."""
        return self.parent_indices[-1] if self.parent_indices else None

    @property
    def named_parent_index(self) -> int | None:
        """Index of the nearest enclosing named group, if any."""
        return self.named_parent_indices[-1] if self.named_parent_indices else None


def _read_quantifier(source: str, end: int) -> tuple[Quantifier, int]:
    """Parse the quantifier following a group's closing parenthesis.

    Returns the bounds and the index just past the quantifier (and any
    lazy ``?`` or possessive ``+`` suffix).
    """
    if end >= len(source):
        return EXACTLY_ONCE, end
    c = source[end]
    if c == "?":
        quantifier, stop = Quantifier(0, 1), end + 1
    elif c == "*":
        quantifier, stop = Quantifier(0, None), end + 1
    elif c == "+":
        quantifier, stop = Quantifier(1, None), end + 1
    elif c == "{":
        close = source.find("}", end + 1)
        if close == -1:
            raise FormatError(
                f"Quantifier brace at {end} is never closed",
                code=ErrorCode.MALFORMED_QUANTIFIER,
                user_message="A '{' quantifier is missing its closing '}'.",
                context=ErrorContext(
                    operation="build_group_index", source=source, position=end
                ),
                recovery_actions=[
                    RecoveryAction("Close the quantifier", example="(ab){2,3}"),
                    RecoveryAction("Escape a literal brace", example=r"(ab)\{"),
                ],
            )
        body = _BRACE_BODY.fullmatch(source, end + 1, close)
        if body is None or not (body["low"] or body["high"]):
            # not a repetition; re treats the braces as literal text
            return EXACTLY_ONCE, end
        low = int(body["low"]) if body["low"] else 0
        if body["comma"] is None:
            high: int | None = low
        else:
            high = int(body["high"]) if body["high"] else None
        if max(low, high or 0) >= MAX_REPEAT:
            raise FormatError(
                f"Quantifier {source[end:close + 1]} exceeds the repetition limit",
                code=ErrorCode.MALFORMED_QUANTIFIER,
                user_message=f"Repetition counts must be below {MAX_REPEAT}.",
                context=ErrorContext(
                    operation="build_group_index", source=source, position=end
                ),
                recovery_actions=[RecoveryAction("Use an open upper bound", example="(ab){2,}")],
            )
        if high is not None and high < low:
            raise FormatError(
                f"Quantifier {source[end:close + 1]} has min greater than max",
                code=ErrorCode.MALFORMED_QUANTIFIER,
                context=ErrorContext(
                    operation="build_group_index", source=source, position=end
                ),
            )
        quantifier, stop = Quantifier(low, high), close + 1
    else:
        return EXACTLY_ONCE, end
    if stop < len(source) and source[stop] in "?+":
        stop += 1
    return quantifier, stop


@dataclass
class _OpenGroup:
    start: int
    content_start: int
    kind: GroupKind
    name: str | None


@lru_cache(maxsize=1024)
def build_group_index(source: str) -> tuple[GroupDescriptor, ...]:
    """Build the ordered group index of ``source``.

    Raises:
        StructureError: On an unmatched ``)`` or an unclosed ``(``.
        FormatError: On a brace quantifier without its closing ``}``.
    """
    open_groups: list[_OpenGroup] = []
    closed: list[tuple[_OpenGroup, int]] = []
    for token in iter_tokens(source):
        if token.is_open:
            open_groups.append(
                _OpenGroup(token.position, token.content_start, token.kind, token.name)
            )
            continue
        if not open_groups:
            raise StructureError(
                f"Unmatched ')' at position {token.position}",
                code=ErrorCode.UNMATCHED_CLOSE,
                user_message="Pattern has a ')' without a matching '('.",
                context=ErrorContext(
                    operation="build_group_index",
                    source=source,
                    position=token.position,
                ),
                recovery_actions=[RecoveryAction("Escape a literal parenthesis", example=r"\)")],
            )
        group = open_groups.pop()
        closed.append((group, token.position + 1))

    if open_groups:
        dangling = open_groups[-1]
        raise StructureError(
            f"Unclosed '(' at position {dangling.start}",
            code=ErrorCode.UNCLOSED_GROUP,
            user_message="Pattern has a '(' that is never closed.",
            context=ErrorContext(
                operation="build_group_index", source=source, position=dangling.start
            ),
            recovery_actions=[RecoveryAction("Escape a literal parenthesis", example=r"\(")],
        )

    closed.sort(key=lambda item: item[0].start)

    descriptors: list[GroupDescriptor] = []
    capture_number = 0
    for i, (group, end) in enumerate(closed):
        parents = tuple(
            j for j in range(i)
            if closed[j][0].start < group.start and closed[j][1] > end
        )
        capturing_parents = tuple(j for j in parents if closed[j][0].kind.is_capturing)
        named_parents = tuple(j for j in parents if closed[j][0].kind is GroupKind.NAMED)
        number = None
        if group.kind.is_capturing:
            capture_number += 1
            number = capture_number
        quantifier, quantified_end = _read_quantifier(source, end)
        # named groups count their named ancestors; other kinds count one less
        level = len(named_parents) if group.kind is GroupKind.NAMED else len(named_parents) - 1
        descriptors.append(GroupDescriptor(
            index=i,
            start=group.start,
            content_start=group.content_start,
            end=end,
            quantified_end=quantified_end,
            kind=group.kind,
            name=group.name,
            capture_number=number,
            parent_indices=parents,
            capturing_parent_indices=capturing_parents,
            named_parent_indices=named_parents,
            level=level,
            quantifier=quantifier,
        ))
    return tuple(descriptors)


class GroupIndex:
    """Read-only view over the group descriptors of one source string.

    Usage:
        index = GroupIndex(r"(?P<key>\\w+)=(?P<value>\\d+)")
        index.group_names             # ["key", "value"]
        index.named("value").start    # 13
    """

    def __init__(self, source: str) -> None:
        self._source = source
        self._groups = build_group_index(source)
        self._by_name = {g.name: g for g in self._groups if g.name is not None}

    @property
    def source(self) -> str:
        return self._source

    @property
    def groups(self) -> tuple[GroupDescriptor, ...]:
        """All groups, sorted by start position."""
        return self._groups

    def __len__(self) -> int:
        return len(self._groups)

    def __iter__(self) -> Iterator[GroupDescriptor]:
        return iter(self._groups)

    def __getitem__(self, index: int) -> GroupDescriptor:
        return self._groups[index]

    @property
    def capturing_groups(self) -> list[GroupDescriptor]:
        return [g for g in self._groups if g.is_capturing]

    @property
    def named_groups(self) -> list[GroupDescriptor]:
        return [g for g in self._groups if g.kind is GroupKind.NAMED]

    @property
    def group_names(self) -> list[str]:
        return [g.name for g in self.named_groups]

    @property
    def top_level_group_names(self) -> list[str]:
        """Names of named groups with no named ancestor."""
        return [g.name for g in self.named_groups if g.level == 0]

    @property
    def whole_group(self) -> GroupDescriptor | None:
        """The group spanning the entire unquantified source, if there is one."""
        if self._groups and self._groups[0].start == 0 and self._groups[0].end == len(self._source):
            return self._groups[0]
        return None

    def named(self, name: str) -> GroupDescriptor | None:
        """Look up a named group by name."""
        return self._by_name.get(name)

    def children(self, index: int | None = None) -> list[GroupDescriptor]:
        """Direct children of group ``index``, or the top-level groups for None."""
        return [g for g in self._groups if g.parent_index == index]

    def unquantified_source(self, index: int) -> str:
        group = self._groups[index]
        return self._source[group.start:group.end]

    def quantified_source(self, index: int) -> str:
        group = self._groups[index]
        return self._source[group.start:group.quantified_end]

    def content_source(self, index: int) -> str:
        """Source between the group prefix and the closing parenthesis."""
        group = self._groups[index]
        return self._source[group.content_start:group.end - 1]

    def child_index(self, name: str) -> GroupIndex | None:
        """Index over the unquantified source of a named group."""
        group = self.named(name)
        if group is None:
            return None
        return GroupIndex(self.unquantified_source(group.index))

    def render(self) -> str:
        """Human-readable tree of the groups, for debugging."""
        lines = [self._source]
        for group in self._groups:
            depth = len(group.parent_indices)
            label = group.name if group.name is not None else group.kind.value
            parts = [f"{'  ' * depth}- {label} [{group.start}:{group.quantified_end}]"]
            if group.capture_number is not None:
                parts.append(f"#{group.capture_number}")
            if not group.quantifier.is_single:
                high = "inf" if group.quantifier.is_unbounded else group.quantifier.max_count
                parts.append(f"{{{group.quantifier.min_count},{high}}}")
            lines.append(" ".join(parts))
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"GroupIndex({self._source!r}, groups={len(self._groups)})"
