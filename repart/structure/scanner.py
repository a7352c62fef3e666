"""Escape-aware scanner over regular-expression source text.

Finds the parentheses that delimit groups in ``re`` syntax and
classifies each opening parenthesis by the group-start sequence that
follows it. Escaped parentheses (an odd run of backslashes before
them), parentheses inside character classes, inline comments and the
condition reference of a conditional group are skipped.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Iterator

_NAMED_START = "(?P<"


class GroupKind(StrEnum):
    """The kind of a parenthesized group."""

    NAMED = "named"
    CAPTURING = "capturing"
    NON_CAPTURING = "non-capturing"
    LOOKAHEAD = "lookahead"
    NEGATIVE_LOOKAHEAD = "negative-lookahead"
    LOOKBEHIND = "lookbehind"
    NEGATIVE_LOOKBEHIND = "negative-lookbehind"

    @property
    def is_capturing(self) -> bool:
        return self in (GroupKind.NAMED, GroupKind.CAPTURING)


# Checked in order; the longest sequences sharing a prefix come first.
GROUP_STARTS: tuple[tuple[str, GroupKind], ...] = (
    ("?<=", GroupKind.LOOKBEHIND),
    ("?<!", GroupKind.NEGATIVE_LOOKBEHIND),
    ("?:", GroupKind.NON_CAPTURING),
    ("?=", GroupKind.LOOKAHEAD),
    ("?!", GroupKind.NEGATIVE_LOOKAHEAD),
)


@dataclass(frozen=True)
class Token:
    """An unescaped group delimiter found in pattern source.

    For opening tokens ``kind`` and ``content_start`` describe the group;
    closing tokens carry only their position.
    """

    position: int
    is_open: bool
    kind: GroupKind | None = None
    content_start: int | None = None
    name: str | None = None


def is_escaped(source: str, position: int) -> bool:
    """True if the character at ``position`` follows an odd run of backslashes."""
    count = 0
    i = position - 1
    while i >= 0 and source[i] == "\\":
        count += 1
        i -= 1
    return count % 2 == 1


def skip_class(source: str, position: int) -> int:
    """Return the index just past the character class opening at ``position``."""
    i = position + 1
    n = len(source)
    if i < n and source[i] == "^":
        i += 1
    # a ']' right after '[' or '[^' is a literal member
    if i < n and source[i] == "]":
        i += 1
    while i < n:
        c = source[i]
        if c == "\\":
            i += 2
            continue
        if c == "]":
            return i + 1
        i += 1
    # unterminated class; the engine will reject it at compile time
    return n


def _classify(source: str, position: int) -> tuple[GroupKind, int, str | None]:
    """Classify the group opening at ``position``.

    Returns the kind, the index where the group content starts, and the
    group name for named groups.
    """
    after = position + 1
    if source.startswith(_NAMED_START, position):
        close = source.find(">", position + len(_NAMED_START))
        if close != -1:
            name = source[position + len(_NAMED_START):close]
            return GroupKind.NAMED, close + 1, name
    for start, kind in GROUP_STARTS:
        if source.startswith(start, after):
            return kind, after + len(start), None
    if source.startswith("?(", after):
        # conditional: the "(id)" reference is not a group
        end = source.find(")", after + 2)
        if end != -1:
            return GroupKind.NON_CAPTURING, end + 1, None
    if source.startswith("?", after):
        # (?P=name), (?>...), (?flags:...), (?flags)
        colon = _inline_flags_end(source, after + 1)
        if colon is not None:
            return GroupKind.NON_CAPTURING, colon, None
        return GroupKind.NON_CAPTURING, after + 1, None
    return GroupKind.CAPTURING, after, None


def _inline_flags_end(source: str, i: int) -> int | None:
    """Content start of a scoped-flags group like ``(?i:...)`` or ``(?-s:...)``."""
    n = len(source)
    j = i
    while j < n and (source[j].isalpha() or source[j] == "-"):
        j += 1
    if j > i and j < n and source[j] == ":":
        return j + 1
    return None


def iter_tokens(source: str) -> Iterator[Token]:
    """Yield every group delimiter in ``source``, left to right."""
    i = 0
    n = len(source)
    while i < n:
        c = source[i]
        if c == "\\":
            i += 2
            continue
        if c == "[":
            i = skip_class(source, i)
            continue
        if c == "(":
            if source.startswith("(?#", i):
                # inline comment: runs to the first ')' and opens no group
                end = source.find(")", i + 3)
                i = n if end == -1 else end + 1
                continue
            kind, content_start, name = _classify(source, i)
            yield Token(i, True, kind, content_start, name)
            i = content_start
            continue
        if c == ")":
            yield Token(i, False)
        i += 1


def scan(source: str) -> list[Token]:
    """Scan ``source`` into a list of group delimiter tokens."""
    return list(iter_tokens(source))
