"""Pattern mode flags.

Flags are kept as a frozenset of ``Flag`` members on every Pattern.
Only some of them map onto ``re`` compile flags; GLOBAL, STICKY and
INDICES steer the match executor instead.
"""

from __future__ import annotations

import re
from enum import StrEnum
from typing import Iterable

from repart.types.errors import ErrorCode, ErrorContext, FormatError


class Flag(StrEnum):
    """Pattern mode flags, valued by their conventional one-letter code."""

    IGNORE_CASE = "i"
    GLOBAL = "g"
    MULTILINE = "m"
    DOTALL = "s"
    UNICODE = "u"
    STICKY = "y"
    INDICES = "d"


_RE_FLAGS: dict[Flag, re.RegexFlag] = {
    Flag.IGNORE_CASE: re.IGNORECASE,
    Flag.MULTILINE: re.MULTILINE,
    Flag.DOTALL: re.DOTALL,
    Flag.UNICODE: re.UNICODE,
}

FlagsLike = str | Iterable[Flag] | None


def parse_flags(flags: FlagsLike) -> frozenset[Flag]:
    """Normalize a flag string or iterable of flags into a frozenset.

    Raises:
        FormatError: If a character is not a known flag code.
    """
    if flags is None:
        return frozenset()
    if isinstance(flags, Flag):
        return frozenset({flags})
    result: set[Flag] = set()
    for i, item in enumerate(flags):
        try:
            result.add(Flag(item))
        except ValueError as e:
            raise FormatError(
                f"Unknown flag {item!r} in {flags!r}",
                code=ErrorCode.UNKNOWN_FLAG,
                user_message=f"'{item}' is not a pattern flag.",
                context=ErrorContext(
                    operation="parse_flags",
                    source=flags if isinstance(flags, str) else None,
                    position=i,
                    additional_info={"valid": "".join(f.value for f in Flag)},
                ),
                original_error=e,
            ) from e
    return frozenset(result)


def flags_to_string(flags: Iterable[Flag]) -> str:
    """Render flags in a stable order, e.g. ``"gim"``."""
    present = set(flags)
    return "".join(f.value for f in Flag if f in present)


def to_re_flags(flags: Iterable[Flag]) -> re.RegexFlag:
    """Combine the ``re`` compile flags for a flag set."""
    result = re.RegexFlag(0)
    for flag in flags:
        result |= _RE_FLAGS.get(flag, re.RegexFlag(0))
    return result
