"""Pattern composition by concatenating fragments.

A fragment is regex source (``Literal``, ``str`` or ``int``) or a
Pattern. Composing joins the sources left to right, unions the flags
and merges the transformation maps, later entries winning.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping, Union

from repart.flags import Flag, FlagsLike, parse_flags
from repart.pattern import Pattern
from repart.structure.groups import GroupIndex, build_group_index
from repart.structure.scanner import is_escaped, skip_class
from repart.transformations import merge_transformations, normalize_transformations

from .rename import validate_group_name

_SPECIAL_CHARS = re.compile(r"[.*+?^${}()|[\]\\]")

# \p{..} \P{..} \N{..}, or a hex escape whose code point may be non-ASCII
_UNICODE_ESCAPE = re.compile(
    r"\\(?:"
    r"(?P<property>[pPN]\{)"
    r"|x(?P<x>[0-9A-Fa-f]{2})"
    r"|u\{(?P<braced>[0-9A-Fa-f]+)\}"
    r"|u(?P<u>[0-9A-Fa-f]{4})"
    r"|U(?P<big>[0-9A-Fa-f]{8})"
    r")"
)


@dataclass(frozen=True)
class Literal:
    """Regex source text used verbatim as a fragment."""

    text: str


Fragment = Union[Literal, Pattern, str, int, None]


def escape(text: str) -> str:
    """Quote regex metacharacters so ``text`` matches literally."""
    return _SPECIAL_CHARS.sub(lambda m: "\\" + m.group(0), text)


def needs_unicode(source: str) -> bool:
    """True if the source contains non-ASCII text or non-ASCII escapes."""
    if not source.isascii():
        return True
    for m in _UNICODE_ESCAPE.finditer(source):
        if is_escaped(source, m.start()):
            continue
        if m["property"]:
            return True
        digits = m["x"] or m["braced"] or m["u"] or m["big"]
        if int(digits, 16) > 0x7F:
            return True
    return False


def is_atomic(source: str) -> bool:
    """True if a quantifier appended to ``source`` applies to all of it.

    That holds for a single (possibly escaped) character, a single
    character class, or a single group spanning the whole source.
    """
    if len(source) == 1 or (len(source) == 2 and source[0] == "\\"):
        return True
    if source.startswith("[") and source.endswith("]"):
        return skip_class(source, 0) == len(source)
    if source.startswith("("):
        groups = build_group_index(source)
        return bool(groups) and groups[0].start == 0 and groups[0].end == len(source)
    return False


def _fragment_source(fragment: Fragment) -> str:
    if fragment is None:
        return ""
    if isinstance(fragment, Literal):
        return fragment.text
    if isinstance(fragment, Pattern):
        return fragment.source
    if isinstance(fragment, bool):
        raise TypeError("bool is not a pattern fragment")
    if isinstance(fragment, (str, int)):
        return str(fragment)
    raise TypeError(f"Unsupported pattern fragment: {type(fragment).__name__}")


def compose(
    *fragments: Fragment,
    flags: FlagsLike = None,
    transformations: Mapping[str, Any] | None = None,
) -> Pattern:
    """Concatenate fragments into one Pattern.

    Args:
        *fragments: Regex source pieces and sub-patterns, in order.
        flags: Extra flags for the result.
        transformations: Extra transformations, applied after the
            sub-patterns' own maps.

    Returns:
        A new Pattern. UNICODE is added when the joined source contains
        non-ASCII text or escapes.

    Raises:
        GroupNameError: The joined source repeats a group name or uses a
            reserved one.

    Example:
        >>> number = Pattern(r"(?P<n>\\d+)", transformations={"n": int})
        >>> compose("total: ", number).match_and_extract("total: 12")
        {'n': 12}
    """
    combined = set(parse_flags(flags))
    maps = []
    sources = []
    for fragment in fragments:
        sources.append(_fragment_source(fragment))
        if isinstance(fragment, Pattern):
            combined |= fragment.flags
            maps.append(fragment.transformations)
    source = "".join(sources)
    seen: list[str] = []
    for name in GroupIndex(source).group_names:
        validate_group_name(name, seen)
        seen.append(name)
    if Flag.UNICODE not in combined and needs_unicode(source):
        combined.add(Flag.UNICODE)
    maps.append(normalize_transformations(transformations))
    return Pattern(source, frozenset(combined), merge_transformations(*maps))
