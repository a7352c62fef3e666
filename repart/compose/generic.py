r"""Generic pattern builders and common fragments.

Every builder takes fragments (regex source strings, Literal or Pattern)
and returns a Pattern, so builders nest and carry the transformations
of the patterns passed in.

Usage:
    from repart.compose import generic as g

    key_value = compose(g.WORD.bind("key"), r":\s*", g.NUM.bind("value"))
    g.square_bracket(key_value).match_and_extract("[ port: 80 ]")
    # {"key": "port", "value": "80"}
"""

from __future__ import annotations

import math
import re
from typing import Callable, Iterable, Sequence

from repart.compose.builder import Fragment, compose, escape
from repart.compose.rename import rename_group
from repart.flags import Flag
from repart.pattern import Pattern, as_pattern
from repart.transformations import merge_transformations
from repart.types.errors import ErrorCode, FormatError

Builder = Callable[..., Pattern]

# ============================================================================
# Common fragments
# ============================================================================

NEW_LINE = Pattern(r"\r?\n")
END_LINE = Pattern(r"(?=\r?\n|$)")
START_LINE = Pattern(r"(?<![^\r\n])")
ANY = Pattern(r"[\s\S]")
ANYTHING = Pattern(r"[\s\S]*?")
# whitespace other than newlines
SPACE = Pattern(r"[^\S\r\n]+")
WORD = Pattern(r"\w+")
FULL_WORD = Pattern(r"\b\w+\b")
DIGIT = Pattern(r"\d")
NUM = Pattern(r"\d+")
WORD_BOUNDARY = Pattern(r"\b")
NOT_WORD_BOUNDARY = Pattern(r"\B")

# ============================================================================
# Group wrappers
# ============================================================================


def capturing(*fragments: Fragment) -> Pattern:
    return compose("(", *fragments, ")")


def optional(*fragments: Fragment) -> Pattern:
    return compose("(", *fragments, ")?")


def non_capturing(*fragments: Fragment) -> Pattern:
    return compose("(?:", *fragments, ")")


def lookahead(*fragments: Fragment) -> Pattern:
    return compose("(?=", *fragments, ")")


def negative_lookahead(*fragments: Fragment) -> Pattern:
    return compose("(?!", *fragments, ")")


def lookbehind(*fragments: Fragment) -> Pattern:
    return compose("(?<=", *fragments, ")")


def negative_lookbehind(*fragments: Fragment) -> Pattern:
    return compose("(?<!", *fragments, ")")


def between(left: Fragment, right: Fragment, *fragments: Fragment) -> Pattern:
    """Match ``fragments`` preceded by ``left`` and followed by ``right``.

    Neither delimiter is part of the match.
    """
    return compose(lookbehind(left), *fragments, lookahead(right))


_GROUP_KINDS: dict[str, Builder] = {
    "capturing": capturing,
    "unnamed": capturing,
    "non-capturing": non_capturing,
    "non_capturing": non_capturing,
    "nc": non_capturing,
    "lookahead": lookahead,
    "positive-lookahead": lookahead,
    "lookbehind": lookbehind,
    "positive-lookbehind": lookbehind,
    "negative-lookahead": negative_lookahead,
    "negative_lookahead": negative_lookahead,
    "nlookahead": negative_lookahead,
    "negative-lookbehind": negative_lookbehind,
    "negative_lookbehind": negative_lookbehind,
    "nlookbehind": negative_lookbehind,
    "optional": lambda p: as_pattern(p).optional(),
    "?": lambda p: as_pattern(p).optional(),
    "anchored": lambda p: compose("^", p, "$"),
}


def as_group(pattern: Pattern | str, kind_or_name: str | None = None) -> Pattern:
    """Wrap ``pattern`` in a group of the given kind, or bind it to a name.

    Kinds: capturing (also None), non-capturing / nc, lookahead,
    lookbehind, negative-lookahead, negative-lookbehind, optional and
    anchored. Any other value is used as a group name.
    """
    if not kind_or_name:
        return capturing(pattern)
    builder = _GROUP_KINDS.get(kind_or_name)
    if builder is not None:
        return builder(pattern)
    return rename_group(pattern, kind_or_name)


# ============================================================================
# Repetition and alternation
# ============================================================================


def quantifier(min_count: int = 0, max_count: int | float | None = None) -> str:
    """Build a quantifier suffix.

    ``max_count=None`` repeats exactly ``min_count`` times and
    ``math.inf`` means no upper bound.

    Examples:
        >>> quantifier(0, math.inf), quantifier(1, math.inf), quantifier(2, 5)
        ('*', '+', '{2,5}')
    """
    if max_count is None:
        max_count = min_count
    if min_count < 0 or max_count < min_count:
        raise FormatError(
            f"Invalid repetition bounds ({min_count}, {max_count})",
            code=ErrorCode.MALFORMED_QUANTIFIER,
            user_message="max_count must be greater than or equal to min_count.",
        )
    if max_count == 0:
        raise FormatError(
            "Repetition max_count must be greater than 0",
            code=ErrorCode.MALFORMED_QUANTIFIER,
        )
    unbounded = math.isinf(max_count)
    if min_count == 0 and unbounded:
        return "*"
    if min_count == 1 and unbounded:
        return "+"
    if unbounded:
        return f"{{{min_count},}}"
    if min_count == max_count:
        return f"{{{min_count}}}"
    return f"{{{min_count},{int(max_count)}}}"


def repeated(
    pattern: Pattern | str, min_count: int = 0, max_count: int | float | None = math.inf
) -> Pattern:
    return as_pattern(pattern).repeated(min_count, max_count)


def _alternative_source(part: Pattern | str) -> str:
    return part.source if isinstance(part, Pattern) else escape(part)


def any_of(*parts: Pattern | str) -> Pattern:
    """Match any one of ``parts``; plain strings match literally."""
    patterns = [p for p in parts if isinstance(p, Pattern)]
    body = "|".join(_alternative_source(p) for p in parts)
    return compose(
        f"(?:{body})",
        flags=frozenset().union(*(p.flags for p in patterns)),
        transformations=merge_transformations(*(p.transformations for p in patterns)),
    )


def none_of(*parts: Pattern | str) -> Pattern:
    """Match a non-empty run of text containing none of ``parts``."""
    patterns = [p for p in parts if isinstance(p, Pattern)]
    alternatives = "|".join(f"(?:{_alternative_source(p)})" for p in parts)
    return compose(
        rf"(?:(?!{alternatives})[\s\S])+",
        flags=frozenset().union(*(p.flags for p in patterns)),
    )


def word_list(
    words: Iterable[str],
    ignore_case: bool = True,
    whole_words: bool = True,
    flexible_spaces: bool = True,
    capture_name: str | None = None,
) -> Pattern:
    """Match any word or phrase from ``words``.

    Longer entries are tried first so ``"West Virginia"`` wins over
    ``"Virginia"``.
    """
    parts = []
    for word in words:
        word = word.strip()
        if not word:
            continue
        part = escape(word)
        if flexible_spaces:
            part = re.sub(r"\s+", lambda _: r"\s+", part)
        parts.append(part)
    parts.sort(key=len, reverse=True)

    body = f"(?:{'|'.join(parts)})"
    if whole_words:
        body = rf"\b{body}\b"
    pattern = Pattern(body, Flag.IGNORE_CASE.value if ignore_case else "")
    if capture_name:
        pattern = rename_group(pattern, capture_name)
    return pattern


# ============================================================================
# Line templates
# ============================================================================


def padded(*fragments: Fragment) -> Pattern:
    """Allow whitespace on both sides."""
    return compose(r"\s*", *fragments, r"\s*")


def line(*fragments: Fragment) -> Pattern:
    """Match a whole line without relying on the MULTILINE flag."""
    return compose(START_LINE, *fragments, r"\s*", END_LINE)


def mline(*fragments: Fragment) -> Pattern:
    """Match a whole line using ``^``/``$`` and the MULTILINE flag."""
    return compose("^", *fragments, "$").add_flags(Flag.MULTILINE)


def separator(*fragments: Fragment) -> Pattern:
    """Split the input around ``fragments`` into before, match and after groups."""
    return compose(
        "(?P<before>", ANY, "*?)(?P<match>", *fragments, ")(?P<after>", ANY, "*)"
    )


# ============================================================================
# Delimiters
# ============================================================================


def wrapped(delimiter: str, group_name: str = "wrapper") -> Builder:
    """Builder for text between two copies of the same delimiter.

    The opening delimiter is captured as ``group_name`` and matched again
    by backreference; the content is captured as ``key``.
    """

    def build(*fragments: Fragment) -> Pattern:
        return compose(
            f"(?P<{group_name}>{delimiter})(?P<key>", *fragments, f")(?P={group_name})"
        )

    return build


ANY_QUOTATION = Pattern("[`'\"]")

triple_backtick = wrapped("```")
triple_tick = wrapped("'''")
triple_quotation = wrapped('"""')
triple_quote = wrapped("```|'''|\"\"\"")
backtick = wrapped("`")
tick = wrapped("'")
quotation = wrapped('"')
quote = wrapped(ANY_QUOTATION.source)


def parenth(*fragments: Fragment) -> Pattern:
    return compose(r"\(", padded(*fragments), r"\)")


def square_bracket(*fragments: Fragment) -> Pattern:
    return compose(r"\[", padded(*fragments), r"\]")


def curly_bracket(*fragments: Fragment) -> Pattern:
    return compose(r"\{", padded(*fragments), r"\}")


# ============================================================================
# Source rewriting and stacking
# ============================================================================


def replaced_pattern(replacements: Sequence[tuple[Pattern | str, Fragment]]) -> Builder:
    """Builder that rewrites the composed source with regex replacements.

    Each ``(find, replacement)`` pair is applied in order; ``find`` is a
    regex over the pattern source and ``replacement`` is inserted as
    regex source. Flags of Pattern replacements are added to the result.
    """

    def build(*fragments: Fragment) -> Pattern:
        pattern = compose(*fragments)
        source = pattern.source
        flags = set(pattern.flags)
        for find, replacement in replacements:
            finder = find.compiled if isinstance(find, Pattern) else re.compile(find)
            if isinstance(replacement, Pattern):
                flags |= replacement.flags
                text = replacement.source
            else:
                text = "" if replacement is None else str(replacement)
            source = finder.sub(lambda _: text, source)
        return Pattern(source, frozenset(flags), pattern.transformations)

    return build


_spaced = replaced_pattern([
    (r"(?:\\n)+", r"\s+"),
    (r"(?:\\t)+", r"\s+"),
    (r"\s+", r"\s+"),
    (r"(?:\\s\+){2,}", r"\s+"),
])


def spaced(*fragments: Fragment) -> Pattern:
    """Let any run of whitespace in the source match ``\\s+``."""
    return _spaced(*fragments)


def stack(*builders: Builder) -> Builder:
    """Combine builders; ``stack(a, b)(x)`` is ``a(b(x))``."""

    def build(*fragments: Fragment) -> Pattern:
        pattern = compose(*fragments)
        for builder in reversed(builders):
            pattern = builder(pattern)
        return pattern

    return build


padded_line = stack(line, padded)
padded_mline = stack(mline, padded)
