"""The Pattern value type.

A Pattern bundles regex source, mode flags and a transformation map.
It is immutable: every method that changes one of the three returns a
new Pattern. The source is validated on construction, so malformed
patterns fail before anything is matched.

Usage:
    from repart import Pattern

    p = Pattern(r"(?P<key>\\w+)=(?P<value>\\d+)", transformations={"value": int})
    p.match_and_extract("port=8080")   # {"key": "port", "value": 8080}
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field, replace
from functools import cached_property
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Mapping

from repart.flags import Flag, FlagsLike, flags_to_string, parse_flags, to_re_flags
from repart.structure.groups import GroupIndex
from repart.structure.scanner import is_escaped
from repart.transformations import (
    GroupsHook,
    Transformation,
    hook_key,
    merge_transformations,
    normalize_transformations,
    unnest_key,
)
from repart.types.errors import (
    ErrorCode,
    ErrorContext,
    FormatError,
    RecoveryAction,
    StructureError,
)

if TYPE_CHECKING:
    from repart.matching import MatchResult
    from repart.matching.results import RawMatch, RawMatches

_ANCHOR_MODES = {
    "^": (True, False),
    "start": (True, False),
    "$": (False, True),
    "end": (False, True),
    "^$": (True, True),
    "both": (True, True),
}


def _anchor_sides(mode: str) -> tuple[bool, bool]:
    try:
        return _ANCHOR_MODES[mode]
    except KeyError:
        raise ValueError(
            f"Invalid anchor mode {mode!r}; expected one of {sorted(_ANCHOR_MODES)}"
        ) from None


@dataclass(frozen=True)
class Pattern:
    """Regex source plus flags and per-group transformations.

    Args:
        source: Regex source in Python ``re`` syntax.
        flags: Flag string (``"gi"``) or iterable of Flag.
        transformations: Map from group name to transformation; loose
            values (None, callables, patterns, strings) are coerced.

    Raises:
        StructureError: Unbalanced groups or source ``re`` rejects.
        FormatError: Malformed quantifier braces or unknown flags.
    """

    source: str
    flags: FlagsLike = frozenset()
    transformations: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "flags", parse_flags(self.flags))
        object.__setattr__(
            self,
            "transformations",
            MappingProxyType(normalize_transformations(self.transformations)),
        )
        # Fail at construction, not at first match
        self.index
        self.compiled

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Pattern):
            return NotImplemented
        return (
            self.source == other.source
            and self.flags == other.flags
            and dict(self.transformations) == dict(other.transformations)
        )

    def __hash__(self) -> int:
        return hash((self.source, self.flags, tuple(self.transformations)))

    def __str__(self) -> str:
        return self.source

    def __repr__(self) -> str:
        parts = [repr(self.source)]
        if self.flags:
            parts.append(f"flags={flags_to_string(self.flags)!r}")
        if self.transformations:
            parts.append(f"transformations={sorted(self.transformations)!r}")
        return f"Pattern({', '.join(parts)})"

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    @cached_property
    def index(self) -> GroupIndex:
        return GroupIndex(self.source)

    @cached_property
    def compiled(self) -> re.Pattern:
        try:
            return re.compile(self.source, to_re_flags(self.flags))
        except re.error as e:
            raise StructureError(
                f"Regex engine rejected pattern: {e}",
                code=ErrorCode.INVALID_SOURCE,
                user_message="Pattern source is not a valid regular expression.",
                context=ErrorContext(
                    operation="compile", source=self.source, position=e.pos
                ),
                recovery_actions=[
                    RecoveryAction("Escape literal metacharacters", example=r"\. \( \["),
                ],
                original_error=e,
            ) from e
        except OverflowError as e:
            raise FormatError(
                f"Quantifier repetition count too large: {e}",
                code=ErrorCode.MALFORMED_QUANTIFIER,
                user_message="A repetition count in the pattern is too large.",
                context=ErrorContext(operation="compile", source=self.source),
                original_error=e,
            ) from e

    @property
    def group_names(self) -> list[str]:
        return self.index.group_names

    def render(self) -> str:
        return self.index.render()

    # ------------------------------------------------------------------
    # Transformation lookup
    # ------------------------------------------------------------------

    def lookup(self, name: str | None) -> tuple[Transformation | None, bool]:
        """Find the transformation for a group.

        Returns the entry for ``name`` (or ``_name`` when there is none),
        and whether the unnest-marked key is present.
        """
        if name is None:
            return None, False
        marked = unnest_key(name)
        unnest = marked in self.transformations
        value = self.transformations.get(name)
        if value is None:
            value = self.transformations.get(marked)
        if isinstance(value, GroupsHook):
            value = None
        return value, unnest

    def hook_for(self, name: str | None) -> GroupsHook | None:
        """Groups-hook for named group ``name``, or the root hook for None."""
        value = self.transformations.get(hook_key(name))
        return value if isinstance(value, GroupsHook) else None

    # ------------------------------------------------------------------
    # Flags and transformations
    # ------------------------------------------------------------------

    def with_flags(self, flags: FlagsLike) -> Pattern:
        """Replace the flag set."""
        return replace(self, flags=parse_flags(flags))

    def add_flags(self, flags: FlagsLike) -> Pattern:
        return replace(self, flags=self.flags | parse_flags(flags))

    def remove_flags(self, flags: FlagsLike) -> Pattern:
        return replace(self, flags=self.flags - parse_flags(flags))

    def with_transformations(
        self, transformations: Mapping[str, Any] | None = None, **kwargs: Any
    ) -> Pattern:
        """Merge more transformations in; new keys win on collision."""
        merged = merge_transformations(
            self.transformations,
            normalize_transformations(transformations),
            normalize_transformations(kwargs),
        )
        return replace(self, transformations=merged)

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    def bind(self, name: str) -> Pattern:
        """Name the whole pattern ``name``."""
        from repart.compose.rename import rename_group

        return rename_group(self, name)

    def template(
        self, name: str, hook: Callable[[dict[str, Any]], Any] | None = None
    ) -> Pattern:
        """Scope every group under ``name`` and nest the extracted result there."""
        from repart.compose.rename import template_group

        return template_group(self, name, hook)

    def then(self, *fragments: Any) -> Pattern:
        from repart.compose.builder import compose

        return compose(self, *fragments)

    def wrapped_with(self, before: Any = None, after: Any = None) -> Pattern:
        """Surround with ``before`` and ``after`` (defaults to ``before``).

        Plain strings without backslashes are treated as literal text.
        """
        from repart.compose.builder import compose, escape

        def literal(value: Any) -> Any:
            if isinstance(value, str) and "\\" not in value:
                return escape(value)
            return value

        if after is None:
            after = before
        return compose(literal(before), self, literal(after))

    def optional(self) -> Pattern:
        from repart.compose.builder import compose, is_atomic

        if is_atomic(self.source):
            return compose(self, "?")
        return compose("(", self, ")?")

    def repeated(self, min_count: int = 0, max_count: int | float | None = math.inf) -> Pattern:
        """Repeat the pattern; see ``repart.compose.generic.quantifier``."""
        from repart.compose.builder import compose, is_atomic
        from repart.compose.generic import quantifier

        suffix = quantifier(min_count, max_count)
        if is_atomic(self.source):
            return compose(self, suffix)
        return compose("(", self, ")", suffix)

    def spaced(self) -> Pattern:
        """Let any run of whitespace in the source match ``\\s+``."""
        from repart.compose.generic import spaced

        return spaced(self)

    def anchor(self, mode: str = "both", multiline: bool | None = None) -> Pattern:
        """Add ``^`` and/or ``$`` anchors.

        ``multiline=True`` adds the MULTILINE flag, ``False`` removes it and
        None leaves the flags alone.
        """
        start, end = _anchor_sides(mode)
        source = self.source
        flags = set(self.flags)
        if multiline is True:
            flags.add(Flag.MULTILINE)
        elif multiline is False:
            flags.discard(Flag.MULTILINE)
        if start and not source.startswith("^"):
            source = "^" + source
        if end and not (source.endswith("$") and not is_escaped(source, len(source) - 1)):
            source = source + "$"
        return replace(self, source=source, flags=frozenset(flags))

    def unanchor(self, mode: str = "both", remove_multiline: bool = False) -> Pattern:
        """Strip leading ``^`` and/or trailing ``$`` anchors."""
        start, end = _anchor_sides(mode)
        source = self.source
        flags = set(self.flags)
        if remove_multiline:
            flags.discard(Flag.MULTILINE)
        if start and source.startswith("^"):
            source = source[1:]
        if end and source.endswith("$") and not is_escaped(source, len(source) - 1):
            source = source[:-1]
        return replace(self, source=source, flags=frozenset(flags))

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------

    def match_raw(self, input: str, **options: Any) -> RawMatch | RawMatches | None:
        from repart.matching.executor import execute_match

        return execute_match(input, self, **options)

    def match(self, input: str, **options: Any) -> MatchResult:
        from repart.matching import match

        return match(input, self, **options)

    def match_and_extract(self, input: str, **options: Any) -> Any:
        from repart.matching import match_and_extract

        return match_and_extract(input, self, **options)


def as_pattern(value: Pattern | str | int) -> Pattern:
    """Accept a Pattern or raw regex source."""
    if isinstance(value, Pattern):
        return value
    if isinstance(value, (str, int)) and not isinstance(value, bool):
        return Pattern(str(value))
    raise TypeError(f"Expected Pattern or regex source, got {type(value).__name__}")
