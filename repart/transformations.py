"""Per-group transformations attached to a Pattern.

A transformation map is keyed by group name. A key may carry the unnest
marker (``_name``), which merges the transformed value into the parent
object. ``groups`` holds the root groups-hook and ``name____groups`` the
hook for named group ``name``.

Values are one of Ignore, Function, Cascade or PassThrough, plus
GroupsHook under hook keys. ``as_transformation`` coerces the loose
values callers usually write (None, callables, patterns, strings).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Mapping, Union

from repart.constants import GROUPS_HOOK_KEY, SCOPE_SEPARATOR, UNNEST_MARKER

if TYPE_CHECKING:
    from repart.pattern import Pattern


@dataclass(frozen=True)
class Ignore:
    """Drop the group: its value becomes ``{}`` and is merged into the parent."""


@dataclass(frozen=True)
class PassThrough:
    """Keep the matched text unchanged."""


@dataclass(frozen=True)
class Function:
    """Call ``callback(text)``, or ``callback(text, offset=start)`` with ``with_offset``."""

    callback: Callable[..., Any]
    with_offset: bool = False

    def __call__(self, text: str, start: int) -> Any:
        if self.with_offset:
            return self.callback(text, offset=start)
        return self.callback(text)


@dataclass(frozen=True)
class Cascade:
    """Re-match the group's text against a sub-pattern."""

    pattern: Pattern


@dataclass(frozen=True)
class GroupsHook:
    """Rewrites a node's extracted child object before it is nested or merged."""

    callback: Callable[[dict[str, Any]], Any]

    def __call__(self, groups: dict[str, Any]) -> Any:
        return self.callback(groups)


Transformation = Union[Ignore, Function, Cascade, PassThrough]
MapValue = Union[Transformation, GroupsHook]
TransformationMap = Mapping[str, MapValue]

IGNORE = Ignore()
PASS_THROUGH = PassThrough()

_VARIANTS = (Ignore, Function, Cascade, PassThrough)


def unnest_key(name: str) -> str:
    return UNNEST_MARKER + name


def hook_key(name: str | None = None) -> str:
    """Map key of the groups-hook for ``name``, or the root hook for None."""
    if name is None:
        return GROUPS_HOOK_KEY
    return f"{name}{SCOPE_SEPARATOR}{GROUPS_HOOK_KEY}"


def is_hook_key(key: str) -> bool:
    return key == GROUPS_HOOK_KEY or key.endswith(SCOPE_SEPARATOR + GROUPS_HOOK_KEY)


def scope_prefix(name: str) -> str:
    return name + SCOPE_SEPARATOR


def local_name(name: str, parent: str | None) -> str:
    """Strip the parent's scope prefix: ``local_name("a____b", "a") == "b"``."""
    if parent is not None and name.startswith(scope_prefix(parent)):
        return name[len(scope_prefix(parent)):]
    return name


def as_transformation(value: Any, key: str | None = None) -> MapValue:
    """Coerce a loose map value into a Transformation or GroupsHook.

    Args:
        value: None, a callable, a Pattern, a pattern source string, or an
            existing Transformation/GroupsHook.
        key: Map key the value is stored under. Callables under a hook
            key become GroupsHook.

    Raises:
        TypeError: If the value cannot be coerced.
    """
    from repart.pattern import Pattern

    if isinstance(value, (*_VARIANTS, GroupsHook)):
        return value
    if value is None:
        return IGNORE
    if isinstance(value, Pattern):
        return Cascade(value)
    if isinstance(value, str):
        return Cascade(Pattern(value))
    if callable(value):
        if key is not None and is_hook_key(key):
            return GroupsHook(value)
        return Function(value)
    raise TypeError(
        f"Cannot use {type(value).__name__} as a transformation"
        + (f" for {key!r}" if key else "")
    )


def normalize_transformations(
    transformations: Mapping[str, Any] | None,
) -> dict[str, MapValue]:
    """Coerce every value of a loose transformation map."""
    if not transformations:
        return {}
    return {key: as_transformation(value, key) for key, value in transformations.items()}


def merge_transformations(*maps: Mapping[str, MapValue] | None) -> dict[str, MapValue]:
    """Merge maps left to right; later keys win."""
    merged: dict[str, MapValue] = {}
    for m in maps:
        if m:
            merged.update(m)
    return merged
