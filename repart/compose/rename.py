"""Group renaming and subtree templating.

``rename_group`` binds a whole pattern to one name. ``template_group``
moves every group of a pattern into a named scope (``scope____inner``)
so the extracted result nests under the scope name. Both rekey the
transformation map to follow the renamed groups.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping

from repart.constants import GROUPS_HOOK_KEY, RESERVED_GROUP_NAMES, UNNEST_MARKER
from repart.pattern import Pattern, as_pattern
from repart.structure.groups import GroupIndex
from repart.structure.scanner import GroupKind
from repart.transformations import (
    GroupsHook,
    MapValue,
    hook_key,
    scope_prefix,
)
from repart.types.errors import (
    ErrorCode,
    ErrorContext,
    GroupNameError,
    RecoveryAction,
)
from repart.utils.logger import logger

_NAMED_PREFIX = "(?P<"
_BACKREF_PREFIX = "(?P="


def validate_group_name(name: str, existing: list[str] | None = None) -> None:
    """Check that ``name`` can be added to a pattern.

    Raises:
        GroupNameError: If the name is not an identifier, is reserved, or
            is already used in ``existing``.
    """
    context = ErrorContext(operation="validate_group_name", group_name=name)
    if not isinstance(name, str) or not name.isidentifier():
        raise GroupNameError(
            f"Invalid group name {name!r}",
            code=ErrorCode.INVALID_NAME,
            user_message=f"'{name}' is not a valid group name.",
            context=context,
            recovery_actions=[RecoveryAction("Use letters, digits and underscores", example="user_id")],
        )
    if name in RESERVED_GROUP_NAMES:
        raise GroupNameError(
            f"Group name {name!r} is reserved",
            code=ErrorCode.RESERVED_NAME,
            user_message=f"'{name}' is reserved and cannot name a group.",
            context=context,
            recovery_actions=[RecoveryAction("Pick a different name", example=f"{name}_value")],
        )
    if existing and name in existing:
        raise GroupNameError(
            f"Group name {name!r} already exists in pattern. Existing groups: {', '.join(existing)}",
            code=ErrorCode.DUPLICATE_NAME,
            user_message=f"The pattern already has a group named '{name}'.",
            context=context,
        )


def _split_marker(key: str) -> tuple[str, str]:
    if key.startswith(UNNEST_MARKER):
        return UNNEST_MARKER, key[len(UNNEST_MARKER):]
    return "", key


def rewrite_group_names(source: str, index: GroupIndex, renames: Mapping[str, str]) -> str:
    """Rename named groups and their ``(?P=name)`` backreferences."""
    edits: list[tuple[int, int, str]] = []
    for group in index:
        if group.kind is GroupKind.NAMED and group.name in renames:
            name_start = group.start + len(_NAMED_PREFIX)
            edits.append((name_start, name_start + len(group.name), renames[group.name]))
        elif source.startswith(_BACKREF_PREFIX, group.start):
            name_start = group.start + len(_BACKREF_PREFIX)
            name = source[name_start:group.end - 1]
            if name in renames:
                edits.append((name_start, group.end - 1, renames[name]))
    for start, end, replacement in sorted(edits, reverse=True):
        source = source[:start] + replacement + source[end:]
    return source


def _rekey_scope(transformations: Mapping[str, MapValue], old: str, new: str) -> dict[str, MapValue]:
    """Rekey ``old``, ``_old``, ``old____*`` and ``_old____*`` to ``new``."""
    old_prefix = scope_prefix(old)
    rekeyed: dict[str, MapValue] = {}
    for key, value in transformations.items():
        marker, bare = _split_marker(key)
        if bare == old:
            key = marker + new
        elif bare.startswith(old_prefix):
            key = marker + scope_prefix(new) + bare[len(old_prefix):]
        rekeyed[key] = value
    return rekeyed


def rename_group(pattern: Pattern | str, new_name: str) -> Pattern:
    """Bind a whole pattern to the group name ``new_name``.

    A pattern that is already one named group spanning its source has
    that group renamed in place (with its scoped descendants); a single
    plain capturing group becomes the named group; anything else is
    wrapped in a new named group.

    Raises:
        GroupNameError: If ``new_name`` is invalid, reserved or taken.
    """
    pattern = as_pattern(pattern)
    index = pattern.index
    validate_group_name(new_name, index.group_names)

    whole = index.whole_group
    transformations: Mapping[str, MapValue] = pattern.transformations
    if whole is not None and whole.kind is GroupKind.NAMED:
        old = whole.name
        old_prefix = scope_prefix(old)
        renames = {old: new_name}
        for name in index.group_names:
            if name.startswith(old_prefix):
                renames[name] = scope_prefix(new_name) + name[len(old_prefix):]
        source = rewrite_group_names(pattern.source, index, renames)
        transformations = _rekey_scope(transformations, old, new_name)
        logger.debug("Renamed group {} -> {}", old, new_name)
    elif whole is not None and whole.kind is GroupKind.CAPTURING:
        source = f"{_NAMED_PREFIX}{new_name}>{index.content_source(whole.index)})"
        logger.debug("Named capturing group as {}", new_name)
    else:
        source = f"{_NAMED_PREFIX}{new_name}>{pattern.source})"
        logger.debug("Wrapped pattern in group {}", new_name)

    return Pattern(source, pattern.flags, transformations)


def collapse_single(groups: Any) -> Any:
    """Reduce a one-key mapping to its value; anything else is unchanged."""
    if isinstance(groups, Mapping) and len(groups) == 1:
        return next(iter(groups.values()))
    return groups


def _chain_hooks(
    inner: GroupsHook | None, outer: Callable[[Any], Any]
) -> GroupsHook:
    def run(groups: dict[str, Any]) -> Any:
        if inner is not None:
            groups = inner(groups)
        return outer(groups)

    return GroupsHook(run)


def template_group(
    pattern: Pattern | str,
    name: str,
    hook: Callable[[dict[str, Any]], Any] | None = None,
) -> Pattern:
    """Scope every group of ``pattern`` under ``name``.

    Each named group ``g`` becomes ``name____g`` and the source is
    wrapped in ``(?P<name>...)``, so the extracted value nests under
    ``name``. The pattern's own root hook moves to ``name____groups``
    and is followed by ``hook``, or by ``collapse_single`` when no hook
    is given.

    Raises:
        GroupNameError: If ``name`` is invalid, reserved or taken.
    """
    pattern = as_pattern(pattern)
    index = pattern.index
    validate_group_name(name, index.group_names)

    prefix = scope_prefix(name)
    renames = {g: prefix + g for g in index.group_names}
    source = f"{_NAMED_PREFIX}{name}>{rewrite_group_names(pattern.source, index, renames)})"

    transformations: dict[str, MapValue] = {}
    for key, value in pattern.transformations.items():
        if key == GROUPS_HOOK_KEY:
            continue
        marker, bare = _split_marker(key)
        transformations[marker + prefix + bare] = value

    outer = hook if hook is not None else collapse_single
    transformations[hook_key(name)] = _chain_hooks(pattern.hook_for(None), outer)
    logger.debug("Templated {} groups under {}", len(renames), name)

    return Pattern(source, pattern.flags, transformations)
