"""Extractor: turns a parsed tree into plain Python data.

Named children become dict fields, unnest-marked and unnamed nodes merge
into their parent, groups-hooks rewrite child objects, and lists of
results are collapsed when their shape allows it.
"""

from __future__ import annotations

from typing import Any, Mapping

from .results import ParsedChild

KEY_FIELD = "key"
VALUE_FIELD = "value"


def _hashable(value: Any) -> bool:
    try:
        hash(value)
    except TypeError:
        return False
    return True


def collapse(values: list[Any]) -> Any:
    """Collapse a list of extracted values by its shape.

    The first rule that applies wins:

    1. All single-field dicts with the same field: list of the values.
    2. All dicts with exactly ``key`` and ``value``: dict of key to value
       (later duplicates win).
    3. All dicts with a ``key`` field: dict of key to the whole element.
    4. Otherwise the list is returned unchanged.

    Rules 2 and 3 need hashable keys.
    """
    if not values or not all(isinstance(v, Mapping) for v in values):
        return values

    first = list(values[0])
    if len(first) == 1 and all(len(v) == 1 and first[0] in v for v in values):
        return [v[first[0]] for v in values]

    if not all(KEY_FIELD in v and _hashable(v[KEY_FIELD]) for v in values):
        return values
    if all(set(v) == {KEY_FIELD, VALUE_FIELD} for v in values):
        return {v[KEY_FIELD]: v[VALUE_FIELD] for v in values}
    return {v[KEY_FIELD]: v for v in values}


def _store(value: Any, key: str | None, dest: dict[str, Any]) -> Any:
    if key is not None:
        dest[key] = value
        return dest
    return value


def extract(
    node: ParsedChild | list[ParsedChild],
    key: str | None = None,
    dest: dict[str, Any] | None = None,
    flat: bool = False,
) -> Any:
    """Extract plain data from a parsed tree.

    Args:
        node: A ParsedNode, a list of parsed elements, or None.
        key: Field to store the result under in ``dest``. Defaults to the
            node's group name.
        dest: Object receiving fields; a fresh dict when omitted.
        flat: Merge this node's children into ``dest`` even if named.

    Returns:
        ``dest`` when the value was stored into it, otherwise the bare
        value (None, a collapsed list, or a leaf's parsed value).

    Raises:
        TypeError: If a groups-hook returns a non-mapping that has to be
            merged into a non-empty object.
    """
    if dest is None:
        dest = {}
    if node is None:
        return _store(None, key, dest)

    if isinstance(node, list):
        values = [v for v in (extract(element) for element in node) if v is not None]
        return _store(collapse(values) if values else None, key, dest)

    if key is None:
        key = node.name

    if node.groups:
        obj: Any = {}
        for child_key, child in node.groups.items():
            extract(child, child_key, obj)
        if node.groups_hook is not None:
            obj = node.groups_hook(obj)
        merge = node.unnest or flat or key is None
        if not merge:
            dest[key] = obj
        elif isinstance(obj, Mapping):
            dest.update(obj)
        elif key is not None:
            dest[key] = obj
        elif not dest:
            return obj
        else:
            raise TypeError(
                f"Groups hook returned {type(obj).__name__}, which cannot be merged"
            )
        return dest

    if key is not None:
        if node.unnest and isinstance(node.parsed, Mapping):
            dest.update(node.parsed)
        else:
            dest[key] = node.parsed
        return dest
    if not dest:
        return node.parsed
    return dest
