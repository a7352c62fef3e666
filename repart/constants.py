"""Shared constants and helpers for repart.

Centralizes the naming conventions used by transformation maps
(unnest marker, scope separator, groups-hook key), the reserved group
names, and timezone-aware datetime helpers.
"""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime.

    Can be used directly as a ``default_factory`` in dataclass fields.
    """
    return datetime.now(timezone.utc)


# Separates a templated group's scope from the inner group name:
# ``price____value`` is the ``value`` group inside the ``price`` template.
SCOPE_SEPARATOR: str = "____"

# Prefix on a transformation-map key that merges the transformed value
# into the parent object instead of nesting it (``_name``).
UNNEST_MARKER: str = "_"

# Transformation-map key holding the root groups-hook. Hooks for a named
# group ``n`` live under ``n____groups``.
GROUPS_HOOK_KEY: str = "groups"

# Group names that would collide with result attributes or group-kind
# aliases accepted by ``as_group``.
RESERVED_GROUP_NAMES: frozenset[str] = frozenset({
    "capturing",
    "non_capturing",
    "lookahead",
    "lookbehind",
    "negative_lookahead",
    "negative_lookbehind",
    "named",
    "unnamed",
    "nc",
    "optional",
    "anchored",
    "groups",
    "parsed",
    "extracted",
    "parsed_result",
})

# Debug tracing switch read by ``repart.utils.logger.is_debug_enabled``.
DEBUG_ENV_VAR: str = "REPART_DEBUG"
