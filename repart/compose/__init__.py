"""Pattern composition.

Components:
- compose / Literal / escape: concatenate fragments into a Pattern
- rename_group / template_group: bind or scope named groups
- generic: group wrappers, line templates, delimiters and fragments
"""

from .builder import Fragment, Literal, compose, escape, is_atomic, needs_unicode
from .rename import (
    collapse_single,
    rename_group,
    rewrite_group_names,
    template_group,
    validate_group_name,
)
from . import generic

__all__ = [
    "Fragment",
    "Literal",
    "compose",
    "escape",
    "is_atomic",
    "needs_unicode",
    "collapse_single",
    "rename_group",
    "rewrite_group_names",
    "template_group",
    "validate_group_name",
    "generic",
]
