"""
repart - Regex pattern composition and structured extraction.

Providing:
- Pattern: immutable regex source + flags + per-group transformations
- Composition from fragments, group renaming and subtree templating
- A match -> parse -> extract pipeline that turns matches into plain data

The name is short for "regex parts": patterns are built from parts and
their matches are taken apart again into structured results.
"""

__version__ = "0.1.0"

from repart.flags import Flag, parse_flags
from repart.pattern import Pattern, as_pattern
from repart.transformations import (
    IGNORE,
    PASS_THROUGH,
    Cascade,
    Function,
    GroupsHook,
    Ignore,
    PassThrough,
    as_transformation,
)
from repart.types import (
    FormatError,
    GroupNameError,
    RepartError,
    StallWarning,
    StructureError,
)
from repart.compose import (
    Literal,
    compose,
    escape,
    generic,
    rename_group,
    template_group,
)
from repart.matching import (
    MatchResult,
    ParsedNode,
    RawMatch,
    RawMatches,
    execute_match,
    extract,
    match,
    match_and_extract,
    parse,
)

__all__ = [
    "__version__",
    # Patterns
    "Flag",
    "parse_flags",
    "Pattern",
    "as_pattern",
    # Transformations
    "IGNORE",
    "PASS_THROUGH",
    "Cascade",
    "Function",
    "GroupsHook",
    "Ignore",
    "PassThrough",
    "as_transformation",
    # Composition
    "Literal",
    "compose",
    "escape",
    "generic",
    "rename_group",
    "template_group",
    # Pipeline
    "MatchResult",
    "ParsedNode",
    "RawMatch",
    "RawMatches",
    "execute_match",
    "extract",
    "match",
    "match_and_extract",
    "parse",
    # Errors
    "RepartError",
    "StructureError",
    "FormatError",
    "GroupNameError",
    "StallWarning",
]
