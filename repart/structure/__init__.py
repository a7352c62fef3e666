"""Structural analysis of pattern source text.

Components:
- scan / iter_tokens: escape-aware scanner for group delimiters
- build_group_index: memoised, ordered group descriptors for a source
- GroupIndex: lookup helpers over the descriptors

Usage:
    from repart.structure import GroupIndex

    index = GroupIndex(r"(?P<key>\\w+)=(?P<value>\\d+)")
    print(index.render())
"""

from .scanner import GroupKind, Token, is_escaped, iter_tokens, scan
from .groups import GroupDescriptor, GroupIndex, build_group_index

__all__ = [
    "GroupKind",
    "Token",
    "is_escaped",
    "iter_tokens",
    "scan",
    "GroupDescriptor",
    "GroupIndex",
    "build_group_index",
]
