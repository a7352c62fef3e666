"""
Tests for the parser resolver.

These tests verify:
- The default transform decodes only JSON objects and arrays
- Function, Ignore, PassThrough and Cascade transformations
- Unnest markers, local child names and groups-hooks on nodes
"""

import math

import pytest

from repart import IGNORE, PASS_THROUGH, Function, Pattern, execute_match, parse
from repart.matching import ParsedNode, default_transform


def parse_text(input, pattern, **options):
    return parse(execute_match(input, pattern, **options))


class TestDefaultTransform:
    """Tests for default_transform."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ('{"a": 1}', {"a": 1}),
            ("[1, 2]", [1, 2]),
            (" [1] ", [1]),
            ("25", "25"),
            ("true", "true"),
            ('"quoted"', '"quoted"'),
            ("{bad", "{bad"),
            ("", ""),
        ],
    )
    def test_default_transform(self, text, expected):
        assert default_transform(text) == expected


class TestParse:
    """Tests for parse on single matches."""

    def test_none(self):
        assert parse(None) is None

    def test_root_node(self):
        node = parse_text("ab 12", r"(?P<n>\d+)")
        assert isinstance(node, ParsedNode)
        assert node.name is None
        assert node.parsed == "12"
        assert (node.text, node.start, node.end) == ("12", 3, 5)
        assert node.groups["n"].parsed == "12"

    def test_function(self):
        node = parse_text("7", Pattern(r"(?P<n>\d)", transformations={"n": int}))
        assert node.groups["n"].parsed == 7
        assert node.groups["n"].unnest is False

    def test_function_with_offset(self):
        fn = Function(lambda text, offset: (text, offset), with_offset=True)
        node = parse_text("abc12", Pattern(r"(?P<n>\d+)", transformations={"n": fn}))
        assert node.groups["n"].parsed == ("12", 3)

    def test_ignore(self):
        node = parse_text("x1", Pattern(r"x(?P<n>\d)", transformations={"n": IGNORE}))
        child = node.groups["n"]
        assert child.parsed == {}
        assert child.groups == {}
        assert child.unnest is True

    def test_ignore_drops_children(self):
        pattern = Pattern(r"(?P<a>(?P<a____b>\d))", transformations={"a": None})
        assert parse_text("1", pattern).groups["a"].groups == {}

    def test_pass_through(self):
        pattern = Pattern(r"(?P<j>.*)", transformations={"j": PASS_THROUGH})
        assert parse_text("[1]", pattern).groups["j"].parsed == "[1]"

    def test_unnest_marker(self):
        pattern = Pattern(r"(?P<n>\d)", transformations={"_n": int})
        child = parse_text("5", pattern).groups["n"]
        assert child.parsed == 5
        assert child.unnest is True

    def test_unnest_marker_without_transformation(self):
        pattern = Pattern(r"(?P<n>\d)", transformations={"_n": PASS_THROUGH})
        assert parse_text("5", pattern).groups["n"].unnest is True

    def test_local_child_names(self):
        pattern = Pattern(r"(?P<a>(?P<a____b>\d))")
        node = parse_text("1", pattern)
        assert list(node.groups["a"].groups) == ["b"]

    def test_groups_hook_attached(self):
        pattern = Pattern(r"(?P<a>(?P<a____b>\d))", transformations={"a____groups": len})
        node = parse_text("1", pattern)
        assert node.groups["a"].groups_hook is not None
        assert node.groups_hook is None

    def test_to_dict(self):
        data = parse_text("7", Pattern(r"(?P<n>\d)", transformations={"n": int})).to_dict()
        assert data["groups"]["n"]["parsed"] == 7
        assert data["unnest"] is False


class TestCascade:
    """Tests for cascading sub-patterns."""

    def test_cascade_replaces_node(self):
        pattern = Pattern(r"key=(?P<block>.*)", transformations={"block": r"(?P<x>\d+)"})
        child = parse_text("key=ab 42", pattern).groups["block"]
        assert child.name is None
        assert child.pattern.source == r"(?P<x>\d+)"
        assert child.groups["x"].text == "42"
        assert child.groups["x"].start == 7

    def test_cascade_no_match(self, log_messages):
        pattern = Pattern(r"key=(?P<block>.*)", transformations={"block": r"(?P<x>\d+)"})
        assert parse_text("key=none", pattern).groups["block"] is None
        assert any("found no match" in m for m in log_messages)

    def test_cascade_global_gives_list(self):
        pattern = Pattern(r"(?P<items>.*)", transformations={"items": Pattern(r"\d+", "g")})
        child = parse_text("1,2,3", pattern).groups["items"]
        assert [n.text for n in child] == ["1", "2", "3"]

    def test_cascade_unnest(self):
        pattern = Pattern(r"(?P<block>.*)", transformations={"_block": r"(?P<x>\d)"})
        assert parse_text("5", pattern).groups["block"].unnest is True

    def test_cascade_uses_sub_pattern_map(self):
        sub = Pattern(r"(?P<x>\d)", transformations={"x": int})
        pattern = Pattern(r"(?P<block>.*)", transformations={"block": sub})
        assert parse_text("5", pattern).groups["block"].groups["x"].parsed == 5


class TestParseLists:
    """Tests for parse on multi-match results."""

    def test_elementwise(self):
        nodes = parse_text("1 2", r"\d", max_matches=math.inf)
        assert [n.parsed for n in nodes] == ["1", "2"]

    def test_unnest_propagates(self):
        raw = execute_match("1 2", r"\d", max_matches=math.inf)
        assert all(n.unnest for n in parse(raw, unnest=True))

    def test_empty(self):
        assert parse(execute_match("ab", r"\d", max_matches=math.inf)) == []
