"""
Tests for group renaming and subtree templating.

These tests verify:
- Group name validation (invalid, reserved, duplicate)
- rename_group binds, names or renames in place with scoped children
- template_group scopes every group and nests the extracted result
- Groups-hooks chain from inner templates to outer ones
"""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from repart import Pattern, compose
from repart.compose import (
    collapse_single,
    rename_group,
    rewrite_group_names,
    template_group,
    validate_group_name,
)
from repart.constants import RESERVED_GROUP_NAMES
from repart.transformations import Function, GroupsHook
from repart.types import ErrorCode, GroupNameError


# =============================================================================
# Validation
# =============================================================================


class TestValidateGroupName:
    """Tests for validate_group_name."""

    def test_valid(self):
        validate_group_name("user_id", ["name"])

    @pytest.mark.parametrize("name", ["1abc", "a-b", "", "a b"])
    def test_invalid(self, name):
        with pytest.raises(GroupNameError) as exc_info:
            validate_group_name(name)
        assert exc_info.value.code == ErrorCode.INVALID_NAME

    @pytest.mark.parametrize("name", sorted(RESERVED_GROUP_NAMES))
    def test_reserved(self, name):
        with pytest.raises(GroupNameError) as exc_info:
            validate_group_name(name)
        assert exc_info.value.code == ErrorCode.RESERVED_NAME

    def test_duplicate(self):
        with pytest.raises(GroupNameError, match="already exists") as exc_info:
            validate_group_name("a", ["a", "b"])
        assert exc_info.value.code == ErrorCode.DUPLICATE_NAME
        assert exc_info.value.context.group_name == "a"


# =============================================================================
# Renaming
# =============================================================================


class TestRewriteGroupNames:
    """Tests for rewrite_group_names."""

    def test_renames_backreferences(self):
        pattern = Pattern("(?P<q>')(?P<body>[^']*)(?P=q)")
        source = rewrite_group_names(pattern.source, pattern.index, {"q": "mark"})
        assert source == "(?P<mark>')(?P<body>[^']*)(?P=mark)"

    def test_unlisted_names_unchanged(self):
        pattern = Pattern("(?P<a>x)(?P<b>y)")
        assert rewrite_group_names(pattern.source, pattern.index, {"b": "bb"}) == "(?P<a>x)(?P<bb>y)"


class TestRenameGroup:
    """Tests for rename_group."""

    def test_wraps_plain_source(self):
        assert rename_group(Pattern(r"\d+"), "n").source == r"(?P<n>\d+)"

    def test_names_capturing_group(self):
        assert rename_group(r"(\d+)", "n").source == r"(?P<n>\d+)"

    def test_wraps_quantified_group(self):
        assert rename_group("(a)+", "n").source == "(?P<n>(a)+)"

    def test_renames_named_group_in_place(self):
        pattern = Pattern(
            r"(?P<a>(?P<a____x>\d)(?P<y>\d))",
            "i",
            transformations={"a____x": int, "_a": None, "y": str},
        )
        renamed = rename_group(pattern, "b")
        assert renamed.source == r"(?P<b>(?P<b____x>\d)(?P<y>\d))"
        assert set(renamed.transformations) == {"b____x", "_b", "y"}
        assert renamed.flags == pattern.flags

    def test_renamed_scope_extracts_under_new_name(self):
        pattern = Pattern(r"(?P<a>(?P<a____x>\d))", transformations={"a____x": int})
        assert rename_group(pattern, "b").match_and_extract("5") == {"b": {"x": 5}}

    def test_existing_name_rejected(self):
        with pytest.raises(GroupNameError):
            rename_group(Pattern("(?P<a>x)(?P<b>y)"), "a")

    def test_reserved_name_rejected(self):
        with pytest.raises(GroupNameError) as exc_info:
            rename_group("x", "parsed")
        assert exc_info.value.code == ErrorCode.RESERVED_NAME

    def test_bound_result_extracts(self):
        assert Pattern(r"\d+").bind("n").match_and_extract("a 42") == {"n": "42"}

    @given(st.from_regex(r"[a-z][a-z0-9]{0,8}", fullmatch=True))
    @settings(max_examples=50)
    def test_bind_any_identifier(self, name):
        if name in RESERVED_GROUP_NAMES:
            return
        pattern = rename_group(Pattern(r"\d+"), name)
        assert pattern.group_names == [name]
        assert pattern.match_and_extract("7") == {name: "7"}


# =============================================================================
# Templating
# =============================================================================


class TestTemplateGroup:
    """Tests for template_group."""

    def test_scoped_source_and_keys(self, int_pattern):
        templated = template_group(int_pattern, "int")
        assert templated.source == r"(?P<int>(?P<int____raw>[+-]?(?P<int____value>\d+)))"
        assert templated.transformations["int____value"] == Function(int)
        assert isinstance(templated.transformations["int____groups"], GroupsHook)
        assert "value" not in templated.transformations

    def test_nested_result(self, int_pattern):
        templated = int_pattern.template("int")
        assert templated.match_and_extract("total: -12") == {"int": {"raw": "-12", "value": 12}}

    def test_single_group_collapses(self):
        count = Pattern(r"(?P<n>\d+)", transformations={"n": int}).template("count")
        assert count.match_and_extract("7") == {"count": 7}

    def test_nested_templates(self, int_pattern):
        outer = int_pattern.template("int").template("outer")
        assert outer.group_names == ["outer", "outer____int", "outer____int____raw", "outer____int____value"]
        assert outer.match_and_extract("-12") == {"outer": {"raw": "-12", "value": 12}}

    def test_inner_root_hook_runs_first(self):
        pair = Pattern(
            r"(?P<a>\w)(?P<b>\w)",
            transformations={"groups": lambda g: g["a"] + g["b"]},
        )
        templated = pair.template("pair")
        assert "groups" not in templated.transformations
        assert templated.match_and_extract("xy") == {"pair": "xy"}

    def test_custom_hook(self, int_pattern):
        templated = int_pattern.template("int", hook=lambda g: g["value"] * 2)
        assert templated.match_and_extract("21") == {"int": 42}

    def test_unnest_marker_kept(self):
        pattern = Pattern(r"(?P<data>\{.*\})", transformations={"_data": None})
        templated = template_group(pattern, "t")
        assert "_t____data" in templated.transformations

    def test_composed_templates(self, int_pattern):
        pattern = compose(int_pattern.template("low"), "-", int_pattern.template("high"))
        assert pattern.match_and_extract("1-5") == {
            "low": {"raw": "1", "value": 1},
            "high": {"raw": "5", "value": 5},
        }

    def test_name_validated(self, int_pattern):
        with pytest.raises(GroupNameError):
            template_group(int_pattern, "groups")
        with pytest.raises(GroupNameError):
            template_group(int_pattern, "raw")


class TestCollapseSingle:
    """Tests for collapse_single."""

    def test_single_key(self):
        assert collapse_single({"n": 1}) == 1

    def test_other_values(self):
        assert collapse_single({"a": 1, "b": 2}) == {"a": 1, "b": 2}
        assert collapse_single({}) == {}
        assert collapse_single("x") == "x"


# =============================================================================
# Properties
# =============================================================================

group_names = st.from_regex(r"[a-z][a-z0-9]{0,8}", fullmatch=True).filter(
    lambda name: name not in RESERVED_GROUP_NAMES
)


class TestStructureProperties:
    """Renaming and composing keep group structure intact."""

    @given(group_names.filter(lambda name: name != "g"))
    @settings(max_examples=50)
    def test_rename_keeps_structure(self, name):
        original = Pattern(r"(?P<g>a(?:b|c)+(d)?)")
        renamed = rename_group(original, name)
        assert renamed.index.group_names == [name]
        assert renamed.index.named(name).level == 0
        assert [(d.kind, d.quantifier) for d in renamed.index] == [
            (d.kind, d.quantifier) for d in original.index
        ]
        assert renamed.index.content_source(0) == original.index.content_source(0)

    @given(st.text(alphabet="xyz-: ", max_size=5))
    @settings(max_examples=50)
    def test_compose_unions_groups_and_maps(self, separator):
        a = Pattern(r"(?P<a>\d)", transformations={"a": int})
        b = Pattern(r"(?P<b>\w)", transformations={"b": None})
        composed = compose(a, separator, b)
        assert set(composed.group_names) == {"a", "b"}
        assert all(g.level == 0 for g in composed.index.named_groups)
        assert dict(composed.transformations) == {**a.transformations, **b.transformations}
