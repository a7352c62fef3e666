"""
Tests for the error hierarchy.

These tests verify:
- Default codes and user messages of each error class
- Formatted messages point at the offending position
- Serialization to dict
- Errors raised by pattern construction carry their context
"""

import pytest

from repart import Pattern
from repart.types import (
    ErrorCode,
    ErrorContext,
    ErrorSeverity,
    FormatError,
    GroupNameError,
    RecoveryAction,
    RepartError,
    StallWarning,
    StructureError,
)


class TestErrorDefaults:
    """Tests for default codes and messages."""

    def test_structure_error_defaults(self):
        """StructureError defaults to UNMATCHED_CLOSE."""
        error = StructureError("bad")
        assert error.code == ErrorCode.UNMATCHED_CLOSE
        assert error.user_message == "Pattern structure is invalid."
        assert error.severity == ErrorSeverity.HIGH
        assert str(error) == "bad"

    def test_format_error_defaults(self):
        """FormatError defaults to MALFORMED_QUANTIFIER."""
        error = FormatError("bad")
        assert error.code == ErrorCode.MALFORMED_QUANTIFIER
        assert error.user_message == "Pattern format is invalid."

    def test_group_name_error_defaults(self):
        """GroupNameError defaults to DUPLICATE_NAME with medium severity."""
        error = GroupNameError("bad")
        assert error.code == ErrorCode.DUPLICATE_NAME
        assert error.severity == ErrorSeverity.MEDIUM

    def test_hierarchy(self):
        """All pattern errors share the RepartError base."""
        for cls in (StructureError, FormatError, GroupNameError):
            assert issubclass(cls, RepartError)
        assert issubclass(StallWarning, UserWarning)

    def test_error_code_ranges(self):
        """Error codes are grouped by category."""
        assert 1000 < ErrorCode.UNCLOSED_GROUP < 2000
        assert 2000 < ErrorCode.UNKNOWN_FLAG < 3000
        assert 3000 < ErrorCode.RESERVED_NAME < 4000


class TestFormatting:
    """Tests for formatted messages and serialization."""

    def test_formatted_message_has_caret(self):
        """The caret sits under the offending character."""
        error = StructureError(
            "Unmatched ')'",
            context=ErrorContext(operation="scan", source="ab)", position=2),
            recovery_actions=[RecoveryAction("Escape it", example=r"\)")],
        )
        lines = error.get_formatted_message().splitlines()
        assert lines[0] == "[Error] Pattern structure is invalid."
        assert lines[1] == "   Code: 1001"
        assert "   Operation: scan" in lines
        source_line = lines.index("   Source: ab)")
        assert lines[source_line + 1] == "           " + "  " + "^"
        assert "   1. Escape it" in lines
        assert r"      e.g. \)" in lines

    def test_formatted_message_group(self):
        """The group name is listed when present."""
        error = GroupNameError("taken", context=ErrorContext(group_name="user"))
        assert "   Group: user" in error.get_formatted_message()

    def test_to_dict(self):
        """to_dict produces JSON-friendly fields."""
        cause = ValueError("inner")
        error = FormatError(
            "bad flag",
            code=ErrorCode.UNKNOWN_FLAG,
            context=ErrorContext(source="gx", position=1),
            original_error=cause,
        )
        data = error.to_dict()
        assert data["name"] == "FormatError"
        assert data["code"] == 2002
        assert data["message"] == "bad flag"
        assert data["context"]["position"] == 1
        assert isinstance(data["context"]["timestamp"], str)
        assert data["recovery_actions"] == []
        assert data["original_error"] == "inner"


class TestRaisedErrors:
    """Errors raised while building patterns."""

    def test_unmatched_close_position(self):
        """An unmatched ')' reports its position."""
        with pytest.raises(StructureError) as exc_info:
            Pattern("a)")
        assert exc_info.value.code == ErrorCode.UNMATCHED_CLOSE
        assert exc_info.value.context.position == 1
        assert exc_info.value.context.source == "a)"

    def test_unclosed_group(self):
        """An unclosed '(' reports the outermost dangling group."""
        with pytest.raises(StructureError) as exc_info:
            Pattern("x(a(b)")
        assert exc_info.value.code == ErrorCode.UNCLOSED_GROUP
        assert exc_info.value.context.position == 1

    def test_engine_rejection_wraps_re_error(self):
        """Source rejected by the regex engine becomes INVALID_SOURCE."""
        with pytest.raises(StructureError) as exc_info:
            Pattern("[a")
        assert exc_info.value.code == ErrorCode.INVALID_SOURCE
        assert exc_info.value.original_error is not None
