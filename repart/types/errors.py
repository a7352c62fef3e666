"""
Error handling system for repart.

Structural and naming problems are detected while a pattern is being
built, before any matching happens, and are raised as subclasses of
RepartError. A multi-match loop that stops making progress is reported
with StallWarning and is not fatal.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from typing import Any

from repart.constants import utcnow


class ErrorCode(IntEnum):
    """Internal error codes for categorization."""

    # Pattern structure errors (1000-1999)
    UNMATCHED_CLOSE = 1001
    UNCLOSED_GROUP = 1002
    INVALID_SOURCE = 1003

    # Format errors (2000-2999)
    MALFORMED_QUANTIFIER = 2001
    UNKNOWN_FLAG = 2002

    # Naming errors (3000-3999)
    RESERVED_NAME = 3001
    DUPLICATE_NAME = 3002
    INVALID_NAME = 3003


class ErrorSeverity(str, Enum):
    """Error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class RecoveryAction:
    """Suggested action to recover from an error."""

    description: str
    example: str | None = None


@dataclass
class ErrorContext:
    """Context information for an error."""

    operation: str | None = None
    source: str | None = None
    position: int | None = None
    group_name: str | None = None
    timestamp: datetime = field(default_factory=utcnow)
    additional_info: dict[str, Any] = field(default_factory=dict)


class RepartError(Exception):
    """Base error class for repart."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        user_message: str,
        severity: str = ErrorSeverity.HIGH,
        context: ErrorContext | None = None,
        recovery_actions: list[RecoveryAction] | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.severity = severity
        self.user_message = user_message
        self.context = context or ErrorContext()
        self.recovery_actions = recovery_actions or []
        self.original_error = original_error

        self.context.timestamp = utcnow()

    def get_formatted_message(self) -> str:
        """Get a formatted error message for display to users."""
        parts = [
            f"[Error] {self.user_message}",
            f"   Code: {self.code.value}",
        ]

        if self.context.operation:
            parts.append(f"   Operation: {self.context.operation}")
        if self.context.source is not None:
            parts.append(f"   Source: {self.context.source}")
            if self.context.position is not None:
                # caret under the offending character
                parts.append("           " + " " * self.context.position + "^")
        if self.context.group_name:
            parts.append(f"   Group: {self.context.group_name}")

        if self.recovery_actions:
            parts.append("")
            parts.append("Suggested actions:")
            for i, action in enumerate(self.recovery_actions, 1):
                parts.append(f"   {i}. {action.description}")
                if action.example:
                    parts.append(f"      e.g. {action.example}")

        return "\n".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "name": self.__class__.__name__,
            "code": self.code.value,
            "message": str(self),
            "user_message": self.user_message,
            "severity": self.severity,
            "context": {
                "operation": self.context.operation,
                "source": self.context.source,
                "position": self.context.position,
                "group_name": self.context.group_name,
                "timestamp": self.context.timestamp.isoformat(),
                "additional_info": self.context.additional_info,
            },
            "recovery_actions": [
                {"description": a.description, "example": a.example}
                for a in self.recovery_actions
            ],
            "original_error": str(self.original_error) if self.original_error else None,
        }


class StructureError(RepartError):
    """Unbalanced group delimiters, or source the regex engine rejects."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.UNMATCHED_CLOSE,
        user_message: str | None = None,
        context: ErrorContext | None = None,
        recovery_actions: list[RecoveryAction] | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            user_message=user_message or "Pattern structure is invalid.",
            severity=ErrorSeverity.HIGH,
            context=context,
            recovery_actions=recovery_actions,
            original_error=original_error,
        )


class FormatError(RepartError):
    """Malformed quantifier braces or flag strings."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.MALFORMED_QUANTIFIER,
        user_message: str | None = None,
        context: ErrorContext | None = None,
        recovery_actions: list[RecoveryAction] | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            user_message=user_message or "Pattern format is invalid.",
            severity=ErrorSeverity.HIGH,
            context=context,
            recovery_actions=recovery_actions,
            original_error=original_error,
        )


class GroupNameError(RepartError):
    """Reserved, duplicate or invalid group name during rename or compose."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.DUPLICATE_NAME,
        user_message: str | None = None,
        context: ErrorContext | None = None,
        recovery_actions: list[RecoveryAction] | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            user_message=user_message or "Group name cannot be used.",
            severity=ErrorSeverity.MEDIUM,
            context=context,
            recovery_actions=recovery_actions,
            original_error=original_error,
        )


class StallWarning(UserWarning):
    """A multi-match loop stopped because the search cursor did not advance."""
