"""
Core value types shared by the structure and matching layers.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Quantifier:
    """Repetition bounds of a group; ``max_count=None`` means unbounded."""

    min_count: int = 1
    max_count: int | None = 1

    def __post_init__(self) -> None:
        if self.min_count < 0:
            raise ValueError("min_count must be non-negative")
        if self.max_count is not None and self.max_count < self.min_count:
            raise ValueError("max_count must be >= min_count")

    @property
    def is_unbounded(self) -> bool:
        return self.max_count is None

    @property
    def is_optional(self) -> bool:
        """True if the group may match zero times."""
        return self.min_count == 0

    @property
    def is_single(self) -> bool:
        """True for an unquantified group (exactly one occurrence)."""
        return self.min_count == 1 and self.max_count == 1

    def allows(self, count: int) -> bool:
        """Check if a repetition count is within bounds (inclusive)."""
        if count < self.min_count:
            return False
        return self.max_count is None or count <= self.max_count


EXACTLY_ONCE = Quantifier(1, 1)


@dataclass(frozen=True)
class Span:
    """Absolute ``[start, end)`` character range of a match in its input."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0:
            raise ValueError("start must be non-negative")
        if self.end < self.start:
            raise ValueError("end must be >= start")

    @property
    def length(self) -> int:
        return self.end - self.start

    def contains(self, position: int) -> bool:
        """Check if a position falls inside this range (end exclusive)."""
        return self.start <= position < self.end
