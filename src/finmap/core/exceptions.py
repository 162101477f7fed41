from __future__ import annotations

from typing import Any

from finmap.util.repr import SafeStr


class FinmapError(Exception):
    """Base class for errors raised by the finmap library."""


class DuplicateKeyError(SafeStr, FinmapError, ValueError):
    """Raised when an association list would be constructed with the same key more than once."""

    def __init__(self, key: Any, first_index: int, second_index: int) -> None:
        self.key = key
        self.first_index = first_index
        self.second_index = second_index

    def __safe_str__(self) -> str:
        return f"duplicate key {self.key!r} at positions {self.first_index} and {self.second_index}"


class FamilyTypeError(SafeStr, FinmapError, TypeError):
    """Raised when a value does not match the type that a :class:`TypeFamily` assigns to its key."""

    def __init__(self, key: Any, value: Any, expected: str | None) -> None:
        self.key = key
        self.value = value
        self.expected = expected

    def __safe_str__(self) -> str:
        if self.expected is None:
            return f"the type family does not define a value type for key {self.key!r}"
        return f"value for key {self.key!r} must be {self.expected}, got {type(self.value).__name__}"


class FinalizedRefError(FinmapError, RuntimeError):
    pass
