"""Error taxonomy for board construction and explicit state assignment.

All errors derive from ``ValueError`` so callers that already guard user input
with ``except ValueError`` keep working. They are raised only when a board is
created or reseeded; ``Board.step`` never raises.
"""

from __future__ import annotations


class IterfixError(ValueError):
    """Base class for invalid board sizes and invalid initial states."""


class InvalidSize(IterfixError):
    """Requested board size is smaller than the supported minimum."""

    def __init__(self, size: int, minimum: int):
        super().__init__(f"Board size must be at least {minimum}, got {size}")
        self.size = size
        self.minimum = minimum


class SizeMismatch(IterfixError):
    """Explicit state does not contain exactly one column per queen."""

    def __init__(self, expected: int, actual: int):
        super().__init__(f"Expected {expected} values, got {actual}")
        self.expected = expected
        self.actual = actual


class OutOfRange(IterfixError):
    """Explicit state holds a column outside ``[0, size)``."""

    def __init__(self, value: object, size: int):
        super().__init__(f"Value '{value}' is not a column in [0, {size})")
        self.value = value
        self.size = size
