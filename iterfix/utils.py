"""Utility helpers for the iterfix project.

Low-level primitives shared by the solver, the interactive driver and the
benchmark pipeline: an independent attacking-pair counter used to cross-check
the board's own cost model, a solution validator, and the parser for the
bracketed initial-state strings typed by users.

Representation
--------------
Boards are encoded as a 1D array/list where ``board[row] = column``.
"""

from __future__ import annotations

from collections import Counter
from typing import List, Sequence

from .errors import OutOfRange, SizeMismatch


def conflicts(board: Sequence[int]) -> int:
    """Compute the number of attacking queen pairs in O(N).

    Uses hash maps to count queens per column and per diagonal. A board's
    ``total_cost()`` is always twice this value.
    """
    column_count: Counter[int] = Counter()
    diag1: Counter[int] = Counter()
    diag2: Counter[int] = Counter()

    for row, column in enumerate(board):
        column_count[column] += 1
        diag1[column - row] += 1
        diag2[column + row] += 1

    def _pairs(counter: Counter[int]) -> int:
        total = 0
        for count in counter.values():
            if count > 1:
                total += count * (count - 1) // 2
        return total

    return _pairs(column_count) + _pairs(diag1) + _pairs(diag2)


def is_valid_solution(board: Sequence[int]) -> bool:
    """Return True if the board represents a valid N-Queens solution.

    Contract
    - Input: sequence of length N where board[row] = column (0-based indices)
    - Valid if: all 0 <= column < N and no pairs of queens attack each other
    """
    n = len(board)
    if n == 0:
        return False
    for column in board:
        if not isinstance(column, int):
            return False
        if column < 0 or column >= n:
            return False
    return conflicts(board) == 0


def parse_state(text: str, size: int) -> List[int]:
    """Parse an initial state such as ``"[0, 3, 2, 1]"`` for a board of ``size``.

    Surrounding brackets are optional and whitespace around values is ignored.
    Values are ASCII digits with an optional leading ``+``.

    Raises
    ------
    ValueError
        If a value is not a non-negative integer.
    OutOfRange
        If a value is greater or equal to ``size``.
    SizeMismatch
        If the number of values differs from ``size``.
    """
    body = text.strip().lstrip("[").rstrip("]")
    values: List[int] = []
    for token in body.split(","):
        token = token.strip()
        digits = token[1:] if token.startswith("+") else token
        if not (digits.isascii() and digits.isdigit()):
            raise ValueError(f"Value '{token}' is not a valid number")
        value = int(digits)
        if value >= size:
            raise OutOfRange(value, size)
        values.append(value)
    if len(values) != size:
        raise SizeMismatch(size, len(values))
    return values
