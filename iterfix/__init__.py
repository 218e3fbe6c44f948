"""Iterative-repair (min-conflicts) N-Queens solver."""

from .board import MIN_SIZE, Board, QueenCost
from .errors import InvalidSize, IterfixError, OutOfRange, SizeMismatch
from .solver import solve, solve_random
from .utils import conflicts, is_valid_solution, parse_state

__all__ = [
    "Board",
    "QueenCost",
    "MIN_SIZE",
    "IterfixError",
    "InvalidSize",
    "SizeMismatch",
    "OutOfRange",
    "solve",
    "solve_random",
    "conflicts",
    "is_valid_solution",
    "parse_state",
]
