"""Board state engine for the iterative-repair N-Queens heuristic.

The engine keeps one queen per row and moves queens only along their row, so
the column held by each queen is the whole configuration. A step finds the
queen involved in the most conflicts, moves it to the column where it conflicts
least, and relies on a history of visited configurations to detect when the
repair loop keeps returning to the same place.

Representation
--------------
Boards are encoded as a 1D list where ``positions[row] = column``. Two queens
conflict when they share a column or lie on a shared diagonal. Row conflicts
cannot happen by construction.

Cost model
----------
The cost of queen ``i`` is a triple ``(column, left, right)`` counted over all
other queens ``j``:

- ``column``: ``positions[j] == positions[i]``.
- ``left``: ``positions[j] == positions[i] - |j - i|``.
- ``right``: ``positions[j] == positions[i] + |j - i|``.

Every attacking pair is seen from both ends, so ``total_cost()`` is twice the
number of attacking pairs and is zero exactly for a solution.

Determinism
-----------
All random choices (initial state, tie-breaks and cycle perturbation) go
through the board's own ``random.Random`` instance. Pass a seeded generator to
reproduce a run.
"""

from __future__ import annotations

import numbers
import random
from typing import FrozenSet, List, NamedTuple, Optional, Sequence, Set, Tuple

from .errors import InvalidSize, OutOfRange, SizeMismatch

MIN_SIZE: int = 4


class QueenCost(NamedTuple):
    """Conflicts of a single queen split by direction."""

    column: int
    left: int
    right: int

    @property
    def total(self) -> int:
        return self.column + self.left + self.right


class Board:
    """Mutable N-Queens configuration with a min-conflicts repair step.

    Parameters
    ----------
    size : int
        Board dimension N. Must be at least ``MIN_SIZE``.
    verbose : bool, default False
        When True, ``str(board)`` appends the per-row cost breakdown.
    rng : random.Random | None
        Random source for every stochastic decision. A fresh unseeded
        generator is created when omitted.

    Raises
    ------
    InvalidSize
        If ``size < MIN_SIZE``.
    """

    def __init__(self, size: int, verbose: bool = False, rng: Optional[random.Random] = None):
        if size < MIN_SIZE:
            raise InvalidSize(size, MIN_SIZE)
        self._size = size
        self._positions: List[int] = [0] * size
        self._visited: Set[Tuple[int, ...]] = set()
        self._verbose = verbose
        self.rng = rng if rng is not None else random.Random()
        # Cycle escapes performed since the last reseed
        self.perturbations = 0

    @classmethod
    def create(cls, size: int, verbose: bool = False, rng: Optional[random.Random] = None) -> "Board":
        """Return an all-zero board of the given size (see ``Board``)."""
        return cls(size, verbose=verbose, rng=rng)

    # ------------- State -------------------------------------------------

    @property
    def size(self) -> int:
        return self._size

    @property
    def positions(self) -> Tuple[int, ...]:
        """Snapshot of the current columns, indexed by row."""
        return tuple(self._positions)

    @property
    def visited(self) -> FrozenSet[Tuple[int, ...]]:
        """Configurations recorded since the last reseed."""
        return frozenset(self._visited)

    @property
    def verbose(self) -> bool:
        return self._verbose

    def with_verbose(self, value: bool) -> "Board":
        self._verbose = value
        return self

    def randomize(self) -> "Board":
        """Forget the search history and place every queen in a random column."""
        self._visited.clear()
        self.perturbations = 0
        self._positions = [self.rng.randrange(self._size) for _ in range(self._size)]
        return self

    def set_state(self, values: Sequence[int]) -> "Board":
        """Forget the search history and load an explicit configuration.

        Parameters
        ----------
        values : Sequence[int]
            One column per row, each in ``[0, size)``.

        Raises
        ------
        SizeMismatch
            If ``len(values) != size``.
        OutOfRange
            If any value is not an integer column on the board.

        The board is left untouched when validation fails.
        """
        values = list(values)
        if len(values) != self._size:
            raise SizeMismatch(self._size, len(values))
        for value in values:
            if isinstance(value, bool) or not isinstance(value, numbers.Integral):
                raise OutOfRange(value, self._size)
            if not 0 <= value < self._size:
                raise OutOfRange(value, self._size)

        self._visited.clear()
        self.perturbations = 0
        self._positions = [int(value) for value in values]
        return self

    def copy(self) -> "Board":
        """Return an independent board with the same state and generator state."""
        rng = random.Random()
        rng.setstate(self.rng.getstate())
        clone = Board(self._size, verbose=self._verbose, rng=rng)
        clone._positions = list(self._positions)
        clone._visited = set(self._visited)
        clone.perturbations = self.perturbations
        return clone

    # ------------- Cost model --------------------------------------------

    def cost_of(self, queen: int) -> QueenCost:
        """Return the column, left-diagonal and right-diagonal conflicts of ``queen``."""
        positions = self._positions
        column = positions[queen]
        same_column = left = right = 0
        for other, other_column in enumerate(positions):
            if other == queen:
                continue
            if other_column == column:
                same_column += 1
            offset = abs(other - queen)
            # Diagonal targets that fall off the board never match
            if column - offset >= 0 and other_column == column - offset:
                left += 1
            if column + offset < self._size and other_column == column + offset:
                right += 1
        return QueenCost(same_column, left, right)

    def overall_cost_of(self, queen: int) -> int:
        return self.cost_of(queen).total

    def total_cost(self) -> int:
        """Sum of every queen's cost: twice the number of attacking pairs."""
        return sum(self.overall_cost_of(queen) for queen in range(self._size))

    # ------------- Repair step -------------------------------------------

    def step(self) -> int:
        """Advance the search by one repair move and return the new total cost.

        The most expensive queen (random among ties) is moved to the column
        that minimizes its own cost (random among ties, never its current
        column). When the configuration before the move was already visited,
        a random queen is additionally sent to a random column; the planned
        move is applied in both cases.
        """
        rng = self.rng
        size = self._size
        positions = self._positions

        costs = [self.overall_cost_of(queen) for queen in range(size)]
        worst_value = max(costs)
        worst_pos = rng.choice([queen for queen, cost in enumerate(costs) if cost == worst_value])
        prev_val = positions[worst_pos]

        candidates: List[Tuple[int, int]] = []
        for col in range(size):
            if col == prev_val:
                continue
            positions[worst_pos] = col
            candidates.append((col, self.overall_cost_of(worst_pos)))
            positions[worst_pos] = prev_val

        best_cost = min(cost for _, cost in candidates)
        new_col = rng.choice([col for col, cost in candidates if cost == best_cost])

        snapshot = tuple(positions)
        if snapshot in self._visited:
            queen = rng.randrange(size)
            positions[queen] = rng.randrange(size)
            self.perturbations += 1
        else:
            self._visited.add(snapshot)

        positions[worst_pos] = new_col
        return self.total_cost()

    # ------------- Display -----------------------------------------------

    def render(self, verbose: Optional[bool] = None) -> str:
        """Return the board as rows of ``*`` (queen) and ``.`` (empty).

        When ``verbose`` is true (defaults to the board's flag) each row also
        shows its cost breakdown: left diagonal, right diagonal, column and
        total.
        """
        if verbose is None:
            verbose = self._verbose
        lines: List[str] = []
        for row, column in enumerate(self._positions):
            line = " ".join("*" if cell == column else "." for cell in range(self._size))
            if verbose:
                cost = self.cost_of(row)
                line += (
                    f"  | ld:{cost.left:>2} rd:{cost.right:>2} cc:{cost.column:>2}"
                    f" | tt:{cost.total:>2}"
                )
            lines.append(line)
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"Board(size={self._size}, positions={self._positions})"
