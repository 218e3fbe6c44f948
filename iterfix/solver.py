"""Driver loop for the iterative-repair heuristic.

The board engine only knows how to take one step. This module repeats that
step until the board is solved or an optional budget runs out, and shapes the
outcome the same way for interactive use and for batch experiments.

Contract (public API)
---------------------
- Input: a ``Board`` already seeded with a random or explicit state, plus an
  optional step cap ``max_steps`` and wall-clock ``time_limit``.
- Output: a 6-tuple ``SolveResult`` summarizing the run:
    (success, iterations, elapsed_seconds, best_cost, perturbations, timeout)

Where:
- success: True when the board reached cost 0.
- iterations: number of ``step()`` calls performed (0 if already solved).
- elapsed_seconds: wall time measured via ``perf_counter()``.
- best_cost: lowest total cost observed (0 on success).
- perturbations: number of cycle escapes triggered during the run.
- timeout: True when ended due to ``time_limit``.

Without a cap or time limit the loop runs until a solution is found. The
heuristic has no termination proof, so batch callers should always pass one.
"""

from __future__ import annotations

import random
from time import perf_counter
from typing import Callable, Optional, Tuple

from .board import Board

SolveResult = Tuple[bool, int, float, int, int, bool]

StepCallback = Callable[[Board, int, int], None]


def solve(
    board: Board,
    max_steps: Optional[int] = None,
    time_limit: Optional[float] = None,
    on_step: Optional[StepCallback] = None,
) -> SolveResult:
    """Call ``board.step()`` until the total cost reaches zero.

    Parameters
    ----------
    board : Board
        Board to repair in place.
    max_steps : int | None
        Maximum number of steps before giving up.
    time_limit : float | None
        Optional wall-clock time limit in seconds.
    on_step : callable | None
        Invoked as ``on_step(board, iteration, cost)`` after every step.

    Returns
    -------
    SolveResult
        Tuple (success, iterations, elapsed, best_cost, perturbations, timeout).
    """
    start = perf_counter()
    current_cost = board.total_cost()
    best_cost = current_cost
    perturbations_before = board.perturbations

    if current_cost == 0:
        return True, 0, perf_counter() - start, 0, 0, False

    iteration = 0
    while max_steps is None or iteration < max_steps:
        if time_limit is not None and (perf_counter() - start) > time_limit:
            return (
                False,
                iteration,
                perf_counter() - start,
                best_cost,
                board.perturbations - perturbations_before,
                True,
            )

        current_cost = board.step()
        iteration += 1
        best_cost = min(best_cost, current_cost)
        if on_step is not None:
            on_step(board, iteration, current_cost)

        if current_cost == 0:
            return True, iteration, perf_counter() - start, 0, board.perturbations - perturbations_before, False

    return False, iteration, perf_counter() - start, best_cost, board.perturbations - perturbations_before, False


def solve_random(
    size: int,
    seed: Optional[int] = None,
    max_steps: Optional[int] = None,
    time_limit: Optional[float] = None,
) -> Tuple[Board, SolveResult]:
    """Build a board of ``size`` from a random state, solve it and return both.

    A given ``seed`` reproduces both the initial state and every tie-break.
    """
    board = Board(size, rng=random.Random(seed)).randomize()
    return board, solve(board, max_steps=max_steps, time_limit=time_limit)
