"""Interactive command-line driver for the iterative-repair solver.

Asks for the board size, whether to show per-step details and, optionally, an
initial state; then repairs the board until it is a solution and prints the
initial and final configurations. Every prompt can be answered up front with a
flag so the driver also works non-interactively (``iterfix --n 8 --seed 1``).
"""
from __future__ import annotations

import argparse
import random
from typing import Callable, List, Optional

from .board import MIN_SIZE, Board
from .solver import solve
from .utils import parse_state

InputFn = Callable[[str], str]

STATE_HELP = """
    Enter the state values separated by commas
    An example state is [0, 3, 2, 1] for N = 4
        In the example:
            - Queen 0 is on row 0, column 0
            - Queen 1 is on row 1, column 3
            - Queen 2 is on row 2, column 2
            - Queen 3 is on row 3, column 1
            - Every value is smaller than N
            - Values are separated by ','
"""


def ask(message: str, input_fn: InputFn = input) -> str:
    """Prompt once and return the stripped answer.

    Raises ``ValueError`` when stdin is exhausted.
    """
    try:
        return input_fn(message).strip()
    except EOFError as exc:
        raise ValueError("No input provided, read 0 bytes from stdin") from exc


def parse_size(text: str) -> int:
    """Validate a board size typed by the user."""
    try:
        value = int(text)
    except ValueError as exc:
        raise ValueError("Invalid value of N. Enter a valid value of N.") from exc
    if value < MIN_SIZE:
        raise ValueError(f"Values of N smaller than {MIN_SIZE} are not allowed")
    return value


def parse_yes_no(text: str, notice: str) -> bool:
    """Return True for ``y``/``Y``; anything else means no.

    Answers other than an empty line or ``n``/``N`` print ``notice``.
    """
    if text in ("y", "Y"):
        return True
    if text not in ("", "n", "N"):
        print(notice)
    return False


def build_board(
    size: int,
    verbose: bool = False,
    state_text: Optional[str] = None,
    seed: Optional[int] = None,
) -> Board:
    """Create the board, loading ``state_text`` or falling back to a random state."""
    board = Board(size, verbose=verbose, rng=random.Random(seed))
    if state_text is None:
        return board.randomize()
    try:
        return board.set_state(parse_state(state_text, size))
    except ValueError as exc:
        print(exc)
        print("Falling back to a random initial state.")
        return board.randomize()


def run(args: argparse.Namespace, input_fn: InputFn = input) -> int:
    """Gather missing answers, solve, print the outcome and return an exit code."""
    size = args.n if args.n is not None else parse_size(ask("Enter the value of N: ", input_fn))
    if size < MIN_SIZE:
        raise ValueError(f"Values of N smaller than {MIN_SIZE} are not allowed")

    if args.verbose is None:
        verbose = parse_yes_no(
            ask("Show information for every step? [y/N]: ", input_fn),
            "Invalid value, no per-step information will be shown.",
        )
    else:
        verbose = args.verbose

    state_text = args.state
    if state_text is None and args.interactive:
        wants_state = parse_yes_no(
            ask("Enter an initial state for the problem? [y/N]: ", input_fn),
            "Invalid value, a random initial state will be used.",
        )
        if wants_state:
            print(STATE_HELP)
            state_text = ask("Enter the state now: ", input_fn)

    board = build_board(size, verbose=verbose, state_text=state_text, seed=args.seed)
    initial = board.copy()
    if verbose:
        print(f"{board}\n")

    def _show(current: Board, iteration: int, cost: int) -> None:
        print(f"[step {iteration}] cost={cost}")
        print(f"{current}\n")

    success, iterations, elapsed, best_cost, perturbations, timeout = solve(
        board,
        max_steps=args.max_steps,
        time_limit=args.time_limit,
        on_step=_show if verbose else None,
    )

    if success:
        print(f"Finished in {iterations} iterations.")
    elif timeout:
        print(f"Time limit reached after {iterations} iterations (best cost {best_cost}).")
    else:
        print(f"Step limit reached after {iterations} iterations (best cost {best_cost}).")
    if verbose:
        print(f"Elapsed: {elapsed:.4f}s, cycle escapes: {perturbations}")
    print("Initial state:")
    print(f"{initial}\n")
    print("Final state:")
    print(f"{board}\n")
    return 0 if success else 1


def build_arg_parser() -> argparse.ArgumentParser:
    """Construct the argument parser for the interactive driver."""
    parser = argparse.ArgumentParser(description="Solve N-Queens by iterative repair.")
    parser.add_argument("--n", "-n", type=int, help=f"Board size (>= {MIN_SIZE}). Prompted when omitted.")
    verbose_group = parser.add_mutually_exclusive_group()
    verbose_group.add_argument("--verbose", "-v", dest="verbose", action="store_true", default=None, help="Print the board after every step.")
    verbose_group.add_argument("--quiet", "-q", dest="verbose", action="store_false", help="Do not print per-step information.")
    parser.add_argument("--state", "-s", help="Initial state, e.g. '[0, 3, 2, 1]'. Random when omitted or invalid.")
    parser.add_argument("--seed", type=int, help="Seed for the random generator (reproducible runs).")
    parser.add_argument("--max-steps", type=int, default=None, help="Give up after this many steps (default: unlimited).")
    parser.add_argument("--time-limit", type=float, default=None, help="Give up after this many seconds (default: unlimited).")
    parser.add_argument(
        "--no-input",
        dest="interactive",
        action="store_false",
        help="Never prompt for an initial state; use --state or a random one.",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """CLI entry point: parse arguments, run the solver and exit with its status."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    try:
        status = run(args)
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
        raise SystemExit(130) from None
    except ValueError as exc:
        print(exc)
        raise SystemExit(1) from exc
    if status:
        raise SystemExit(status)


if __name__ == "__main__":
    main()
