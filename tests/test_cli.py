"""Tests for the interactive driver."""

from contextlib import redirect_stdout
from io import StringIO
from pathlib import Path
import sys
import unittest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from iterfix import cli
from iterfix.utils import is_valid_solution


def scripted_input(answers):
    """Return an ``input`` replacement that replays ``answers`` then hits EOF."""
    remaining = list(answers)

    def _input(prompt):
        if not remaining:
            raise EOFError
        return remaining.pop(0)

    return _input


class ParsingTests(unittest.TestCase):

    def test_parse_size(self):
        self.assertEqual(cli.parse_size("8"), 8)
        with self.assertRaises(ValueError):
            cli.parse_size("eight")
        with self.assertRaises(ValueError):
            cli.parse_size("3")

    def test_parse_yes_no(self):
        out = StringIO()
        with redirect_stdout(out):
            self.assertTrue(cli.parse_yes_no("y", "notice"))
            self.assertTrue(cli.parse_yes_no("Y", "notice"))
            self.assertFalse(cli.parse_yes_no("", "notice"))
            self.assertFalse(cli.parse_yes_no("n", "notice"))
        self.assertEqual(out.getvalue(), "")

        with redirect_stdout(out):
            self.assertFalse(cli.parse_yes_no("maybe", "notice"))
        self.assertIn("notice", out.getvalue())

    def test_ask_raises_on_eof(self):
        with self.assertRaises(ValueError):
            cli.ask("N: ", scripted_input([]))


class BuildBoardTests(unittest.TestCase):

    def test_uses_explicit_state(self):
        board = cli.build_board(4, state_text="[1, 3, 0, 2]", seed=1)
        self.assertEqual(board.positions, (1, 3, 0, 2))

    def test_falls_back_to_random_on_bad_state(self):
        out = StringIO()
        with redirect_stdout(out):
            board = cli.build_board(4, state_text="[1, 3, 0]", seed=1)
        self.assertIn("Falling back to a random initial state.", out.getvalue())
        self.assertEqual(len(board.positions), 4)
        self.assertEqual(board.positions, cli.build_board(4, seed=1).positions)

    def test_seed_reproduces_random_state(self):
        self.assertEqual(
            cli.build_board(10, seed=7).positions,
            cli.build_board(10, seed=7).positions,
        )


class RunTests(unittest.TestCase):

    def _run(self, argv, answers=()):
        args = cli.build_arg_parser().parse_args(argv)
        out = StringIO()
        with redirect_stdout(out):
            status = cli.run(args, scripted_input(answers))
        return status, out.getvalue()

    def test_flags_only(self):
        status, output = self._run(["--n", "8", "--quiet", "--seed", "3", "--no-input"])
        self.assertEqual(status, 0)
        self.assertIn("Finished in", output)
        self.assertIn("Initial state:", output)
        self.assertIn("Final state:", output)

    def test_prompts_for_everything(self):
        status, output = self._run(["--seed", "2"], ["4", "n", "y", "[0, 0, 0, 0]"])
        self.assertEqual(status, 0)
        self.assertIn("Enter the state values separated by commas", output)
        initial = output.split("Initial state:\n", 1)[1].split("\n\n", 1)[0]
        self.assertEqual(initial, "* . . .\n* . . .\n* . . .\n* . . .")

        final_block = output.split("Final state:\n", 1)[1].strip()
        columns = [row.split(" ").index("*") for row in final_block.splitlines()]
        self.assertTrue(is_valid_solution(columns))

    def test_verbose_prints_cost_breakdown(self):
        status, output = self._run(["--n", "5", "--verbose", "--seed", "4", "--state", "0,0,0,0,0"])
        self.assertEqual(status, 0)
        self.assertIn("| ld:", output)
        self.assertIn("[step 1]", output)

    def test_step_limit_returns_failure(self):
        status, output = self._run(["--n", "20", "--quiet", "--state", ",".join(["0"] * 20), "--max-steps", "1"])
        self.assertEqual(status, 1)
        self.assertIn("Step limit reached after 1 iterations", output)

    def test_main_rejects_small_board(self):
        out = StringIO()
        with redirect_stdout(out), self.assertRaises(SystemExit) as ctx:
            cli.main(["--n", "3", "--quiet", "--no-input"])
        self.assertEqual(ctx.exception.code, 1)
        self.assertIn("smaller than 4", out.getvalue())


if __name__ == "__main__":
    unittest.main()
