import unittest
from unittest import mock

from connectk.core.settings import EvaluationWeights, GameSettings, load_settings
from connectk.engine.ai import ConnectKAI
from connectk.engine.board import Board, ColumnFullError
from connectk.engine.evaluation import EvaluationStrategy, get_evaluator
from connectk.engine.lines import LineDetector
from connectk.engine.search import MinimaxSearch
from connectk.models.enums import Cell, Difficulty, EvaluatorKind
from connectk.scripts.verify_ai_moves import SCENARIOS

EMPTY_ROW = [0] * 7


class FlatEvaluator(EvaluationStrategy):
    """Every non-winning position scores the same."""
    def score(self, board, column, row, depth):
        return 0


def make_ai(evaluator=EvaluatorKind.PLACEMENT, depth=2, **kwargs):
    return ConnectKAI(GameSettings(evaluator=evaluator, search_depth=depth, **kwargs))


class TestAlphaBetaEquivalence(unittest.TestCase):
    """Pruning must only skip work, never change the answer."""

    BOARDS = [
        Board.empty(),
        Board.from_rows([EMPTY_ROW] * 4 + [
            [0, 0, 1, 2, 0, 0, 0],
            [0, 1, 2, 2, 1, 0, 0],
        ]),
        Board.from_rows([EMPTY_ROW] * 2 + [
            [0, 0, 0, 1, 0, 0, 0],
            [0, 0, 2, 2, 0, 0, 0],
            [0, 1, 1, 2, 1, 0, 0],
            [2, 1, 2, 1, 2, 0, 1],
        ]),
    ]

    def check(self, settings, boards, depth):
        evaluator = get_evaluator(settings)
        pruned = MinimaxSearch(evaluator, pruning=True)
        exhaustive = MinimaxSearch(evaluator, pruning=False)

        for board in boards:
            a = pruned.solve(board, depth)
            b = exhaustive.solve(board, depth)

            self.assertEqual(a.column, b.column)
            self.assertEqual(a.score, b.score)
            self.assertEqual(a.scores, b.scores)
            self.assertLessEqual(a.nodes_explored, b.nodes_explored)

    def test_placement_classic(self):
        self.check(GameSettings(evaluator=EvaluatorKind.PLACEMENT), self.BOARDS, 3)

    def test_window_classic(self):
        self.check(GameSettings(evaluator=EvaluatorKind.WINDOW), self.BOARDS, 3)

    def test_small_board_deeper(self):
        settings = GameSettings(columns=5, rows=4, win_length=3)
        boards = [
            Board.empty(5, 4),
            Board.from_rows([[0] * 5] * 2 + [[0, 0, 2, 0, 0], [0, 1, 1, 2, 0]]),
        ]
        self.check(settings, boards, 4)

    def test_pruning_saves_work(self):
        evaluator = get_evaluator(GameSettings())
        pruned = MinimaxSearch(evaluator).solve(Board.empty(), 3)
        exhaustive = MinimaxSearch(evaluator, pruning=False).solve(Board.empty(), 3)
        self.assertLess(pruned.nodes_explored, exhaustive.nodes_explored)


class TestTacticalChoices(unittest.TestCase):
    def test_immediate_win_any_depth(self):
        """AI has three on the bottom row; column 3 wins on the spot."""
        board = Board.from_rows([EMPTY_ROW] * 5 + [[2, 2, 2, 0, 1, 1, 0]])
        for evaluator in EvaluatorKind:
            for depth in (1, 2, 3, 4):
                self.assertEqual(make_ai(evaluator, depth).choose_move(board), 3, f"{evaluator} depth {depth}")

    def test_win_beats_block(self):
        """Both sides threaten column 3: taking the win comes first."""
        board = Board.from_rows([EMPTY_ROW] * 5 + [[1, 1, 1, 0, 2, 2, 2]])
        for evaluator in EvaluatorKind:
            for depth in (1, 2, 3):
                self.assertEqual(make_ai(evaluator, depth).choose_move(board), 3)

    def test_blocks_vertical_threat(self):
        """
        Human has three stacked in column 5, the AI has nothing to finish.
        Anything but 5 lets the human win next turn.
        """
        board = Board.from_rows([EMPTY_ROW] * 3 + [
            [0, 0, 0, 0, 0, 1, 0],
            [0, 0, 0, 0, 0, 1, 0],
            [2, 0, 0, 2, 0, 1, 0],
        ])
        for evaluator in EvaluatorKind:
            for depth in (2, 3, 4):
                self.assertEqual(make_ai(evaluator, depth).choose_move(board), 5, f"{evaluator} depth {depth}")

    def test_only_block_available(self):
        """
        Classic 7x6: human holds columns 1-3 of the bottom row, the AI holds column 0.
        Column 4 is the only block.
        """
        board = Board.from_rows([EMPTY_ROW] * 5 + [[2, 1, 1, 1, 0, 0, 0]])
        for evaluator in EvaluatorKind:
            for depth in (1, 2, 3, 4):
                ai = make_ai(evaluator, depth)
                result = ai.analyse(board)
                self.assertEqual(result.column, 4, f"{evaluator} depth {depth}")
                for column, score in result.scores.items():
                    if column != 4:
                        self.assertLessEqual(score, -1000)

    def test_never_picks_full_column(self):
        """Column 3 is full; the center would otherwise be the natural pick."""
        board = Board.from_rows([
            [0, 0, 0, 1, 0, 0, 0],
            [0, 0, 0, 2, 0, 0, 0],
            [0, 0, 0, 1, 0, 0, 0],
            [0, 0, 0, 2, 0, 0, 0],
            [0, 0, 0, 1, 0, 0, 0],
            [0, 0, 0, 2, 0, 0, 0],
        ])
        for evaluator in EvaluatorKind:
            for depth in (1, 2, 3):
                result = make_ai(evaluator, depth).analyse(board)
                self.assertNotEqual(result.column, 3)
                self.assertTrue(board.is_valid_move(result.column))
                self.assertNotIn(3, result.scores)

    def test_blocks_even_when_lost(self):
        """
        Column 3 is the human's only win, but blocking it lets the human build a
        double threat at (1,3) and (4,1). Losing later still beats losing now.
        """
        board = Board.from_rows([
            EMPTY_ROW,
            [0, 0, 0, 0, 0, 1, 0],
            [0, 0, 0, 0, 0, 2, 0],
            [2, 2, 1, 0, 0, 2, 2],
            [2, 1, 1, 0, 0, 2, 1],
            [1, 2, 2, 0, 1, 1, 1],
        ])
        for evaluator in EvaluatorKind:
            for depth in (1, 2, 3):
                result = make_ai(evaluator, depth).analyse(board)
                self.assertEqual(result.column, 3, f"{evaluator} depth {depth}")
                for column, score in result.scores.items():
                    if column != 3:
                        self.assertLess(score, result.score)
                        self.assertLessEqual(score, -10000)

    def test_blocks_at_odd_depth_with_follow_up_threat(self):
        """
        Column 3 is the only human win; after the block the human can still
        set up threats the AI gets to answer.
        """
        board = Board.from_rows([
            EMPTY_ROW,
            EMPTY_ROW,
            [0, 0, 0, 0, 2, 0, 0],
            [2, 0, 0, 0, 1, 2, 0],
            [1, 0, 2, 0, 2, 2, 1],
            [2, 1, 1, 0, 1, 1, 1],
        ])
        for evaluator in EvaluatorKind:
            for depth in (1, 2, 3):
                result = make_ai(evaluator, depth).analyse(board)
                self.assertEqual(result.column, 3, f"{evaluator} depth {depth}")
                self.assertGreater(result.score, -10000)

    def test_mini_profile_blocks(self):
        """Connect three on 5x4, depth 3: the human threatens column 2."""
        settings = load_settings("mini")
        board = Board.from_rows([[0] * 5] * 3 + [[1, 1, 0, 0, 2]])
        for evaluator in EvaluatorKind:
            ai = ConnectKAI(settings.model_copy(update={"evaluator": evaluator}))
            self.assertEqual(ai.depth, 3)
            self.assertEqual(ai.choose_move(board), 2, evaluator)

    def test_verification_scenarios_at_easy(self):
        for scenario in SCENARIOS:
            board = Board.from_rows(scenario["rows"])
            for evaluator in EvaluatorKind:
                ai = ConnectKAI(GameSettings(evaluator=evaluator, difficulty=Difficulty.EASY))
                self.assertIn(ai.choose_move(board), scenario["expected"], f"{scenario['name']} {evaluator}")


class TestSearchEdges(unittest.TestCase):
    def test_full_board_has_no_move(self):
        board = Board.from_rows([
            [1, 2, 1],
            [1, 2, 1],
            [2, 1, 2],
        ])
        ai = make_ai(depth=2, columns=3, rows=3, win_length=3)
        with self.assertLogs("connectk.engine.search", level="WARNING"):
            result = ai.analyse(board)
        self.assertIsNone(result.column)
        self.assertIsNone(result.score)
        self.assertEqual(result.scores, {})
        self.assertIsNone(ai.choose_move(board))

    def test_ties_keep_first_column(self):
        evaluator = FlatEvaluator(EvaluationWeights(), LineDetector(4))
        result = MinimaxSearch(evaluator).solve(Board.empty(), 2)
        self.assertEqual(result.column, 0)
        self.assertEqual(set(result.scores.values()), {0})

        board = Board.from_rows([[1, 0, 0, 0, 0, 0, 0]] + [[2, 0, 0, 0, 0, 0, 0], [1, 0, 0, 0, 0, 0, 0]] * 2 + [[2, 0, 0, 0, 0, 0, 0]])
        self.assertEqual(MinimaxSearch(evaluator).solve(board, 2).column, 1)

    def test_instrumentation_in_result(self):
        result = make_ai(depth=2).analyse(Board.empty())
        self.assertEqual(result.depth, 2)
        self.assertGreater(result.nodes_explored, 7)
        # Root children see 7 open columns with 2 plies left
        self.assertEqual(result.highest_budget, 7 ** 2)

    def test_simulator_fault_skips_branch(self):
        """A full-column fault on AI drops is logged and the branch contributes nothing."""
        original = Board.simulate_move

        def flaky(self, column, player):
            if column == 6 and player == Cell.AI:
                raise ColumnFullError("Column 6 is full")
            return original(self, column, player)

        ai = make_ai(depth=2)
        with mock.patch.object(Board, "simulate_move", autospec=True, side_effect=flaky):
            with self.assertLogs("connectk.engine.search", level="ERROR"):
                result = ai.analyse(Board.empty())

        self.assertIsNotNone(result.column)
        self.assertNotEqual(result.column, 6)
        self.assertNotIn(6, result.scores)

    def test_board_size_mismatch_rejected(self):
        with self.assertRaises(ValueError):
            make_ai().choose_move(Board.empty(5, 4))

if __name__ == '__main__':
    unittest.main()
