import threading
import unittest

from connectk.core.settings import GameSettings
from connectk.engine.ai import ConnectKAI
from connectk.engine.board import Board
from connectk.models.enums import Cell, EvaluatorKind

EMPTY_ROW = [0] * 7


class TestConnectKAI(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.ai = ConnectKAI(GameSettings(search_depth=3))
        self.board = Board.from_rows([EMPTY_ROW] * 4 + [
            [0, 0, 1, 2, 0, 0, 0],
            [0, 1, 2, 2, 1, 0, 0],
        ])

    def tearDown(self):
        self.ai.shutdown()

    async def test_async_matches_sync(self):
        expected = self.ai.choose_move(self.board)
        column = await self.ai.get_move_async(self.board)
        self.assertEqual(column, expected)

    async def test_request_move_calls_back_once(self):
        expected = self.ai.choose_move(self.board)
        calls = []
        done = threading.Event()

        def callback(column):
            calls.append(column)
            done.set()

        future = self.ai.request_move(self.board, callback)
        self.assertTrue(done.wait(timeout=30))
        future.result(timeout=30)

        self.assertEqual(calls, [expected])

    async def test_request_move_failure_reports_none(self):
        """Wrong board size fails inside the worker; the callback still fires, with None."""
        calls = []
        done = threading.Event()

        def callback(column):
            calls.append(column)
            done.set()

        with self.assertLogs("connectk.engine.ai", level="ERROR"):
            self.ai.request_move(Board.empty(5, 4), callback)
            self.assertTrue(done.wait(timeout=30))

        self.assertEqual(calls, [None])

    async def test_board_untouched(self):
        snapshot = self.board.to_rows()
        self.ai.choose_move(self.board)
        await self.ai.get_move_async(self.board)
        self.assertEqual(self.board.to_rows(), snapshot)

    def test_rejects_board_size_mismatch(self):
        with self.assertRaises(ValueError):
            self.ai.choose_move(Board.empty(7, 7))

    def test_depth_from_settings(self):
        self.assertEqual(self.ai.depth, 3)
        self.assertEqual(ConnectKAI().depth, 4)

    def test_full_board_returns_none(self):
        ai = ConnectKAI(GameSettings(columns=2, rows=2, win_length=2, search_depth=1))
        with self.assertLogs("connectk.engine.search", level="WARNING"):
            self.assertIsNone(ai.choose_move(Board.from_rows([[1, 2], [2, 1]])))


class TestAIAsPlayerOne(unittest.TestCase):
    """The AI can sit in either seat; roles flip with player_id."""

    def test_takes_own_win_as_player_one(self):
        board = Board.from_rows([EMPTY_ROW] * 5 + [[1, 1, 1, 0, 2, 2, 0]])
        for evaluator in EvaluatorKind:
            ai = ConnectKAI(GameSettings(evaluator=evaluator, search_depth=2), player_id=Cell.OPPONENT)
            self.assertEqual(ai.opponent_id, Cell.AI)
            self.assertEqual(ai.choose_move(board), 3)

    def test_blocks_player_two(self):
        board = Board.from_rows([EMPTY_ROW] * 3 + [
            [0, 2, 0, 0, 0, 0, 0],
            [0, 2, 0, 0, 0, 0, 0],
            [0, 2, 0, 1, 0, 0, 1],
        ])
        ai = ConnectKAI(GameSettings(search_depth=2), player_id=Cell.OPPONENT)
        self.assertEqual(ai.choose_move(board), 1)

if __name__ == '__main__':
    unittest.main()
