import asyncio
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional

from connectk.core.settings import GameSettings
from connectk.engine.board import Board
from connectk.engine.evaluation import get_evaluator
from connectk.engine.search import MinimaxSearch
from connectk.models.enums import Cell
from connectk.schemas.game_schema import SearchResult

logger = logging.getLogger(__name__)


class ConnectKAI:
    """
    Minimax player. Holds only its (immutable) settings; every call gets a
    fresh board snapshot and nothing is kept between calls.
    """

    def __init__(self, settings: Optional[GameSettings] = None, player_id: int = Cell.AI):
        self.settings = settings or GameSettings()
        self.player_id = Cell(player_id)
        self.opponent_id = self.player_id.other

        self.evaluator = get_evaluator(self.settings, self.player_id)
        self.search = MinimaxSearch(self.evaluator)
        self._executor: Optional[ThreadPoolExecutor] = None

    @property
    def depth(self) -> int:
        return self.settings.depth

    def _check_board(self, board: Board):
        if board.columns != self.settings.columns or board.rows != self.settings.rows:
            raise ValueError(
                f"Board is {board.columns}x{board.rows}, settings expect "
                f"{self.settings.columns}x{self.settings.rows}"
            )

    def analyse(self, board: Board) -> SearchResult:
        """Full search result: chosen column, root scores and node counts."""
        self._check_board(board)
        return self.search.solve(board, self.depth)

    def choose_move(self, board: Board) -> Optional[int]:
        """Column to play, or None if the board is full."""
        return self.analyse(board).column

    async def get_move_async(self, board: Board) -> Optional[int]:
        """Runs the search in a worker thread so the event loop keeps ticking."""
        result = await asyncio.to_thread(self.analyse, board)
        return result.column

    def request_move(self, board: Board, callback: Callable[[Optional[int]], None]) -> Future:
        """
        Fire-and-forget search on a background thread.
        `callback` is called exactly once: with the column, or with None if the search failed.
        """
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="connectk-ai")

        future = self._executor.submit(self.analyse, board)

        def _deliver(done: Future):
            try:
                column = done.result().column
            except Exception as e:
                logger.error("Background search failed: %s", e)
                column = None
            callback(column)

        future.add_done_callback(_deliver)
        return future

    def shutdown(self):
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
