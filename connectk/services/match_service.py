"""
Match Service - Rounds, Scores and AI Turns

Drives a human vs AI match made of rounds:
- Validates and applies human drops
- Runs the AI search off the event loop (one pending AI turn at a time)
- Scores rounds, resets the board, and ends the match at score_to_win
- Publishes round / match events
"""

import asyncio
import logging
import time
from typing import Dict, List, Optional

from connectk.core.events import GameEvents
from connectk.core.settings import GameSettings
from connectk.engine.ai import ConnectKAI
from connectk.engine.game import ConnectKGame, InvalidMoveError
from connectk.models.enums import Cell, GameStatus
from connectk.schemas.game_schema import MatchState, MoveRecord, RoundResult

logger = logging.getLogger(__name__)


class MatchService:
    def __init__(
        self,
        settings: Optional[GameSettings] = None,
        events: Optional[GameEvents] = None,
        ai_player_id: int = Cell.AI,
        first_player: int = Cell.OPPONENT,
    ):
        self.settings = settings or GameSettings()
        self.events = events or GameEvents()
        self.ai = ConnectKAI(self.settings, player_id=ai_player_id)
        self.human_id = self.ai.opponent_id
        self.first_player = Cell(first_player)

        self.scores: Dict[int, int] = {int(Cell.OPPONENT): 0, int(Cell.AI): 0}
        self.round_number = 1
        self.rounds: List[RoundResult] = []
        self.match_winner: Optional[int] = None
        self.last_move: Optional[MoveRecord] = None

        self.game = ConnectKGame(self.settings, self.first_player)
        self._ai_task: Optional[asyncio.Task] = None

    # --- State ---

    def is_ai_turn(self) -> bool:
        return self.match_winner is None and self.game.current_turn == self.ai.player_id

    def get_state(self) -> MatchState:
        return MatchState(
            status=GameStatus.COMPLETED if self.match_winner else GameStatus.IN_PROGRESS,
            round_number=self.round_number,
            scores=dict(self.scores),
            score_to_win=self.settings.score_to_win,
            current_turn=int(self.game.current_turn),
            board=self.game.board.to_rows(),
            last_move=self.last_move,
            rounds=list(self.rounds),
            match_winner=self.match_winner,
        )

    # --- Moves ---

    async def play_human_move(self, column: int) -> MatchState:
        if self.match_winner is not None:
            raise InvalidMoveError("Match is already over")
        if self.game.current_turn != self.human_id:
            raise InvalidMoveError("Not the human player's turn")

        self.last_move = self.game.drop_piece(column)
        await self._finish_round_if_over()
        return self.get_state()

    async def step_ai_turn(self) -> MatchState:
        """Execute one AI turn and return the new match state"""
        if not self.is_ai_turn():
            return self.get_state()

        # --- TIMER START ---
        start_time = time.time()

        # Search on a snapshot in a worker thread; boards are immutable so the
        # live game can't be touched from there
        result = await asyncio.to_thread(self.ai.analyse, self.game.board)

        duration = round(time.time() - start_time, 3)

        if result.column is None:
            # Full board: the round is a draw and was already scored
            return self.get_state()

        move = self.game.drop_piece(result.column)
        move.score = result.score
        move.nodes_explored = result.nodes_explored
        move.duration = duration
        self.last_move = move

        logger.info(
            "AI played column %d (score %s, %d nodes, %.3fs)",
            move.column, result.score, result.nodes_explored, duration
        )

        await self._finish_round_if_over()
        return self.get_state()

    def start_ai_turn(self) -> asyncio.Task:
        """Schedules the AI turn in the background; reuses the pending one if any."""
        if self._ai_task is None or self._ai_task.done():
            self._ai_task = asyncio.create_task(self.step_ai_turn())
        return self._ai_task

    # --- Rounds ---

    async def _finish_round_if_over(self):
        game = self.game
        if not game.is_over():
            return

        winner = game.winner
        line = (game.win_line.start, game.win_line.end) if game.win_line else None
        self.rounds.append(RoundResult(
            round_number=self.round_number,
            status=GameStatus.COMPLETED if winner else GameStatus.DRAW,
            winner=winner,
            win_line=line,
            moves=len(game.history),
        ))

        if winner:
            self.scores[winner] += 1
            logger.info("Round %d won by player %d", self.round_number, winner)
        else:
            logger.info("Round %d is a draw", self.round_number)

        await self.events.notify_round_over(winner, self.scores[winner] if winner else None)

        if winner and self.scores[winner] >= self.settings.score_to_win:
            self.match_winner = winner
            logger.info("Match won by player %d (%s)", winner, self.scores)
            await self.events.notify_match_over(winner, dict(self.scores))
            return

        self.round_number += 1
        self.game = ConnectKGame(self.settings, self.first_player)
