import logging
import math

from connectk.engine.board import Board, ColumnFullError
from connectk.engine.evaluation import EvaluationStrategy
from connectk.schemas.game_schema import SearchResult

logger = logging.getLogger(__name__)


class SearchStats:
    """Per-call counters, handed back inside the SearchResult."""
    def __init__(self):
        self.nodes = 0
        self.highest_budget = 0


class MinimaxSearch:
    def __init__(self, evaluator: EvaluationStrategy, pruning: bool = True):
        self.evaluator = evaluator
        self.detector = evaluator.detector
        self.ai = evaluator.ai
        self.opponent = evaluator.opponent
        self.pruning = pruning

    def solve(self, board: Board, depth: int) -> SearchResult:
        """
        Root Entry Point.
        Tries every playable column for the AI and searches the reply tree
        `depth` plies deep. Ties keep the lowest column.
        """
        stats = SearchStats()
        scores = {}
        best_score = None
        best_column = None

        for column in board.valid_columns():
            try:
                next_board, row = board.simulate_move(column, self.ai)
            except ColumnFullError as e:
                logger.error("Skipping root column %d: %s", column, e)
                continue

            # Full window per column so every root score is exact,
            # not just a bound against the best column so far
            score = self.minimax(next_board, column, row, depth, -math.inf, math.inf, False, stats)
            scores[column] = score

            if best_score is None or score > best_score:
                best_score = score
                best_column = column

        if best_column is None:
            logger.warning("No valid move available, board is full")
        else:
            logger.debug(
                "Search depth=%d picked column %d (score %d, %d nodes)",
                depth, best_column, best_score, stats.nodes
            )

        return SearchResult(
            column=best_column,
            score=best_score,
            scores=scores,
            depth=depth,
            nodes_explored=stats.nodes,
            highest_budget=stats.highest_budget,
        )

    def minimax(self, board: Board, column: int, row: int, depth: int,
                alpha: float, beta: float, maximizing: bool, stats: SearchStats) -> int:
        """
        Scores the position after a piece landed on (column, row).
        `maximizing` is True when the AI is the next to drop.
        """
        stats.nodes += 1

        # 1. Terminal: out of depth, the last drop won, or nowhere left to play
        if depth == 0 or self.detector.is_win(board, column, row) or board.is_full():
            return self.evaluator.evaluate(board, column, row, depth, not maximizing)

        valid_moves = board.valid_columns()
        budget = len(valid_moves) ** depth
        if budget > stats.highest_budget:
            stats.highest_budget = budget

        player = self.ai if maximizing else self.opponent
        best = None

        # 2. Recursive Search
        for next_column in valid_moves:
            try:
                next_board, next_row = board.simulate_move(next_column, player)
            except ColumnFullError as e:
                logger.error("Skipping branch at column %d: %s", next_column, e)
                continue

            score = self.minimax(next_board, next_column, next_row, depth - 1, alpha, beta, not maximizing, stats)

            if maximizing:
                if best is None or score > best:
                    best = score
                alpha = max(alpha, score)
            else:
                if best is None or score < best:
                    best = score
                beta = min(beta, score)

            if self.pruning and beta <= alpha:
                break  # Cutoff

        if best is None:
            return self.evaluator.evaluate(board, column, row, depth, not maximizing)
        return best
