"""
Static Evaluation Strategies

Two interchangeable heuristics scoring a board from the AI's point of view
(positive favours the AI). The search engine only talks to EvaluationStrategy.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Sequence, Tuple

from connectk.core.settings import EvaluationWeights, GameSettings
from connectk.engine.board import Board
from connectk.engine.lines import AXES, LineDetector
from connectk.models.enums import Axis, Cell, EvaluatorKind

# Placement scoring treats both diagonals as one group
LINE_GROUPS: Tuple[Tuple[Axis, ...], ...] = (
    (Axis.HORIZONTAL,),
    (Axis.VERTICAL,),
    (Axis.DIAGONAL_UP, Axis.DIAGONAL_DOWN),
)


class EvaluationStrategy(ABC):
    """Base class for leaf evaluators"""

    def __init__(self, weights: EvaluationWeights, detector: LineDetector, ai_player: Cell = Cell.AI):
        self.weights = weights
        self.detector = detector
        self.ai = Cell(ai_player)
        self.opponent = self.ai.other

    def evaluate(self, board: Board, column: int, row: int, depth: int,
                 opponent_to_move: bool = True) -> int:
        """
        Scores `board` right after a piece landed on (column, row).
        `depth` is the remaining search depth, so earlier outcomes weigh more.
        `opponent_to_move` is False when the AI drops next and can still answer a threat.
        """
        w = self.weights
        if self.detector.is_win(board, column, row):
            # The round is over: the other side never gets to reply
            if board.cells[column][row] == self.ai:
                return w.ai_win + depth
            # Sooner losses are worse; always at or below a pending threat
            return w.opponent_win_penalty - depth

        if opponent_to_move and self.detector.can_win_next_move(board, self.opponent):
            return w.opponent_win_penalty

        return self.score(board, column, row, depth)

    @abstractmethod
    def score(self, board: Board, column: int, row: int, depth: int) -> int:
        """Heuristic score once the shared win / threat checks are out of the way"""
        pass

    def center_score(self, board: Board) -> int:
        center = board.columns // 2
        score = 0
        for value in board.cells[center]:
            if value == self.ai:
                score += self.weights.center_bonus
            elif value == self.opponent:
                score -= self.weights.center_bonus
        return score


class PlacementEvaluator(EvaluationStrategy):
    """
    Scores only the lines running through the last placed piece.
    Asymmetric on purpose: it is only called right after a simulated drop.
    """

    def _group_run(self, board: Board, column: int, row: int, player: Cell, length: int,
                   axes: Sequence[Axis]) -> int:
        for axis in axes:
            if self.detector.run_score(board, column, row, player, length, axis):
                return 1
        return 0

    def score(self, board: Board, column: int, row: int, depth: int) -> int:
        w = self.weights
        k = self.detector.win_length
        score = self.center_score(board)

        # NOTE: depth is added once per group whether or not the K-run exists
        for axes in LINE_GROUPS:
            score += self._group_run(board, column, row, self.ai, k, axes) * w.ai_win + depth
            score += self._group_run(board, column, row, self.ai, 3, axes) * w.ai_three
            score += self._group_run(board, column, row, self.ai, 2, axes) * w.ai_two

        for axes in LINE_GROUPS:
            score -= self._group_run(board, column, row, self.opponent, k, axes) * w.player_win - depth
            score -= self._group_run(board, column, row, self.opponent, 3, axes) * w.player_three
            score -= self._group_run(board, column, row, self.opponent, 2, axes) * w.player_two

        return score


class WindowEvaluator(EvaluationStrategy):
    """
    Slides a window of win_length cells over every row, column and diagonal
    of the whole board, independent of where the last piece went.
    """

    def __init__(self, weights: EvaluationWeights, detector: LineDetector, ai_player: Cell = Cell.AI):
        super().__init__(weights, detector, ai_player)
        self._windows: Dict[Tuple[int, int], List[List[Tuple[int, int]]]] = {}

    def windows(self, columns: int, rows: int) -> List[List[Tuple[int, int]]]:
        """All in-bounds windows for a board size, built once per geometry."""
        key = (columns, rows)
        if key not in self._windows:
            k = self.detector.win_length
            found = []
            for d_col, d_row in AXES.values():
                for c in range(columns):
                    for r in range(rows):
                        end_c, end_r = c + d_col * (k - 1), r + d_row * (k - 1)
                        if 0 <= end_c < columns and 0 <= end_r < rows:
                            found.append([(c + d_col * i, r + d_row * i) for i in range(k)])
            self._windows[key] = found
        return self._windows[key]

    def score(self, board: Board, column: int, row: int, depth: int) -> int:
        w = self.weights
        k = self.detector.win_length
        cells = board.cells
        score = self.center_score(board)

        for window in self.windows(board.columns, board.rows):
            ai = opp = empty = 0
            for c, r in window:
                value = cells[c][r]
                if value == self.ai:
                    ai += 1
                elif value == self.opponent:
                    opp += 1
                else:
                    empty += 1

            # Mixed window: nobody can complete it
            if ai and opp:
                continue

            if ai:
                if ai == k:
                    score += w.ai_win + depth
                elif ai == k - 1 and empty == 1:
                    score += w.ai_three
                elif ai == k - 2 and empty == 2:
                    score += w.ai_two
            elif opp:
                if opp == k:
                    score -= w.player_win + depth
                elif opp == k - 1 and empty == 1:
                    score -= w.player_three
                elif opp == k - 2 and empty == 2:
                    score -= w.player_two

        return score


# Strategy Registry
EVALUATORS = {
    EvaluatorKind.PLACEMENT: PlacementEvaluator,
    EvaluatorKind.WINDOW: WindowEvaluator,
}


def get_evaluator(settings: GameSettings, ai_player: Cell = Cell.AI) -> EvaluationStrategy:
    """Builds the evaluator selected by `settings.evaluator`."""
    strategy = EVALUATORS.get(settings.evaluator)
    if not strategy:
        raise ValueError(f"Unsupported evaluator: {settings.evaluator}")

    detector = LineDetector(settings.win_length)
    return strategy(settings.weights, detector, ai_player)
