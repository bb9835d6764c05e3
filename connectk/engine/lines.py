"""
Line detection anchored at a just-placed piece.

Every check walks outward from (column, row) along one axis in both directions.
The player examined is always the owner of the anchor cell.
"""

from typing import Iterator, List, Optional, Tuple

from pydantic import BaseModel

from connectk.engine.board import Board
from connectk.models.enums import Axis, Cell

# (d_col, d_row) of the "forward" direction; the walk also goes the opposite way.
# "/" pairs (+i,+i) with (-i,-i); "\" pairs (-i,+i) with (+i,-i).
AXES = {
    Axis.HORIZONTAL: (1, 0),
    Axis.VERTICAL: (0, 1),
    Axis.DIAGONAL_UP: (1, 1),
    Axis.DIAGONAL_DOWN: (-1, 1),
}


class WinLine(BaseModel):
    axis: Axis
    start: Tuple[int, int]  # (column, row) of one end of the run
    end: Tuple[int, int]    # (column, row) of the other end


class LineDetector:
    def __init__(self, win_length: int):
        self.win_length = win_length

    def _walk(self, board: Board, column: int, row: int, d_col: int, d_row: int,
              player: Cell, max_steps: int) -> int:
        """Number of consecutive `player` cells after the anchor, capped at max_steps."""
        steps = 0
        for i in range(1, max_steps + 1):
            c, r = column + d_col * i, row + d_row * i
            if not board.in_bounds(c, r) or board.cells[c][r] != player:
                break
            steps += 1
        return steps

    def check_win(self, board: Board, column: int, row: int) -> Optional[WinLine]:
        """
        Returns the winning line through (column, row) for the piece owning that cell,
        or None. Axes are checked horizontal, vertical, "/" then "\\".
        """
        player = board.cells[column][row]
        if player == Cell.EMPTY:
            return None

        reach = self.win_length - 1
        for axis, (d_col, d_row) in AXES.items():
            forward = self._walk(board, column, row, d_col, d_row, player, reach)
            backward = self._walk(board, column, row, -d_col, -d_row, player, reach)

            if 1 + forward + backward >= self.win_length:
                return WinLine(
                    axis=axis,
                    start=(column - d_col * backward, row - d_row * backward),
                    end=(column + d_col * forward, row + d_row * forward),
                )
        return None

    def is_win(self, board: Board, column: int, row: int) -> bool:
        return self.check_win(board, column, row) is not None

    def has_run(self, board: Board, column: int, row: int, player: Cell, length: int, axis: Axis) -> bool:
        """True if `player` owns the anchor and a run of at least `length` passes through it."""
        if board.cells[column][row] != player:
            return False

        d_col, d_row = AXES[axis]
        reach = length - 1
        count = 1
        count += self._walk(board, column, row, d_col, d_row, player, reach)
        count += self._walk(board, column, row, -d_col, -d_row, player, reach)
        return count >= length

    def win_possible(self, board: Board, column: int, row: int, player: Cell, axis: Axis) -> bool:
        """
        True if a full win_length run for `player` through the anchor could still be
        completed on this axis, i.e. the opponent does not box it in within reach.
        """
        opponent = player.other
        d_col, d_row = AXES[axis]
        count = 1

        for sign in (1, -1):
            for i in range(1, self.win_length):
                c, r = column + sign * d_col * i, row + sign * d_row * i
                if not board.in_bounds(c, r) or board.cells[c][r] == opponent:
                    break
                count += 1

        return count >= self.win_length

    def run_score(self, board: Board, column: int, row: int, player: Cell, length: int, axis: Axis) -> int:
        """1 if a still-completable run of `length` passes through the anchor, else 0."""
        if not self.has_run(board, column, row, player, length, axis):
            return 0
        return 1 if self.win_possible(board, column, row, player, axis) else 0

    def _winning_drops(self, board: Board, player: Cell) -> Iterator[int]:
        for column in board.valid_columns():
            next_board, row = board.simulate_move(column, player)
            if self.is_win(next_board, column, row):
                yield column

    def winning_columns(self, board: Board, player: Cell) -> List[int]:
        """Columns where `player` would complete a line on their next drop."""
        return list(self._winning_drops(board, player))

    def can_win_next_move(self, board: Board, player: Cell) -> bool:
        # Column 0 is falsy: compare against None
        return next(self._winning_drops(board, player), None) is not None
