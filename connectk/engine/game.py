import logging
from typing import List, Optional

from connectk.core.settings import GameSettings
from connectk.engine.board import Board
from connectk.engine.lines import LineDetector, WinLine
from connectk.models.enums import Cell
from connectk.schemas.game_schema import MoveRecord

# Logger setup
logger = logging.getLogger(__name__)


class InvalidMoveError(ValueError):
    pass


class ConnectKGame:
    def __init__(self, settings: Optional[GameSettings] = None, first_player: int = Cell.OPPONENT):
        """
        One round of play.
        Board uses (column, row) indexing with row 0 at the BOTTOM.
        Values: 0=Empty, 1=Player1 (human), 2=Player2 (AI)
        """
        self.settings = settings or GameSettings()
        self.detector = LineDetector(self.settings.win_length)
        self.board = Board.empty(self.settings.columns, self.settings.rows)
        self.current_turn = Cell(first_player)
        self.winner: Optional[int] = None
        self.win_line: Optional[WinLine] = None
        self.history: List[MoveRecord] = []

    def get_valid_moves(self) -> List[int]:
        return self.board.valid_columns()

    def is_valid_move(self, col: int) -> bool:
        return self.board.is_valid_move(col)

    def drop_piece(self, col: int) -> MoveRecord:
        """
        Drops a piece for the current player.
        Raises InvalidMoveError if the column is full / out of range or the round is over.
        """
        if self.is_over():
            raise InvalidMoveError("Round is already over")
        if not self.is_valid_move(col):
            raise InvalidMoveError(f"Invalid move: column {col}")

        self.board, row = self.board.simulate_move(col, self.current_turn)
        move = MoveRecord(player=int(self.current_turn), column=col, row=row)
        self.history.append(move)
        logger.debug("Player %d placed at (%d,%d)", move.player, col, row)

        self.win_line = self.detector.check_win(self.board, col, row)
        if self.win_line:
            self.winner = int(self.current_turn)
        else:
            self.switch_turn()
        return move

    def switch_turn(self):
        self.current_turn = self.current_turn.other

    def is_draw(self) -> bool:
        """Returns True if board is full and no winner."""
        return self.winner is None and self.board.is_full()

    def is_over(self) -> bool:
        return self.winner is not None or self.board.is_full()

    # --- Formatting for the console ---

    def get_visual_board(self) -> str:
        """Generates an ASCII grid representation, top row first."""
        symbols = {0: ".", 1: "X", 2: "O"}
        header = " " + " ".join([str(i) for i in range(self.board.columns)])
        rows_str = []
        for row in self.board.to_rows():
            rows_str.append("|" + "|".join(symbols[v] for v in row) + "|")
        return header + "\n" + "\n".join(rows_str)

    def get_textual_description(self) -> str:
        """
        Describes the board column by column, listing pieces from Bottom to Top.
        Example: 'Column 0: P1, P2'
        """
        lines = []
        for c, column in enumerate(self.board.cells):
            pieces = []
            for val in column:
                if val == Cell.EMPTY:
                    break  # Stop at first empty space
                pieces.append(f"P{int(val)}")

            desc = ", ".join(pieces) if pieces else "Empty"
            lines.append(f"Column {c}: {desc}")
        return "\n".join(lines)
