from typing import List, Optional, Sequence, Tuple

from connectk.models.enums import Cell


class ColumnFullError(ValueError):
    """Raised when a piece is dropped into a column with no empty row."""


class Board:
    """
    Immutable Connect-K grid.

    Cells are indexed (column, row) and row 0 is the BOTTOM of the board,
    so a column is a tuple read from the bottom up. Values are Cell members:
    0=Empty, 1=Opponent (human), 2=AI.
    """

    __slots__ = ("columns", "rows", "cells")

    def __init__(self, cells: Sequence[Sequence[int]]):
        if not cells or not cells[0]:
            raise ValueError("Board needs at least one column and one row")

        self.columns = len(cells)
        self.rows = len(cells[0])
        self.cells: Tuple[Tuple[Cell, ...], ...] = tuple(
            tuple(Cell(v) for v in column) for column in cells
        )

        for c, column in enumerate(self.cells):
            if len(column) != self.rows:
                raise ValueError(f"Column {c} has {len(column)} rows, expected {self.rows}")
            # Gravity: no piece may sit above an empty cell
            seen_empty = False
            for r, value in enumerate(column):
                if value == Cell.EMPTY:
                    seen_empty = True
                elif seen_empty:
                    raise ValueError(f"Floating piece at column {c}, row {r}")

    @classmethod
    def _from_columns(cls, columns: int, rows: int, cells: Tuple[Tuple[Cell, ...], ...]) -> "Board":
        # Trusted constructor for simulated boards (skips validation)
        board = cls.__new__(cls)
        board.columns = columns
        board.rows = rows
        board.cells = cells
        return board

    @classmethod
    def empty(cls, columns: int = 7, rows: int = 6) -> "Board":
        return cls([[Cell.EMPTY] * rows for _ in range(columns)])

    @classmethod
    def from_rows(cls, matrix: Sequence[Sequence[int]]) -> "Board":
        """
        Converts a display matrix (matrix[row][col], row 0 = TOP) into a Board
        (column-major, row 0 = BOTTOM).
        """
        height = len(matrix)
        width = len(matrix[0]) if height else 0
        return cls([[matrix[height - 1 - r][c] for r in range(height)] for c in range(width)])

    def to_rows(self) -> List[List[int]]:
        """Inverse of from_rows: matrix[row][col] with row 0 at the top."""
        return [
            [int(self.cells[c][r]) for c in range(self.columns)]
            for r in range(self.rows - 1, -1, -1)
        ]

    def get(self, column: int, row: int) -> Cell:
        return self.cells[column][row]

    def in_bounds(self, column: int, row: int) -> bool:
        return 0 <= column < self.columns and 0 <= row < self.rows

    def valid_columns(self) -> List[int]:
        """Columns that are not full, in ascending order."""
        top = self.rows - 1
        return [c for c in range(self.columns) if self.cells[c][top] == Cell.EMPTY]

    def is_valid_move(self, column: int) -> bool:
        if column < 0 or column >= self.columns:
            return False
        return self.cells[column][self.rows - 1] == Cell.EMPTY

    def is_full(self) -> bool:
        return not self.valid_columns()

    def lowest_empty_row(self, column: int) -> Optional[int]:
        """Scans up from row 0; returns None if the column is full."""
        for row, value in enumerate(self.cells[column]):
            if value == Cell.EMPTY:
                return row
        return None

    def simulate_move(self, column: int, player: Cell) -> Tuple["Board", int]:
        """
        Returns a NEW board with `player` dropped into `column`, and the row it landed on.
        The receiving board is never modified.
        """
        row = self.lowest_empty_row(column)
        if row is None:
            raise ColumnFullError(f"Column {column} is full")

        old = self.cells[column]
        new_column = old[:row] + (Cell(player),) + old[row + 1:]
        cells = self.cells[:column] + (new_column,) + self.cells[column + 1:]
        return Board._from_columns(self.columns, self.rows, cells), row

    def count(self, player: Cell) -> int:
        return sum(column.count(player) for column in self.cells)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self.cells == other.cells

    def __hash__(self) -> int:
        return hash(self.cells)

    def __repr__(self) -> str:
        return f"Board(columns={self.columns}, rows={self.rows}, pieces={self.columns * self.rows - self.count(Cell.EMPTY)})"
