from enum import IntEnum, StrEnum

class Cell(IntEnum):
    EMPTY = 0
    OPPONENT = 1  # Player A (human)
    AI = 2        # Player B (computer)

    @property
    def other(self) -> "Cell":
        if self == Cell.EMPTY:
            raise ValueError("Empty cell has no opponent")
        return Cell.AI if self == Cell.OPPONENT else Cell.OPPONENT

class Difficulty(IntEnum):
    """Value is the search depth."""
    EASY = 2
    MEDIUM = 4
    HARD = 6

class EvaluatorKind(StrEnum):
    PLACEMENT = "placement"
    WINDOW = "window"

class Axis(StrEnum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    DIAGONAL_UP = "diagonal_up"      # "/"
    DIAGONAL_DOWN = "diagonal_down"  # "\"

class GameStatus(StrEnum):
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    DRAW = "DRAW"
