from pydantic import BaseModel, ConfigDict
from typing import Dict, List, Optional, Tuple

from connectk.models.enums import GameStatus

class SearchResult(BaseModel):
    column: Optional[int] = None  # None when every column is full
    score: Optional[int] = None
    scores: Dict[int, int] = {}   # Root score per playable column
    depth: int
    nodes_explored: int = 0
    highest_budget: int = 0       # Max of (valid moves ** remaining depth) seen

class MoveRecord(BaseModel):
    model_config = ConfigDict(extra='ignore')

    player: int
    column: int
    row: int

    # Only filled in for AI moves
    score: Optional[int] = None
    nodes_explored: Optional[int] = 0
    duration: Optional[float] = 0.0

class RoundResult(BaseModel):
    round_number: int
    status: GameStatus  # COMPLETED or DRAW
    winner: Optional[int] = None  # None for a draw
    win_line: Optional[Tuple[Tuple[int, int], Tuple[int, int]]] = None
    moves: int

class MatchState(BaseModel):
    status: GameStatus = GameStatus.IN_PROGRESS
    round_number: int
    scores: Dict[int, int]
    score_to_win: int
    current_turn: int
    board: List[List[int]]  # Row 0 = TOP
    last_move: Optional[MoveRecord] = None
    rounds: List[RoundResult] = []
    match_winner: Optional[int] = None
