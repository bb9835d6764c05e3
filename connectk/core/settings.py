import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, model_validator

from connectk.models.enums import Difficulty, EvaluatorKind

load_dotenv()

DEFAULT_SETTINGS_PATH = Path(__file__).resolve().parent.parent / "config" / "settings.yaml"
DEFAULT_PROFILE = "classic"


class EvaluationWeights(BaseModel):
    model_config = ConfigDict(frozen=True)

    ai_win: int = 1000
    ai_three: int = 5
    ai_two: int = 2

    player_win: int = 1000
    player_three: int = 5
    player_two: int = 2

    center_bonus: int = 3
    # Returned when the opponent can win on their next drop; a completed
    # opponent line scores this minus the remaining depth. Must rank below
    # every heuristic score, which reaches down to -player_win.
    opponent_win_penalty: int = -10000

    @model_validator(mode="after")
    def _check_penalty(self) -> "EvaluationWeights":
        if self.opponent_win_penalty >= -self.player_win:
            raise ValueError(
                f"opponent_win_penalty ({self.opponent_win_penalty}) must be below -player_win ({-self.player_win})"
            )
        return self


class GameSettings(BaseModel):
    """Board geometry, search depth and evaluation config for one AI player."""
    model_config = ConfigDict(frozen=True)

    columns: int = Field(default=7, ge=1)
    rows: int = Field(default=6, ge=1)
    win_length: int = Field(default=4, ge=2)

    difficulty: Difficulty = Difficulty.MEDIUM
    search_depth: Optional[int] = Field(default=None, ge=1)  # Overrides difficulty

    evaluator: EvaluatorKind = EvaluatorKind.PLACEMENT
    weights: EvaluationWeights = Field(default_factory=EvaluationWeights)

    # Rounds needed to take a match
    score_to_win: int = Field(default=3, ge=1)

    @model_validator(mode="before")
    @classmethod
    def _parse_difficulty(cls, data: Any) -> Any:
        # Allow "easy" / "HARD" in YAML as well as the numeric depth
        if isinstance(data, dict) and isinstance(data.get("difficulty"), str):
            name = data["difficulty"].upper()
            if name not in Difficulty.__members__:
                raise ValueError(f"Unknown difficulty: {data['difficulty']}")
            data = dict(data)
            data["difficulty"] = Difficulty[name]
        return data

    @model_validator(mode="after")
    def _check_geometry(self) -> "GameSettings":
        if self.win_length > self.columns and self.win_length > self.rows:
            raise ValueError(
                f"win_length {self.win_length} does not fit a {self.columns}x{self.rows} board"
            )
        return self

    @property
    def depth(self) -> int:
        return self.search_depth if self.search_depth is not None else int(self.difficulty)


def load_profiles(path: Optional[str] = None) -> Dict[str, GameSettings]:
    """Reads every profile from the YAML settings file."""
    path = path or os.getenv("CONNECTK_SETTINGS") or str(DEFAULT_SETTINGS_PATH)
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}

    return {
        name: GameSettings(**(values or {}))
        for name, values in data.get("profiles", {}).items()
    }


def load_settings(profile: Optional[str] = None, path: Optional[str] = None) -> GameSettings:
    """
    Returns the settings for one profile.
    Profile resolution: argument, then CONNECTK_PROFILE, then "classic".
    """
    profile = profile or os.getenv("CONNECTK_PROFILE") or DEFAULT_PROFILE
    profiles = load_profiles(path)
    if profile not in profiles:
        raise KeyError(f"Unknown settings profile: {profile}")
    return profiles[profile]
