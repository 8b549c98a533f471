"""Session settings for a Battleship CLI run."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator

from battleship_cli.ai.targeting import DEFAULT_DIFFICULTY, Difficulty
from battleship_cli.engine.coordinates import DEFAULT_BOARD_SIZE, validate_board_size
from battleship_cli.telemetry.config import env_flag


class GameSettings(BaseModel):
    """Settings that survive `reset()`: they belong to the session, not to one game."""

    board_size: int = DEFAULT_BOARD_SIZE
    difficulty: int = Field(default=int(DEFAULT_DIFFICULTY), ge=0, le=3)
    emoji_display: bool = True
    rng_seed: int | None = None

    @field_validator("board_size")
    @classmethod
    def _check_board_size(cls, value: int) -> int:
        return validate_board_size(value)

    @property
    def difficulty_level(self) -> Difficulty:
        return Difficulty(self.difficulty)

    @classmethod
    def from_env(cls, **overrides: Any) -> "GameSettings":
        """Construct settings from `BATTLESHIP_*` env vars, then apply overrides."""

        data: Dict[str, Any] = {}
        board_size = os.getenv("BATTLESHIP_BOARD_SIZE")
        if board_size:
            data["board_size"] = int(board_size)
        difficulty = os.getenv("BATTLESHIP_DIFFICULTY")
        if difficulty:
            data["difficulty"] = int(difficulty)
        emoji = env_flag("BATTLESHIP_EMOJI")
        if emoji is not None:
            data["emoji_display"] = emoji
        seed = os.getenv("BATTLESHIP_SEED")
        if seed:
            data["rng_seed"] = int(seed)

        data.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**data)


@lru_cache(maxsize=1)
def load_game_settings() -> GameSettings:
    """Load and cache game settings from the environment."""

    return GameSettings.from_env()
