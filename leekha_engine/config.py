"""Game configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_SCORE_LIMIT = 101
DEFAULT_SELECTION_TIMEOUT = 60.0


@dataclass(frozen=True, slots=True)
class GameConfig:
    """Settings for a single game.

    Attributes:
        score_limit: Cumulative score that ends the game
        selection_timeout: Seconds a human seat has to choose, None = wait forever
        turn_delay: Pause (seconds) after each trick, for front ends that animate
        seed: RNG seed for dealing and the first-round dealer/leader draw
    """

    score_limit: int = DEFAULT_SCORE_LIMIT
    selection_timeout: float | None = DEFAULT_SELECTION_TIMEOUT
    turn_delay: float = 0.0
    seed: int | None = None

    def __post_init__(self) -> None:
        if self.score_limit <= 0:
            raise ValueError(f"score_limit must be positive, got {self.score_limit}")
        if self.selection_timeout is not None and self.selection_timeout <= 0:
            raise ValueError(
                f"selection_timeout must be positive or None, got {self.selection_timeout}"
            )
        if self.turn_delay < 0:
            raise ValueError(f"turn_delay must be >= 0, got {self.turn_delay}")

    @classmethod
    def from_env(cls, **overrides) -> GameConfig:
        """Build a config from LEEKHA_* environment variables.

        LEEKHA_SELECTION_TIMEOUT=0 disables the human timeout.
        """
        values: dict = {}
        if limit := os.environ.get("LEEKHA_SCORE_LIMIT"):
            values["score_limit"] = int(limit)
        if timeout := os.environ.get("LEEKHA_SELECTION_TIMEOUT"):
            values["selection_timeout"] = float(timeout) or None
        if delay := os.environ.get("LEEKHA_TURN_DELAY"):
            values["turn_delay"] = float(delay)
        if seed := os.environ.get("LEEKHA_SEED"):
            values["seed"] = int(seed)
        values.update(overrides)
        return cls(**values)
