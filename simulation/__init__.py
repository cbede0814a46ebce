"""Headless simulation and partnership matches."""

from simulation.runner import (
    GameLog,
    GameResult,
    GameRunner,
    TrickRecord,
    run_batch,
    save_game_log,
)
from simulation.replay import replay_decision, view_from_snapshot
from simulation.tournament import MatchResult, run_gauntlet, run_match

__all__ = [
    # runner
    "GameResult",
    "GameLog",
    "GameRunner",
    "TrickRecord",
    "save_game_log",
    "run_batch",
    # tournament
    "MatchResult",
    "run_match",
    "run_gauntlet",
    # replay
    "replay_decision",
    "view_from_snapshot",
]
