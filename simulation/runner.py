"""Headless game runner for Leekha simulations."""

from __future__ import annotations

import asyncio
import json
import logging
import time
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from leekha_engine.config import GameConfig
from leekha_engine.events import EventEmitter, GameEvent
from leekha_engine.game import LeekhaGame
from leekha_engine.seats import BotSeat

if TYPE_CHECKING:
    from strategies.base import Strategy

logger = logging.getLogger(__name__)


@dataclass
class GameResult:
    """Result of a completed game.

    Team 0 is seats 0 and 2, team 1 seats 1 and 3.
    """

    game_id: str
    loser: int
    losing_team: int
    rounds: int
    final_scores: tuple[int, ...]
    team_strategies: tuple[str, str]
    seed: int | None
    duration_ms: float
    fallbacks: int = 0

    @property
    def winning_team(self) -> int:
        return 1 - self.losing_team

    @property
    def team_points(self) -> tuple[int, int]:
        return (
            self.final_scores[0] + self.final_scores[2],
            self.final_scores[1] + self.final_scores[3],
        )


@dataclass
class TrickRecord:
    """Record of a single trick."""

    round: int
    trick: int
    plays: list[tuple[int, str]]
    winner: int
    points: int


@dataclass
class GameLog:
    """Complete log of a game."""

    game_id: str
    timestamp: str
    seed: int | None
    team_strategies: tuple[str, str]
    rounds: list[dict] = field(default_factory=list)
    tricks: list[TrickRecord] = field(default_factory=list)
    result: GameResult | None = None


class GameRunner:
    """Runs Leekha games between two partnerships of bots."""

    def __init__(
        self,
        strategy0: Strategy,
        strategy1: Strategy,
        score_limit: int = 101,
        log_tricks: bool = True,
    ):
        """Initialize the game runner.

        Args:
            strategy0: Strategy for seats 0 and 2.
            strategy1: Strategy for seats 1 and 3.
            score_limit: Score that ends the game.
            log_tricks: Whether to record every trick.
        """
        self.strategies = (strategy0, strategy1)
        self.score_limit = score_limit
        self.log_tricks = log_tricks

    def run_game(self, seed: int | None = None) -> tuple[GameResult, GameLog | None]:
        """Run a single game.

        Args:
            seed: Random seed for reproducibility.

        Returns:
            Tuple of (result, log). Log is None if log_tricks is False.
        """
        return asyncio.run(self.play(seed))

    async def play(self, seed: int | None = None) -> tuple[GameResult, GameLog | None]:
        """Coroutine version of ``run_game`` for callers already inside a loop."""
        start_time = time.perf_counter()
        game_id = str(uuid.uuid4())
        names = (self.strategies[0].name, self.strategies[1].name)

        seats = [
            BotSeat.for_strategy(self.strategies[seat % 2], seat, name=f"{names[seat % 2]} #{seat}")
            for seat in range(4)
        ]
        events = EventEmitter()
        game = LeekhaGame(
            seats,
            config=GameConfig(score_limit=self.score_limit, selection_timeout=None, seed=seed),
            events=events,
        )

        game_log = None
        if self.log_tricks:
            game_log = GameLog(
                game_id=game_id,
                timestamp=datetime.now().isoformat(),
                seed=seed,
                team_strategies=names,
            )
            events.on(GameEvent.PASS_PHASE_COMPLETE, lambda _e, _p: game_log.rounds.append({
                "round": game.round_number,
                "dealer": game.dealer,
                "leader": game.round.leader,
                "hands": [[c.id for c in hand] for hand in game.initial_hands],
            }))
            events.on(GameEvent.TRICK_COMPLETE, lambda _e, p: game_log.tricks.append(TrickRecord(
                round=game.round_number,
                trick=p["trick_number"],
                plays=[(play["seat"], play["card"]) for play in p["trick"]],
                winner=p["winner"],
                points=p["points"],
            )))

        fallbacks = 0

        def count_fallback(_event: GameEvent, _payload: dict) -> None:
            nonlocal fallbacks
            fallbacks += 1

        events.on(GameEvent.ERROR_OCCURRED, count_fallback)
        events.on(GameEvent.INVALID_MOVE, count_fallback)

        outcome = await game.play_game()
        duration_ms = (time.perf_counter() - start_time) * 1000

        result = GameResult(
            game_id=game_id,
            loser=outcome.loser,
            losing_team=outcome.losing_team,
            rounds=len(outcome.rounds),
            final_scores=outcome.scores,
            team_strategies=names,
            seed=seed,
            duration_ms=duration_ms,
            fallbacks=fallbacks,
        )
        if fallbacks:
            logger.warning(f"Game {game_id} needed {fallbacks} fallback moves")
        if game_log:
            game_log.result = result
        return result, game_log


def save_game_log(log: GameLog, base_dir: str = "logs/games") -> Path:
    """Save a game log to disk.

    Args:
        log: Game log to save.
        base_dir: Base directory for logs.

    Returns:
        Path to the saved file.
    """
    date_str = log.timestamp[:10]  # YYYY-MM-DD
    dir_path = Path(base_dir) / date_str
    dir_path.mkdir(parents=True, exist_ok=True)

    file_path = dir_path / f"game_{log.game_id}.json"

    data: dict[str, Any] = {
        "game_id": log.game_id,
        "timestamp": log.timestamp,
        "seed": log.seed,
        "team_strategies": log.team_strategies,
        "rounds": log.rounds,
        "tricks": [asdict(t) for t in log.tricks],
        "result": asdict(log.result) if log.result else None,
    }

    with open(file_path, "w") as f:
        json.dump(data, f, indent=2)

    return file_path


def run_batch(
    strategy0: Strategy,
    strategy1: Strategy,
    num_games: int,
    start_seed: int = 0,
    log_tricks: bool = False,
    score_limit: int = 101,
) -> list[GameResult]:
    """Run multiple games.

    Args:
        strategy0: Strategy for seats 0 and 2.
        strategy1: Strategy for seats 1 and 3.
        num_games: Number of games to run.
        start_seed: Starting seed (incremented for each game).
        log_tricks: Whether to log tricks (slower).
        score_limit: Score that ends each game.

    Returns:
        List of game results.
    """
    runner = GameRunner(strategy0, strategy1, score_limit=score_limit, log_tricks=log_tricks)
    results = []

    for i in range(num_games):
        result, _ = runner.run_game(seed=start_seed + i)
        results.append(result)

    return results
