"""Partnership matches between Leekha strategies.

A match pits one strategy (seats 0 and 2) against another (seats 1 and 3)
over many seeded games and reports win rates with confidence intervals.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from simulation.runner import GameRunner
from strategies.factory import StrategyFactory

if TYPE_CHECKING:
    from strategies.base import Strategy

logger = logging.getLogger(__name__)


@dataclass
class MatchResult:
    """Result of a match (series of games) between two partnerships.

    Attributes:
        strategy_a: Name of the first team's strategy.
        strategy_b: Name of the second team's strategy.
        wins_a: Games where team A did not hold the loser.
        wins_b: Games where team B did not hold the loser.
        total_games: Total games played.
        avg_rounds: Average rounds per game.
        avg_points_a: Average final team score for team A.
        avg_points_b: Average final team score for team B.
        fallbacks: Moves that had to be replaced by a default.
        duration_seconds: Wall-clock time for the match.
    """

    strategy_a: str
    strategy_b: str
    wins_a: int
    wins_b: int
    total_games: int
    avg_rounds: float
    avg_points_a: float
    avg_points_b: float
    fallbacks: int = 0
    duration_seconds: float = 0.0

    @property
    def win_rate_a(self) -> float:
        if self.total_games == 0:
            return 0.0
        return self.wins_a / self.total_games

    @property
    def win_rate_b(self) -> float:
        if self.total_games == 0:
            return 0.0
        return self.wins_b / self.total_games

    def confidence_interval(self, confidence: float = 0.95) -> tuple[float, float]:
        """Wilson score confidence interval for team A's win rate."""
        if self.total_games == 0:
            return (0.0, 1.0)

        z = {0.90: 1.645, 0.95: 1.96, 0.99: 2.576}.get(confidence, 1.96)
        n = self.total_games
        p = self.win_rate_a

        denom = 1 + z * z / n
        center = (p + z * z / (2 * n)) / denom
        spread = z * math.sqrt(p * (1 - p) / n + z * z / (4 * n * n)) / denom
        return (max(0.0, center - spread), min(1.0, center + spread))

    def __str__(self) -> str:
        low, high = self.confidence_interval()
        return (
            f"{self.strategy_a} vs {self.strategy_b}: {self.wins_a}-{self.wins_b} "
            f"[{self.win_rate_a:.1%} win rate, 95% CI: {low:.1%}-{high:.1%}] "
            f"avg {self.avg_rounds:.1f} rounds, "
            f"team points {self.avg_points_a:.1f}/{self.avg_points_b:.1f}"
        )


def _resolve(strategy: Strategy | str) -> Strategy:
    if isinstance(strategy, str):
        return StrategyFactory().create(strategy)
    return strategy


def run_match(
    strategy_a: Strategy | str,
    strategy_b: Strategy | str,
    num_games: int,
    start_seed: int = 0,
    swap_seats: bool = True,
    score_limit: int = 101,
) -> MatchResult:
    """Run a series of games between two partnerships.

    Args:
        strategy_a: First team's strategy, or a registered strategy name.
        strategy_b: Second team's strategy, or a registered strategy name.
        num_games: Number of games to play.
        start_seed: Seed of the first game, incremented per game.
        swap_seats: Alternate which team sits at seats 0 and 2.
        score_limit: Score that ends each game.

    Returns:
        MatchResult with statistics from team A's perspective.
    """
    strategy_a = _resolve(strategy_a)
    strategy_b = _resolve(strategy_b)
    start_time = time.perf_counter()

    normal = GameRunner(strategy_a, strategy_b, score_limit=score_limit, log_tricks=False)
    swapped = GameRunner(strategy_b, strategy_a, score_limit=score_limit, log_tricks=False)

    wins_a = 0
    total_rounds = 0
    points_a = 0
    points_b = 0
    fallbacks = 0

    for i in range(num_games):
        flipped = swap_seats and i % 2 == 1
        runner = swapped if flipped else normal
        result, _ = runner.run_game(seed=start_seed + i)

        team_a = 1 if flipped else 0
        if result.winning_team == team_a:
            wins_a += 1
        team_points = result.team_points
        points_a += team_points[team_a]
        points_b += team_points[1 - team_a]
        total_rounds += result.rounds
        fallbacks += result.fallbacks

    duration = time.perf_counter() - start_time
    logger.info(f"Match {strategy_a.name} vs {strategy_b.name}: {num_games} games in {duration:.1f}s")

    return MatchResult(
        strategy_a=strategy_a.name,
        strategy_b=strategy_b.name,
        wins_a=wins_a,
        wins_b=num_games - wins_a,
        total_games=num_games,
        avg_rounds=total_rounds / num_games if num_games else 0.0,
        avg_points_a=points_a / num_games if num_games else 0.0,
        avg_points_b=points_b / num_games if num_games else 0.0,
        fallbacks=fallbacks,
        duration_seconds=duration,
    )


def run_gauntlet(
    challenger: Strategy | str,
    opponents: list[Strategy | str],
    games_per_opponent: int = 100,
    start_seed: int = 0,
) -> list[MatchResult]:
    """Play one strategy's partnership against several opposing partnerships.

    Useful for checking a weight change against the established presets.
    """
    results = []
    for offset, opponent in enumerate(opponents):
        results.append(run_match(
            challenger, opponent,
            num_games=games_per_opponent,
            start_seed=start_seed + offset * games_per_opponent,
        ))
    return results
