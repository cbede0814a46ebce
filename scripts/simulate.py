#!/usr/bin/env python3
"""Run headless Leekha games between two bot partnerships.

Usage:
    python scripts/simulate.py team probabilistic          # 100 games
    python scripts/simulate.py simple random --games 500 --seed 7
    python scripts/simulate.py team team --games 5 --log   # save JSON game logs
"""

import argparse
import logging
import sys

from simulation.runner import GameRunner, save_game_log
from simulation.tournament import run_match
from strategies.factory import StrategyFactory


def save_logs(team_a: str, team_b: str, num_games: int, seed: int, log_dir: str) -> None:
    """Play games with full trick logs and write each one to disk."""
    runner = GameRunner(StrategyFactory().create(team_a), StrategyFactory().create(team_b))
    for i in range(num_games):
        result, log = runner.run_game(seed=seed + i)
        path = save_game_log(log, base_dir=log_dir)
        print(f"  seed {seed + i}: seat {result.loser} lost "
              f"(team {result.losing_team}) after {result.rounds} rounds -> {path}")


def main() -> int:
    parser = argparse.ArgumentParser(description="Simulate Leekha partnership matches")
    parser.add_argument("team_a", choices=StrategyFactory.AVAILABLE_STRATEGIES,
                        help="Strategy for seats 0 and 2")
    parser.add_argument("team_b", choices=StrategyFactory.AVAILABLE_STRATEGIES,
                        help="Strategy for seats 1 and 3")
    parser.add_argument("--games", type=int, default=100, help="Number of games")
    parser.add_argument("--seed", type=int, default=0, help="Seed of the first game")
    parser.add_argument("--score-limit", type=int, default=101, help="Score that ends a game")
    parser.add_argument("--no-swap", action="store_true", help="Keep team A at seats 0 and 2")
    parser.add_argument("--log", action="store_true", help="Save a JSON log of every game")
    parser.add_argument("--log-dir", default="logs/games", help="Directory for game logs")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.games < 1:
        print("--games must be at least 1", file=sys.stderr)
        return 1

    if args.log:
        save_logs(args.team_a, args.team_b, args.games, args.seed, args.log_dir)
        return 0

    print(f"Running {args.games} games: {args.team_a} vs {args.team_b}")
    result = run_match(
        args.team_a, args.team_b,
        num_games=args.games,
        start_seed=args.seed,
        swap_seats=not args.no_swap,
        score_limit=args.score_limit,
    )
    print(result)
    print(f"Fallback moves: {result.fallbacks}, {result.duration_seconds:.1f}s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
