#!/usr/bin/env python3
"""Replay a bot decision from a saved debug snapshot.

The snapshot is the JSON from ``GET /api/games/{id}/debug`` or from
``LeekhaGame.debug_snapshot()``.

Usage:
    python scripts/replay_decision.py snapshot.json
    python scripts/replay_decision.py snapshot.json --seat 2 --strategy probabilistic
"""

import argparse
import json
import sys

from simulation.replay import replay_decision
from strategies.factory import StrategyFactory


def main() -> int:
    parser = argparse.ArgumentParser(description="Replay a Leekha bot decision")
    parser.add_argument("snapshot", help="Path to a debug snapshot JSON file")
    parser.add_argument("--seat", type=int, default=None, help="Seat to replay (default: current turn)")
    parser.add_argument("--strategy", default=StrategyFactory.DEFAULT,
                        choices=StrategyFactory.AVAILABLE_STRATEGIES)
    args = parser.parse_args()

    with open(args.snapshot) as f:
        snapshot = json.load(f)

    try:
        report = replay_decision(snapshot, StrategyFactory().create(args.strategy), seat=args.seat)
    except (KeyError, ValueError) as e:
        print(f"Cannot rebuild position: {e}", file=sys.stderr)
        return 1

    print(f"Seat {report['seat']} ({report['strategy']}), {report['kind']}")
    print(f"  Hand:   {' '.join(report['hand'])}")
    print(f"  Legal:  {' '.join(report['legal'])}")
    print(f"  Chosen: {' '.join(report['chosen'])}")
    if report["fallback"]:
        print(f"  Fallback: {report['fallback']}")
    print("Context:")
    print(json.dumps(report["context"], indent=2, default=sorted))
    return 0


if __name__ == "__main__":
    sys.exit(main())
