"""Command-line interface for Leekha."""

from __future__ import annotations

import argparse
import asyncio
import logging
from typing import TYPE_CHECKING, Any, Sequence

from leekha_engine.adapter import hand_by_suit
from leekha_engine.cards import Card
from leekha_engine.config import GameConfig
from leekha_engine.events import EventEmitter, GameEvent
from leekha_engine.game import LeekhaGame
from leekha_engine.seats import BotSeat, HumanSeat
from leekha_engine.selection import InputProvider

if TYPE_CHECKING:
    from leekha_engine.seats import Seat

SEAT_NAMES = ["You", "East", "Partner", "West"]


def format_hand(hand: Sequence[Card], numbered: Sequence[Card] = ()) -> str:
    """Format a hand grouped by suit; legal cards get a selection number."""
    lines = []
    for suit_cards in hand_by_suit(hand):
        parts = []
        for card in suit_cards:
            if card in numbered:
                parts.append(f"{numbered.index(card) + 1}:{card}")
            else:
                parts.append(f"  {card}")
        if parts:
            lines.append("  " + " ".join(parts))
    return "\n".join(lines) or "  (empty)"


class ConsoleInput(InputProvider):
    """Reads choices from stdin without blocking the event loop."""

    async def select_card(self, seat: int, hand: Sequence[Card], legal: Sequence[Card]) -> Card:
        legal = list(legal)
        print("\nYour hand:")
        print(format_hand(hand, numbered=legal))
        while True:
            choice = (await asyncio.to_thread(input, "Play card #: ")).strip()
            try:
                index = int(choice) - 1
            except ValueError:
                print("Please enter a number")
                continue
            if 0 <= index < len(legal):
                return legal[index]
            print(f"Please enter a number 1-{len(legal)}")

    async def select_pass(self, seat: int, hand: Sequence[Card], count: int) -> list[Card]:
        hand = list(hand)
        print(f"\nPass {count} cards to {SEAT_NAMES[(seat + 3) % 4]}:")
        print(format_hand(hand, numbered=hand))
        while True:
            raw = await asyncio.to_thread(input, f"Cards to pass ({count} numbers): ")
            try:
                indices = {int(part) - 1 for part in raw.replace(",", " ").split()}
            except ValueError:
                print("Please enter numbers separated by spaces")
                continue
            if len(indices) == count and all(0 <= i < len(hand) for i in indices):
                return [hand[i] for i in sorted(indices)]
            print(f"Please choose {count} different cards")


def print_events(event: GameEvent, payload: dict[str, Any]) -> None:
    """Narrate the game on stdout."""
    match event:
        case GameEvent.ROUND_START:
            print("\n" + "=" * 60)
            print(f"Round {payload['round_number']} | Dealer: {SEAT_NAMES[payload['dealer']]}")
            print("=" * 60)
        case GameEvent.CARD_PLAYED:
            print(f"  {SEAT_NAMES[payload['seat']]:>8} plays {Card.from_id(payload['card'])}")
        case GameEvent.TRICK_COMPLETE:
            points = f" (+{payload['points']})" if payload["points"] else ""
            print(f"  -> {SEAT_NAMES[payload['winner']]} takes the trick{points}\n")
        case GameEvent.ROUND_END:
            print("Round points: " + ", ".join(
                f"{SEAT_NAMES[i]} {p}" for i, p in enumerate(payload["round_points"])
            ))
            print("Scores:       " + ", ".join(
                f"{SEAT_NAMES[p['seat']]} {p['score']}" for p in payload["players"]
            ))
        case GameEvent.GAME_OVER:
            print("\n" + "=" * 60)
            team = "Your team" if payload["losing_team"] == 0 else "Opponents"
            print(f"GAME OVER - {SEAT_NAMES[payload['loser']]} went over. {team} lose.")
            print("=" * 60)
        case GameEvent.ERROR_OCCURRED | GameEvent.INVALID_MOVE:
            print(f"  ! {event.value}: {payload}")


def _bot_seats(strategy: str, seats: Sequence[int]) -> dict[int, Seat]:
    from strategies.factory import StrategyFactory

    factory = StrategyFactory()
    return {
        seat: BotSeat.for_strategy(factory.create(strategy), seat, name=SEAT_NAMES[seat])
        for seat in seats
    }


def play_interactive(strategy: str = "simple", seed: int | None = None, score_limit: int = 101) -> None:
    """Play at seat 0 with a bot partner against two bots."""
    events = EventEmitter()
    events.on(None, print_events)
    seats = _bot_seats(strategy, (1, 2, 3))
    seats[0] = HumanSeat(SEAT_NAMES[0], ConsoleInput())
    game = LeekhaGame(
        [seats[i] for i in range(4)],
        config=GameConfig(score_limit=score_limit, selection_timeout=None, seed=seed),
        events=events,
    )

    print("\nWelcome to Leekha!")
    print("Avoid hearts, Q♠ (13) and 10♦ (10). Ctrl+C to quit.")
    try:
        asyncio.run(game.play_game())
    except KeyboardInterrupt:
        print("\nGoodbye!")


def watch_game(strategy: str = "simple", opponent: str = "random", seed: int | None = None) -> None:
    """Watch a team of bots play another."""
    events = EventEmitter()
    events.on(None, print_events)
    seats = {**_bot_seats(strategy, (0, 2)), **_bot_seats(opponent, (1, 3))}
    game = LeekhaGame([seats[i] for i in range(4)], config=GameConfig(seed=seed), events=events)

    print(f"\nWatching: {strategy} (You/Partner) vs {opponent} (East/West)")
    try:
        asyncio.run(game.play_game())
    except KeyboardInterrupt:
        print("\nStopped.")


def run_tournament(team_a: str, team_b: str, num_games: int = 100, seed: int = 42) -> None:
    """Run a match between two strategies."""
    from simulation.tournament import run_match

    print(f"\nRunning {num_games} games: {team_a} vs {team_b}")
    result = run_match(team_a, team_b, num_games=num_games, start_seed=seed)
    print(result)


def main() -> None:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(description="Leekha card game")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    play_parser = subparsers.add_parser("play", help="Play against bots")
    play_parser.add_argument("--strategy", default="simple", help="Bot strategy")
    play_parser.add_argument("--seed", type=int, help="Random seed")
    play_parser.add_argument("--score-limit", type=int, default=101, help="Score that ends the game")

    watch_parser = subparsers.add_parser("watch", help="Watch bots play")
    watch_parser.add_argument("--strategy", default="simple", help="Strategy for seats 0 and 2")
    watch_parser.add_argument("--opponent", default="random", help="Strategy for seats 1 and 3")
    watch_parser.add_argument("--seed", type=int, help="Random seed")

    tournament_parser = subparsers.add_parser("tournament", help="Run a match")
    tournament_parser.add_argument("team_a", help="Strategy for seats 0 and 2")
    tournament_parser.add_argument("team_b", help="Strategy for seats 1 and 3")
    tournament_parser.add_argument("--games", type=int, default=100, help="Number of games")
    tournament_parser.add_argument("--seed", type=int, default=42, help="Random seed")

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.command == "play":
        play_interactive(strategy=args.strategy, seed=args.seed, score_limit=args.score_limit)
    elif args.command == "watch":
        watch_game(strategy=args.strategy, opponent=args.opponent, seed=args.seed)
    elif args.command == "tournament":
        run_tournament(args.team_a, args.team_b, num_games=args.games, seed=args.seed)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
