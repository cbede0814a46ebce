"""Round and trick state machine for a four-seat Leekha game."""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass, field
from enum import IntEnum, auto
from typing import TYPE_CHECKING, Any, Sequence

from leekha_engine.cards import QUEEN_OF_SPADES, Card, create_deck, deal_hands, shuffle_deck, sort_hand
from leekha_engine.config import GameConfig
from leekha_engine.events import EventEmitter, GameEvent
from leekha_engine.rules import (
    PASS_COUNT,
    PLAYERS,
    ROUND_POINTS,
    TRICKS_PER_ROUND,
    fallback_pass,
    find_loser,
    get_valid_moves,
    next_seat,
    pass_target,
    team_of,
    trick_points,
    trick_winner,
)
from leekha_engine.seats import TableView
from leekha_engine.tracker import CardTracker

if TYPE_CHECKING:
    from leekha_engine.rules import Play
    from leekha_engine.seats import Seat

logger = logging.getLogger(__name__)


class GameSetupError(Exception):
    """Raised when a game cannot be started with the given seats."""

    pass


class GamePhase(IntEnum):
    """Current phase of the game."""

    DEALING = auto()
    PASSING = auto()
    LEADING = auto()
    FOLLOWING = auto()
    TRICK_RESOLVED = auto()
    ROUND_ENDED = auto()
    GAME_OVER = auto()


@dataclass
class RoundState:
    """Mutable bookkeeping for the round in progress."""

    number: int
    dealer: int
    leader: int
    points: list[int] = field(default_factory=lambda: [0] * PLAYERS)
    queen_captured_by: int | None = None
    tricks_played: int = 0


@dataclass(frozen=True, slots=True)
class RoundResult:
    number: int
    dealer: int
    leader: int
    points: tuple[int, ...]
    queen_captured_by: int | None
    scores_after: tuple[int, ...]


@dataclass(frozen=True, slots=True)
class GameOutcome:
    """Final result of a game."""

    loser: int
    losing_team: int
    scores: tuple[int, ...]
    rounds: tuple[RoundResult, ...]

    @property
    def winning_team(self) -> int:
        return 1 - self.losing_team


def _ids(cards: Sequence[Card]) -> list[str]:
    return [card.id for card in cards]


class LeekhaGame:
    """Drives one game from the first deal to game over.

    The game owns the hands, the trick and the round bookkeeping; the
    ``CardTracker`` owns public knowledge. Seats only ever receive
    ``TableView`` snapshots.
    """

    def __init__(
        self,
        seats: Sequence[Seat],
        config: GameConfig | None = None,
        events: EventEmitter | None = None,
        rng: random.Random | None = None,
    ):
        _validate_seats(seats)
        self.seats: list[Seat] = list(seats)
        self.config = config or GameConfig()
        self.events = events or EventEmitter()
        self._rng = rng or random.Random(self.config.seed)

        self.tracker = CardTracker()
        self.hands: list[list[Card]] = [[] for _ in range(PLAYERS)]
        self.initial_hands: list[list[Card]] = [[] for _ in range(PLAYERS)]
        self.trick: list[Play] = []
        self.scores: list[int] = [0] * PLAYERS
        self.phase = GamePhase.DEALING
        self.round: RoundState | None = None
        self.dealer: int | None = None
        self.current_turn: int | None = None
        self.rounds: list[RoundResult] = []
        self.loser: int | None = None

        self.events.emit(GameEvent.GAME_INITIALIZED, {
            "players": [seat.name for seat in self.seats],
            "score_limit": self.config.score_limit,
        })

    @property
    def round_number(self) -> int:
        return self.round.number if self.round else 0

    @property
    def is_game_over(self) -> bool:
        return self.phase == GamePhase.GAME_OVER

    # --- Game flow ---------------------------------------------------------

    async def play_game(self) -> GameOutcome:
        """Play rounds until a seat reaches the score limit."""
        self.events.emit(GameEvent.GAME_STARTED, self._players_payload())
        while not self.is_game_over:
            await self.play_round()
        return self.outcome()

    async def play_round(self) -> RoundResult:
        """Deal, pass, play thirteen tricks and score."""
        round_state = self.start_round()
        await self.passing_phase()

        leader = round_state.leader
        for _ in range(TRICKS_PER_ROUND):
            leader = await self.play_trick(leader)

        return self.end_round()

    def start_round(self) -> RoundState:
        """Reset the tracker, pick dealer and leader, and deal."""
        number = len(self.rounds) + 1
        if self.dealer is None:
            self.dealer = self._rng.randrange(PLAYERS)
            leader = self._rng.randrange(PLAYERS)
        else:
            leader = next_seat(self.dealer)

        self.round = RoundState(number=number, dealer=self.dealer, leader=leader)
        self.phase = GamePhase.DEALING
        self.tracker.reset()
        self.trick = []
        self.current_turn = None

        self.events.emit(GameEvent.TRICK_PILE_CLEAR, {})
        self.events.emit(GameEvent.ROUND_START, {
            "round_number": number,
            "dealer": self.dealer,
            "leader": leader,
        })
        self.events.emit(GameEvent.SCORE_UPDATED, self._players_payload())

        deck = shuffle_deck(create_deck(), rng=self._rng)
        self.hands = deal_hands(deck, PLAYERS)
        logger.info(f"Round {number}: dealer seat {self.dealer}, leader seat {leader}")
        self.events.emit(GameEvent.HANDS_DEALT, {
            "round_number": number,
            "hand_sizes": [len(hand) for hand in self.hands],
        })
        return self.round

    async def passing_phase(self) -> None:
        """Collect three cards from every seat at once, then exchange them."""
        self.phase = GamePhase.PASSING
        self.events.emit(GameEvent.PASS_PHASE_START, {"round_number": self.round_number})

        views = [self.view_for(seat) for seat in range(PLAYERS)]
        results = await asyncio.gather(
            *(seat.request_pass(view) for seat, view in zip(self.seats, views)),
            return_exceptions=True,
        )
        choices = [self._accept_pass(seat, result) for seat, result in enumerate(results)]

        # Take every pass out before handing any over.
        for seat, cards in enumerate(choices):
            for card in cards:
                self.hands[seat].remove(card)
        for seat, cards in enumerate(choices):
            target = pass_target(seat)
            self.hands[target] = sort_hand(self.hands[target] + cards)

        for seat in range(PLAYERS):
            self.events.emit(GameEvent.HAND_UPDATED, {"seat": seat, "hand": _ids(self.hands[seat])})

        self.initial_hands = [list(hand) for hand in self.hands]
        self.events.emit(GameEvent.PASS_PHASE_COMPLETE, {"round_number": self.round_number})

    async def play_trick(self, leader: int) -> int:
        """Collect one card from each seat starting at ``leader``. Returns the winner."""
        self.trick = []
        self.phase = GamePhase.LEADING
        self.events.emit(GameEvent.TRICK_PILE_CLEAR, {})

        seat = leader
        for position in range(PLAYERS):
            if position > 0:
                self.phase = GamePhase.FOLLOWING
            self.current_turn = seat
            self.events.emit(GameEvent.TURN_CHANGED, {
                "seat": seat,
                "name": self.seats[seat].name,
                "is_human": getattr(self.seats[seat], "is_human", False),
            })
            card = await self._request_card(seat)
            self.play_card(seat, card)
            seat = next_seat(seat)

        winner = self.resolve_trick()
        if self.config.turn_delay:
            await asyncio.sleep(self.config.turn_delay)
        return winner

    def play_card(self, seat: int, card: Card) -> None:
        """Apply an already validated card."""
        self.hands[seat].remove(card)
        self.tracker.record_card_played(card, seat, self.trick)
        self.trick.append((seat, card))

        self.events.emit(GameEvent.HAND_UPDATED, {"seat": seat, "hand": _ids(self.hands[seat])})
        self.events.emit(GameEvent.CARD_PLAYED, {
            "seat": seat,
            "card": card.id,
            "position": len(self.trick) - 1,
        })

    def resolve_trick(self) -> int:
        """Award the finished trick and return the winning seat."""
        winner = trick_winner(self.trick)
        points = trick_points(self.trick)
        self.round.points[winner] += points
        if any(card is QUEEN_OF_SPADES for _, card in self.trick):
            self.round.queen_captured_by = winner
            logger.info(f"Seat {winner} captured the queen of spades")

        self.tracker.end_trick()
        self.round.tricks_played += 1
        self.phase = GamePhase.TRICK_RESOLVED
        self.current_turn = winner

        self.events.emit(GameEvent.TRICK_COMPLETE, {
            "winner": winner,
            "points": points,
            "trick": [{"seat": s, "card": c.id} for s, c in self.trick],
            "trick_number": self.round.tricks_played,
        })
        self.events.emit(GameEvent.SCORE_UPDATED, self._players_payload())
        return winner

    def end_round(self) -> RoundResult:
        """Bank round points, rotate the dealer and check for game over."""
        round_state = self.round
        total = sum(round_state.points)
        if round_state.tricks_played == TRICKS_PER_ROUND and total != ROUND_POINTS:
            logger.error(f"Round {round_state.number} awarded {total} points, expected {ROUND_POINTS}")

        for seat in range(PLAYERS):
            self.scores[seat] += round_state.points[seat]
        if round_state.queen_captured_by is not None:
            self.dealer = round_state.queen_captured_by

        result = RoundResult(
            number=round_state.number,
            dealer=round_state.dealer,
            leader=round_state.leader,
            points=tuple(round_state.points),
            queen_captured_by=round_state.queen_captured_by,
            scores_after=tuple(self.scores),
        )
        self.rounds.append(result)
        self.phase = GamePhase.ROUND_ENDED
        self.trick = []
        self.current_turn = None

        self.events.emit(GameEvent.TRICK_PILE_CLEAR, {})
        self.events.emit(GameEvent.ROUND_END, {
            "round_number": result.number,
            "round_points": list(result.points),
            "queen_captured_by": result.queen_captured_by,
            **self._players_payload(),
        })
        self.events.emit(GameEvent.SCORE_UPDATED, self._players_payload())
        logger.info(f"Round {result.number} points {list(result.points)}, scores {self.scores}")

        loser = find_loser(self.scores, self.config.score_limit)
        if loser is not None:
            self.loser = loser
            self.phase = GamePhase.GAME_OVER
            logger.info(f"Game over after {result.number} rounds: seat {loser} loses")
            self.events.emit(GameEvent.GAME_OVER, {
                "loser": loser,
                "loser_name": self.seats[loser].name,
                "losing_team": team_of(loser),
                **self._players_payload(),
            })
        return result

    def outcome(self) -> GameOutcome:
        if self.loser is None:
            raise RuntimeError("Game is not over")
        return GameOutcome(
            loser=self.loser,
            losing_team=team_of(self.loser),
            scores=tuple(self.scores),
            rounds=tuple(self.rounds),
        )

    # --- Queries -----------------------------------------------------------

    def get_valid_moves(self, seat: int) -> list[Card]:
        return get_valid_moves(self.hands[seat], self.trick)

    def view_for(self, seat: int) -> TableView:
        return TableView(
            seat=seat,
            hand=tuple(self.hands[seat]),
            trick=tuple(self.trick),
            scores=tuple(self.scores),
            round_number=self.round_number,
            tracker=self.tracker.snapshot(),
        )

    def debug_snapshot(self) -> dict[str, Any]:
        """Read-only diagnostic view of the table; calling it changes nothing."""
        return {
            "round_number": self.round_number,
            "phase": self.phase.name,
            "dealer": self.dealer,
            "leader": self.round.leader if self.round else None,
            "scores": list(self.scores),
            "round_points": list(self.round.points) if self.round else [0] * PLAYERS,
            "current_turn": self.current_turn,
            "trick": [{"seat": seat, "card": card.id} for seat, card in self.trick],
            "initial_hands": [_ids(hand) for hand in self.initial_hands],
            "current_hands": [_ids(hand) for hand in self.hands],
            "card_tracker": self.tracker.to_dict(),
        }

    # --- Internals ---------------------------------------------------------

    async def _request_card(self, seat: int) -> Card:
        legal = self.get_valid_moves(seat)
        player = self.seats[seat]
        try:
            card = await player.request_card(self.view_for(seat), list(legal))
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.exception(f"Seat {seat} ({player.name}) failed to choose a card")
            self.events.emit(GameEvent.ERROR_OCCURRED, {
                "type": "seat_error",
                "seat": seat,
                "message": str(e),
            })
            return legal[0]

        fallback = getattr(player, "last_fallback", None)
        if fallback:
            self._report_fallback(seat, fallback, legal[0])

        if card not in self.hands[seat] or card not in legal:
            logger.warning(f"Seat {seat} ({player.name}) played illegal {card}; using {legal[0]}")
            self.events.emit(GameEvent.INVALID_MOVE, {
                "seat": seat,
                "card": getattr(card, "id", repr(card)),
                "replacement": legal[0].id,
            })
            return legal[0]
        return card

    def _accept_pass(self, seat: int, result: Any) -> list[Card]:
        hand = self.hands[seat]
        player = self.seats[seat]
        if isinstance(result, BaseException):
            logger.error(f"Seat {seat} ({player.name}) failed to pass: {result!r}")
            self.events.emit(GameEvent.ERROR_OCCURRED, {
                "type": "seat_error",
                "seat": seat,
                "message": str(result) or type(result).__name__,
            })
            return fallback_pass(hand)

        fallback = getattr(player, "last_fallback", None)
        if fallback:
            self._report_fallback(seat, fallback, None)

        cards = list(result) if isinstance(result, (list, tuple)) else []
        if (
            len(cards) != PASS_COUNT
            or not all(isinstance(card, Card) and card in hand for card in cards)
            or len(set(cards)) != PASS_COUNT
        ):
            replacement = fallback_pass(hand)
            logger.warning(f"Seat {seat} ({player.name}) passed invalid cards {result!r}")
            self.events.emit(GameEvent.INVALID_MOVE, {
                "seat": seat,
                "cards": [getattr(c, "id", repr(c)) for c in cards],
                "replacement": _ids(replacement),
            })
            return replacement
        return cards

    def _report_fallback(self, seat: int, reason: str, card: Card | None) -> None:
        self.events.emit(GameEvent.ERROR_OCCURRED, {
            "type": f"selection_{reason}",
            "seat": seat,
            "fallback": card.id if card else None,
        })

    def _players_payload(self) -> dict[str, Any]:
        return {
            "players": [
                {
                    "seat": i,
                    "name": seat.name,
                    "score": self.scores[i],
                    "round_points": self.round.points[i] if self.round else 0,
                    "hand_size": len(self.hands[i]),
                }
                for i, seat in enumerate(self.seats)
            ]
        }


def _validate_seats(seats: Sequence[Any]) -> None:
    if len(seats) != PLAYERS:
        raise GameSetupError(f"Leekha needs exactly {PLAYERS} seats, got {len(seats)}")
    for i, seat in enumerate(seats):
        missing = [
            name for name in ("request_card", "request_pass")
            if not callable(getattr(seat, name, None))
        ]
        if missing:
            raise GameSetupError(f"Seat {i} ({seat!r}) is missing {', '.join(missing)}")
        if not getattr(seat, "name", None):
            raise GameSetupError(f"Seat {i} has no name")
