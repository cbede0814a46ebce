"""Card tracking: the public knowledge accumulated during a round."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Sequence

from leekha_engine.cards import QUEEN_OF_SPADES, TEN_OF_DIAMONDS, Card, Rank, Suit
from leekha_engine.rules import PLAYERS

logger = logging.getLogger(__name__)

NO_VOID_REVEALED = 100

_EMPTY_PLAYED: tuple[frozenset[Rank], ...] = tuple(frozenset() for _ in Suit)
_NO_VOIDS: tuple[tuple[bool, ...], ...] = tuple(
    tuple(False for _ in Suit) for _ in range(PLAYERS)
)


@dataclass(frozen=True, slots=True)
class TrackerState:
    """Immutable snapshot of everything publicly known about the round.

    Attributes:
        played: Ranks already played, indexed by suit
        voids: voids[seat][suit] is True once the seat failed to follow that suit
        first_trick_void_position: Position within the first trick (1-3) of the
            first seat that could not follow, or NO_VOID_REVEALED
    """

    played: tuple[frozenset[Rank], ...] = field(default=_EMPTY_PLAYED)
    voids: tuple[tuple[bool, ...], ...] = field(default=_NO_VOIDS)
    hearts_broken: bool = False
    queen_of_spades_played: bool = False
    ten_of_diamonds_played: bool = False
    tricks_played: int = 0
    first_trick_void_position: int = NO_VOID_REVEALED

    def with_card_played(
        self, card: Card, seat: int, trick_so_far: Sequence[tuple[int, Card]]
    ) -> TrackerState:
        """Return new state after ``seat`` plays ``card`` onto ``trick_so_far``."""
        played = tuple(
            ranks | {card.rank} if suit == card.suit else ranks
            for suit, ranks in zip(Suit, self.played)
        )
        voids = self.voids
        first_void = self.first_trick_void_position

        if trick_so_far:
            lead_suit = trick_so_far[0][1].suit
            if card.suit != lead_suit:
                voids = tuple(
                    tuple(v or (s == seat and suit == lead_suit) for suit, v in zip(Suit, row))
                    for s, row in enumerate(voids)
                )
                if self.tricks_played == 0 and first_void == NO_VOID_REVEALED:
                    first_void = len(trick_so_far)

        return replace(
            self,
            played=played,
            voids=voids,
            hearts_broken=self.hearts_broken or card.suit == Suit.HEARTS,
            queen_of_spades_played=self.queen_of_spades_played or card is QUEEN_OF_SPADES,
            ten_of_diamonds_played=self.ten_of_diamonds_played or card is TEN_OF_DIAMONDS,
            first_trick_void_position=first_void,
        )

    def with_trick_ended(self) -> TrackerState:
        return replace(self, tricks_played=self.tricks_played + 1)

    def is_played(self, card: Card) -> bool:
        return card.rank in self.played[card.suit]

    def remaining_counts(self) -> tuple[int, ...]:
        """Unplayed cards per suit (own cards included)."""
        return tuple(len(Rank) - len(ranks) for ranks in self.played)

    def relative_rank_positions(
        self, hand_by_suit: Sequence[Sequence[Card]]
    ) -> tuple[tuple[int, ...], ...]:
        """1-based position of each own card among the unplayed cards of its suit.

        Position 1 is the lowest unplayed card. Cards already marked as played
        are skipped. Missing suits yield empty tuples.
        """
        positions: list[tuple[int, ...]] = []
        for suit in Suit:
            cards = hand_by_suit[suit] if suit < len(hand_by_suit) else ()
            unplayed = [rank for rank in Rank if rank not in self.played[suit]]
            suit_positions = [
                unplayed.index(card.rank) + 1
                for card in sorted(cards)
                if card.rank in unplayed
            ]
            positions.append(tuple(suit_positions))
        return tuple(positions)

    def seats_likely_holding_suit(self, own_seat: int) -> tuple[tuple[int, ...], ...]:
        """Per suit, the other seats not yet known to be void in it."""
        return tuple(
            tuple(
                seat
                for seat in range(PLAYERS)
                if seat != own_seat and not self.voids[seat][suit]
            )
            for suit in Suit
        )

    def to_dict(self) -> dict[str, Any]:
        """Plain-data view used by debug snapshots."""
        return {
            "played_cards": {
                suit.letter: [rank.symbol for rank in sorted(self.played[suit])]
                for suit in Suit
            },
            "player_voids": [
                {suit.letter: self.voids[seat][suit] for suit in Suit}
                for seat in range(PLAYERS)
            ],
            "hearts_broken": self.hearts_broken,
            "queen_of_spades_played": self.queen_of_spades_played,
            "ten_of_diamonds_played": self.ten_of_diamonds_played,
            "tricks_played": self.tricks_played,
            "first_trick_void_position": self.first_trick_void_position,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TrackerState:
        """Rebuild a state from ``to_dict`` output."""
        played_cards = data.get("played_cards", {})
        player_voids = data.get("player_voids", [])
        played = tuple(
            frozenset(Rank.from_symbol(symbol) for symbol in played_cards.get(suit.letter, ()))
            for suit in Suit
        )
        voids = tuple(
            tuple(
                bool(player_voids[seat].get(suit.letter, False))
                if seat < len(player_voids)
                else False
                for suit in Suit
            )
            for seat in range(PLAYERS)
        )
        return cls(
            played=played,
            voids=voids,
            hearts_broken=bool(data.get("hearts_broken", False)),
            queen_of_spades_played=bool(data.get("queen_of_spades_played", False)),
            ten_of_diamonds_played=bool(data.get("ten_of_diamonds_played", False)),
            tricks_played=int(data.get("tricks_played", 0)),
            first_trick_void_position=int(
                data.get("first_trick_void_position", NO_VOID_REVEALED)
            ),
        )


class CardTracker:
    """Round-scoped observer fed by the game loop.

    The game is the only caller of the recording methods; every other
    component reads immutable ``TrackerState`` snapshots.
    """

    def __init__(self, state: TrackerState | None = None):
        self._state = state or TrackerState()

    @property
    def state(self) -> TrackerState:
        return self._state

    def snapshot(self) -> TrackerState:
        return self._state

    def reset(self) -> None:
        """Clear all per-round knowledge."""
        self._state = TrackerState()

    def record_card_played(
        self, card: Card, seat: int, trick_so_far: Sequence[tuple[int, Card]]
    ) -> None:
        """Record ``card`` from ``seat``; ``trick_so_far`` excludes this card."""
        self._state = self._state.with_card_played(card, seat, trick_so_far)
        if trick_so_far and card.suit != trick_so_far[0][1].suit:
            logger.debug(f"Seat {seat} revealed void in {trick_so_far[0][1].suit.name}")

    def end_trick(self) -> None:
        self._state = self._state.with_trick_ended()

    def remaining_counts(self) -> tuple[int, ...]:
        return self._state.remaining_counts()

    def relative_rank_positions(
        self, hand_by_suit: Sequence[Sequence[Card]]
    ) -> tuple[tuple[int, ...], ...]:
        return self._state.relative_rank_positions(hand_by_suit)

    def seats_likely_holding_suit(self, own_seat: int) -> tuple[tuple[int, ...], ...]:
        return self._state.seats_likely_holding_suit(own_seat)

    def to_dict(self) -> dict[str, Any]:
        return self._state.to_dict()
