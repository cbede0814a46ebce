"""Card, Suit, and Rank models for Leekha."""

from __future__ import annotations

import random
from enum import IntEnum
from functools import total_ordering
from typing import ClassVar, Iterable


class Suit(IntEnum):
    """Card suits in canonical hand order (hearts first)."""

    HEARTS = 0
    SPADES = 1
    DIAMONDS = 2
    CLUBS = 3

    def __str__(self) -> str:
        return self.symbol

    @property
    def symbol(self) -> str:
        return {
            Suit.HEARTS: "♥",
            Suit.SPADES: "♠",
            Suit.DIAMONDS: "♦",
            Suit.CLUBS: "♣",
        }[self]

    @property
    def letter(self) -> str:
        return self.name[0]

    @classmethod
    def from_letter(cls, letter: str) -> Suit:
        """Parse a suit letter (case-insensitive)."""
        for suit in cls:
            if suit.letter == letter.upper():
                return suit
        raise ValueError(f"Unknown suit letter: {letter!r}")


class Rank(IntEnum):
    """Card ranks. The value is the ordinal used for trick comparisons (2=0 .. A=12)."""

    TWO = 0
    THREE = 1
    FOUR = 2
    FIVE = 3
    SIX = 4
    SEVEN = 5
    EIGHT = 6
    NINE = 7
    TEN = 8
    JACK = 9
    QUEEN = 10
    KING = 11
    ACE = 12

    def __str__(self) -> str:
        return self.symbol

    @property
    def symbol(self) -> str:
        if self <= Rank.TEN:
            return str(self.value + 2)
        return self.name[0]

    @property
    def token(self) -> str:
        """Single-character rank used in strategy tokens ('T' for ten)."""
        if self == Rank.TEN:
            return "T"
        return self.symbol

    @classmethod
    def from_symbol(cls, symbol: str) -> Rank:
        """Parse '2'..'10', 'T', 'J', 'Q', 'K', 'A' (case-insensitive)."""
        symbol = symbol.upper()
        if symbol == "T":
            return cls.TEN
        for rank in cls:
            if rank.symbol == symbol:
                return rank
        raise ValueError(f"Unknown rank symbol: {symbol!r}")


@total_ordering
class Card:
    """A playing card with Leekha penalty values.

    Cards are immutable value objects; there is exactly one instance per
    (rank, suit). Ordering follows the canonical hand order: suit group
    first, then ascending rank.
    """

    __slots__ = ("_rank", "_suit")

    _instances: ClassVar[dict[tuple[Rank, Suit], Card]] = {}

    def __new__(cls, rank: Rank, suit: Suit) -> Card:
        key = (Rank(rank), Suit(suit))
        if key not in cls._instances:
            instance = object.__new__(cls)
            instance._rank = key[0]
            instance._suit = key[1]
            cls._instances[key] = instance
        return cls._instances[key]

    @classmethod
    def from_id(cls, card_id: str) -> Card:
        """Parse a card id such as '10H', 'QS' or 'Td'."""
        card_id = card_id.strip()
        if len(card_id) < 2:
            raise ValueError(f"Malformed card id: {card_id!r}")
        return cls(Rank.from_symbol(card_id[:-1]), Suit.from_letter(card_id[-1]))

    @property
    def rank(self) -> Rank:
        return self._rank

    @property
    def suit(self) -> Suit:
        return self._suit

    @property
    def ordinal(self) -> int:
        return self._rank.value

    @property
    def points(self) -> int:
        """Penalty points carried by this card."""
        if self._suit == Suit.HEARTS:
            return 1
        if self._rank == Rank.QUEEN and self._suit == Suit.SPADES:
            return 13
        if self._rank == Rank.TEN and self._suit == Suit.DIAMONDS:
            return 10
        return 0

    @property
    def is_penalty_card(self) -> bool:
        """Whether this is one of the two forced-discard cards (Q♠, 10♦)."""
        return self is QUEEN_OF_SPADES or self is TEN_OF_DIAMONDS

    @property
    def id(self) -> str:
        """Stable identifier used in snapshots and the web API ('10H', 'QS')."""
        return f"{self._rank.symbol}{self._suit.letter}"

    @property
    def token(self) -> str:
        """Compact token handed to strategies ('Th', 'Qs')."""
        return f"{self._rank.token}{self._suit.letter.lower()}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Card):
            return NotImplemented
        return self._rank == other._rank and self._suit == other._suit

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Card):
            return NotImplemented
        if self._suit != other._suit:
            return self._suit < other._suit
        return self._rank < other._rank

    def __hash__(self) -> int:
        return hash((self._rank, self._suit))

    def __reduce__(self) -> tuple:
        """Support pickling for multiprocessing."""
        return (Card, (self._rank, self._suit))

    def __repr__(self) -> str:
        return f"Card({self._rank.name}, {self._suit.name})"

    def __str__(self) -> str:
        return f"{self._rank.symbol}{self._suit.symbol}"


QUEEN_OF_SPADES = Card(Rank.QUEEN, Suit.SPADES)
TEN_OF_DIAMONDS = Card(Rank.TEN, Suit.DIAMONDS)


def create_deck() -> list[Card]:
    """Create a standard 52-card deck."""
    return [Card(rank, suit) for suit in Suit for rank in Rank]


def shuffle_deck(
    deck: list[Card],
    seed: int | None = None,
    rng: random.Random | None = None,
) -> list[Card]:
    """Return a shuffled copy of the deck (Fisher-Yates via random.shuffle)."""
    if rng is None:
        rng = random.Random(seed)
    shuffled = deck.copy()
    rng.shuffle(shuffled)
    return shuffled


def deal_hands(deck: list[Card], players: int = 4) -> list[list[Card]]:
    """Deal the whole deck round-robin, returning one sorted hand per seat."""
    hands: list[list[Card]] = [[] for _ in range(players)]
    for i, card in enumerate(deck):
        hands[i % players].append(card)
    return [sort_hand(hand) for hand in hands]


def sort_hand(cards: Iterable[Card]) -> list[Card]:
    """Sort cards into canonical order: suit group, then ascending rank."""
    return sorted(cards)
