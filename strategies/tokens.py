"""Helpers for the compact card tokens strategies work with.

A token is ``<rank><suit>``: rank one of ``23456789TJQKA``, suit one of
``hsdc``. A hand is four token lists (hearts, spades, diamonds, clubs),
each sorted ascending by rank.
"""

from __future__ import annotations

from typing import Iterable, Sequence

RANK_ORDER = "23456789TJQKA"
SUIT_ORDER = "hsdc"

HEARTS, SPADES, DIAMONDS, CLUBS = range(4)

QUEEN_OF_SPADES = "Qs"
TEN_OF_DIAMONDS = "Td"
PENALTY_TOKENS = (QUEEN_OF_SPADES, TEN_OF_DIAMONDS)

Hand = Sequence[Sequence[str]]


def rank_of(token: str) -> int:
    """Rank ordinal 0 (two) .. 12 (ace)."""
    return RANK_ORDER.index(token[0].upper())


def suit_of(token: str) -> int:
    return SUIT_ORDER.index(token[-1].lower())


def is_valid_token(token: object) -> bool:
    return (
        isinstance(token, str)
        and len(token) == 2
        and token[0].upper() in RANK_ORDER
        and token[1].lower() in SUIT_ORDER
    )


def points_of(token: str) -> int:
    if token == QUEEN_OF_SPADES:
        return 13
    if token == TEN_OF_DIAMONDS:
        return 10
    return 1 if suit_of(token) == HEARTS else 0


def is_penalty(token: str) -> bool:
    return token in PENALTY_TOKENS


def flatten(hand: Hand) -> list[str]:
    return [token for suit in hand for token in suit]


def by_rank(tokens: Iterable[str]) -> list[str]:
    """Sort ascending by rank (stable across suits)."""
    return sorted(tokens, key=rank_of)


def lowest(tokens: Sequence[str]) -> str:
    return min(tokens, key=rank_of)


def highest(tokens: Sequence[str]) -> str:
    return max(tokens, key=rank_of)


def legal_tokens(hand: Hand, lead_suit: int | None = None) -> list[str]:
    """Legal plays under suit-following and the forced-penalty rule."""
    if lead_suit is None:
        return flatten(hand)
    if hand[lead_suit]:
        return list(hand[lead_suit])
    penalties = [token for token in flatten(hand) if is_penalty(token)]
    return penalties or flatten(hand)
