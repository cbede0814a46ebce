"""Probability estimates over the cards a strategy cannot see.

All functions are pure and work on tokens plus a context. "Unseen" cards
are those neither played nor in our own hand; they are spread over the
seats that are not known to be void.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Sequence

from strategies.tokens import rank_of

if TYPE_CHECKING:
    from strategies.context import LeadContext
    from strategies.tokens import Hand


def unseen_ranks(suit: int, hand: Hand, ctx: LeadContext) -> list[int]:
    """Rank ordinals of the suit still held by other seats, ascending."""
    mine = {rank_of(token) for token in hand[suit]}
    played = ctx.played[suit]
    return [rank for rank in range(13) if rank not in played and rank not in mine]


def can_win_duel(own_ranks: Sequence[int], unseen: Sequence[int]) -> bool:
    """Whether our cards, highest first, beat the strongest possible opposing holding.

    Compares our k-th highest card with the k-th highest unseen card for as
    many cards as both sides have.
    """
    mine = sorted(own_ranks, reverse=True)
    theirs = sorted(unseen, reverse=True)
    return all(m > t for m, t in zip(mine, theirs))


def win_probability(rank: int, suit: int, hand: Hand, ctx: LeadContext) -> float:
    """Chance a lead of ``rank`` in ``suit`` wins the trick.

    A follower overtakes only when forced: every card it holds in the suit
    is higher. Unseen cards are assumed evenly spread over live seats.
    """
    unseen = unseen_ranks(suit, hand, ctx)
    live = len(ctx.has_players[suit])
    if not unseen or live == 0:
        return 1.0
    higher = sum(1 for r in unseen if r > rank)
    if higher == 0:
        return 1.0

    per_seat = max(1.0, len(unseen) / live)
    forced_over = (higher / len(unseen)) ** per_seat
    return (1.0 - forced_over) ** live


def penalty_card_risk(remaining: Sequence[int], suit: int, position: int) -> float:
    """Risk that a seat yet to play is void in ``suit`` and can discard on us.

    ``position`` is the number of cards already in the trick (0 when leading).
    Returns 1.0 when the suit is exhausted.
    """
    total = sum(remaining)
    in_suit = remaining[suit]
    if in_suit == 0:
        return 1.0
    if total == in_suit:
        return 0.0

    expected_tricks = math.ceil(total / 3)
    if position == 0:
        one_void = (2 ** in_suit - 2) / 3 ** (in_suit - 1)
        two_voids = 1 / 3 ** (in_suit - 1)
    elif position == 1:
        one_void = 2 * (2 ** in_suit - 1) / 3 ** in_suit
        two_voids = 1 / 3 ** in_suit
    else:
        one_void = 2 ** in_suit / 3 ** in_suit
        two_voids = 0.0
    return (one_void + 2 * two_voids) * expected_tricks / (total - in_suit)


def follow_probability(suit: int, seats: Sequence[int], hand: Hand, ctx: LeadContext) -> float:
    """Chance every one of ``seats`` (relative) still holds a card of ``suit``."""
    live = ctx.has_players[suit]
    unseen = len(unseen_ranks(suit, hand, ctx))
    if not live:
        return 1.0 if not seats else 0.0

    p = 1.0
    for seat in seats:
        if seat not in live:
            return 0.0
        p *= 1.0 - (1.0 - 1.0 / len(live)) ** unseen
    return p
