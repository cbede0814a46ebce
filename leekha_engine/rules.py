"""Pure rule functions: legality, trick resolution, seating and scoring."""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from leekha_engine.cards import Card


PLAYERS = 4
HAND_SIZE = 13
PASS_COUNT = 3
TRICKS_PER_ROUND = 13
ROUND_POINTS = 36  # 13 hearts + Q♠ (13) + 10♦ (10)

# A play is (seat, card); a trick is the ordered plays starting from the leader.
Play = tuple[int, "Card"]


def get_valid_moves(hand: Sequence[Card], trick: Sequence[Play]) -> list[Card]:
    """Legal cards for a seat holding ``hand`` given the trick so far.

    Leading is free. A follower must match the lead suit if able; a follower
    void in the lead suit must discard Q♠ or 10♦ while holding either.
    Hearts-broken is not enforced here.
    """
    if not trick:
        return list(hand)

    lead_suit = trick[0][1].suit
    following = [card for card in hand if card.suit == lead_suit]
    if following:
        return following

    penalties = [card for card in hand if card.is_penalty_card]
    if penalties:
        return penalties

    return list(hand)


def trick_winner(trick: Sequence[Play]) -> int:
    """Seat that wins the trick: highest lead-suit card, else the leader."""
    if not trick:
        raise ValueError("Cannot resolve an empty trick")

    leader, lead_card = trick[0]
    winner, best = leader, lead_card
    for seat, card in trick[1:]:
        if card.suit == lead_card.suit and card.ordinal > best.ordinal:
            winner, best = seat, card
    return winner


def trick_points(trick: Sequence[Play]) -> int:
    return sum(card.points for _, card in trick)


def next_seat(seat: int) -> int:
    """Seat that plays after ``seat``."""
    return (seat + 1) % PLAYERS


def pass_target(seat: int) -> int:
    """Seat that receives ``seat``'s passed cards (0→3, 3→2, 2→1, 1→0)."""
    return (seat + PLAYERS - 1) % PLAYERS


def team_of(seat: int) -> int:
    """Partnership index: seats 0 and 2 form team 0, seats 1 and 3 team 1."""
    return seat % 2


def partner_of(seat: int) -> int:
    return (seat + 2) % PLAYERS


def find_loser(scores: Sequence[int], score_limit: int) -> int | None:
    """Seat with the highest score among those at or over the limit.

    Returns None while nobody has reached the limit. Ties go to the lowest seat.
    """
    over = [seat for seat, score in enumerate(scores) if score >= score_limit]
    if not over:
        return None
    return max(over, key=lambda seat: (scores[seat], -seat))


def fallback_pass(hand: Sequence[Card], count: int = PASS_COUNT) -> list[Card]:
    """Default pass when a seat fails to choose: its highest-ranked cards."""
    return sorted(hand, key=lambda card: (card.ordinal, card.points), reverse=True)[:count]
