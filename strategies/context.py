"""Per-decision snapshots handed to strategies.

Contexts are frozen and built fresh for every decision; a strategy cannot
reach back into the game through them. Seats inside a context are relative
to the deciding player: 1 plays next, 2 is the partner, 3 played just before.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

from strategies.tokens import rank_of, suit_of

NO_VOID_REVEALED = 100


class TrickPhase(IntEnum):
    """Where the round stands with respect to the queen of spades."""

    FIRST = -1  # first trick of the round
    EARLY = 0  # Q♠ still out
    QUEEN_TRICK = 1  # Q♠ is in the current trick
    LATE = 2  # Q♠ already captured


@dataclass(frozen=True, slots=True, kw_only=True)
class PassContext:
    scores: tuple[int, ...] = (0, 0, 0, 0)
    player_index: int = 0


@dataclass(frozen=True, slots=True, kw_only=True)
class LeadContext:
    """Public knowledge for choosing a lead.

    Attributes:
        remaining: Unplayed cards per suit, own cards included
        ranks: Per suit, the 1-based position of each own card among unplayed cards
        has_players: Per suit, relative seats not known to be void
        played: Per suit, rank ordinals already played
        first_trick_void_position: Position in the first trick where a seat
            first failed to follow, 100 when nobody has
        legal: Tokens the engine will accept
    """

    remaining: tuple[int, ...] = (13, 13, 13, 13)
    ranks: tuple[tuple[int, ...], ...] = ((), (), (), ())
    has_players: tuple[tuple[int, ...], ...] = ((1, 2, 3),) * 4
    played: tuple[frozenset[int], ...] = (frozenset(),) * 4
    has_queen_of_spades: bool = False
    trick_phase: TrickPhase = TrickPhase.EARLY
    hearts_broken: bool = False
    queen_of_spades_played: bool = False
    ten_of_diamonds_played: bool = False
    first_trick_void_position: int = NO_VOID_REVEALED
    scores: tuple[int, ...] = (0, 0, 0, 0)
    player_index: int = 0
    legal: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class FollowContext(LeadContext):
    """Lead context plus the trick in progress.

    Attributes:
        lead_suit: Suit index of the first card in the trick
        highest_rank_played: Highest lead-suit rank ordinal in the trick (0 if none)
        points_in_trick: Penalty points already in the trick
        player_position: Cards already played before us (1-3)
        trick: (relative seat, token) pairs in play order
    """

    lead_suit: int = 0
    highest_rank_played: int = 0
    points_in_trick: int = 0
    player_position: int = 1
    trick: tuple[tuple[int, str], ...] = field(default=())

    @property
    def is_last(self) -> bool:
        return self.player_position == 3

    @property
    def winning_seat(self) -> int | None:
        """Relative seat currently winning the trick."""
        best: tuple[int, int] | None = None
        for seat, token in self.trick:
            if suit_of(token) != self.lead_suit:
                continue
            if best is None or rank_of(token) > best[1]:
                best = (seat, rank_of(token))
        return best[0] if best else None

    @property
    def partner_winning(self) -> bool:
        return self.winning_seat == 2
