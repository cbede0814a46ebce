"""Bridge between the engine's cards and a strategy's tokens.

The adapter is the only place card tokens exist on the engine side. It
builds the per-decision context from a ``TableView`` and never lets a
strategy's mistake escape: exceptions, malformed tokens and illegal
choices all turn into a legal default.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Sequence

from leekha_engine.cards import QUEEN_OF_SPADES, Card, Suit
from leekha_engine.rules import PASS_COUNT, PLAYERS, fallback_pass
from strategies.context import FollowContext, LeadContext, PassContext, TrickPhase

if TYPE_CHECKING:
    from leekha_engine.seats import TableView
    from strategies.base import Strategy

logger = logging.getLogger(__name__)


def hand_by_suit(hand: Sequence[Card]) -> list[list[Card]]:
    """Group cards by suit (hearts, spades, diamonds, clubs), ascending."""
    groups: list[list[Card]] = [[] for _ in Suit]
    for card in sorted(hand):
        groups[card.suit].append(card)
    return groups


def hand_to_tokens(hand: Sequence[Card]) -> list[list[str]]:
    return [[card.token for card in group] for group in hand_by_suit(hand)]


def token_to_card(token: Any) -> Card | None:
    """Parse a strategy token ('Th', 'Qs'; '10h' is tolerated). None if malformed."""
    if not isinstance(token, str):
        return None
    try:
        return Card.from_id(token)
    except ValueError:
        return None


def trick_phase(view: TableView) -> TrickPhase:
    if view.tracker.tricks_played == 0:
        return TrickPhase.FIRST
    if view.tracker.queen_of_spades_played:
        if any(card is QUEEN_OF_SPADES for _, card in view.trick):
            return TrickPhase.QUEEN_TRICK
        return TrickPhase.LATE
    return TrickPhase.EARLY


class BotAdapter:
    """Runs a ``Strategy`` on behalf of one seat.

    Attributes:
        last_fallback: Why the last decision was replaced, or None
        last_decision: Diagnostic record of the last decision (tokens, context)
    """

    def __init__(self, strategy: Strategy, seat: int):
        self.strategy = strategy
        self.seat = seat
        self.last_fallback: str | None = None
        self.last_decision: dict[str, Any] | None = None

    def relative(self, seat: int) -> int:
        return (seat - self.seat + PLAYERS) % PLAYERS

    def build_pass_context(self, view: TableView) -> PassContext:
        return PassContext(scores=tuple(view.scores), player_index=view.seat)

    def build_lead_context(self, view: TableView, legal: Sequence[Card]) -> LeadContext:
        return LeadContext(**self._shared_fields(view, legal))

    def build_follow_context(self, view: TableView, legal: Sequence[Card]) -> FollowContext:
        if not view.trick:
            logger.error(f"Seat {self.seat}: follow context requested for an empty trick")
            raise ValueError("Cannot build a follow context without a lead")

        lead_suit = view.trick[0][1].suit
        in_suit = [card.ordinal for _, card in view.trick if card.suit == lead_suit]
        return FollowContext(
            **self._shared_fields(view, legal),
            lead_suit=int(lead_suit),
            highest_rank_played=max(in_suit, default=0),
            points_in_trick=sum(card.points for _, card in view.trick),
            player_position=len(view.trick),
            trick=tuple((self.relative(seat), card.token) for seat, card in view.trick),
        )

    def choose_pass(self, view: TableView) -> list[Card]:
        """Ask the strategy for three cards to pass, defaulting to the highest three."""
        self.last_fallback = None
        hand = list(view.hand)
        ctx = self.build_pass_context(view)
        try:
            tokens = self.strategy.choose_pass(hand_to_tokens(hand), ctx)
        except Exception:
            logger.exception(f"{self.strategy.name} failed to choose a pass for seat {self.seat}")
            return self._pass_fallback(hand, "strategy_error", None)

        cards = [token_to_card(t) for t in tokens] if isinstance(tokens, (list, tuple)) else []
        if (
            len(cards) != PASS_COUNT
            or any(card is None or card not in hand for card in cards)
            or len(set(cards)) != PASS_COUNT
        ):
            logger.error(f"{self.strategy.name} returned invalid pass {tokens!r} for seat {self.seat}")
            return self._pass_fallback(hand, "invalid_pass", tokens)

        self.last_decision = {"kind": "pass", "tokens": list(tokens), "context": ctx}
        return cards

    def choose_card(self, view: TableView, legal: Sequence[Card]) -> Card:
        """Ask the strategy for a lead or follow, defaulting to the first legal card."""
        self.last_fallback = None
        tokens = hand_to_tokens(view.hand)
        try:
            if view.is_leading:
                ctx = self.build_lead_context(view, legal)
                token = self.strategy.choose_lead(tokens, ctx)
            else:
                ctx = self.build_follow_context(view, legal)
                token = self.strategy.choose_follow(tokens, ctx)
        except Exception:
            logger.exception(f"{self.strategy.name} failed to choose a card for seat {self.seat}")
            return self._card_fallback(legal, "strategy_error", None)

        card = token_to_card(token)
        if card is None or card not in view.hand:
            logger.error(f"{self.strategy.name} returned {token!r}, not in hand of seat {self.seat}")
            return self._card_fallback(legal, "invalid_token", token)
        if card not in legal:
            logger.error(f"{self.strategy.name} chose illegal {card} for seat {self.seat}")
            return self._card_fallback(legal, "illegal_card", token)

        self.last_decision = {
            "kind": "lead" if view.is_leading else "follow",
            "token": token,
            "context": ctx,
        }
        return card

    def _shared_fields(self, view: TableView, legal: Sequence[Card]) -> dict[str, Any]:
        state = view.tracker
        holders = state.seats_likely_holding_suit(view.seat)
        return {
            "remaining": state.remaining_counts(),
            "ranks": state.relative_rank_positions(hand_by_suit(view.hand)),
            "has_players": tuple(
                tuple(sorted(self.relative(seat) for seat in seats)) for seats in holders
            ),
            "played": tuple(frozenset(int(rank) for rank in ranks) for ranks in state.played),
            "has_queen_of_spades": QUEEN_OF_SPADES in view.hand,
            "trick_phase": trick_phase(view),
            "hearts_broken": state.hearts_broken,
            "queen_of_spades_played": state.queen_of_spades_played,
            "ten_of_diamonds_played": state.ten_of_diamonds_played,
            "first_trick_void_position": state.first_trick_void_position,
            "scores": tuple(view.scores),
            "player_index": view.seat,
            "legal": tuple(card.token for card in legal),
        }

    def _card_fallback(self, legal: Sequence[Card], reason: str, token: Any) -> Card:
        self.last_fallback = reason
        self.last_decision = {"kind": "fallback", "reason": reason, "token": token}
        return legal[0]

    def _pass_fallback(self, hand: list[Card], reason: str, tokens: Any) -> list[Card]:
        self.last_fallback = reason
        self.last_decision = {"kind": "fallback", "reason": reason, "token": tokens}
        return fallback_pass(hand)
