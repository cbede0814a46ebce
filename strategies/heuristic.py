"""Heuristic strategy for Leekha.

One decision procedure, tuned by a ``HeuristicWeights`` table. The shipped
presets reproduce three styles of play:

1. simple - danger-scored passing, lowest safe leads, highest losing card
2. team - partner aware: duck under a winning partner on dirty tricks,
   burn high cards under a partner on clean ones, give the cheaper penalty
   card to a partner and the dearer one to an opponent, shed high cards on
   the first trick, and short side suits while holding Q♠
3. probabilistic - team play plus lead danger weighted by the estimated
   chance of winning the trick, void-exposure risk and duel control,
   "kill shot" penalty leads when every unseen card of the suit outranks
   the penalty card, caution after an early void, running controlled suits
   once Q♠ is gone, and taking points off a partner near the limit

Lower lead danger is better; higher pass/discard danger is worse to keep.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from strategies.base import Strategy
from strategies.context import NO_VOID_REVEALED, TrickPhase
from strategies.risk import (
    can_win_duel,
    follow_probability,
    penalty_card_risk,
    unseen_ranks,
    win_probability,
)
from strategies.tokens import (
    DIAMONDS,
    HEARTS,
    QUEEN_OF_SPADES,
    SPADES,
    TEN_OF_DIAMONDS,
    flatten,
    highest,
    is_penalty,
    legal_tokens,
    lowest,
    points_of,
    rank_of,
    suit_of,
)

if TYPE_CHECKING:
    from strategies.context import FollowContext, LeadContext, PassContext
    from strategies.tokens import Hand

logger = logging.getLogger(__name__)

NINE, TEN, JACK, QUEEN = 7, 8, 9, 10


@dataclass(frozen=True, slots=True)
class HeuristicWeights:
    """Tunable numbers behind ``HeuristicStrategy``.

    Attributes:
        void_bonus: Pass bonus for a suit of one card; half of it for two
        queen_guards: Keep Q♠ when holding at least this many other spades (0 = never)
        risky_lead: Extra lead danger for A♠/K♠ while Q♠ is out, or A-J♦ while 10♦ is out
        queen_hunt / ten_hunt: Lead bonus for low cards of a suit whose penalty card is out
        exposed_void: Lead danger per opponent known void in the suit
        length_bonus: Lead bonus per own card in the suit
        win_weight: Lead danger scaled by the estimated chance of winning the trick
        risk_weight: Lead danger scaled by the chance of a void seat discarding on us
        duel_penalty: Lead danger for a suit we control while its penalty card is out
        early_void_lead: Lead danger for a suit hiding an outstanding penalty card once
            a seat has shown a void on the first trick
        queen_void_lead: While holding Q♠ early, lead bonus for a short side suit
            (divided by its length) so the queen can be discarded later
        sure_loser_lead: Lead bonus for our lowest card when it is the lowest unplayed
            card of its suit
        late_control_lead: Once Q♠ is gone, lead bonus for the top card of a clean suit
            whose duel we win
        burn_threshold: Shed a high winner on a clean trick when every later seat
            follows suit with at least this probability (None = never)
        first_trick_burn: On the first trick, follow with the highest safe card
        rescue_margin: Overtake a partner winning a dirty trick when the partner's
            score leads ours by at least this much (None = never)
    """

    name: str = "simple"

    queen_danger: int = 1000
    ten_danger: int = 900
    heart_danger: int = 500
    short_suit_bonus: int = 20
    high_spade_bonus: int = 50
    high_diamond_bonus: int = 40
    guard_keep: int = 100
    void_bonus: float = 0.0
    queen_guards: int = 0

    penalty_lead: int = 10000
    unbroken_heart_lead: int = 5000
    risky_lead: int = 2000
    queen_hunt: int = 0
    ten_hunt: int = 0
    guard_lead: int = 0
    exposed_void: int = 0
    length_bonus: int = 10
    win_weight: float = 0.0
    risk_weight: float = 0.0
    duel_penalty: int = 0
    kill_shot: bool = False
    early_void_lead: int = 0
    queen_void_lead: int = 0
    sure_loser_lead: int = 0
    late_control_lead: int = 0

    team_play: bool = False
    burn_when_last: bool = False
    burn_threshold: float | None = None
    first_trick_burn: bool = False
    rescue_margin: int | None = None

    discard_high_spade: int = 30
    discard_high_diamond: int = 25


SIMPLE = HeuristicWeights()

TEAM = replace(
    SIMPLE,
    name="team",
    void_bonus=50.0,
    queen_hunt=200,
    ten_hunt=50,
    guard_lead=100,
    exposed_void=50,
    team_play=True,
    burn_when_last=True,
    first_trick_burn=True,
    queen_void_lead=60,
)

PROBABILISTIC = replace(
    TEAM,
    name="probabilistic",
    queen_guards=3,
    win_weight=400.0,
    risk_weight=100.0,
    duel_penalty=150,
    kill_shot=True,
    burn_threshold=0.75,
    early_void_lead=150,
    sure_loser_lead=100,
    late_control_lead=450,
    rescue_margin=30,
)

PRESETS: dict[str, HeuristicWeights] = {
    weights.name: weights for weights in (SIMPLE, TEAM, PROBABILISTIC)
}


def _queen_out(hand: Hand, ctx: LeadContext) -> bool:
    """Q♠ is still in another seat's hand."""
    return not ctx.queen_of_spades_played and QUEEN_OF_SPADES not in hand[SPADES]


def _ten_out(hand: Hand, ctx: LeadContext) -> bool:
    return not ctx.ten_of_diamonds_played and TEN_OF_DIAMONDS not in hand[DIAMONDS]


class HeuristicStrategy(Strategy):
    """Rule-based player driven by a weights table.

    Priorities:
    1. Pass the three most dangerous cards (penalty cards, high hearts,
       high cards in short suits), favouring suits that can be voided
    2. Lead the card least likely to collect points: no penalty cards,
       no hearts before they are broken, 10♦ before Q♠ when nothing else is left
    3. Follow with the highest card that still loses; when forced to win,
       win cheaply without spending a penalty card
    4. When void, discard a penalty card first, then the highest heart,
       then the most dangerous card
    """

    def __init__(self, weights: HeuristicWeights | str = SIMPLE):
        if isinstance(weights, str):
            if weights not in PRESETS:
                raise ValueError(f"Unknown heuristic preset: {weights}")
            weights = PRESETS[weights]
        self.weights = weights

    @property
    def name(self) -> str:
        return f"Heuristic ({self.weights.name})"

    # --- Passing -----------------------------------------------------------

    def choose_pass(self, hand: Hand, ctx: PassContext) -> list[str]:
        tokens = flatten(hand)
        counts = [len(cards) for cards in hand]
        keep_queen = (
            self.weights.queen_guards > 0
            and QUEEN_OF_SPADES in hand[SPADES]
            and counts[SPADES] - 1 >= self.weights.queen_guards
        )
        scores = {token: self.pass_danger(token, counts, keep_queen) for token in tokens}

        if self.weights.void_bonus:
            holds_queen = QUEEN_OF_SPADES in hand[SPADES]
            for suit, count in enumerate(counts):
                if not 0 < count <= 2:
                    continue
                # Spades under the queen are her guards.
                if suit == SPADES and holds_queen and count > 1:
                    continue
                bonus = self.weights.void_bonus * (3 - count) / 2
                for token in hand[suit]:
                    scores[token] += bonus

        ranked = sorted(tokens, key=lambda t: (-scores[t], -rank_of(t), suit_of(t)))
        return ranked[:3]

    def pass_danger(self, token: str, counts: list[int], keep_queen: bool = False) -> float:
        w = self.weights
        suit, rank = suit_of(token), rank_of(token)
        if token == QUEEN_OF_SPADES:
            return -w.queen_danger if keep_queen else w.queen_danger
        if token == TEN_OF_DIAMONDS:
            return w.ten_danger
        if suit == HEARTS:
            return w.heart_danger + rank

        danger = float(rank)
        if counts[suit] <= 2 and rank >= TEN:
            danger += w.short_suit_bonus
        if suit == SPADES:
            if keep_queen and rank < QUEEN:
                danger -= w.guard_keep
            elif rank >= JACK:
                danger += w.high_spade_bonus
        if suit == DIAMONDS and rank >= NINE:
            danger += w.high_diamond_bonus
        return danger

    # --- Leading -----------------------------------------------------------

    def choose_lead(self, hand: Hand, ctx: LeadContext) -> str:
        legal = list(ctx.legal) or legal_tokens(hand)
        if len(legal) == 1:
            return legal[0]

        if self.weights.kill_shot:
            shot = self._kill_shot(hand, ctx)
            if shot is not None and shot in legal:
                logger.debug(f"Kill shot lead {shot}")
                return shot

        counts = [len(cards) for cards in hand]
        return min(
            legal,
            key=lambda t: (self.lead_danger(t, hand, ctx, counts), rank_of(t), suit_of(t)),
        )

    def lead_danger(self, token: str, hand: Hand, ctx: LeadContext, counts: list[int]) -> float:
        w = self.weights
        if is_penalty(token):
            return w.penalty_lead + points_of(token)

        suit, rank = suit_of(token), rank_of(token)
        danger = float(rank)
        if suit == HEARTS and not ctx.hearts_broken:
            danger += w.unbroken_heart_lead
        if self._is_risky(token, hand, ctx):
            danger += w.risky_lead

        if suit == SPADES:
            if _queen_out(hand, ctx) and rank < QUEEN:
                danger -= w.queen_hunt
            elif QUEEN_OF_SPADES in hand[SPADES]:
                danger += w.guard_lead
        if suit == DIAMONDS and _ten_out(hand, ctx) and rank < TEN:
            danger -= w.ten_hunt

        opponents_void = sum(1 for seat in (1, 3) if seat not in ctx.has_players[suit])
        danger += w.exposed_void * opponents_void
        danger -= w.length_bonus * counts[suit]

        if w.win_weight:
            danger += w.win_weight * win_probability(rank, suit, hand, ctx)
        if w.risk_weight and (_queen_out(hand, ctx) or _ten_out(hand, ctx)):
            danger += w.risk_weight * min(1.0, penalty_card_risk(ctx.remaining, suit, 0))
        if w.duel_penalty and self._suit_hides_penalty(suit, hand, ctx):
            own = [rank_of(t) for t in hand[suit]]
            if can_win_duel(own, unseen_ranks(suit, hand, ctx)):
                danger += w.duel_penalty

        if (
            w.early_void_lead
            and ctx.first_trick_void_position != NO_VOID_REVEALED
            and self._suit_hides_penalty(suit, hand, ctx)
        ):
            danger += w.early_void_lead
        if (
            w.queen_void_lead
            and ctx.has_queen_of_spades
            and ctx.trick_phase <= TrickPhase.EARLY
            and suit != SPADES
            and counts[suit] <= 2
        ):
            danger -= w.queen_void_lead / counts[suit]
        if w.sure_loser_lead and self._is_sure_loser(token, hand, ctx):
            danger -= w.sure_loser_lead
        if w.late_control_lead and ctx.trick_phase == TrickPhase.LATE and self._controls(token, hand, ctx):
            danger -= w.late_control_lead
        return danger

    def _is_sure_loser(self, token: str, hand: Hand, ctx: LeadContext) -> bool:
        """Our lowest card of the suit is the lowest card still unplayed."""
        suit = suit_of(token)
        positions = ctx.ranks[suit]
        return (
            bool(positions)
            and positions[0] == 1
            and token == lowest(hand[suit])
            and bool(ctx.has_players[suit])
        )

    def _controls(self, token: str, hand: Hand, ctx: LeadContext) -> bool:
        """Top card of a pointless suit in which we beat every opposing holding."""
        suit = suit_of(token)
        if suit == HEARTS or self._suit_hides_penalty(suit, hand, ctx) or token != highest(hand[suit]):
            return False
        unseen = unseen_ranks(suit, hand, ctx)
        return bool(unseen) and can_win_duel([rank_of(t) for t in hand[suit]], unseen)

    def _kill_shot(self, hand: Hand, ctx: LeadContext) -> str | None:
        """A penalty card that every unseen card of its suit outranks."""
        for token, suit in ((QUEEN_OF_SPADES, SPADES), (TEN_OF_DIAMONDS, DIAMONDS)):
            if token not in hand[suit]:
                continue
            unseen = unseen_ranks(suit, hand, ctx)
            opponents_live = any(seat in ctx.has_players[suit] for seat in (1, 3))
            if unseen and opponents_live and all(r > rank_of(token) for r in unseen):
                return token
        return None

    # --- Following ---------------------------------------------------------

    def choose_follow(self, hand: Hand, ctx: FollowContext) -> str:
        legal = list(ctx.legal) or legal_tokens(hand, ctx.lead_suit)
        if len(legal) == 1:
            return legal[0]

        in_suit = [t for t in legal if suit_of(t) == ctx.lead_suit]
        if in_suit:
            return self._follow_suit(in_suit, hand, ctx)
        return self._discard(legal, ctx)

    def _follow_suit(self, cards: list[str], hand: Hand, ctx: FollowContext) -> str:
        w = self.weights
        partner_winning = w.team_play and ctx.partner_winning
        high = ctx.highest_rank_played
        under = [t for t in cards if rank_of(t) < high]
        over = [t for t in cards if rank_of(t) > high]
        safe_over = [t for t in over if not is_penalty(t)]

        if safe_over and self._should_rescue(ctx):
            return highest(safe_over)

        if under:
            if partner_winning:
                under = [t for t in under if not is_penalty(t)] or under
            return highest(under)

        dangerous = self._is_dangerous(hand, ctx)
        if partner_winning:
            if not dangerous and safe_over:
                return highest(safe_over)
            return lowest(safe_over or cards)

        if dangerous:
            return lowest(safe_over or cards)
        if safe_over and w.first_trick_burn and ctx.trick_phase == TrickPhase.FIRST:
            return highest(safe_over)
        if safe_over and ctx.is_last and w.burn_when_last:
            return highest(safe_over)
        if safe_over and w.burn_threshold is not None:
            later = range(1, 4 - ctx.player_position)
            if follow_probability(ctx.lead_suit, later, hand, ctx) >= w.burn_threshold:
                return highest(safe_over)

        winners = safe_over or cards
        return min(winners, key=lambda t: (self._is_risky(t, hand, ctx), rank_of(t)))

    def _should_rescue(self, ctx: FollowContext) -> bool:
        """Take the points off a partner who is much closer to the limit than we are."""
        w = self.weights
        if w.rescue_margin is None or not w.team_play:
            return False
        if not ctx.partner_winning or ctx.points_in_trick == 0:
            return False
        partner = (ctx.player_index + 2) % 4
        return ctx.scores[partner] - ctx.scores[ctx.player_index] >= w.rescue_margin

    def _is_dangerous(self, hand: Hand, ctx: FollowContext) -> bool:
        """Whether winning this trick may cost points."""
        if ctx.points_in_trick > 0:
            return True
        if not self.weights.team_play:
            return False
        if ctx.lead_suit == SPADES and _queen_out(hand, ctx):
            return True
        if ctx.lead_suit == DIAMONDS and _ten_out(hand, ctx):
            return True
        if self.weights.burn_threshold is not None and (_queen_out(hand, ctx) or _ten_out(hand, ctx)):
            later = range(1, 4 - ctx.player_position)
            return any(seat not in ctx.has_players[ctx.lead_suit] for seat in later)
        return False

    def _discard(self, legal: list[str], ctx: FollowContext) -> str:
        partner_winning = self.weights.team_play and ctx.partner_winning

        penalties = [t for t in legal if is_penalty(t)]
        if penalties:
            if partner_winning and TEN_OF_DIAMONDS in penalties:
                return TEN_OF_DIAMONDS
            return QUEEN_OF_SPADES if QUEEN_OF_SPADES in penalties else penalties[0]

        if partner_winning:
            clean = [t for t in legal if points_of(t) == 0]
            if clean:
                return max(clean, key=lambda t: (self.discard_danger(t), suit_of(t)))
            return lowest(legal)

        hearts = [t for t in legal if suit_of(t) == HEARTS]
        if hearts:
            return highest(hearts)
        return max(legal, key=lambda t: (self.discard_danger(t), suit_of(t)))

    def discard_danger(self, token: str) -> float:
        w = self.weights
        if token == QUEEN_OF_SPADES:
            return w.queen_danger
        if token == TEN_OF_DIAMONDS:
            return w.ten_danger
        suit, rank = suit_of(token), rank_of(token)
        if suit == HEARTS:
            return w.heart_danger + rank
        danger = float(rank)
        if suit == SPADES and rank >= JACK:
            danger += w.discard_high_spade
        if suit == DIAMONDS and rank >= NINE:
            danger += w.discard_high_diamond
        return danger

    # --- Shared ------------------------------------------------------------

    def _is_risky(self, token: str, hand: Hand, ctx: LeadContext) -> bool:
        """High card that could end up capturing an outstanding penalty card."""
        suit, rank = suit_of(token), rank_of(token)
        if suit == SPADES and rank > QUEEN:
            return _queen_out(hand, ctx)
        if suit == DIAMONDS and rank > TEN:
            return _ten_out(hand, ctx)
        return False

    def _suit_hides_penalty(self, suit: int, hand: Hand, ctx: LeadContext) -> bool:
        if suit == SPADES:
            return _queen_out(hand, ctx)
        if suit == DIAMONDS:
            return _ten_out(hand, ctx)
        return suit == HEARTS and ctx.remaining[HEARTS] > len(hand[HEARTS])
