"""Tests for the engine/strategy bridge."""

import pytest

from leekha_engine.adapter import BotAdapter, hand_to_tokens, token_to_card, trick_phase
from leekha_engine.cards import QUEEN_OF_SPADES, Card
from leekha_engine.seats import TableView
from leekha_engine.tracker import TrackerState
from strategies.base import Strategy
from strategies.context import FollowContext, LeadContext, TrickPhase


def cards(*ids):
    return [Card.from_id(card_id) for card_id in ids]


def make_view(seat, hand_ids, trick=(), tracker=None):
    trick_plays = tuple((s, Card.from_id(c)) for s, c in trick)
    state = tracker or TrackerState()
    # Cards already on the table are public knowledge.
    for i, (s, card) in enumerate(trick_plays):
        state = state.with_card_played(card, s, trick_plays[:i])
    return TableView(
        seat=seat,
        hand=tuple(sorted(cards(*hand_ids))),
        trick=trick_plays,
        scores=(10, 20, 30, 40),
        round_number=2,
        tracker=state,
    )


class ScriptedStrategy(Strategy):
    """Returns whatever it was told to, recording the contexts it saw."""

    def __init__(self, card=None, cards_to_pass=None, error=None):
        self.card = card
        self.cards_to_pass = cards_to_pass
        self.error = error
        self.contexts = []

    @property
    def name(self):
        return "Scripted"

    def choose_pass(self, hand, ctx):
        self.contexts.append(ctx)
        if self.error:
            raise self.error
        return self.cards_to_pass

    def choose_lead(self, hand, ctx):
        self.contexts.append(ctx)
        if self.error:
            raise self.error
        return self.card

    def choose_follow(self, hand, ctx):
        self.contexts.append(ctx)
        if self.error:
            raise self.error
        return self.card


class TestTokens:
    def test_hand_to_tokens_groups_by_suit(self):
        hand = cards("QS", "2H", "10D", "AH", "3C")
        assert hand_to_tokens(hand) == [["2h", "Ah"], ["Qs"], ["Td"], ["3c"]]

    def test_token_to_card(self):
        assert token_to_card("Qs") is QUEEN_OF_SPADES
        assert token_to_card("10h") is Card.from_id("10H")
        assert token_to_card("Zz") is None
        assert token_to_card(None) is None
        assert token_to_card(7) is None


class TestContexts:
    def test_lead_context(self):
        adapter = BotAdapter(ScriptedStrategy(), seat=1)
        view = make_view(1, ["2H", "QS", "5C"])
        ctx = adapter.build_lead_context(view, list(view.hand))
        assert isinstance(ctx, LeadContext)
        assert ctx.has_queen_of_spades
        assert ctx.trick_phase == TrickPhase.FIRST
        assert ctx.player_index == 1
        assert ctx.scores == (10, 20, 30, 40)
        assert ctx.remaining == (13, 13, 13, 13)
        assert ctx.has_players == ((1, 2, 3),) * 4
        assert set(ctx.legal) == {"2h", "Qs", "5c"}
        assert ctx.first_trick_void_position == 100

    def test_follow_context(self):
        adapter = BotAdapter(ScriptedStrategy(), seat=2)
        view = make_view(2, ["3C", "KC"], trick=[(0, "5C"), (1, "9C")])
        ctx = adapter.build_follow_context(view, cards("3C", "KC"))
        assert isinstance(ctx, FollowContext)
        assert ctx.lead_suit == 3
        assert ctx.highest_rank_played == 7
        assert ctx.points_in_trick == 0
        assert ctx.player_position == 2
        assert ctx.trick == ((2, "5c"), (3, "9c"))
        assert ctx.winning_seat == 3
        assert not ctx.partner_winning
        assert ctx.remaining[3] == 11

    def test_partner_winning_is_relative(self):
        adapter = BotAdapter(ScriptedStrategy(), seat=3)
        view = make_view(3, ["3C"], trick=[(0, "2C"), (1, "AC"), (2, "5C")])
        ctx = adapter.build_follow_context(view, cards("3C"))
        assert ctx.trick[1] == (2, "Ac")
        assert ctx.partner_winning
        assert ctx.is_last

    def test_has_players_relative_offsets(self):
        tracker = TrackerState().with_card_played(Card.from_id("5C"), 1, []).with_card_played(
            Card.from_id("2H"), 2, [(1, Card.from_id("5C"))]
        )
        adapter = BotAdapter(ScriptedStrategy(), seat=0)
        view = make_view(0, ["4C"], tracker=tracker.with_trick_ended())
        ctx = adapter.build_lead_context(view, list(view.hand))
        # Seat 2 (the partner) is void in clubs.
        assert ctx.has_players[3] == (1, 3)
        assert ctx.trick_phase == TrickPhase.EARLY

    def test_follow_context_needs_a_lead(self):
        adapter = BotAdapter(ScriptedStrategy(), seat=0)
        view = make_view(0, ["4C"])
        with pytest.raises(ValueError):
            adapter.build_follow_context(view, list(view.hand))

    def test_queen_trick_phase(self):
        view = make_view(1, ["3S"], trick=[(0, "QS")], tracker=TrackerState().with_trick_ended())
        assert trick_phase(view) == TrickPhase.QUEEN_TRICK


class TestChooseCard:
    def test_valid_choice(self):
        strategy = ScriptedStrategy(card="Kc")
        adapter = BotAdapter(strategy, seat=2)
        view = make_view(2, ["3C", "KC"], trick=[(0, "5C"), (1, "9C")])
        assert adapter.choose_card(view, cards("3C", "KC")) is Card.from_id("KC")
        assert adapter.last_fallback is None
        assert adapter.last_decision["kind"] == "follow"

    def test_strategy_error_falls_back(self):
        adapter = BotAdapter(ScriptedStrategy(error=RuntimeError("oops")), seat=0)
        view = make_view(0, ["2H", "5C"])
        legal = list(view.hand)
        assert adapter.choose_card(view, legal) is legal[0]
        assert adapter.last_fallback == "strategy_error"

    def test_malformed_token_falls_back(self):
        adapter = BotAdapter(ScriptedStrategy(card="??"), seat=0)
        view = make_view(0, ["2H", "5C"])
        legal = list(view.hand)
        assert adapter.choose_card(view, legal) is legal[0]
        assert adapter.last_fallback == "invalid_token"

    def test_card_not_in_hand_falls_back(self):
        adapter = BotAdapter(ScriptedStrategy(card="As"), seat=0)
        view = make_view(0, ["2H", "5C"])
        legal = list(view.hand)
        adapter.choose_card(view, legal)
        assert adapter.last_fallback == "invalid_token"

    def test_illegal_card_falls_back(self):
        adapter = BotAdapter(ScriptedStrategy(card="2h"), seat=1)
        view = make_view(1, ["2H", "5C"], trick=[(0, "9C")])
        legal = cards("5C")
        assert adapter.choose_card(view, legal) is Card.from_id("5C")
        assert adapter.last_fallback == "illegal_card"

    def test_fallback_cleared_on_next_decision(self):
        strategy = ScriptedStrategy(card="??")
        adapter = BotAdapter(strategy, seat=0)
        view = make_view(0, ["2H", "5C"])
        adapter.choose_card(view, list(view.hand))
        strategy.card = "5c"
        adapter.choose_card(view, list(view.hand))
        assert adapter.last_fallback is None


class TestChoosePass:
    def test_valid_pass(self):
        adapter = BotAdapter(ScriptedStrategy(cards_to_pass=["Qs", "Ah", "2c"]), seat=0)
        view = make_view(0, ["QS", "AH", "2C", "3C"])
        assert adapter.choose_pass(view) == cards("QS", "AH", "2C")
        assert adapter.last_fallback is None

    def test_duplicate_cards_rejected(self):
        adapter = BotAdapter(ScriptedStrategy(cards_to_pass=["Qs", "Qs", "2c"]), seat=0)
        view = make_view(0, ["QS", "AH", "2C", "3C"])
        assert set(adapter.choose_pass(view)) == set(cards("AH", "QS", "3C"))
        assert adapter.last_fallback == "invalid_pass"

    def test_wrong_count_rejected(self):
        adapter = BotAdapter(ScriptedStrategy(cards_to_pass=["Qs"]), seat=0)
        view = make_view(0, ["QS", "AH", "2C", "3C"])
        assert len(adapter.choose_pass(view)) == 3
        assert adapter.last_fallback == "invalid_pass"

    def test_error_rejected(self):
        adapter = BotAdapter(ScriptedStrategy(error=KeyError("x")), seat=0)
        view = make_view(0, ["QS", "AH", "2C", "3C"])
        assert len(adapter.choose_pass(view)) == 3
        assert adapter.last_fallback == "strategy_error"
