"""Tests for the card tracker."""

from leekha_engine.adapter import hand_by_suit
from leekha_engine.cards import Card, Rank, Suit
from leekha_engine.tracker import NO_VOID_REVEALED, CardTracker, TrackerState


def card(card_id):
    return Card.from_id(card_id)


def play_trick(tracker, plays):
    """Record (seat, card_id) plays as one trick."""
    trick = []
    for seat, card_id in plays:
        tracker.record_card_played(card(card_id), seat, list(trick))
        trick.append((seat, card(card_id)))
    tracker.end_trick()


class TestRecording:
    def test_fresh_tracker(self):
        tracker = CardTracker()
        assert tracker.remaining_counts() == (13, 13, 13, 13)
        assert tracker.state.first_trick_void_position == NO_VOID_REVEALED
        assert not tracker.state.hearts_broken

    def test_played_cards_and_flags(self):
        tracker = CardTracker()
        play_trick(tracker, [(0, "5D"), (1, "10D"), (2, "2D"), (3, "AD")])
        state = tracker.state
        assert state.is_played(card("10D"))
        assert state.ten_of_diamonds_played
        assert not state.queen_of_spades_played
        assert state.tricks_played == 1
        assert tracker.remaining_counts() == (13, 13, 9, 13)

    def test_hearts_broken(self):
        tracker = CardTracker()
        play_trick(tracker, [(0, "5C"), (1, "2H"), (2, "6C"), (3, "7C")])
        assert tracker.state.hearts_broken

    def test_void_inferred_when_not_following(self):
        tracker = CardTracker()
        play_trick(tracker, [(0, "5C"), (1, "QS"), (2, "6C"), (3, "7C")])
        state = tracker.state
        assert state.voids[1][Suit.CLUBS]
        assert not state.voids[1][Suit.SPADES]
        assert not state.voids[0][Suit.CLUBS]
        assert state.queen_of_spades_played

    def test_first_trick_void_position(self):
        tracker = CardTracker()
        play_trick(tracker, [(0, "5C"), (1, "6C"), (2, "2H"), (3, "3H")])
        assert tracker.state.first_trick_void_position == 2

    def test_void_position_only_in_first_trick(self):
        tracker = CardTracker()
        play_trick(tracker, [(0, "5C"), (1, "6C"), (2, "7C"), (3, "8C")])
        play_trick(tracker, [(3, "9C"), (0, "2H"), (1, "TC"), (2, "JC")])
        assert tracker.state.first_trick_void_position == NO_VOID_REVEALED
        assert tracker.state.voids[0][Suit.CLUBS]

    def test_reset(self):
        tracker = CardTracker()
        play_trick(tracker, [(0, "5C"), (1, "2H"), (2, "6C"), (3, "7C")])
        tracker.reset()
        assert tracker.state == TrackerState()

    def test_snapshot_is_detached(self):
        tracker = CardTracker()
        before = tracker.snapshot()
        tracker.record_card_played(card("AS"), 0, [])
        assert not before.is_played(card("AS"))
        assert tracker.snapshot().is_played(card("AS"))


class TestQueries:
    def test_relative_rank_positions(self):
        tracker = CardTracker()
        play_trick(tracker, [(1, "2S"), (2, "3S"), (3, "4S"), (0, "5S")])
        hand = [card("6S"), card("AS"), card("2H")]
        positions = tracker.relative_rank_positions(hand_by_suit(hand))
        assert positions[Suit.SPADES] == (1, 9)
        assert positions[Suit.HEARTS] == (1,)
        assert positions[Suit.CLUBS] == ()

    def test_seats_likely_holding_suit(self):
        tracker = CardTracker()
        play_trick(tracker, [(0, "5C"), (1, "2H"), (2, "6C"), (3, "7C")])
        holders = tracker.seats_likely_holding_suit(0)
        assert holders[Suit.CLUBS] == (2, 3)
        assert holders[Suit.HEARTS] == (1, 2, 3)

    def test_dict_round_trip(self):
        tracker = CardTracker()
        play_trick(tracker, [(0, "5C"), (1, "QS"), (2, "6C"), (3, "10C")])
        data = tracker.to_dict()
        assert data["played_cards"]["C"] == ["5", "6", "10"]
        assert data["player_voids"][1]["C"] is True
        assert data["first_trick_void_position"] == 1
        assert TrackerState.from_dict(data) == tracker.state

    def test_from_dict_defaults(self):
        state = TrackerState.from_dict({})
        assert state == TrackerState()
        assert state.played[Suit.HEARTS] == frozenset()

    def test_remaining_counts_include_rank_set(self):
        state = TrackerState().with_card_played(Card(Rank.ACE, Suit.CLUBS), 0, [])
        assert state.remaining_counts()[Suit.CLUBS] == 12
