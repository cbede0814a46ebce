"""Tests for card models."""

import random

import pytest

from leekha_engine.cards import (
    QUEEN_OF_SPADES,
    TEN_OF_DIAMONDS,
    Card,
    Rank,
    Suit,
    create_deck,
    deal_hands,
    shuffle_deck,
    sort_hand,
)


class TestSuit:
    def test_canonical_order(self):
        """Hands group hearts, spades, diamonds, clubs in that order."""
        assert Suit.HEARTS < Suit.SPADES < Suit.DIAMONDS < Suit.CLUBS

    def test_letters_round_trip(self):
        for suit in Suit:
            assert Suit.from_letter(suit.letter.lower()) is suit

    def test_unknown_letter(self):
        with pytest.raises(ValueError):
            Suit.from_letter("X")


class TestRank:
    def test_ordinals(self):
        assert Rank.TWO.value == 0
        assert Rank.TEN.value == 8
        assert Rank.ACE.value == 12

    def test_symbols(self):
        assert Rank.TEN.symbol == "10"
        assert Rank.TEN.token == "T"
        assert Rank.QUEEN.symbol == "Q"
        assert Rank.from_symbol("T") is Rank.TEN
        assert Rank.from_symbol("10") is Rank.TEN
        assert Rank.from_symbol("a") is Rank.ACE


class TestCard:
    def test_card_singleton(self):
        assert Card(Rank.ACE, Suit.SPADES) is Card(Rank.ACE, Suit.SPADES)

    def test_card_string(self):
        assert str(Card(Rank.ACE, Suit.SPADES)) == "A♠"
        assert repr(Card(Rank.ACE, Suit.SPADES)) == "Card(ACE, SPADES)"

    def test_ids_and_tokens(self):
        ten = Card(Rank.TEN, Suit.HEARTS)
        assert ten.id == "10H"
        assert ten.token == "Th"
        assert Card.from_id("10H") is ten
        assert Card.from_id("Th") is ten
        assert Card.from_id("QS") is QUEEN_OF_SPADES

    def test_malformed_id(self):
        with pytest.raises(ValueError):
            Card.from_id("Z")
        with pytest.raises(ValueError):
            Card.from_id("1H")

    def test_penalty_points(self):
        assert Card(Rank.TWO, Suit.HEARTS).points == 1
        assert Card(Rank.ACE, Suit.HEARTS).points == 1
        assert QUEEN_OF_SPADES.points == 13
        assert TEN_OF_DIAMONDS.points == 10
        assert Card(Rank.KING, Suit.SPADES).points == 0
        assert Card(Rank.TEN, Suit.CLUBS).points == 0

    def test_penalty_cards(self):
        assert QUEEN_OF_SPADES.is_penalty_card
        assert TEN_OF_DIAMONDS.is_penalty_card
        assert not Card(Rank.ACE, Suit.HEARTS).is_penalty_card

    def test_ordering_is_suit_then_rank(self):
        assert Card(Rank.ACE, Suit.HEARTS) < Card(Rank.TWO, Suit.SPADES)
        assert Card(Rank.TWO, Suit.CLUBS) < Card(Rank.THREE, Suit.CLUBS)

    def test_card_hash(self):
        cards = {Card(Rank.ACE, Suit.SPADES), Card(Rank.ACE, Suit.SPADES)}
        assert len(cards) == 1


class TestDeck:
    def test_deck_has_52_unique_cards(self):
        deck = create_deck()
        assert len(deck) == 52
        assert len(set(deck)) == 52

    def test_deck_carries_36_points(self):
        assert sum(card.points for card in create_deck()) == 36

    def test_shuffle_is_reproducible(self):
        deck = create_deck()
        assert shuffle_deck(deck, seed=7) == shuffle_deck(deck, seed=7)
        assert shuffle_deck(deck, seed=7) != deck

    def test_shuffle_does_not_mutate(self):
        deck = create_deck()
        shuffle_deck(deck, rng=random.Random(3))
        assert deck == create_deck()

    def test_deal_thirteen_each(self):
        hands = deal_hands(shuffle_deck(create_deck(), seed=1))
        assert [len(hand) for hand in hands] == [13, 13, 13, 13]
        assert len({card for hand in hands for card in hand}) == 52

    def test_dealt_hands_are_sorted(self):
        for hand in deal_hands(shuffle_deck(create_deck(), seed=2)):
            assert hand == sort_hand(hand)

    def test_deal_is_round_robin(self):
        deck = create_deck()
        hands = deal_hands(deck)
        assert deck[0] in hands[0]
        assert deck[1] in hands[1]
        assert deck[4] in hands[0]
