import random

import pytest

from tablesharp.common.card import Card, Rank, Suit
from tablesharp.common.deck import Deck


def test_deck_has_52_unique_cards():
    deck = Deck()
    assert deck.size == 52
    assert len(set(deck.cards)) == 52


def test_deal_takes_the_top_card():
    deck = Deck()
    assert deck.deal() == Card(Suit.HEARTS, Rank.ACE)
    assert len(deck) == 51


def test_deal_from_empty_deck():
    deck = Deck([])
    with pytest.raises(ValueError):
        deck.deal()


def test_shuffle_keeps_the_same_cards():
    deck = Deck()
    deck.shuffle(random.Random(7))
    assert sorted(map(repr, deck.cards)) == sorted(map(repr, Deck.standard_cards()))


def test_standard_cards_returns_a_copy():
    cards = Deck.standard_cards()
    cards.pop()
    assert len(Deck.standard_cards()) == 52
