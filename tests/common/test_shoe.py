"""Tests for the multi-deck shoe."""

import random

import pytest

from tablesharp.common.card import Card, Rank, Suit
from tablesharp.common.errors import InvariantViolationError, ShoeExhaustedError
from tablesharp.common.shoe import Shoe


def test_shoe_holds_every_deck():
    shoe = Shoe(deck_count=2, rng=random.Random(1))
    assert shoe.total_cards == 104
    assert shoe.remaining_cards == 104
    assert shoe.remaining_percentage() == 1.0


def test_invalid_deck_count():
    with pytest.raises(InvariantViolationError):
        Shoe(deck_count=0)


def test_draw_depletes_the_shoe():
    shoe = Shoe(deck_count=1, rng=random.Random(1))
    for _ in range(13):
        shoe.draw()
    assert shoe.remaining_cards == 39
    assert shoe.remaining_percentage() == pytest.approx(0.75)


def test_draw_from_empty_shoe_raises():
    shoe = Shoe(deck_count=1, deck_factory=lambda: [Card(Suit.HEARTS, Rank.ACE)])
    shoe.draw()
    assert shoe.is_empty
    with pytest.raises(ShoeExhaustedError):
        shoe.draw()


def test_reset_restores_all_cards():
    shoe = Shoe(deck_count=1, rng=random.Random(3))
    for _ in range(40):
        shoe.draw()
    shoe.reset()
    assert shoe.remaining_cards == 52
    assert len(set(shoe.cards)) == 52


def test_seeded_shoes_shuffle_identically():
    first = Shoe(deck_count=1, rng=random.Random(42))
    second = Shoe(deck_count=1, rng=random.Random(42))
    assert first.cards == second.cards
