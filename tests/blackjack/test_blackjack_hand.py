"""Tests for blackjack hand scoring."""

import itertools

import pytest

from tablesharp.blackjack.hand import score_cards
from tablesharp.blackjack.test_support import parse_cards


def test_ace_king_is_a_natural(hand_of):
    hand = hand_of("Ah,Kd")
    assert hand.value() == 21
    assert hand.is_blackjack
    assert hand.is_soft


def test_ace_ace_nine_is_soft_21(hand_of):
    hand = hand_of("Ah,As,9c")
    assert hand.value() == 21
    assert hand.is_soft
    assert not hand.is_blackjack


def test_ten_ten_five_is_busted(hand_of):
    hand = hand_of("Th,Td,5c")
    assert hand.value() == 25
    assert hand.is_busted
    assert not hand.is_soft


@pytest.mark.parametrize(
    "cards, value, soft",
    [
        ("Ah,6d", 17, True),
        ("Ah,6d,Tc", 17, False),
        ("Ah,Ad", 12, True),
        ("Ah,Ad,Ac,As", 14, True),
        ("Ah,Ad,Ac,As,Th,7c", 21, False),
        ("Kh,Qd", 20, False),
        ("5h,6d", 11, False),
    ],
)
def test_values(hand_of, cards, value, soft):
    hand = hand_of(cards)
    assert hand.value() == value
    assert hand.is_soft is soft


def test_scoring_is_order_independent():
    cards = parse_cards("Ah,5d,Ac,9s")
    scores = {score_cards(order) for order in itertools.permutations(cards)}
    assert scores == {(16, True)}


def test_split_hand_is_never_a_natural(hand_of):
    hand = hand_of("Ah,Kd", is_split=True)
    assert hand.value() == 21
    assert not hand.is_blackjack
    assert hand.is_split


def test_three_card_21_is_not_a_natural(hand_of):
    assert not hand_of("7h,7d,7c").is_blackjack


def test_value_cache_is_refreshed_on_add(hand_of):
    hand = hand_of("Th,6d")
    assert hand.value() == 16
    hand.add_card(parse_cards("Ac")[0])
    assert hand.value() == 17


def test_pair_and_completion(hand_of):
    hand = hand_of("8h,8d")
    assert hand.is_pair
    assert not hand_of("Kh,Td").is_pair
    assert not hand.is_complete
    hand.mark_complete()
    assert hand.is_complete


def test_empty_hand(hand_of):
    hand = hand_of("")
    assert hand.value() == 0
    assert not hand.is_blackjack
