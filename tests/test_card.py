import pytest

from tablesharp.common.card import Card, Rank, Suit


def test_card_creation():
    card = Card(Suit.HEARTS, Rank.ACE)
    assert card.suit == Suit.HEARTS
    assert card.rank == Rank.ACE


def test_card_repr():
    card = Card(Suit.HEARTS, Rank.EIGHT)
    assert repr(card) == "Card(Suit.HEARTS, Rank.EIGHT)"


def test_card_str():
    assert str(Card(Suit.HEARTS, Rank.EIGHT)) == "8 of ♥"
    assert str(Card(Suit.SPADES, Rank.KING)) == "K of ♠"
    assert str(Card(Suit.CLUBS, Rank.TEN)) == "10 of ♣"


def test_face_ranks_are_distinct():
    assert Rank.KING != Rank.TEN
    assert Rank.JACK.is_face
    assert not Rank.TEN.is_face
    assert len(list(Rank)) == 13


def test_card_equality_and_hash():
    assert Card(Suit.HEARTS, Rank.TWO) == Card(Suit.HEARTS, Rank.TWO)
    assert Card(Suit.HEARTS, Rank.TWO) != Card(Suit.SPADES, Rank.TWO)
    assert len({Card(Suit.HEARTS, Rank.TWO), Card(Suit.HEARTS, Rank.TWO)}) == 1


def test_card_is_immutable():
    card = Card(Suit.HEARTS, Rank.TWO)
    with pytest.raises(AttributeError):
        card.rank = Rank.THREE


def test_invalid_card():
    with pytest.raises(TypeError):
        Card("hearts", Rank.TWO)
    with pytest.raises(TypeError):
        Card(Suit.HEARTS, 2)
