from tablesharp.common.card import Card, Rank, Suit
from tablesharp.common.hand import Hand


def test_hand_initialization():
    hand = Hand()
    assert hand.cards == ()
    assert hand.card_count == 0


def test_add_card():
    hand = Hand()
    card = Card(Suit.HEARTS, Rank.EIGHT)
    hand.add_card(card)
    assert card in hand.cards


def test_hand_repr():
    hand = Hand()
    card = Card(Suit.HEARTS, Rank.EIGHT)
    hand.add_card(card)
    assert repr(hand) == f"Hand([{card!r}])"


def test_hand_str():
    hand = Hand()
    assert str(hand) == "Empty hand"
    hand.add_card(Card(Suit.HEARTS, Rank.EIGHT))
    hand.add_card(Card(Suit.CLUBS, Rank.ACE))
    assert str(hand) == "8 of ♥, A of ♣"


def test_order_of_cards():
    cards = [Card(Suit.HEARTS, Rank.EIGHT), Card(Suit.CLUBS, Rank.ACE)]
    hand = Hand(cards)
    assert hand.cards == tuple(cards)


def test_cards_cannot_be_modified_through_the_property():
    hand = Hand([Card(Suit.HEARTS, Rank.EIGHT)])
    cards = hand.cards
    assert isinstance(cards, tuple)
    assert hand.card_count == 1
