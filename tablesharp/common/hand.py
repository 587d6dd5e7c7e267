"""
This module contains classes to represent a hand of cards in a card game.

It includes an abstract base class `AbstractHand`, and a concrete implementation `Hand`.
Each hand holds an ordered list of cards and provides a method for adding cards.

Classes:

AbstractHand: An abstract base class for a hand of cards.
Hand: A concrete implementation of a hand of cards.
"""
from abc import ABC
from typing import List, Sequence, Tuple

from tablesharp.common.card import Card


class AbstractHand(ABC):
    """
    An abstract base class for a hand of cards.

    Subclasses should override the __repr__ and __str__ methods to provide a string representation of the hand.
    """

    def __init__(self, cards: Sequence[Card] = ()):
        self._cards: List[Card] = list(cards)

    @property
    def cards(self) -> Tuple[Card, ...]:
        """Returns the cards in the hand, in the order they were received."""
        return tuple(self._cards)

    @property
    def card_count(self) -> int:
        return len(self._cards)

    def add_card(self, card: Card) -> None:
        """
        Adds a card to the hand.

        Args:
            card: The card to add.
        """
        self._cards.append(card)


class Hand(AbstractHand):
    """
    A concrete implementation of a hand of cards.
    """

    def __repr__(self) -> str:
        return f"Hand({list(self._cards)!r})"

    def __str__(self) -> str:
        if not self._cards:
            return "Empty hand"
        return ", ".join(str(card) for card in self._cards)
