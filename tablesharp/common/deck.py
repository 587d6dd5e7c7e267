"""
This module contains the Deck class, which represents a single 52-card deck.

>>> deck = Deck()
>>> deck.size
52
>>> deck.deal()
Card(Suit.HEARTS, Rank.ACE)
>>> deck.size
51
"""

import random
from typing import List, Optional

from tablesharp.common.card import Card, Rank, Suit


class Deck:
    """
    A class representing a deck of cards.
    """

    # Precompute the default deck
    _default_deck = [Card(suit, rank) for suit in Suit for rank in Rank]

    def __init__(self, cards: Optional[List[Card]] = None):
        """
        Initialize a Deck instance.

        :param cards: A list of Card instances to populate the deck (optional).
                      If not provided, a standard deck is constructed.
        """
        if cards is None:
            self.cards: List[Card] = self._default_deck.copy()
        else:
            self.cards = cards.copy()

    @classmethod
    def standard_cards(cls) -> List[Card]:
        """Return a fresh list of the 52 cards of a standard deck."""
        return cls._default_deck.copy()

    def shuffle(self, rng: Optional[random.Random] = None):
        """Shuffle the cards in the deck."""
        (rng or random).shuffle(self.cards)

    def deal(self) -> Card:
        """
        Deal the top card of the deck.

        :raises ValueError: if the deck is empty
        """
        if not self.cards:
            raise ValueError("No cards left in the deck.")
        return self.cards.pop(0)

    @property
    def size(self) -> int:
        return len(self.cards)

    def __len__(self) -> int:
        return len(self.cards)

    def __repr__(self) -> str:
        return f"Deck({self.cards!r})"

    def __str__(self) -> str:
        return f"Deck of {self.size} cards"
