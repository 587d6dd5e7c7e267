"""
The multi-deck shoe cards are dealt from.

The shoe only knows how to shuffle, deal and report depletion. Deciding when a
reshuffle is due is the job of `tablesharp.blackjack.shoe_manager.ShoeManager`.
"""

import random
from typing import Callable, List, Optional

from tablesharp.common.card import Card
from tablesharp.common.deck import Deck
from tablesharp.common.errors import InvariantViolationError, ShoeExhaustedError


class Shoe:
    def __init__(
        self,
        deck_count: int = 6,
        rng: Optional[random.Random] = None,
        deck_factory: Optional[Callable[[], List[Card]]] = None,
    ):
        """
        Initialize a Shoe instance.

        :param deck_count: Number of decks to use in the shoe (default is 6)
        :param rng: Random source used for shuffling; the module-level generator when omitted
        :param deck_factory: Optional callable that returns a list of cards for one deck
        """
        if deck_count < 1:
            raise InvariantViolationError("Deck count must be at least 1.")

        self._deck_count = deck_count
        self._rng = rng or random.Random()
        self._deck_factory = deck_factory or Deck.standard_cards
        self.cards_per_deck = len(self._deck_factory())
        self.cards: List[Card] = []
        self.reset()

    @property
    def deck_count(self) -> int:
        return self._deck_count

    @property
    def total_cards(self) -> int:
        return self.cards_per_deck * self._deck_count

    @property
    def remaining_cards(self) -> int:
        """Return the number of cards remaining in the shoe."""
        return len(self.cards)

    @property
    def is_empty(self) -> bool:
        return not self.cards

    def reset(self) -> None:
        """Return every card to the shoe and shuffle."""
        self.cards = []
        for _ in range(self._deck_count):
            self.cards.extend(self._deck_factory())
        self.shuffle()

    def shuffle(self) -> None:
        """Shuffle the cards currently in the shoe."""
        self._rng.shuffle(self.cards)

    def draw(self) -> Card:
        """
        Deal the next card.

        :raises ShoeExhaustedError: if the shoe is empty
        """
        if not self.cards:
            raise ShoeExhaustedError(1, 0, "Cannot draw from an empty shoe.")
        return self.cards.pop(0)

    def remaining_percentage(self) -> float:
        """Fraction of the full shoe still undealt, between 0.0 and 1.0."""
        total = self.total_cards
        return len(self.cards) / total if total else 0.0

    def __str__(self) -> str:
        return f"Shoe with {self.remaining_cards} cards remaining"

    def __repr__(self) -> str:
        return f"Shoe(deck_count={self._deck_count})"
