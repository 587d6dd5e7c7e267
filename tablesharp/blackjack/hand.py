"""
BlackjackHand: blackjack scoring over a card sequence.

Scoring counts tens and face cards as 10 and every Ace as 11, then demotes one
Ace at a time to 1 while the total is over 21. The result does not depend on
the order the cards arrived in.
"""

from typing import Iterable, Sequence, Tuple

from tablesharp.blackjack.constants import (
    ACE_SOFT_DELTA,
    BLACKJACK,
    get_blackjack_value,
)
from tablesharp.common.card import Card, Rank
from tablesharp.common.hand import Hand


def score_cards(cards: Iterable[Card]) -> Tuple[int, bool]:
    """
    Score a sequence of cards.

    Returns:
        (value, is_soft) where is_soft means at least one Ace is still counted as 11.
    """
    total = 0
    high_aces = 0
    for card in cards:
        total += get_blackjack_value(card.rank)
        if card.rank == Rank.ACE:
            high_aces += 1

    while total > BLACKJACK and high_aces:
        total -= ACE_SOFT_DELTA
        high_aces -= 1

    return total, high_aces > 0


class BlackjackHand(Hand):
    """A hand in the game of Blackjack."""

    __slots__ = ("_is_split", "_is_complete", "_score")

    def __init__(self, cards: Sequence[Card] = (), is_split: bool = False):
        super().__init__(cards)
        self._is_split = is_split
        self._is_complete = False
        self._score = None

    def add_card(self, card: Card) -> None:
        """Add a card and drop the cached score."""
        super().add_card(card)
        self._score = None

    def _scored(self) -> Tuple[int, bool]:
        if self._score is None:
            self._score = score_cards(self._cards)
        return self._score

    def value(self) -> int:
        """Calculate the optimal value of the hand with ace handling."""
        return self._scored()[0]

    @property
    def is_soft(self) -> bool:
        """Determine if the hand is soft (contains an ace counted as 11)."""
        return self._scored()[1]

    @property
    def is_busted(self) -> bool:
        return self.value() > BLACKJACK

    @property
    def is_blackjack(self) -> bool:
        """A natural: two cards worth 21 on a hand that did not come from a split."""
        return (
            not self._is_split
            and len(self._cards) == 2
            and self.value() == BLACKJACK
        )

    @property
    def is_pair(self) -> bool:
        return len(self._cards) == 2 and self._cards[0].rank == self._cards[1].rank

    @property
    def is_split(self) -> bool:
        """Return whether this hand was created from a split."""
        return self._is_split

    @property
    def is_complete(self) -> bool:
        """True once the hand may not take further cards (stood, doubled, split Aces)."""
        return self._is_complete

    def mark_complete(self) -> None:
        self._is_complete = True

    def __repr__(self) -> str:
        return f"BlackjackHand({list(self._cards)!r}, is_split={self._is_split})"
