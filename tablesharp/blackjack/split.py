"""
Split hand management.

Every player in a round holds an ordered list of `PlayerHand` entries, one per
hand they are playing, plus the index of the hand currently acting. A split
replaces the current entry with two new hands, each seeded with one card of
the pair and backed by its own bet. The turn loop steps through a player's
hands with `has_more_hands` / `advance_to_next_hand`, so a split player is
just a longer sub-sequence of turns.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from tablesharp.blackjack.bet import Bet
from tablesharp.blackjack.constants import BLACKJACK
from tablesharp.blackjack.hand import BlackjackHand
from tablesharp.common.card import Card, Rank
from tablesharp.common.errors import InvariantViolationError
from tablesharp.common.money import Money

logger = logging.getLogger(__name__)


class PlayerHand:
    """A hand together with the bet that backs it."""

    def __init__(self, hand: BlackjackHand, bet: Optional[Bet] = None):
        if hand is None:
            raise InvariantViolationError("A hand is required.")
        self.hand = hand
        self.bet = bet
        self.is_active = True

    @property
    def is_complete(self) -> bool:
        return self.hand.is_complete

    @property
    def is_resolved(self) -> bool:
        """True when the hand can no longer act: complete, busted or a natural."""
        return self.hand.is_complete or self.hand.is_busted or self.hand.is_blackjack

    def mark_complete(self) -> None:
        self.hand.mark_complete()

    def mark_inactive(self) -> None:
        self.is_active = False

    def reactivate(self) -> None:
        if self.hand.is_complete:
            raise InvariantViolationError("Cannot reactivate a completed hand.")
        self.is_active = True

    def can_receive_more_cards(self) -> bool:
        return self.is_active and not self.is_resolved and self.hand.value() < BLACKJACK

    def can_split(self) -> bool:
        return (
            self.is_active
            and not self.hand.is_split
            and self.hand.is_pair
            and not self.is_resolved
        )

    def can_double_down(self) -> bool:
        return (
            self.is_active
            and not self.hand.is_split
            and self.hand.card_count == 2
            and not self.is_resolved
        )

    def __repr__(self) -> str:
        return f"PlayerHand({self.hand!r}, bet={self.bet!r}, active={self.is_active})"


@dataclass(frozen=True)
class SplitResult:
    player_name: str
    original_hand: BlackjackHand
    hands: Tuple[PlayerHand, ...]
    is_split_aces: bool

    @property
    def split_hands(self) -> List[BlackjackHand]:
        return [player_hand.hand for player_hand in self.hands]


class SplitHandManager:
    """Ordered hands and the current hand index for every player in the round."""

    def __init__(self):
        self._hands: Dict[str, List[PlayerHand]] = {}
        self._current: Dict[str, int] = {}
        self._names: Dict[str, str] = {}

    @staticmethod
    def _key(player_name: str) -> str:
        return player_name.strip().casefold()

    def _require(self, player_name: str) -> List[PlayerHand]:
        hands = self._hands.get(self._key(player_name))
        if hands is None:
            raise InvariantViolationError(f"Player '{player_name}' has no hands this round.")
        return hands

    def reset(self) -> None:
        self._hands.clear()
        self._current.clear()
        self._names.clear()

    def register(self, player_name: str, hand: BlackjackHand, bet: Optional[Bet] = None) -> PlayerHand:
        """Give a player their first hand of the round."""
        if not isinstance(player_name, str) or not player_name.strip():
            raise InvariantViolationError("Player name cannot be empty or whitespace.")
        key = self._key(player_name)
        player_hand = PlayerHand(hand, bet)
        self._hands[key] = [player_hand]
        self._current[key] = 0
        self._names[key] = player_name.strip()
        return player_hand

    def players(self) -> List[str]:
        return list(self._names.values())

    def hands_for(self, player_name: str) -> List[PlayerHand]:
        return list(self._hands.get(self._key(player_name), []))

    def current_index(self, player_name: str) -> int:
        self._require(player_name)
        return self._current[self._key(player_name)]

    def current_hand(self, player_name: str) -> PlayerHand:
        hands = self._require(player_name)
        return hands[self._current[self._key(player_name)]]

    def has_more_hands(self, player_name: str) -> bool:
        """True if a hand after the current one can still act."""
        hands = self._require(player_name)
        start = self._current[self._key(player_name)] + 1
        return any(not h.is_resolved for h in hands[start:])

    def advance_to_next_hand(self, player_name: str) -> int:
        """Move to the next hand that can still act and return its index."""
        hands = self._require(player_name)
        key = self._key(player_name)
        for index in range(self._current[key] + 1, len(hands)):
            if not hands[index].is_resolved:
                hands[self._current[key]].mark_inactive()
                self._current[key] = index
                logger.debug("%s moves to hand %d", self._names[key], index + 1)
                return index
        raise InvariantViolationError(f"Player '{player_name}' has no more hands to play.")

    def total_bet_amount(self, player_name: str) -> Money:
        hands = self._require(player_name)
        bets = [h.bet for h in hands if h.bet is not None]
        if not bets:
            return Money.zero()
        total = Money.zero(bets[0].amount.currency)
        for bet in bets:
            total = total + bet.amount
        return total

    @staticmethod
    def can_split(hand: BlackjackHand) -> bool:
        if hand.is_split or hand.is_complete:
            return False
        return hand.is_pair and not hand.is_busted and not hand.is_blackjack

    @staticmethod
    def is_split_aces_hand(hand: BlackjackHand) -> bool:
        return hand.is_split and bool(hand.cards) and hand.cards[0].rank == Rank.ACE

    @staticmethod
    def has_sufficient_funds_for_split(bankroll: Money, bet: Bet) -> bool:
        return bankroll >= bet.amount

    def split(
        self, player_name: str, bets: Sequence[Bet], draw: Callable[[], Card]
    ) -> SplitResult:
        """
        Split the player's current hand.

        Each new hand keeps one card of the pair and receives one card from
        `draw`. Split Aces are complete after that card, as is any split hand
        that reaches 21.

        Raises:
            InvariantViolationError: the hand is not a splittable pair, or
                `bets` does not hold one bet per new hand
        """
        hands = self._require(player_name)
        key = self._key(player_name)
        index = self._current[key]
        original = hands[index]

        if not self.can_split(original.hand):
            raise InvariantViolationError(f"Hand {original.hand} cannot be split.")
        if len(bets) != 2:
            raise InvariantViolationError("A split needs exactly one bet per new hand.")

        new_hands = []
        for card, bet in zip(original.hand.cards, bets):
            hand = BlackjackHand([card], is_split=True)
            hand.add_card(draw())
            if self.is_split_aces_hand(hand) or hand.value() == BLACKJACK:
                hand.mark_complete()
            new_hands.append(PlayerHand(hand, bet))
        is_aces = self.is_split_aces_hand(new_hands[0].hand)

        original.mark_inactive()
        hands[index:index + 1] = new_hands
        logger.info(
            "%s split %s into %s",
            self._names[key],
            original.hand,
            " | ".join(str(h.hand) for h in new_hands),
        )
        return SplitResult(self._names[key], original.hand, tuple(new_hands), is_aces)
