from decimal import Decimal
from typing import List

from tablesharp.blackjack.action import Action
from tablesharp.blackjack.constants import BLACKJACK, DEALER_STANDS_ON
from tablesharp.blackjack.hand import BlackjackHand
from tablesharp.blackjack.results import GameResult
from tablesharp.common.errors import InvariantViolationError


class Rules:
    def __init__(
        self,
        blackjack_payout: float = 1.5,
        dealer_hit_soft_17: bool = False,
        allow_split: bool = True,
        allow_double_down: bool = True,
        num_decks: int = 6,
        min_bet: float = 1.0,
        max_bet: float = 1000.0,
    ):
        if Decimal(str(blackjack_payout)) <= 0:
            raise InvariantViolationError("Blackjack payout multiplier must be positive.")
        if num_decks < 1:
            raise InvariantViolationError("Deck count must be at least 1.")
        if min_bet >= max_bet:
            raise InvariantViolationError("Minimum bet must be below the maximum bet.")

        self.allow_double_down = allow_double_down
        self.allow_split = allow_split
        self.blackjack_payout = blackjack_payout
        self.dealer_hit_soft_17 = dealer_hit_soft_17
        self.max_bet = max_bet
        self.min_bet = min_bet
        self.num_decks = num_decks

    def to_dict(self) -> dict:
        """Convert rules to a dictionary for serialization."""
        return {
            "blackjack_payout": self.blackjack_payout,
            "dealer_hit_soft_17": self.dealer_hit_soft_17,
            "allow_split": self.allow_split,
            "allow_double_down": self.allow_double_down,
            "num_decks": self.num_decks,
            "min_bet": self.min_bet,
            "max_bet": self.max_bet,
        }

    def should_dealer_hit(self, hand_value: int, is_soft: bool = False) -> bool:
        """
        Determine if the dealer should hit.

        Args:
            hand_value (int): The dealer's current hand value.
            is_soft (bool): Whether an Ace in the dealer's hand is counted as 11.

        Returns:
            bool: True while the dealer is below 17, or on soft 17 when the table hits it.
        """
        if hand_value < DEALER_STANDS_ON:
            return True
        return hand_value == DEALER_STANDS_ON and is_soft and self.dealer_hit_soft_17

    def determine_result(
        self, player_hand: BlackjackHand, dealer_hand: BlackjackHand
    ) -> GameResult:
        """
        Compare a finished player hand with the dealer's finished hand.

        A busted player loses even when the dealer also busts.
        """
        if player_hand.is_busted:
            return GameResult.LOSE
        if dealer_hand.is_busted:
            return GameResult.BLACKJACK if player_hand.is_blackjack else GameResult.WIN
        if player_hand.is_blackjack and dealer_hand.is_blackjack:
            return GameResult.PUSH
        if player_hand.is_blackjack:
            return GameResult.BLACKJACK
        if dealer_hand.is_blackjack:
            return GameResult.LOSE

        player_value = player_hand.value()
        dealer_value = dealer_hand.value()
        if player_value > dealer_value:
            return GameResult.WIN
        if player_value < dealer_value:
            return GameResult.LOSE
        return GameResult.PUSH

    def can_split(self, hand: BlackjackHand) -> bool:
        """
        Check if the hand can be split.

        Args:
            hand (BlackjackHand): The player's hand.

        Returns:
            bool: True for an unsplit pair of equal rank when splitting is allowed.
        """
        if not self.allow_split or hand.is_split:
            return False
        return hand.is_pair and not hand.is_complete

    def can_double_down(self, hand: BlackjackHand) -> bool:
        """
        Check if the hand can be doubled down based on the rules.

        Any first two cards of an unsplit hand may be doubled.
        """
        if not self.allow_double_down or hand.is_split or hand.card_count != 2:
            return False
        return not hand.is_blackjack and not hand.is_busted and not hand.is_complete

    def valid_actions(self, hand: BlackjackHand) -> List[Action]:
        """List the actions allowed on the hand right now."""
        if hand.is_complete or hand.is_busted or hand.is_blackjack:
            return []
        if hand.value() >= BLACKJACK:
            return [Action.STAND]

        actions = [Action.HIT, Action.STAND]
        if self.can_double_down(hand):
            actions.append(Action.DOUBLE)
        if self.can_split(hand):
            actions.append(Action.SPLIT)
        return actions

    def is_valid_action(self, action: Action, hand: BlackjackHand) -> bool:
        return action in self.valid_actions(hand)
