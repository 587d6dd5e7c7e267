"""
Outcome and result value objects.

`GameResult` is the outcome of one hand against the dealer. `BettingResult`
and `ActionResult` are what the ledger and the engine return instead of
raising when a request is refused for an ordinary game reason; each refusal
carries a `RejectionReason` plus the player and amount involved.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

from tablesharp.common.money import Money

if TYPE_CHECKING:
    from tablesharp.blackjack.bet import Bet
    from tablesharp.blackjack.hand import BlackjackHand
    from tablesharp.blackjack.shoe_manager import ReshuffleNotice


class GameResult(Enum):
    """Result of a single hand compared with the dealer's."""

    WIN = "win"
    LOSE = "lose"
    PUSH = "push"
    BLACKJACK = "blackjack"


class RejectionReason(Enum):
    """Why a bet or player action was refused."""

    UNKNOWN_PLAYER = "unknown_player"
    ALREADY_BET = "already_bet"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    BELOW_MINIMUM = "below_minimum"
    ABOVE_MAXIMUM = "above_maximum"
    CURRENCY = "currency"
    INVALID_AMOUNT = "invalid_amount"
    BETTING_CLOSED = "betting_closed"
    NOT_YOUR_TURN = "not_your_turn"
    HAND_RESOLVED = "hand_resolved"
    ILLEGAL_ACTION = "illegal_action"
    NO_ACTIVE_BET = "no_active_bet"
    SERVICE_REJECTED = "service_rejected"


@dataclass(frozen=True)
class BettingResult:
    """Outcome of a bet placement or validation."""

    success: bool
    message: str = ""
    bet: Optional["Bet"] = None
    player_name: Optional[str] = None
    amount: Optional[Money] = None
    reason: Optional[RejectionReason] = None
    bets: Tuple["Bet", ...] = ()

    @property
    def is_failure(self) -> bool:
        return not self.success

    @classmethod
    def ok(
        cls, message: str, bet: Optional["Bet"] = None, bets: Sequence["Bet"] = ()
    ) -> "BettingResult":
        bets = tuple(bets) or ((bet,) if bet else ())
        return cls(
            True,
            message,
            bet=bet,
            bets=bets,
            player_name=bet.player_name if bet else None,
            amount=bet.amount if bet else None,
        )

    @classmethod
    def failure(
        cls,
        reason: RejectionReason,
        message: str,
        player_name: Optional[str] = None,
        amount: Optional[Money] = None,
    ) -> "BettingResult":
        return cls(
            False, message, player_name=player_name, amount=amount, reason=reason
        )

    def __str__(self) -> str:
        return f"{'Success' if self.success else 'Failure'}: {self.message}"


@dataclass
class ActionResult:
    """
    Outcome of a player action.

    Attributes:
        success: whether the action was carried out
        player_name: the acting player
        action: the requested action
        hand: the hand acted on (the first resulting hand for a split)
        continue_turn: True when the same hand is still to act
        is_busted: the hand went over 21
        is_double_down: the action was a double down
        is_split: the action was a split
        split_hands: the hands a split produced
        notices: reshuffles that happened while serving the action
        reason / message: why a failed action was refused
    """

    success: bool
    player_name: Optional[str] = None
    action: Optional[object] = None
    hand: Optional["BlackjackHand"] = None
    continue_turn: bool = False
    is_busted: bool = False
    is_double_down: bool = False
    is_split: bool = False
    split_hands: List["BlackjackHand"] = field(default_factory=list)
    notices: List["ReshuffleNotice"] = field(default_factory=list)
    reason: Optional[RejectionReason] = None
    message: str = ""

    @property
    def is_failure(self) -> bool:
        return not self.success

    @classmethod
    def rejected(
        cls, player_name: str, action, reason: RejectionReason, message: str
    ) -> "ActionResult":
        return cls(
            False, player_name=player_name, action=action, reason=reason, message=message
        )
