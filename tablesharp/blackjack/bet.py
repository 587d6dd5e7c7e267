"""
Wagers.

A `Bet` is created active and ends in exactly one terminal state: settled
(paid out at the end of the round) or cleared (refunded and replaced during a
double down or split). Neither transition can happen twice.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Union

from tablesharp.blackjack.results import GameResult
from tablesharp.common.errors import BetSettledError, InvariantViolationError
from tablesharp.common.money import Money


class BetType(Enum):
    STANDARD = "standard"
    DOUBLE_DOWN = "double_down"
    SPLIT = "split"


class Bet:
    """A player's stake on one hand."""

    def __init__(
        self,
        amount: Money,
        player_name: str,
        bet_type: BetType = BetType.STANDARD,
    ):
        if not isinstance(player_name, str) or not player_name.strip():
            raise InvariantViolationError("Player name cannot be empty or whitespace.")
        if not isinstance(amount, Money) or not amount.is_positive:
            raise InvariantViolationError(f"Bet amount must be positive, got {amount}.")

        self.amount = amount
        self.player_name = player_name.strip()
        self.bet_type = bet_type
        self.placed_at = datetime.now(timezone.utc)
        self._active = True
        self._cleared = False

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def is_settled(self) -> bool:
        return not self._active and not self._cleared

    @property
    def is_cleared(self) -> bool:
        return self._cleared

    def _require_active(self, operation: str) -> None:
        if not self._active:
            state = "cleared" if self._cleared else "settled"
            raise BetSettledError(f"Cannot {operation} a {state} bet ({self}).")

    def settle(self) -> None:
        """Close the bet after its payout has been processed."""
        self._require_active("settle")
        self._active = False

    def clear(self) -> None:
        """Close the bet so its stake can be refunded and re-placed."""
        self._require_active("clear")
        self._active = False
        self._cleared = True

    def payout(
        self, result: GameResult, blackjack_multiplier: Union[Decimal, float] = Decimal("1.5")
    ) -> Money:
        """Winnings on top of the returned stake."""
        self._require_active("price")
        if Decimal(str(blackjack_multiplier)) <= 0:
            raise InvariantViolationError("Blackjack multiplier must be positive.")

        if result is GameResult.WIN:
            return self.amount
        if result is GameResult.BLACKJACK:
            return self.amount * blackjack_multiplier
        return Money.zero(self.amount.currency)

    def total_return(
        self, result: GameResult, blackjack_multiplier: Union[Decimal, float] = Decimal("1.5")
    ) -> Money:
        """Everything handed back to the player: stake plus winnings."""
        if result in (GameResult.WIN, GameResult.BLACKJACK):
            return self.amount + self.payout(result, blackjack_multiplier)
        self._require_active("price")
        if result is GameResult.PUSH:
            return self.amount
        return Money.zero(self.amount.currency)

    def __repr__(self) -> str:
        return (
            f"Bet({self.amount!r}, {self.player_name!r}, {self.bet_type}, "
            f"active={self._active})"
        )

    def __str__(self) -> str:
        status = "Active" if self._active else ("Cleared" if self._cleared else "Settled")
        type_text = "" if self.bet_type is BetType.STANDARD else f" ({self.bet_type.name})"
        return f"{self.player_name}: {self.amount}{type_text} - {status}"
