"""
In-memory betting and payout service.

`TableBankroll` owns the persistent bankrolls a table draws its per-round
snapshots from. Every method is a coroutine so it can stand in for a service
backed by a database or a remote wallet; the engine awaits it and nothing
else.
"""

import logging
from decimal import Decimal
from typing import Dict, Optional, Sequence, Union

from tablesharp.blackjack.payout import PayoutCalculator, PayoutResult, PayoutSummary
from tablesharp.blackjack.results import BettingResult, RejectionReason
from tablesharp.common.errors import InvariantViolationError, PayoutServiceError
from tablesharp.common.money import DEFAULT_CURRENCY, Money

logger = logging.getLogger(__name__)


class TableBankroll:
    """
    Bankrolls, limits and payout processing for one table.

    Args:
        blackjack_multiplier: payout multiple for a natural
        minimum_bet: smallest accepted wager, defaults to 1.00
        maximum_bet: largest accepted wager, defaults to 1000.00
        initial_bankroll: bankroll a player has before anything is recorded for them
        currency: table currency used for defaults
    """

    def __init__(
        self,
        blackjack_multiplier: Union[Decimal, float] = Decimal("1.5"),
        minimum_bet: Optional[Money] = None,
        maximum_bet: Optional[Money] = None,
        initial_bankroll: Optional[Money] = None,
        currency: str = DEFAULT_CURRENCY,
    ):
        self._calculator = PayoutCalculator(blackjack_multiplier)
        self._minimum_bet = minimum_bet or Money("1.00", currency)
        self._maximum_bet = maximum_bet or Money("1000.00", currency)
        self._initial_bankroll = initial_bankroll or Money.zero(currency)

        if not self._minimum_bet.is_positive or not self._maximum_bet.is_positive:
            raise InvariantViolationError("Bet limits must be positive.")
        if self._minimum_bet >= self._maximum_bet:
            raise InvariantViolationError("Minimum bet must be less than maximum bet.")
        if self._initial_bankroll.is_negative:
            raise InvariantViolationError("Initial bankroll cannot be negative.")

        self._bankrolls: Dict[str, Money] = {}

    @property
    def minimum_bet(self) -> Money:
        return self._minimum_bet

    @property
    def maximum_bet(self) -> Money:
        return self._maximum_bet

    @property
    def currency(self) -> str:
        return self._minimum_bet.currency

    @property
    def blackjack_multiplier(self) -> Decimal:
        return self._calculator.blackjack_multiplier

    @staticmethod
    def _key(player_name: str) -> str:
        if not isinstance(player_name, str) or not player_name.strip():
            raise InvariantViolationError("Player name cannot be empty or whitespace.")
        return player_name.strip().casefold()

    async def get_bankroll(self, player_name: str) -> Money:
        return self._bankrolls.get(self._key(player_name), self._initial_bankroll)

    async def set_initial_bankroll(self, player_name: str, amount: Money) -> None:
        if amount.is_negative:
            raise InvariantViolationError("Initial bankroll cannot be negative.")
        self._bankrolls[self._key(player_name)] = amount

    async def update_bankroll(self, player_name: str, amount: Money) -> Money:
        """Add `amount` (negative to subtract); a bankroll never drops below zero."""
        current = await self.get_bankroll(player_name)
        updated = current + amount
        if updated.is_negative:
            updated = Money.zero(updated.currency)
        self._bankrolls[self._key(player_name)] = updated
        return updated

    async def has_sufficient_funds(self, player_name: str, amount: Money) -> bool:
        return await self.get_bankroll(player_name) >= amount

    async def validate_bet(self, player_name: str, amount: Money) -> BettingResult:
        name = player_name.strip() if isinstance(player_name, str) else player_name
        if not name:
            return BettingResult.failure(
                RejectionReason.UNKNOWN_PLAYER, "Player name cannot be empty."
            )
        if not amount.is_positive:
            return BettingResult.failure(
                RejectionReason.INVALID_AMOUNT, "Bet amount must be positive.", name, amount
            )
        if amount.currency != self.currency:
            return BettingResult.failure(
                RejectionReason.CURRENCY,
                f"Bet currency {amount.currency} does not match table currency "
                f"{self.currency}.",
                name,
                amount,
            )
        if amount < self._minimum_bet:
            return BettingResult.failure(
                RejectionReason.BELOW_MINIMUM,
                f"Bet amount {amount} is below minimum bet {self._minimum_bet}.",
                name,
                amount,
            )
        if amount > self._maximum_bet:
            return BettingResult.failure(
                RejectionReason.ABOVE_MAXIMUM,
                f"Bet amount {amount} exceeds maximum bet {self._maximum_bet}.",
                name,
                amount,
            )
        if not await self.has_sufficient_funds(name, amount):
            bankroll = await self.get_bankroll(name)
            return BettingResult.failure(
                RejectionReason.INSUFFICIENT_FUNDS,
                f"Insufficient funds. Available: {bankroll}, Required: {amount}.",
                name,
                amount,
            )
        return BettingResult(True, "Bet validation successful.", player_name=name, amount=amount)

    async def place_bet(self, player_name: str, amount: Money) -> BettingResult:
        """Validate and debit a stake from the player's bankroll."""
        validation = await self.validate_bet(player_name, amount)
        if validation.is_failure:
            return validation

        name = player_name.strip()
        await self.update_bankroll(name, -amount)
        logger.debug("Debited %s from %s", amount, name)
        return BettingResult(
            True, f"Bet of {amount} placed for {name}.", player_name=name, amount=amount
        )

    async def process_payouts(self, results: Sequence[PayoutResult]) -> PayoutSummary:
        """
        Credit every result's total return and settle its bet.

        Raises:
            PayoutServiceError: a bet in `results` was already settled or cleared
        """
        stale = [r for r in results if not r.bet.is_active]
        if stale:
            raise PayoutServiceError(
                f"Cannot process payouts for inactive bets: {', '.join(map(str, stale))}"
            )

        for result in results:
            if result.total_return.is_positive:
                await self.update_bankroll(result.player_name, result.total_return)
            result.bet.settle()
            logger.debug("Settled %s", result)

        summary = self._calculator.summarize(results, self.currency)
        logger.info("%s", summary)
        return summary

    def __repr__(self) -> str:
        return (
            f"TableBankroll(minimum_bet={self._minimum_bet!r}, "
            f"maximum_bet={self._maximum_bet!r}, players={len(self._bankrolls)})"
        )
