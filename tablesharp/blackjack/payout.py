"""
Payout calculation.

`PayoutCalculator` turns the outcome of every settled hand into a
`PayoutResult`, and `PayoutSummary` aggregates a round's results. The
calculator only prices bets; crediting bankrolls and settling the bets is
left to the betting service so the round outcome survives a failing service.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from tablesharp.blackjack.bet import Bet, BetType
from tablesharp.blackjack.hand import BlackjackHand
from tablesharp.blackjack.results import GameResult
from tablesharp.common.errors import InvariantViolationError
from tablesharp.common.money import DEFAULT_CURRENCY, Money


@dataclass(frozen=True)
class PayoutResult:
    """
    The priced outcome of one bet.

    Attributes:
        bet: the bet being paid
        game_result: outcome of the hand the bet backs
        payout_amount: winnings on top of the stake
        total_return: stake plus winnings handed back to the player
        hand_index: position of the hand among the player's hands
    """

    bet: Bet
    game_result: GameResult
    payout_amount: Money
    total_return: Money
    hand_index: int = 0

    @property
    def player_name(self) -> str:
        return self.bet.player_name

    @property
    def net_gain(self) -> Money:
        """Return minus stake; negative for a lost hand."""
        return self.total_return - self.bet.amount

    def __str__(self) -> str:
        return (
            f"{self.player_name}: {self.game_result.name} - bet {self.bet.amount}, "
            f"payout {self.payout_amount}, return {self.total_return}"
        )


@dataclass(frozen=True)
class PayoutSummary:
    """Aggregate of every payout in a round."""

    results: Tuple[PayoutResult, ...]
    currency: str = DEFAULT_CURRENCY

    @classmethod
    def from_results(
        cls, results: Iterable[PayoutResult], currency: Optional[str] = None
    ) -> "PayoutSummary":
        results = tuple(results)
        if currency is None:
            currency = results[0].bet.amount.currency if results else DEFAULT_CURRENCY
        return cls(results, currency)

    def _total(self, attribute: str) -> Money:
        total = Money.zero(self.currency)
        for result in self.results:
            total = total + getattr(result, attribute)
        return total

    @property
    def total_payout(self) -> Money:
        return self._total("payout_amount")

    @property
    def total_return(self) -> Money:
        return self._total("total_return")

    @property
    def total_wagered(self) -> Money:
        total = Money.zero(self.currency)
        for result in self.results:
            total = total + result.bet.amount
        return total

    def _with(self, game_result: GameResult) -> List[PayoutResult]:
        return [r for r in self.results if r.game_result is game_result]

    @property
    def winning_payouts(self) -> List[PayoutResult]:
        return self._with(GameResult.WIN)

    @property
    def losing_payouts(self) -> List[PayoutResult]:
        return self._with(GameResult.LOSE)

    @property
    def push_payouts(self) -> List[PayoutResult]:
        return self._with(GameResult.PUSH)

    @property
    def blackjack_payouts(self) -> List[PayoutResult]:
        return self._with(GameResult.BLACKJACK)

    @property
    def win_count(self) -> int:
        return len(self.winning_payouts)

    @property
    def loss_count(self) -> int:
        return len(self.losing_payouts)

    @property
    def push_count(self) -> int:
        return len(self.push_payouts)

    @property
    def blackjack_count(self) -> int:
        return len(self.blackjack_payouts)

    def payouts_for_player(self, player_name: str) -> List[PayoutResult]:
        key = player_name.strip().casefold()
        return [r for r in self.results if r.player_name.casefold() == key]

    def __len__(self) -> int:
        return len(self.results)

    def __str__(self) -> str:
        return (
            f"Payouts: {len(self.results)} hands "
            f"({self.win_count}W/{self.loss_count}L/{self.push_count}P/"
            f"{self.blackjack_count}BJ), total payout {self.total_payout}, "
            f"total return {self.total_return}"
        )


class PayoutCalculator:
    """
    Prices bets against hand outcomes.

    Args:
        blackjack_multiplier: payout multiple for a natural (1.5 pays 3:2)
    """

    def __init__(self, blackjack_multiplier: Union[Decimal, float] = Decimal("1.5")):
        multiplier = Decimal(str(blackjack_multiplier))
        if multiplier <= 0:
            raise InvariantViolationError("Blackjack multiplier must be positive.")
        self.blackjack_multiplier = multiplier

    def calculate(
        self,
        bet: Bet,
        game_result: GameResult,
        hand: Optional[BlackjackHand] = None,
        hand_index: int = 0,
    ) -> PayoutResult:
        # a split hand never earns the natural bonus
        is_split = bet.bet_type is BetType.SPLIT or (hand is not None and hand.is_split)
        if game_result is GameResult.BLACKJACK and is_split:
            game_result = GameResult.WIN

        return PayoutResult(
            bet=bet,
            game_result=game_result,
            payout_amount=bet.payout(game_result, self.blackjack_multiplier),
            total_return=bet.total_return(game_result, self.blackjack_multiplier),
            hand_index=hand_index,
        )

    def calculate_all(
        self, entries: Iterable[Tuple[Bet, GameResult, Optional[BlackjackHand], int]]
    ) -> List[PayoutResult]:
        """Price every (bet, result, hand, hand_index) entry."""
        return [
            self.calculate(bet, result, hand, index) for bet, result, hand, index in entries
        ]

    def summarize(
        self, results: Sequence[PayoutResult], currency: Optional[str] = None
    ) -> PayoutSummary:
        return PayoutSummary.from_results(results, currency)
