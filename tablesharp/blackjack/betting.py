"""
The per-round betting ledger.

`BettingState` collects one wager per player against a snapshot of each
player's bankroll taken when the round starts. Players are asked in seating
order; a cursor points at the next player who still owes a bet and only moves
forward. Once the cursor runs past the last seat the betting phase is complete
and the ledger starts accepting in-play changes to existing wagers: a double
down or a split clears the original bet (refunding it to the snapshot) and
then places the replacement bets, so the snapshot is never left half-updated.

Player names are matched case-insensitively throughout.
"""

import logging
from datetime import datetime, timezone
from enum import Enum, auto
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from tablesharp.blackjack.bet import Bet, BetType
from tablesharp.blackjack.hand import BlackjackHand
from tablesharp.blackjack.results import BettingResult, RejectionReason
from tablesharp.common.errors import InvariantViolationError, PhaseError
from tablesharp.common.money import Money

logger = logging.getLogger(__name__)


class BettingPhase(Enum):
    WAITING_FOR_BETS = auto()
    COMPLETE = auto()


def _key(name: str) -> str:
    return name.strip().casefold()


class BettingState:
    """
    Bets and bankroll snapshot for one round.

    Args:
        player_names: seating order; names must be non-blank and unique ignoring case
        bankrolls: bankroll for every listed player, keyed by player name
    """

    def __init__(self, player_names: Iterable[str], bankrolls: Mapping[str, Money]):
        names = [n for n in player_names] if player_names is not None else []
        if not names:
            raise InvariantViolationError("At least one player name must be provided.")
        if any(not isinstance(n, str) or not n.strip() for n in names):
            raise InvariantViolationError("Player names cannot be empty or whitespace.")

        supplied = {_key(name): amount for name, amount in bankrolls.items()}

        self._order: List[str] = []
        self._names: Dict[str, str] = {}
        self._bankrolls: Dict[str, Money] = {}
        for name in names:
            key = _key(name)
            if key in self._names:
                raise InvariantViolationError(f"Duplicate player name: {name.strip()}")
            if key not in supplied:
                raise InvariantViolationError(
                    f"Bankroll not provided for player '{name.strip()}'."
                )
            self._order.append(key)
            self._names[key] = name.strip()
            self._bankrolls[key] = supplied[key]

        self.currency = next(iter(self._bankrolls.values())).currency
        self._bets: Dict[str, Bet] = {}
        self._split_bets: Dict[str, Tuple[Bet, ...]] = {}
        self.phase = BettingPhase.WAITING_FOR_BETS
        self._cursor = 0
        self.round_started_at = datetime.now(timezone.utc)

    # Queries

    @property
    def player_order(self) -> List[str]:
        return [self._names[key] for key in self._order]

    @property
    def is_complete(self) -> bool:
        return self.phase is BettingPhase.COMPLETE

    @property
    def cursor(self) -> int:
        """Index of the seat currently owed a bet; equals the seat count when done."""
        return self._cursor

    @property
    def current_bettor(self) -> Optional[str]:
        if self.phase is not BettingPhase.WAITING_FOR_BETS or self._cursor >= len(self._order):
            return None
        return self._names[self._order[self._cursor]]

    @property
    def player_bets(self) -> Dict[str, Bet]:
        return {self._names[key]: bet for key, bet in self._bets.items()}

    @property
    def player_bankrolls(self) -> Dict[str, Money]:
        return {self._names[key]: amount for key, amount in self._bankrolls.items()}

    @property
    def total_wagered(self) -> Money:
        total = Money.zero(self.currency)
        for bet in self._active_bets():
            total = total + bet.amount
        return total

    def _active_bets(self) -> List[Bet]:
        bets = [bet for bet in self._bets.values() if bet.is_active]
        for split_bets in self._split_bets.values():
            bets.extend(bet for bet in split_bets if bet.is_active)
        return bets

    def knows(self, player_name: str) -> bool:
        return isinstance(player_name, str) and _key(player_name) in self._names

    def display_name(self, player_name: str) -> str:
        return self._names.get(_key(player_name), player_name.strip())

    def get_player_bet(self, player_name: str) -> Optional[Bet]:
        if not isinstance(player_name, str) or not player_name.strip():
            return None
        return self._bets.get(_key(player_name))

    def get_split_bets(self, player_name: str) -> Tuple[Bet, ...]:
        return self._split_bets.get(_key(player_name), ())

    def get_player_bankroll(self, player_name: str) -> Optional[Money]:
        if not isinstance(player_name, str) or not player_name.strip():
            return None
        return self._bankrolls.get(_key(player_name))

    def _has_bet(self, key: str) -> bool:
        return key in self._bets or key in self._split_bets

    def has_player_bet(self, player_name: str) -> bool:
        """True once the player has wagered this round, including after a split."""
        return self.knows(player_name) and self._has_bet(_key(player_name))

    def players_waiting_to_bet(self) -> List[str]:
        return [self._names[key] for key in self._order if not self._has_bet(key)]

    def players_with_bets(self) -> List[str]:
        return [self._names[key] for key in self._order if self._has_bet(key)]

    def can_player_bet(self, player_name: str, amount: Money) -> bool:
        if not self.knows(player_name) or not amount.is_positive:
            return False
        if self.phase is not BettingPhase.WAITING_FOR_BETS:
            return False
        key = _key(player_name)
        return key not in self._bets and self._bankrolls[key] >= amount

    # Betting phase

    def validate_bet(self, player_name: str, amount: Money) -> Optional[BettingResult]:
        """
        Return the rejection `place_bet` would produce, or None if it would succeed.

        Raises:
            InvariantViolationError: blank player name or non-positive amount
        """
        if not isinstance(player_name, str) or not player_name.strip():
            raise InvariantViolationError("Player name cannot be empty or whitespace.")
        if not amount.is_positive:
            raise InvariantViolationError(f"Bet amount must be positive, got {amount}.")

        name = player_name.strip()
        if self.phase is not BettingPhase.WAITING_FOR_BETS:
            return BettingResult.failure(
                RejectionReason.BETTING_CLOSED,
                f"Cannot place bets during {self.phase.name} phase.",
                name,
                amount,
            )
        if not self.knows(name):
            return BettingResult.failure(
                RejectionReason.UNKNOWN_PLAYER,
                f"Player '{name}' is not seated at this table.",
                name,
                amount,
            )

        key = _key(name)
        if key in self._bets:
            return BettingResult.failure(
                RejectionReason.ALREADY_BET,
                f"Player {self._names[key]} already has a bet this round.",
                self._names[key],
                amount,
            )

        bankroll = self._bankrolls[key]
        if bankroll < amount:
            return BettingResult.failure(
                RejectionReason.INSUFFICIENT_FUNDS,
                f"Insufficient funds. Available: {bankroll}, Required: {amount}.",
                self._names[key],
                amount,
            )
        return None

    def place_bet(
        self, player_name: str, amount: Money, bet_type: BetType = BetType.STANDARD
    ) -> BettingResult:
        """Record a player's wager for the round and debit the bankroll snapshot."""
        rejection = self.validate_bet(player_name, amount)
        if rejection:
            logger.warning("Bet rejected: %s", rejection.message)
            return rejection

        key = _key(player_name)
        bet = self._record_bet(key, amount, bet_type)
        self._bets[key] = bet
        logger.debug("Bet placed: %s", bet)

        self._advance_cursor()
        return BettingResult.ok(f"Bet of {amount} placed for {bet.player_name}.", bet)

    def skip_current_player(self) -> bool:
        """Pass over the player currently owed a bet (for example on a timeout)."""
        if self.phase is not BettingPhase.WAITING_FOR_BETS:
            raise PhaseError("skip a bettor", self.phase, BettingPhase.WAITING_FOR_BETS)
        if self.current_bettor is None:
            return False

        logger.info("Skipping bettor %s", self.current_bettor)
        self._cursor += 1
        self._advance_cursor()
        return True

    def force_complete(self) -> None:
        """Close betting regardless of who is still to bet."""
        if self.phase is BettingPhase.COMPLETE:
            raise PhaseError(
                "force betting complete", self.phase, BettingPhase.WAITING_FOR_BETS
            )
        self._cursor = len(self._order)
        self._complete()

    def reset(self, updated_bankrolls: Mapping[str, Money]) -> None:
        """Start a fresh betting round for the same seats with new bankrolls."""
        supplied = {_key(name): amount for name, amount in updated_bankrolls.items()}
        self._bets.clear()
        self._split_bets.clear()
        for key in self._order:
            if key in supplied:
                self._bankrolls[key] = supplied[key]
        self.phase = BettingPhase.WAITING_FOR_BETS
        self._cursor = 0
        self.round_started_at = datetime.now(timezone.utc)

    def _advance_cursor(self) -> None:
        while self._cursor < len(self._order) and self._order[self._cursor] in self._bets:
            self._cursor += 1
        if self._cursor >= len(self._order):
            self._complete()

    def _complete(self) -> None:
        self.phase = BettingPhase.COMPLETE
        logger.info(
            "Betting complete: %d of %d players wagered %s",
            len(self._bets),
            len(self._order),
            self.total_wagered,
        )

    # In-play adjustments

    def _require_in_play(self, operation: str) -> None:
        if self.phase is not BettingPhase.COMPLETE:
            raise PhaseError(operation, self.phase, BettingPhase.COMPLETE)

    def clear_bet(self, player_name: str) -> Bet:
        """
        Clear a player's primary bet and refund its stake to the snapshot.

        Raises:
            InvariantViolationError: the player has no bet
            BetSettledError: the bet is no longer active
        """
        key = _key(player_name)
        bet = self._bets.get(key)
        if bet is None:
            raise InvariantViolationError(f"Player '{player_name}' has no bet to clear.")
        bet.clear()
        del self._bets[key]
        self._bankrolls[key] = self._bankrolls[key] + bet.amount
        logger.debug("Bet cleared and refunded: %s", bet)
        return bet

    def _record_bet(self, key: str, amount: Money, bet_type: BetType) -> Bet:
        bet = Bet(amount, self._names[key], bet_type)
        self._bankrolls[key] = self._bankrolls[key] - amount
        return bet

    def _check_in_play_bet(
        self, player_name: str, hand: BlackjackHand, action: str
    ) -> Optional[BettingResult]:
        name = player_name.strip()
        if not self.knows(name):
            return BettingResult.failure(
                RejectionReason.UNKNOWN_PLAYER,
                f"Player '{name}' is not seated at this table.",
                name,
            )
        bet = self._bets.get(_key(name))
        if bet is None or not bet.is_active or bet.bet_type is not BetType.STANDARD:
            return BettingResult.failure(
                RejectionReason.NO_ACTIVE_BET,
                f"Can only {action} an active standard bet.",
                self.display_name(name),
            )
        if hand.is_busted or hand.is_blackjack:
            return BettingResult.failure(
                RejectionReason.HAND_RESOLVED,
                f"Cannot {action} a busted or blackjack hand.",
                bet.player_name,
                bet.amount,
            )
        bankroll = self._bankrolls[_key(name)]
        if bankroll < bet.amount:
            return BettingResult.failure(
                RejectionReason.INSUFFICIENT_FUNDS,
                f"Insufficient funds to {action}. Available: {bankroll}, "
                f"Required: {bet.amount}.",
                bet.player_name,
                bet.amount,
            )
        return None

    def validate_double_down(
        self, player_name: str, hand: BlackjackHand
    ) -> Optional[BettingResult]:
        """Return the rejection `double_down` would produce, or None."""
        self._require_in_play("double down")
        rejection = self._check_in_play_bet(player_name, hand, "double down")
        if rejection is None and hand.card_count != 2:
            bet = self._bets[_key(player_name)]
            rejection = BettingResult.failure(
                RejectionReason.ILLEGAL_ACTION,
                "Can only double down on the initial two cards.",
                bet.player_name,
                bet.amount,
            )
        return rejection

    def double_down(self, player_name: str, hand: BlackjackHand) -> BettingResult:
        """Replace a standard bet with a double-down bet of twice the stake."""
        rejection = self.validate_double_down(player_name, hand)
        if rejection:
            return rejection

        key = _key(player_name)
        original = self.clear_bet(player_name)
        doubled = self._record_bet(key, original.amount * 2, BetType.DOUBLE_DOWN)
        self._bets[key] = doubled
        logger.debug("Double down: %s replaces %s", doubled, original)
        return BettingResult.ok(
            f"{doubled.player_name} doubled down to {doubled.amount}.", doubled
        )

    def validate_split(
        self,
        player_name: str,
        hand: BlackjackHand,
        can_split: Optional[Callable[[BlackjackHand], bool]] = None,
    ) -> Optional[BettingResult]:
        """
        Return the rejection `split` would produce, or None.

        Args:
            can_split: pair check to apply; defaults to an equal-rank pair
        """
        self._require_in_play("split")
        rejection = self._check_in_play_bet(player_name, hand, "split")
        if rejection is None:
            eligible = can_split(hand) if can_split else hand.is_pair
            if not eligible:
                bet = self._bets[_key(player_name)]
                rejection = BettingResult.failure(
                    RejectionReason.ILLEGAL_ACTION,
                    "Can only split a pair of equal rank.",
                    bet.player_name,
                    bet.amount,
                )
        return rejection

    def split(
        self,
        player_name: str,
        hand: BlackjackHand,
        can_split: Optional[Callable[[BlackjackHand], bool]] = None,
    ) -> BettingResult:
        """Replace a standard bet with one split bet per resulting hand."""
        rejection = self.validate_split(player_name, hand, can_split)
        if rejection:
            return rejection

        key = _key(player_name)
        original = self.clear_bet(player_name)
        split_bets = tuple(
            self._record_bet(key, original.amount, BetType.SPLIT) for _ in range(2)
        )
        self._split_bets[key] = split_bets
        logger.debug("Split: %s replaced by %s", original, split_bets)
        return BettingResult.ok(
            f"{original.player_name} split into {len(split_bets)} hands.",
            split_bets[0],
            split_bets,
        )

    def __str__(self) -> str:
        return (
            f"BettingState: {self.phase.name}, {len(self._bets)}/{len(self._order)} "
            f"players bet, Current: {self.current_bettor or 'None'}, "
            f"Total: {self.total_wagered}"
        )
