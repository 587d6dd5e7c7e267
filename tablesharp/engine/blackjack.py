"""
Blackjack engine implementation.

This module provides the BlackjackEngine class, which plays one table's
rounds of blackjack from the first bet to settlement. A round moves through
the phases of `GamePhase` in order, and `TurnCursor` records whose turn it is:

    start_round -> place_bet ... -> deal_initial_cards
        -> process_player_action ... -> play_dealer_turn -> get_results

Operations called in the wrong phase raise `PhaseError`. Ordinary refusals
(an unaffordable bet, an action out of turn) come back as `BettingResult` or
`ActionResult` values. Every reshuffle performed while serving a call is
returned from that call and also published as a SHUFFLE event.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Union
import logging
import uuid

from tablesharp.blackjack.action import Action
from tablesharp.blackjack.bankroll import TableBankroll
from tablesharp.blackjack.bet import Bet
from tablesharp.blackjack.betting import BettingState
from tablesharp.blackjack.hand import BlackjackHand
from tablesharp.blackjack.payout import PayoutCalculator, PayoutSummary
from tablesharp.blackjack.results import (
    ActionResult,
    BettingResult,
    GameResult,
    RejectionReason,
)
from tablesharp.blackjack.rules import Rules
from tablesharp.blackjack.shoe_manager import ReshuffleNotice, ShoeManager, ShoeStatus
from tablesharp.blackjack.split import PlayerHand, SplitHandManager
from tablesharp.common.card import Card
from tablesharp.common.errors import InvariantViolationError, PhaseError
from tablesharp.common.money import DEFAULT_CURRENCY, Money
from tablesharp.common.shoe import Shoe
from tablesharp.engine.base import TableEngine
from tablesharp.events import EngineEventType, EventEmitter
from tablesharp.state import GamePhase, TurnCursor, TurnTransitions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HandOutcome:
    """How one of a player's hands finished against the dealer."""

    player_name: str
    hand_index: int
    hand: BlackjackHand
    bet: Bet
    result: GameResult


@dataclass
class RoundResults:
    """
    Everything a finished round produced.

    Attributes:
        outcomes: per player, in seating order, one outcome per hand played
        dealer_hand: the dealer's final hand
        payout_summary: the processed payouts, or None when the service failed
        payout_error: why payouts are unavailable
    """

    outcomes: Dict[str, List[HandOutcome]]
    dealer_hand: BlackjackHand
    payout_summary: Optional[PayoutSummary] = None
    payout_error: Optional[str] = None
    round_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def payout_available(self) -> bool:
        return self.payout_summary is not None

    def results_for(self, player_name: str) -> List[GameResult]:
        key = player_name.strip().casefold()
        for name, outcomes in self.outcomes.items():
            if name.casefold() == key:
                return [outcome.result for outcome in outcomes]
        return []


class BlackjackEngine(TableEngine):
    """
    Engine implementation for Blackjack.

    Args:
        config: Table options, see the keys read below
        shoe: Shoe to deal from; a shuffled `deck_count`-deck shoe when omitted
        rules: Table rules; built from `config` when omitted
        bankroll: Betting and payout service; an in-memory `TableBankroll` when omitted
        event_bus: Emitter to publish on
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        shoe: Optional[Shoe] = None,
        rules: Optional[Rules] = None,
        bankroll: Optional[TableBankroll] = None,
        event_bus: Optional[EventEmitter] = None,
    ):
        super().__init__(config, event_bus)
        currency = self.config.get("currency", DEFAULT_CURRENCY)
        deck_count = self.config.get("deck_count", 6)

        self.rules = rules or Rules(
            blackjack_payout=Decimal(str(self.config.get("blackjack_multiplier", "1.5"))),
            dealer_hit_soft_17=self.config.get("dealer_hit_soft_17", False),
            allow_split=self.config.get("allow_split", True),
            allow_double_down=self.config.get("allow_double_down", True),
            num_decks=deck_count,
            min_bet=Money(self.config.get("minimum_bet", "1.00"), currency).amount,
            max_bet=Money(self.config.get("maximum_bet", "1000.00"), currency).amount,
        )
        # the rules fix the payout multiple and the default bet limits
        multiplier = Decimal(str(self.rules.blackjack_payout))
        self.shoe_manager = ShoeManager(
            shoe or Shoe(deck_count),
            penetration_threshold=self.config.get("penetration_threshold", 0.25),
            auto_reshuffle=self.config.get("auto_reshuffle", True),
        )
        self.bankroll = bankroll or TableBankroll(
            blackjack_multiplier=multiplier,
            minimum_bet=Money(str(self.rules.min_bet), currency),
            maximum_bet=Money(str(self.rules.max_bet), currency),
            initial_bankroll=Money(self.config.get("initial_bankroll", "1000.00"), currency),
            currency=currency,
        )
        self.payout_calculator = PayoutCalculator(multiplier)

        self._cursor = TurnCursor()
        self._players: List[str] = []
        self._dealt_in: List[str] = []
        self._betting: Optional[BettingState] = None
        self._splits = SplitHandManager()
        self._dealer_hand = BlackjackHand()
        self._results: Optional[RoundResults] = None
        self._round_id: Optional[str] = None

    # Queries

    @property
    def phase(self) -> GamePhase:
        return self._cursor.phase

    @property
    def cursor(self) -> TurnCursor:
        return self._cursor

    @property
    def is_round_active(self) -> bool:
        return self._cursor.phase.is_round_active

    @property
    def players(self) -> List[str]:
        return list(self._players)

    @property
    def dealt_in_players(self) -> List[str]:
        """Players holding a bet when the cards were dealt, in turn order."""
        return list(self._dealt_in)

    @property
    def betting_state(self) -> Optional[BettingState]:
        return self._betting

    @property
    def dealer_hand(self) -> BlackjackHand:
        return self._dealer_hand

    @property
    def current_player(self) -> Optional[str]:
        if not self._cursor.is_player_turn:
            return None
        return self._dealt_in[self._cursor.player_index]

    @property
    def current_hand(self) -> Optional[BlackjackHand]:
        player_hand = self._current_player_hand()
        return player_hand.hand if player_hand else None

    def _current_player_hand(self) -> Optional[PlayerHand]:
        name = self.current_player
        if name is None:
            return None
        return self._splits.hands_for(name)[self._cursor.hand_index]

    def hands_for(self, player_name: str) -> List[BlackjackHand]:
        return [player_hand.hand for player_hand in self._splits.hands_for(player_name)]

    def player_hands_for(self, player_name: str) -> List[PlayerHand]:
        return self._splits.hands_for(player_name)

    def is_player_turn(self, player_name: str) -> bool:
        current = self.current_player
        return current is not None and current.casefold() == player_name.strip().casefold()

    def shoe_status(self) -> ShoeStatus:
        return self.shoe_manager.status()

    @property
    def results(self) -> Optional[RoundResults]:
        return self._results

    # Internal helpers

    def _require_phase(self, operation: str, *phases: GamePhase) -> None:
        if self._cursor.phase not in phases:
            expected = phases[0] if len(phases) == 1 else list(phases)
            raise PhaseError(operation, self._cursor.phase, expected)

    def _set_cursor(self, cursor: TurnCursor) -> None:
        previous = self._cursor
        self._cursor = cursor
        if previous.phase is not cursor.phase:
            self.emit(
                EngineEventType.PHASE_CHANGED,
                {
                    "round_id": self._round_id,
                    "from": previous.phase.name,
                    "to": cursor.phase.name,
                },
            )
        elif previous != cursor:
            logger.debug("Turn moves to %s", cursor)

    def _enter(self, phase: GamePhase) -> None:
        self._set_cursor(TurnTransitions.enter_phase(self._cursor, phase))

    def _hand_table(self) -> List[List[BlackjackHand]]:
        return [self.hands_for(name) for name in self._dealt_in]

    def _to_money(self, amount: Union[Money, Decimal, int, str, float]) -> Money:
        if isinstance(amount, Money):
            return amount
        return Money(amount, self.bankroll.currency)

    def _publish_notice(self, notice: ReshuffleNotice) -> None:
        self.emit(
            EngineEventType.SHUFFLE,
            {
                "round_id": self._round_id,
                "reason": notice.reason,
                "remaining_percentage": notice.remaining_percentage,
                "threshold": notice.threshold,
                "notice": notice,
            },
        )

    def _draw(self, notices: List[ReshuffleNotice]) -> Card:
        """Draw one card, reshuffling first when due."""
        notice = self.shoe_manager.check_before_draw()
        if notice is not None:
            notices.append(notice)
            self._publish_notice(notice)
        return self.shoe_manager.shoe.draw()

    def _give_card(self, recipient: str, hand: BlackjackHand, card: Card) -> None:
        hand.add_card(card)
        logger.debug("Dealt %s to %s (%d)", card, recipient, hand.value())
        self.emit(
            EngineEventType.CARD_DEALT,
            {
                "round_id": self._round_id,
                "recipient": recipient,
                "card": str(card),
                "hand_value": hand.value(),
            },
        )

    # Round setup and betting

    async def start_round(self, player_names: Iterable[str]) -> None:
        """
        Seat the players for a new round and open betting.

        Raises:
            PhaseError: a round is already in progress
            InvariantViolationError: no names, a blank name, or names equal ignoring case
        """
        if self.is_round_active:
            raise PhaseError(
                "start a round", self._cursor.phase, [GamePhase.SETUP, GamePhase.GAME_OVER]
            )

        names = list(player_names or [])
        if not names:
            raise InvariantViolationError("At least one player is required.")
        if any(not isinstance(n, str) or not n.strip() for n in names):
            raise InvariantViolationError("Player names cannot be empty or whitespace.")
        names = [n.strip() for n in names]
        if len({n.casefold() for n in names}) != len(names):
            raise InvariantViolationError("Player names must be unique ignoring case.")

        bankrolls = {name: await self.bankroll.get_bankroll(name) for name in names}
        self._betting = BettingState(names, bankrolls)

        self._players = names
        self._dealt_in = []
        self._splits.reset()
        for name in names:
            self._splits.register(name, BlackjackHand())
        self._dealer_hand = BlackjackHand()
        self._results = None
        self._round_id = str(uuid.uuid4())
        self._cursor = TurnCursor()
        self._set_cursor(TurnTransitions.begin_round())

        logger.info("Round %s started with %s", self._round_id, ", ".join(names))
        self.emit(
            EngineEventType.ROUND_STARTED,
            {"round_id": self._round_id, "players": list(names)},
        )

    def _after_bet_change(self) -> None:
        if self._betting.is_complete:
            self._enter(GamePhase.INITIAL_DEAL)

    async def place_bet(
        self, player_name: str, amount: Union[Money, Decimal, int, str, float]
    ) -> BettingResult:
        """
        Take a player's wager for the round.

        The ledger and the betting service both have to accept the bet before
        the service debits it and the ledger records it. Once every seated
        player has bet, the round moves to the initial deal.
        """
        self._require_phase("place a bet", GamePhase.BETTING)
        amount = self._to_money(amount)

        rejection = self._betting.validate_bet(player_name, amount)
        if rejection is None:
            validation = await self.bankroll.validate_bet(player_name, amount)
            if validation.is_failure:
                rejection = validation
        if rejection is None:
            debit = await self.bankroll.place_bet(player_name, amount)
            if debit.is_failure:
                rejection = debit
        if rejection is not None:
            logger.warning("Bet refused for %s: %s", player_name, rejection.message)
            return rejection

        result = self._betting.place_bet(player_name, amount)
        self._splits.current_hand(player_name).bet = result.bet
        self.emit(
            EngineEventType.PLAYER_BET,
            {
                "round_id": self._round_id,
                "player_name": result.player_name,
                "amount": str(result.amount),
            },
        )
        self._after_bet_change()
        return result

    async def skip_current_bettor(self) -> Optional[str]:
        """Pass over the player currently owed a bet; returns who was skipped."""
        self._require_phase("skip a bettor", GamePhase.BETTING)
        skipped = self._betting.current_bettor
        self._betting.skip_current_player()
        self._after_bet_change()
        return skipped

    async def force_betting_complete(self) -> None:
        """Close betting now; players without a bet sit the round out."""
        self._require_phase("force betting complete", GamePhase.BETTING)
        self._betting.force_complete()
        self._after_bet_change()

    # Dealing and play

    async def deal_initial_cards(self) -> List[ReshuffleNotice]:
        """
        Deal two cards to every player holding a bet and to the dealer.

        Cards go round the table one at a time, dealer last, twice. Players
        dealt a natural are passed over when the turns begin.

        Raises:
            PhaseError: not in INITIAL_DEAL, or nobody placed a bet
            ShoeExhaustedError: the shoe cannot supply the deal even after a reshuffle
        """
        self._require_phase("deal initial cards", GamePhase.INITIAL_DEAL)
        dealt_in = self._betting.players_with_bets()
        if not dealt_in:
            raise PhaseError("deal initial cards without any bets", self.phase, GamePhase.BETTING)

        notices = self.shoe_manager.check_before_deal(2 * (len(dealt_in) + 1))
        for notice in notices:
            self._publish_notice(notice)

        self._dealt_in = dealt_in
        shoe = self.shoe_manager.shoe
        for _ in range(2):
            for name in dealt_in:
                self._give_card(name, self._splits.current_hand(name).hand, shoe.draw())
            self._give_card("dealer", self._dealer_hand, shoe.draw())

        self._set_cursor(TurnTransitions.start_player_turns(self._cursor, self._hand_table()))
        logger.info(
            "Initial deal complete; dealer shows %s, %s",
            self._dealer_hand.cards[0],
            f"{self.current_player} to act" if self.current_player else "no player to act",
        )
        return notices

    def _advance_turn(self) -> None:
        name = self.current_player
        if self._splits.has_more_hands(name):
            index = self._splits.advance_to_next_hand(name)
            self._set_cursor(TurnTransitions.move_to_hand(self._cursor, index))
        else:
            self._set_cursor(TurnTransitions.next_player(self._cursor, self._hand_table()))

    async def process_player_action(
        self, player_name: str, action: Union[Action, str]
    ) -> ActionResult:
        """
        Apply a player's decision to their current hand.

        A hit that busts or reaches 21 ends the hand; stand, double down and
        split always end the acting hand. The turn then moves to the player's
        next split hand, the next player, or the dealer.

        Raises:
            PhaseError: not in PLAYER_TURNS
        """
        self._require_phase("process a player action", GamePhase.PLAYER_TURNS)

        if isinstance(action, str):
            try:
                action = Action(action.strip().lower())
            except ValueError:
                return self._reject(
                    player_name, action, RejectionReason.ILLEGAL_ACTION, f"Unknown action '{action}'."
                )

        if self._betting is None or not self._betting.knows(player_name):
            return self._reject(
                player_name, action, RejectionReason.UNKNOWN_PLAYER,
                f"Player '{player_name}' is not seated at this table.",
            )
        if not self.is_player_turn(player_name):
            return self._reject(
                player_name, action, RejectionReason.NOT_YOUR_TURN,
                f"It is not {player_name}'s turn; {self.current_player} is to act.",
            )

        name = self.current_player
        player_hand = self._current_player_hand()
        hand = player_hand.hand
        if TurnTransitions.is_resolved(hand):
            return self._reject(
                name, action, RejectionReason.HAND_RESOLVED, f"Hand {hand} is already finished."
            )
        if not self.rules.is_valid_action(action, hand):
            return self._reject(
                name, action, RejectionReason.ILLEGAL_ACTION,
                f"{action.name} is not allowed on {hand} ({hand.value()}).",
            )

        notices: List[ReshuffleNotice] = []
        result = ActionResult(True, player_name=name, action=action, hand=hand, notices=notices)

        if action is Action.HIT:
            self._give_card(name, hand, self._draw(notices))
            if hand.value() >= 21:
                hand.mark_complete()
        elif action is Action.STAND:
            hand.mark_complete()
        elif action is Action.DOUBLE:
            rejection = await self._double_down(name, player_hand, notices)
            if rejection:
                return rejection
            result.is_double_down = True
        elif action is Action.SPLIT:
            rejection = await self._split(name, player_hand, notices, result)
            if rejection:
                return rejection

        result.is_busted = result.hand.is_busted
        self.emit(
            EngineEventType.PLAYER_ACTION,
            {
                "round_id": self._round_id,
                "player_name": name,
                "action": action.value,
                "hand": str(result.hand),
                "hand_value": result.hand.value(),
                "is_busted": result.is_busted,
            },
        )

        if TurnTransitions.is_resolved(self._current_player_hand().hand):
            self._advance_turn()
        result.continue_turn = self.is_player_turn(name)
        return result

    def _reject(
        self, player_name: str, action, reason: RejectionReason, message: str
    ) -> ActionResult:
        logger.warning("Action %s refused for %s: %s", action, player_name, message)
        return ActionResult.rejected(player_name, action, reason, message)

    def _reject_from(self, action: Action, refusal: BettingResult, player_name: str) -> ActionResult:
        reason = refusal.reason or RejectionReason.SERVICE_REJECTED
        return self._reject(player_name, action, reason, refusal.message)

    async def _double_down(
        self, name: str, player_hand: PlayerHand, notices: List[ReshuffleNotice]
    ) -> Optional[ActionResult]:
        hand = player_hand.hand
        rejection = self._betting.validate_double_down(name, hand)
        if rejection:
            return self._reject_from(Action.DOUBLE, rejection, name)

        debit = await self.bankroll.place_bet(name, player_hand.bet.amount)
        if debit.is_failure:
            return self._reject_from(Action.DOUBLE, debit, name)

        player_hand.bet = self._betting.double_down(name, hand).bet
        self._give_card(name, hand, self._draw(notices))
        hand.mark_complete()
        return None

    async def _split(
        self,
        name: str,
        player_hand: PlayerHand,
        notices: List[ReshuffleNotice],
        result: ActionResult,
    ) -> Optional[ActionResult]:
        hand = player_hand.hand
        rejection = self._betting.validate_split(name, hand, self.rules.can_split)
        if rejection:
            return self._reject_from(Action.SPLIT, rejection, name)

        debit = await self.bankroll.place_bet(name, player_hand.bet.amount)
        if debit.is_failure:
            return self._reject_from(Action.SPLIT, debit, name)

        bets = self._betting.split(name, hand, self.rules.can_split).bets

        def draw_for_split() -> Card:
            card = self._draw(notices)
            self.emit(
                EngineEventType.CARD_DEALT,
                {"round_id": self._round_id, "recipient": name, "card": str(card)},
            )
            return card

        split_result = self._splits.split(name, bets, draw_for_split)
        result.is_split = True
        result.split_hands = split_result.split_hands
        result.hand = split_result.split_hands[0]
        self.emit(
            EngineEventType.HAND_SPLIT,
            {
                "round_id": self._round_id,
                "player_name": name,
                "hands": [str(h) for h in split_result.split_hands],
                "split_aces": split_result.is_split_aces,
            },
        )
        return None

    async def play_dealer_turn(self) -> List[ReshuffleNotice]:
        """
        Draw for the dealer until the rules say stand or the dealer busts.

        Raises:
            PhaseError: not in DEALER_TURN
        """
        self._require_phase("play the dealer's turn", GamePhase.DEALER_TURN)
        notices: List[ReshuffleNotice] = []
        hand = self._dealer_hand

        while not hand.is_busted and self.rules.should_dealer_hit(hand.value(), hand.is_soft):
            self._give_card("dealer", hand, self._draw(notices))
            self.emit(
                EngineEventType.DEALER_ACTION,
                {"round_id": self._round_id, "action": "hit", "hand_value": hand.value()},
            )

        logger.info("Dealer finishes on %d%s", hand.value(), " (bust)" if hand.is_busted else "")
        self.emit(
            EngineEventType.DEALER_ACTION,
            {
                "round_id": self._round_id,
                "action": "bust" if hand.is_busted else "stand",
                "hand_value": hand.value(),
            },
        )
        hand.mark_complete()
        self._enter(GamePhase.RESULTS)
        return notices

    # Settlement

    async def get_results(self) -> RoundResults:
        """
        Decide every hand against the dealer and settle the bets.

        A failing betting service leaves the outcomes intact; only the payout
        summary is missing and `payout_error` says why. Calling again after the
        round is over returns the same results.

        Raises:
            PhaseError: not in RESULTS or GAME_OVER
        """
        self._require_phase("get results", GamePhase.RESULTS, GamePhase.GAME_OVER)
        if self._results is not None:
            return self._results

        hands = [
            (name, index, player_hand)
            for name in self._dealt_in
            for index, player_hand in enumerate(self._splits.hands_for(name))
        ]
        priced = self.payout_calculator.calculate_all(
            (
                player_hand.bet,
                self.rules.determine_result(player_hand.hand, self._dealer_hand),
                player_hand.hand,
                index,
            )
            for _, index, player_hand in hands
        )

        outcomes: Dict[str, List[HandOutcome]] = {name: [] for name in self._dealt_in}
        for (name, index, player_hand), payout in zip(hands, priced):
            outcome = HandOutcome(name, index, player_hand.hand, player_hand.bet, payout.game_result)
            outcomes[name].append(outcome)
            self.emit(
                EngineEventType.HAND_RESULT,
                {
                    "round_id": self._round_id,
                    "player_name": name,
                    "hand_index": index,
                    "hand": str(player_hand.hand),
                    "result": outcome.result.value,
                },
            )

        results = RoundResults(outcomes, self._dealer_hand, round_id=self._round_id)
        try:
            results.payout_summary = await self.bankroll.process_payouts(priced)
        except Exception as exc:
            results.payout_error = str(exc) or exc.__class__.__name__
            logger.warning(
                "Payouts unavailable for round %s: %s",
                self._round_id,
                results.payout_error,
                exc_info=True,
            )
            self.emit(
                EngineEventType.PAYOUT_FAILED,
                {"round_id": self._round_id, "error": results.payout_error},
            )
        else:
            for payout in results.payout_summary.results:
                self.emit(
                    EngineEventType.MONEY_PAYOUT,
                    {
                        "round_id": self._round_id,
                        "player_name": payout.player_name,
                        "result": payout.game_result.value,
                        "payout": str(payout.payout_amount),
                        "total_return": str(payout.total_return),
                    },
                )

        self._results = results
        self._enter(GamePhase.GAME_OVER)
        self.emit(
            EngineEventType.ROUND_ENDED,
            {
                "round_id": self._round_id,
                "payout_available": results.payout_available,
            },
        )
        return results

    # Administration

    def trigger_manual_reshuffle(self, reason: str = "manual") -> ReshuffleNotice:
        notice = self.shoe_manager.trigger_manual_reshuffle(reason)
        self._publish_notice(notice)
        return notice

    def __repr__(self) -> str:
        return f"BlackjackEngine(phase={self.phase.name}, players={self._players!r})"
