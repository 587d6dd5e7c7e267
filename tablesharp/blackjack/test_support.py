"""
Test support for building deterministic rounds.

`StackedShoe` deals a scripted card order, and `RoundBuilder` assembles an
engine and drives it through its public operations to the phase a test wants
to start from. Cards can be written in the short notation used by
`parse_cards`: 'Th,8s,9d,7c'.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from tablesharp.blackjack.action import Action
from tablesharp.blackjack.bankroll import TableBankroll
from tablesharp.blackjack.rules import Rules
from tablesharp.common.card import Card, Rank, Suit
from tablesharp.common.errors import InvariantViolationError
from tablesharp.common.money import Money
from tablesharp.common.shoe import Shoe
from tablesharp.engine.blackjack import BlackjackEngine
from tablesharp.events import EventEmitter
from tablesharp.state import GamePhase

_RANKS = {
    "A": Rank.ACE,
    "2": Rank.TWO,
    "3": Rank.THREE,
    "4": Rank.FOUR,
    "5": Rank.FIVE,
    "6": Rank.SIX,
    "7": Rank.SEVEN,
    "8": Rank.EIGHT,
    "9": Rank.NINE,
    "T": Rank.TEN,
    "10": Rank.TEN,
    "J": Rank.JACK,
    "Q": Rank.QUEEN,
    "K": Rank.KING,
}

_SUITS = {
    "s": Suit.SPADES,
    "h": Suit.HEARTS,
    "d": Suit.DIAMONDS,
    "c": Suit.CLUBS,
}


def parse_card(text: str) -> Card:
    """Parse one card such as 'Th', '10h' or 'As'."""
    text = text.strip()
    rank, suit = text[:-1].upper(), text[-1:].lower()
    if rank not in _RANKS or suit not in _SUITS:
        raise InvariantViolationError(f"Cannot parse card '{text}'.")
    return Card(_SUITS[suit], _RANKS[rank])


def parse_cards(cards: Union[str, Sequence[Union[str, Card]]]) -> List[Card]:
    """Parse a comma separated string, or a list mixing strings and cards."""
    if isinstance(cards, str):
        cards = [c for c in cards.split(",") if c.strip()]
    return [c if isinstance(c, Card) else parse_card(c) for c in cards]


class StackedShoe(Shoe):
    """
    A shoe that deals cards in a predetermined order.

    Args:
        cards: the cards to deal, first card first
        total_cards: size of the full shoe the script is the remainder of;
            defaults to the script length, so the shoe starts full
        refill: cards loaded by a reshuffle; the original script when omitted
    """

    def __init__(
        self,
        cards: Union[str, Sequence[Union[str, Card]]],
        total_cards: Optional[int] = None,
        refill: Optional[Union[str, Sequence[Union[str, Card]]]] = None,
    ):
        script = parse_cards(cards)
        self._refill = parse_cards(refill) if refill is not None else list(script)
        self._total = total_cards or len(script)
        if self._total < len(script):
            raise InvariantViolationError("total_cards cannot be smaller than the script.")
        self._primed = False
        self.reshuffle_count = 0
        super().__init__(deck_count=1, deck_factory=lambda: list(script))

    @property
    def total_cards(self) -> int:
        return self._total

    def reset(self) -> None:
        if not self._primed:
            self.cards = list(self._deck_factory())
            self._primed = True
            return
        self.reshuffle_count += 1
        self.cards = list(self._refill)
        self._total = max(len(self._refill), 1)

    def shuffle(self) -> None:
        """Keep the scripted order."""
        pass

    def __repr__(self) -> str:
        return f"StackedShoe(remaining={self.remaining_cards}, total={self._total})"


_PHASE_ORDER = list(GamePhase)


class RoundBuilder:
    """
    Builds a `BlackjackEngine` positioned at a given phase.

    Example:
        engine = await (
            RoundBuilder()
            .with_player("Alice", bet="10.00")
            .with_cards("Th,9d,8s,7c,3h")
            .build(GamePhase.PLAYER_TURNS)
        )
    """

    def __init__(self):
        self._players: List[Tuple[str, Optional[Money], Optional[Money]]] = []
        self._shoe: Optional[Shoe] = None
        # scripted rounds only reshuffle when a test asks for a threshold
        self._config: Dict[str, Any] = {"penetration_threshold": 0.0}
        self._rules: Optional[Rules] = None
        self._bankroll = None
        self._event_bus: Optional[EventEmitter] = None

    def with_player(
        self,
        name: str,
        bet: Union[Money, str, int, None] = "10.00",
        bankroll: Union[Money, str, int, None] = "1000.00",
    ) -> "RoundBuilder":
        """Seat a player; `bet=None` leaves them without a wager."""
        self._players.append((name, self._money(bet), self._money(bankroll)))
        return self

    def _money(self, value) -> Optional[Money]:
        if value is None or isinstance(value, Money):
            return value
        return Money(value, self._config.get("currency", "USD"))

    def with_cards(
        self,
        cards: Union[str, Sequence[Union[str, Card]]],
        total_cards: Optional[int] = None,
        refill: Optional[Union[str, Sequence[Union[str, Card]]]] = None,
    ) -> "RoundBuilder":
        self._shoe = StackedShoe(cards, total_cards=total_cards, refill=refill)
        return self

    def with_shoe(self, shoe: Shoe) -> "RoundBuilder":
        self._shoe = shoe
        return self

    def with_config(self, **config) -> "RoundBuilder":
        self._config.update(config)
        return self

    def with_rules(self, rules: Rules) -> "RoundBuilder":
        self._rules = rules
        return self

    def with_bankroll_service(self, bankroll) -> "RoundBuilder":
        self._bankroll = bankroll
        return self

    def with_event_bus(self, event_bus: EventEmitter) -> "RoundBuilder":
        self._event_bus = event_bus
        return self

    async def _make_bankroll(self):
        if self._bankroll is not None:
            service = self._bankroll
        else:
            currency = self._config.get("currency", "USD")
            if self._rules is not None:
                multiplier = self._rules.blackjack_payout
                minimum_bet = Money(str(self._rules.min_bet), currency)
                maximum_bet = Money(str(self._rules.max_bet), currency)
            else:
                multiplier = self._config.get("blackjack_multiplier", "1.5")
                minimum_bet = Money(self._config.get("minimum_bet", "1.00"), currency)
                maximum_bet = Money(self._config.get("maximum_bet", "1000.00"), currency)
            service = TableBankroll(
                blackjack_multiplier=multiplier,
                minimum_bet=minimum_bet,
                maximum_bet=maximum_bet,
                currency=currency,
            )
        for name, _, bankroll in self._players:
            if bankroll is not None and hasattr(service, "set_initial_bankroll"):
                await service.set_initial_bankroll(name, bankroll)
        return service

    async def build(self, phase: GamePhase = GamePhase.PLAYER_TURNS):
        """
        Create the engine and play it forward until it reaches `phase`.

        Players stand on every hand to get past PLAYER_TURNS. If the round
        skips a phase on its own (every player dealt a natural, say) the
        engine is returned in the first phase at or after `phase`.
        """
        engine = BlackjackEngine(
            config=dict(self._config),
            shoe=self._shoe,
            rules=self._rules,
            bankroll=await self._make_bankroll(),
            event_bus=self._event_bus,
        )

        def reached() -> bool:
            return _PHASE_ORDER.index(engine.phase) >= _PHASE_ORDER.index(phase)

        if phase is GamePhase.SETUP:
            return engine

        await engine.start_round([name for name, _, _ in self._players])
        if reached():
            return engine

        for name, bet, _ in self._players:
            if bet is not None:
                result = await engine.place_bet(name, bet)
                if result.is_failure:
                    raise InvariantViolationError(f"Builder bet refused: {result.message}")
        if engine.phase is GamePhase.BETTING:
            await engine.force_betting_complete()
        if reached():
            return engine

        await engine.deal_initial_cards()
        if reached():
            return engine

        while engine.phase is GamePhase.PLAYER_TURNS:
            await engine.process_player_action(engine.current_player, Action.STAND)
        if reached():
            return engine

        if engine.phase is GamePhase.DEALER_TURN:
            await engine.play_dealer_turn()
        if reached():
            return engine

        await engine.get_results()
        return engine
