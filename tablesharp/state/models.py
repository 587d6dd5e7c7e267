"""
Immutable state models for a blackjack round.

`GamePhase` is the strictly ordered phase of a round and `TurnCursor` is the
single value that says whose turn it is. A cursor is never edited in place:
every transition returns a new one, so a split or a double down cannot leave
the phase and the player/hand indexes out of step with each other.
"""

from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Dict, FrozenSet


class GamePhase(Enum):
    """
    Phases of a blackjack round, in order.
    """

    SETUP = auto()
    BETTING = auto()
    INITIAL_DEAL = auto()
    PLAYER_TURNS = auto()
    DEALER_TURN = auto()
    RESULTS = auto()
    GAME_OVER = auto()

    @property
    def is_round_active(self) -> bool:
        return self not in (GamePhase.SETUP, GamePhase.GAME_OVER)

    def can_transition_to(self, target: "GamePhase") -> bool:
        return target in _ALLOWED_TRANSITIONS[self]


# DEALER_TURN is only skipped from PLAYER_TURNS, when every hand has busted
_ALLOWED_TRANSITIONS: Dict[GamePhase, FrozenSet[GamePhase]] = {
    GamePhase.SETUP: frozenset({GamePhase.BETTING}),
    GamePhase.BETTING: frozenset({GamePhase.INITIAL_DEAL}),
    GamePhase.INITIAL_DEAL: frozenset({GamePhase.PLAYER_TURNS}),
    GamePhase.PLAYER_TURNS: frozenset({GamePhase.DEALER_TURN, GamePhase.RESULTS}),
    GamePhase.DEALER_TURN: frozenset({GamePhase.RESULTS}),
    GamePhase.RESULTS: frozenset({GamePhase.GAME_OVER}),
    GamePhase.GAME_OVER: frozenset(),
}


@dataclass(frozen=True)
class TurnCursor:
    """
    Position of play within a round.

    Attributes:
        phase: The current phase
        player_index: Index into the players dealt into the round; -1 outside player turns
        hand_index: Index into that player's hands
    """

    phase: GamePhase = GamePhase.SETUP
    player_index: int = -1
    hand_index: int = 0

    @property
    def is_player_turn(self) -> bool:
        return self.phase is GamePhase.PLAYER_TURNS and self.player_index >= 0

    def at(self, player_index: int, hand_index: int = 0) -> "TurnCursor":
        return replace(self, player_index=player_index, hand_index=hand_index)

    def __str__(self) -> str:
        if not self.is_player_turn:
            return self.phase.name
        return f"{self.phase.name} (player {self.player_index}, hand {self.hand_index})"
