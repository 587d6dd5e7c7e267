"""
State transition functions for a blackjack round.

Every function takes a cursor (and, where needed, the hands in play) and
returns a new cursor without modifying its arguments. The hands are passed as
a table: one sequence of hands per player dealt into the round, in seating
order.
"""

import logging
from dataclasses import replace
from typing import Optional, Sequence

from tablesharp.blackjack.hand import BlackjackHand
from tablesharp.common.errors import PhaseError
from tablesharp.state.models import GamePhase, TurnCursor

logger = logging.getLogger(__name__)

HandTable = Sequence[Sequence[BlackjackHand]]


class TurnTransitions:
    """
    Pure functions for phase and turn transitions.
    """

    @staticmethod
    def is_resolved(hand: BlackjackHand) -> bool:
        """A hand is resolved once it is complete, busted or a natural."""
        return hand.is_complete or hand.is_busted or hand.is_blackjack

    @staticmethod
    def enter_phase(cursor: TurnCursor, phase: GamePhase) -> TurnCursor:
        """
        Move to `phase`, which must directly follow the current phase.

        Raises:
            PhaseError: `phase` is not a legal successor of the current phase
        """
        if not cursor.phase.can_transition_to(phase):
            raise PhaseError(f"enter {phase.name}", cursor.phase, phase)
        logger.info("Phase %s -> %s", cursor.phase.name, phase.name)
        player_index = cursor.player_index if phase is GamePhase.PLAYER_TURNS else -1
        return TurnCursor(phase=phase, player_index=player_index, hand_index=0)

    @staticmethod
    def begin_round() -> TurnCursor:
        """A fresh round, already open for betting."""
        return TurnTransitions.enter_phase(TurnCursor(), GamePhase.BETTING)

    @staticmethod
    def _first_open_hand(hands: Sequence[BlackjackHand], start: int) -> Optional[int]:
        for index in range(start, len(hands)):
            if not TurnTransitions.is_resolved(hands[index]):
                return index
        return None

    @staticmethod
    def _after_player_turns(cursor: TurnCursor, table: HandTable) -> TurnCursor:
        live = any(not hand.is_busted for hands in table for hand in hands)
        target = GamePhase.DEALER_TURN if live else GamePhase.RESULTS
        return TurnTransitions.enter_phase(replace(cursor, player_index=-1), target)

    @staticmethod
    def next_player(cursor: TurnCursor, table: HandTable) -> TurnCursor:
        """
        Move to the first open hand of the next player who still has one.

        When no player has an open hand, play moves to the dealer, or straight
        to results if every hand has busted.
        """
        if cursor.phase is not GamePhase.PLAYER_TURNS:
            raise PhaseError("advance to the next player", cursor.phase, GamePhase.PLAYER_TURNS)

        for player_index in range(cursor.player_index + 1, len(table)):
            hand_index = TurnTransitions._first_open_hand(table[player_index], 0)
            if hand_index is not None:
                logger.debug("Turn passes to player %d, hand %d", player_index, hand_index)
                return cursor.at(player_index, hand_index)
        return TurnTransitions._after_player_turns(cursor, table)

    @staticmethod
    def move_to_hand(cursor: TurnCursor, hand_index: int) -> TurnCursor:
        """Stay with the current player but act on another of their hands."""
        if not cursor.is_player_turn:
            raise PhaseError("move to another hand", cursor.phase, GamePhase.PLAYER_TURNS)
        return cursor.at(cursor.player_index, hand_index)

    @staticmethod
    def advance(cursor: TurnCursor, table: HandTable) -> TurnCursor:
        """
        Settle the cursor on the next hand that can act.

        The current hand is kept if it is still open; otherwise the current
        player's later hands are tried before moving on to the next player.
        """
        if cursor.phase is not GamePhase.PLAYER_TURNS:
            raise PhaseError("advance the turn", cursor.phase, GamePhase.PLAYER_TURNS)

        if 0 <= cursor.player_index < len(table):
            hand_index = TurnTransitions._first_open_hand(
                table[cursor.player_index], cursor.hand_index
            )
            if hand_index is not None:
                return cursor.at(cursor.player_index, hand_index)
        return TurnTransitions.next_player(cursor, table)

    @staticmethod
    def start_player_turns(cursor: TurnCursor, table: HandTable) -> TurnCursor:
        """
        Leave the initial deal and find the first player who has to act.

        Players dealt a natural are passed over.
        """
        cursor = TurnTransitions.enter_phase(cursor, GamePhase.PLAYER_TURNS)
        return TurnTransitions.advance(cursor.at(0, 0), table)
