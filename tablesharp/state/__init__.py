"""
Round phase and turn-cursor state for the tablesharp engine.

The models are immutable; `TurnTransitions` holds the pure functions that
produce the next cursor from the current one and the hands in play.
"""

from tablesharp.state.models import GamePhase, TurnCursor
from tablesharp.state.transitions import TurnTransitions

__all__ = [
    "GamePhase",
    "TurnCursor",
    "TurnTransitions",
]
