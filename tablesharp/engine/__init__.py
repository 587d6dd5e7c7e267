"""
Round engines for tablesharp.

The engine drives a table's round from the first bet to settlement, calling
out to the shoe, the rules and the betting service it was built with.
"""

from tablesharp.engine.base import TableEngine
from tablesharp.engine.blackjack import BlackjackEngine, HandOutcome, RoundResults

__all__ = ["TableEngine", "BlackjackEngine", "HandOutcome", "RoundResults"]
