"""
Exceptions raised by the tablesharp engine.

Only invariant violations, phase violations, exhausted shoes and failing
collaborators are raised. Expected rule rejections (an illegal action, an
unaffordable bet) are returned as result values instead, see
`tablesharp.blackjack.results`.
"""

from typing import Optional


class GameError(Exception):
    """Base class for every exception raised by the engine."""

    pass


class InvariantViolationError(GameError, ValueError):
    """Raised when an argument breaks a value invariant (blank name, bad amount)."""

    pass


class CurrencyMismatchError(InvariantViolationError):
    """Raised when two amounts in different currencies are combined or ordered."""

    def __init__(self, left: str, right: str):
        super().__init__(
            f"Cannot perform operation on different currencies: {left} and {right}."
        )
        self.left = left
        self.right = right


class PhaseError(GameError):
    """Raised when an operation is invoked outside the phase it is valid in."""

    def __init__(self, operation: str, current, expected):
        if isinstance(expected, (list, tuple, set, frozenset)):
            expected_text = " or ".join(_phase_name(p) for p in expected)
        else:
            expected_text = _phase_name(expected)
        super().__init__(
            f"Cannot {operation}: game is in {_phase_name(current)} phase, "
            f"but {expected_text} is required."
        )
        self.operation = operation
        self.current = current
        self.expected = expected


class BetSettledError(GameError):
    """Raised when a bet that is no longer active is settled, cleared or priced."""

    pass


class ShoeExhaustedError(GameError):
    """Raised when the shoe cannot supply the cards a deal needs."""

    def __init__(self, required: int, remaining: int, message: Optional[str] = None):
        super().__init__(
            message
            or f"Shoe cannot supply {required} card(s); {remaining} remaining."
        )
        self.required = required
        self.remaining = remaining


class PayoutServiceError(GameError):
    """Raised by a bankroll collaborator that cannot process payouts."""

    pass


def _phase_name(phase) -> str:
    return getattr(phase, "name", str(phase))
