"""
This module defines the `Money` value object used for every wager and payout.

Amounts are held as `Decimal` with exactly two places. Money is immutable:
arithmetic returns new instances, and any addition, subtraction or ordering
between two different currencies raises `CurrencyMismatchError`.

>>> Money("10.50") + Money(2)
Money('12.50', 'USD')
>>> str(Money("7.5", "eur"))
'7.50 EUR'
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

from tablesharp.common.errors import CurrencyMismatchError, InvariantViolationError

DEFAULT_CURRENCY = "USD"

_CENTS = Decimal("0.01")

Number = Union[Decimal, int, str, float]


def _to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    try:
        # str() keeps floats such as 0.1 from dragging in binary noise
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise InvariantViolationError(f"Invalid monetary amount: {value!r}") from exc


def _round(value: Decimal) -> Decimal:
    return value.quantize(_CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Money:
    """
    A monetary amount in a single currency.

    :param amount: the amount; more than two decimal places is rejected
    :param currency: ISO-style currency code, stored upper-cased
    """

    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    def __init__(self, amount: Number = 0, currency: str = DEFAULT_CURRENCY):
        if not isinstance(currency, str) or not currency.strip():
            raise InvariantViolationError("Currency cannot be empty or whitespace.")

        value = _to_decimal(amount)
        if not value.is_finite():
            raise InvariantViolationError(f"Invalid monetary amount: {amount!r}")
        if value != _round(value):
            raise InvariantViolationError(
                "Money amount cannot have more than 2 decimal places."
            )

        object.__setattr__(self, "amount", _round(value))
        object.__setattr__(self, "currency", currency.strip().upper())

    @classmethod
    def zero(cls, currency: str = DEFAULT_CURRENCY) -> "Money":
        return cls(0, currency)

    @classmethod
    def from_usd(cls, amount: Number) -> "Money":
        return cls(amount, "USD")

    @property
    def is_positive(self) -> bool:
        return self.amount > 0

    @property
    def is_zero(self) -> bool:
        return self.amount == 0

    @property
    def is_negative(self) -> bool:
        return self.amount < 0

    def _check_currency(self, other: "Money") -> None:
        if self.currency != other.currency:
            raise CurrencyMismatchError(self.currency, other.currency)

    def __add__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other)
        return Money(self.amount - other.amount, self.currency)

    def __mul__(self, multiplier: Number) -> "Money":
        if isinstance(multiplier, Money):
            return NotImplemented
        return Money(_round(self.amount * _to_decimal(multiplier)), self.currency)

    __rmul__ = __mul__

    def __truediv__(self, divisor: Number) -> "Money":
        if isinstance(divisor, Money):
            return NotImplemented
        value = _to_decimal(divisor)
        if value == 0:
            raise InvariantViolationError("Cannot divide money by zero.")
        return Money(_round(self.amount / value), self.currency)

    def __neg__(self) -> "Money":
        return Money(-self.amount, self.currency)

    def __abs__(self) -> "Money":
        return Money(abs(self.amount), self.currency)

    def abs(self) -> "Money":
        return abs(self)

    def __lt__(self, other: "Money") -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other)
        return self.amount < other.amount

    def __le__(self, other: "Money") -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other)
        return self.amount <= other.amount

    def __gt__(self, other: "Money") -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other)
        return self.amount > other.amount

    def __ge__(self, other: "Money") -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other)
        return self.amount >= other.amount

    def __repr__(self) -> str:
        return f"Money('{self.amount}', '{self.currency}')"

    def __str__(self) -> str:
        return f"{self.amount:.2f} {self.currency}"
