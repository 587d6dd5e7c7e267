"""
Shoe depletion tracking and reshuffle policy.

`ShoeManager` wraps a shoe and answers one question before every draw: is a
reshuffle due? Every reshuffle it actually performs produces a
`ReshuffleNotice`, which the caller hands back to whoever asked for the draw.
The manager keeps no subscribers of its own.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from tablesharp.common.errors import InvariantViolationError, ShoeExhaustedError
from tablesharp.common.shoe import Shoe

logger = logging.getLogger(__name__)

DEFAULT_PENETRATION_THRESHOLD = 0.25
NEARLY_EMPTY_FRACTION = 0.05


@dataclass(frozen=True)
class ReshuffleNotice:
    """A reshuffle that happened, with the depletion level that triggered it."""

    remaining_percentage: float
    threshold: float
    reason: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __str__(self) -> str:
        return (
            f"Shoe reshuffled ({self.reason}) at {self.remaining_percentage:.1%} "
            f"remaining, threshold {self.threshold:.0%}"
        )


@dataclass(frozen=True)
class ShoeStatus:
    """Snapshot of the shoe, computed on request."""

    deck_count: int
    total_cards: int
    remaining_cards: int
    remaining_percentage: float
    penetration_threshold: float
    needs_reshuffle: bool
    auto_reshuffle_enabled: bool

    @property
    def cards_dealt(self) -> int:
        return self.total_cards - self.remaining_cards

    @property
    def is_empty(self) -> bool:
        return self.remaining_cards == 0

    @property
    def is_nearly_empty(self) -> bool:
        return self.remaining_percentage < NEARLY_EMPTY_FRACTION


class ShoeManager:
    def __init__(
        self,
        shoe: Shoe,
        penetration_threshold: float = DEFAULT_PENETRATION_THRESHOLD,
        auto_reshuffle: bool = True,
    ):
        """
        :param shoe: The shoe to manage
        :param penetration_threshold: Remaining fraction below which a reshuffle is due
        :param auto_reshuffle: Reshuffle automatically when due
        """
        if shoe is None:
            raise InvariantViolationError("A shoe is required.")
        self.shoe = shoe
        self.penetration_threshold = penetration_threshold
        self.auto_reshuffle = auto_reshuffle

    @property
    def penetration_threshold(self) -> float:
        return self._penetration_threshold

    @penetration_threshold.setter
    def penetration_threshold(self, value: float) -> None:
        if not 0.0 <= value <= 1.0:
            raise InvariantViolationError(
                f"Penetration threshold must be between 0 and 1, got {value}."
            )
        self._penetration_threshold = value

    def needs_reshuffle(self) -> bool:
        return self.shoe.remaining_percentage() < self._penetration_threshold

    def status(self) -> ShoeStatus:
        return ShoeStatus(
            deck_count=self.shoe.deck_count,
            total_cards=self.shoe.total_cards,
            remaining_cards=self.shoe.remaining_cards,
            remaining_percentage=self.shoe.remaining_percentage(),
            penetration_threshold=self._penetration_threshold,
            needs_reshuffle=self.needs_reshuffle(),
            auto_reshuffle_enabled=self.auto_reshuffle,
        )

    def _reshuffle(self, reason: str) -> ReshuffleNotice:
        notice = ReshuffleNotice(
            remaining_percentage=self.shoe.remaining_percentage(),
            threshold=self._penetration_threshold,
            reason=reason,
        )
        self.shoe.reset()
        logger.info("%s", notice)
        return notice

    def trigger_manual_reshuffle(self, reason: str = "manual") -> ReshuffleNotice:
        """Reshuffle now, regardless of depletion."""
        return self._reshuffle(reason)

    def check_before_deal(self, required: int) -> List[ReshuffleNotice]:
        """
        Make sure `required` cards can be dealt, reshuffling first when due.

        :raises ShoeExhaustedError: if the shoe cannot supply `required` cards
            even after a reshuffle attempt
        """
        notices: List[ReshuffleNotice] = []
        if self.auto_reshuffle and self.needs_reshuffle():
            notices.append(self._reshuffle("penetration threshold reached"))

        if self.shoe.remaining_cards < required:
            if not notices:
                notices.append(self._reshuffle("insufficient cards for deal"))
            if self.shoe.remaining_cards < required:
                raise ShoeExhaustedError(required, self.shoe.remaining_cards)
        return notices

    def check_before_draw(self) -> Optional[ReshuffleNotice]:
        """
        Reshuffle if due before a single draw.

        :raises ShoeExhaustedError: if the shoe is empty and cannot be reshuffled
        """
        notice = None
        if self.auto_reshuffle and self.needs_reshuffle():
            notice = self._reshuffle("penetration threshold reached")
        if self.shoe.is_empty:
            if notice is None:
                notice = self._reshuffle("shoe empty")
            if self.shoe.is_empty:
                raise ShoeExhaustedError(1, 0)
        return notice

    def __repr__(self) -> str:
        return (
            f"ShoeManager({self.shoe!r}, penetration_threshold={self._penetration_threshold}, "
            f"auto_reshuffle={self.auto_reshuffle})"
        )
