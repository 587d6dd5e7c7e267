"""
Base engine class for tablesharp.

This module provides the abstract base class for table engines: it holds the
configuration, the event emitter and the package logger, and declares the
round operations every engine implements.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
import logging
import os
import time

from tablesharp.events import EventBus, EventEmitter


class TableEngine(ABC):
    """
    Abstract base class for table engines.

    Args:
        config: Configuration options for the table
        event_bus: Emitter to publish on; the process-wide EventBus when omitted
    """

    def __init__(
        self, config: Optional[Dict[str, Any]] = None, event_bus: Optional[EventEmitter] = None
    ):
        self.config = config or {}
        self.event_bus = event_bus or EventBus.get_instance()
        self.logger = logging.getLogger("tablesharp")
        # Quiet mode for batch runs
        if os.environ.get("TABLESHARP_QUIET", "").lower() in ("1", "true", "yes"):
            self.logger.setLevel(logging.ERROR)

    def emit(self, event_type, data: Dict[str, Any]) -> None:
        """Publish an event stamped with the current time."""
        payload = dict(data)
        payload.setdefault("timestamp", time.time())
        self.event_bus.emit(event_type, payload)

    @abstractmethod
    async def start_round(self, player_names) -> None:
        """
        Start a new round for the given players.
        """
        pass

    @abstractmethod
    async def place_bet(self, player_name: str, amount) -> Any:
        """
        Place a bet for a player.

        Args:
            player_name: Name of the player placing the bet
            amount: Amount to bet
        """
        pass

    @abstractmethod
    async def process_player_action(self, player_name: str, action) -> Any:
        """
        Execute a player action.

        Args:
            player_name: Name of the player
            action: Action to perform
        """
        pass

    @abstractmethod
    async def get_results(self) -> Any:
        """
        Settle the round and return its results.
        """
        pass
