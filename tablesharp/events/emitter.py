"""
Event emitter for the tablesharp engine.

Subscribers register per event type (or for every event) with a priority and
are called synchronously, highest priority first, each time the engine emits.
A subscriber that raises is logged and skipped; the engine never sees the
exception and never waits on anything a subscriber does.
"""

from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional, Union
import threading
import logging
from enum import Enum

logger = logging.getLogger("tablesharp.events")


class EventPriority(Enum):
    """Priority levels for event handlers."""

    LOW = 0
    NORMAL = 1
    HIGH = 2
    CRITICAL = 3


def _insert_by_priority(handlers: List[Dict[str, Any]], handler: Dict[str, Any]) -> None:
    for i, existing in enumerate(handlers):
        if existing["priority"] < handler["priority"]:
            handlers.insert(i, handler)
            return
    handlers.append(handler)


def _remove_callback(handlers: List[Dict[str, Any]], callback: Callable) -> None:
    for i, existing in enumerate(handlers):
        if existing["callback"] == callback:
            handlers.pop(i)
            return


class EventEmitter:
    """
    Priority-ordered publish/subscribe hub.

    - Subscribe to one event type with `on`, or a single occurrence with `once`
    - Subscribe to every event with `on_any`
    - Handlers registered at the same priority run in registration order
    """

    def __init__(self):
        self._listeners: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        self._global_listeners: List[Dict[str, Any]] = []
        self._listener_lock = threading.RLock()

    @staticmethod
    def _name(event_type: Union[str, Enum]) -> str:
        return event_type.name if isinstance(event_type, Enum) else event_type

    def on(
        self,
        event_type: Union[str, Enum],
        callback: Callable,
        priority: EventPriority = EventPriority.NORMAL,
    ) -> Callable:
        """
        Subscribe to an event type.

        Args:
            event_type: The event type to subscribe to (string or enum)
            callback: Function to call when event occurs, signature: fn(event_data)
            priority: Priority level for this handler

        Returns:
            Unsubscribe function that can be called to remove this subscription
        """
        event_type = self._name(event_type)
        with self._listener_lock:
            _insert_by_priority(
                self._listeners[event_type],
                {"callback": callback, "priority": priority.value},
            )

        def unsubscribe():
            with self._listener_lock:
                _remove_callback(self._listeners[event_type], callback)

        return unsubscribe

    def once(
        self,
        event_type: Union[str, Enum],
        callback: Callable,
        priority: EventPriority = EventPriority.NORMAL,
    ) -> Callable:
        """Subscribe to an event type for a single occurrence."""
        unsubscribe_ref = []

        def one_time_handler(event_data):
            try:
                callback(event_data)
            finally:
                unsubscribe_ref[0]()

        unsubscribe_ref.append(self.on(event_type, one_time_handler, priority))
        return unsubscribe_ref[0]

    def on_any(
        self, callback: Callable, priority: EventPriority = EventPriority.NORMAL
    ) -> Callable:
        """
        Subscribe to all events.

        Args:
            callback: Function to call for any event, signature: fn((event_type, event_data))
            priority: Priority level for this handler
        """
        with self._listener_lock:
            _insert_by_priority(
                self._global_listeners, {"callback": callback, "priority": priority.value}
            )

        def unsubscribe():
            with self._listener_lock:
                _remove_callback(self._global_listeners, callback)

        return unsubscribe

    def listener_count(self, event_type: Optional[Union[str, Enum]] = None) -> int:
        with self._listener_lock:
            if event_type is None:
                return sum(len(h) for h in self._listeners.values()) + len(
                    self._global_listeners
                )
            return len(self._listeners.get(self._name(event_type), []))

    def emit(self, event_type: Union[str, Enum], data: Dict[str, Any]) -> None:
        """
        Emit an event to all registered listeners.

        Args:
            event_type: The type of event to emit
            data: The data to include with the event
        """
        event_type = self._name(event_type)

        with self._listener_lock:
            handlers_to_call = [
                (handler["callback"], data)
                for handler in self._listeners.get(event_type, [])
            ]
            handlers_to_call.extend(
                (handler["callback"], (event_type, data))
                for handler in self._global_listeners
            )

        # Call handlers outside of the lock so they may subscribe or unsubscribe
        for callback, args in handlers_to_call:
            try:
                callback(args)
            except Exception as e:
                logger.error(f"Error in event handler for {event_type}: {e}", exc_info=True)

    def remove_all_listeners(self, event_type: Optional[Union[str, Enum]] = None) -> None:
        """
        Remove all listeners for a specific event type or all events.

        Args:
            event_type: Optional event type. If None, removes all listeners for all events.
        """
        with self._listener_lock:
            if event_type is None:
                self._listeners.clear()
                self._global_listeners.clear()
            else:
                self._listeners[self._name(event_type)].clear()


class EventBus:
    """
    Process-wide event bus.

    Engines publish here unless they are given their own emitter.
    """

    _instance = None
    _lock = threading.Lock()

    @classmethod
    def get_instance(cls) -> EventEmitter:
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = EventEmitter()
        return cls._instance


class EngineEventType(Enum):
    """
    Events published while a round is played.
    """

    # Round lifecycle
    ROUND_STARTED = "round_started"
    ROUND_ENDED = "round_ended"
    PHASE_CHANGED = "phase_changed"

    # Player events
    PLAYER_BET = "player_bet"
    PLAYER_ACTION = "player_action"

    # Card events
    CARD_DEALT = "card_dealt"
    SHUFFLE = "shuffle"

    # Hand events
    HAND_SPLIT = "hand_split"
    HAND_RESULT = "hand_result"

    # Dealer events
    DEALER_ACTION = "dealer_action"

    # Money events
    MONEY_PAYOUT = "money_payout"
    PAYOUT_FAILED = "payout_failed"
