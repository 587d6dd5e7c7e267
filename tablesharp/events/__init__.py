"""
Event system for the tablesharp engine.

Presentation layers subscribe here to follow a round as it is played.
"""

from tablesharp.events.emitter import (
    EventEmitter,
    EventBus,
    EventPriority,
    EngineEventType,
)

__all__ = ["EventEmitter", "EventBus", "EventPriority", "EngineEventType"]
