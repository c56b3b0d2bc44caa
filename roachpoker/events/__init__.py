"""
Event system for the roachpoker engine.

This package provides the notification side of the engine: event types, the
`EngineEvent` record produced by transitions and the emitter that delivers them.
"""

from roachpoker.events.emitter import (
    EventEmitter,
    EventPriority,
    EngineEvent,
    EngineEventType,
)

__all__ = ["EventEmitter", "EventPriority", "EngineEvent", "EngineEventType"]
