"""
Event system for the roachpoker engine.

Transitions describe what they changed as `EngineEvent` records. The engine
hands those records to an `EventEmitter`, which fans them out to subscribers
(a realtime delivery layer, a recorder, tests) by priority.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union
import asyncio
import logging
import threading
import time
import uuid
from enum import Enum

# Create a logger for the event system
logger = logging.getLogger("roachpoker.events")


class EventPriority(Enum):
    """Priority levels for event handlers."""

    LOW = 0
    NORMAL = 1
    HIGH = 2
    CRITICAL = 3


class EngineEventType(Enum):
    """
    Event types emitted by the roachpoker engine.

    These cover the game lifecycle and every kind of accepted transition so a
    delivery layer can broadcast them without inspecting game state.
    """

    # Core lifecycle events
    ENGINE_INIT = "engine_init"
    ENGINE_SHUTDOWN = "engine_shutdown"

    # Game lifecycle
    GAME_CREATED = "game_created"
    GAME_STARTED = "game_started"
    GAME_ENDED = "game_ended"

    # Round events
    ROUND_STARTED = "round_started"
    CARD_PASSED_BACK = "card_passed_back"
    ROUND_RESOLVED = "round_resolved"
    PENALTY_APPLIED = "penalty_applied"
    TURN_CHANGED = "turn_changed"

    # Service events
    PLAYER_TIMEOUT = "player_timeout"
    VERSION_CONFLICT = "version_conflict"

    # Error events
    ERROR = "error"


@dataclass(frozen=True)
class EngineEvent:
    """
    Description of one change made by a transition.

    Attributes:
        event_type: What happened
        game_id: Game the change belongs to
        data: JSON-compatible details
        version: Game version after the change
        event_id: Unique identifier for this event
        timestamp: When the event was created
    """

    event_type: EngineEventType
    game_id: str
    data: Dict[str, Any] = field(default_factory=dict)
    version: int = 0
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the event to a dictionary for serialization."""
        return {
            "event_id": self.event_id,
            "event_type": self.event_type.name,
            "game_id": self.game_id,
            "version": self.version,
            "timestamp": self.timestamp,
            "data": dict(self.data),
        }


EventName = Union[str, Enum]


def _event_name(event_type: EventName) -> str:
    """Listeners are keyed by name so enum and string subscriptions meet."""
    return event_type.name if isinstance(event_type, Enum) else event_type


@dataclass(frozen=True, eq=False)
class _Listener:
    callback: Callable
    priority: int


def _insert(bucket: List[_Listener], listener: _Listener) -> None:
    # Descending priority, FIFO within a priority
    index = next(
        (i for i, other in enumerate(bucket) if other.priority < listener.priority),
        len(bucket),
    )
    bucket.insert(index, listener)


class EventEmitter:
    """
    Fans engine events out to subscribers.

    Subscribers either listen to one event name (`on`, `once`) and receive the
    payload, or listen to everything (`on_any`) and receive an
    ``(event_name, payload)`` pair. Higher priorities are called first.
    A failing subscriber is logged and skipped.

    When a recorder is set, `emit_event` passes each EngineEvent to its
    ``record_event`` method before any subscriber sees it.
    """

    def __init__(self):
        self._listeners: Dict[str, List[_Listener]] = defaultdict(list)
        self._global_listeners: List[_Listener] = []
        self._listener_lock = threading.RLock()
        self._recorder = None

    def set_recorder(self, recorder) -> None:
        """Persist EngineEvents through ``recorder.record_event`` (None disables)."""
        self._recorder = recorder

    def _subscribe(
        self, bucket: List[_Listener], callback: Callable, priority: EventPriority
    ) -> Callable[[], None]:
        listener = _Listener(callback, priority.value)
        with self._listener_lock:
            _insert(bucket, listener)

        def unsubscribe():
            with self._listener_lock:
                if listener in bucket:
                    bucket.remove(listener)

        return unsubscribe

    def on(
        self,
        event_type: EventName,
        callback: Callable,
        priority: EventPriority = EventPriority.NORMAL,
    ) -> Callable[[], None]:
        """
        Subscribe to one event.

        Args:
            event_type: Event name or EngineEventType member
            callback: Called with the event payload
            priority: Higher priorities are called earlier

        Returns:
            A function that removes the subscription
        """
        bucket = self._listeners[_event_name(event_type)]
        return self._subscribe(bucket, callback, priority)

    def once(
        self,
        event_type: EventName,
        callback: Callable,
        priority: EventPriority = EventPriority.NORMAL,
    ) -> Callable[[], None]:
        """Like `on`, but the subscription is dropped after the first call."""
        unsubscribe = None

        def fire(payload):
            try:
                callback(payload)
            finally:
                unsubscribe()

        unsubscribe = self.on(event_type, fire, priority)
        return unsubscribe

    def on_any(
        self, callback: Callable, priority: EventPriority = EventPriority.NORMAL
    ) -> Callable[[], None]:
        """Subscribe to every event; the callback gets ``(event_name, payload)``."""
        return self._subscribe(self._global_listeners, callback, priority)

    def _calls_for(self, name: str, data: Dict[str, Any]) -> List[tuple]:
        # Copied under the lock so callbacks may subscribe or unsubscribe freely
        with self._listener_lock:
            calls = [
                (listener.callback, data) for listener in self._listeners.get(name, ())
            ]
            calls.extend(
                (listener.callback, (name, data)) for listener in self._global_listeners
            )
        return calls

    def emit(self, event_type: EventName, data: Dict[str, Any]) -> None:
        """Call every subscriber of ``event_type`` with ``data``."""
        name = _event_name(event_type)
        for callback, payload in self._calls_for(name, data):
            try:
                callback(payload)
            except Exception as e:
                logger.error(f"Error in event handler for {name}: {e}", exc_info=True)

    def emit_event(self, event: EngineEvent) -> None:
        """
        Record an EngineEvent, then emit its dictionary form.

        A recorder failure is logged; subscribers are still notified.
        """
        if self._recorder is not None:
            try:
                self._recorder.record_event(event)
            except Exception as e:
                logger.error(
                    f"Error recording event {event.event_type.name} "
                    f"for game {event.game_id}: {e}",
                    exc_info=True,
                )
        self.emit(event.event_type, event.to_dict())

    async def emit_async(self, event_type: EventName, data: Dict[str, Any]) -> None:
        """Same as `emit`, awaiting subscribers that return a coroutine."""
        name = _event_name(event_type)
        for callback, payload in self._calls_for(name, data):
            try:
                outcome = callback(payload)
                if asyncio.iscoroutine(outcome):
                    await outcome
            except Exception as e:
                logger.error(f"Error in event handler for {name}: {e}", exc_info=True)

    def remove_all_listeners(self, event_type: Optional[EventName] = None) -> None:
        """Drop the subscribers of one event, or all subscribers."""
        with self._listener_lock:
            if event_type is not None:
                self._listeners.pop(_event_name(event_type), None)
                return
            self._listeners.clear()
            self._global_listeners.clear()
