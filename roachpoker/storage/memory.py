"""
In-memory game store.

Useful for tests and single-process hosts. States are immutable, so storing the
objects themselves is enough; a lock makes the version check and the write one
step.
"""

import threading
from typing import Dict, List, Optional

from roachpoker.errors import TransitionResult
from roachpoker.events import EngineEvent
from roachpoker.game.state import GameState, RoundState
from roachpoker.storage.base import GameRepository, version_conflict


class InMemoryGameStore(GameRepository):
    """Thread-safe dictionary-backed GameRepository."""

    def __init__(self):
        self._games: Dict[str, GameState] = {}
        self._events: List[EngineEvent] = []
        self._lock = threading.RLock()

    def load_game(self, game_id: str) -> Optional[GameState]:
        with self._lock:
            return self._games.get(game_id)

    def save_game(
        self, state: GameState, expected_version: Optional[int]
    ) -> TransitionResult:
        with self._lock:
            stored = self._games.get(state.id)
            stored_version = stored.version if stored else None
            if stored_version != expected_version:
                return version_conflict(state.id, expected_version, stored_version)
            self._games[state.id] = state
        return TransitionResult.success(state)

    def load_rounds(self, game_id: str) -> List[RoundState]:
        state = self.load_game(game_id)
        return list(state.rounds) if state else []

    def record_event(self, event: EngineEvent) -> None:
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> List[EngineEvent]:
        """Recorded events, oldest first."""
        with self._lock:
            return list(self._events)

    def close(self) -> None:
        with self._lock:
            self._games.clear()
            self._events.clear()
