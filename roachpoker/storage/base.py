"""
Persistence interface for the roachpoker engine.

The engine never talks to a database directly; it is handed a `GameRepository`.
Saves are guarded by the game's version number: a save only succeeds if the
stored version still equals the version the caller read.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from roachpoker.errors import ErrorCode, TransitionResult
from roachpoker.events import EngineEvent
from roachpoker.game.state import GameState, RoundState


class GameRepository(ABC):
    """
    Abstract base class for game stores.
    """

    @abstractmethod
    def load_game(self, game_id: str) -> Optional[GameState]:
        """
        Load a game.

        Args:
            game_id: ID of the game

        Returns:
            The stored game, or None if there is none
        """

    @abstractmethod
    def save_game(
        self, state: GameState, expected_version: Optional[int]
    ) -> TransitionResult:
        """
        Store a game if nobody else wrote it since it was read.

        Args:
            state: The game to store
            expected_version: Version the caller read, or None for a new game

        Returns:
            Success with the stored state, or a VERSION_CONFLICT failure
        """

    @abstractmethod
    def load_rounds(self, game_id: str) -> List[RoundState]:
        """Load the resolved rounds of a game, oldest first."""

    def record_event(self, event: EngineEvent) -> None:
        """Persist an emitted event. Stores that keep no event log ignore it."""

    def close(self) -> None:
        """Release any resources held by the store."""


def version_conflict(game_id: str, expected: Optional[int], stored: Optional[int]):
    """Build the failure returned when a save collides with another write."""
    if expected is None:
        message = f"Game {game_id} already exists (version {stored})"
    else:
        message = (
            f"Game {game_id} was modified concurrently: expected version "
            f"{expected}, found {stored}"
        )
    return TransitionResult.failure(ErrorCode.VERSION_CONFLICT, message)
