"""
Base engine class for roachpoker.

This module provides the abstract base class for game engines. An engine owns
no game state itself: it loads games from a repository, runs them through the
pure transitions and writes them back, then publishes what changed.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from roachpoker.errors import TransitionResult
from roachpoker.events import EventEmitter
from roachpoker.game.actions import Action
from roachpoker.game.state import GameState
from roachpoker.storage import GameRepository


class BaseEngine(ABC):
    """
    Abstract base class for game engines.

    This class defines the common interface every engine implements: creating
    games, applying player actions and reading state back.
    """

    def __init__(
        self,
        store: GameRepository,
        emitter: Optional[EventEmitter] = None,
        config: Dict[str, Any] = None,
    ):
        """
        Initialize the engine.

        Args:
            store: Repository games are loaded from and saved to
            emitter: Event emitter to publish to (a new one if None)
            config: Configuration options for new games
        """
        self.store = store
        self.emitter = emitter or EventEmitter()
        self.config = config or {}

    @abstractmethod
    async def initialize(self) -> None:
        """
        Prepare the engine for use.
        """

    @abstractmethod
    async def shutdown(self) -> None:
        """
        Shut down the engine and clean up resources.
        """

    @abstractmethod
    async def create_game(
        self, player1_id: str, player2_id: str, **kwargs
    ) -> TransitionResult:
        """
        Create and deal a new game.

        Args:
            player1_id: ID of the first participant
            player2_id: ID of the second participant

        Returns:
            Result holding the game in progress
        """

    @abstractmethod
    async def submit(
        self, game_id: str, action: Action, expected_version: Optional[int] = None
    ) -> TransitionResult:
        """
        Apply a player action to a stored game.

        Args:
            game_id: ID of the game
            action: The action to apply
            expected_version: Version the caller last saw, if it wants the check

        Returns:
            Result of the transition
        """

    @abstractmethod
    async def get_state(self, game_id: str) -> Optional[GameState]:
        """
        Get the current state of a game.

        Args:
            game_id: ID of the game

        Returns:
            The stored state, or None if there is no such game
        """
