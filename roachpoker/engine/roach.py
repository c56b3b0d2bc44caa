"""
Cockroach Poker game engine.

This module provides the RoachPokerEngine class, which runs the pure
transitions of `roachpoker.game` against a game repository. Each call loads
the stored game, applies one transition, saves the result under the version
check and only then publishes the transition's events.
"""

from typing import Any, Dict, Optional
import asyncio
import logging
import random
import time
import weakref

from roachpoker.common.card import CreatureType
from roachpoker.engine.base import BaseEngine
from roachpoker.errors import ErrorCode, TransitionResult
from roachpoker.events import EngineEventType, EventEmitter
from roachpoker.game.actions import Action, PlayCard, Respond
from roachpoker.game.state import GameRules, GameState, PlayerState, Response
from roachpoker.game.transitions import StateTransitionEngine
from roachpoker.game.validation import ValidationReport, validate_game_state
from roachpoker.storage import GameRepository

logger = logging.getLogger(__name__)


class RoachPokerEngine(BaseEngine):
    """
    Engine implementation for Cockroach Poker.

    Calls for the same game are serialised with one asyncio lock per game id;
    different games proceed independently. Stored versions guard against writers
    outside this engine instance.

    Store calls are made directly on the event loop. The bundled stores are
    in-memory or local SQLite; a store backed by a remote database should be
    wrapped so its calls run in a thread (e.g. with ``asyncio.to_thread``).
    """

    def __init__(
        self,
        store: GameRepository,
        emitter: Optional[EventEmitter] = None,
        config: Dict[str, Any] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize the Cockroach Poker engine.

        Args:
            store: Repository games are loaded from and saved to
            emitter: Event emitter to publish to (a new one if None)
            config: Rule settings merged over the defaults
            rng: Random source used to pick seeds for new games

        Raises:
            InvalidRulesError: if the configuration is out of range
        """
        super().__init__(store, emitter, config)

        self.rules = GameRules.from_config(self.config)
        self.config = self.rules.to_dict()
        self._rng = rng or random.Random()
        # A lock lives only while a call holds or awaits it
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, game_id: str) -> asyncio.Lock:
        lock = self._locks.get(game_id)
        if lock is None:
            lock = self._locks[game_id] = asyncio.Lock()
        return lock

    async def initialize(self) -> None:
        """
        Prepare the engine and start recording events in the store.
        """
        self.emitter.set_recorder(self.store)
        self.emitter.emit(
            EngineEventType.ENGINE_INIT,
            {
                "engine_type": "roachpoker",
                "config": self.config,
                "timestamp": time.time(),
            },
        )

    async def shutdown(self) -> None:
        """
        Shut down the engine. The store is left open for its owner to close.
        """
        self.emitter.emit(EngineEventType.ENGINE_SHUTDOWN, {"timestamp": time.time()})
        self.emitter.set_recorder(None)
        self._locks.clear()

    async def create_game(
        self,
        player1_id: str,
        player2_id: str,
        player1_name: Optional[str] = None,
        player2_name: Optional[str] = None,
        game_id: Optional[str] = None,
        seed: Optional[int] = None,
    ) -> TransitionResult:
        """
        Create, deal and store a new game.

        Args:
            player1_id: ID of the first participant
            player2_id: ID of the second participant
            player1_name: Display name of the first participant
            player2_name: Display name of the second participant
            game_id: Identifier to use (a uuid if None)
            seed: Shuffle seed (drawn from the engine's random source if None)

        Returns:
            Result holding the game in progress
        """
        players = [
            PlayerState(id=player1_id, name=player1_name or player1_id),
            PlayerState(id=player2_id, name=player2_name or player2_id),
        ]
        created = StateTransitionEngine.new_game(players, self.rules, game_id)
        if not created.ok:
            return created

        if seed is None:
            seed = self._rng.randrange(2**32)
        started = StateTransitionEngine.initialize_game(created.state, seed=seed)
        if not started.ok:
            return started

        async with self._lock_for(started.state.id):
            saved = self.store.save_game(started.state, None)
            if not saved.ok:
                return self._conflict(started.state.id, saved)

        logger.info(
            "Created game %s for %s and %s (seed %s)",
            started.state.id,
            player1_id,
            player2_id,
            seed,
        )
        events = created.events + started.events
        self._publish(events)
        return TransitionResult.success(started.state, events=events)

    async def submit(
        self, game_id: str, action: Action, expected_version: Optional[int] = None
    ) -> TransitionResult:
        """
        Apply a player action to a stored game.

        Args:
            game_id: ID of the game
            action: PlayCard or Respond
            expected_version: Version the caller last saw, if it wants the check

        Returns:
            Result of the transition; nothing is saved or published on failure
        """
        async with self._lock_for(game_id):
            state = self.store.load_game(game_id)
            if state is None:
                return TransitionResult.failure(
                    ErrorCode.GAME_NOT_FOUND, f"Game {game_id} does not exist"
                )
            if expected_version is not None and expected_version != state.version:
                return self._conflict(
                    game_id,
                    TransitionResult.failure(
                        ErrorCode.VERSION_CONFLICT,
                        f"Game {game_id} is at version {state.version}, "
                        f"not {expected_version}",
                    ),
                )

            result = StateTransitionEngine.apply_action(state, action)
            if not result.ok:
                return result

            saved = self.store.save_game(result.state, state.version)
            if not saved.ok:
                return self._conflict(game_id, saved)

        if result.game_ended:
            logger.info(
                "Game %s ended: winner %s, loser %s",
                game_id,
                result.state.winner_id,
                result.state.loser_id,
            )
        self._publish(result.events)
        return result

    async def play_card(
        self,
        game_id: str,
        player_id: str,
        card_id: str,
        claim: CreatureType,
        target_player_id: str,
        expected_version: Optional[int] = None,
    ) -> TransitionResult:
        """
        Pass a card face down to the opponent with a claim.
        """
        action = PlayCard(
            player_id=player_id,
            card_id=card_id,
            claim=claim,
            target_player_id=target_player_id,
        )
        return await self.submit(game_id, action, expected_version)

    async def respond(
        self,
        game_id: str,
        player_id: str,
        response: Response,
        round_id: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> TransitionResult:
        """
        Believe, disbelieve or pass back the card in play.
        """
        action = Respond(player_id=player_id, response=response, round_id=round_id)
        return await self.submit(game_id, action, expected_version)

    async def timeout_turn(
        self, game_id: str, expected_version: Optional[int] = None
    ) -> TransitionResult:
        """
        Answer for a responder whose time ran out.

        The game's ``timeout_response`` is applied on behalf of the target of
        the active round. Timers are kept by the caller.

        Args:
            game_id: ID of the game
            expected_version: Version the timer was started at, so a timer that
                fires after the player already acted is rejected

        Returns:
            Result of the forced response
        """
        state = await self.get_state(game_id)
        if state is None:
            return TransitionResult.failure(
                ErrorCode.GAME_NOT_FOUND, f"Game {game_id} does not exist"
            )
        if not state.is_in_progress:
            return TransitionResult.failure(
                ErrorCode.GAME_NOT_ACTIVE, "Game is not currently active"
            )
        current = state.active_round
        if current is None:
            return TransitionResult.failure(
                ErrorCode.ROUND_NOT_ACTIVE, "No round is waiting for a response"
            )

        if expected_version is None:
            expected_version = state.version
        result = await self.respond(
            game_id,
            current.target_player_id,
            state.rules.timeout_response,
            round_id=current.id,
            expected_version=expected_version,
        )
        if result.ok:
            logger.info(
                "Player %s timed out in game %s; applied %s",
                current.target_player_id,
                game_id,
                state.rules.timeout_response.value,
            )
            self.emitter.emit(
                EngineEventType.PLAYER_TIMEOUT,
                {
                    "game_id": game_id,
                    "player_id": current.target_player_id,
                    "round_id": current.id,
                    "response": state.rules.timeout_response.value,
                    "timestamp": time.time(),
                },
            )
        return result

    async def get_state(self, game_id: str) -> Optional[GameState]:
        async with self._lock_for(game_id):
            return self.store.load_game(game_id)

    async def validate(self, game_id: str) -> ValidationReport:
        """
        Check the invariants of a stored game.

        Raises:
            KeyError: if there is no such game
        """
        state = await self.get_state(game_id)
        if state is None:
            raise KeyError(game_id)
        return validate_game_state(state)

    def _publish(self, events) -> None:
        for event in events:
            self.emitter.emit_event(event)

    def _conflict(self, game_id: str, failure: TransitionResult) -> TransitionResult:
        logger.warning("Version conflict on game %s: %s", game_id, failure.error.message)
        self.emitter.emit(
            EngineEventType.VERSION_CONFLICT,
            {
                "game_id": game_id,
                "message": failure.error.message,
                "timestamp": time.time(),
            },
        )
        return failure
