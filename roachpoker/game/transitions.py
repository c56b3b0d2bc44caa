"""
State transition functions for Cockroach Poker.

This module provides pure functions for transitioning between game states,
without modifying the original state objects. Every public transition returns a
`TransitionResult`: on success it carries the new state and the events that
describe the change; on failure it carries an error code and the caller's state
is left exactly as it was.
"""

from dataclasses import replace
from typing import Any, Dict, Optional, Sequence
import logging
import random
import time

from roachpoker.common.card import CreatureType
from roachpoker.common.deck import Deck
from roachpoker.errors import (
    ErrorCode,
    InvalidRulesError,
    RoachPokerError,
    TransitionResult,
)
from roachpoker.events import EngineEvent, EngineEventType
from roachpoker.game.actions import Action, PlayCard, Respond
from roachpoker.game.penalties import apply_penalty, check_loss, end_game
from roachpoker.game.state import (
    PLAYERS_PER_GAME,
    GameRules,
    GameState,
    GameStatus,
    PlayerState,
    Response,
    RoundState,
    RoundStatus,
    empty_penalty_piles,
)

logger = logging.getLogger(__name__)


def _reject(code: ErrorCode, message: str) -> TransitionResult:
    logger.debug("Rejected action: %s (%s)", code.value, message)
    return TransitionResult.failure(code, message)


def _event(
    state: GameState, event_type: EngineEventType, data: Dict[str, Any]
) -> EngineEvent:
    return EngineEvent(
        event_type=event_type, game_id=state.id, data=data, version=state.version
    )


def _require_state(state: GameState) -> None:
    if not isinstance(state, GameState):
        raise TypeError(f"Expected a GameState, got {type(state).__name__}")


class StateTransitionEngine:
    """
    Pure functions for state transitions in Cockroach Poker.

    This class contains static methods that implement game state transitions.
    Each method takes a state and returns a new state, without modifying the
    original.
    """

    @staticmethod
    def new_game(
        players: Sequence[PlayerState],
        rules: Optional[GameRules] = None,
        game_id: Optional[str] = None,
    ) -> TransitionResult:
        """
        Create a game waiting to be dealt.

        Args:
            players: The two participants, in seat order
            rules: Rules for the game (defaults if None)
            game_id: Identifier to use (a uuid if None)

        Returns:
            Result holding the waiting game
        """
        if len(players) != PLAYERS_PER_GAME:
            return _reject(
                ErrorCode.INVALID_PLAYER_COUNT,
                f"A game needs exactly {PLAYERS_PER_GAME} players, got {len(players)}",
            )
        if len({player.id for player in players}) != len(players):
            return _reject(
                ErrorCode.DUPLICATE_PLAYERS, "Cannot have the same player twice"
            )

        rules = rules or GameRules()
        try:
            rules.validate()
        except InvalidRulesError as e:
            return _reject(ErrorCode.INVALID_RULES, e.message)

        seated = tuple(
            replace(
                player,
                hand=(),
                penalty_piles=empty_penalty_piles(),
                has_lost=False,
                losing_creature_type=None,
                turn_position=position,
            )
            for position, player in enumerate(players)
        )
        kwargs: Dict[str, Any] = {"players": seated, "rules": rules}
        if game_id is not None:
            kwargs["id"] = game_id
        state = GameState(**kwargs)

        event = _event(
            state,
            EngineEventType.GAME_CREATED,
            {
                "player_ids": state.player_ids,
                "rules": state.rules.to_dict(),
            },
        )
        return TransitionResult.success(state, events=(event,))

    @staticmethod
    def initialize_game(
        state: GameState,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> TransitionResult:
        """
        Shuffle, deal and pick the first player.

        The first player is drawn from the same random source as the shuffle,
        so a seed fully determines the opening position.

        Args:
            state: A waiting game
            seed: Seed for the shuffle (generated and recorded if None)
            rng: Random source to use instead of a seed

        Returns:
            Result holding the game in progress
        """
        _require_state(state)
        if state.status != GameStatus.WAITING:
            return _reject(
                ErrorCode.GAME_ALREADY_STARTED, f"Game {state.id} was already dealt"
            )
        if len(set(state.player_ids)) != len(state.players):
            return _reject(
                ErrorCode.DUPLICATE_PLAYERS, "Cannot have the same player twice"
            )
        if len(state.players) != PLAYERS_PER_GAME:
            return _reject(
                ErrorCode.INVALID_PLAYER_COUNT,
                f"A game needs exactly {PLAYERS_PER_GAME} players",
            )

        try:
            if rng is None:
                if seed is None:
                    seed = random.SystemRandom().randrange(2**32)
                rng = random.Random(seed)

            dealt = Deck().shuffled(rng=rng).deal()
            first_player = state.players[rng.randrange(PLAYERS_PER_GAME)]

            players = (
                replace(state.players[0], hand=dealt.hand1),
                replace(state.players[1], hand=dealt.hand2),
            )
            new_state = replace(
                state,
                status=GameStatus.IN_PROGRESS,
                players=players,
                hidden_cards=dealt.hidden,
                current_turn_player_id=first_player.id,
                seed=seed,
                version=state.version + 1,
                started_at=time.time(),
            )
        except RoachPokerError as e:
            return _reject(e.code, e.message)
        except Exception as e:
            logger.exception("Unexpected failure initializing game %s", state.id)
            return _reject(ErrorCode.INITIALIZATION_ERROR, str(e) or type(e).__name__)

        events = (
            _event(
                new_state,
                EngineEventType.GAME_STARTED,
                {
                    "first_player_id": first_player.id,
                    "hand_sizes": {p.id: p.card_count for p in new_state.players},
                    "hidden_cards": len(new_state.hidden_cards),
                },
            ),
            _event(
                new_state,
                EngineEventType.TURN_CHANGED,
                {"player_id": first_player.id, "reason": "first_player"},
            ),
        )
        return TransitionResult.success(new_state, events=events)

    @staticmethod
    def is_player_turn(state: GameState, player_id: str) -> bool:
        """Check whether ``player_id`` holds the turn."""
        _require_state(state)
        return state.current_turn_player_id == player_id

    @staticmethod
    def advance_turn(state: GameState, next_player_id: Optional[str]) -> GameState:
        """
        Give the turn to ``next_player_id`` and commit a new version.

        No validation: callers must have checked the player already.
        """
        _require_state(state)
        return replace(
            state, current_turn_player_id=next_player_id, version=state.version + 1
        )

    @staticmethod
    def play_card(
        state: GameState,
        player_id: str,
        card_id: str,
        claim: CreatureType,
        target_player_id: str,
    ) -> TransitionResult:
        """
        Pass a card face down to the opponent with a claim.

        The claim is never compared to the card here.

        Args:
            state: Current game state
            player_id: ID of the player passing the card
            card_id: ID of the card in the player's hand
            claim: Creature type the player asserts the card is
            target_player_id: ID of the player who must respond

        Returns:
            Result holding the new state, the updated player and the new round
        """
        _require_state(state)
        if not state.is_in_progress:
            return _reject(ErrorCode.GAME_NOT_ACTIVE, "Game is not currently active")

        if not StateTransitionEngine.is_player_turn(state, player_id):
            return _reject(ErrorCode.NOT_PLAYER_TURN, "It is not your turn")

        if state.active_round is not None:
            return _reject(
                ErrorCode.ROUND_IN_PROGRESS,
                "Respond to the card in play before playing a new one",
            )

        try:
            claim = CreatureType.parse(claim)
        except ValueError as e:
            return _reject(ErrorCode.INVALID_CLAIM, str(e))

        if target_player_id == player_id:
            return _reject(ErrorCode.CANNOT_TARGET_SELF, "Cannot target yourself")

        if state.get_player(target_player_id) is None:
            return _reject(
                ErrorCode.INVALID_TARGET_PLAYER, "Target player is not in this game"
            )

        player = state.get_player(player_id)
        card = player.find_card(card_id) if player else None
        if card is None:
            return _reject(ErrorCode.CARD_NOT_IN_HAND, "Card not found in player hand")

        new_player = replace(
            player, hand=tuple(c for c in player.hand if c.id != card_id)
        )
        round_number = state.round_number + 1
        new_round = RoundState(
            id=f"{state.id}-round-{round_number}",
            round_number=round_number,
            card_in_play=card,
            claiming_player_id=player_id,
            original_claimant_id=player_id,
            claimed_creature_type=claim,
            target_player_id=target_player_id,
        )
        action = PlayCard(
            player_id=player_id,
            card_id=card_id,
            claim=claim,
            target_player_id=target_player_id,
        )
        new_state = replace(
            state.with_player(new_player),
            current_round=new_round,
            current_turn_player_id=target_player_id,
            round_number=round_number,
            version=state.version + 1,
            history=state.history + (action,),
        )

        # The card itself stays secret until the round is resolved
        events = (
            _event(
                new_state,
                EngineEventType.ROUND_STARTED,
                {
                    "round_id": new_round.id,
                    "round_number": round_number,
                    "claiming_player_id": player_id,
                    "target_player_id": target_player_id,
                    "claimed_creature_type": claim.value,
                    "remaining_hand_size": new_player.card_count,
                },
            ),
            _event(
                new_state,
                EngineEventType.TURN_CHANGED,
                {"player_id": target_player_id, "reason": "card_played"},
            ),
        )
        return TransitionResult.success(
            new_state, player=new_player, round=new_round, events=events
        )

    @staticmethod
    def respond_to_round(
        state: GameState,
        player_id: str,
        response: Response,
        round_id: Optional[str] = None,
    ) -> TransitionResult:
        """
        Believe, disbelieve or pass back the card in play.

        A pass-back keeps the card and its claim but swaps the roles: the
        passer becomes ``claiming_player_id`` and the previous claimant becomes
        the target. ``original_claimant_id`` still names who first played it.

        Args:
            state: Current game state
            player_id: ID of the responding player
            response: The response
            round_id: Round the response was made against; a stale id is rejected

        Returns:
            Result holding the new state, the round after the response and,
            for a judgement, the player who received the penalty
        """
        _require_state(state)
        if not state.is_in_progress:
            return _reject(ErrorCode.GAME_NOT_ACTIVE, "Game is not currently active")

        current = state.active_round
        if current is None:
            return _reject(ErrorCode.ROUND_NOT_ACTIVE, "Round is not active")
        if round_id is not None and round_id != current.id:
            return _reject(
                ErrorCode.ROUND_NOT_ACTIVE, f"Round {round_id} is no longer active"
            )

        if current.target_player_id != player_id:
            return _reject(
                ErrorCode.NOT_TARGET_PLAYER,
                "Only the target player can respond to this round",
            )

        try:
            response = Response.parse(response)
        except ValueError as e:
            return _reject(ErrorCode.INVALID_RESPONSE, str(e))

        action = Respond(player_id=player_id, response=response, round_id=round_id)
        if response == Response.PASS_BACK:
            return StateTransitionEngine._pass_back(state, current, player_id, action)
        return StateTransitionEngine._resolve(
            state, current, player_id, response, action
        )

    @staticmethod
    def apply_action(state: GameState, action: Action) -> TransitionResult:
        """
        Apply any player action.

        Raises:
            TypeError: if ``action`` is not a known action type
        """
        match action:
            case PlayCard():
                return StateTransitionEngine.play_card(
                    state,
                    action.player_id,
                    action.card_id,
                    action.claim,
                    action.target_player_id,
                )
            case Respond():
                return StateTransitionEngine.respond_to_round(
                    state, action.player_id, action.response, action.round_id
                )
            case _:
                raise TypeError(f"Unknown action: {action!r}")

    @staticmethod
    def _pass_back(
        state: GameState, current: RoundState, player_id: str, action: Respond
    ) -> TransitionResult:
        if current.pass_count >= state.rules.max_passes:
            return _reject(
                ErrorCode.MAX_PASS_LIMIT_REACHED,
                f"The card was already passed back {current.pass_count} times; "
                "believe or disbelieve",
            )

        # Same card, same claim; the passer now stands behind the claim
        new_round = replace(
            current,
            pass_count=current.pass_count + 1,
            passed_by=current.passed_by + (player_id,),
            claiming_player_id=player_id,
            target_player_id=current.claiming_player_id,
        )
        new_state = replace(
            state,
            current_round=new_round,
            current_turn_player_id=new_round.target_player_id,
            version=state.version + 1,
            history=state.history + (action,),
        )

        events = (
            _event(
                new_state,
                EngineEventType.CARD_PASSED_BACK,
                {
                    "round_id": new_round.id,
                    "passed_by": player_id,
                    "target_player_id": new_round.target_player_id,
                    "claimed_creature_type": new_round.claimed_creature_type.value,
                    "pass_count": new_round.pass_count,
                    "passes_remaining": state.rules.max_passes - new_round.pass_count,
                },
            ),
            _event(
                new_state,
                EngineEventType.TURN_CHANGED,
                {"player_id": new_round.target_player_id, "reason": "passed_back"},
            ),
        )
        return TransitionResult.success(new_state, round=new_round, events=events)

    @staticmethod
    def _resolve(
        state: GameState,
        current: RoundState,
        player_id: str,
        response: Response,
        action: Respond,
    ) -> TransitionResult:
        actual_is_truthful = current.is_claim_truthful()
        guess_is_correct = (response == Response.BELIEVE) == actual_is_truthful
        receiver_id = current.claiming_player_id if guess_is_correct else player_id

        resolved = replace(
            current,
            status=RoundStatus.RESOLVED,
            response=response,
            responder_id=player_id,
            actual_is_truthful=actual_is_truthful,
            penalty_receiver_id=receiver_id,
            resolved_at=time.time(),
        )
        card = current.card_in_play
        players = apply_penalty(state.players, receiver_id, card)
        new_state = replace(
            state,
            players=players,
            current_round=resolved,
            rounds=state.rounds + (resolved,),
            version=state.version + 1,
            history=state.history + (action,),
        )
        receiver = new_state.get_player(receiver_id)
        loss = check_loss(receiver, state.rules.win_condition)

        if loss.has_lost:
            new_state = replace(
                end_game(new_state, receiver_id, loss.losing_creature_type),
                current_round=None,
            )
            reason = "penalty_limit_reached"
        elif receiver.card_count == 0:
            # The stung player leads next and cannot
            new_state = replace(end_game(new_state, receiver_id), current_round=None)
            reason = "empty_hand"
        else:
            new_state = replace(new_state, current_turn_player_id=receiver_id)
            reason = None

        events = [
            _event(
                new_state,
                EngineEventType.ROUND_RESOLVED,
                {
                    "round_id": resolved.id,
                    "response": response.value,
                    "responder_id": player_id,
                    "claiming_player_id": current.claiming_player_id,
                    "card_id": card.id,
                    "actual_creature_type": card.creature_type.value,
                    "claimed_creature_type": current.claimed_creature_type.value,
                    "actual_is_truthful": actual_is_truthful,
                    "guess_is_correct": guess_is_correct,
                    "penalty_receiver_id": receiver_id,
                },
            ),
            _event(
                new_state,
                EngineEventType.PENALTY_APPLIED,
                {
                    "player_id": receiver_id,
                    "card_id": card.id,
                    "creature_type": card.creature_type.value,
                    "pile_size": len(receiver.pile(card.creature_type)),
                },
            ),
        ]
        if reason is not None:
            events.append(
                _event(
                    new_state,
                    EngineEventType.GAME_ENDED,
                    {
                        "winner_id": new_state.winner_id,
                        "loser_id": receiver_id,
                        "losing_creature_type": (
                            loss.losing_creature_type.value
                            if loss.losing_creature_type
                            else None
                        ),
                        "reason": reason,
                    },
                )
            )
            logger.info(
                "Game %s ended: %s lost (%s)", new_state.id, receiver_id, reason
            )
        else:
            events.append(
                _event(
                    new_state,
                    EngineEventType.TURN_CHANGED,
                    {"player_id": receiver_id, "reason": "penalty_received"},
                )
            )

        return TransitionResult.success(
            new_state,
            player=new_state.get_player(receiver_id),
            round=resolved,
            events=tuple(events),
        )


# Module-level aliases for callers that prefer plain functions
new_game = StateTransitionEngine.new_game
initialize_game = StateTransitionEngine.initialize_game
is_player_turn = StateTransitionEngine.is_player_turn
advance_turn = StateTransitionEngine.advance_turn
play_card = StateTransitionEngine.play_card
respond_to_round = StateTransitionEngine.respond_to_round
apply_action = StateTransitionEngine.apply_action
