"""
Cockroach Poker game module.

This module provides the state models, player actions, pure state transitions,
penalty tracking, validation, replay and statistics for the game.
"""

from roachpoker.game.state import (
    GameState as GameState,
    PlayerState as PlayerState,
    RoundState as RoundState,
    GameRules as GameRules,
    GameStatus as GameStatus,
    RoundStatus as RoundStatus,
    Response as Response,
)
from roachpoker.game.actions import (
    Action as Action,
    PlayCard as PlayCard,
    Respond as Respond,
    action_from_dict as action_from_dict,
)
from roachpoker.game.penalties import (
    LossCheck as LossCheck,
    apply_penalty as apply_penalty,
    check_loss as check_loss,
    end_game as end_game,
)
from roachpoker.game.transitions import StateTransitionEngine as StateTransitionEngine
from roachpoker.game.validation import (
    ValidationReport as ValidationReport,
    validate_game_state as validate_game_state,
)
from roachpoker.game.replay import replay as replay, verify_replay as verify_replay

__all__ = [
    "GameState",
    "PlayerState",
    "RoundState",
    "GameRules",
    "GameStatus",
    "RoundStatus",
    "Response",
    "Action",
    "PlayCard",
    "Respond",
    "action_from_dict",
    "LossCheck",
    "apply_penalty",
    "check_loss",
    "end_game",
    "StateTransitionEngine",
    "ValidationReport",
    "validate_game_state",
    "replay",
    "verify_replay",
]
