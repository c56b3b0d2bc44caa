"""
Error codes and transition results for the roachpoker engine.

Expected rule violations are reported as values: every transition returns a
`TransitionResult` that either carries the new state or a `GameError` with a
stable code. Exceptions are reserved for programmer errors and for the few
internal helpers (deck dealing, rules validation) whose failures the setup
transition converts into results.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Optional, Tuple

if TYPE_CHECKING:
    from roachpoker.events.emitter import EngineEvent
    from roachpoker.game.state import GameState, PlayerState, RoundState


class ErrorCode(str, Enum):
    """Stable codes surfaced verbatim to callers."""

    DECK_SIZE_MISMATCH = "DECK_SIZE_MISMATCH"
    DUPLICATE_PLAYERS = "DUPLICATE_PLAYERS"
    INVALID_PLAYER_COUNT = "INVALID_PLAYER_COUNT"
    INITIALIZATION_ERROR = "INITIALIZATION_ERROR"
    GAME_ALREADY_STARTED = "GAME_ALREADY_STARTED"
    GAME_NOT_ACTIVE = "GAME_NOT_ACTIVE"
    GAME_NOT_FOUND = "GAME_NOT_FOUND"
    NOT_PLAYER_TURN = "NOT_PLAYER_TURN"
    ROUND_IN_PROGRESS = "ROUND_IN_PROGRESS"
    INVALID_CLAIM = "INVALID_CLAIM"
    CANNOT_TARGET_SELF = "CANNOT_TARGET_SELF"
    INVALID_TARGET_PLAYER = "INVALID_TARGET_PLAYER"
    CARD_NOT_IN_HAND = "CARD_NOT_IN_HAND"
    ROUND_NOT_ACTIVE = "ROUND_NOT_ACTIVE"
    INVALID_RESPONSE = "INVALID_RESPONSE"
    NOT_TARGET_PLAYER = "NOT_TARGET_PLAYER"
    MAX_PASS_LIMIT_REACHED = "MAX_PASS_LIMIT_REACHED"
    VERSION_CONFLICT = "VERSION_CONFLICT"
    INVALID_RULES = "INVALID_RULES"

    def __str__(self) -> str:
        return self.value


class RoachPokerError(Exception):
    """Base exception carrying an error code."""

    code: ErrorCode = ErrorCode.INITIALIZATION_ERROR

    def __init__(self, message: str, code: Optional[ErrorCode] = None):
        super().__init__(message)
        if code is not None:
            self.code = code
        self.message = message


class DeckSizeMismatchError(RoachPokerError):
    """Raised when a deck that is not 24 cards long is dealt."""

    code = ErrorCode.DECK_SIZE_MISMATCH


class InvalidRulesError(RoachPokerError):
    """Raised when game settings fall outside their allowed ranges."""

    code = ErrorCode.INVALID_RULES


@dataclass(frozen=True)
class GameError:
    """
    A rejected action.

    Attributes:
        code: Stable error code
        message: Human-readable explanation
    """

    code: ErrorCode
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code.value, "message": self.message}

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


@dataclass(frozen=True)
class TransitionResult:
    """
    Outcome of a transition: success with data, or failure with a code.

    Attributes:
        state: The new game state (None on failure)
        error: The rejection (None on success)
        player: The player the transition was about, when there is one
        round: The round created or changed by the transition
        events: Descriptions of what changed, in the order they happened
    """

    state: Optional["GameState"] = None
    error: Optional[GameError] = None
    player: Optional["PlayerState"] = None
    round: Optional["RoundState"] = None
    events: Tuple["EngineEvent", ...] = ()

    @classmethod
    def success(
        cls,
        state: "GameState",
        player: Optional["PlayerState"] = None,
        round: Optional["RoundState"] = None,
        events: Tuple["EngineEvent", ...] = (),
    ) -> "TransitionResult":
        return cls(state=state, player=player, round=round, events=tuple(events))

    @classmethod
    def failure(cls, code: ErrorCode, message: str) -> "TransitionResult":
        return cls(error=GameError(code=code, message=message))

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def code(self) -> Optional[ErrorCode]:
        return self.error.code if self.error else None

    @property
    def game_ended(self) -> bool:
        return self.state is not None and self.state.is_ended
