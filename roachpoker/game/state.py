"""
Immutable state models for the Cockroach Poker card game.

This module provides dataclasses for representing the state of a game in an
immutable manner. These classes are designed to be used with pure transition
functions that create new state instances rather than modifying existing ones.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple
from enum import Enum
import time
import uuid

from roachpoker.common.card import Card, CreatureType
from roachpoker.errors import InvalidRulesError

DEFAULT_WIN_CONDITION = 3
DEFAULT_MAX_PASSES = 3
DEFAULT_TURN_TIME_LIMIT = 60
MIN_WIN_CONDITION, MAX_WIN_CONDITION = 2, 6
MIN_TURN_TIME_LIMIT, MAX_TURN_TIME_LIMIT = 10, 300
PLAYERS_PER_GAME = 2


class GameStatus(str, Enum):
    """Lifecycle of a game."""

    WAITING = "waiting"
    IN_PROGRESS = "in_progress"
    ENDED = "ended"


class RoundStatus(str, Enum):
    """Lifecycle of a round."""

    ACTIVE = "active"
    RESOLVED = "resolved"


class Response(str, Enum):
    """What the target of a round can do with the card."""

    BELIEVE = "believe"
    DISBELIEVE = "disbelieve"
    PASS_BACK = "pass_back"

    @classmethod
    def parse(cls, value) -> "Response":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise ValueError(f"Invalid response: {value!r}")


def empty_penalty_piles() -> Dict[CreatureType, Tuple[Card, ...]]:
    """One empty pile per creature type."""
    return {creature: () for creature in CreatureType}


@dataclass(frozen=True)
class GameRules:
    """
    Immutable representation of the configurable rules of a game.

    Attributes:
        win_condition: Pile size of one creature type that loses the game
        max_passes: How many times one card may be passed back
        turn_time_limit: Seconds a player has to act, enforced by the host
        timeout_response: Response applied on behalf of a responder who timed out
    """

    win_condition: int = DEFAULT_WIN_CONDITION
    max_passes: int = DEFAULT_MAX_PASSES
    turn_time_limit: int = DEFAULT_TURN_TIME_LIMIT
    timeout_response: Response = Response.DISBELIEVE

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]] = None) -> "GameRules":
        """
        Build rules from a configuration dict merged over the defaults.

        Raises:
            InvalidRulesError: if a setting is out of range
        """
        default_config = {
            "win_condition": DEFAULT_WIN_CONDITION,
            "max_passes": DEFAULT_MAX_PASSES,
            "turn_time_limit": DEFAULT_TURN_TIME_LIMIT,
            "timeout_response": Response.DISBELIEVE.value,
        }
        if config:
            default_config.update(
                {k: v for k, v in config.items() if k in default_config}
            )

        try:
            timeout_response = Response.parse(default_config["timeout_response"])
        except ValueError as e:
            raise InvalidRulesError(str(e)) from e

        rules = cls(
            win_condition=int(default_config["win_condition"]),
            max_passes=int(default_config["max_passes"]),
            turn_time_limit=int(default_config["turn_time_limit"]),
            timeout_response=timeout_response,
        )
        rules.validate()
        return rules

    def validate(self) -> None:
        """Raise InvalidRulesError if any setting is out of range."""
        if not MIN_WIN_CONDITION <= self.win_condition <= MAX_WIN_CONDITION:
            raise InvalidRulesError(
                f"win_condition must be between {MIN_WIN_CONDITION} and "
                f"{MAX_WIN_CONDITION}, got {self.win_condition}"
            )
        if self.max_passes < 0:
            raise InvalidRulesError(
                f"max_passes must not be negative, got {self.max_passes}"
            )
        if not MIN_TURN_TIME_LIMIT <= self.turn_time_limit <= MAX_TURN_TIME_LIMIT:
            raise InvalidRulesError(
                f"turn_time_limit must be between {MIN_TURN_TIME_LIMIT} and "
                f"{MAX_TURN_TIME_LIMIT}, got {self.turn_time_limit}"
            )
        if self.timeout_response == Response.PASS_BACK:
            raise InvalidRulesError("timeout_response must be believe or disbelieve")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "win_condition": self.win_condition,
            "max_passes": self.max_passes,
            "turn_time_limit": self.turn_time_limit,
            "timeout_response": self.timeout_response.value,
        }


@dataclass(frozen=True)
class PlayerState:
    """
    Immutable representation of one participant.

    Attributes:
        id: Unique identifier for this player
        name: Display name of the player
        hand: Cards currently held (order irrelevant)
        penalty_piles: Penalty cards received, per creature type, in arrival order
        has_lost: Whether this player lost the game
        losing_creature_type: Pile that caused the loss, if any
        turn_position: Seat index (0 or 1)
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    name: str = "Player"
    hand: Tuple[Card, ...] = ()
    penalty_piles: Dict[CreatureType, Tuple[Card, ...]] = field(
        default_factory=empty_penalty_piles
    )
    has_lost: bool = False
    losing_creature_type: Optional[CreatureType] = None
    turn_position: int = 0

    @property
    def card_count(self) -> int:
        """Get the number of cards in the player's hand."""
        return len(self.hand)

    @property
    def penalty_count(self) -> int:
        """Total number of penalty cards across all piles."""
        return sum(len(pile) for pile in self.penalty_piles.values())

    def pile(self, creature_type: CreatureType) -> Tuple[Card, ...]:
        return self.penalty_piles.get(creature_type, ())

    def find_card(self, card_id: str) -> Optional[Card]:
        for card in self.hand:
            if card.id == card_id:
                return card
        return None

    def has_card(self, card_id: str) -> bool:
        return self.find_card(card_id) is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "hand": [card.id for card in self.hand],
            "penalty_piles": {
                creature.value: [card.id for card in self.pile(creature)]
                for creature in CreatureType
            },
            "has_lost": self.has_lost,
            "losing_creature_type": (
                self.losing_creature_type.value if self.losing_creature_type else None
            ),
            "turn_position": self.turn_position,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlayerState":
        piles = empty_penalty_piles()
        for creature, card_ids in data.get("penalty_piles", {}).items():
            piles[CreatureType.parse(creature)] = tuple(
                Card.from_id(card_id) for card_id in card_ids
            )
        losing = data.get("losing_creature_type")
        return cls(
            id=data["id"],
            name=data.get("name", "Player"),
            hand=tuple(Card.from_id(card_id) for card_id in data.get("hand", [])),
            penalty_piles=piles,
            has_lost=data.get("has_lost", False),
            losing_creature_type=CreatureType.parse(losing) if losing else None,
            turn_position=data.get("turn_position", 0),
        )


@dataclass(frozen=True)
class RoundState:
    """
    The truth-object for one card pass.

    Attributes:
        id: Unique identifier for this round
        round_number: Position of the round within its game (1-based)
        card_in_play: The physical card being passed
        claiming_player_id: Player currently asserting the claim
        original_claimant_id: Player who first played the card
        claimed_creature_type: The asserted creature type
        target_player_id: Player who must respond
        pass_count: Number of pass-backs so far
        passed_by: Ids of the players who passed, in order
        status: Active or resolved
        response: Final judgement, once resolved
        responder_id: Player who judged
        actual_is_truthful: Whether the claim matched the card
        penalty_receiver_id: Player who received the card as a penalty
    """

    card_in_play: Card
    claiming_player_id: str
    claimed_creature_type: CreatureType
    target_player_id: str
    round_number: int = 1
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    original_claimant_id: Optional[str] = None
    pass_count: int = 0
    passed_by: Tuple[str, ...] = ()
    status: RoundStatus = RoundStatus.ACTIVE
    response: Optional[Response] = None
    responder_id: Optional[str] = None
    actual_is_truthful: Optional[bool] = None
    penalty_receiver_id: Optional[str] = None
    created_at: float = field(default_factory=lambda: time.time())
    resolved_at: Optional[float] = None

    @property
    def is_active(self) -> bool:
        return self.status == RoundStatus.ACTIVE

    @property
    def is_resolved(self) -> bool:
        return self.status == RoundStatus.RESOLVED

    def is_claim_truthful(self) -> bool:
        """Whether the claim matches the card. Hidden from players until resolution."""
        return self.card_in_play.creature_type == self.claimed_creature_type

    @property
    def duration(self) -> Optional[float]:
        """Seconds from creation to resolution, if resolved."""
        if self.resolved_at is None:
            return None
        return self.resolved_at - self.created_at

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "round_number": self.round_number,
            "card_in_play": self.card_in_play.id,
            "claiming_player_id": self.claiming_player_id,
            "original_claimant_id": self.original_claimant_id,
            "claimed_creature_type": self.claimed_creature_type.value,
            "target_player_id": self.target_player_id,
            "pass_count": self.pass_count,
            "passed_by": list(self.passed_by),
            "status": self.status.value,
            "response": self.response.value if self.response else None,
            "responder_id": self.responder_id,
            "actual_is_truthful": self.actual_is_truthful,
            "penalty_receiver_id": self.penalty_receiver_id,
            "created_at": self.created_at,
            "resolved_at": self.resolved_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RoundState":
        response = data.get("response")
        return cls(
            id=data["id"],
            round_number=data.get("round_number", 1),
            card_in_play=Card.from_id(data["card_in_play"]),
            claiming_player_id=data["claiming_player_id"],
            original_claimant_id=data.get("original_claimant_id"),
            claimed_creature_type=CreatureType.parse(data["claimed_creature_type"]),
            target_player_id=data["target_player_id"],
            pass_count=data.get("pass_count", 0),
            passed_by=tuple(data.get("passed_by", [])),
            status=RoundStatus(data.get("status", RoundStatus.ACTIVE.value)),
            response=Response(response) if response else None,
            responder_id=data.get("responder_id"),
            actual_is_truthful=data.get("actual_is_truthful"),
            penalty_receiver_id=data.get("penalty_receiver_id"),
            created_at=data.get("created_at", time.time()),
            resolved_at=data.get("resolved_at"),
        )


@dataclass(frozen=True)
class GameState:
    """
    Immutable representation of a Cockroach Poker game.

    Attributes:
        id: Unique identifier for this game
        status: Waiting, in progress or ended
        players: The two participants, in seat order
        current_turn_player_id: Player expected to act next
        round_number: Number of rounds started so far
        current_round: The active round, or the last resolved one until a new round starts
        rounds: Resolved rounds, oldest first
        hidden_cards: Cards set aside at the deal
        winner_id: Set when the game ends
        loser_id: Set when the game ends
        version: Incremented on every committed transition
        rules: Rules for this game
        seed: Seed used for the deal, for replay
        history: Accepted actions, in order
        timestamp: Time when this state was created
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: GameStatus = GameStatus.WAITING
    players: Tuple[PlayerState, ...] = ()
    current_turn_player_id: Optional[str] = None
    round_number: int = 0
    current_round: Optional[RoundState] = None
    rounds: Tuple[RoundState, ...] = ()
    hidden_cards: Tuple[Card, ...] = ()
    winner_id: Optional[str] = None
    loser_id: Optional[str] = None
    version: int = 0
    rules: GameRules = field(default_factory=GameRules)
    seed: Optional[int] = None
    history: Tuple[Any, ...] = ()
    created_at: float = field(default_factory=lambda: time.time())
    started_at: Optional[float] = None
    ended_at: Optional[float] = None

    @property
    def player_ids(self) -> List[str]:
        return [player.id for player in self.players]

    @property
    def is_in_progress(self) -> bool:
        return self.status == GameStatus.IN_PROGRESS

    @property
    def is_ended(self) -> bool:
        return self.status == GameStatus.ENDED

    @property
    def active_round(self) -> Optional[RoundState]:
        """The current round if it still awaits a judgement."""
        if self.current_round is not None and self.current_round.is_active:
            return self.current_round
        return None

    @property
    def current_player(self) -> Optional["PlayerState"]:
        if self.current_turn_player_id is None:
            return None
        return self.get_player(self.current_turn_player_id)

    def get_player(self, player_id: str) -> Optional[PlayerState]:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def opponent_of(self, player_id: str) -> Optional[PlayerState]:
        if self.get_player(player_id) is None:
            return None
        for player in self.players:
            if player.id != player_id:
                return player
        return None

    def with_player(self, updated: PlayerState) -> "GameState":
        """Return a copy with ``updated`` replacing the player of the same id."""
        return replace(
            self,
            players=tuple(
                updated if player.id == updated.id else player
                for player in self.players
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the game state to a JSON-compatible dictionary.

        Returns:
            Dictionary representation of the game state
        """
        return {
            "id": self.id,
            "status": self.status.value,
            "players": [player.to_dict() for player in self.players],
            "current_turn_player_id": self.current_turn_player_id,
            "round_number": self.round_number,
            "current_round": (
                self.current_round.to_dict() if self.current_round else None
            ),
            "rounds": [r.to_dict() for r in self.rounds],
            "hidden_cards": [card.id for card in self.hidden_cards],
            "winner_id": self.winner_id,
            "loser_id": self.loser_id,
            "version": self.version,
            "rules": self.rules.to_dict(),
            "seed": self.seed,
            "history": [action.to_dict() for action in self.history],
            "created_at": self.created_at,
            "started_at": self.started_at,
            "ended_at": self.ended_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameState":
        from roachpoker.game.actions import action_from_dict

        current = data.get("current_round")
        rules = data.get("rules") or {}
        game_rules = GameRules(
            win_condition=rules.get("win_condition", DEFAULT_WIN_CONDITION),
            max_passes=rules.get("max_passes", DEFAULT_MAX_PASSES),
            turn_time_limit=rules.get("turn_time_limit", DEFAULT_TURN_TIME_LIMIT),
            timeout_response=Response(
                rules.get("timeout_response", Response.DISBELIEVE.value)
            ),
        )
        game_rules.validate()
        return cls(
            id=data["id"],
            status=GameStatus(data.get("status", GameStatus.WAITING.value)),
            players=tuple(PlayerState.from_dict(p) for p in data.get("players", [])),
            current_turn_player_id=data.get("current_turn_player_id"),
            round_number=data.get("round_number", 0),
            current_round=RoundState.from_dict(current) if current else None,
            rounds=tuple(RoundState.from_dict(r) for r in data.get("rounds", [])),
            hidden_cards=tuple(
                Card.from_id(card_id) for card_id in data.get("hidden_cards", [])
            ),
            winner_id=data.get("winner_id"),
            loser_id=data.get("loser_id"),
            version=data.get("version", 0),
            rules=game_rules,
            seed=data.get("seed"),
            history=tuple(action_from_dict(a) for a in data.get("history", [])),
            created_at=data.get("created_at", time.time()),
            started_at=data.get("started_at"),
            ended_at=data.get("ended_at"),
        )
