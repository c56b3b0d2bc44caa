"""
Player actions.

Every action a participant can submit is one of the frozen dataclasses below.
`Action` is the closed union of them, and transitions dispatch on it with
``match``.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from roachpoker.common.card import CreatureType
from roachpoker.game.state import Response


@dataclass(frozen=True)
class PlayCard:
    """Pass a card from hand to ``target_player_id`` claiming it is ``claim``."""

    player_id: str
    card_id: str
    claim: CreatureType
    target_player_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "play_card",
            "player_id": self.player_id,
            "card_id": self.card_id,
            "claim": self.claim.value,
            "target_player_id": self.target_player_id,
        }


@dataclass(frozen=True)
class Respond:
    """
    Answer the active round.

    ``round_id`` pins the answer to a specific round so a late answer to an
    already-finished round is rejected instead of applied to its successor.
    """

    player_id: str
    response: Response
    round_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "respond",
            "player_id": self.player_id,
            "response": self.response.value,
            "round_id": self.round_id,
        }


Action = Union[PlayCard, Respond]


def action_from_dict(data: Dict[str, Any]) -> Action:
    """
    Rebuild an action from its dictionary form.

    Raises:
        ValueError: if the payload does not describe a known action
    """
    kind = data.get("type")
    if kind == "play_card":
        return PlayCard(
            player_id=data["player_id"],
            card_id=data["card_id"],
            claim=CreatureType.parse(data["claim"]),
            target_player_id=data["target_player_id"],
        )
    if kind == "respond":
        return Respond(
            player_id=data["player_id"],
            response=Response.parse(data["response"]),
            round_id=data.get("round_id"),
        )
    raise ValueError(f"Unknown action type: {kind!r}")
