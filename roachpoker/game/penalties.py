"""
Penalty tracking and win evaluation.

Penalty piles only grow. A player loses as soon as one pile reaches the win
condition, which is checked on every penalty so at most one pile can ever be
the cause.
"""

from dataclasses import dataclass, replace
from typing import Optional, Tuple
import time

from roachpoker.common.card import Card, CreatureType
from roachpoker.game.state import (
    DEFAULT_WIN_CONDITION,
    GameState,
    GameStatus,
    PlayerState,
)


@dataclass(frozen=True)
class LossCheck:
    """Result of checking a player's piles against the win condition."""

    has_lost: bool
    losing_creature_type: Optional[CreatureType] = None


def apply_penalty(
    players: Tuple[PlayerState, ...], receiver_id: str, card: Card
) -> Tuple[PlayerState, ...]:
    """
    Append ``card`` to the receiver's pile for its creature type.

    Args:
        players: Participants of the game
        receiver_id: Player receiving the penalty
        card: The card that was in play

    Returns:
        A new players tuple with the receiver updated

    Raises:
        ValueError: if ``receiver_id`` is not one of ``players``
    """
    if not any(player.id == receiver_id for player in players):
        raise ValueError(f"Penalty receiver {receiver_id} is not a participant")

    updated = []
    for player in players:
        if player.id == receiver_id:
            piles = dict(player.penalty_piles)
            piles[card.creature_type] = player.pile(card.creature_type) + (card,)
            player = replace(player, penalty_piles=piles)
        updated.append(player)
    return tuple(updated)


def check_loss(
    player: PlayerState, win_condition: int = DEFAULT_WIN_CONDITION
) -> LossCheck:
    """
    Check whether any of the player's piles reached the win condition.

    Piles are scanned in creature-type order; since the game ends on the first
    pile to reach the threshold only one can qualify in practice.
    """
    for creature in CreatureType:
        if len(player.pile(creature)) >= win_condition:
            return LossCheck(has_lost=True, losing_creature_type=creature)
    return LossCheck(has_lost=False)


def end_game(
    state: GameState,
    loser_id: str,
    losing_creature_type: Optional[CreatureType] = None,
) -> GameState:
    """
    Finish the game with ``loser_id`` as the loser.

    The other participant becomes the winner, the turn is cleared and the
    status becomes ended. The version is not touched here; the calling
    transition commits it.

    Raises:
        ValueError: if ``loser_id`` is not a participant
    """
    loser = state.get_player(loser_id)
    if loser is None:
        raise ValueError(f"Loser {loser_id} is not a participant")
    winner = state.opponent_of(loser_id)

    state = state.with_player(
        replace(loser, has_lost=True, losing_creature_type=losing_creature_type)
    )
    return replace(
        state,
        status=GameStatus.ENDED,
        winner_id=winner.id if winner else None,
        loser_id=loser_id,
        current_turn_player_id=None,
        ended_at=time.time(),
    )
