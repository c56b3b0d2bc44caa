"""
Deterministic replay of recorded games.

A game is fully determined by its participants, rules, deal seed and the
ordered list of accepted actions. Replaying them rebuilds the same state,
which lets a host verify a stored game or reconstruct one from an action log.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from roachpoker.errors import TransitionResult
from roachpoker.game.actions import Action
from roachpoker.game.state import GameRules, GameState, PlayerState
from roachpoker.game.transitions import StateTransitionEngine


@dataclass(frozen=True)
class ReplayCheck:
    """Differences between a stored game and its replay."""

    matches: bool
    differences: List[str] = field(default_factory=list)


def replay(
    players: Sequence[PlayerState],
    seed: int,
    actions: Iterable[Action],
    rules: Optional[GameRules] = None,
    game_id: Optional[str] = None,
) -> TransitionResult:
    """
    Rebuild a game from its seed and actions.

    Returns:
        The result of the last action, or the first failure met on the way
    """
    created = StateTransitionEngine.new_game(players, rules=rules, game_id=game_id)
    if not created.ok:
        return created
    result = StateTransitionEngine.initialize_game(created.state, seed=seed)
    if not result.ok:
        return result

    events = list(created.events) + list(result.events)
    for action in actions:
        result = StateTransitionEngine.apply_action(result.state, action)
        if not result.ok:
            return result
        events.extend(result.events)

    return TransitionResult.success(
        result.state, player=result.player, round=result.round, events=tuple(events)
    )


def verify_replay(state: GameState) -> ReplayCheck:
    """
    Replay ``state`` from its seed and history and compare the outcome.

    Timestamps and event ids are ignored; everything that the rules decide
    is compared.
    """
    if state.seed is None:
        return ReplayCheck(matches=False, differences=["Game has no recorded seed"])

    result = replay(
        [PlayerState(id=p.id, name=p.name) for p in state.players],
        state.seed,
        state.history,
        rules=state.rules,
        game_id=state.id,
    )
    if not result.ok:
        return ReplayCheck(matches=False, differences=[str(result.error)])

    rebuilt = result.state
    differences = []
    for field_name in (
        "status",
        "current_turn_player_id",
        "round_number",
        "winner_id",
        "loser_id",
        "version",
        "hidden_cards",
    ):
        if getattr(rebuilt, field_name) != getattr(state, field_name):
            differences.append(f"{field_name} differs")

    for original, replayed in zip(state.players, rebuilt.players):
        if set(original.hand) != set(replayed.hand):
            differences.append(f"hand of {original.id} differs")
        if original.penalty_piles != replayed.penalty_piles:
            differences.append(f"penalty piles of {original.id} differ")
        if original.has_lost != replayed.has_lost:
            differences.append(f"loss flag of {original.id} differs")

    original_rounds = [(r.id, r.penalty_receiver_id) for r in state.rounds]
    replayed_rounds = [(r.id, r.penalty_receiver_id) for r in rebuilt.rounds]
    if original_rounds != replayed_rounds:
        differences.append("round history differs")

    return ReplayCheck(matches=not differences, differences=differences)
