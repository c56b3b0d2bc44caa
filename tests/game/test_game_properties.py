"""
Whole-game property tests.

Random bots play complete games from many seeds while every transition is
checked against the rules that must hold at each step.
"""

import random

import pytest

from roachpoker.bots import RandomBot
from roachpoker.common.card import CreatureType
from roachpoker.common.deck import TOTAL_CARDS
from roachpoker.game.actions import PlayCard
from roachpoker.game.state import GameRules, PlayerState, Response
from roachpoker.game.transitions import StateTransitionEngine
from roachpoker.game.validation import validate_game_state

P1 = "player-1"
P2 = "player-2"


def pile_sizes(state):
    return {
        (player.id, creature): len(player.pile(creature))
        for player in state.players
        for creature in CreatureType
    }


def play_out(seed, rules=None, pass_rate=0.3):
    """Play one game with bots and yield (before, action, result) for each move."""
    state = StateTransitionEngine.new_game(
        [PlayerState(id=P1), PlayerState(id=P2)], rules=rules, game_id=f"g{seed}"
    ).state
    state = StateTransitionEngine.initialize_game(state, seed=seed).state
    rng = random.Random(seed)
    bots = [RandomBot(pid, rng, pass_rate=pass_rate) for pid in (P1, P2)]

    while state.is_in_progress:
        action = next(a for a in (bot.act(state) for bot in bots) if a)
        result = StateTransitionEngine.apply_action(state, action)
        assert result.ok, result.error
        yield state, action, result
        state = result.state


@pytest.mark.parametrize("seed", range(25))
def test_game_invariants_hold_at_every_step(seed):
    moves = 0
    for before, action, result in play_out(seed):
        after = result.state
        moves += 1

        assert after.version == before.version + 1
        report = validate_game_state(after)
        assert report.valid, report.errors

        # Turn alternation
        if after.is_in_progress:
            if isinstance(action, PlayCard):
                assert after.current_turn_player_id == action.target_player_id
            elif action.response == Response.PASS_BACK:
                assert (
                    after.current_turn_player_id
                    == before.active_round.claiming_player_id
                )
            else:
                assert after.current_turn_player_id == result.round.penalty_receiver_id

        # Penalty monotonicity
        old, new = pile_sizes(before), pile_sizes(after)
        assert all(new[key] >= old[key] for key in old)
        assert sum(new.values()) <= TOTAL_CARDS

        # Loss exactness
        for player in after.players:
            was_lost = before.get_player(player.id).has_lost
            reached = max(len(player.pile(c)) for c in CreatureType) >= 3
            assert not was_lost
            if player.has_lost and player.losing_creature_type is not None:
                assert reached
                assert len(player.pile(player.losing_creature_type)) >= 3
            if reached:
                assert player.has_lost
                assert after.is_ended

    assert after.is_ended
    assert after.winner_id in (P1, P2)
    assert after.winner_id != after.loser_id
    assert moves > 0


@pytest.mark.parametrize("seed", range(10))
def test_pass_backs_stay_bounded(seed):
    rules = GameRules(max_passes=2)
    for _, _, result in play_out(seed, rules=rules, pass_rate=0.9):
        if result.round is not None:
            assert result.round.pass_count <= 2


def test_same_seed_same_game():
    first = [result.state.to_dict()["players"] for _, _, result in play_out(3)]
    second = [result.state.to_dict()["players"] for _, _, result in play_out(3)]
    assert first == second
