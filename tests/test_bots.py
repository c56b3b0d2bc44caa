import random

import pytest

from roachpoker.bots import RandomBot
from roachpoker.common.card import CreatureType
from roachpoker.game.actions import PlayCard, Respond
from roachpoker.game.state import GameRules, GameStatus, Response
from roachpoker.game.transitions import StateTransitionEngine

P1 = "player-1"
P2 = "player-2"


def test_leader_plays_a_card_from_hand(game_state):
    bot = RandomBot(P1, random.Random(0))
    action = bot.act(game_state)

    assert isinstance(action, PlayCard)
    assert game_state.get_player(P1).has_card(action.card_id)
    assert action.target_player_id == P2
    assert StateTransitionEngine.apply_action(game_state, action).ok


def test_honest_bot_never_bluffs(game_state):
    bot = RandomBot(P1, random.Random(0), bluff_rate=0.0)
    for _ in range(20):
        action = bot.choose_play(game_state)
        card = game_state.get_player(P1).find_card(action.card_id)
        assert action.claim == card.creature_type


def test_liar_always_bluffs(game_state):
    bot = RandomBot(P1, random.Random(0), bluff_rate=1.0)
    for _ in range(20):
        action = bot.choose_play(game_state)
        card = game_state.get_player(P1).find_card(action.card_id)
        assert action.claim != card.creature_type
        assert isinstance(action.claim, CreatureType)


def test_idle_player_waits(game_state):
    assert RandomBot(P2, random.Random(0)).act(game_state) is None


def test_target_responds(game_state):
    state = StateTransitionEngine.play_card(
        game_state, P1, "frog_1", CreatureType.FROG, P2
    ).state
    action = RandomBot(P2, random.Random(0)).act(state)

    assert isinstance(action, Respond)
    assert action.round_id == state.active_round.id
    assert RandomBot(P1, random.Random(0)).act(state) is None


def test_no_pass_once_limit_reached(make_state):
    state = make_state(["frog_1"], ["frog_2"], rules=GameRules(max_passes=0))
    state = StateTransitionEngine.play_card(
        state, P1, "frog_1", CreatureType.FROG, P2
    ).state
    bot = RandomBot(P2, random.Random(0), pass_rate=1.0)
    for _ in range(20):
        assert bot.choose_response(state).response != Response.PASS_BACK


def test_ended_game_has_no_moves(make_state):
    state = make_state(["frog_1"], ["frog_2"], status=GameStatus.ENDED)
    assert RandomBot(P1).act(state) is None


@pytest.mark.parametrize("rate", [-0.1, 1.5])
def test_rates_must_be_probabilities(rate):
    with pytest.raises(ValueError):
        RandomBot(P1, bluff_rate=rate)
