"""
Tests for the Cockroach Poker state models and actions.
"""

from dataclasses import FrozenInstanceError

import pytest

from roachpoker.common.card import CreatureType
from roachpoker.errors import ErrorCode, InvalidRulesError
from roachpoker.game.actions import PlayCard, Respond, action_from_dict
from roachpoker.game.state import (
    GameRules,
    GameState,
    GameStatus,
    PlayerState,
    Response,
)
from roachpoker.game.transitions import StateTransitionEngine

P1 = "player-1"
P2 = "player-2"


class TestGameRules:
    def test_defaults(self):
        rules = GameRules.from_config()
        assert rules == GameRules()
        assert rules.win_condition == 3
        assert rules.max_passes == 3
        assert rules.turn_time_limit == 60
        assert rules.timeout_response == Response.DISBELIEVE

    def test_config_is_merged_over_defaults(self):
        rules = GameRules.from_config(
            {"win_condition": 4, "timeout_response": "believe", "unknown": True}
        )
        assert rules.win_condition == 4
        assert rules.max_passes == 3
        assert rules.timeout_response == Response.BELIEVE

    @pytest.mark.parametrize(
        "config",
        [
            {"win_condition": 1},
            {"win_condition": 7},
            {"max_passes": -1},
            {"turn_time_limit": 5},
            {"turn_time_limit": 301},
            {"timeout_response": "pass_back"},
            {"timeout_response": "shrug"},
        ],
    )
    def test_rejects_out_of_range(self, config):
        with pytest.raises(InvalidRulesError) as exc_info:
            GameRules.from_config(config)
        assert exc_info.value.code == ErrorCode.INVALID_RULES

    def test_rules_are_immutable(self):
        with pytest.raises(FrozenInstanceError):
            GameRules().win_condition = 5


class TestPlayerState:
    def test_player_state_initialization(self):
        player = PlayerState()

        assert player.id is not None
        assert player.name == "Player"
        assert player.hand == ()
        assert player.card_count == 0
        assert player.penalty_count == 0
        assert set(player.penalty_piles) == set(CreatureType)
        assert player.has_lost is False

    def test_find_card(self, game_state):
        player = game_state.get_player(P1)
        assert player.has_card("frog_1")
        assert player.find_card("frog_1").creature_type == CreatureType.FROG
        assert player.find_card("frog_2") is None


class TestGameState:
    def test_game_state_initialization(self):
        state = GameState()

        assert state.id is not None
        assert state.status == GameStatus.WAITING
        assert state.players == ()
        assert state.version == 0
        assert state.current_round is None
        assert state.active_round is None
        assert state.rounds == ()

    def test_lookups(self, game_state):
        assert game_state.player_ids == [P1, P2]
        assert game_state.current_player.id == P1
        assert game_state.opponent_of(P1).id == P2
        assert game_state.opponent_of("stranger") is None
        assert game_state.get_player("stranger") is None

    def test_dict_round_trip(self, game_state):
        state = StateTransitionEngine.play_card(
            game_state, P1, "cockroach_1", CreatureType.MOUSE, P2
        ).state
        state = StateTransitionEngine.respond_to_round(
            state, P2, Response.PASS_BACK
        ).state
        state = StateTransitionEngine.respond_to_round(
            state, P1, Response.DISBELIEVE
        ).state
        state = StateTransitionEngine.play_card(
            state, P2, "frog_2", CreatureType.BAT, P1
        ).state

        restored = GameState.from_dict(state.to_dict())
        assert restored == state

    def test_from_dict_rejects_out_of_range_rules(self, game_state):
        data = game_state.to_dict()
        data["rules"]["win_condition"] = 0
        with pytest.raises(InvalidRulesError):
            GameState.from_dict(data)

    def test_to_dict_is_json_friendly(self, game_state):
        data = game_state.to_dict()
        assert data["status"] == "in_progress"
        assert data["players"][0]["hand"] == [
            "cockroach_1",
            "frog_1",
            "bat_1",
            "mouse_1",
        ]
        assert data["players"][0]["penalty_piles"]["frog"] == []
        assert data["rules"]["timeout_response"] == "disbelieve"


class TestActions:
    @pytest.mark.parametrize(
        "action",
        [
            PlayCard(P1, "frog_1", CreatureType.BAT, P2),
            Respond(P2, Response.PASS_BACK, "game-1-round-1"),
            Respond(P2, Response.BELIEVE),
        ],
    )
    def test_action_from_dict(self, action):
        assert action_from_dict(action.to_dict()) == action

    def test_unknown_action(self):
        with pytest.raises(ValueError):
            action_from_dict({"type": "fold"})


@pytest.mark.parametrize(
    "value, expected",
    [
        ("believe", Response.BELIEVE),
        ("DISBELIEVE", Response.DISBELIEVE),
        (Response.PASS_BACK, Response.PASS_BACK),
    ],
)
def test_response_parse(value, expected):
    assert Response.parse(value) is expected


def test_response_parse_rejects_unknown():
    with pytest.raises(ValueError):
        Response.parse("fold")
