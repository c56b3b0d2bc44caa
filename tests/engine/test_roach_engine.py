"""
Tests for the Cockroach Poker engine.

This module drives the async engine against real stores and checks that
accepted actions are saved and published, and that rejected or conflicting
ones leave no trace.
"""

import asyncio
import gc
import random
from unittest.mock import MagicMock, patch

import pytest

from roachpoker.bots import RandomBot
from roachpoker.errors import ErrorCode, InvalidRulesError, TransitionResult
from roachpoker.events import EngineEventType, EventEmitter
from roachpoker.game.replay import verify_replay
from roachpoker.game.state import GameStatus, Response
from roachpoker.engine import RoachPokerEngine
from roachpoker.storage import InMemoryGameStore, SQLiteGameStore

P1 = "player-1"
P2 = "player-2"


@pytest.fixture
def engine(memory_store, emitter):
    return RoachPokerEngine(memory_store, emitter, rng=random.Random(1))


def opening_play(state):
    """Arguments for an honest first play by whoever leads."""
    leader = state.current_turn_player_id
    card = state.get_player(leader).hand[0]
    return leader, card, state.opponent_of(leader).id


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_initialize_and_shutdown(self, engine, emitter, memory_store):
        callback = MagicMock()
        emitter.on_any(callback)

        await engine.initialize()
        assert emitter._recorder is memory_store
        await engine.shutdown()
        assert emitter._recorder is None

        types = [args[0][0][0] for args in callback.call_args_list]
        assert types == ["ENGINE_INIT", "ENGINE_SHUTDOWN"]
        assert callback.call_args_list[0][0][0][1]["config"]["win_condition"] == 3

    def test_config_is_merged_over_defaults(self, memory_store):
        engine = RoachPokerEngine(memory_store, config={"max_passes": 1})
        assert engine.rules.max_passes == 1
        assert engine.rules.win_condition == 3
        assert isinstance(engine.emitter, EventEmitter)

    def test_invalid_config(self, memory_store):
        with pytest.raises(InvalidRulesError):
            RoachPokerEngine(memory_store, config={"win_condition": 10})


class TestCreateGame:
    @pytest.mark.asyncio
    async def test_create_game(self, engine, emitter, memory_store):
        await engine.initialize()
        callback = MagicMock()
        emitter.on_any(callback)

        result = await engine.create_game(P1, P2, player1_name="Alice")

        assert result.ok
        state = result.state
        assert state.status == GameStatus.IN_PROGRESS
        assert state.get_player(P1).name == "Alice"
        assert state.get_player(P2).name == P2
        assert isinstance(state.seed, int)
        assert memory_store.load_game(state.id) == state

        types = [args[0][0][0] for args in callback.call_args_list]
        assert types == ["GAME_CREATED", "GAME_STARTED", "TURN_CHANGED"]
        assert [e.event_type for e in memory_store.events] == [
            EngineEventType.GAME_CREATED,
            EngineEventType.GAME_STARTED,
            EngineEventType.TURN_CHANGED,
        ]

    @pytest.mark.asyncio
    async def test_seed_determines_the_deal(self, engine):
        first = await engine.create_game(P1, P2, game_id="a", seed=9)
        second = await engine.create_game(P1, P2, game_id="b", seed=9)
        assert first.state.players == second.state.players
        assert first.state.current_turn_player_id == second.state.current_turn_player_id

    @pytest.mark.asyncio
    async def test_duplicate_players(self, engine, memory_store):
        result = await engine.create_game(P1, P1, game_id="dup")
        assert result.code == ErrorCode.DUPLICATE_PLAYERS
        assert memory_store.load_game("dup") is None

    @pytest.mark.asyncio
    async def test_game_id_already_taken(self, engine):
        await engine.create_game(P1, P2, game_id="taken")
        result = await engine.create_game(P1, P2, game_id="taken")
        assert result.code == ErrorCode.VERSION_CONFLICT


class TestActions:
    @pytest.mark.asyncio
    async def test_play_and_respond(self, engine, memory_store):
        state = (await engine.create_game(P1, P2, game_id="g")).state
        leader, card, target = opening_play(state)

        played = await engine.play_card(
            "g", leader, card.id, card.creature_type, target, expected_version=1
        )
        assert played.ok
        assert memory_store.load_game("g").version == 2

        resolved = await engine.respond(
            "g", target, Response.DISBELIEVE, round_id=played.round.id
        )
        assert resolved.ok
        # Honest claim, wrongly disbelieved
        assert resolved.round.penalty_receiver_id == target
        stored = await engine.get_state("g")
        assert stored.version == 3
        assert stored.current_turn_player_id == target

    @pytest.mark.asyncio
    async def test_rejection_is_not_saved_or_published(self, engine, emitter):
        state = (await engine.create_game(P1, P2, game_id="g")).state
        leader, card, target = opening_play(state)
        callback = MagicMock()
        emitter.on_any(callback)

        result = await engine.play_card("g", target, card.id, card.creature_type, leader)

        assert result.code == ErrorCode.NOT_PLAYER_TURN
        assert (await engine.get_state("g")) == state
        callback.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_game(self, engine):
        result = await engine.respond("missing", P1, Response.BELIEVE)
        assert result.code == ErrorCode.GAME_NOT_FOUND

    @pytest.mark.asyncio
    async def test_expected_version_mismatch(self, engine, emitter):
        state = (await engine.create_game(P1, P2, game_id="g")).state
        leader, card, target = opening_play(state)
        conflicts = MagicMock()
        emitter.on(EngineEventType.VERSION_CONFLICT, conflicts)

        result = await engine.play_card(
            "g", leader, card.id, card.creature_type, target, expected_version=0
        )

        assert result.code == ErrorCode.VERSION_CONFLICT
        assert (await engine.get_state("g")).version == state.version
        conflicts.assert_called_once()
        assert conflicts.call_args[0][0]["game_id"] == "g"

    @pytest.mark.asyncio
    async def test_store_conflict_is_not_published(self, engine, memory_store, emitter):
        state = (await engine.create_game(P1, P2, game_id="g")).state
        leader, card, target = opening_play(state)
        started = MagicMock()
        emitter.on(EngineEventType.ROUND_STARTED, started)

        conflict = TransitionResult.failure(ErrorCode.VERSION_CONFLICT, "raced")
        with patch.object(memory_store, "save_game", return_value=conflict):
            result = await engine.play_card(
                "g", leader, card.id, card.creature_type, target
            )

        assert result.code == ErrorCode.VERSION_CONFLICT
        started.assert_not_called()

    @pytest.mark.asyncio
    async def test_concurrent_submissions_with_same_version(self, engine):
        state = (await engine.create_game(P1, P2, game_id="g")).state
        leader = state.current_turn_player_id
        target = state.opponent_of(leader).id
        first, second = state.get_player(leader).hand[:2]

        results = await asyncio.gather(
            engine.play_card(
                "g", leader, first.id, first.creature_type, target, expected_version=1
            ),
            engine.play_card(
                "g", leader, second.id, second.creature_type, target, expected_version=1
            ),
        )

        codes = sorted(str(r.code) for r in results)
        assert codes == ["None", "VERSION_CONFLICT"]
        assert (await engine.get_state("g")).version == 2

    @pytest.mark.asyncio
    async def test_validate(self, engine):
        await engine.create_game(P1, P2, game_id="g")
        assert (await engine.validate("g")).valid
        with pytest.raises(KeyError):
            await engine.validate("missing")


class TestTimeout:
    @pytest.mark.asyncio
    async def test_timeout_applies_configured_response(self, memory_store, emitter):
        engine = RoachPokerEngine(
            memory_store, emitter, config={"timeout_response": "believe"}
        )
        state = (await engine.create_game(P1, P2, game_id="g")).state
        leader, card, target = opening_play(state)
        await engine.play_card("g", leader, card.id, card.creature_type, target)
        timeouts = MagicMock()
        emitter.on(EngineEventType.PLAYER_TIMEOUT, timeouts)

        result = await engine.timeout_turn("g")

        assert result.ok
        assert result.round.responder_id == target
        assert result.round.response == Response.BELIEVE
        # Honest claim believed: the claimant takes it
        assert result.round.penalty_receiver_id == leader
        payload = timeouts.call_args[0][0]
        assert payload["player_id"] == target
        assert payload["response"] == "believe"

    @pytest.mark.asyncio
    async def test_timeout_without_round(self, engine):
        await engine.create_game(P1, P2, game_id="g")
        result = await engine.timeout_turn("g")
        assert result.code == ErrorCode.ROUND_NOT_ACTIVE

    @pytest.mark.asyncio
    async def test_late_timer_is_rejected(self, engine):
        state = (await engine.create_game(P1, P2, game_id="g")).state
        leader, card, target = opening_play(state)
        played = await engine.play_card(
            "g", leader, card.id, card.creature_type, target
        )
        await engine.respond("g", target, Response.PASS_BACK)

        result = await engine.timeout_turn("g", expected_version=played.state.version)

        assert result.code == ErrorCode.VERSION_CONFLICT

    @pytest.mark.asyncio
    async def test_timeout_of_unknown_game(self, engine):
        result = await engine.timeout_turn("missing")
        assert result.code == ErrorCode.GAME_NOT_FOUND


class TestGameLocks:
    @pytest.mark.asyncio
    async def test_unknown_ids_leave_no_locks(self, engine):
        for i in range(50):
            result = await engine.respond(f"missing-{i}", P1, Response.BELIEVE)
            assert result.code == ErrorCode.GAME_NOT_FOUND
        await engine.get_state("missing-0")

        gc.collect()
        assert len(engine._locks) == 0

    @pytest.mark.asyncio
    async def test_lock_released_after_game_ends(self, engine):
        state = (await engine.create_game(P1, P2, game_id="g")).state
        bots = [RandomBot(pid, random.Random(i)) for i, pid in enumerate((P1, P2))]
        while state.is_in_progress:
            action = next(a for a in (bot.act(state) for bot in bots) if a)
            state = (await engine.submit("g", action, state.version)).state

        gc.collect()
        assert "g" not in engine._locks

    @pytest.mark.asyncio
    async def test_waiting_callers_share_one_lock(self, engine):
        await engine.create_game(P1, P2, game_id="g")
        lock = engine._lock_for("g")
        async with lock:
            pending = asyncio.ensure_future(engine.get_state("g"))
            await asyncio.sleep(0)
            assert engine._lock_for("g") is lock
            assert not pending.done()
        assert (await pending).id == "g"


@pytest.mark.asyncio
async def test_bot_game_through_sqlite_store():
    store = SQLiteGameStore()
    engine = RoachPokerEngine(store, rng=random.Random(4))
    await engine.initialize()
    ended = MagicMock()
    engine.emitter.on(EngineEventType.GAME_ENDED, ended)

    state = (await engine.create_game(P1, P2)).state
    bots = [RandomBot(pid, random.Random(i)) for i, pid in enumerate((P1, P2))]
    while state.is_in_progress:
        action = next(a for a in (bot.act(state) for bot in bots) if a)
        result = await engine.submit(state.id, action, state.version)
        assert result.ok, result.error
        state = result.state

    await engine.shutdown()
    stored = store.load_game(state.id)
    assert stored.is_ended
    assert stored == state
    assert verify_replay(stored).matches
    ended.assert_called_once()
    assert store.load_events(state.id)[-1]["event_type"] == "GAME_ENDED"
    assert len(store.load_rounds(state.id)) == len(state.rounds)
    store.close()
