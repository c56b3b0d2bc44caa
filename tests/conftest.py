"""
Pytest configuration for roachpoker tests.

This module contains fixtures that build games with known hands and piles, so
tests can drive rounds without depending on a shuffle.
"""

import pytest

from roachpoker.common.card import Card, CreatureType
from roachpoker.common.deck import Deck
from roachpoker.events import EventEmitter
from roachpoker.game.state import (
    GameRules,
    GameState,
    GameStatus,
    PlayerState,
    empty_penalty_piles,
)
from roachpoker.storage import InMemoryGameStore

P1 = "player-1"
P2 = "player-2"


def _cards(card_ids):
    return tuple(Card.from_id(card_id) for card_id in card_ids)


def _piles(piles):
    result = empty_penalty_piles()
    for creature, card_ids in (piles or {}).items():
        result[CreatureType.parse(creature)] = _cards(card_ids)
    return result


def build_state(
    hand1,
    hand2,
    piles1=None,
    piles2=None,
    turn=P1,
    rules=None,
    game_id="game-1",
    version=1,
    status=GameStatus.IN_PROGRESS,
):
    """
    Build a game with the given hands and penalty piles.

    Every card not placed in a hand or pile is hidden, so the game still
    accounts for the whole deck.
    """
    players = (
        PlayerState(
            id=P1,
            name="Alice",
            hand=_cards(hand1),
            penalty_piles=_piles(piles1),
            turn_position=0,
        ),
        PlayerState(
            id=P2,
            name="Bob",
            hand=_cards(hand2),
            penalty_piles=_piles(piles2),
            turn_position=1,
        ),
    )
    used = set(hand1) | set(hand2)
    for piles in (piles1 or {}, piles2 or {}):
        for card_ids in piles.values():
            used |= set(card_ids)
    hidden = tuple(card for card in Deck().cards if card.id not in used)
    return GameState(
        id=game_id,
        status=status,
        players=players,
        current_turn_player_id=turn if status == GameStatus.IN_PROGRESS else None,
        hidden_cards=hidden,
        version=version,
        rules=rules or GameRules(),
        seed=None,
    )


@pytest.fixture
def make_state():
    """Factory for games with known hands."""
    return build_state


@pytest.fixture
def game_state():
    """A fresh game where player 1 leads and both hold a few known cards."""
    return build_state(
        hand1=["cockroach_1", "frog_1", "bat_1", "mouse_1"],
        hand2=["cockroach_2", "frog_2", "bat_2", "mouse_2"],
    )


@pytest.fixture
def emitter():
    return EventEmitter()


@pytest.fixture
def memory_store():
    store = InMemoryGameStore()
    yield store
    store.close()
