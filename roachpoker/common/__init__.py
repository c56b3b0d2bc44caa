"""
Card and deck primitives shared by the game modules.
"""

from roachpoker.common.card import Card, CreatureType, CARDS_PER_CREATURE
from roachpoker.common.deck import (
    Deck,
    DealResult,
    build_deck,
    shuffle,
    deal,
    TOTAL_CARDS,
    CARDS_PER_PLAYER,
    CARDS_HIDDEN,
)

__all__ = [
    "Card",
    "CreatureType",
    "CARDS_PER_CREATURE",
    "Deck",
    "DealResult",
    "build_deck",
    "shuffle",
    "deal",
    "TOTAL_CARDS",
    "CARDS_PER_PLAYER",
    "CARDS_HIDDEN",
]
