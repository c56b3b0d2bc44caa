"""
Persistence for the roachpoker engine.

This package provides the repository interface the engine depends on and two
implementations: an in-memory store and a SQLite store.
"""

from roachpoker.storage.base import GameRepository
from roachpoker.storage.memory import InMemoryGameStore
from roachpoker.storage.sqlite import SQLiteGameStore

__all__ = ["GameRepository", "InMemoryGameStore", "SQLiteGameStore"]
