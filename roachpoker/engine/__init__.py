"""
Game engines for roachpoker.
"""

from roachpoker.engine.base import BaseEngine
from roachpoker.engine.roach import RoachPokerEngine

__all__ = ["BaseEngine", "RoachPokerEngine"]
