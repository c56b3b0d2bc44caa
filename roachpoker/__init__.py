"""
Rules engine for the two-player bluffing card game Cockroach Poker.
"""

__version__ = "0.1.0"
