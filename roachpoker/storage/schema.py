"""
Database schema for the SQLite game store.

Games are stored whole as JSON next to the columns needed for lookups and for
the version check. Resolved rounds and emitted events are stored row by row so
they can be queried without decoding every game.
"""

import sqlite3

SCHEMA_SQL = """
-- Games, one row per game, state as JSON
CREATE TABLE IF NOT EXISTS games (
    game_id TEXT PRIMARY KEY,
    version INTEGER NOT NULL,
    status TEXT NOT NULL,
    winner_id TEXT,
    state_json TEXT NOT NULL,
    created_at REAL,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
);

-- Resolved rounds, copied out of the game state on save
CREATE TABLE IF NOT EXISTS rounds (
    round_id TEXT PRIMARY KEY,
    game_id TEXT NOT NULL,
    round_number INTEGER NOT NULL,
    claiming_player_id TEXT,
    responder_id TEXT,
    card_id TEXT,
    claimed_creature_type TEXT,
    actual_is_truthful BOOLEAN,
    response TEXT,
    pass_count INTEGER,
    penalty_receiver_id TEXT,
    round_json TEXT NOT NULL,
    FOREIGN KEY (game_id) REFERENCES games(game_id)
);

-- Events emitted after committed transitions
CREATE TABLE IF NOT EXISTS events (
    event_id TEXT PRIMARY KEY,
    game_id TEXT NOT NULL,
    event_type TEXT NOT NULL,
    version INTEGER,
    event_data TEXT,
    timestamp REAL
);

CREATE INDEX IF NOT EXISTS idx_games_status ON games(status);
CREATE INDEX IF NOT EXISTS idx_rounds_game ON rounds(game_id, round_number);
CREATE INDEX IF NOT EXISTS idx_events_game ON events(game_id, version);
"""


def initialize_database(conn: sqlite3.Connection) -> None:
    """
    Create all tables if they don't already exist.

    Args:
        conn: An open SQLite connection
    """
    conn.executescript(SCHEMA_SQL)
    conn.commit()
