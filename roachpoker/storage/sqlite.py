"""
SQLite storage for Cockroach Poker games.

This module provides a GameRepository backed by SQLite. The version check is
done by the database itself: an update only matches the row if the stored
version is still the one the caller read.
"""

import json
import sqlite3
import threading
from typing import List, Optional

from roachpoker.errors import TransitionResult
from roachpoker.events import EngineEvent
from roachpoker.game.state import GameState, RoundState
from roachpoker.storage.base import GameRepository, version_conflict
from roachpoker.storage.schema import initialize_database


class SQLiteGameStore(GameRepository):
    """
    Store and retrieve games from SQLite.
    """

    def __init__(self, db_path: Optional[str] = None):
        """
        Initialize the SQLite game store and create its tables.

        Args:
            db_path: Optional path to the database file. If None, uses an in-memory database.
        """
        self.db_path = db_path
        self.conn = sqlite3.connect(
            db_path if db_path else ":memory:", check_same_thread=False
        )
        self.conn.row_factory = sqlite3.Row
        self._lock = threading.RLock()
        initialize_database(self.conn)

    def close(self) -> None:
        """Close the database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None

    def load_game(self, game_id: str) -> Optional[GameState]:
        with self._lock:
            row = self.conn.execute(
                "SELECT state_json FROM games WHERE game_id = ?", (game_id,)
            ).fetchone()
        if row is None:
            return None
        return GameState.from_dict(json.loads(row["state_json"]))

    def save_game(
        self, state: GameState, expected_version: Optional[int]
    ) -> TransitionResult:
        state_json = json.dumps(state.to_dict())
        with self._lock:
            with self.conn:
                if expected_version is None:
                    try:
                        self.conn.execute(
                            """
                            INSERT INTO games (
                                game_id, version, status, winner_id, state_json, created_at
                            ) VALUES (?, ?, ?, ?, ?, ?)
                            """,
                            (
                                state.id,
                                state.version,
                                state.status.value,
                                state.winner_id,
                                state_json,
                                state.created_at,
                            ),
                        )
                    except sqlite3.IntegrityError:
                        return version_conflict(
                            state.id, None, self._stored_version(state.id)
                        )
                else:
                    cursor = self.conn.execute(
                        """
                        UPDATE games
                        SET version = ?, status = ?, winner_id = ?, state_json = ?,
                            updated_at = CURRENT_TIMESTAMP
                        WHERE game_id = ? AND version = ?
                        """,
                        (
                            state.version,
                            state.status.value,
                            state.winner_id,
                            state_json,
                            state.id,
                            expected_version,
                        ),
                    )
                    if cursor.rowcount == 0:
                        return version_conflict(
                            state.id, expected_version, self._stored_version(state.id)
                        )

                self._store_rounds(state)
        return TransitionResult.success(state)

    def _stored_version(self, game_id: str) -> Optional[int]:
        row = self.conn.execute(
            "SELECT version FROM games WHERE game_id = ?", (game_id,)
        ).fetchone()
        return row["version"] if row else None

    def _store_rounds(self, state: GameState) -> None:
        self.conn.executemany(
            """
            INSERT OR IGNORE INTO rounds (
                round_id, game_id, round_number, claiming_player_id, responder_id,
                card_id, claimed_creature_type, actual_is_truthful, response,
                pass_count, penalty_receiver_id, round_json
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [
                (
                    r.id,
                    state.id,
                    r.round_number,
                    r.claiming_player_id,
                    r.responder_id,
                    r.card_in_play.id,
                    r.claimed_creature_type.value,
                    r.actual_is_truthful,
                    r.response.value if r.response else None,
                    r.pass_count,
                    r.penalty_receiver_id,
                    json.dumps(r.to_dict()),
                )
                for r in state.rounds
            ],
        )

    def load_rounds(self, game_id: str) -> List[RoundState]:
        with self._lock:
            rows = self.conn.execute(
                "SELECT round_json FROM rounds WHERE game_id = ? ORDER BY round_number",
                (game_id,),
            ).fetchall()
        return [RoundState.from_dict(json.loads(row["round_json"])) for row in rows]

    def record_event(self, event: EngineEvent) -> None:
        """
        Store an emitted event.

        Args:
            event: The event to store
        """
        with self._lock:
            with self.conn:
                self.conn.execute(
                    """
                    INSERT INTO events (
                        event_id, game_id, event_type, version, event_data, timestamp
                    ) VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        event.event_id,
                        event.game_id,
                        event.event_type.name,
                        event.version,
                        json.dumps(event.data),
                        event.timestamp,
                    ),
                )

    def load_events(self, game_id: str) -> List[dict]:
        """
        Get the stored events of a game in the order they were emitted.

        Returns:
            A list of event dictionaries
        """
        with self._lock:
            rows = self.conn.execute(
                """
                SELECT event_id, event_type, version, event_data, timestamp
                FROM events WHERE game_id = ? ORDER BY rowid
                """,
                (game_id,),
            ).fetchall()
        return [
            {
                "event_id": row["event_id"],
                "event_type": row["event_type"],
                "game_id": game_id,
                "version": row["version"],
                "timestamp": row["timestamp"],
                "data": json.loads(row["event_data"]),
            }
            for row in rows
        ]

    def list_games(self, status: Optional[str] = None) -> List[str]:
        """IDs of stored games, optionally filtered by status."""
        with self._lock:
            if status is None:
                rows = self.conn.execute(
                    "SELECT game_id FROM games ORDER BY created_at"
                ).fetchall()
            else:
                rows = self.conn.execute(
                    "SELECT game_id FROM games WHERE status = ? ORDER BY created_at",
                    (status,),
                ).fetchall()
        return [row["game_id"] for row in rows]
