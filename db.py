"""SQLite database for weight entries."""

import logging
import sqlite3
from contextlib import contextmanager
from datetime import date, datetime
from typing import Iterator

from config import DATABASE_PATH

log = logging.getLogger(__name__)


class StorageError(Exception):
    """The database could not be reached or a query failed."""


@contextmanager
def get_connection() -> Iterator[sqlite3.Connection]:
    """Context manager for database connections.

    Any sqlite3 error raised while connecting or inside the block is
    re-raised as StorageError.
    """
    try:
        conn = sqlite3.connect(DATABASE_PATH)
    except sqlite3.Error as e:
        raise StorageError(str(e)) from e
    conn.row_factory = sqlite3.Row
    try:
        conn.execute("PRAGMA journal_mode=WAL")  # Non-blocking reads
        conn.execute("PRAGMA foreign_keys=ON")
        yield conn
    except sqlite3.Error as e:
        raise StorageError(str(e)) from e
    finally:
        conn.close()


def init_db() -> None:
    """Initialize database with schema."""
    with get_connection() as conn:
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS users (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_key TEXT NOT NULL UNIQUE,
                birth_date TEXT,
                height_in REAL,
                created_at DATETIME DEFAULT CURRENT_TIMESTAMP
            );

            CREATE TABLE IF NOT EXISTS weights (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                weight REAL NOT NULL,
                date DATETIME NOT NULL,
                user_id INTEGER NOT NULL,
                FOREIGN KEY (user_id) REFERENCES users(id)
            );

            CREATE INDEX IF NOT EXISTS idx_weights_date
            ON weights(date);

            CREATE INDEX IF NOT EXISTS idx_weights_user_id
            ON weights(user_id);
        """)
        conn.commit()


# User functions
def ensure_user(
    user_key: str,
    birth_date: date | None = None,
    height_in: float | None = None,
) -> int:
    """Create the user if it does not exist yet. Returns the user ID.

    The insert is ignored when the key is already taken, so concurrent
    first writes end up sharing one row. Existing rows are never updated.
    """
    with get_connection() as conn:
        cursor = conn.execute(
            """
            INSERT OR IGNORE INTO users (user_key, birth_date, height_in)
            VALUES (?, ?, ?)
            """,
            (user_key, birth_date.isoformat() if birth_date else None, height_in),
        )
        if cursor.rowcount:
            log.info("Created user profile '%s'", user_key)
        row = conn.execute(
            "SELECT id FROM users WHERE user_key = ?", (user_key,)
        ).fetchone()
        conn.commit()
        return row["id"]


def get_user(user_key: str) -> dict | None:
    """Get a single user by key."""
    with get_connection() as conn:
        row = conn.execute(
            "SELECT * FROM users WHERE user_key = ?", (user_key,)
        ).fetchone()
        return dict(row) if row else None


def get_first_user() -> dict | None:
    """Get the oldest user, if any."""
    with get_connection() as conn:
        row = conn.execute(
            "SELECT * FROM users ORDER BY id LIMIT 1"
        ).fetchone()
        return dict(row) if row else None


# Weight functions
def insert_weight(user_id: int, weight: float, recorded_at: datetime) -> dict:
    """Save a weight entry and return the created record."""
    timestamp = recorded_at.isoformat(timespec="milliseconds")
    with get_connection() as conn:
        cursor = conn.execute(
            "INSERT INTO weights (weight, date, user_id) VALUES (?, ?, ?)",
            (weight, timestamp, user_id),
        )
        conn.commit()
        return {
            "id": cursor.lastrowid,
            "weight": weight,
            "date": timestamp,
            "userId": user_id,
        }


def get_weights(user_id: int | None = None) -> list[dict]:
    """Get all weight entries, oldest first, optionally filtered by user."""
    with get_connection() as conn:
        if user_id is not None:
            rows = conn.execute(
                """
                SELECT w.date, w.weight, u.birth_date, u.height_in
                FROM weights w
                JOIN users u ON w.user_id = u.id
                WHERE w.user_id = ?
                ORDER BY w.date ASC, w.id ASC
                """,
                (user_id,),
            ).fetchall()
        else:
            rows = conn.execute(
                """
                SELECT w.date, w.weight, u.birth_date, u.height_in
                FROM weights w
                JOIN users u ON w.user_id = u.id
                ORDER BY w.date ASC, w.id ASC
                """
            ).fetchall()
        return [
            {
                "date": row["date"],
                "weight": row["weight"],
                "user": {
                    "birthDate": row["birth_date"],
                    "height": row["height_in"],
                },
            }
            for row in rows
        ]
