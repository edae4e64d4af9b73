"""SQLite key/value store for state that must survive restarts."""

import sqlite3
from typing import Optional


def init_db(db_path: str) -> sqlite3.Connection:
    """
    Initialize the database and create tables if they don't exist.

    Args:
        db_path: Path to the SQLite database file (":memory:" for a throwaway store).

    Returns:
        A connection to the database.
    """
    conn = sqlite3.connect(db_path)
    conn.execute("""
        CREATE TABLE IF NOT EXISTS meta (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL
        )
    """)
    conn.commit()
    return conn


def get_meta(conn: sqlite3.Connection, key: str) -> Optional[str]:
    """
    Get a stored value.

    Args:
        conn: Database connection.
        key: Slot key.

    Returns:
        The stored value, or None if the slot is empty.
    """
    cursor = conn.execute("SELECT value FROM meta WHERE key = ?", (key,))
    row = cursor.fetchone()
    return row[0] if row else None


def set_meta(conn: sqlite3.Connection, key: str, value: str) -> None:
    """
    Overwrite a stored value.

    Args:
        conn: Database connection.
        key: Slot key.
        value: New value.
    """
    conn.execute(
        "INSERT OR REPLACE INTO meta (key, value) VALUES (?, ?)",
        (key, value)
    )
    conn.commit()


def delete_meta(conn: sqlite3.Connection, key: str) -> None:
    """Empty a slot. Deleting an empty slot is a no-op."""
    conn.execute("DELETE FROM meta WHERE key = ?", (key,))
    conn.commit()
