"""SQLite database helper for users and impacts.

Only used when DATA_PROVIDER=sqlite. Otherwise, simple in-memory stores are used.

PySecure-4-Minimal:
- Use parameterized queries.
- Ensure connections are closed via context managers.
- Avoid logging sensitive data.
- Create DB directory if missing; initialize schema on first connect.
"""
from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterable, Optional

from impact_tracker.core.config import get_settings


def _ensure_schema(conn: sqlite3.Connection) -> None:
    """Create the tables used by this backend.

    List-valued impact fields (craft_skills, program_tags, stakeholders,
    evidence_links) are stored as JSON arrays in TEXT columns.
    """
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS auth_users (
            id TEXT PRIMARY KEY,
            email TEXT UNIQUE NOT NULL,
            full_name TEXT,
            password_hash TEXT NOT NULL,
            job_family TEXT,
            level TEXT,
            created_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS impacts (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            title TEXT NOT NULL,
            description TEXT NOT NULL DEFAULT '',
            job_family TEXT NOT NULL,
            impact_category TEXT NOT NULL,
            craft_skills TEXT NOT NULL DEFAULT '[]',
            expectation_id TEXT,
            quantified_value REAL,
            quantified_unit TEXT,
            date TEXT NOT NULL,
            program_tags TEXT NOT NULL DEFAULT '[]',
            stakeholders TEXT NOT NULL DEFAULT '[]',
            evidence_links TEXT NOT NULL DEFAULT '[]',
            source TEXT NOT NULL DEFAULT 'web',
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            FOREIGN KEY(user_id) REFERENCES auth_users(id)
        );
        CREATE INDEX IF NOT EXISTS idx_impacts_user_date ON impacts(user_id, date);
        """
    )
    conn.commit()


@contextmanager
def get_conn():
    settings = get_settings()
    db_path = Path(settings.db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    # Use check_same_thread=False to prevent thread-affinity errors under TestClient or background tasks.
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    try:
        _ensure_schema(conn)
        yield conn
    finally:
        conn.close()


def fetch_all(conn: sqlite3.Connection, query: str, params: Iterable[Any]) -> list[dict[str, Any]]:
    conn.row_factory = sqlite3.Row
    cur = conn.execute(query, list(params))
    rows = cur.fetchall()
    return [dict(r) for r in rows]


def fetch_one(conn: sqlite3.Connection, query: str, params: Iterable[Any]) -> Optional[dict[str, Any]]:
    conn.row_factory = sqlite3.Row
    cur = conn.execute(query, list(params))
    row = cur.fetchone()
    return dict(row) if row else None


def execute(conn: sqlite3.Connection, query: str, params: Iterable[Any]) -> int:
    """Run a write statement and commit; returns the affected row count."""
    cur = conn.execute(query, list(params))
    conn.commit()
    return cur.rowcount


# PUBLIC_INTERFACE
def reset_tables() -> None:
    """Delete all rows from impacts and auth_users for test isolation."""
    with get_conn() as conn:
        # Clear dependent tables first due to foreign keys
        conn.execute("DELETE FROM impacts")
        conn.execute("DELETE FROM auth_users")
        conn.commit()


# --- Auth-specific helpers using auth_users table ---

def auth_get_user_by_email(conn: sqlite3.Connection, email_norm: str) -> Optional[dict[str, Any]]:
    """Return user record from auth_users by email."""
    return fetch_one(conn, "SELECT * FROM auth_users WHERE email = ?", (email_norm,))


def auth_get_user_by_id(conn: sqlite3.Connection, user_id: str) -> Optional[dict[str, Any]]:
    """Return user record from auth_users by id."""
    return fetch_one(conn, "SELECT * FROM auth_users WHERE id = ?", (user_id,))


def auth_insert_user(conn: sqlite3.Connection, rec: dict[str, Any]) -> None:
    """Insert a new user into auth_users."""
    execute(
        conn,
        "INSERT INTO auth_users (id, email, full_name, password_hash, job_family, level, created_at) "
        "VALUES (?, ?, ?, ?, ?, ?, ?)",
        (
            rec["id"], rec["email"], rec.get("full_name"), rec["password_hash"],
            rec.get("job_family"), rec.get("level"), rec["created_at"],
        ),
    )


def auth_update_preferences(conn: sqlite3.Connection, user_id: str, job_family: Optional[str], level: Optional[str]) -> None:
    """Store the user's rubric selection."""
    execute(
        conn,
        "UPDATE auth_users SET job_family = ?, level = ? WHERE id = ?",
        (job_family, level, user_id),
    )
