"""SQLite database initialization and connection management.

Three tables back the engine:
- seed_records: one immutable row per session
- topic_research: advisory keyword cache, one row per session, upserted
- document_jobs: finalized briefs handed to the document generator
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from .logger import LOGGER


SCHEMA_VERSION = 1


def get_db_path() -> Path:
    """Get default database path from config."""
    from .config import AppConfig
    return AppConfig.get().paths.db_path


def init_db(db_path: Optional[Path] = None) -> None:
    """
    Initialize database schema if tables don't exist.

    Safe to call multiple times - uses CREATE TABLE IF NOT EXISTS.
    """
    db_path = db_path or get_db_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    try:
        cursor = conn.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS seed_records (
                session_id TEXT PRIMARY KEY,
                topic TEXT NOT NULL,
                created_at TEXT NOT NULL
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS topic_research (
                session_id TEXT PRIMARY KEY,
                payload TEXT NOT NULL,
                created_at TEXT NOT NULL,
                FOREIGN KEY (session_id) REFERENCES seed_records(session_id) ON DELETE CASCADE
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS document_jobs (
                job_id TEXT PRIMARY KEY,
                session_id TEXT NOT NULL,
                title TEXT NOT NULL,
                keywords TEXT NOT NULL,
                target_length INTEGER NOT NULL,
                article_type TEXT NOT NULL,
                request_text TEXT NOT NULL,
                status TEXT NOT NULL,
                created_at TEXT NOT NULL,
                FOREIGN KEY (session_id) REFERENCES seed_records(session_id) ON DELETE CASCADE
            )
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_document_jobs_session
            ON document_jobs(session_id)
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS schema_info (
                key TEXT PRIMARY KEY,
                value TEXT
            )
        """)
        cursor.execute("""
            INSERT OR REPLACE INTO schema_info (key, value)
            VALUES ('version', ?)
        """, (str(SCHEMA_VERSION),))

        conn.commit()
        LOGGER.debug("Database initialized: %s (schema v%d)", db_path, SCHEMA_VERSION)
    finally:
        conn.close()


def get_connection(db_path: Optional[Path] = None) -> sqlite3.Connection:
    """
    Get a database connection with WAL mode, foreign keys and row access by name.

    Caller is responsible for closing the connection.
    """
    db_path = db_path or get_db_path()
    conn = sqlite3.connect(db_path, timeout=30.0)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    conn.execute("PRAGMA journal_mode = WAL")
    return conn


@contextmanager
def db_connection(db_path: Optional[Path] = None) -> Generator[sqlite3.Connection, None, None]:
    """
    Context manager for database connections.

    Automatically commits on success, rolls back on exception.
    """
    conn = get_connection(db_path)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


__all__ = ["SCHEMA_VERSION", "db_connection", "get_connection", "get_db_path", "init_db"]
