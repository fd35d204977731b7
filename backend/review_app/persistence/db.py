"""SQLite connection, transactions + schema initialisation."""
from __future__ import annotations
import os
import sqlite3
from contextlib import contextmanager
from typing import Iterator

from review_app.core import config
from review_app.core.logging import get_logger

logger = get_logger(__name__)

_MIGRATIONS_DIR = os.path.join(os.path.dirname(__file__), "..", "..", "migrations")


def get_connection() -> sqlite3.Connection:
    conn = sqlite3.connect(
        config.DATABASE_PATH,
        timeout=config.DB_BUSY_TIMEOUT_SECONDS,
        check_same_thread=False,
    )
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    return conn


@contextmanager
def transaction() -> Iterator[sqlite3.Connection]:
    """
    Yield a connection inside a BEGIN IMMEDIATE transaction.

    The write lock is taken up front, so reads made inside the block cannot be
    invalidated by another writer before COMMIT. Any exception rolls back.
    """
    conn = get_connection()
    conn.isolation_level = None  # manage BEGIN/COMMIT ourselves
    try:
        conn.execute("BEGIN IMMEDIATE")
    except sqlite3.Error:
        conn.close()
        raise
    try:
        yield conn
        conn.execute("COMMIT")
    except BaseException:
        conn.execute("ROLLBACK")
        raise
    finally:
        conn.close()


def init_db() -> None:
    """Run all migration SQL files against the database."""
    db_dir = os.path.dirname(config.DATABASE_PATH)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)
    migration_files = sorted(f for f in os.listdir(_MIGRATIONS_DIR) if f.endswith(".sql"))
    conn = get_connection()
    try:
        for name in migration_files:
            with open(os.path.join(_MIGRATIONS_DIR, name), "r", encoding="utf-8") as f:
                conn.executescript(f.read())
        conn.commit()
    finally:
        conn.close()
    logger.info("database_initialised", path=config.DATABASE_PATH, migrations=migration_files)
    _seed_default_user()


def _seed_default_user() -> None:
    """Insert a default admin user using direct bcrypt."""
    import bcrypt
    import uuid
    from datetime import datetime, timezone

    conn = get_connection()
    try:
        count = conn.execute("SELECT COUNT(*) FROM users").fetchone()[0]
        if count == 0:
            hashed = bcrypt.hashpw("admin".encode("utf-8"), bcrypt.gensalt()).decode("utf-8")
            conn.execute(
                """
                INSERT INTO users (id, username, password_hash, role, display_name, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    str(uuid.uuid4()),
                    "admin",
                    hashed,
                    "admin",
                    "Administrator",
                    datetime.now(timezone.utc).isoformat(),
                ),
            )
            conn.commit()
            logger.info("default_admin_seeded")
    finally:
        conn.close()
