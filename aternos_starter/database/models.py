"""SQLite database schema and initialization."""

from __future__ import annotations

import aiosqlite

SCHEMA = """
CREATE TABLE IF NOT EXISTS subscribers (
    chat_id INTEGER PRIMARY KEY,
    notifications_enabled INTEGER NOT NULL DEFAULT 0,
    updated_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_subscribers_enabled ON subscribers(notifications_enabled);
"""


async def initialize_db(db: aiosqlite.Connection):
    """Create tables and indexes if they don't exist."""
    await db.executescript(SCHEMA)
    await db.commit()
