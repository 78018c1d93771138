"""Async repository for subscriber notification preferences."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

import aiosqlite

from ..models.session import Subscriber

logger = logging.getLogger(__name__)


class SubscriberRepository:
    """Notification registry backed by SQLite."""

    def __init__(self, db: aiosqlite.Connection):
        self._db = db

    async def set_notifications(self, chat_id: int, enabled: bool) -> Subscriber:
        """Insert or update a chat's notification preference."""
        updated_at = datetime.now(timezone.utc).isoformat()
        await self._db.execute(
            """
            INSERT INTO subscribers (chat_id, notifications_enabled, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(chat_id) DO UPDATE SET
                notifications_enabled = excluded.notifications_enabled,
                updated_at = excluded.updated_at
            """,
            (chat_id, 1 if enabled else 0, updated_at),
        )
        await self._db.commit()
        logger.info(f"Notifications {'enabled' if enabled else 'disabled'} for chat {chat_id}")
        return Subscriber(chat_id=chat_id, notifications_enabled=enabled, updated_at=updated_at)

    async def get(self, chat_id: int) -> Optional[Subscriber]:
        cursor = await self._db.execute(
            "SELECT * FROM subscribers WHERE chat_id = ?", (chat_id,)
        )
        row = await cursor.fetchone()
        return self._row_to_subscriber(row) if row else None

    async def list_enabled(self) -> list[Subscriber]:
        """Subscribers that should receive status change notifications."""
        cursor = await self._db.execute(
            "SELECT * FROM subscribers WHERE notifications_enabled = 1 ORDER BY chat_id"
        )
        rows = await cursor.fetchall()
        return [self._row_to_subscriber(row) for row in rows]

    async def count(self) -> dict:
        cursor = await self._db.execute(
            "SELECT COUNT(*), COALESCE(SUM(notifications_enabled), 0) FROM subscribers"
        )
        total, enabled = await cursor.fetchone()
        return {"total": total, "enabled": enabled}

    @staticmethod
    def _row_to_subscriber(row) -> Subscriber:
        return Subscriber(
            chat_id=row["chat_id"],
            notifications_enabled=bool(row["notifications_enabled"]),
            updated_at=row["updated_at"],
        )


async def open_registry(db_path: str) -> tuple[aiosqlite.Connection, SubscriberRepository]:
    """Open the database, create the schema and return (connection, repository)."""
    from .models import initialize_db

    db = await aiosqlite.connect(db_path)
    db.row_factory = aiosqlite.Row
    await initialize_db(db)
    return db, SubscriberRepository(db)
