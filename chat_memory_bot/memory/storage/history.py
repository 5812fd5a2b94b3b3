from __future__ import annotations

import logging

import aiosqlite

from ...errors import StorageReadError, StorageWriteError
from ..models import ConversationTurn, HistoryReadResult, TurnRole
from .utils import SQLITE_ERRORS, _clean_id, _row_to_turn, _sqlite_memory_connection

logger = logging.getLogger("chat_memory_bot")


class MemoryHistoryMixin:
    async def append_turn(self, user_id: str, role: TurnRole | str, message: str) -> int:
        user_key = _clean_id(user_id)
        role_value = TurnRole.parse(role).value
        try:
            async with _sqlite_memory_connection(self.db_path) as db:
                cursor = await db.execute(
                    """
                    INSERT INTO conversation_history (user_id, role, message)
                    VALUES (?, ?, ?)
                    """,
                    (user_key, role_value, str(message)),
                )
                await db.commit()
                return int(cursor.lastrowid)
        except SQLITE_ERRORS as exc:
            raise StorageWriteError(f"Failed to append {role_value} turn for user {user_key}") from exc

    async def fetch_recent_history(self, user_id: str, limit: int = 10) -> HistoryReadResult:
        user_key = _clean_id(user_id)
        window = max(0, int(limit))
        if window == 0:
            return HistoryReadResult(turns=[])
        try:
            async with _sqlite_memory_connection(self.db_path) as db:
                db.row_factory = aiosqlite.Row
                async with db.execute(
                    """
                    SELECT id, role, message, timestamp
                    FROM conversation_history
                    WHERE user_id = ?
                    ORDER BY timestamp DESC, id DESC
                    LIMIT ?
                    """,
                    (user_key, window),
                ) as cursor:
                    rows = await cursor.fetchall()
        except SQLITE_ERRORS as exc:
            error = StorageReadError(f"Failed to read history for user {user_key}")
            error.__cause__ = exc
            return HistoryReadResult(turns=[], error=error)

        ordered = list(reversed(rows))
        return HistoryReadResult(turns=[_row_to_turn(user_key, row) for row in ordered])

    async def get_recent_history(self, user_id: str, limit: int = 10) -> list[ConversationTurn]:
        result = await self.fetch_recent_history(user_id, limit)
        if not result.ok:
            logger.warning("History read failed, continuing with empty history: %s", result.error)
        return result.turns

    async def count_turns(self, user_id: str) -> int:
        user_key = _clean_id(user_id)
        try:
            async with _sqlite_memory_connection(self.db_path) as db:
                async with db.execute(
                    "SELECT COUNT(*) FROM conversation_history WHERE user_id = ?",
                    (user_key,),
                ) as cursor:
                    row = await cursor.fetchone()
        except SQLITE_ERRORS as exc:
            raise StorageReadError(f"Failed to count turns for user {user_key}") from exc
        return int(row[0]) if row else 0

    async def purge_history(self, user_id: str) -> int:
        user_key = _clean_id(user_id)
        try:
            async with _sqlite_memory_connection(self.db_path) as db:
                cursor = await db.execute(
                    "DELETE FROM conversation_history WHERE user_id = ?",
                    (user_key,),
                )
                await db.commit()
                deleted = max(0, int(cursor.rowcount))
        except SQLITE_ERRORS as exc:
            raise StorageWriteError(f"Failed to purge history for user {user_key}") from exc
        logger.info("Purged %s history turns for user=%s", deleted, user_key)
        return deleted
