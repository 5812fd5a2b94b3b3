from __future__ import annotations

import logging

from ...errors import StorageReadError, StorageWriteError
from ..models import ConsentStatus
from .utils import SQLITE_ERRORS, _clean_id, _sqlite_memory_connection

logger = logging.getLogger("chat_memory_bot")


class MemoryConsentMixin:
    async def get_consent_status(self, user_id: str) -> ConsentStatus | None:
        user_key = _clean_id(user_id)
        try:
            async with _sqlite_memory_connection(self.db_path) as db:
                async with db.execute(
                    "SELECT status FROM users WHERE user_id = ?",
                    (user_key,),
                ) as cursor:
                    row = await cursor.fetchone()
        except SQLITE_ERRORS as exc:
            raise StorageReadError(f"Failed to read consent for user {user_key}") from exc
        if row is None:
            return None
        return ConsentStatus.parse(str(row[0]))

    async def has_agreed(self, user_id: str) -> bool:
        try:
            status = await self.get_consent_status(user_id)
        except StorageReadError as exc:
            logger.warning("Consent check failed, treating user=%s as not agreed: %s", user_id, exc)
            return False
        return status is ConsentStatus.AGREED

    async def set_consent_status(
        self,
        user_id: str,
        status: ConsentStatus | str,
        username: str | None = None,
    ) -> None:
        user_key = _clean_id(user_id)
        status_value = ConsentStatus.parse(status).value
        try:
            async with _sqlite_memory_connection(self.db_path) as db:
                await db.execute(
                    """
                    INSERT INTO users (user_id, username, status)
                    VALUES (?, ?, ?)
                    ON CONFLICT(user_id) DO UPDATE SET
                        status = excluded.status,
                        username = COALESCE(excluded.username, users.username)
                    """,
                    (user_key, username, status_value),
                )
                await db.commit()
        except SQLITE_ERRORS as exc:
            raise StorageWriteError(f"Failed to store consent for user {user_key}") from exc

    async def record_user_guild(self, user_id: str, guild_id: str) -> None:
        user_key = _clean_id(user_id)
        guild_key = _clean_id(guild_id)
        try:
            async with _sqlite_memory_connection(self.db_path) as db:
                await db.execute(
                    """
                    INSERT INTO user_guilds (user_id, guild_id)
                    VALUES (?, ?)
                    ON CONFLICT(user_id, guild_id) DO NOTHING
                    """,
                    (user_key, guild_key),
                )
                await db.commit()
        except SQLITE_ERRORS as exc:
            raise StorageWriteError(f"Failed to record guild {guild_key} for user {user_key}") from exc

    async def list_user_guilds(self, user_id: str) -> list[str]:
        user_key = _clean_id(user_id)
        try:
            async with _sqlite_memory_connection(self.db_path) as db:
                async with db.execute(
                    "SELECT guild_id FROM user_guilds WHERE user_id = ? ORDER BY guild_id",
                    (user_key,),
                ) as cursor:
                    rows = await cursor.fetchall()
        except SQLITE_ERRORS as exc:
            raise StorageReadError(f"Failed to list guilds for user {user_key}") from exc
        return [str(row[0]) for row in rows]
