from __future__ import annotations

import asyncio
import logging

import asyncpg

from ..errors import StorageReadError, StorageWriteError
from .models import ConsentStatus, ConversationTurn, HistoryReadResult, TurnRole
from .storage.utils import _clean_id, _row_to_turn

logger = logging.getLogger("chat_memory_bot")

_POSTGRES_ERRORS: tuple[type[BaseException], ...] = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
    asyncio.TimeoutError,
)


class PostgresMemoryStore:
    """Postgres-backed memory store implementing the same API as MemoryStore."""

    SCHEMA_VERSION = 1
    backend_name = "postgres"

    def __init__(self, dsn: str) -> None:
        self.dsn = dsn.strip()
        if not self.dsn:
            raise ValueError("MEMORY_POSTGRES_DSN cannot be empty")
        self._pool: asyncpg.Pool | None = None
        self._init_lock = asyncio.Lock()
        self._initialized = False

    async def _ensure_pool(self) -> asyncpg.Pool:
        if self._pool is None:
            self._pool = await asyncpg.create_pool(
                dsn=self.dsn,
                min_size=1,
                max_size=6,
                command_timeout=30.0,
            )
        return self._pool

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
        self._initialized = False

    async def ping(self) -> None:
        try:
            pool = await self._ensure_pool()
            async with pool.acquire() as conn:
                await conn.execute("SELECT 1")
        except _POSTGRES_ERRORS as exc:
            raise StorageReadError("Postgres store is unreachable") from exc

    async def init(self) -> None:
        async with self._init_lock:
            if self._initialized:
                return
            pool = await self._ensure_pool()
            async with pool.acquire() as conn:
                async with conn.transaction():
                    await conn.execute(
                        """
                        CREATE TABLE IF NOT EXISTS chat_memory_schema (
                            id SMALLINT PRIMARY KEY,
                            version INTEGER NOT NULL
                        )
                        """
                    )
                    version = await conn.fetchval("SELECT version FROM chat_memory_schema WHERE id = 1")
                    version = int(version or 0)
                    if version > self.SCHEMA_VERSION:
                        raise RuntimeError(
                            f"Postgres memory schema version {version} is newer than supported {self.SCHEMA_VERSION}. "
                            "Upgrade the bot before starting."
                        )
                    await self._create_schema(conn)
                    if version != self.SCHEMA_VERSION:
                        await conn.execute(
                            """
                            INSERT INTO chat_memory_schema (id, version) VALUES (1, $1)
                            ON CONFLICT (id) DO UPDATE SET version = EXCLUDED.version
                            """,
                            self.SCHEMA_VERSION,
                        )
            self._initialized = True
        logger.info("Postgres memory ready")

    async def _create_schema(self, conn: asyncpg.Connection) -> None:
        await conn.execute(
            """
            CREATE TABLE IF NOT EXISTS conversation_history (
                id BIGSERIAL PRIMARY KEY,
                user_id TEXT NOT NULL,
                role TEXT NOT NULL CHECK (role IN ('user', 'bot')),
                message TEXT NOT NULL,
                timestamp TIMESTAMPTZ NOT NULL DEFAULT clock_timestamp()
            )
            """
        )
        await conn.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_conversation_history_user_time
            ON conversation_history(user_id, timestamp, id)
            """
        )
        await conn.execute(
            """
            CREATE TABLE IF NOT EXISTS users (
                user_id TEXT PRIMARY KEY,
                username TEXT,
                status TEXT NOT NULL CHECK (status IN ('agreed', 'declined'))
            )
            """
        )
        await conn.execute(
            """
            CREATE TABLE IF NOT EXISTS user_guilds (
                user_id TEXT NOT NULL,
                guild_id TEXT NOT NULL,
                PRIMARY KEY (user_id, guild_id)
            )
            """
        )

    async def append_turn(self, user_id: str, role: TurnRole | str, message: str) -> int:
        user_key = _clean_id(user_id)
        role_value = TurnRole.parse(role).value
        try:
            pool = await self._ensure_pool()
            async with pool.acquire() as conn:
                turn_id = await conn.fetchval(
                    """
                    INSERT INTO conversation_history (user_id, role, message)
                    VALUES ($1, $2, $3)
                    RETURNING id
                    """,
                    user_key,
                    role_value,
                    str(message),
                )
        except _POSTGRES_ERRORS as exc:
            raise StorageWriteError(f"Failed to append {role_value} turn for user {user_key}") from exc
        return int(turn_id)

    async def fetch_recent_history(self, user_id: str, limit: int = 10) -> HistoryReadResult:
        user_key = _clean_id(user_id)
        window = max(0, int(limit))
        if window == 0:
            return HistoryReadResult(turns=[])
        try:
            pool = await self._ensure_pool()
            async with pool.acquire() as conn:
                rows = await conn.fetch(
                    """
                    SELECT id, role, message, timestamp
                    FROM conversation_history
                    WHERE user_id = $1
                    ORDER BY timestamp DESC, id DESC
                    LIMIT $2
                    """,
                    user_key,
                    window,
                )
        except _POSTGRES_ERRORS as exc:
            error = StorageReadError(f"Failed to read history for user {user_key}")
            error.__cause__ = exc
            return HistoryReadResult(turns=[], error=error)
        return HistoryReadResult(turns=[_row_to_turn(user_key, row) for row in reversed(rows)])

    async def get_recent_history(self, user_id: str, limit: int = 10) -> list[ConversationTurn]:
        result = await self.fetch_recent_history(user_id, limit)
        if not result.ok:
            logger.warning("History read failed, continuing with empty history: %s", result.error)
        return result.turns

    async def count_turns(self, user_id: str) -> int:
        user_key = _clean_id(user_id)
        try:
            pool = await self._ensure_pool()
            async with pool.acquire() as conn:
                total = await conn.fetchval(
                    "SELECT COUNT(*) FROM conversation_history WHERE user_id = $1",
                    user_key,
                )
        except _POSTGRES_ERRORS as exc:
            raise StorageReadError(f"Failed to count turns for user {user_key}") from exc
        return int(total or 0)

    async def purge_history(self, user_id: str) -> int:
        user_key = _clean_id(user_id)
        try:
            pool = await self._ensure_pool()
            async with pool.acquire() as conn:
                status = await conn.execute(
                    "DELETE FROM conversation_history WHERE user_id = $1",
                    user_key,
                )
        except _POSTGRES_ERRORS as exc:
            raise StorageWriteError(f"Failed to purge history for user {user_key}") from exc
        # asyncpg returns the command tag, e.g. "DELETE 3".
        deleted = int(str(status).rsplit(" ", 1)[-1] or 0) if status else 0
        logger.info("Purged %s history turns for user=%s", deleted, user_key)
        return deleted

    async def get_consent_status(self, user_id: str) -> ConsentStatus | None:
        user_key = _clean_id(user_id)
        try:
            pool = await self._ensure_pool()
            async with pool.acquire() as conn:
                value = await conn.fetchval("SELECT status FROM users WHERE user_id = $1", user_key)
        except _POSTGRES_ERRORS as exc:
            raise StorageReadError(f"Failed to read consent for user {user_key}") from exc
        if value is None:
            return None
        return ConsentStatus.parse(str(value))

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
            pool = await self._ensure_pool()
            async with pool.acquire() as conn:
                await conn.execute(
                    """
                    INSERT INTO users (user_id, username, status)
                    VALUES ($1, $2, $3)
                    ON CONFLICT (user_id) DO UPDATE SET
                        status = EXCLUDED.status,
                        username = COALESCE(EXCLUDED.username, users.username)
                    """,
                    user_key,
                    username,
                    status_value,
                )
        except _POSTGRES_ERRORS as exc:
            raise StorageWriteError(f"Failed to store consent for user {user_key}") from exc

    async def record_user_guild(self, user_id: str, guild_id: str) -> None:
        user_key = _clean_id(user_id)
        guild_key = _clean_id(guild_id)
        try:
            pool = await self._ensure_pool()
            async with pool.acquire() as conn:
                await conn.execute(
                    """
                    INSERT INTO user_guilds (user_id, guild_id)
                    VALUES ($1, $2)
                    ON CONFLICT (user_id, guild_id) DO NOTHING
                    """,
                    user_key,
                    guild_key,
                )
        except _POSTGRES_ERRORS as exc:
            raise StorageWriteError(f"Failed to record guild {guild_key} for user {user_key}") from exc

    async def list_user_guilds(self, user_id: str) -> list[str]:
        user_key = _clean_id(user_id)
        try:
            pool = await self._ensure_pool()
            async with pool.acquire() as conn:
                rows = await conn.fetch(
                    "SELECT guild_id FROM user_guilds WHERE user_id = $1 ORDER BY guild_id",
                    user_key,
                )
        except _POSTGRES_ERRORS as exc:
            raise StorageReadError(f"Failed to list guilds for user {user_key}") from exc
        return [str(row["guild_id"]) for row in rows]
