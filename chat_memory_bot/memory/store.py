from __future__ import annotations

from ..errors import StorageReadError
from .storage.consent import MemoryConsentMixin
from .storage.history import MemoryHistoryMixin
from .storage.schema import MemorySchemaMixin
from .storage.utils import SQLITE_ERRORS, _sqlite_memory_connection


class MemoryStore(
    MemorySchemaMixin,
    MemoryHistoryMixin,
    MemoryConsentMixin,
):
    """Persistent per-user chat history and terms consent, backed by SQLite."""

    backend_name = "sqlite"

    async def ping(self) -> None:
        try:
            async with _sqlite_memory_connection(self.db_path) as db:
                await db.execute("SELECT 1")
        except SQLITE_ERRORS as exc:
            raise StorageReadError(f"SQLite store at {self.db_path} is unreachable") from exc
