from __future__ import annotations

import os
import sqlite3
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import aiosqlite

from ..models import ConversationTurn, TurnRole

# Driver-level failures the SQLite mixins translate into storage errors.
SQLITE_ERRORS: tuple[type[BaseException], ...] = (sqlite3.Error, OSError)


def _sqlite_busy_timeout_ms() -> int:
    raw = os.getenv("MEMORY_SQLITE_BUSY_TIMEOUT_MS", "5000").strip()
    try:
        timeout = int(raw)
    except ValueError:
        timeout = 5000
    return max(0, min(timeout, 60000))


@asynccontextmanager
async def _sqlite_memory_connection(db_path: str | Path) -> AsyncIterator[aiosqlite.Connection]:
    async with aiosqlite.connect(db_path) as db:
        timeout_ms = _sqlite_busy_timeout_ms()
        if timeout_ms > 0:
            await db.execute(f"PRAGMA busy_timeout={timeout_ms}")
        yield db


def _clean_id(value: object) -> str:
    cleaned = str(value if value is not None else "").strip()
    if not cleaned:
        raise ValueError("user_id cannot be empty")
    return cleaned


def _row_to_turn(user_id: str, row: object) -> ConversationTurn:
    # Works for aiosqlite.Row and asyncpg.Record alike.
    return ConversationTurn(
        user_id=user_id,
        role=TurnRole.parse(str(row["role"])),  # type: ignore[index]
        message=str(row["message"]),  # type: ignore[index]
        timestamp=str(row["timestamp"]),  # type: ignore[index]
        turn_id=int(row["id"]),  # type: ignore[index]
    )
