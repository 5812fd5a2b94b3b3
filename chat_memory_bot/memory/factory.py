from __future__ import annotations

import os
from pathlib import Path

from .postgres_store import PostgresMemoryStore
from .store import MemoryStore

MEMORY_BACKENDS = ("sqlite", "postgres")


def _memory_env(name: str) -> str:
    return (os.getenv(name) or "").strip()


def build_memory_store(sqlite_path: Path) -> MemoryStore | PostgresMemoryStore:
    """Build the history/consent store named by ``MEMORY_BACKEND`` (sqlite by default)."""
    backend = _memory_env("MEMORY_BACKEND").lower() or "sqlite"
    if backend not in MEMORY_BACKENDS:
        raise ValueError(f"MEMORY_BACKEND must be one of {', '.join(MEMORY_BACKENDS)}, got {backend!r}")

    if backend == "postgres":
        dsn = _memory_env("MEMORY_POSTGRES_DSN")
        if not dsn:
            raise ValueError("MEMORY_POSTGRES_DSN is required when MEMORY_BACKEND=postgres")
        return PostgresMemoryStore(dsn)
    return MemoryStore(sqlite_path)
