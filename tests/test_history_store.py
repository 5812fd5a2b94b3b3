from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from chat_memory_bot.errors import StorageReadError, StorageWriteError  # noqa: E402
from chat_memory_bot.memory.models import TurnRole  # noqa: E402
from chat_memory_bot.memory.store import MemoryStore  # noqa: E402
import chat_memory_bot.memory.storage.history as history_mod  # noqa: E402


def _store(tmp_path: Path) -> MemoryStore:
    store = MemoryStore(tmp_path / "memory.db")
    asyncio.run(store.init())
    return store


async def _append_many(store: MemoryStore, user_id: str, count: int) -> None:
    for index in range(count):
        role = TurnRole.USER if index % 2 == 0 else TurnRole.BOT
        await store.append_turn(user_id, role, f"message {index}")


def test_recent_history_returns_all_turns_in_order_when_under_limit(tmp_path: Path) -> None:
    store = _store(tmp_path)
    asyncio.run(_append_many(store, "U1", 7))

    turns = asyncio.run(store.get_recent_history("U1", 10))

    assert [turn.message for turn in turns] == [f"message {i}" for i in range(7)]
    assert [turn.role for turn in turns][:2] == [TurnRole.USER, TurnRole.BOT]
    ids = [turn.turn_id for turn in turns]
    assert ids == sorted(ids)
    timestamps = [turn.timestamp for turn in turns]
    assert timestamps == sorted(timestamps)


def test_recent_history_keeps_latest_window_oldest_first(tmp_path: Path) -> None:
    store = _store(tmp_path)
    asyncio.run(_append_many(store, "U1", 23))

    turns = asyncio.run(store.get_recent_history("U1", 10))

    assert [turn.message for turn in turns] == [f"message {i}" for i in range(13, 23)]


@pytest.mark.parametrize("limit", [0, -3])
def test_recent_history_with_non_positive_limit_is_empty(tmp_path: Path, limit: int) -> None:
    store = _store(tmp_path)
    asyncio.run(store.append_turn("U1", "user", "a"))
    asyncio.run(store.append_turn("U1", "bot", "b"))

    result = asyncio.run(store.fetch_recent_history("U1", limit))

    assert result.ok
    assert result.turns == []


def test_recent_history_limit_of_one_returns_newest_turn(tmp_path: Path) -> None:
    store = _store(tmp_path)
    asyncio.run(store.append_turn("U1", "user", "a"))
    asyncio.run(store.append_turn("U1", "bot", "b"))

    turns = asyncio.run(store.get_recent_history("U1", 1))

    assert [turn.message for turn in turns] == ["b"]


def test_recent_history_is_scoped_per_user(tmp_path: Path) -> None:
    store = _store(tmp_path)
    asyncio.run(store.append_turn("U1", "user", "mine"))
    asyncio.run(store.append_turn("U2", "user", "theirs"))

    turns = asyncio.run(store.get_recent_history("U1", 10))

    assert [turn.message for turn in turns] == ["mine"]
    assert all(turn.user_id == "U1" for turn in turns)


def test_purge_empties_history_and_is_idempotent(tmp_path: Path) -> None:
    store = _store(tmp_path)
    asyncio.run(_append_many(store, "U1", 4))
    asyncio.run(store.append_turn("U2", "bot", "keep me"))

    assert asyncio.run(store.purge_history("U1")) == 4
    assert asyncio.run(store.get_recent_history("U1", 10)) == []
    assert asyncio.run(store.purge_history("U1")) == 0
    assert asyncio.run(store.purge_history("nobody")) == 0
    assert asyncio.run(store.count_turns("U2")) == 1


def test_append_rejects_unknown_role(tmp_path: Path) -> None:
    store = _store(tmp_path)

    with pytest.raises(ValueError, match="Unknown conversation role"):
        asyncio.run(store.append_turn("U1", "assistant", "hi"))


def test_history_read_failure_degrades_to_empty(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    store = _store(tmp_path)
    asyncio.run(store.append_turn("U1", "user", "hello"))

    def _broken_connection(db_path):  # type: ignore[no-untyped-def]
        raise OSError("disk gone")

    monkeypatch.setattr(history_mod, "_sqlite_memory_connection", _broken_connection)

    result = asyncio.run(store.fetch_recent_history("U1", 10))
    assert result.turns == []
    assert not result.ok
    assert isinstance(result.error, StorageReadError)

    assert asyncio.run(store.get_recent_history("U1", 10)) == []


def test_purge_failure_raises_storage_write_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    store = _store(tmp_path)

    def _broken_connection(db_path):  # type: ignore[no-untyped-def]
        raise OSError("read-only")

    monkeypatch.setattr(history_mod, "_sqlite_memory_connection", _broken_connection)

    with pytest.raises(StorageWriteError):
        asyncio.run(store.purge_history("U1"))
