from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest

pytest.importorskip("discord")

PROJECT_ROOT = Path(__file__).resolve().parents[1]
TESTS_DIR = Path(__file__).resolve().parent
for _path in (PROJECT_ROOT, TESTS_DIR):
    if str(_path) not in sys.path:
        sys.path.insert(0, str(_path))

from chat_memory_bot.discord.client import ChatMemoryDiscordBot  # noqa: E402
from chat_memory_bot.discord.gate import DispatchOutcome  # noqa: E402
from fakes import FakeLLM, FakeMemory, settings_stub  # noqa: E402


def _settings():  # type: ignore[no-untyped-def]
    return settings_stub(
        command_prefix="!",
        discord_message_content_intent=True,
        sync_commands_per_guild=True,
        presence_enabled=False,
    )


def test_slash_commands_mirror_registry() -> None:
    async def scenario() -> ChatMemoryDiscordBot:
        return ChatMemoryDiscordBot(settings=_settings(), memory=FakeMemory(), llm=FakeLLM())

    bot = asyncio.run(scenario())

    names = {command.name for command in bot.tree.get_commands()}
    assert names == {"chat", "clear_memory", "help"}
    chat = bot.tree.get_command("chat")
    assert [param.name for param in chat.parameters] == ["content"]


def test_prefixed_messages_are_dispatched_and_bots_ignored() -> None:
    seen: list[tuple[str, list[str]]] = []

    async def scenario() -> None:
        bot = ChatMemoryDiscordBot(settings=_settings(), memory=FakeMemory(), llm=FakeLLM())

        async def record(invocation):  # type: ignore[no-untyped-def]
            seen.append((invocation.command_name, invocation.args))
            return DispatchOutcome.EXECUTED

        bot.gate.dispatch = record  # type: ignore[method-assign]
        human = SimpleNamespace(id=1001, bot=False)
        other_bot = SimpleNamespace(id=7, bot=True)
        await bot.on_message(SimpleNamespace(author=human, content="!CM now"))
        await bot.on_message(SimpleNamespace(author=human, content="just talking"))
        await bot.on_message(SimpleNamespace(author=other_bot, content="!chat hi"))

    asyncio.run(scenario())

    assert seen == [("cm", ["now"])]


def test_setup_hook_checks_memory_and_starts_llm() -> None:
    memory = FakeMemory()
    llm = FakeLLM()

    async def scenario() -> ChatMemoryDiscordBot:
        bot = ChatMemoryDiscordBot(settings=_settings(), memory=memory, llm=llm)
        await bot.setup_hook()
        return bot

    bot = asyncio.run(scenario())

    assert memory.events == ["init", "ping"]
    assert llm.started is True
    assert bot.persistent_views
