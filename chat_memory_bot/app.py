from __future__ import annotations

import asyncio
import logging
from typing import Any

from .config import Settings
from .discord.client import ChatMemoryDiscordBot
from .memory.factory import build_memory_store
from .services.gemini_client import GeminiClient

logger = logging.getLogger("chat_memory_bot")


def configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    logging.getLogger("discord.gateway").setLevel(logging.WARNING)
    logging.getLogger("discord.client").setLevel(logging.WARNING)


def build_bot(settings: Settings) -> ChatMemoryDiscordBot:
    memory = build_memory_store(settings.sqlite_path)
    llm = GeminiClient(
        api_key=settings.gemini_api_key,
        model=settings.gemini_model,
        timeout_seconds=settings.gemini_timeout_seconds,
        base_url=settings.gemini_base_url,
    )
    return ChatMemoryDiscordBot(settings=settings, memory=memory, llm=llm)


def _log_loop_exception(loop: asyncio.AbstractEventLoop, context: dict[str, Any]) -> None:
    error = context.get("exception")
    message = context.get("message", "Unhandled exception in event loop")
    if error is not None:
        logger.error("%s", message, exc_info=error)
    else:
        logger.error("%s", message)


async def _run_bot(settings: Settings) -> None:
    asyncio.get_running_loop().set_exception_handler(_log_loop_exception)
    bot = build_bot(settings)
    async with bot:
        await bot.start(settings.discord_token)


def main() -> None:
    configure_logging()
    settings = Settings.from_env()
    settings.validate()
    try:
        asyncio.run(_run_bot(settings))
    except KeyboardInterrupt:
        logger.info("Shutdown requested, exiting.")
