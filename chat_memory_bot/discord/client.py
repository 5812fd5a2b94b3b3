from __future__ import annotations

import asyncio
import logging
from typing import Any

import discord
from discord import app_commands

from ..config import Settings
from .common import split_command
from .gate import CommandGate
from .invocation import SlashInvocation, TextInvocation
from .registry import CommandContext, CommandRegistry, build_default_registry
from .views import TermsView

logger = logging.getLogger("chat_memory_bot")


class ChatMemoryDiscordBot(discord.Client):
    def __init__(
        self,
        settings: Settings,
        memory: Any,
        llm: Any,
        registry: CommandRegistry | None = None,
    ) -> None:
        intents = discord.Intents.default()
        intents.message_content = settings.discord_message_content_intent

        super().__init__(intents=intents)

        self.settings = settings
        self.memory = memory
        self.llm = llm
        self.registry = registry or build_default_registry()
        self.gate = CommandGate(
            self.registry,
            CommandContext(memory=memory, llm=llm, settings=settings),
        )
        self.tree = app_commands.CommandTree(self)
        self._register_slash_commands()

    def _register_slash_commands(self) -> None:
        chat_spec = self.registry.resolve("chat")
        if chat_spec is not None:

            @self.tree.command(name=chat_spec.name, description=chat_spec.description)
            @app_commands.describe(content="What you want to say to the bot")
            async def chat_command(interaction: discord.Interaction, content: str) -> None:
                await self.gate.dispatch(SlashInvocation(interaction, chat_spec.name, [content]))

        for spec in self.registry:
            if spec is chat_spec:
                continue
            self.tree.add_command(
                app_commands.Command(
                    name=spec.name,
                    description=spec.description,
                    callback=self._plain_slash_callback(spec.name),
                )
            )

    def _plain_slash_callback(self, name: str):
        async def callback(interaction: discord.Interaction) -> None:
            await self.gate.dispatch(SlashInvocation(interaction, name))

        return callback

    async def setup_hook(self) -> None:
        await self.memory.init()
        await self.memory.ping()
        logger.info("Memory backend ready: %s", self.memory.backend_name)
        await self.llm.start()
        self.add_view(TermsView(self.gate.record_consent))
        if not self.settings.sync_commands_per_guild:
            synced = await self.tree.sync()
            logger.info("Synced %s slash commands globally", len(synced))

    async def close(self) -> None:
        await self._run_shutdown_step("llm.close", self.llm.close(), timeout=6.0)
        await self._run_shutdown_step("memory.close", self.memory.close(), timeout=6.0)
        await self._run_shutdown_step("discord.Client.close", super().close(), timeout=6.0)

    async def _run_shutdown_step(self, label: str, coro: object, *, timeout: float) -> None:
        try:
            await asyncio.wait_for(coro, timeout=timeout)  # type: ignore[arg-type]
        except asyncio.TimeoutError:
            logger.warning("Shutdown step timed out: %s", label)
        except Exception as exc:
            logger.warning("Shutdown step failed: %s (%s)", label, exc)

    async def _sync_guild_commands(self, guild: discord.abc.Snowflake) -> bool:
        target = discord.Object(id=guild.id)
        self.tree.copy_global_to(guild=target)
        try:
            await self.tree.sync(guild=target)
        except discord.HTTPException as exc:
            logger.error("Slash command sync failed for guild=%s: %s", guild.id, exc)
            return False
        return True

    async def _update_presence(self) -> None:
        if not self.settings.presence_enabled:
            return
        total_members = sum(guild.member_count or 0 for guild in self.guilds)
        try:
            await self.change_presence(activity=discord.Game(name=f"with {total_members} members"))
        except (discord.HTTPException, ConnectionError) as exc:
            logger.warning("Presence update failed: %s", exc)

    async def on_ready(self) -> None:
        if self.user:
            logger.info("Connected as %s (%s)", self.user, self.user.id)
        if self.settings.sync_commands_per_guild:
            synced = 0
            for guild in list(self.guilds):
                if await self._sync_guild_commands(guild):
                    synced += 1
            logger.info("Slash commands registered for %s/%s guilds", synced, len(self.guilds))
        await self._update_presence()

    async def on_guild_join(self, guild: discord.Guild) -> None:
        logger.info("Joined guild %s (%s)", guild.name, guild.id)
        if self.settings.sync_commands_per_guild:
            await self._sync_guild_commands(guild)
        await self._update_presence()

    async def on_message(self, message: discord.Message) -> None:
        if message.author.bot:
            return
        parsed = split_command(message.content or "", self.settings.command_prefix)
        if parsed is None:
            return
        name, args = parsed
        invocation = TextInvocation(
            message,
            name,
            args,
            bot_user_id=self.user.id if self.user else None,
        )
        await self.gate.dispatch(invocation)

    async def on_error(self, event_method: str, /, *args: Any, **kwargs: Any) -> None:
        logger.exception("Unhandled error in event %s", event_method)
