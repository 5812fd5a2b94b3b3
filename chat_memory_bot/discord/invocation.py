"""The two ways a command reaches the bot: a slash interaction or a prefixed message.

Both variants expose the same surface (identity, input, targets, reply,
edit_reply, send_followup) so command handlers never branch on the variant.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Sequence

import discord


@dataclass(slots=True, frozen=True)
class TargetUser:
    user_id: str
    label: str


def _message_kwargs(
    content: str | None,
    embed: discord.Embed | None,
    view: discord.ui.View | None,
) -> dict[str, Any]:
    # discord.py treats an explicit None view as invalid on send, so only pass what is set.
    kwargs: dict[str, Any] = {}
    if content is not None:
        kwargs["content"] = content
    if embed is not None:
        kwargs["embed"] = embed
    if view is not None:
        kwargs["view"] = view
    return kwargs


def _user_label(user: discord.abc.User) -> str:
    return str(getattr(user, "display_name", None) or user.name)


class SlashInvocation:
    kind: Literal["slash"] = "slash"

    def __init__(
        self,
        interaction: discord.Interaction,
        command_name: str,
        args: Sequence[str] = (),
    ) -> None:
        self.interaction = interaction
        self.command_name = command_name.lower()
        self.args = [str(arg) for arg in args if arg is not None]

    @property
    def user_id(self) -> str:
        return str(self.interaction.user.id)

    @property
    def user_label(self) -> str:
        return _user_label(self.interaction.user)

    @property
    def avatar_url(self) -> str:
        return str(self.interaction.user.display_avatar.url)

    @property
    def guild(self) -> discord.Guild | None:
        return self.interaction.guild

    @property
    def guild_id(self) -> str | None:
        guild_id = self.interaction.guild_id
        return str(guild_id) if guild_id is not None else None

    @property
    def input_text(self) -> str:
        return " ".join(self.args).strip()

    @property
    def target_users(self) -> list[TargetUser]:
        target = getattr(self.interaction.namespace, "target", None)
        if isinstance(target, discord.abc.User):
            return [TargetUser(user_id=str(target.id), label=target.name)]
        return []

    async def reply(
        self,
        content: str | None = None,
        *,
        embed: discord.Embed | None = None,
        view: discord.ui.View | None = None,
        ephemeral: bool = False,
    ) -> None:
        kwargs = _message_kwargs(content, embed, view)
        if not self.interaction.response.is_done():
            await self.interaction.response.send_message(ephemeral=ephemeral, **kwargs)
        else:
            await self.interaction.followup.send(ephemeral=ephemeral, **kwargs)

    async def edit_reply(self, **fields: Any) -> None:
        await self.interaction.edit_original_response(**fields)

    async def send_followup(self, content: str) -> None:
        await self.interaction.followup.send(content)


class TextInvocation:
    kind: Literal["text"] = "text"

    def __init__(
        self,
        message: discord.Message,
        command_name: str,
        args: Sequence[str] = (),
        bot_user_id: int | None = None,
    ) -> None:
        self.message = message
        self.command_name = command_name.lower()
        self.args = list(args)
        self.bot_user_id = bot_user_id
        self._reply_message: discord.Message | None = None

    @property
    def user_id(self) -> str:
        return str(self.message.author.id)

    @property
    def user_label(self) -> str:
        return _user_label(self.message.author)

    @property
    def avatar_url(self) -> str:
        return str(self.message.author.display_avatar.url)

    @property
    def guild(self) -> discord.Guild | None:
        return self.message.guild

    @property
    def guild_id(self) -> str | None:
        return str(self.message.guild.id) if self.message.guild else None

    @property
    def input_text(self) -> str:
        return " ".join(self.args).strip()

    @property
    def target_users(self) -> list[TargetUser]:
        return [
            TargetUser(user_id=str(user.id), label=user.name)
            for user in self.message.mentions
            if self.bot_user_id is None or user.id != self.bot_user_id
        ]

    async def reply(
        self,
        content: str | None = None,
        *,
        embed: discord.Embed | None = None,
        view: discord.ui.View | None = None,
        ephemeral: bool = False,  # noqa: ARG002 - text replies are always public
    ) -> None:
        sent = await self.message.reply(**_message_kwargs(content, embed, view))
        if self._reply_message is None:
            self._reply_message = sent

    async def edit_reply(self, **fields: Any) -> None:
        if self._reply_message is None:
            raise RuntimeError("Nothing has been replied yet")
        await self._reply_message.edit(**fields)

    async def send_followup(self, content: str) -> None:
        await self.message.channel.send(content)


Invocation = SlashInvocation | TextInvocation
