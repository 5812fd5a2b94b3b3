from __future__ import annotations

from typing import TYPE_CHECKING

from ..embeds import build_help_embed
from ..registry import CommandSpec

if TYPE_CHECKING:
    from ..invocation import Invocation
    from ..registry import CommandContext


async def execute(invocation: Invocation, ctx: CommandContext) -> None:
    guild = invocation.guild
    await invocation.reply(
        embed=build_help_embed(
            ctx.settings.command_prefix,
            user_label=invocation.user_label,
            avatar_url=invocation.avatar_url,
            guild_name=guild.name if guild is not None else None,
        )
    )


COMMAND = CommandSpec(
    name="help",
    description="Show the list of commands and how to use them.",
    execute=execute,
)
