from __future__ import annotations

from typing import TYPE_CHECKING

from ..registry import CommandSpec
from ..views import ClearMemoryView

if TYPE_CHECKING:
    from ..invocation import Invocation
    from ..registry import CommandContext


async def execute(invocation: Invocation, ctx: CommandContext) -> None:
    view = ClearMemoryView(invocation=invocation, memory=ctx.memory)
    await invocation.reply(embed=view.build_embed("confirm"), view=view)


COMMAND = CommandSpec(
    name="clear_memory",
    description="🗑️ Delete your chat history from the database",
    execute=execute,
    aliases=("cm",),
)
