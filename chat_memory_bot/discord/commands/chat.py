from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ...config import CHAT_HISTORY_LIMIT
from ...errors import ExternalServiceError, StorageWriteError, TransportError
from ...memory.models import TurnRole
from ...prompts.chat import build_chat_prompt
from ...prompts.notices import notice
from ..common import chunk_text, collapse_spaces, truncate
from ..embeds import build_failure_embed
from ..registry import CommandSpec

if TYPE_CHECKING:
    from ..invocation import Invocation
    from ..registry import CommandContext

logger = logging.getLogger("chat_memory_bot")


async def _remember(memory: Any, user_id: str, role: TurnRole, message: str) -> bool:
    try:
        await memory.append_turn(user_id, role, message)
    except StorageWriteError as exc:
        logger.error("Could not store %s turn for user=%s: %s", role.value, user_id, exc)
        return False
    return True


async def run_chat_turn(
    memory: Any,
    llm: Any,
    *,
    user_id: str,
    user_input: str,
    style: str = "",
    history_limit: int = CHAT_HISTORY_LIMIT,
) -> str:
    """History fetch, prompt assembly, one completion call, then both turns appended.

    Completion failures propagate and nothing is stored. A failed append is
    only logged; the reply is still returned.
    """
    history = await memory.get_recent_history(user_id, history_limit)
    prompt = build_chat_prompt(style, history, user_input)
    logger.info(
        "[msg.user] user=%s history=%s text=\"%s\"",
        user_id,
        len(history),
        truncate(collapse_spaces(user_input), 120),
    )

    reply_text = await llm.complete(prompt)

    if await _remember(memory, user_id, TurnRole.USER, user_input):
        await _remember(memory, user_id, TurnRole.BOT, reply_text)
    logger.info("[msg.bot] user=%s text=\"%s\"", user_id, truncate(collapse_spaces(reply_text), 120))
    return reply_text


async def execute(invocation: Invocation, ctx: CommandContext) -> None:
    user_input = invocation.input_text
    if not user_input:
        await invocation.reply(notice("chat_missing_input"))
        return

    await invocation.reply(notice("chat_loading"))
    try:
        reply_text = await run_chat_turn(
            ctx.memory,
            ctx.llm,
            user_id=invocation.user_id,
            user_input=user_input,
            style=ctx.settings.chat_style,
        )
    except ExternalServiceError as exc:
        logger.error("Chat completion rejected for user=%s (status=%s)", invocation.user_id, exc.status)
        await invocation.edit_reply(content=None, embed=build_failure_embed(notice("chat_api_failed")))
        return
    except TransportError as exc:
        logger.error("Chat completion unreachable for user=%s: %s", invocation.user_id, exc)
        await invocation.edit_reply(content=None, embed=build_failure_embed(notice("chat_api_failed")))
        return

    final_reply = reply_text.strip() or notice("chat_empty_reply")
    chunks = chunk_text(final_reply, 1900)
    await invocation.edit_reply(content=chunks[0])
    for chunk in chunks[1:]:
        await invocation.send_followup(chunk)


COMMAND = CommandSpec(
    name="chat",
    description="Chat with the bot using Google's Gemini API",
    execute=execute,
)
