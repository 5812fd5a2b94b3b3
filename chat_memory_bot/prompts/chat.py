from __future__ import annotations

from typing import Iterable

from ..memory.models import ConversationTurn, TurnRole

ROLE_LABELS: dict[TurnRole, str] = {
    TurnRole.USER: "User",
    TurnRole.BOT: "Bot",
}


def format_turn(turn: ConversationTurn) -> str:
    return f"{ROLE_LABELS[TurnRole.parse(turn.role)]}: {turn.message}"


def build_chat_prompt(style: str, history: Iterable[ConversationTurn], user_input: str) -> str:
    """Render the style line, past turns and the new input as one text block.

    The first line is always the style line, even when it is empty, and the
    new input is always the last line. Window size is decided by the caller.
    """
    lines = [style]
    lines.extend(format_turn(turn) for turn in history)
    lines.append(f"{ROLE_LABELS[TurnRole.USER]}: {user_input}")
    return "\n".join(lines)
