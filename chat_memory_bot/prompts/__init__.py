from .chat import build_chat_prompt, format_turn
from .notices import notice

__all__ = ["build_chat_prompt", "format_turn", "notice"]
