from . import chat, clear_memory, help

DEFAULT_COMMANDS = (chat.COMMAND, clear_memory.COMMAND, help.COMMAND)

__all__ = ["DEFAULT_COMMANDS"]
