from __future__ import annotations


class ChatBotError(RuntimeError):
    """Base class for failures the bot knows how to report."""


class TransportError(ChatBotError):
    """The completion endpoint could not be reached (DNS, timeout, reset)."""


class ExternalServiceError(ChatBotError):
    """The completion endpoint answered with a non-success HTTP status."""

    def __init__(self, status: int, body: str = "") -> None:
        super().__init__(f"Gemini error {status}")
        self.status = int(status)
        self.body = body


class StorageError(ChatBotError):
    pass


class StorageReadError(StorageError):
    pass


class StorageWriteError(StorageError):
    pass


class HandlerError(ChatBotError):
    """Wraps an exception raised inside a command handler."""

    def __init__(self, command_name: str, cause: BaseException) -> None:
        super().__init__(f"Command {command_name!r} failed: {cause!r}")
        self.command_name = command_name
        self.cause = cause
