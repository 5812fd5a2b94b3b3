from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Iterable, Iterator

if TYPE_CHECKING:
    from ..config import Settings
    from .invocation import Invocation


@dataclass(slots=True)
class CommandContext:
    """Collaborators handed to every command handler."""

    memory: Any
    llm: Any
    settings: Settings


CommandHandler = Callable[["Invocation", CommandContext], Awaitable[None]]


@dataclass(slots=True, frozen=True)
class CommandSpec:
    name: str
    description: str
    execute: CommandHandler
    aliases: tuple[str, ...] = ()


@dataclass(slots=True)
class CommandRegistry:
    """Commands known to the bot, built once at startup."""

    _by_name: dict[str, CommandSpec] = field(default_factory=dict)

    def register(self, command: CommandSpec) -> None:
        name = command.name.lower()
        if name in self._by_name:
            raise ValueError(f"Command {name!r} is already registered")
        self._by_name[name] = command

    def resolve(self, name: str) -> CommandSpec | None:
        key = (name or "").strip().lower()
        if not key:
            return None
        command = self._by_name.get(key)
        if command is not None:
            return command
        for candidate in self._by_name.values():
            if key in (alias.lower() for alias in candidate.aliases):
                return candidate
        return None

    def __iter__(self) -> Iterator[CommandSpec]:
        return iter(self._by_name.values())

    def __len__(self) -> int:
        return len(self._by_name)


def build_registry(commands: Iterable[CommandSpec]) -> CommandRegistry:
    registry = CommandRegistry()
    for command in commands:
        registry.register(command)
    return registry


def build_default_registry() -> CommandRegistry:
    from .commands import DEFAULT_COMMANDS

    return build_registry(DEFAULT_COMMANDS)
