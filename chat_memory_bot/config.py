from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


load_dotenv()

# Fixed by design of the chat and clear-memory flows.
CHAT_HISTORY_LIMIT = 10
CONFIRMATION_TIMEOUT_SECONDS = 15.0


def _env_lookup(name: str, aliases: tuple[str, ...] = ()) -> str | None:
    for key in (name, *aliases):
        # Be tolerant to UTF-8 BOM accidentally saved in .env key names.
        for candidate in (key, f"\ufeff{key}"):
            raw = os.getenv(candidate)
            if raw is not None:
                return raw
    return None


def _env_bool(name: str, default: bool, aliases: tuple[str, ...] = ()) -> bool:
    raw = _env_lookup(name, aliases)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int, aliases: tuple[str, ...] = ()) -> int:
    raw = _env_lookup(name, aliases)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _clean_token(value: str) -> str:
    cleaned = value.strip()
    if cleaned.lower().startswith("bot "):
        cleaned = cleaned[4:].strip()
    if (cleaned.startswith('"') and cleaned.endswith('"')) or (
        cleaned.startswith("'") and cleaned.endswith("'")
    ):
        cleaned = cleaned[1:-1].strip()
    return cleaned


def _env_str(name: str, default: str, aliases: tuple[str, ...] = ()) -> str:
    raw = _env_lookup(name, aliases)
    if raw is None:
        return default
    value = raw.strip()
    return value if value else default


@dataclass(slots=True)
class Settings:
    discord_token: str
    command_prefix: str
    discord_message_content_intent: bool
    sync_commands_per_guild: bool
    presence_enabled: bool

    gemini_api_key: str
    gemini_base_url: str
    gemini_model: str
    gemini_timeout_seconds: int
    chat_style: str

    sqlite_path: Path

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            discord_token=_clean_token(_env_lookup("DISCORD_TOKEN", aliases=("TOKEN",)) or ""),
            command_prefix=_env_str("PREFIX", "!", aliases=("DISCORD_COMMAND_PREFIX",)),
            discord_message_content_intent=_env_bool("DISCORD_MESSAGE_CONTENT_INTENT", True),
            sync_commands_per_guild=_env_bool("SYNC_COMMANDS_PER_GUILD", True),
            presence_enabled=_env_bool("PRESENCE_ENABLED", True),
            gemini_api_key=_env_str("GOOGLE_API_KEY", "", aliases=("GEMINI_API_KEY",)),
            gemini_base_url=_env_str("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com"),
            gemini_model=_env_str("GEMINI_MODEL", "gemini-2.0-flash"),
            gemini_timeout_seconds=_env_int("GEMINI_TIMEOUT_SECONDS", 60),
            chat_style=_env_str("STYLE", "", aliases=("CHAT_STYLE",)),
            sqlite_path=Path(_env_str("SQLITE_PATH", "./data/chat_memory.db")).expanduser(),
        )

    def validate(self) -> None:
        if not self.discord_token:
            raise ValueError("DISCORD_TOKEN is required")
        if self.discord_token == "put_your_discord_bot_token_here":
            raise ValueError("DISCORD_TOKEN is still placeholder")
        if not self.command_prefix.strip():
            raise ValueError("PREFIX cannot be empty")
        if any(ch.isspace() for ch in self.command_prefix):
            raise ValueError("PREFIX cannot contain whitespace")

        if not self.gemini_api_key:
            raise ValueError("GOOGLE_API_KEY is required")
        if self.gemini_api_key == "put_your_google_api_key_here":
            raise ValueError("GOOGLE_API_KEY is still placeholder")
        if not self.gemini_model:
            raise ValueError("GEMINI_MODEL cannot be empty")
        if self.gemini_timeout_seconds < 5:
            raise ValueError("GEMINI_TIMEOUT_SECONDS must be >= 5")
