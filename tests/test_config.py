from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from chat_memory_bot.config import Settings  # noqa: E402

_ENV_KEYS = (
    "DISCORD_TOKEN",
    "TOKEN",
    "PREFIX",
    "DISCORD_COMMAND_PREFIX",
    "GOOGLE_API_KEY",
    "GEMINI_API_KEY",
    "GEMINI_MODEL",
    "GEMINI_TIMEOUT_SECONDS",
    "STYLE",
    "CHAT_STYLE",
    "SQLITE_PATH",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_from_env_reads_aliases_and_cleans_token(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("TOKEN", '  Bot "abc.def"  ')
    clean_env.setenv("GEMINI_API_KEY", "key-123")
    clean_env.setenv("CHAT_STYLE", "Talk like a pirate.")
    clean_env.setenv("GEMINI_TIMEOUT_SECONDS", "not-a-number")

    settings = Settings.from_env()

    assert settings.discord_token == "abc.def"
    assert settings.gemini_api_key == "key-123"
    assert settings.chat_style == "Talk like a pirate."
    assert settings.command_prefix == "!"
    assert settings.gemini_model == "gemini-2.0-flash"
    assert settings.gemini_timeout_seconds == 60
    settings.validate()


def test_primary_names_win_over_aliases(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("DISCORD_TOKEN", "primary")
    clean_env.setenv("TOKEN", "alias")
    clean_env.setenv("PREFIX", "?")
    clean_env.setenv("DISCORD_COMMAND_PREFIX", "$")

    settings = Settings.from_env()

    assert settings.discord_token == "primary"
    assert settings.command_prefix == "?"


@pytest.mark.parametrize(
    ("overrides", "message"),
    [
        ({"discord_token": ""}, "DISCORD_TOKEN is required"),
        ({"discord_token": "put_your_discord_bot_token_here"}, "placeholder"),
        ({"command_prefix": "! "}, "whitespace"),
        ({"gemini_api_key": ""}, "GOOGLE_API_KEY is required"),
        ({"gemini_model": ""}, "GEMINI_MODEL"),
        ({"gemini_timeout_seconds": 2}, ">= 5"),
    ],
)
def test_validate_rejects_bad_settings(clean_env: pytest.MonkeyPatch, overrides: dict, message: str) -> None:
    clean_env.setenv("DISCORD_TOKEN", "token")
    clean_env.setenv("GOOGLE_API_KEY", "key")
    settings = Settings.from_env()
    for name, value in overrides.items():
        setattr(settings, name, value)

    with pytest.raises(ValueError, match=message):
        settings.validate()
