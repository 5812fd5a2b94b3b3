from __future__ import annotations

import sys
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from chat_memory_bot.memory.models import ConversationTurn, TurnRole  # noqa: E402
from chat_memory_bot.prompts.chat import build_chat_prompt  # noqa: E402
from chat_memory_bot.prompts.json_loader import load_texts  # noqa: E402


def _turn(role: TurnRole, message: str) -> ConversationTurn:
    return ConversationTurn(user_id="U1", role=role, message=message)


def test_empty_style_and_history_yields_single_user_line() -> None:
    assert build_chat_prompt("", [], "hello") == "\nUser: hello"


def test_history_is_rendered_between_style_and_new_input() -> None:
    history = [
        _turn(TurnRole.USER, "hi"),
        _turn(TurnRole.BOT, "hey there"),
        _turn(TurnRole.USER, "how are you?"),
        _turn(TurnRole.BOT, "great"),
    ]

    prompt = build_chat_prompt("Answer like a pirate.", history, "tell me a joke")

    assert prompt == (
        "Answer like a pirate.\n"
        "User: hi\n"
        "Bot: hey there\n"
        "User: how are you?\n"
        "Bot: great\n"
        "User: tell me a joke"
    )


def test_prompt_assembly_is_pure() -> None:
    history = [_turn(TurnRole.USER, "a"), _turn(TurnRole.BOT, "b")]

    first = build_chat_prompt("style", history, "c")
    second = build_chat_prompt("style", list(history), "c")

    assert first == second
    assert [turn.message for turn in history] == ["a", "b"]


def test_long_messages_are_not_truncated() -> None:
    long_text = "x" * 20000

    prompt = build_chat_prompt("", [_turn(TurnRole.BOT, long_text)], "y")

    assert long_text in prompt


def test_text_overrides_replace_matching_defaults(tmp_path: Path) -> None:
    (tmp_path / "notices.json").write_text('{"chat_loading": "Đợi tớ xíu..."}', encoding="utf-8")
    defaults = {"chat_loading": "Wait...", "chat_empty_reply": "Nothing."}

    texts = load_texts("notices.json", defaults, data_dir=tmp_path)

    assert texts == {"chat_loading": "Đợi tớ xíu...", "chat_empty_reply": "Nothing."}


def test_text_overrides_ignore_unknown_keys_and_non_strings(tmp_path: Path) -> None:
    (tmp_path / "notices.json").write_text(
        '{"chat_loading": 5, "surprise": "x", "chat_empty_reply": "Nada."}',
        encoding="utf-8",
    )
    defaults = {"chat_loading": "Wait...", "chat_empty_reply": "Nothing."}

    texts = load_texts("notices.json", defaults, data_dir=tmp_path)

    assert texts == {"chat_loading": "Wait...", "chat_empty_reply": "Nada."}


def test_broken_text_file_falls_back_to_defaults(tmp_path: Path) -> None:
    (tmp_path / "notices.json").write_text("{not json", encoding="utf-8")

    texts = load_texts("notices.json", {"chat_loading": "Wait..."}, data_dir=tmp_path)

    assert texts == {"chat_loading": "Wait..."}


def test_missing_text_file_yields_defaults(tmp_path: Path) -> None:
    texts = load_texts("notices.json", {"chat_loading": "Wait..."}, data_dir=tmp_path)

    assert texts == {"chat_loading": "Wait..."}
