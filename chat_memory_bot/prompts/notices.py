from __future__ import annotations

from .json_loader import load_texts

_DEFAULTS: dict[str, str] = {
    "terms_title": "Bot Terms and Conditions",
    "terms_body": (
        "Please agree to the following terms and conditions before using the bot:\n\n"
        "1. This bot is for entertainment purposes only.\n"
        "2. Do not use the bot to send inappropriate content.\n"
        "3. The bot is not responsible for misuse.\n\n"
        'By clicking "Agree", you accept these terms and conditions.'
    ),
    "terms_footer": "Thank you for using our bot!",
    "terms_agree_label": "Agree",
    "terms_decline_label": "Decline",
    "terms_agreed": "You have agreed to the terms and conditions!",
    "terms_declined": "You have declined the terms and conditions. You cannot use the bot.",
    "target_not_agreed": (
        "User {username} has not agreed to the terms and conditions. The command cannot be run."
    ),
    "command_failed": "❌ Something went wrong while running that command!",
    "chat_missing_input": "Please enter something to chat about.",
    "chat_loading": "⏳ Give me a second...",
    "chat_empty_reply": "No response received from the API.",
    "chat_api_failed": "❌ Something went wrong while calling the Google API.",
    "clear_confirm_title": "⚠️ Confirm history deletion",
    "clear_confirm_body": "Are you sure you want to delete your whole chat history from the database?",
    "clear_confirm_label": "✅ Yes",
    "clear_cancel_label": "❌ No",
    "clear_success_title": "🗑️ History deleted!",
    "clear_success_body": "Your chat history has been deleted from the database.",
    "clear_error_title": "❌ Error!",
    "clear_error_body": "Something went wrong while deleting your chat history.",
    "clear_cancelled_title": "🚫 Deletion cancelled",
    "clear_cancelled_body": "You cancelled deleting your chat history.",
    "clear_timeout_title": "⌛ Time is up",
    "clear_timeout_body": "Confirmation timed out. The command was cancelled.",
    "clear_not_yours": "Only the person who ran this command can use these buttons.",
    "help_title": "📚 Command list",
    "help_body": "Here are the commands you can use:",
    "help_chat": "`{prefix}chat` or `/chat` - Chat with the AI",
    "help_clear_memory": "`{prefix}cm` or `/clear_memory` - Delete your conversation history from the database",
    "help_help": "`{prefix}help` or `/help` - Show the command list",
}


def _texts() -> dict[str, str]:
    return load_texts("notices.json", _DEFAULTS)


def notice(key: str, **values: object) -> str:
    template = _texts().get(key, _DEFAULTS[key])
    if not values:
        return template
    return template.format(**values)
