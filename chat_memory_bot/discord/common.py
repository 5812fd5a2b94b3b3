from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum


def collapse_spaces(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    if limit <= 3:
        return text[:limit]

    window = text[:limit]
    cut = window.rfind(" ")
    if cut >= int(limit * 0.7):
        return window[:cut].strip()

    return (window[: limit - 3].rstrip() + "...").strip()


def chunk_text(text: str, limit: int = 1900) -> list[str]:
    if len(text) <= limit:
        return [text]
    parts: list[str] = []
    current = ""
    for line in text.splitlines(keepends=True):
        if len(current) + len(line) <= limit:
            current += line
            continue
        if current:
            parts.append(current)
            current = ""
        if len(line) <= limit:
            current = line
        else:
            for i in range(0, len(line), limit):
                parts.append(line[i : i + limit])
    if current:
        parts.append(current)
    return parts


def split_command(content: str, prefix: str) -> tuple[str, list[str]] | None:
    """Split ``<prefix><name> rest`` into a lowercased name and the rest as typed.

    Only the name is cut on whitespace; line breaks and spacing inside the
    rest are kept so the stored turn matches the message.
    """
    if not prefix or not content.startswith(prefix):
        return None
    parts = content[len(prefix) :].strip().split(maxsplit=1)
    if not parts:
        return None
    return parts[0].lower(), parts[1:]


class ConfirmationState(str, Enum):
    PROMPTED = "prompted"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    TIMED_OUT = "timed_out"


@dataclass(slots=True)
class PendingConfirmation:
    """One destructive action waiting on its issuer: confirm, cancel or timeout.

    Only the first resolution is accepted; every later one is ignored.
    """

    user_id: str
    state: ConfirmationState = ConfirmationState.PROMPTED

    @property
    def resolved(self) -> bool:
        return self.state is not ConfirmationState.PROMPTED

    def accepts(self, user_id: str) -> bool:
        return str(user_id) == self.user_id

    def resolve(self, outcome: ConfirmationState) -> bool:
        if outcome is ConfirmationState.PROMPTED:
            raise ValueError("PROMPTED is not a terminal state")
        if self.resolved:
            return False
        self.state = outcome
        return True
