from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class TurnRole(str, Enum):
    USER = "user"
    BOT = "bot"

    @classmethod
    def parse(cls, value: "TurnRole | str") -> "TurnRole":
        if isinstance(value, cls):
            return value
        raw = str(value or "").strip().lower()
        try:
            return cls(raw)
        except ValueError:
            raise ValueError(f"Unknown conversation role: {value!r}") from None


class ConsentStatus(str, Enum):
    AGREED = "agreed"
    DECLINED = "declined"

    @classmethod
    def parse(cls, value: "ConsentStatus | str") -> "ConsentStatus":
        if isinstance(value, cls):
            return value
        raw = str(value or "").strip().lower()
        try:
            return cls(raw)
        except ValueError:
            raise ValueError(f"Unknown consent status: {value!r}") from None


@dataclass(slots=True, frozen=True)
class ConversationTurn:
    user_id: str
    role: TurnRole
    message: str
    timestamp: str = ""
    turn_id: int = 0


@dataclass(slots=True)
class HistoryReadResult:
    """Outcome of a history read.

    Callers that only want turns use ``turns``; ``error`` is kept so a failed
    read can be told apart from an empty history in logs and tests.
    """

    turns: list[ConversationTurn] = field(default_factory=list)
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
