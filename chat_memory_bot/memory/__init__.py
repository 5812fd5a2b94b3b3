from .factory import build_memory_store
from .models import ConsentStatus, ConversationTurn, HistoryReadResult, TurnRole
from .postgres_store import PostgresMemoryStore
from .store import MemoryStore

__all__ = [
    "ConsentStatus",
    "ConversationTurn",
    "HistoryReadResult",
    "MemoryStore",
    "PostgresMemoryStore",
    "TurnRole",
    "build_memory_store",
]
