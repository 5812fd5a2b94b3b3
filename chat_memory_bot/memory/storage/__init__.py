from .consent import MemoryConsentMixin
from .history import MemoryHistoryMixin
from .schema import MemorySchemaMixin

__all__ = [
    "MemorySchemaMixin",
    "MemoryHistoryMixin",
    "MemoryConsentMixin",
]
