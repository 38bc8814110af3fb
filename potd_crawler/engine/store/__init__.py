"""Record store SPI and implementations."""

from .base import BaseStore
from .memory_store import InMemoryStore
from .sqlite_store import SQLiteStore

__all__ = ["BaseStore", "InMemoryStore", "SQLiteStore"]
