"""Database drivers for the ledger store."""

from ledger.infrastructure.database.memory import MemoryConnection, MemoryDriver
from ledger.infrastructure.database.mongo import MongoConnection, MongoDriver

__all__ = ["MemoryConnection", "MemoryDriver", "MongoConnection", "MongoDriver"]
