"""
Ledger - expense and income records on MongoDB.

Usage:
    from ledger import Credentials, LedgerStore, StoreEvent

    store = LedgerStore(Credentials(host="localhost", database="expenses"))
    store.on(StoreEvent.ERROR, lambda event, error: print(error))

    store.put_income({...})
    income = await store.get_income(start, end)
"""

from ledger.config import Settings
from ledger.core.events import StoreEvent
from ledger.core.logging import configure_logging
from ledger.domain.exceptions import (
    DomainError,
    StoreConnectionError,
    StoreNotConnectedError,
    ValidationError,
)
from ledger.domain.models import LedgerRecord, RecordChanges
from ledger.domain.value_objects import Credentials, RecordKind
from ledger.store import LedgerStore, create_store

__version__ = "1.0.0"

__all__ = [
    "LedgerStore",
    "create_store",
    "configure_logging",
    "Credentials",
    "Settings",
    "StoreEvent",
    "LedgerRecord",
    "RecordChanges",
    "RecordKind",
    # Errors
    "DomainError",
    "StoreConnectionError",
    "StoreNotConnectedError",
    "ValidationError",
]
