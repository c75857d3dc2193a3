"""Event channel for store connection notifications."""

from ledger.core.events.events import EventEmitter, StoreEvent

__all__ = ["EventEmitter", "StoreEvent"]
