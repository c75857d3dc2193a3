"""Event channel for ledger store connection notifications.

Each store owns its own emitter, so listeners registered on one store never
see events from another.

Example usage:
    from ledger.core.events import StoreEvent

    store.on(StoreEvent.CONNECT, lambda e, **d: print("connected"))
    store.on(StoreEvent.ERROR, lambda e, error: print(f"failed: {error}"))
"""

import logging
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)


class StoreEvent(Enum):
    """Connection-state events emitted by a ledger store."""

    CONNECT = "connect"
    DISCONNECT = "disconnect"
    ERROR = "error"


class EventEmitter:
    """Per-instance pub/sub for StoreEvent notifications."""

    def __init__(self):
        self._listeners: dict[StoreEvent, list[Callable]] = {
            event: [] for event in StoreEvent
        }

    def emit(self, event: StoreEvent, **data: Any) -> None:
        """Emit an event to all registered listeners.

        Events are fire-and-forget - listener exceptions are logged but never
        propagate to the caller.

        Args:
            event: The event type to emit
            **data: Additional event data passed to listeners
        """
        for listener in list(self._listeners[event]):
            try:
                listener(event, **data)
            except Exception as e:
                logger.warning(
                    f"Event listener error for {event.value}: {e}", exc_info=True
                )

    def subscribe(self, event: StoreEvent, callback: Callable) -> None:
        """Subscribe a callback to an event.

        Args:
            event: The event type to subscribe to
            callback: Function to call when event is emitted.
                      Signature: callback(event: StoreEvent, **data)
        """
        self._listeners[event].append(callback)

    def unsubscribe(self, event: StoreEvent, callback: Callable) -> None:
        """Unsubscribe a callback from an event."""
        try:
            self._listeners[event].remove(callback)
        except ValueError:
            pass  # Callback wasn't subscribed
