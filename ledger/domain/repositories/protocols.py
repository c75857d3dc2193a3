"""Driver protocols (interfaces) for dependency injection.

The ledger store talks to the database only through these protocols, so the
real MongoDB driver and the in-memory driver are interchangeable.
"""

from enum import IntEnum
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple


class ReadyState(IntEnum):
    """Connection handle states, numbered as in the native driver."""

    DISCONNECTED = 0
    CONNECTED = 1
    CONNECTING = 2
    DISCONNECTING = 3


OpenCallback = Callable[[], None]
ErrorCallback = Callable[[Any], None]


class IConnection(Protocol):
    """Protocol for an open (or opening) database connection handle."""

    @property
    def ready_state(self) -> ReadyState:
        """Current state of the handle."""
        ...

    def on_open(self, callback: OpenCallback) -> None:
        """Register a callback fired once the connection is established."""
        ...

    def on_error(self, callback: ErrorCallback) -> None:
        """Register a callback fired when the connection fails."""
        ...

    def close(self) -> None:
        """Start closing the connection without waiting for it to finish."""
        ...

    async def find(
        self,
        collection: str,
        filter: Mapping[str, Any],
        projection: Sequence[str],
        sort: Optional[Tuple[str, int]] = None,
    ) -> List[Dict[str, Any]]:
        """Return the documents matching ``filter``."""
        ...

    async def insert(self, collection: str, document: Mapping[str, Any]) -> Any:
        """Insert a document and return its new id."""
        ...

    async def update(
        self, collection: str, record_id: str, changes: Mapping[str, Any]
    ) -> int:
        """Set fields on the document with ``record_id``; return matched count."""
        ...

    async def remove(self, collection: str, record_id: str) -> int:
        """Delete the document with ``record_id``; return deleted count."""
        ...


class IDocumentDriver(Protocol):
    """Protocol for a document database driver."""

    def open_connection(self, uri: str) -> IConnection:
        """Return a handle immediately; the open completes asynchronously."""
        ...
