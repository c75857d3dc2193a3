"""
In-memory driver - a dict-backed stand-in for MongoDB.

Used by the test suite and for running the store without a server. It speaks
the same protocol as MongoDriver: handles open on the next loop iteration,
ids are bson ObjectIds, and range filters, projections and single-key sorts
behave as they do on the server.

Data lives on the driver, so it survives disconnect()/connect() cycles.
"""

import asyncio
import copy
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from bson import ObjectId
from pymongo.errors import ConnectionFailure

from ledger.domain.repositories.protocols import ErrorCallback, OpenCallback, ReadyState

logger = logging.getLogger(__name__)

_OPERATORS = {
    "$gte": lambda value, arg: value is not None and value >= arg,
    "$lt": lambda value, arg: value is not None and value < arg,
}


def matches(document: Mapping[str, Any], filter: Mapping[str, Any]) -> bool:
    """Check a document against a filter of range clauses."""
    for field, condition in filter.items():
        value = document.get(field)
        for op, arg in condition.items():
            if op not in _OPERATORS:
                raise ValueError(f"Unsupported filter operator: {op}")
            if not _OPERATORS[op](value, arg):
                return False
    return True


class MemoryConnection:
    """Connection handle over a MemoryDriver's collections."""

    def __init__(self, driver: "MemoryDriver"):
        self._driver = driver
        self._state = ReadyState.CONNECTING
        self._open_callbacks: List[OpenCallback] = []
        self._error_callbacks: List[ErrorCallback] = []
        self._settled = asyncio.Event()
        asyncio.get_running_loop().call_soon(self._open)

    @property
    def ready_state(self) -> ReadyState:
        return self._state

    def on_open(self, callback: OpenCallback) -> None:
        self._open_callbacks.append(callback)

    def on_error(self, callback: ErrorCallback) -> None:
        self._error_callbacks.append(callback)

    def _open(self):
        self._settled.set()
        if self._state != ReadyState.CONNECTING:
            return

        if self._driver.fail_open is not None:
            self._state = ReadyState.DISCONNECTED
            for callback in list(self._error_callbacks):
                callback(self._driver.fail_open)
            return

        self._state = ReadyState.CONNECTED
        for callback in list(self._open_callbacks):
            callback()

    def close(self) -> None:
        if self._state in (ReadyState.DISCONNECTED, ReadyState.DISCONNECTING):
            return
        self._state = ReadyState.DISCONNECTING
        asyncio.get_running_loop().call_soon(self._finish_close)

    def _finish_close(self):
        self._state = ReadyState.DISCONNECTED

    async def _collection(self, name: str, operation: str) -> Dict[ObjectId, dict]:
        await self._settled.wait()
        if self._state != ReadyState.CONNECTED:
            raise ConnectionFailure(f"Memory connection is {self._state.name.lower()}")
        self._driver.calls.append(operation)
        error = self._driver.fail_on.get(operation)
        if error is not None:
            raise error
        return self._driver.collections.setdefault(name, {})

    async def find(
        self,
        collection: str,
        filter: Mapping[str, Any],
        projection: Sequence[str],
        sort: Optional[Tuple[str, int]] = None,
    ) -> List[Dict[str, Any]]:
        documents = await self._collection(collection, "find")
        found = [doc for doc in documents.values() if matches(doc, filter)]
        if sort is not None:
            key, direction = sort
            found.sort(key=lambda doc: doc.get(key), reverse=direction < 0)
        fields = set(projection) | {"_id"}
        return [
            {k: copy.deepcopy(v) for k, v in doc.items() if k in fields}
            for doc in found
        ]

    async def insert(self, collection: str, document: Mapping[str, Any]) -> Any:
        documents = await self._collection(collection, "insert")
        record_id = ObjectId()
        documents[record_id] = {"_id": record_id, **copy.deepcopy(dict(document))}
        return record_id

    async def update(
        self, collection: str, record_id: str, changes: Mapping[str, Any]
    ) -> int:
        documents = await self._collection(collection, "update")
        document = documents.get(ObjectId(record_id))
        if document is None:
            return 0
        document.update(copy.deepcopy(dict(changes)))
        return 1

    async def remove(self, collection: str, record_id: str) -> int:
        documents = await self._collection(collection, "remove")
        return 1 if documents.pop(ObjectId(record_id), None) is not None else 0


class MemoryDriver:
    """
    Driver keeping collections in memory.

    Args:
        fail_open: Value handed to error callbacks instead of opening. May be
            an exception or any other value (e.g. a plain message string).
        fail_on: Map of operation name ("find", "insert", "update",
            "remove") to the exception that operation should raise.
    """

    def __init__(
        self,
        fail_open: Any = None,
        fail_on: Optional[Dict[str, Exception]] = None,
    ):
        self.fail_open = fail_open
        self.fail_on: Dict[str, Exception] = dict(fail_on or {})
        self.collections: Dict[str, Dict[ObjectId, dict]] = {}
        self.opened: List[str] = []
        self.calls: List[str] = []

    def open_connection(self, uri: str) -> MemoryConnection:
        logger.debug("Opening in-memory connection")
        self.opened.append(uri)
        return MemoryConnection(self)

    def documents(self, collection: str) -> List[dict]:
        """Stored documents of a collection, in insertion order."""
        return list(self.collections.get(collection, {}).values())
