"""
MongoDB driver - connection handles over pymongo's asyncio client.

The handle is returned before the server has been reached. Opening runs as a
task on the running event loop and reports back through the callbacks
registered with on_open() / on_error(), so bad credentials or an unreachable
server never raise at open time.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from bson import ObjectId
from pymongo import AsyncMongoClient
from pymongo.errors import ConnectionFailure

from ledger.domain.repositories.protocols import ErrorCallback, OpenCallback, ReadyState

logger = logging.getLogger(__name__)


class MongoConnection:
    """
    A single MongoDB connection handle.

    Handles:
    - Asynchronous open with a ping to confirm the server is reachable
    - Open/error callbacks
    - Non-blocking close
    - Record queries against the database named in the URI
    """

    def __init__(
        self,
        uri: str,
        client_factory: Optional[Callable[..., Any]] = None,
        client_options: Optional[Dict[str, Any]] = None,
    ):
        self._uri = uri
        self._client_factory = client_factory or AsyncMongoClient
        self._client_options = client_options or {}
        self._client = None
        self._db = None
        self._state = ReadyState.CONNECTING
        self._open_callbacks: List[OpenCallback] = []
        self._error_callbacks: List[ErrorCallback] = []
        self._closing: Optional[asyncio.Task] = None
        self._opening = asyncio.get_running_loop().create_task(self._open())

    @property
    def ready_state(self) -> ReadyState:
        return self._state

    def on_open(self, callback: OpenCallback) -> None:
        self._open_callbacks.append(callback)

    def on_error(self, callback: ErrorCallback) -> None:
        self._error_callbacks.append(callback)

    async def _open(self):
        try:
            self._client = self._client_factory(self._uri, **self._client_options)
            self._db = self._client.get_default_database()
            await self._client.admin.command("ping")
        except Exception as e:
            logger.debug(f"MongoDB connection failed: {e}")
            self._state = ReadyState.DISCONNECTED
            if self._client is not None:
                await self._close()
            for callback in list(self._error_callbacks):
                callback(e)
            return

        if self._state != ReadyState.CONNECTING:
            # Closed while the open was in flight
            return

        self._state = ReadyState.CONNECTED
        logger.debug(f"Connected to MongoDB database: {self._db.name}")
        for callback in list(self._open_callbacks):
            callback()

    def close(self) -> None:
        """Mark the handle as closing and close the client in the background."""
        if self._state in (ReadyState.DISCONNECTED, ReadyState.DISCONNECTING):
            return
        self._state = ReadyState.DISCONNECTING
        self._closing = asyncio.get_running_loop().create_task(self._close())

    async def _close(self):
        try:
            if self._client is not None:
                await self._client.close()
        except Exception as e:
            logger.warning(f"Error closing MongoDB connection: {e}")
        finally:
            self._state = ReadyState.DISCONNECTED
            logger.debug("Closed MongoDB connection")

    async def _database(self):
        """Wait for the open to settle and return the database."""
        await self._opening
        if self._state != ReadyState.CONNECTED:
            raise ConnectionFailure(
                f"MongoDB connection is {self._state.name.lower()}"
            )
        return self._db

    async def find(
        self,
        collection: str,
        filter: Mapping[str, Any],
        projection: Sequence[str],
        sort: Optional[Tuple[str, int]] = None,
    ) -> List[Dict[str, Any]]:
        db = await self._database()
        cursor = db[collection].find(dict(filter), list(projection))
        if sort is not None:
            cursor = cursor.sort(*sort)
        return await cursor.to_list(None)

    async def insert(self, collection: str, document: Mapping[str, Any]) -> Any:
        db = await self._database()
        result = await db[collection].insert_one(dict(document))
        return result.inserted_id

    async def update(
        self, collection: str, record_id: str, changes: Mapping[str, Any]
    ) -> int:
        db = await self._database()
        result = await db[collection].update_one(
            {"_id": ObjectId(record_id)}, {"$set": dict(changes)}
        )
        return result.matched_count

    async def remove(self, collection: str, record_id: str) -> int:
        db = await self._database()
        result = await db[collection].delete_one({"_id": ObjectId(record_id)})
        return result.deleted_count


class MongoDriver:
    """Opens MongoConnection handles.

    Extra keyword arguments are passed to every AsyncMongoClient, e.g.
    ``MongoDriver(serverSelectionTimeoutMS=2000)``.
    """

    def __init__(
        self, client_factory: Optional[Callable[..., Any]] = None, **client_options
    ):
        self._client_factory = client_factory
        self._client_options = client_options

    def open_connection(self, uri: str) -> MongoConnection:
        return MongoConnection(uri, self._client_factory, self._client_options)
