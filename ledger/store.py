"""
Ledger Store - connection lifecycle and CRUD over expense and income records.

Usage:
    store = LedgerStore(Credentials(host="localhost", database="expenses"))
    store.on(StoreEvent.CONNECT, lambda event: print("connected"))

    store.put_expense({"account": "visa", "amount": 12.5, ...})
    expenses = await store.get_expenses(start, end)
    await store.edit_expense(expenses[0].id, {"category": "food"})
    await store.remove_expense(expenses[0].id)

    store.disconnect()
"""

import asyncio
from typing import Any, Callable, List, Mapping, Optional, Set, Union

from ledger.config import Settings
from ledger.config import settings as default_settings
from ledger.core.events import EventEmitter, StoreEvent
from ledger.core.logging import correlation_scope, get_logger
from ledger.domain.exceptions import StoreConnectionError, StoreNotConnectedError
from ledger.domain.models import RECORD_FIELDS, LedgerRecord, RecordChanges
from ledger.domain.repositories.protocols import IConnection, IDocumentDriver, ReadyState
from ledger.domain.value_objects import Credentials, RecordKind

logger = get_logger(__name__)

Changes = Union[RecordChanges, Mapping[str, Any]]


class LedgerStore:
    """Owns the database handle and the expense/income collections.

    Connection-state changes are published on the store's own event channel:
    StoreEvent.CONNECT and StoreEvent.DISCONNECT without data, StoreEvent.ERROR
    with ``error=<Exception>``. Connection failures are only ever reported
    there, never raised.
    """

    def __init__(
        self,
        credentials: Credentials,
        connect_on_init: bool = True,
        driver: Optional[IDocumentDriver] = None,
    ):
        """
        Args:
            credentials: Where and as whom to connect
            connect_on_init: Call connect() right away. Needs a running event
                loop when the real MongoDB driver is used.
            driver: Database driver; defaults to MongoDriver
        """
        if driver is None:
            from ledger.infrastructure.database.mongo import MongoDriver

            driver = MongoDriver()

        self._credentials = credentials
        self._driver = driver
        self._db: Optional[IConnection] = None
        self._events = EventEmitter()
        self._pending: Set[asyncio.Task] = set()

        if connect_on_init:
            self.connect()

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def on(self, event: StoreEvent, callback: Callable) -> None:
        """Subscribe to a store event. Signature: callback(event, **data)."""
        self._events.subscribe(event, callback)

    def off(self, event: StoreEvent, callback: Callable) -> None:
        """Unsubscribe from a store event."""
        self._events.unsubscribe(event, callback)

    def _on_connect(self) -> None:
        logger.info(f"Connected to ledger database {self._credentials.database}")
        self._events.emit(StoreEvent.CONNECT)

    def _on_disconnect(self) -> None:
        logger.info(f"Disconnected from ledger database {self._credentials.database}")
        self._events.emit(StoreEvent.DISCONNECT)

    def _on_error(self, error: Any) -> None:
        if not isinstance(error, Exception):
            error = StoreConnectionError(str(error))
        logger.error(f"Ledger database connection error: {error}")
        self._events.emit(StoreEvent.ERROR, error=error)

    # -------------------------------------------------------------------------
    # Connection lifecycle
    # -------------------------------------------------------------------------

    @property
    def credentials(self) -> Credentials:
        return self._credentials

    @property
    def is_connected(self) -> bool:
        """Whether there is an open connection to the database."""
        return self._db is not None and self._db.ready_state == ReadyState.CONNECTED

    def connect(self) -> None:
        """
        Start connecting to the database.

        StoreEvent.CONNECT is emitted on success and StoreEvent.ERROR on any
        failure. Does nothing while connected or while a connection attempt
        is still in flight.
        """
        if self._db is not None and self._db.ready_state in (
            ReadyState.CONNECTED,
            ReadyState.CONNECTING,
        ):
            return

        logger.debug(
            f"Connecting to {self._credentials.host}:{self._credentials.port}"
            f"/{self._credentials.database}"
        )
        self._db = self._driver.open_connection(self._credentials.to_uri())
        self._db.on_open(self._on_connect)
        self._db.on_error(self._on_error)

    def disconnect(self) -> None:
        """
        Close the connection and emit StoreEvent.DISCONNECT.

        The close is not awaited. Does nothing when not connected.
        """
        if not self.is_connected:
            return

        self._db.close()
        self._on_disconnect()

    def _connection(self) -> IConnection:
        if self._db is None:
            raise StoreNotConnectedError()
        return self._db

    # -------------------------------------------------------------------------
    # Records (shared by both kinds)
    # -------------------------------------------------------------------------

    def _put(self, kind: RecordKind, data: Mapping[str, Any]) -> None:
        record = LedgerRecord.from_input(data)
        db = self._connection()
        # The insert task copies the context, correlation ID included
        with correlation_scope():
            logger.debug(f"Saving {kind.value} record at {record.timestamp}")
            task = asyncio.get_running_loop().create_task(self._save(db, kind, record))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _save(self, db: IConnection, kind: RecordKind, record: LedgerRecord):
        # Insert failures are not reported to callers or listeners
        try:
            record_id = await db.insert(kind.collection, record.to_document())
        except Exception as e:
            logger.warning(f"Failed to save {kind.value} record: {e}")
            return
        logger.debug(f"Saved {kind.value} record {record_id}")

    async def _get(self, kind: RecordKind, s: int, e: int) -> List[LedgerRecord]:
        with correlation_scope():
            logger.debug(f"Fetching {kind.collection} in [{s}, {e})")
            docs = await self._connection().find(
                kind.collection,
                {"timestamp": {"$gte": s, "$lt": e}},
                RECORD_FIELDS,
                sort=("timestamp", -1),
            )
            return [LedgerRecord.from_document(doc) for doc in docs]

    async def _remove(self, kind: RecordKind, record_id: str) -> None:
        with correlation_scope():
            logger.debug(f"Removing {kind.value} record {record_id}")
            # Zero deleted documents is still a success
            await self._connection().remove(kind.collection, record_id)

    async def _edit(self, kind: RecordKind, record_id: str, changes: Changes) -> None:
        if not isinstance(changes, RecordChanges):
            changes = RecordChanges.from_input(changes)
        db = self._connection()
        if changes.is_empty:
            return
        with correlation_scope():
            logger.debug(
                f"Editing {kind.value} record {record_id}: "
                f"{', '.join(sorted(changes.fields_set))}"
            )
            # Zero matched documents is still a success
            await db.update(kind.collection, record_id, changes.to_update())

    async def flush(self) -> None:
        """Wait for every insert started by put_expense()/put_income()."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    # -------------------------------------------------------------------------
    # Expenses
    # -------------------------------------------------------------------------

    def put_expense(self, e: Mapping[str, Any]) -> None:
        """
        Insert an expense record without waiting for the write.

        Requires the fields of LedgerRecord; other keys are ignored.

        Raises:
            ValidationError: If the input is not a valid record
            StoreNotConnectedError: If connect() was never called
        """
        self._put(RecordKind.EXPENSE, e)

    async def get_expenses(self, s: int, e: int) -> List[LedgerRecord]:
        """
        Get expenses between ``s`` (inclusive) and ``e`` (exclusive).

        Args:
            s: lower bound, unix timestamp in seconds
            e: upper bound, unix timestamp in seconds

        Returns:
            Expense records, newest first
        """
        return await self._get(RecordKind.EXPENSE, s, e)

    async def remove_expense(self, id: str) -> None:
        """Remove the expense with ``id``. Succeeds even if nothing matched."""
        await self._remove(RecordKind.EXPENSE, id)

    async def edit_expense(self, id: str, changes: Changes) -> None:
        """
        Edit the expense with ``id``.

        Only description, timestamp and category can change. Succeeds even
        if nothing matched.
        """
        await self._edit(RecordKind.EXPENSE, id, changes)

    # -------------------------------------------------------------------------
    # Income
    # -------------------------------------------------------------------------

    def put_income(self, i: Mapping[str, Any]) -> None:
        """Insert an income record without waiting for the write."""
        self._put(RecordKind.INCOME, i)

    async def get_income(self, s: int, e: int) -> List[LedgerRecord]:
        """Get income between ``s`` (inclusive) and ``e`` (exclusive), newest first."""
        return await self._get(RecordKind.INCOME, s, e)

    async def remove_income(self, id: str) -> None:
        await self._remove(RecordKind.INCOME, id)

    async def edit_income(self, id: str, changes: Changes) -> None:
        await self._edit(RecordKind.INCOME, id, changes)


def create_store(
    settings: Optional[Settings] = None,
    driver: Optional[IDocumentDriver] = None,
) -> LedgerStore:
    """Create a LedgerStore configured from settings (LEDGER_* environment)."""
    settings = settings or default_settings
    return LedgerStore(
        Credentials.from_settings(settings),
        connect_on_init=settings.connect_on_init,
        driver=driver,
    )
