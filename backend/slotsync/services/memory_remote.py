"""
In-process remote store.

Behaves like the hosted row store closely enough for development and tests:
assigns ids and timestamps, cascades customer deletes to their bookings and
echoes every mutation to subscribers on a later loop iteration, the way a
server echo arrives after the writer already has its response.

Fault injection:
  - `offline = True` makes every call fail with a network error
  - `fail_next(kind)` fails the next N calls with the given kind
"""

import asyncio
import copy
import uuid
from datetime import datetime, timezone
from typing import Optional

from slotsync.core.config import get_settings
from slotsync.core.errors import ErrorKind, RemoteError
from slotsync.core.logging import get_logger
from slotsync.schemas.event import ChangeEvent, ChangeType, ChannelStatus
from slotsync.services.interfaces.remote import (
    EventHandler,
    RemoteSyncClient,
    Row,
    StatusHandler,
    Unsubscribe,
    entity_for,
)

logger = get_logger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class InMemorySyncClient(RemoteSyncClient):
    def __init__(self):
        settings = get_settings()
        self.customers_table = settings.CUSTOMERS_TABLE
        self.bookings_table = settings.BOOKINGS_TABLE
        self.tables: dict[str, dict[str, Row]] = {
            self.customers_table: {},
            self.bookings_table: {},
        }
        self.calls: list[tuple[str, str]] = []
        self.offline = False
        self._failures: list[ErrorKind] = []
        self._subscribers: dict[str, list[tuple[EventHandler, Optional[StatusHandler]]]] = {}

    # Test and development helpers

    def seed(self, collection: str, rows: list[Row]) -> list[Row]:
        """Store rows directly, without events. Missing ids/timestamps are filled in."""
        stored = []
        for row in rows:
            record = copy.deepcopy(row)
            record.setdefault("id", str(uuid.uuid4()))
            record.setdefault("created_at", _now())
            record.setdefault("updated_at", record["created_at"])
            self.tables[collection][str(record["id"])] = record
            stored.append(copy.deepcopy(record))
        return stored

    def fail_next(self, kind: ErrorKind, count: int = 1) -> None:
        self._failures.extend([kind] * count)

    def calls_to(self, method: str) -> list[str]:
        return [collection for name, collection in self.calls if name == method]

    def disconnect(self) -> None:
        """Drop every live channel, as a network blip would."""
        for handlers in self._subscribers.values():
            for _, on_status in handlers:
                if on_status is not None:
                    on_status(ChannelStatus.CLOSED)

    def reconnect(self) -> None:
        for handlers in self._subscribers.values():
            for _, on_status in handlers:
                if on_status is not None:
                    on_status(ChannelStatus.SUBSCRIBED)

    # RemoteSyncClient

    def _begin(self, method: str, collection: str) -> dict[str, Row]:
        self.calls.append((method, collection))
        if self.offline:
            raise RemoteError(ErrorKind.NETWORK, "Network request failed")
        if self._failures:
            kind = self._failures.pop(0)
            raise RemoteError(kind, f"Injected {kind.value} failure")
        if collection not in self.tables:
            raise RemoteError(ErrorKind.VALIDATION, f"Unknown table {collection}", 404)
        return self.tables[collection]

    def _get(self, table: dict[str, Row], collection: str, record_id: str) -> Row:
        record = table.get(str(record_id))
        if record is None:
            raise RemoteError(ErrorKind.VALIDATION, f"{collection} row {record_id} not found", 404)
        return record

    async def fetch_all(
        self,
        collection: str,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[Row]:
        table = self._begin("fetch_all", collection)
        rows = [copy.deepcopy(row) for row in table.values()]
        if order_by:
            rows.sort(key=lambda row: (row.get(order_by) is None, str(row.get(order_by))), reverse=descending)
        return rows

    async def fetch_one(self, collection: str, record_id: str) -> Row:
        table = self._begin("fetch_one", collection)
        return copy.deepcopy(self._get(table, collection, record_id))

    async def insert(self, collection: str, values: Row) -> Row:
        table = self._begin("insert", collection)
        record = copy.deepcopy(values)
        record["id"] = str(uuid.uuid4())
        record["created_at"] = record["updated_at"] = _now()
        table[record["id"]] = record
        self._publish(collection, ChangeType.INSERT, record=record)
        return copy.deepcopy(record)

    async def update(self, collection: str, record_id: str, patch: Row) -> Row:
        table = self._begin("update", collection)
        record = self._get(table, collection, record_id)
        record.update(copy.deepcopy(patch))
        record["id"] = str(record_id)
        record["updated_at"] = _now()
        self._publish(collection, ChangeType.UPDATE, record=record)
        return copy.deepcopy(record)

    async def delete(self, collection: str, record_id: str) -> None:
        table = self._begin("delete", collection)
        self._get(table, collection, record_id)
        del table[str(record_id)]
        self._publish(collection, ChangeType.DELETE, old_id=str(record_id))

        if collection == self.customers_table:
            bookings = self.tables[self.bookings_table]
            owned = [bid for bid, row in bookings.items() if str(row.get("customer_id")) == str(record_id)]
            for booking_id in owned:
                del bookings[booking_id]
                self._publish(self.bookings_table, ChangeType.DELETE, old_id=booking_id)

    async def subscribe(
        self,
        collection: str,
        on_event: EventHandler,
        on_status: Optional[StatusHandler] = None,
    ) -> Unsubscribe:
        entry = (on_event, on_status)
        self._subscribers.setdefault(collection, []).append(entry)
        if on_status is not None:
            asyncio.get_running_loop().call_soon(on_status, ChannelStatus.SUBSCRIBED)
        logger.info("memory_channel_subscribed", collection=collection)

        async def unsubscribe() -> None:
            handlers = self._subscribers.get(collection, [])
            if entry in handlers:
                handlers.remove(entry)

        return unsubscribe

    def _publish(
        self,
        collection: str,
        change: ChangeType,
        record: Optional[Row] = None,
        old_id: Optional[str] = None,
    ) -> None:
        handlers = self._subscribers.get(collection)
        if not handlers:
            return
        event = ChangeEvent(
            type=change,
            entity=entity_for(collection),
            record=copy.deepcopy(record) if record is not None else None,
            old_id=old_id,
        )
        loop = asyncio.get_running_loop()
        for on_event, _ in list(handlers):
            loop.call_soon(on_event, event)
