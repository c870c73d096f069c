"""
Remote Sync Client interface.
The authoritative row store: CRUD plus a subscribe-to-changes primitive.
"""

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Optional

from slotsync.core.config import get_settings
from slotsync.schemas.event import ChangeEvent, ChannelStatus, EntityType

Row = dict[str, Any]
EventHandler = Callable[[ChangeEvent], None]
StatusHandler = Callable[[ChannelStatus], None]
Unsubscribe = Callable[[], Awaitable[None]]


def entity_for(collection: str) -> EntityType:
    settings = get_settings()
    if collection == settings.BOOKINGS_TABLE:
        return EntityType.BOOKING
    if collection == settings.CUSTOMERS_TABLE:
        return EntityType.CUSTOMER
    raise ValueError(f"Unknown collection: {collection}")


class RemoteSyncClient(ABC):
    """
    Interface for the remote store.

    Implementations:
    - RestSyncClient: PostgREST-style HTTP API, changes via Redis pub/sub
    - InMemorySyncClient: in-process store for development and tests

    Every method raises RemoteError with a classified kind on failure.
    No retries or timeouts are layered on top by callers.
    """

    @abstractmethod
    async def fetch_all(
        self,
        collection: str,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[Row]:
        """
        Bulk load every row of a collection.

        Args:
            collection: Table name
            order_by: Column to sort on
            descending: Sort direction
        """
        pass

    @abstractmethod
    async def fetch_one(self, collection: str, record_id: str) -> Row:
        """Load a single row by id. Missing rows raise a validation RemoteError."""
        pass

    @abstractmethod
    async def insert(self, collection: str, values: Row) -> Row:
        """Insert a row and return the stored copy (with id and timestamps)."""
        pass

    @abstractmethod
    async def update(self, collection: str, record_id: str, patch: Row) -> Row:
        """Apply a partial update and return the stored copy."""
        pass

    @abstractmethod
    async def delete(self, collection: str, record_id: str) -> None:
        pass

    @abstractmethod
    async def subscribe(
        self,
        collection: str,
        on_event: EventHandler,
        on_status: Optional[StatusHandler] = None,
    ) -> Unsubscribe:
        """
        Start receiving change events for a collection.

        Delivery is best-effort and at-most-once; nothing is replayed after
        a dropped connection.

        Returns:
            Coroutine function that stops the subscription
        """
        pass

    async def close(self) -> None:
        """Release connections. No-op by default."""
        pass
