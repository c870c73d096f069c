"""
Local cache interface.
Durable snapshot of the last known-good collections, read only when the
remote store is unreachable.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class LocalCache(ABC):
    """
    Interface for the offline snapshot store.

    Implementations:
    - RedisCache: JSON blob per collection in Redis
    - MemoryCache: process-local dict
    """

    @abstractmethod
    async def save(self, collection: str, records: list[dict[str, Any]]) -> None:
        """
        Replace the snapshot for a collection.

        Args:
            collection: Collection name (customers, bookings)
            records: JSON-serializable records; supersede any previous snapshot
        """
        pass

    @abstractmethod
    async def load(self, collection: str) -> Optional[list[dict[str, Any]]]:
        """
        Read the last snapshot for a collection.

        Returns:
            The saved records, or None when nothing was ever saved
        """
        pass

    async def close(self) -> None:
        pass
