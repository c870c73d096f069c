"""
Remote Sync Client for a PostgREST-style row API.

Requests:
  - GET    /rest/v1/{table}?select=*&order={col}.{asc|desc}
  - GET    /rest/v1/{table}?select=*&id=eq.{id}
  - POST   /rest/v1/{table}              (Prefer: return=representation)
  - PATCH  /rest/v1/{table}?id=eq.{id}   (Prefer: return=representation)
  - DELETE /rest/v1/{table}?id=eq.{id}
    (customer deletes first read GET /rest/v1/bookings?select=id&customer_id=eq.{id})

Transport failures map to `network`, HTTP statuses through kind_for_status.
Timeouts are the HTTP client's; nothing here retries.
Live changes travel over the RedisChangeFeed: every confirmed write made
through this client is published there, and subscribe listens on it.
"""

from typing import Any, Optional

import httpx

from slotsync.core.config import get_settings
from slotsync.core.errors import ErrorKind, RemoteError, classify_error, kind_for_status
from slotsync.core.logging import get_logger
from slotsync.schemas.event import ChangeEvent, ChangeType
from slotsync.services.change_feed import RedisChangeFeed
from slotsync.services.interfaces.remote import (
    EventHandler,
    RemoteSyncClient,
    Row,
    StatusHandler,
    Unsubscribe,
    entity_for,
)

logger = get_logger(__name__)

RETURN_REPRESENTATION = {"Prefer": "return=representation"}


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or body)
    return str(body)


class RestSyncClient(RemoteSyncClient):
    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        change_feed: Optional[RedisChangeFeed] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        base_url = (base_url or settings.REMOTE_URL).rstrip("/")
        api_key = settings.REMOTE_API_KEY if api_key is None else api_key
        headers = {"Accept": "application/json"}
        if api_key:
            headers["apikey"] = api_key
            headers["Authorization"] = f"Bearer {api_key}"

        self._client = httpx.AsyncClient(
            base_url=f"{base_url}/rest/v1",
            headers=headers,
            timeout=timeout or settings.REMOTE_TIMEOUT,
            transport=transport,
        )
        self.change_feed = change_feed or RedisChangeFeed()
        self.customers_table = settings.CUSTOMERS_TABLE
        self.bookings_table = settings.BOOKINGS_TABLE

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            message = _error_message(e.response)
            logger.warning("remote_request_rejected", method=method, path=path, status_code=status_code, error=message)
            raise RemoteError(kind_for_status(status_code), message, status_code) from e
        except httpx.HTTPError as e:
            logger.warning("remote_request_failed", method=method, path=path, error=str(e))
            raise RemoteError(classify_error(e), str(e) or type(e).__name__) from e
        return response

    @staticmethod
    def _single(collection: str, record_id: str, rows: Any) -> Row:
        if not isinstance(rows, list) or not rows:
            raise RemoteError(ErrorKind.VALIDATION, f"{collection} row {record_id} not found", 404)
        return rows[0]

    async def fetch_all(
        self,
        collection: str,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[Row]:
        params = {"select": "*"}
        if order_by:
            params["order"] = f"{order_by}.{'desc' if descending else 'asc'}"
        response = await self._request("GET", f"/{collection}", params=params)
        return response.json()

    async def fetch_one(self, collection: str, record_id: str) -> Row:
        response = await self._request(
            "GET", f"/{collection}", params={"select": "*", "id": f"eq.{record_id}"}
        )
        return self._single(collection, record_id, response.json())

    async def insert(self, collection: str, values: Row) -> Row:
        response = await self._request(
            "POST", f"/{collection}", json=[values], headers=RETURN_REPRESENTATION
        )
        row = self._single(collection, "new", response.json())
        await self._announce(collection, ChangeType.INSERT, record=row)
        return row

    async def update(self, collection: str, record_id: str, patch: Row) -> Row:
        response = await self._request(
            "PATCH",
            f"/{collection}",
            params={"id": f"eq.{record_id}"},
            json=patch,
            headers=RETURN_REPRESENTATION,
        )
        row = self._single(collection, record_id, response.json())
        await self._announce(collection, ChangeType.UPDATE, record=row)
        return row

    async def delete(self, collection: str, record_id: str) -> None:
        # Customer deletes cascade to bookings; their ids are gone after the DELETE
        cascaded = []
        if collection == self.customers_table:
            cascaded = await self._booking_ids_for(record_id)

        await self._request("DELETE", f"/{collection}", params={"id": f"eq.{record_id}"})
        await self._announce(collection, ChangeType.DELETE, old_id=str(record_id))
        for booking_id in cascaded:
            await self._announce(self.bookings_table, ChangeType.DELETE, old_id=booking_id)

    async def _booking_ids_for(self, customer_id: str) -> list[str]:
        response = await self._request(
            "GET",
            f"/{self.bookings_table}",
            params={"select": "id", "customer_id": f"eq.{customer_id}"},
        )
        return [str(row["id"]) for row in response.json()]

    async def _announce(
        self,
        collection: str,
        change: ChangeType,
        record: Optional[Row] = None,
        old_id: Optional[str] = None,
    ) -> None:
        """Publish a confirmed write. The write already happened, so failures are only logged."""
        try:
            event = ChangeEvent(type=change, entity=entity_for(collection), record=record, old_id=old_id)
            await self.change_feed.publish(collection, event)
        except Exception as e:
            logger.error("change_publish_failed", collection=collection, type=change.value, error=str(e))

    async def subscribe(
        self,
        collection: str,
        on_event: EventHandler,
        on_status: Optional[StatusHandler] = None,
    ) -> Unsubscribe:
        return await self.change_feed.subscribe(collection, on_event, on_status)

    async def close(self) -> None:
        await self._client.aclose()
