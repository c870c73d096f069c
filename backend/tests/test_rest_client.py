"""
Tests for the PostgREST client against a mocked HTTP transport.
"""

import json
from datetime import date

import httpx
import pytest

from slotsync.core.errors import ErrorKind, RemoteError
from slotsync.models.adapters import booking_from_row
from slotsync.models.customer import Customer
from slotsync.models.slot import SlotStatus
from slotsync.schemas.event import ChangeType, EntityType
from slotsync.services.realtime_applier import RealtimeApplier
from slotsync.services.rest_remote import RestSyncClient
from slotsync.store.actions import BookingInserted, CustomerInserted
from slotsync.store.state_store import StateStore


class RecordingFeed:
    """Change feed stand-in that keeps what was published and subscribed."""

    def __init__(self):
        self.published = []
        self.calls = []

    async def publish(self, collection, event):
        self.published.append((collection, event))
        return 1

    async def subscribe(self, collection, on_event, on_status=None):
        self.calls.append(collection)

        async def unsubscribe():
            self.calls.append(f"-{collection}")

        return unsubscribe


def make_client(handler, feed=None) -> tuple[RestSyncClient, list[httpx.Request]]:
    requests = []

    def record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    client = RestSyncClient(
        base_url="https://project.example.co/",
        api_key="anon-key",
        change_feed=feed or RecordingFeed(),
        transport=httpx.MockTransport(record),
    )
    return client, requests


@pytest.mark.asyncio
async def test_fetch_all_orders_and_authenticates():
    client, requests = make_client(lambda r: httpx.Response(200, json=[{"id": "c-1", "name": "Asha"}]))

    rows = await client.fetch_all("customers", order_by="created_at", descending=True)

    assert rows == [{"id": "c-1", "name": "Asha"}]
    request = requests[0]
    assert request.method == "GET"
    assert request.url.path == "/rest/v1/customers"
    assert request.url.params["order"] == "created_at.desc"
    assert request.url.params["select"] == "*"
    assert request.headers["apikey"] == "anon-key"
    assert request.headers["Authorization"] == "Bearer anon-key"
    await client.close()


@pytest.mark.asyncio
async def test_insert_returns_representation():
    def handler(request):
        body = json.loads(request.content)
        return httpx.Response(201, json=[{**body[0], "id": "b-1"}])

    client, requests = make_client(handler)

    row = await client.insert("bookings", {"customer_id": "c-1"})

    assert row == {"customer_id": "c-1", "id": "b-1"}
    assert requests[0].method == "POST"
    assert requests[0].headers["Prefer"] == "return=representation"
    await client.close()


@pytest.mark.asyncio
async def test_update_filters_by_id():
    client, requests = make_client(lambda r: httpx.Response(200, json=[{"id": "c-1", "city": "Mumbai"}]))

    row = await client.update("customers", "c-1", {"city": "Mumbai"})

    assert row["city"] == "Mumbai"
    assert requests[0].method == "PATCH"
    assert requests[0].url.params["id"] == "eq.c-1"
    assert json.loads(requests[0].content) == {"city": "Mumbai"}
    await client.close()


@pytest.mark.asyncio
async def test_missing_row_is_validation_error():
    client, _ = make_client(lambda r: httpx.Response(200, json=[]))

    with pytest.raises(RemoteError) as exc_info:
        await client.fetch_one("customers", "missing")

    assert exc_info.value.kind == ErrorKind.VALIDATION
    assert exc_info.value.status_code == 404
    await client.close()


@pytest.mark.asyncio
async def test_delete():
    client, requests = make_client(lambda r: httpx.Response(204))
    await client.delete("bookings", "b-1")
    assert requests[0].method == "DELETE"
    assert requests[0].url.params["id"] == "eq.b-1"
    await client.close()


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code, kind", [
    (400, ErrorKind.VALIDATION),
    (401, ErrorKind.AUTH),
    (403, ErrorKind.AUTH),
    (409, ErrorKind.VALIDATION),
    (500, ErrorKind.SERVER),
    (503, ErrorKind.SERVER),
])
async def test_status_codes_are_classified(status_code, kind):
    client, _ = make_client(lambda r: httpx.Response(status_code, json={"message": "rejected"}))

    with pytest.raises(RemoteError) as exc_info:
        await client.fetch_all("customers")

    assert exc_info.value.kind == kind
    assert exc_info.value.status_code == status_code
    assert exc_info.value.message == "rejected"
    await client.close()


@pytest.mark.asyncio
async def test_transport_failure_is_network_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client, _ = make_client(handler)

    with pytest.raises(RemoteError) as exc_info:
        await client.fetch_all("bookings")

    assert exc_info.value.kind == ErrorKind.NETWORK
    await client.close()


@pytest.mark.asyncio
async def test_subscribe_delegates_to_change_feed():
    feed = RecordingFeed()
    client, _ = make_client(lambda r: httpx.Response(200, json=[]), feed=feed)

    unsubscribe = await client.subscribe("bookings", lambda event: None)
    await unsubscribe()

    assert feed.calls == ["bookings", "-bookings"]
    await client.close()


@pytest.mark.asyncio
async def test_confirmed_writes_are_published():
    feed = RecordingFeed()
    client, _ = make_client(lambda r: httpx.Response(200, json=[{"id": "b-1", "customer_id": "c-1"}]), feed=feed)

    await client.update("bookings", "b-1", {"customer_name": "Asha"})
    await client.delete("bookings", "b-1")

    [(collection, updated), (_, deleted)] = feed.published
    assert collection == "bookings"
    assert (updated.type, updated.entity, updated.record["id"]) == (ChangeType.UPDATE, EntityType.BOOKING, "b-1")
    assert (deleted.type, deleted.entity, deleted.old_id) == (ChangeType.DELETE, EntityType.BOOKING, "b-1")
    await client.close()


@pytest.mark.asyncio
async def test_rejected_write_is_not_published():
    feed = RecordingFeed()
    client, _ = make_client(lambda r: httpx.Response(500, json={"message": "boom"}), feed=feed)

    with pytest.raises(RemoteError):
        await client.insert("bookings", {"customer_id": "c-1"})

    assert feed.published == []
    await client.close()


@pytest.mark.asyncio
async def test_customer_delete_announces_cascaded_bookings():
    """Peers drop the customer's bookings too, so the slots free up."""

    def handler(request):
        if request.method == "GET":
            return httpx.Response(200, json=[{"id": "b-1"}, {"id": "b-2"}])
        return httpx.Response(204)

    feed = RecordingFeed()
    client, requests = make_client(handler, feed=feed)

    await client.delete("customers", "c-1")

    lookup, delete = requests
    assert lookup.url.path == "/rest/v1/bookings"
    assert lookup.url.params["customer_id"] == "eq.c-1"
    assert lookup.url.params["select"] == "id"
    assert delete.method == "DELETE"
    assert [(c, e.entity, e.old_id) for c, e in feed.published] == [
        ("customers", EntityType.CUSTOMER, "c-1"),
        ("bookings", EntityType.BOOKING, "b-1"),
        ("bookings", EntityType.BOOKING, "b-2"),
    ]

    peer = StateStore()
    peer.apply(CustomerInserted(Customer(id="c-1", name="Asha")))
    peer.apply(BookingInserted(booking_from_row({
        "id": "b-1",
        "customer_id": "c-1",
        "date": "2025-03-01",
        "slots": [{"time": "18:00", "state": "active"}],
    })))
    applier = RealtimeApplier(peer)
    for _, event in feed.published:
        applier.ingest(event)

    assert peer.slot_status(date(2025, 3, 1), "18:00").status == SlotStatus.FREE
    assert peer.conflicting_slots(date(2025, 3, 1), ["18:00"]) == []
    await client.close()


@pytest.mark.asyncio
async def test_failed_customer_delete_announces_nothing():
    def handler(request):
        if request.method == "GET":
            return httpx.Response(200, json=[{"id": "b-1"}])
        return httpx.Response(500, json={"message": "boom"})

    feed = RecordingFeed()
    client, _ = make_client(handler, feed=feed)

    with pytest.raises(RemoteError):
        await client.delete("customers", "c-1")

    assert feed.published == []
    await client.close()
