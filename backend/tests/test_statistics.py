"""
Tests for best-effort customer counter maintenance.
"""

import pytest

from slotsync.core.errors import ErrorKind, RemoteError
from slotsync.services.memory_remote import InMemorySyncClient
from slotsync.services.statistics_service import StatisticsMaintainer, adjust_counters
from slotsync.services.sync_coordinator import SyncCoordinator

BOOKING = {"date": "2025-03-01", "slots": ["18:00", "19:00"]}


class UnreadableCustomers(InMemorySyncClient):
    """Remote store whose customer reads fail while everything else works."""

    async def fetch_one(self, collection, record_id):
        self.calls.append(("fetch_one", collection))
        raise RemoteError(ErrorKind.SERVER, "customers unavailable", 503)


@pytest.mark.parametrize("current, bookings_delta, cancellations_delta, expected", [
    ({"total_bookings": 2, "total_cancellations": 0}, 1, 0, (3, 0)),
    ({"total_bookings": 2, "total_cancellations": 1}, -1, 1, (1, 2)),
    ({"total_bookings": 0, "total_cancellations": 0}, -2, 2, (0, 2)),
    ({"total_bookings": None}, -1, 1, (0, 1)),
    ({}, 1, 0, (1, 0)),
])
def test_adjust_counters(current, bookings_delta, cancellations_delta, expected):
    values = adjust_counters(current, bookings_delta, cancellations_delta)
    assert (values["total_bookings"], values["total_cancellations"]) == expected


@pytest.mark.asyncio
async def test_booking_created_increments(remote, asha_row):
    maintainer = StatisticsMaintainer(remote)
    customer = await maintainer.record_booking_created(asha_row["id"])
    assert customer.total_bookings == 1
    assert remote.tables["customers"][asha_row["id"]]["total_bookings"] == 1


@pytest.mark.asyncio
async def test_cancellation_moves_both_counters_and_floors(remote, asha_row):
    maintainer = StatisticsMaintainer(remote)
    await maintainer.record_booking_created(asha_row["id"])

    customer = await maintainer.record_slots_cancelled(asha_row["id"], count=2)
    assert customer.total_bookings == 0
    assert customer.total_cancellations == 2


@pytest.mark.asyncio
async def test_nothing_cancelled_makes_no_remote_call(remote, asha_row):
    maintainer = StatisticsMaintainer(remote)
    assert await maintainer.record_slots_cancelled(asha_row["id"], count=0) is None
    assert remote.calls == []


@pytest.mark.asyncio
async def test_failure_is_swallowed(remote):
    maintainer = StatisticsMaintainer(remote)
    assert await maintainer.record_booking_created("missing") is None

    remote.offline = True
    assert await maintainer.record_booking_created("missing") is None


@pytest.mark.asyncio
async def test_booking_succeeds_when_statistics_fail(store, cache):
    remote = UnreadableCustomers()
    [asha] = remote.seed("customers", [{"name": "Asha", "mobile": "9876543210", "city": "Pune"}])
    coordinator = SyncCoordinator(store, remote, cache)
    await coordinator.bootstrap()

    result = await coordinator.create_booking({"customer_id": asha["id"], **BOOKING})

    assert result.success
    assert len(store.bookings) == 1
    assert remote.calls_to("fetch_one") == ["customers"]
    assert remote.calls_to("update") == []
    assert store.find_customer(asha["id"]).total_bookings == 0


@pytest.mark.asyncio
async def test_completion_leaves_counters_alone(loaded, remote, asha_row):
    created = await loaded.create_booking({"customer_id": asha_row["id"], **BOOKING})
    updates_before = len(remote.calls_to("update"))

    result = await loaded.complete_booking(created.data.id)

    assert result.success
    # Only the booking row is written
    assert remote.calls_to("update")[updates_before:] == ["bookings"]
    assert loaded.store.find_customer(asha_row["id"]).total_bookings == 1
