"""
Pytest fixtures: an in-memory remote store, a memory cache, a fresh State
Store per test and an HTTP client wired to them through dependency overrides.
"""

from datetime import date, datetime, timedelta, timezone
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from slotsync.api.deps import get_coordinator, get_store
from slotsync.main import app
from slotsync.models.booking import Booking
from slotsync.models.slot import SlotRecord, SlotState
from slotsync.services.cache_service import MemoryCache
from slotsync.services.memory_remote import InMemorySyncClient
from slotsync.services.sync_coordinator import SyncCoordinator
from slotsync.store.state_store import StateStore

BOOKING_DATE = date(2025, 3, 1)


@pytest.fixture
def remote() -> InMemorySyncClient:
    return InMemorySyncClient()


@pytest.fixture
def cache() -> MemoryCache:
    return MemoryCache()


@pytest.fixture
def store() -> StateStore:
    return StateStore()


@pytest.fixture
def notifications() -> list:
    return []


@pytest.fixture
def coordinator(store, remote, cache, notifications) -> SyncCoordinator:
    return SyncCoordinator(store, remote, cache, notifier=notifications.append)


@pytest.fixture
def asha_row(remote) -> dict:
    """Customer Asha stored remotely with zeroed counters."""
    return remote.seed("customers", [{
        "name": "Asha",
        "mobile": "9876543210",
        "city": "Pune",
        "total_bookings": 0,
        "total_cancellations": 0,
    }])[0]


@pytest_asyncio.fixture
async def loaded(coordinator, asha_row) -> SyncCoordinator:
    """Coordinator bootstrapped from the remote store with Asha present."""
    result = await coordinator.bootstrap()
    assert result.has_data
    return coordinator


@pytest_asyncio.fixture
async def client(coordinator) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the store/coordinator dependencies."""
    app.dependency_overrides[get_coordinator] = lambda: coordinator
    app.dependency_overrides[get_store] = lambda: coordinator.store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_booking():
    """Build a Booking directly, without going through the remote store."""
    counter = {"n": 0}

    def _make_booking(
        slots,
        customer_id="c-1",
        day=BOOKING_DATE,
        booking_id=None,
        customer_name=None,
        created_offset_minutes=0,
    ) -> Booking:
        counter["n"] += 1
        created = datetime(2025, 2, 1, tzinfo=timezone.utc) + timedelta(minutes=created_offset_minutes)
        records = []
        for slot in slots:
            if isinstance(slot, str):
                records.append(SlotRecord(time=slot, state=SlotState.ACTIVE))
            else:
                time, state = slot
                records.append(SlotRecord(time=time, state=SlotState(state)))
        return Booking(
            id=booking_id or f"b-{counter['n']}",
            customer_id=customer_id,
            customer_name=customer_name,
            date=day,
            slots=records,
            created_at=created,
            updated_at=created,
        )

    return _make_booking
