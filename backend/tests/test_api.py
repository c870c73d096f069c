"""
Tests for the HTTP surface.
"""

import pytest

API = "/api/v1"


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_state_before_load(client):
    response = await client.get(f"{API}/state")
    assert response.status_code == 200
    data = response.json()
    assert data["is_loading"] is True
    assert data["banner"] is None


@pytest.mark.asyncio
async def test_reload_and_list_customers(client, asha_row):
    response = await client.post(f"{API}/sync/reload")
    assert response.json() == {"source": "remote", "error": None}

    response = await client.get(f"{API}/customers/", params={"q": "pune"})
    assert [c["name"] for c in response.json()] == ["Asha"]

    response = await client.get(f"{API}/customers/{asha_row['id']}")
    assert response.json()["mobile"] == "9876543210"


@pytest.mark.asyncio
async def test_unknown_customer_is_404(client):
    response = await client.get(f"{API}/customers/missing")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_create_customer(client, loaded):
    response = await client.post(
        f"{API}/customers/",
        json={"name": "Ravi", "mobile": "9123456780", "city": "Mumbai"},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["data"]["name"] == "Ravi"


@pytest.mark.asyncio
async def test_invalid_customer_is_422(client, loaded):
    response = await client.post(f"{API}/customers/", json={"name": "Ravi"})
    assert response.status_code == 422
    assert response.json()["error"] == "validation"


@pytest.mark.asyncio
async def test_booking_flow(client, loaded, asha_row):
    response = await client.post(
        f"{API}/bookings/",
        json={"customer_id": asha_row["id"], "date": "2025-03-01", "slots": ["19:00", "18:00"]},
    )
    assert response.status_code == 201
    booking = response.json()["data"]
    assert booking["status"] == "confirmed"
    assert [s["time"] for s in booking["slots"]] == ["18:00", "19:00"]

    response = await client.post(f"{API}/bookings/{booking['id']}/cancel", json={"slots": ["18:00"]})
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "confirmed"

    response = await client.get(f"{API}/slots/2025-03-01", params={"filter": "prime-time"})
    grid = {slot["time"]: slot["status"] for slot in response.json()}
    assert grid["18:00"] == "cancelled"
    assert grid["19:00"] == "booked"
    assert "08:00" not in grid

    response = await client.get(f"{API}/roster/2025-03-01")
    roster = response.json()
    assert roster["booked_slots"] == 1
    assert [e["time"] for e in roster["entries"]] == ["19:00"]
    assert roster["entries"][0]["customer_details"]["name"] == "Asha"

    response = await client.post(f"{API}/bookings/{booking['id']}/complete")
    assert response.json()["data"]["status"] == "completed"

    response = await client.get(f"{API}/customers/{asha_row['id']}")
    assert response.json()["total_bookings"] == 0
    assert response.json()["total_cancellations"] == 1

    response = await client.get(
        f"{API}/customers/{asha_row['id']}/bookings", params={"today": "2025-03-01"}
    )
    assert [b["id"] for b in response.json()["past"]] == [booking["id"]]


@pytest.mark.asyncio
async def test_selected_slot(client, loaded):
    response = await client.get(f"{API}/slots/2025-03-01", params={"selected": ["10:00"]})
    grid = {slot["time"]: slot["status"] for slot in response.json()}
    assert grid["10:00"] == "selected"
    assert grid["11:00"] == "free"


@pytest.mark.asyncio
async def test_offline_commands_are_503(client, loaded, remote, asha_row):
    response = await client.post(f"{API}/sync/connectivity", json={"connected": False})
    assert response.json()["banner"] == "You are offline"

    remote.calls.clear()
    response = await client.post(
        f"{API}/bookings/",
        json={"customer_id": asha_row["id"], "date": "2025-03-01", "slots": ["18:00"]},
    )
    assert response.status_code == 503
    assert response.json() == {"success": False, "data": None, "error": "offline", "message": None}
    assert remote.calls == []


@pytest.mark.asyncio
async def test_remote_failure_is_502(client, loaded, remote, asha_row):
    remote.offline = True
    response = await client.delete(f"{API}/customers/{asha_row['id']}")
    assert response.status_code == 502
    assert response.json()["error"] == "network"


@pytest.mark.asyncio
async def test_request_id_is_echoed(client):
    response = await client.get("/health", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"
