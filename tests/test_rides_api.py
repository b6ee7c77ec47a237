"""
Integration tests for the ride endpoints: creation, quoting, assignment
and the status state machine.
"""

import pytest
import pytest_asyncio
from httpx import AsyncClient

from tests.conftest import FakeConnection, register_driver, register_user


@pytest_asyncio.fixture
async def rider(client: AsyncClient) -> dict:
    return await register_user(client)


@pytest_asyncio.fixture
async def driver(client: AsyncClient) -> dict:
    return (await register_driver(client))["driver"]


async def create_ride(client: AsyncClient, rider_id: int, **overrides) -> dict:
    body = {
        "riderId": rider_id,
        "pickupLocation": "Mumbai Airport T2",
        "dropoffLocation": "Andheri West",
        "rideType": "standard",
    }
    body.update(overrides)
    resp = await client.post("/api/rides", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def set_status(client: AsyncClient, ride_id: int, status: str):
    return await client.patch(f"/api/rides/{ride_id}/status", json={"status": status})


# ── Creation ──────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_create_ride_is_pending_without_driver(client, rider):
    ride = await create_ride(client, rider["id"])
    assert ride["status"] == "pending"
    assert ride["driverId"] is None
    assert ride["riderId"] == rider["id"]
    assert 2.0 <= ride["distance"] <= 22.0
    assert ride["fare"] > 0
    assert ride["estimatedDuration"] > 0


@pytest.mark.asyncio
async def test_create_ride_missing_fields(client, rider):
    resp = await client.post("/api/rides", json={"riderId": rider["id"]})
    assert resp.status_code == 400
    assert "required" in resp.json()["message"]


@pytest.mark.asyncio
async def test_create_ride_unknown_rider(client):
    resp = await client.post(
        "/api/rides",
        json={"riderId": 999, "pickupLocation": "A", "dropoffLocation": "B"},
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_book_ride_requires_rider(client):
    resp = await client.post(
        "/api/rides/book",
        json={"pickupLocation": "Colaba", "dropoffLocation": "Worli"},
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "Rider ID is required"


@pytest.mark.asyncio
async def test_book_ride_validates_location_length(client, rider):
    resp = await client.post(
        "/api/rides/book",
        json={"riderId": rider["id"], "pickupLocation": "AB", "dropoffLocation": "Worli"},
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "Validation error"


@pytest.mark.asyncio
async def test_book_ride_uses_cached_quote(client, rider):
    quote = await client.get(
        "/api/rides/calculate-price",
        params={"pickupLocation": "Colaba", "dropoffLocation": "Worli", "rideType": "premium"},
    )
    assert quote.status_code == 200

    resp = await client.post(
        "/api/rides/book",
        json={
            "riderId": rider["id"],
            "pickupLocation": "Colaba",
            "dropoffLocation": "Worli",
            "rideType": "premium",
        },
    )
    assert resp.status_code == 201
    ride = resp.json()
    assert ride["fare"] == quote.json()["totalFare"]
    assert ride["distance"] == quote.json()["distance"]


@pytest.mark.asyncio
async def test_ride_request_sent_to_drivers_only(client, rider, broadcaster):
    driver_conn, rider_conn = FakeConnection(), FakeConnection()
    broadcaster.register(50, driver_conn, "driver")
    broadcaster.register(51, rider_conn, "rider")

    ride = await create_ride(client, rider["id"], rideType="luxury")

    assert rider_conn.sent == []
    assert len(driver_conn.sent) == 1
    event = driver_conn.sent[0]
    assert event["type"] == "premium_ride_request"
    assert event["data"]["rideId"] == ride["id"]
    assert event["data"]["priority"] == "high"


# ── Quotes ────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_calculate_price_luxury(client):
    resp = await client.get(
        "/api/rides/calculate-price",
        params={"pickupLocation": "A", "dropoffLocation": "B", "rideType": "luxury"},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["perKmRate"] == 35.0
    assert "vip-support" in data["features"]
    multiplier = data["surgeInfo"]["multiplier"]
    assert data["totalFare"] == pytest.approx(
        (data["baseFare"] + data["distance"] * 35.0) * multiplier, abs=0.01
    )


@pytest.mark.asyncio
async def test_calculate_price_cached_within_window(client):
    params = {"pickupLocation": "A", "dropoffLocation": "B"}
    first = (await client.get("/api/rides/calculate-price", params=params)).json()
    second = (await client.get("/api/rides/calculate-price", params=params)).json()
    assert second["id"] == first["id"]
    assert second["totalFare"] == first["totalFare"]
    assert second["distance"] == first["distance"]


@pytest.mark.asyncio
async def test_calculate_price_unknown_type_uses_standard_rate(client):
    resp = await client.get(
        "/api/rides/calculate-price",
        params={"pickupLocation": "A", "dropoffLocation": "B", "rideType": "hovercraft"},
    )
    assert resp.status_code == 200
    assert resp.json()["perKmRate"] == 12.0


@pytest.mark.asyncio
async def test_calculate_price_missing_params(client):
    resp = await client.get("/api/rides/calculate-price", params={"pickupLocation": "A"})
    assert resp.status_code == 400


# ── Queries ───────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_list_rides(client, rider, driver):
    first = await create_ride(client, rider["id"])
    second = await create_ride(client, rider["id"], dropoffLocation="Powai")
    await client.post(f"/api/rides/{first['id']}/assign", json={"driverId": driver["id"]})

    by_rider = (await client.get(f"/api/rides/rider/{rider['id']}")).json()
    assert [r["id"] for r in by_rider] == [first["id"], second["id"]]

    by_driver = (await client.get(f"/api/rides/driver/{driver['id']}")).json()
    assert [r["id"] for r in by_driver] == [first["id"]]

    pending = (await client.get("/api/rides/pending")).json()
    assert [r["id"] for r in pending] == [second["id"]]


@pytest.mark.asyncio
async def test_get_ride_not_found(client):
    resp = await client.get("/api/rides/9999")
    assert resp.status_code == 404
    assert resp.json()["message"] == "Ride not found"


# ── Assignment ────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_assign_driver(client, rider, driver):
    ride = await create_ride(client, rider["id"])
    resp = await client.post(f"/api/rides/{ride['id']}/assign", json={"driverId": driver["id"]})
    assert resp.status_code == 200

    fetched = (await client.get(f"/api/rides/{ride['id']}")).json()
    assert fetched["status"] == "accepted"
    assert fetched["driverId"] == driver["id"]


@pytest.mark.asyncio
async def test_assign_missing_driver_id(client, rider):
    ride = await create_ride(client, rider["id"])
    resp = await client.post(f"/api/rides/{ride['id']}/assign", json={})
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_assign_unknown_ride(client, driver):
    resp = await client.post("/api/rides/9999/assign", json={"driverId": driver["id"]})
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_assign_unknown_driver(client, rider):
    ride = await create_ride(client, rider["id"])
    resp = await client.post(f"/api/rides/{ride['id']}/assign", json={"driverId": 999})
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_assign_twice_conflicts(client, rider, driver):
    ride = await create_ride(client, rider["id"])
    await client.post(f"/api/rides/{ride['id']}/assign", json={"driverId": driver["id"]})
    resp = await client.post(f"/api/rides/{ride['id']}/assign", json={"driverId": driver["id"]})
    assert resp.status_code == 409


# ── Status transitions ────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_full_lifecycle_credits_driver(client, rider, driver, broadcaster):
    watcher = FakeConnection()
    broadcaster.register(77, watcher, "rider")

    ride = await create_ride(client, rider["id"])
    await client.post(f"/api/rides/{ride['id']}/assign", json={"driverId": driver["id"]})

    resp = await set_status(client, ride["id"], "in_progress")
    assert resp.status_code == 200
    assert resp.json()["startedAt"] is not None

    resp = await set_status(client, ride["id"], "completed")
    assert resp.status_code == 200
    completed = resp.json()
    assert completed["status"] == "completed"
    assert completed["completedAt"] is not None
    assert completed["actualDuration"] is not None

    credited = (await client.get(f"/api/drivers/{driver['id']}")).json()
    assert credited["totalRides"] == 1
    assert credited["earnings"] == pytest.approx(ride["fare"])
    assert credited["rating"] == 5.0

    statuses = [m["data"]["status"] for m in watcher.sent if m["type"] == "ride_status_update"]
    assert statuses == ["accepted", "in_progress", "completed"]


@pytest.mark.asyncio
async def test_accepting_via_status_endpoint_conflicts(client, rider):
    ride = await create_ride(client, rider["id"])
    resp = await set_status(client, ride["id"], "accepted")
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_completed_ride_cannot_reopen(client, rider, driver):
    ride = await create_ride(client, rider["id"])
    await client.post(f"/api/rides/{ride['id']}/assign", json={"driverId": driver["id"]})
    await set_status(client, ride["id"], "in_progress")
    await set_status(client, ride["id"], "completed")

    resp = await set_status(client, ride["id"], "pending")
    assert resp.status_code == 409
    assert "completed" in resp.json()["message"]


@pytest.mark.asyncio
async def test_cancel_pending_ride(client, rider):
    ride = await create_ride(client, rider["id"])
    resp = await set_status(client, ride["id"], "cancelled")
    assert resp.status_code == 200
    assert resp.json()["status"] == "cancelled"

    pending = (await client.get("/api/rides/pending")).json()
    assert pending == []


@pytest.mark.asyncio
async def test_same_status_is_accepted(client, rider):
    ride = await create_ride(client, rider["id"])
    resp = await set_status(client, ride["id"], "pending")
    assert resp.status_code == 200
    assert resp.json()["status"] == "pending"


@pytest.mark.asyncio
async def test_status_missing_or_unknown(client, rider):
    ride = await create_ride(client, rider["id"])
    resp = await client.patch(f"/api/rides/{ride['id']}/status", json={})
    assert resp.status_code == 400
    resp = await set_status(client, ride["id"], "teleported")
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_status_unknown_ride(client):
    resp = await set_status(client, 9999, "cancelled")
    assert resp.status_code == 404


# ── Generic update ────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_generic_update_merges_fields(client, rider, broadcaster):
    watcher = FakeConnection()
    broadcaster.register(77, watcher, "admin")

    ride = await create_ride(client, rider["id"])
    resp = await client.patch(
        f"/api/rides/{ride['id']}",
        json={"dropoffLocation": "Bandra", "fare": 199.5},
    )
    assert resp.status_code == 200
    updated = resp.json()
    assert updated["dropoffLocation"] == "Bandra"
    assert updated["fare"] == 199.5
    assert updated["pickupLocation"] == ride["pickupLocation"]

    updates = [m for m in watcher.sent if m["type"] == "ride_update"]
    assert updates[-1]["data"]["dropoffLocation"] == "Bandra"


@pytest.mark.asyncio
async def test_generic_update_unknown_ride(client):
    resp = await client.patch("/api/rides/9999", json={"fare": 10})
    assert resp.status_code == 404


# ── Analytics after activity ──────────────────────────────────────────


@pytest.mark.asyncio
async def test_analytics_reflect_rides(client, rider, driver):
    ride = await create_ride(client, rider["id"])
    other = await create_ride(client, rider["id"], dropoffLocation="Powai")
    await client.post(f"/api/rides/{ride['id']}/assign", json={"driverId": driver["id"]})
    await set_status(client, ride["id"], "in_progress")
    await set_status(client, ride["id"], "completed")
    await set_status(client, other["id"], "cancelled")

    data = (await client.get("/api/premium/analytics")).json()
    assert data["totalRides"] == 2
    assert data["completionRate"] == 50.0
    assert data["carbonOffsetKg"] > 0


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["status", "pickupLocation", "dropoffLocation", "rideType"])
async def test_generic_update_rejects_null_required_fields(client, rider, field):
    ride = await create_ride(client, rider["id"])
    resp = await client.patch(f"/api/rides/{ride['id']}", json={field: None})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Validation error"

    unchanged = (await client.get(f"/api/rides/{ride['id']}")).json()
    assert unchanged[field] == ride[field]


@pytest.mark.asyncio
async def test_generic_update_allows_clearing_optional_fields(client, rider):
    ride = await create_ride(client, rider["id"], pickupCoords="19.08,72.86")
    resp = await client.patch(f"/api/rides/{ride['id']}", json={"pickupCoords": None})
    assert resp.status_code == 200
    assert resp.json()["pickupCoords"] is None
