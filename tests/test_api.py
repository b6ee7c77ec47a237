"""
Integration tests for the account, driver, business and info endpoints.

Each test runs against a fresh in-memory store shared with the app
through ``create_app(store=...)``.
"""

import asyncio

import pytest
from httpx import AsyncClient

from tests.conftest import register_driver, register_user


# ── Health / admin ────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get("/api/admin/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_connections_empty(client: AsyncClient):
    resp = await client.get("/api/admin/connections")
    assert resp.status_code == 200
    assert resp.json() == []


@pytest.mark.asyncio
async def test_unknown_route_uses_error_shape(client: AsyncClient):
    resp = await client.get("/api/nowhere")
    assert resp.status_code == 404
    assert "message" in resp.json()


# ── Auth / users ──────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_register_omits_password(client: AsyncClient):
    user = await register_user(client)
    assert user["id"] is not None
    assert user["email"] == "alice@rideflow.io"
    assert user["userType"] == "rider"
    assert user["isActive"] is True
    assert "password" not in user


@pytest.mark.asyncio
async def test_register_duplicate_email_rejected(client: AsyncClient):
    await register_user(client)
    resp = await client.post(
        "/api/auth/register",
        json={
            "username": "alice2",
            "email": "alice@rideflow.io",
            "password": "secret123",
            "fullName": "Alice Again",
        },
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "User already exists with this email"


@pytest.mark.asyncio
async def test_register_missing_fields_is_validation_error(client: AsyncClient):
    resp = await client.post("/api/auth/register", json={"email": "bob@rideflow.io"})
    assert resp.status_code == 400
    body = resp.json()
    assert body["message"] == "Validation error"
    assert body["errors"]


@pytest.mark.asyncio
async def test_login(client: AsyncClient):
    await register_user(client)
    resp = await client.post(
        "/api/auth/login",
        json={"email": "alice@rideflow.io", "password": "secret123"},
    )
    assert resp.status_code == 200
    assert resp.json()["user"]["username"] == "alice"
    assert "password" not in resp.json()["user"]


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient):
    await register_user(client)
    resp = await client.post(
        "/api/auth/login",
        json={"email": "alice@rideflow.io", "password": "nope"},
    )
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid credentials"


@pytest.mark.asyncio
async def test_get_user(client: AsyncClient):
    user = await register_user(client)
    resp = await client.get(f"/api/users/{user['id']}")
    assert resp.status_code == 200
    assert resp.json()["user"]["fullName"] == "Alice Rider"
    assert "password" not in resp.json()["user"]


@pytest.mark.asyncio
async def test_get_user_not_found(client: AsyncClient):
    resp = await client.get("/api/users/9999")
    assert resp.status_code == 404
    assert resp.json()["message"] == "User not found"


# ── Drivers ───────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_driver_signup(client: AsyncClient):
    resp = await client.post(
        "/api/drivers/register",
        json={
            "fullName": "A",
            "email": "a@x.com",
            "phone": "9999999999",
            "password": "secret1",
            "licenseNumber": "L1",
            "vehicleType": "sedan",
            "vehicleModel": "X",
            "vehiclePlate": "P1",
        },
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["user"]["userType"] == "driver"
    assert data["driver"]["isVerified"] is False
    assert data["driver"]["isOnline"] is False
    assert data["driver"]["userId"] == data["user"]["id"]


@pytest.mark.asyncio
async def test_driver_duplicate_license_rejected(client: AsyncClient):
    await register_driver(client)
    resp = await client.post(
        "/api/drivers/register",
        json={
            "fullName": "Other Driver",
            "email": "other@rideflow.io",
            "phone": "9810000098",
            "password": "secret123",
            "licenseNumber": "MH01-2020-1234",
            "vehicleType": "suv",
            "vehicleModel": "Innova",
            "vehiclePlate": "MH02CD5678",
        },
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "Driver with this license already exists"


@pytest.mark.asyncio
async def test_driver_signup_short_password(client: AsyncClient):
    resp = await client.post(
        "/api/drivers/register",
        json={
            "fullName": "Shorty",
            "email": "short@rideflow.io",
            "phone": "9810000097",
            "password": "123",
            "licenseNumber": "L9",
            "vehicleType": "sedan",
            "vehicleModel": "X",
            "vehiclePlate": "P9",
        },
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "Validation error"


@pytest.mark.asyncio
async def test_driver_online_status_and_location(client: AsyncClient):
    driver = (await register_driver(client))["driver"]

    resp = await client.get("/api/drivers/online")
    assert resp.json() == []

    resp = await client.patch(f"/api/drivers/{driver['id']}/status", json={"isOnline": True})
    assert resp.status_code == 200
    assert resp.json()["isOnline"] is True

    online = (await client.get("/api/drivers/online")).json()
    assert [d["id"] for d in online] == [driver["id"]]

    resp = await client.get(f"/api/drivers/{driver['id']}/location")
    assert resp.status_code == 200
    assert resp.json() == {"location": None}


@pytest.mark.asyncio
async def test_driver_not_found(client: AsyncClient):
    assert (await client.get("/api/drivers/404")).status_code == 404
    assert (await client.get("/api/drivers/404/location")).status_code == 404
    resp = await client.patch("/api/drivers/404/status", json={"isOnline": True})
    assert resp.status_code == 404


# ── Business ──────────────────────────────────────────────────────────


BUSINESS = {
    "name": "Acme Logistics",
    "email": "travel@acme.in",
    "phone": "02240000000",
    "address": "Nariman Point",
    "contactPerson": "Ananya Reddy",
    "password": "secret123",
}


@pytest.mark.asyncio
async def test_business_register_and_fetch(client: AsyncClient):
    resp = await client.post("/api/business/register", json=BUSINESS)
    assert resp.status_code == 201
    business = resp.json()
    assert business["isActive"] is True
    assert business["totalRides"] == 0
    assert "password" not in business

    resp = await client.get(f"/api/business/{business['id']}")
    assert resp.status_code == 200
    assert resp.json()["contactPerson"] == "Ananya Reddy"


@pytest.mark.asyncio
async def test_business_duplicate_email(client: AsyncClient):
    await client.post("/api/business/register", json=BUSINESS)
    resp = await client.post("/api/business/register", json=BUSINESS)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_business_not_found(client: AsyncClient):
    assert (await client.get("/api/business/77")).status_code == 404


# ── Premium info ──────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_surge_info(client: AsyncClient):
    resp = await client.get("/api/premium/surge-info")
    assert resp.status_code == 200
    data = resp.json()
    assert data["multiplier"] in (1.0, 1.3, 1.5)
    assert data["isActive"] == (data["multiplier"] > 1.0)


@pytest.mark.asyncio
async def test_ride_types(client: AsyncClient):
    resp = await client.get("/api/premium/ride-types")
    assert resp.status_code == 200
    rates = {t["id"]: t["rate"] for t in resp.json()}
    assert rates == {
        "standard": 12.0,
        "premium": 20.0,
        "luxury": 35.0,
        "shared": 8.0,
        "express": 15.0,
    }


@pytest.mark.asyncio
async def test_analytics_on_empty_store(client: AsyncClient):
    resp = await client.get("/api/premium/analytics")
    assert resp.status_code == 200
    data = resp.json()
    assert data["totalRides"] == 0
    assert data["activeDrivers"] == 0
    assert data["completionRate"] == 0.0


@pytest.mark.asyncio
async def test_feedback(client: AsyncClient):
    resp = await client.post(
        "/api/premium/feedback",
        json={"rideId": 1, "rating": 4.5, "comment": "Smooth ride", "userId": 3},
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["message"] == "Thank you for your feedback"
    assert data["feedback"]["status"] == "processed"
    assert data["feedback"]["rating"] == 4.5


# ── Concurrent writes ─────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_concurrent_duplicate_registrations(client: AsyncClient):
    body = {
        "username": "racer",
        "email": "racer@rideflow.io",
        "password": "secret123",
        "fullName": "Race Condition",
    }
    responses = await asyncio.gather(
        client.post("/api/auth/register", json=body),
        client.post("/api/auth/register", json=body),
    )
    assert sorted(r.status_code for r in responses) == [201, 400]
    rejected = next(r for r in responses if r.status_code == 400)
    assert "already exists" in rejected.json()["message"]


@pytest.mark.asyncio
async def test_failed_driver_signups_leave_no_orphan_users(client: AsyncClient):
    def driver_body(n: int, license_number: str) -> dict:
        return {
            "fullName": f"Driver {n}",
            "email": f"d{n}@rideflow.io",
            "phone": "9810000099",
            "password": "secret123",
            "licenseNumber": license_number,
            "vehicleType": "sedan",
            "vehicleModel": "X",
            "vehiclePlate": f"P{n}",
        }

    signups = [
        client.post("/api/drivers/register", json=driver_body(n, "SAME"))
        for n in range(4)
    ]
    registrations = [
        client.post(
            "/api/auth/register",
            json={
                "username": f"rider{n}",
                "email": f"r{n}@rideflow.io",
                "password": "secret123",
                "fullName": f"Rider {n}",
            },
        )
        for n in range(4)
    ]
    responses = await asyncio.gather(*signups, *registrations)

    driver_statuses = [r.status_code for r in responses[:4]]
    assert sorted(driver_statuses) == [201, 400, 400, 400]
    assert all(r.status_code == 201 for r in responses[4:])

    # every rejected driver can sign up again with a fresh license
    for n, status in enumerate(driver_statuses):
        if status == 400:
            retry = await client.post(
                "/api/drivers/register", json=driver_body(n, f"FRESH-{n}")
            )
            assert retry.status_code == 201, retry.text
