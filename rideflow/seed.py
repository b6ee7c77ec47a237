"""
Seed script -- populates the entity store with sample data for demos.

Runs at startup when ``SEED_DEMO_DATA=true``; against a file-backed
``DATABASE_URL`` it can also be run directly:
    python -m rideflow.seed

Creates:
  - 5 sample riders
  - 4 sample drivers (2 online, spread around Mumbai)
  - 5 sample rides (mix of pending, accepted, in_progress, completed)
  - 1 sample business account
"""

import asyncio
import logging

from rideflow.config import settings
from rideflow.domain.enums import RideStatus, RideType, UserType
from rideflow.domain.pricing import PricingEngine
from rideflow.infrastructure.database import EntityStore, utcnow
from rideflow.infrastructure.repositories import (
    BusinessRepository,
    DriverRepository,
    RideRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)


RIDERS = [
    {"full_name": "Aarav Sharma", "email": "aarav@rideflow.io", "phone": "9810000001"},
    {"full_name": "Priya Patel", "email": "priya@rideflow.io", "phone": "9810000002"},
    {"full_name": "Rohan Mehta", "email": "rohan@rideflow.io", "phone": "9810000003"},
    {"full_name": "Sneha Gupta", "email": "sneha@rideflow.io", "phone": "9810000004"},
    {"full_name": "Vikram Singh", "email": "vikram@rideflow.io", "phone": "9810000005"},
]

DRIVERS = [
    {
        "full_name": "Karan Joshi",
        "email": "karan@rideflow.io",
        "license_number": "MH01-2019-0001",
        "vehicle_type": "sedan",
        "vehicle_model": "Maruti Dzire",
        "vehicle_plate": "MH01AB1234",
        "is_online": True,
        "location": "19.0896,72.8656",
    },
    {
        "full_name": "Meera Nair",
        "email": "meera@rideflow.io",
        "license_number": "MH02-2020-0002",
        "vehicle_type": "suv",
        "vehicle_model": "Toyota Innova",
        "vehicle_plate": "MH02CD5678",
        "is_online": True,
        "location": "19.0760,72.8777",
    },
    {
        "full_name": "Arjun Kumar",
        "email": "arjun@rideflow.io",
        "license_number": "MH03-2018-0003",
        "vehicle_type": "luxury",
        "vehicle_model": "Mercedes E-Class",
        "vehicle_plate": "MH03EF9012",
        "is_online": False,
        "location": None,
    },
    {
        "full_name": "Diya Iyer",
        "email": "diya@rideflow.io",
        "license_number": "MH04-2021-0004",
        "vehicle_type": "hatchback",
        "vehicle_model": "Hyundai i20",
        "vehicle_plate": "MH04GH3456",
        "is_online": False,
        "location": None,
    },
]

RIDES = [
    # (rider index, driver index, pickup, dropoff, type, status, distance km)
    (0, None, "Mumbai Airport T2", "Andheri West", RideType.STANDARD, RideStatus.PENDING, 6.4),
    (1, None, "Bandra Kurla Complex", "Powai", RideType.PREMIUM, RideStatus.PENDING, 9.8),
    (2, 0, "Mumbai Airport T1", "Santacruz", RideType.STANDARD, RideStatus.ACCEPTED, 4.2),
    (3, 1, "Colaba", "Worli", RideType.SHARED, RideStatus.IN_PROGRESS, 11.5),
    (4, 2, "Juhu Beach", "Lower Parel", RideType.LUXURY, RideStatus.COMPLETED, 14.1),
]


async def seed(store: EntityStore) -> None:
    async with store.session() as session:
        users = UserRepository(session)
        if await users.count() > 0:
            logger.info("Store already seeded. Skipping.")
            return

        drivers = DriverRepository(session)
        rides = RideRepository(session)
        engine = PricingEngine(settings.base_fare, settings.rate_per_km)

        # ── Riders ────────────────────────────────────────────────────
        riders = []
        for r in RIDERS:
            riders.append(
                await users.create(
                    username=r["email"],
                    email=r["email"],
                    password="password123",
                    full_name=r["full_name"],
                    phone=r["phone"],
                    user_type=UserType.RIDER.value,
                )
            )
        logger.info("Created %d riders", len(riders))

        # ── Drivers ───────────────────────────────────────────────────
        driver_models = []
        for d in DRIVERS:
            user = await users.create(
                username=d["email"],
                email=d["email"],
                password="password123",
                full_name=d["full_name"],
                user_type=UserType.DRIVER.value,
            )
            driver_models.append(
                await drivers.create(
                    user_id=user.id,
                    license_number=d["license_number"],
                    vehicle_type=d["vehicle_type"],
                    vehicle_model=d["vehicle_model"],
                    vehicle_plate=d["vehicle_plate"],
                    is_verified=True,
                    is_online=d["is_online"],
                    current_location=d["location"],
                )
            )
        logger.info("Created %d drivers", len(driver_models))

        # ── Rides ─────────────────────────────────────────────────────
        now = utcnow()
        for rider_idx, driver_idx, pickup, dropoff, kind, status, distance in RIDES:
            fare = engine.calculate_fare(distance, kind.value, now)
            driver = driver_models[driver_idx] if driver_idx is not None else None
            await rides.create(
                rider_id=riders[rider_idx].id,
                driver_id=driver.id if driver else None,
                pickup_location=pickup,
                dropoff_location=dropoff,
                ride_type=kind.value,
                status=status.value,
                fare=fare.total_fare,
                distance=distance,
                estimated_duration=round(distance * 2.5),
                started_at=now if status in (RideStatus.IN_PROGRESS, RideStatus.COMPLETED) else None,
                completed_at=now if status == RideStatus.COMPLETED else None,
            )
            if status == RideStatus.COMPLETED and driver is not None:
                driver.total_rides += 1
                driver.earnings = round(driver.earnings + fare.total_fare, 2)
        logger.info("Created %d rides", len(RIDES))

        # ── Business ──────────────────────────────────────────────────
        await BusinessRepository(session).create(
            name="Acme Logistics",
            email="travel@acme-logistics.in",
            phone="02240000000",
            address="Nariman Point, Mumbai",
            contact_person="Ananya Reddy",
        )
        logger.info("Seed complete")


async def main():
    logging.basicConfig(level=logging.INFO)
    store = EntityStore(settings.database_url)
    await store.create_all()
    await seed(store)
    await store.dispose()


if __name__ == "__main__":
    asyncio.run(main())
