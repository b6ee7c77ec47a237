"""
Ride Lifecycle Manager
======================

Creates rides in ``pending``, assigns drivers, applies validated status
transitions and answers the rider / driver / pending queries.  Every
mutation is committed before its event is published, so a client
reacting to an event reads the new state.

Events
------
* ``premium_ride_request`` -- new ride, sent to driver and admin connections
* ``ride_status_update``   -- assignment or status change, sent to everyone
* ``ride_update``          -- administrative partial update, sent to everyone

Completion hook: a ride entering ``completed`` stamps ``completed_at``,
derives ``actual_duration`` (minutes, rounded up) from ``started_at`` and
credits the assigned driver with one ride and the fare.  Ratings are not touched.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from rideflow.domain.enums import RideStatus, RideType, UserType
from rideflow.domain.exceptions import NotFoundError, TransitionError, ValidationError
from rideflow.domain.transitions import ensure_transition, parse_status
from rideflow.infrastructure.database import utcnow
from rideflow.infrastructure.models import RideModel
from rideflow.infrastructure.repositories import (
    DriverRepository,
    PriceCalculationRepository,
    RideRepository,
    UserRepository,
)
from rideflow.realtime import events
from rideflow.realtime.broadcaster import Broadcaster, user_types
from rideflow.services.pricing import QuoteService

logger = logging.getLogger(__name__)

DRIVER_AUDIENCE = user_types(UserType.DRIVER.value, UserType.ADMIN.value)


def _ride_type(value: Any) -> RideType:
    if isinstance(value, RideType):
        return value
    try:
        return RideType(value or RideType.STANDARD.value)
    except ValueError:
        raise ValidationError(f"Unknown ride type '{value}'") from None


class RideLifecycleManager:
    def __init__(
        self,
        session: AsyncSession,
        broadcaster: Broadcaster,
        quotes: Optional[QuoteService] = None,
        clock: Callable = utcnow,
    ):
        self.session = session
        self.rides = RideRepository(session)
        self.drivers = DriverRepository(session)
        self.users = UserRepository(session)
        self.quotes = quotes or QuoteService(PriceCalculationRepository(session))
        self.broadcaster = broadcaster
        self._clock = clock

    # ── Queries ───────────────────────────────────────────────────

    async def get_ride(self, ride_id: int) -> RideModel:
        ride = await self.rides.get_by_id(ride_id)
        if ride is None:
            raise NotFoundError("Ride not found")
        return ride

    async def rides_for_rider(self, rider_id: int) -> list[RideModel]:
        return await self.rides.get_by_rider(rider_id)

    async def rides_for_driver(self, driver_id: int) -> list[RideModel]:
        return await self.rides.get_by_driver(driver_id)

    async def pending_rides(self) -> list[RideModel]:
        return await self.rides.get_pending()

    # ── Commands ──────────────────────────────────────────────────

    async def create_ride(
        self,
        rider_id: Optional[int],
        pickup_location: Optional[str],
        dropoff_location: Optional[str],
        ride_type: Any = RideType.STANDARD,
        *,
        pickup_coords: Optional[str] = None,
        dropoff_coords: Optional[str] = None,
    ) -> RideModel:
        if not rider_id or not pickup_location or not dropoff_location:
            raise ValidationError(
                "riderId, pickupLocation, and dropoffLocation are required"
            )
        kind = _ride_type(ride_type)
        if await self.users.get_by_id(rider_id) is None:
            raise NotFoundError("Rider not found")

        quote = await self.quotes.quote(pickup_location, dropoff_location, kind.value)
        calc = quote.calculation
        ride = await self.rides.create(
            rider_id=rider_id,
            pickup_location=pickup_location,
            dropoff_location=dropoff_location,
            pickup_coords=pickup_coords,
            dropoff_coords=dropoff_coords,
            ride_type=kind.value,
            fare=calc.total_fare,
            distance=calc.distance,
            estimated_duration=quote.estimated_duration,
            status=RideStatus.PENDING.value,
        )
        await self.session.commit()
        logger.info(
            "Ride %s created: rider=%s type=%s fare=%.2f distance=%.2fkm",
            ride.id,
            rider_id,
            ride.ride_type,
            ride.fare,
            ride.distance,
        )
        await self.broadcaster.publish(
            events.RIDE_REQUEST,
            events.ride_request(ride, quote),
            audience=DRIVER_AUDIENCE,
        )
        return ride

    async def assign(self, ride_id: int, driver_id: Optional[int]) -> RideModel:
        if not driver_id:
            raise ValidationError("driverId is required")
        ride = await self.get_ride(ride_id)
        driver = await self.drivers.get_by_id(driver_id)
        if driver is None:
            raise NotFoundError("Driver not found")

        ensure_transition(self._status(ride), RideStatus.ACCEPTED, via_assign=True)
        ride.driver_id = driver.id
        ride.status = RideStatus.ACCEPTED.value
        await self.session.commit()
        logger.info("Ride %s assigned to driver %s", ride.id, driver.id)

        await self.broadcaster.publish(events.RIDE_STATUS_UPDATE, events.ride_status(ride))
        return ride

    async def set_status(
        self,
        ride_id: int,
        status: Optional[str],
        *,
        estimated_time: Any = None,
        message: Optional[str] = None,
        user_id: Optional[int] = None,
    ) -> RideModel:
        target = parse_status(status)
        ride = await self.get_ride(ride_id)
        current = self._status(ride)

        if target != current:
            ensure_transition(current, target)
            await self._apply(ride, target)
            await self.session.commit()
            logger.info("Ride %s: %s -> %s", ride.id, current.value, target.value)

        await self.broadcaster.publish(
            events.RIDE_STATUS_UPDATE,
            events.ride_status(
                ride, estimated_time=estimated_time, message=message, user_id=user_id
            ),
        )
        return ride

    async def update(self, ride_id: int, fields: dict[str, Any]) -> RideModel:
        """Unchecked partial merge; administrative override of any field."""
        ride = await self.rides.update(ride_id, fields)
        if ride is None:
            raise NotFoundError("Ride not found")
        await self.session.commit()
        logger.info("Ride %s updated: %s", ride.id, sorted(fields))

        await self.broadcaster.publish(events.RIDE_UPDATE, events.ride_payload(ride))
        return ride

    # ── Internals ─────────────────────────────────────────────────

    @staticmethod
    def _status(ride: RideModel) -> RideStatus:
        try:
            return RideStatus(ride.status)
        except ValueError:
            raise TransitionError(f"Ride {ride.id} has unknown status {ride.status}") from None

    async def _apply(self, ride: RideModel, target: RideStatus) -> None:
        now = self._clock()
        ride.status = target.value
        if target == RideStatus.IN_PROGRESS:
            ride.started_at = now
        elif target == RideStatus.COMPLETED:
            ride.completed_at = now
            if ride.started_at is not None:
                elapsed = (now - ride.started_at).total_seconds()
                ride.actual_duration = math.ceil(elapsed / 60)
            await self._credit_driver(ride)

    async def _credit_driver(self, ride: RideModel) -> None:
        if ride.driver_id is None:
            return
        driver = await self.drivers.get_by_id(ride.driver_id)
        if driver is None:
            return
        driver.total_rides = (driver.total_rides or 0) + 1
        driver.earnings = round((driver.earnings or 0.0) + (ride.fare or 0.0), 2)
        logger.info(
            "Driver %s credited for ride %s (total rides %d)",
            driver.id,
            ride.id,
            driver.total_rides,
        )
