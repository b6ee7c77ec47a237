"""
Ride endpoints
==============

POST  /api/rides                     -- request a ride (minimal body)
POST  /api/rides/book                -- book a ride (validated booking form)
GET   /api/rides/calculate-price     -- fare quote, cached for 5 minutes
GET   /api/rides/pending             -- rides waiting for a driver
GET   /api/rides/rider/{rider_id}    -- rides requested by a rider
GET   /api/rides/driver/{driver_id}  -- rides assigned to a driver
GET   /api/rides/{ride_id}           -- fetch a ride
POST  /api/rides/{ride_id}/assign    -- assign a driver (pending -> accepted)
PATCH /api/rides/{ride_id}/status    -- validated status transition
PATCH /api/rides/{ride_id}           -- administrative partial update
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from rideflow.api.dependencies import get_db, get_ride_manager
from rideflow.api.middleware import limiter, route_limit
from rideflow.api.schemas import (
    AssignDriverRequest,
    PriceQuoteResponse,
    RideBookingRequest,
    RideCreateRequest,
    RideResponse,
    RideStatusRequest,
    RideUpdateRequest,
)
from rideflow.domain.enums import RideType
from rideflow.domain.exceptions import ValidationError
from rideflow.infrastructure.repositories import PriceCalculationRepository
from rideflow.services.pricing import QuoteService
from rideflow.services.rides import RideLifecycleManager

router = APIRouter(prefix="/rides", tags=["rides"])


@router.post(
    "",
    status_code=201,
    response_model=RideResponse,
    summary="Request a new ride",
)
@limiter.limit(route_limit)
async def create_ride(
    request: Request,
    body: RideCreateRequest,
    manager: RideLifecycleManager = Depends(get_ride_manager),
):
    return await manager.create_ride(
        body.rider_id,
        body.pickup_location,
        body.dropoff_location,
        body.ride_type,
        pickup_coords=body.pickup_coords,
        dropoff_coords=body.dropoff_coords,
    )


@router.post(
    "/book",
    status_code=201,
    response_model=RideResponse,
    summary="Book a quoted ride",
)
@limiter.limit(route_limit)
async def book_ride(
    request: Request,
    body: RideBookingRequest,
    manager: RideLifecycleManager = Depends(get_ride_manager),
):
    if not body.rider_id:
        raise ValidationError("Rider ID is required")
    return await manager.create_ride(
        body.rider_id,
        body.pickup_location,
        body.dropoff_location,
        body.ride_type,
        pickup_coords=body.pickup_coords,
        dropoff_coords=body.dropoff_coords,
    )


@router.get(
    "/calculate-price",
    response_model=PriceQuoteResponse,
    summary="Quote a fare",
    description=(
        "Quotes are cached per (pickup, dropoff, rideType) for five minutes. "
        "Unknown ride types are priced at the standard rate."
    ),
)
@limiter.limit(route_limit)
async def calculate_price(
    request: Request,
    pickup_location: Optional[str] = Query(None, alias="pickupLocation"),
    dropoff_location: Optional[str] = Query(None, alias="dropoffLocation"),
    ride_type: str = Query(RideType.STANDARD.value, alias="rideType"),
    db: AsyncSession = Depends(get_db),
):
    quotes = QuoteService(PriceCalculationRepository(db))
    quote = await quotes.quote(pickup_location, dropoff_location, ride_type)
    return PriceQuoteResponse.from_quote(quote)


@router.get("/pending", response_model=list[RideResponse], summary="List pending rides")
@limiter.limit(route_limit)
async def pending_rides(
    request: Request,
    manager: RideLifecycleManager = Depends(get_ride_manager),
):
    return await manager.pending_rides()


@router.get(
    "/rider/{rider_id}",
    response_model=list[RideResponse],
    summary="List rides requested by a rider",
)
@limiter.limit(route_limit)
async def rides_by_rider(
    request: Request,
    rider_id: int,
    manager: RideLifecycleManager = Depends(get_ride_manager),
):
    return await manager.rides_for_rider(rider_id)


@router.get(
    "/driver/{driver_id}",
    response_model=list[RideResponse],
    summary="List rides assigned to a driver",
)
@limiter.limit(route_limit)
async def rides_by_driver(
    request: Request,
    driver_id: int,
    manager: RideLifecycleManager = Depends(get_ride_manager),
):
    return await manager.rides_for_driver(driver_id)


@router.get("/{ride_id}", response_model=RideResponse, summary="Get a ride")
@limiter.limit(route_limit)
async def get_ride(
    request: Request,
    ride_id: int,
    manager: RideLifecycleManager = Depends(get_ride_manager),
):
    return await manager.get_ride(ride_id)


@router.post(
    "/{ride_id}/assign",
    response_model=RideResponse,
    summary="Assign a driver to a pending ride",
)
@limiter.limit(route_limit)
async def assign_driver(
    request: Request,
    ride_id: int,
    body: AssignDriverRequest,
    manager: RideLifecycleManager = Depends(get_ride_manager),
):
    return await manager.assign(ride_id, body.driver_id)


@router.patch(
    "/{ride_id}/status",
    response_model=RideResponse,
    summary="Move a ride to a new status",
    description=(
        "Allowed: accepted -> in_progress -> completed, and any non-terminal "
        "status -> cancelled.  Use the assign endpoint to accept a ride."
    ),
    responses={409: {"description": "Transition not allowed"}},
)
@limiter.limit(route_limit)
async def update_ride_status(
    request: Request,
    ride_id: int,
    body: RideStatusRequest,
    manager: RideLifecycleManager = Depends(get_ride_manager),
):
    return await manager.set_status(
        ride_id,
        body.status,
        estimated_time=body.estimated_time,
        message=body.message,
    )


@router.patch(
    "/{ride_id}",
    response_model=RideResponse,
    summary="Update ride fields (administrative override)",
)
@limiter.limit(route_limit)
async def update_ride(
    request: Request,
    ride_id: int,
    body: RideUpdateRequest,
    manager: RideLifecycleManager = Depends(get_ride_manager),
):
    return await manager.update(ride_id, body.changes())
