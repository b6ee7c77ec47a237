"""
Driver endpoints
================

POST  /api/drivers/register           -- create a driver user + profile
GET   /api/drivers/online             -- list online drivers
GET   /api/drivers/{driver_id}        -- fetch a driver
PATCH /api/drivers/{driver_id}/status -- set the online flag
GET   /api/drivers/{driver_id}/location -- last reported location
"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from rideflow.api.dependencies import get_db
from rideflow.api.middleware import limiter, route_limit
from rideflow.api.schemas import (
    DriverLocationResponse,
    DriverResponse,
    DriverSignupRequest,
    DriverSignupResponse,
    DriverStatusRequest,
)
from rideflow.domain.enums import UserType
from rideflow.domain.exceptions import ConflictError, NotFoundError
from rideflow.infrastructure.repositories import DriverRepository, UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/drivers", tags=["drivers"])


@router.post(
    "/register",
    status_code=201,
    response_model=DriverSignupResponse,
    summary="Register a new driver",
)
@limiter.limit(route_limit)
async def register_driver(
    request: Request,
    body: DriverSignupRequest,
    db: AsyncSession = Depends(get_db),
):
    users = UserRepository(db)
    drivers = DriverRepository(db)

    if await drivers.get_by_license(body.license_number):
        raise ConflictError("Driver with this license already exists")
    if await users.get_by_email(body.email) or await users.get_by_username(body.email):
        raise ConflictError("User already exists with this email")

    user = await users.create(
        username=body.email,
        email=body.email,
        password=body.password,
        full_name=body.full_name,
        phone=body.phone,
        user_type=UserType.DRIVER.value,
    )
    driver = await drivers.create(
        user_id=user.id,
        license_number=body.license_number,
        vehicle_type=body.vehicle_type,
        vehicle_model=body.vehicle_model,
        vehicle_plate=body.vehicle_plate,
    )
    logger.info("Driver %s registered for user %s", driver.id, user.id)
    return {"user": user, "driver": driver}


@router.get(
    "/online",
    response_model=list[DriverResponse],
    summary="List drivers currently online",
)
@limiter.limit(route_limit)
async def online_drivers(
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    return await DriverRepository(db).get_online()


@router.get("/{driver_id}", response_model=DriverResponse, summary="Get driver by id")
@limiter.limit(route_limit)
async def get_driver(
    request: Request,
    driver_id: int,
    db: AsyncSession = Depends(get_db),
):
    driver = await DriverRepository(db).get_by_id(driver_id)
    if not driver:
        raise NotFoundError("Driver not found")
    return driver


@router.patch(
    "/{driver_id}/status",
    response_model=DriverResponse,
    summary="Set a driver online or offline",
)
@limiter.limit(route_limit)
async def set_driver_status(
    request: Request,
    driver_id: int,
    body: DriverStatusRequest,
    db: AsyncSession = Depends(get_db),
):
    driver = await DriverRepository(db).set_online(driver_id, body.is_online)
    if not driver:
        raise NotFoundError("Driver not found")
    logger.info("Driver %s is now %s", driver.id, "online" if driver.is_online else "offline")
    return driver


@router.get(
    "/{driver_id}/location",
    response_model=DriverLocationResponse,
    summary="Get a driver's last reported location",
)
@limiter.limit(route_limit)
async def get_driver_location(
    request: Request,
    driver_id: int,
    db: AsyncSession = Depends(get_db),
):
    driver = await DriverRepository(db).get_by_id(driver_id)
    if not driver:
        raise NotFoundError("Driver not found")
    return {"location": driver.current_location}
