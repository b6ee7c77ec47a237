"""
Business endpoints
==================

POST /api/business/register      -- create a corporate account
GET  /api/business/{business_id} -- fetch a corporate account
"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from rideflow.api.dependencies import get_db
from rideflow.api.middleware import limiter, route_limit
from rideflow.api.schemas import BusinessResponse, BusinessSignupRequest
from rideflow.domain.exceptions import ConflictError, NotFoundError
from rideflow.infrastructure.repositories import BusinessRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/business", tags=["business"])


@router.post(
    "/register",
    status_code=201,
    response_model=BusinessResponse,
    summary="Register a business account",
)
@limiter.limit(route_limit)
async def register_business(
    request: Request,
    body: BusinessSignupRequest,
    db: AsyncSession = Depends(get_db),
):
    repo = BusinessRepository(db)
    if await repo.get_by_email(body.email):
        raise ConflictError("Business already exists with this email")

    # the signup password is checked for strength only; it is not stored
    business = await repo.create(
        name=body.name,
        email=body.email,
        phone=body.phone,
        address=body.address,
        contact_person=body.contact_person,
    )
    logger.info("Business %s registered", business.id)
    return business


@router.get("/{business_id}", response_model=BusinessResponse, summary="Get business by id")
@limiter.limit(route_limit)
async def get_business(
    request: Request,
    business_id: int,
    db: AsyncSession = Depends(get_db),
):
    business = await BusinessRepository(db).get_by_id(business_id)
    if not business:
        raise NotFoundError("Business not found")
    return business
