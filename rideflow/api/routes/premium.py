"""
Premium information endpoints
=============================

GET  /api/premium/surge-info -- current time-of-day surge
GET  /api/premium/ride-types -- ride types with rates and features
GET  /api/premium/analytics  -- platform figures derived from the store
POST /api/premium/feedback   -- log ride feedback and broadcast it
"""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from rideflow.api.dependencies import get_broadcaster, get_db
from rideflow.api.middleware import limiter, route_limit
from rideflow.api.schemas import (
    AnalyticsResponse,
    Feedback,
    FeedbackRequest,
    FeedbackResponse,
    RideTypeInfo,
    SurgeStatusResponse,
)
from rideflow.domain.enums import RideStatus, RideType
from rideflow.domain.pricing import carbon_offset_kg, features_for
from rideflow.infrastructure.repositories import DriverRepository, RideRepository
from rideflow.realtime import events
from rideflow.realtime.broadcaster import Broadcaster
from rideflow.services.pricing import build_engine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/premium", tags=["premium"])

RIDE_TYPE_INFO: dict[RideType, dict[str, str]] = {
    RideType.STANDARD: {
        "name": "Standard",
        "description": "Affordable rides for everyday use",
        "eta": "5-10 min",
    },
    RideType.PREMIUM: {
        "name": "Premium",
        "description": "High-quality vehicles with enhanced comfort",
        "eta": "3-8 min",
    },
    RideType.LUXURY: {
        "name": "Luxury",
        "description": "Premium vehicles with VIP treatment",
        "eta": "2-5 min",
    },
    RideType.SHARED: {
        "name": "Shared",
        "description": "Eco-friendly shared rides",
        "eta": "8-15 min",
    },
    RideType.EXPRESS: {
        "name": "Express",
        "description": "Priority pickup on the fastest route, no stops",
        "eta": "3-6 min",
    },
}


@router.get(
    "/surge-info",
    response_model=SurgeStatusResponse,
    summary="Current surge pricing",
)
@limiter.limit(route_limit)
async def surge_info(request: Request):
    surge = build_engine().compute_surge(datetime.now())
    return SurgeStatusResponse(
        is_active=surge.is_active,
        multiplier=surge.multiplier,
        reason=surge.reason,
        estimated_duration="15-30 minutes" if surge.is_active else "5-15 minutes",
        timestamp=datetime.now(timezone.utc),
    )


@router.get(
    "/ride-types",
    response_model=list[RideTypeInfo],
    summary="Available ride types",
)
@limiter.limit(route_limit)
async def ride_types(request: Request):
    engine = build_engine()
    return [
        RideTypeInfo(
            id=kind.value,
            features=features_for(kind.value),
            rate=engine.rate_for(kind.value),
            **info,
        )
        for kind, info in RIDE_TYPE_INFO.items()
    ]


@router.get(
    "/analytics",
    response_model=AnalyticsResponse,
    summary="Platform analytics",
)
@limiter.limit(route_limit)
async def analytics(
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    rides = RideRepository(db)
    drivers = DriverRepository(db)

    total = await rides.count()
    completed = await rides.count_by_status(RideStatus.COMPLETED)
    cancelled = await rides.count_by_status(RideStatus.CANCELLED)
    finished = completed + cancelled
    average = await drivers.average_rating()

    return AnalyticsResponse(
        total_rides=total,
        active_drivers=len(await drivers.get_online()),
        average_rating=round(average, 2) if average is not None else None,
        completion_rate=round(completed / finished * 100, 1) if finished else 0.0,
        carbon_offset_kg=carbon_offset_kg(await rides.total_distance()),
        timestamp=datetime.now(timezone.utc),
    )


@router.post(
    "/feedback",
    status_code=201,
    response_model=FeedbackResponse,
    summary="Submit ride feedback",
)
@limiter.limit(route_limit)
async def submit_feedback(
    request: Request,
    body: FeedbackRequest,
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    feedback = Feedback(
        id=time.time_ns() // 1_000_000,
        ride_id=body.ride_id,
        rating=body.rating,
        comment=body.comment,
        user_id=body.user_id,
        timestamp=datetime.now(timezone.utc),
    )
    logger.info(
        "Feedback %s received for ride %s (rating=%s)",
        feedback.id,
        feedback.ride_id,
        feedback.rating,
    )
    await broadcaster.publish(
        events.FEEDBACK_RECEIVED,
        feedback.model_dump(mode="json", by_alias=True),
    )
    return FeedbackResponse(message="Thank you for your feedback", feedback=feedback)
