"""
Admin / observability endpoints
===============================

GET /api/admin/connections -- users currently registered on the realtime channel
GET /api/admin/health      -- simple health check
"""

from fastapi import APIRouter, Depends, Request

from rideflow.api.dependencies import get_broadcaster
from rideflow.api.middleware import limiter, route_limit
from rideflow.api.schemas import ConnectionInfo, HealthResponse
from rideflow.realtime.broadcaster import Broadcaster

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get(
    "/connections",
    response_model=list[ConnectionInfo],
    summary="List authenticated realtime connections",
)
@limiter.limit(route_limit)
async def get_connections(
    request: Request,
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    return [
        ConnectionInfo(user_id=sub.user_id, user_type=sub.user_type)
        for sub in broadcaster.subscribers()
    ]


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health():
    return HealthResponse()
