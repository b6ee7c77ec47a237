"""GET /api/users/{user_id} -- fetch a user (password omitted)."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from rideflow.api.dependencies import get_db
from rideflow.api.middleware import limiter, route_limit
from rideflow.api.schemas import UserEnvelope
from rideflow.domain.exceptions import NotFoundError
from rideflow.infrastructure.repositories import UserRepository

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/{user_id}", response_model=UserEnvelope, summary="Get user by id")
@limiter.limit(route_limit)
async def get_user(
    request: Request,
    user_id: int,
    db: AsyncSession = Depends(get_db),
):
    user = await UserRepository(db).get_by_id(user_id)
    if not user:
        raise NotFoundError("User not found")
    return {"user": user}
