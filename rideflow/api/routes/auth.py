"""
Auth endpoints
==============

POST /api/auth/register -- create a user (201, password omitted)
POST /api/auth/login    -- check email + password (plaintext comparison)
"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from rideflow.api.dependencies import get_db
from rideflow.api.middleware import limiter, route_limit
from rideflow.api.schemas import LoginRequest, UserCreateRequest, UserEnvelope
from rideflow.domain.exceptions import AuthenticationError, ConflictError
from rideflow.infrastructure.repositories import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    status_code=201,
    response_model=UserEnvelope,
    summary="Register a new user",
)
@limiter.limit(route_limit)
async def register(
    request: Request,
    body: UserCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    repo = UserRepository(db)
    if await repo.get_by_email(body.email):
        raise ConflictError("User already exists with this email")
    if await repo.get_by_username(body.username):
        raise ConflictError("User already exists with this username")

    user = await repo.create(
        username=body.username,
        email=body.email,
        password=body.password,
        full_name=body.full_name,
        phone=body.phone,
        user_type=body.user_type.value,
        is_active=body.is_active,
    )
    logger.info("User %s registered (%s)", user.id, user.user_type)
    return {"user": user}


@router.post("/login", response_model=UserEnvelope, summary="Log a user in")
@limiter.limit(route_limit)
async def login(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    user = await UserRepository(db).get_by_email(body.email) if body.email else None
    if user is None or user.password != body.password:
        raise AuthenticationError("Invalid credentials")
    return {"user": user}
