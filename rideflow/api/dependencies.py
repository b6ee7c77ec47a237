"""FastAPI dependency injection helpers."""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from rideflow.infrastructure.database import EntityStore
from rideflow.realtime.broadcaster import Broadcaster
from rideflow.services.rides import RideLifecycleManager


def get_store(request: Request) -> EntityStore:
    return request.app.state.store


def get_broadcaster(request: Request) -> Broadcaster:
    return request.app.state.broadcaster


async def get_db(request: Request) -> AsyncSession:  # type: ignore[misc]
    """Yield an async DB session; commit on success, rollback on error."""
    async with get_store(request).session() as session:
        yield session


def get_ride_manager(
    request: Request, db: AsyncSession = Depends(get_db)
) -> RideLifecycleManager:
    return RideLifecycleManager(db, get_broadcaster(request))
