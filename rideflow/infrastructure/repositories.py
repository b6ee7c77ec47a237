"""
Repository Pattern -- abstracts store access so domain logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and exposes
the entity's CRUD operations plus its secondary look-ups.  ``update``
shallow-merges a partial field mapping into the stored row and returns
``None`` for unknown ids.  Uniqueness is checked by the callers before
``create``; a constraint violation that still reaches the flush rolls the
session back and surfaces as ``ConflictError``.
"""

from __future__ import annotations

from typing import Any, Generic, Optional, TypeVar

from sqlalchemy import func, inspect, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .database import Base
from .models import (
    BusinessModel,
    DriverModel,
    PriceCalculationModel,
    RideModel,
    UserModel,
)
from rideflow.domain.enums import RideStatus
from rideflow.domain.exceptions import ConflictError

ModelT = TypeVar("ModelT", bound=Base)


class _Repository(Generic[ModelT]):
    model: type[ModelT]
    conflict_message = "Entity already exists"

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, entity_id: int) -> Optional[ModelT]:
        return await self.session.get(self.model, entity_id)

    async def create(self, **fields: Any) -> ModelT:
        entity = self.model(**fields)
        self.session.add(entity)
        await self._flush()
        return entity

    async def update(self, entity_id: int, fields: dict[str, Any]) -> Optional[ModelT]:
        entity = await self.get_by_id(entity_id)
        if entity is None:
            return None
        columns = inspect(self.model).columns.keys()
        for key, value in fields.items():
            if key in columns and key not in ("id", "created_at"):
                setattr(entity, key, value)
        await self._flush()
        return entity

    async def _flush(self) -> None:
        """Flush pending writes; a unique-key violation becomes ``ConflictError``."""
        try:
            await self.session.flush()
        except IntegrityError as exc:
            await self.session.rollback()
            raise ConflictError(self.conflict_message) from exc

    async def count(self, *criteria) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(self.model).where(*criteria)
        )
        return result.scalar() or 0

    async def _first(self, *criteria) -> Optional[ModelT]:
        result = await self.session.execute(
            select(self.model).where(*criteria).order_by(self.model.id).limit(1)
        )
        return result.scalar_one_or_none()

    async def _all(self, *criteria) -> list[ModelT]:
        result = await self.session.execute(
            select(self.model).where(*criteria).order_by(self.model.id)
        )
        return list(result.scalars().all())


class UserRepository(_Repository[UserModel]):
    model = UserModel
    conflict_message = "User already exists with this email or username"

    async def get_by_email(self, email: str) -> Optional[UserModel]:
        return await self._first(UserModel.email == email)

    async def get_by_username(self, username: str) -> Optional[UserModel]:
        return await self._first(UserModel.username == username)


class DriverRepository(_Repository[DriverModel]):
    model = DriverModel
    conflict_message = "Driver with this license already exists"

    async def get_by_user_id(self, user_id: int) -> Optional[DriverModel]:
        return await self._first(DriverModel.user_id == user_id)

    async def get_by_license(self, license_number: str) -> Optional[DriverModel]:
        return await self._first(DriverModel.license_number == license_number)

    async def get_online(self) -> list[DriverModel]:
        return await self._all(DriverModel.is_online.is_(True))

    async def set_online(self, driver_id: int, is_online: bool) -> Optional[DriverModel]:
        return await self.update(driver_id, {"is_online": is_online})

    async def average_rating(self) -> Optional[float]:
        result = await self.session.execute(select(func.avg(DriverModel.rating)))
        return result.scalar()


class RideRepository(_Repository[RideModel]):
    model = RideModel

    async def get_by_rider(self, rider_id: int) -> list[RideModel]:
        return await self._all(RideModel.rider_id == rider_id)

    async def get_by_driver(self, driver_id: int) -> list[RideModel]:
        return await self._all(RideModel.driver_id == driver_id)

    async def get_pending(self) -> list[RideModel]:
        return await self._all(RideModel.status == RideStatus.PENDING.value)

    async def count_by_status(self, status: RideStatus) -> int:
        return await self.count(RideModel.status == status.value)

    async def total_distance(self) -> float:
        result = await self.session.execute(
            select(func.coalesce(func.sum(RideModel.distance), 0.0))
        )
        return float(result.scalar() or 0.0)


class BusinessRepository(_Repository[BusinessModel]):
    model = BusinessModel
    conflict_message = "Business already exists with this email"

    async def get_by_email(self, email: str) -> Optional[BusinessModel]:
        return await self._first(BusinessModel.email == email)


class PriceCalculationRepository(_Repository[PriceCalculationModel]):
    model = PriceCalculationModel

    async def get_latest(
        self, pickup_location: str, dropoff_location: str, ride_type: str
    ) -> Optional[PriceCalculationModel]:
        """Newest quote for the route; staleness is judged by the caller."""
        result = await self.session.execute(
            select(PriceCalculationModel)
            .where(
                PriceCalculationModel.pickup_location == pickup_location,
                PriceCalculationModel.dropoff_location == dropoff_location,
                PriceCalculationModel.ride_type == ride_type,
            )
            .order_by(PriceCalculationModel.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()
