"""Pydantic request / response schemas for the REST API (camelCase on the wire)."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from rideflow.domain.enums import RideStatus, RideType, UserType


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ── Requests ──────────────────────────────────────────────────────────


class UserCreateRequest(CamelModel):
    username: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)
    full_name: str = Field(..., min_length=1)
    phone: Optional[str] = None
    user_type: UserType = UserType.RIDER
    is_active: bool = True


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class DriverSignupRequest(CamelModel):
    full_name: str = Field(..., min_length=1)
    email: EmailStr
    phone: str = Field(..., min_length=10)
    password: str = Field(..., min_length=6)
    license_number: str = Field(..., min_length=1)
    vehicle_type: str = Field(..., min_length=1)
    vehicle_model: str = Field(..., min_length=1)
    vehicle_plate: str = Field(..., min_length=1)


class DriverStatusRequest(CamelModel):
    is_online: bool


class RideCreateRequest(CamelModel):
    rider_id: Optional[int] = None
    pickup_location: Optional[str] = None
    dropoff_location: Optional[str] = None
    ride_type: RideType = RideType.STANDARD
    pickup_coords: Optional[str] = None
    dropoff_coords: Optional[str] = None


class RideBookingRequest(CamelModel):
    rider_id: Optional[int] = None
    pickup_location: str = Field(..., min_length=3)
    dropoff_location: str = Field(..., min_length=3)
    ride_type: RideType = RideType.STANDARD
    pickup_coords: Optional[str] = None
    dropoff_coords: Optional[str] = None


class AssignDriverRequest(CamelModel):
    driver_id: Optional[int] = None


class RideStatusRequest(CamelModel):
    status: Optional[str] = None
    estimated_time: Optional[Union[int, str]] = None
    message: Optional[str] = None


class RideUpdateRequest(CamelModel):
    """Every ride field is optional; only the fields sent are merged."""

    driver_id: Optional[int] = None
    pickup_location: Optional[str] = None
    dropoff_location: Optional[str] = None
    pickup_coords: Optional[str] = None
    dropoff_coords: Optional[str] = None
    status: Optional[RideStatus] = None
    fare: Optional[float] = None
    estimated_duration: Optional[int] = None
    actual_duration: Optional[int] = None
    distance: Optional[float] = None
    ride_type: Optional[RideType] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @field_validator(
        "pickup_location", "dropoff_location", "status", "ride_type", mode="before"
    )
    @classmethod
    def _not_null(cls, value):
        # these columns are NOT NULL; they may be omitted but never cleared
        if value is None:
            raise ValueError("may be omitted but not null")
        return value

    def changes(self) -> dict[str, Any]:
        data = self.model_dump(exclude_unset=True)
        for key in ("status", "ride_type"):
            if isinstance(data.get(key), (RideStatus, RideType)):
                data[key] = data[key].value
        return data


class BusinessSignupRequest(CamelModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    phone: Optional[str] = None
    address: Optional[str] = None
    contact_person: str = Field(..., min_length=1)
    password: str = Field(..., min_length=6)


class FeedbackRequest(CamelModel):
    ride_id: Optional[int] = None
    rating: Optional[float] = Field(None, ge=0, le=5)
    comment: Optional[str] = None
    user_id: Optional[int] = None


# ── Responses ─────────────────────────────────────────────────────────


class UserResponse(CamelModel):
    """Users are always returned without their password."""

    id: int
    username: str
    email: str
    full_name: str
    phone: Optional[str] = None
    user_type: str
    is_active: bool
    created_at: Optional[datetime] = None


class UserEnvelope(CamelModel):
    user: UserResponse


class DriverResponse(CamelModel):
    id: int
    user_id: int
    license_number: str
    vehicle_type: str
    vehicle_model: str
    vehicle_plate: str
    is_verified: bool
    is_online: bool
    rating: Optional[float] = None
    total_rides: int
    earnings: Optional[float] = None
    current_location: Optional[str] = None
    created_at: Optional[datetime] = None


class DriverSignupResponse(CamelModel):
    user: UserResponse
    driver: DriverResponse


class DriverLocationResponse(CamelModel):
    location: Optional[str] = None


class RideResponse(CamelModel):
    id: int
    rider_id: int
    driver_id: Optional[int] = None
    pickup_location: str
    dropoff_location: str
    pickup_coords: Optional[str] = None
    dropoff_coords: Optional[str] = None
    status: str
    fare: Optional[float] = None
    estimated_duration: Optional[int] = None
    actual_duration: Optional[int] = None
    distance: Optional[float] = None
    ride_type: str
    created_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class BusinessResponse(CamelModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    contact_person: str
    is_active: bool
    total_rides: int
    monthly_spend: Optional[float] = None
    created_at: Optional[datetime] = None


class SurgeInfoResponse(CamelModel):
    is_active: bool
    multiplier: float
    reason: str


class PriceQuoteResponse(CamelModel):
    id: int
    pickup_location: str
    dropoff_location: str
    distance: float
    base_fare: float
    per_km_rate: float
    total_fare: float
    ride_type: str
    created_at: Optional[datetime] = None
    estimated_duration: int
    estimated_arrival: Optional[datetime] = None
    features: list[str]
    surge_info: SurgeInfoResponse
    carbon_offset: float
    reward_points: int

    @classmethod
    def from_quote(cls, quote) -> "PriceQuoteResponse":
        calc = quote.calculation
        return cls(
            id=calc.id,
            pickup_location=calc.pickup_location,
            dropoff_location=calc.dropoff_location,
            distance=calc.distance,
            base_fare=calc.base_fare,
            per_km_rate=calc.per_km_rate,
            total_fare=calc.total_fare,
            ride_type=calc.ride_type,
            created_at=calc.created_at,
            estimated_duration=quote.estimated_duration,
            estimated_arrival=quote.estimated_arrival,
            features=quote.features,
            surge_info=SurgeInfoResponse(
                is_active=quote.surge.is_active,
                multiplier=quote.surge.multiplier,
                reason=quote.surge.reason,
            ),
            carbon_offset=quote.carbon_offset,
            reward_points=quote.reward_points,
        )


class SurgeStatusResponse(SurgeInfoResponse):
    estimated_duration: str
    timestamp: datetime


class RideTypeInfo(CamelModel):
    id: str
    name: str
    description: str
    features: list[str]
    rate: float
    eta: str


class AnalyticsResponse(CamelModel):
    total_rides: int
    active_drivers: int
    average_rating: Optional[float] = None
    completion_rate: float
    carbon_offset_kg: float
    timestamp: datetime


class Feedback(CamelModel):
    id: int
    ride_id: Optional[int] = None
    rating: Optional[float] = None
    comment: Optional[str] = None
    user_id: Optional[int] = None
    timestamp: datetime
    status: Literal["processed"] = "processed"


class FeedbackResponse(CamelModel):
    message: str
    feedback: Feedback


class ConnectionInfo(CamelModel):
    user_id: int
    user_type: Optional[str] = None


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    message: str
    errors: Optional[list[Any]] = None
