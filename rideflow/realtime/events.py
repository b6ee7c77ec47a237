"""Event payload builders for the realtime channel (camelCase, JSON-ready)."""

from __future__ import annotations

from typing import Any, Optional

from rideflow.api.schemas import RideResponse
from rideflow.domain.pricing import features_for, priority_for
from rideflow.infrastructure.models import DriverModel, RideModel
from rideflow.realtime.broadcaster import timestamp

WELCOME = "welcome"
AUTH_SUCCESS = "auth_success"
ERROR = "error"
RIDE_REQUEST = "premium_ride_request"
RIDE_UPDATE = "ride_update"
RIDE_STATUS_UPDATE = "ride_status_update"
DRIVER_LOCATION_UPDATE = "driver_location_update"
FEEDBACK_RECEIVED = "feedback_received"

SERVICE_FEATURES = ["real-time-tracking", "instant-notifications", "priority-support"]


def welcome() -> dict[str, Any]:
    return {
        "type": WELCOME,
        "message": "Welcome to the RideFlow real-time service",
        "features": SERVICE_FEATURES,
        "timestamp": timestamp(),
    }


def auth_success(user_id: int, user_type: Optional[str]) -> dict[str, Any]:
    return {
        "type": AUTH_SUCCESS,
        "message": "Authentication successful",
        "userId": user_id,
        "userType": user_type,
        "timestamp": timestamp(),
        "premiumFeatures": features_for(user_type or "standard"),
    }


def error(message: str) -> dict[str, Any]:
    return {"type": ERROR, "message": message, "timestamp": timestamp()}


def ride_payload(ride: RideModel) -> dict[str, Any]:
    return RideResponse.model_validate(ride).model_dump(mode="json", by_alias=True)


def ride_request(ride: RideModel, quote) -> dict[str, Any]:
    return {
        "rideId": ride.id,
        "riderId": ride.rider_id,
        "pickupLocation": ride.pickup_location,
        "dropoffLocation": ride.dropoff_location,
        "fare": ride.fare,
        "rideType": ride.ride_type,
        "priority": priority_for(ride.ride_type).value,
        "estimatedDuration": ride.estimated_duration,
        "rewardPoints": quote.reward_points,
        "features": quote.features,
        "surgeMultiplier": quote.surge.multiplier,
        "carbonOffset": quote.carbon_offset,
        "timestamp": timestamp(),
    }


def ride_status(
    ride: RideModel,
    *,
    estimated_time: Any = None,
    message: Optional[str] = None,
    user_id: Optional[int] = None,
) -> dict[str, Any]:
    return {
        "rideId": ride.id,
        "status": ride.status,
        "driverId": ride.driver_id,
        "timestamp": timestamp(),
        "estimatedTime": estimated_time,
        "message": message,
        "userId": user_id,
    }


def driver_location(
    driver: DriverModel,
    location: Any,
    *,
    speed: Optional[float] = None,
    heading: Optional[float] = None,
    accuracy: Optional[float] = None,
) -> dict[str, Any]:
    return {
        "driverId": driver.id,
        "location": location,
        "timestamp": timestamp(),
        "speed": speed or 0,
        "heading": heading or 0,
        "accuracy": accuracy or 5,
        "isOnline": driver.is_online,
    }
