"""Inbound socket messages, discriminated by their ``type`` field."""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import Field, TypeAdapter

from rideflow.api.schemas import CamelModel


class AuthMessage(CamelModel):
    type: Literal["auth"]
    user_id: int
    user_type: Optional[str] = None


class DriverLocationMessage(CamelModel):
    type: Literal["driver_location_update"]
    location: Any
    speed: Optional[float] = None
    heading: Optional[float] = None
    accuracy: Optional[float] = None


class RideStatusMessage(CamelModel):
    type: Literal["ride_status_update"]
    ride_id: int
    status: str
    estimated_time: Optional[Union[int, str]] = None
    message: Optional[str] = None


InboundMessage = Annotated[
    Union[AuthMessage, DriverLocationMessage, RideStatusMessage],
    Field(discriminator="type"),
]

inbound_adapter = TypeAdapter(InboundMessage)


def parse_message(raw: str) -> InboundMessage:
    """Parse one JSON text frame; raises ``pydantic.ValidationError``."""
    return inbound_adapter.validate_json(raw)
