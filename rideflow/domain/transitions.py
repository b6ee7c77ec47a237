"""
Ride lifecycle state machine.

pending -> accepted -> in_progress -> completed, with cancelled reachable
from every non-terminal state.  ``accepted`` is entered only by assigning a
driver, so a pending ride never carries a driver reference.
"""

from __future__ import annotations

from .enums import RIDE_TRANSITIONS, RideStatus
from .exceptions import TransitionError, ValidationError


def parse_status(value: str | None) -> RideStatus:
    if not value:
        raise ValidationError("status is required")
    try:
        return RideStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in RideStatus)
        raise ValidationError(
            f"Unknown ride status '{value}' (expected one of: {allowed})"
        ) from None


def can_transition(current: RideStatus, new_status: RideStatus) -> bool:
    return new_status in RIDE_TRANSITIONS.get(current, set())


def ensure_transition(
    current: RideStatus, new_status: RideStatus, *, via_assign: bool = False
) -> None:
    """Raise ``TransitionError`` unless *current* -> *new_status* is legal."""
    if new_status == RideStatus.ACCEPTED and not via_assign:
        raise TransitionError(
            "Rides become accepted only by assigning a driver"
        )
    if not can_transition(current, new_status):
        raise TransitionError(
            f"Cannot transition from {current.value} to {new_status.value}"
        )
