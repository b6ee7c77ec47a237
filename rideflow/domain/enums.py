"""Domain enumerations and state-transition rules."""

import enum


class RideStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# State machine: maps current status -> set of valid next statuses
RIDE_TRANSITIONS: dict[RideStatus, set[RideStatus]] = {
    RideStatus.PENDING: {RideStatus.ACCEPTED, RideStatus.CANCELLED},
    RideStatus.ACCEPTED: {RideStatus.IN_PROGRESS, RideStatus.CANCELLED},
    RideStatus.IN_PROGRESS: {RideStatus.COMPLETED, RideStatus.CANCELLED},
    RideStatus.COMPLETED: set(),
    RideStatus.CANCELLED: set(),
}


class RideType(str, enum.Enum):
    STANDARD = "standard"
    PREMIUM = "premium"
    LUXURY = "luxury"
    SHARED = "shared"
    EXPRESS = "express"


class UserType(str, enum.Enum):
    RIDER = "rider"
    DRIVER = "driver"
    ADMIN = "admin"


class Priority(str, enum.Enum):
    HIGH = "high"
    MEDIUM = "medium"
    NORMAL = "normal"
    LOW = "low"


RIDE_PRIORITY: dict[RideType, Priority] = {
    RideType.LUXURY: Priority.HIGH,
    RideType.EXPRESS: Priority.HIGH,
    RideType.PREMIUM: Priority.MEDIUM,
    RideType.STANDARD: Priority.NORMAL,
    RideType.SHARED: Priority.LOW,
}
