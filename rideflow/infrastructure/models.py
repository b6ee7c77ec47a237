"""
SQLAlchemy ORM models for the in-memory entity store.

Tables
------
* ``users``              -- riders, drivers and admins
* ``drivers``            -- driver profiles (one per driver user)
* ``rides``              -- ride requests and their lifecycle
* ``businesses``         -- corporate accounts
* ``price_calculations`` -- append-only fare quotes (5 minute cache)

Identifiers are ``AUTOINCREMENT`` keys, so ids are never reused.
Monetary and distance columns hold values rounded to 2 decimals.

Indexes
-------
* **B-Tree** on the secondary lookup columns (email, license, user id,
  rider id, driver id, status, quote route).
"""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
)

from .database import Base, utcnow
from rideflow.domain.enums import RideStatus, RideType, UserType


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), unique=True, nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    password = Column(String(255), nullable=False)
    full_name = Column(String(120), nullable=False)
    phone = Column(String(32), nullable=True)
    user_type = Column(String(20), default=UserType.RIDER.value, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow)

    __table_args__ = ({"sqlite_autoincrement": True},)


class DriverModel(Base):
    __tablename__ = "drivers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    license_number = Column(String(64), unique=True, nullable=False)
    vehicle_type = Column(String(64), nullable=False)
    vehicle_model = Column(String(120), nullable=False)
    vehicle_plate = Column(String(32), nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)
    is_online = Column(Boolean, default=False, nullable=False)
    rating = Column(Float, default=5.0)
    total_rides = Column(Integer, default=0, nullable=False)
    earnings = Column(Float, default=0.0)
    current_location = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow)

    __table_args__ = (
        Index("idx_drivers_online", "is_online"),
        {"sqlite_autoincrement": True},
    )


class RideModel(Base):
    __tablename__ = "rides"

    id = Column(Integer, primary_key=True, autoincrement=True)
    rider_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    driver_id = Column(Integer, ForeignKey("drivers.id"), nullable=True)

    pickup_location = Column(String, nullable=False)
    dropoff_location = Column(String, nullable=False)
    pickup_coords = Column(String, nullable=True)
    dropoff_coords = Column(String, nullable=True)

    status = Column(String(20), default=RideStatus.PENDING.value, nullable=False)
    fare = Column(Float, nullable=True)
    estimated_duration = Column(Integer, nullable=True)  # minutes
    actual_duration = Column(Integer, nullable=True)  # minutes
    distance = Column(Float, nullable=True)  # km
    ride_type = Column(String(20), default=RideType.STANDARD.value, nullable=False)

    created_at = Column(DateTime, default=utcnow)
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)

    __table_args__ = (
        Index("idx_rides_status", "status"),
        Index("idx_rides_rider", "rider_id"),
        Index("idx_rides_driver", "driver_id"),
        {"sqlite_autoincrement": True},
    )


class BusinessModel(Base):
    __tablename__ = "businesses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    phone = Column(String(32), nullable=True)
    address = Column(String, nullable=True)
    contact_person = Column(String(120), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    total_rides = Column(Integer, default=0, nullable=False)
    monthly_spend = Column(Float, default=0.0)
    created_at = Column(DateTime, default=utcnow)

    __table_args__ = ({"sqlite_autoincrement": True},)


class PriceCalculationModel(Base):
    __tablename__ = "price_calculations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    pickup_location = Column(String, nullable=False)
    dropoff_location = Column(String, nullable=False)
    distance = Column(Float, nullable=False)
    base_fare = Column(Float, nullable=False)
    per_km_rate = Column(Float, nullable=False)
    total_fare = Column(Float, nullable=False)
    ride_type = Column(String(20), default=RideType.STANDARD.value, nullable=False)
    # surge applied to total_fare
    surge_multiplier = Column(Float, default=1.0, nullable=False)
    surge_reason = Column(String(120), default="", nullable=False)
    created_at = Column(DateTime, default=utcnow)

    __table_args__ = (
        Index(
            "idx_price_calculations_route",
            "pickup_location",
            "dropoff_location",
            "ride_type",
        ),
        {"sqlite_autoincrement": True},
    )
