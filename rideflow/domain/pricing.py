"""
Dynamic Pricing Engine  (Strategy Pattern)
==========================================

Formula
-------
Fare = (Base_Fare + Distance x Rate_Per_KM[ride_type]) x Surge_Multiplier

* **Rate_Per_KM**: standard 12, premium 20, luxury 35, shared 8, express 15.
  Unknown ride types are charged the standard rate.
* **Surge_Multiplier** (local time of day):
  1.5 during rush hours (07-09h and 17-19h, both ends inclusive),
  1.3 late at night (23h and 00-05h), otherwise 1.0.

Complexity: O(1) per price calculation.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from .enums import RIDE_PRIORITY, Priority, RideType

DEFAULT_RATES: dict[str, float] = {
    RideType.STANDARD.value: 12.0,
    RideType.PREMIUM.value: 20.0,
    RideType.LUXURY.value: 35.0,
    RideType.SHARED.value: 8.0,
    RideType.EXPRESS.value: 15.0,
}

RIDE_FEATURES: dict[str, list[str]] = {
    RideType.LUXURY.value: [
        "premium-vehicle",
        "vip-support",
        "champagne-service",
        "concierge",
    ],
    RideType.PREMIUM.value: [
        "priority-pickup",
        "premium-vehicle",
        "enhanced-support",
    ],
    RideType.EXPRESS.value: ["priority-pickup", "fastest-route", "no-stops"],
    RideType.STANDARD.value: ["real-time-tracking", "digital-receipt"],
    RideType.SHARED.value: ["cost-sharing", "eco-friendly", "social-matching"],
}

RUSH_HOUR_MULTIPLIER = 1.5
LATE_NIGHT_MULTIPLIER = 1.3
RUSH_HOUR_REASON = "High demand during rush hour"
LATE_NIGHT_REASON = "Late night premium service"

CARBON_KG_PER_KM = 0.12
REWARD_POINTS_RATE = 0.1


# ── Strategy hierarchy ────────────────────────────────────────────────


class PricingStrategy(ABC):
    @abstractmethod
    def calculate(
        self, distance_km: float, base_fare: float, rate_per_km: float
    ) -> float: ...


class StandardPricing(PricingStrategy):
    def calculate(
        self, distance_km: float, base_fare: float, rate_per_km: float
    ) -> float:
        return base_fare + distance_km * rate_per_km


class SurgePricing(PricingStrategy):
    def __init__(self, surge_multiplier: float = 1.0):
        self.surge_multiplier = surge_multiplier

    def calculate(
        self, distance_km: float, base_fare: float, rate_per_km: float
    ) -> float:
        return (base_fare + distance_km * rate_per_km) * self.surge_multiplier


# ── Value objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class SurgeInfo:
    multiplier: float
    reason: str

    @property
    def is_active(self) -> bool:
        return self.multiplier > 1.0


@dataclass(frozen=True)
class FareBreakdown:
    distance: float
    base_fare: float
    per_km_rate: float
    surge: SurgeInfo
    total_fare: float


def is_rush_hour(hour: int) -> bool:
    return 7 <= hour <= 9 or 17 <= hour <= 19


def is_late_night(hour: int) -> bool:
    return hour >= 23 or hour <= 5


def surge_for_hour(hour: int) -> SurgeInfo:
    if is_rush_hour(hour):
        return SurgeInfo(RUSH_HOUR_MULTIPLIER, RUSH_HOUR_REASON)
    if is_late_night(hour):
        return SurgeInfo(LATE_NIGHT_MULTIPLIER, LATE_NIGHT_REASON)
    return SurgeInfo(1.0, "")


def features_for(ride_type: str) -> list[str]:
    return list(RIDE_FEATURES.get(ride_type, RIDE_FEATURES[RideType.STANDARD.value]))


def priority_for(ride_type: str) -> Priority:
    try:
        return RIDE_PRIORITY[RideType(ride_type)]
    except ValueError:
        return Priority.NORMAL


def carbon_offset_kg(distance_km: float) -> float:
    return round(distance_km * CARBON_KG_PER_KM, 2)


def reward_points(fare: float) -> int:
    return math.floor(fare * REWARD_POINTS_RATE)


# ── Engine facade ─────────────────────────────────────────────────────


class PricingEngine:
    """High-level API used by the quote service and the ride lifecycle."""

    def __init__(
        self,
        base_fare: float = 50.0,
        rates: dict[str, float] | None = None,
    ):
        self.base_fare = base_fare
        self.rates = dict(rates or DEFAULT_RATES)

    def rate_for(self, ride_type: str) -> float:
        standard = self.rates.get(
            RideType.STANDARD.value, DEFAULT_RATES[RideType.STANDARD.value]
        )
        return self.rates.get(ride_type, standard)

    @staticmethod
    def compute_surge(at: datetime) -> SurgeInfo:
        return surge_for_hour(at.hour)

    def calculate_fare(
        self, distance_km: float, ride_type: str, at: datetime
    ) -> FareBreakdown:
        surge = self.compute_surge(at)
        rate = self.rate_for(ride_type)
        strategy: PricingStrategy = (
            SurgePricing(surge.multiplier) if surge.is_active else StandardPricing()
        )
        total = strategy.calculate(distance_km, self.base_fare, rate)
        return FareBreakdown(
            distance=distance_km,
            base_fare=self.base_fare,
            per_km_rate=rate,
            surge=surge,
            total_fare=round(total, 2),
        )
