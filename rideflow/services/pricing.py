"""
Fare quotation service
======================

``QuoteService.quote(pickup, dropoff, ride_type)``

1. The newest PriceCalculation for the exact (pickup, dropoff, ride_type)
   triple is reused while it is younger than the quote TTL (5 minutes).
2. Otherwise a distance is estimated, the fare is priced by the
   ``PricingEngine`` and the result is stored as a new PriceCalculation.
   Older rows are never evicted; freshness is judged at read time.
3. The quote is enriched with duration, arrival time, features, carbon
   offset and reward points.  Enrichment is not stored; the surge details
   are the ones stored with the row, i.e. the surge priced into the fare.

Two concurrent quotes for the same route may both miss the cache and
store two rows; the newest one wins subsequent look-ups.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from rideflow.config import settings
from rideflow.domain.distance import estimate_distance_km, estimate_duration_minutes
from rideflow.domain.enums import RideType
from rideflow.domain.exceptions import ValidationError
from rideflow.domain.pricing import (
    PricingEngine,
    SurgeInfo,
    carbon_offset_kg,
    features_for,
    reward_points,
)
from rideflow.infrastructure.database import utcnow
from rideflow.infrastructure.models import PriceCalculationModel
from rideflow.infrastructure.repositories import PriceCalculationRepository

logger = logging.getLogger(__name__)


@dataclass
class PriceQuote:
    calculation: PriceCalculationModel
    estimated_duration: int
    estimated_arrival: Optional[datetime]
    features: list[str]
    surge: SurgeInfo
    carbon_offset: float
    reward_points: int
    cached: bool = False


def build_engine() -> PricingEngine:
    return PricingEngine(settings.base_fare, settings.rate_per_km)


class QuoteService:
    def __init__(
        self,
        repo: PriceCalculationRepository,
        engine: Optional[PricingEngine] = None,
        *,
        ttl_seconds: Optional[int] = None,
        clock: Callable[[], datetime] = utcnow,
        local_clock: Callable[[], datetime] = datetime.now,
        rng: Optional[random.Random] = None,
    ):
        self.repo = repo
        self.engine = engine or build_engine()
        self.ttl = timedelta(
            seconds=settings.quote_ttl_seconds if ttl_seconds is None else ttl_seconds
        )
        self._clock = clock
        self._local_clock = local_clock
        self._rng = rng

    def is_fresh(self, calculation: PriceCalculationModel) -> bool:
        if calculation.created_at is None:
            return False
        return self._clock() - calculation.created_at < self.ttl

    async def quote(
        self, pickup_location, dropoff_location, ride_type=RideType.STANDARD.value
    ) -> PriceQuote:
        if not pickup_location or not dropoff_location:
            raise ValidationError("Pickup and dropoff locations are required")
        if not isinstance(pickup_location, str) or not isinstance(dropoff_location, str):
            raise ValidationError("Pickup and dropoff locations must be strings")
        if not isinstance(ride_type, str):
            raise ValidationError("rideType must be a string")
        ride_type = ride_type or RideType.STANDARD.value

        existing = await self.repo.get_latest(pickup_location, dropoff_location, ride_type)
        if existing is not None and self.is_fresh(existing):
            logger.debug("Quote cache hit for %s -> %s (%s)", pickup_location, dropoff_location, ride_type)
            return self._enrich(existing, cached=True)

        distance = estimate_distance_km(
            pickup_location,
            dropoff_location,
            settings.min_distance_km,
            settings.max_distance_km,
            rng=self._rng,
        )
        fare = self.engine.calculate_fare(distance, ride_type, self._local_clock())
        calculation = await self.repo.create(
            pickup_location=pickup_location,
            dropoff_location=dropoff_location,
            distance=fare.distance,
            base_fare=round(fare.base_fare, 2),
            per_km_rate=round(fare.per_km_rate, 2),
            total_fare=fare.total_fare,
            ride_type=ride_type,
            surge_multiplier=fare.surge.multiplier,
            surge_reason=fare.surge.reason,
        )
        logger.info(
            "Quoted %s -> %s (%s): %.2f km, fare %.2f, surge x%.1f",
            pickup_location,
            dropoff_location,
            ride_type,
            fare.distance,
            fare.total_fare,
            fare.surge.multiplier,
        )
        return self._enrich(calculation)

    def _enrich(self, calculation: PriceCalculationModel, cached: bool = False) -> PriceQuote:
        duration = estimate_duration_minutes(calculation.distance)
        arrival = None
        if duration > 0:
            now = self._clock().replace(tzinfo=timezone.utc)
            arrival = now + timedelta(minutes=duration)
        return PriceQuote(
            calculation=calculation,
            estimated_duration=duration,
            estimated_arrival=arrival,
            features=features_for(calculation.ride_type),
            surge=SurgeInfo(
                calculation.surge_multiplier or 1.0, calculation.surge_reason or ""
            ),
            carbon_offset=carbon_offset_kg(calculation.distance),
            reward_points=reward_points(calculation.total_fare),
            cached=cached,
        )
