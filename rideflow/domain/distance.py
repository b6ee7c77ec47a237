"""
Trip distance estimation.

Assumption
----------
Pickup and drop-off are free-text addresses and no geocoder or routing
engine is wired in, so the distance is drawn uniformly from a configured
range (2-22 km by default).  In production this module would be replaced
by a routing-service client that returns actual road distances for the
address pair.

Complexity: O(1) per call.
"""

from __future__ import annotations

import math
import random

MINUTES_PER_KM = 2.5


def estimate_distance_km(
    pickup: str,
    dropoff: str,
    min_km: float = 2.0,
    max_km: float = 22.0,
    rng: random.Random | None = None,
) -> float:
    """Return a trip distance in **km**, rounded to 2 decimals."""
    rng = rng or random
    return round(rng.uniform(min_km, max_km), 2)


def estimate_duration_minutes(distance_km: float) -> int:
    """Whole minutes for a trip of *distance_km* (2.5 min / km, rounded up)."""
    return math.ceil(distance_km * MINUTES_PER_KM)
