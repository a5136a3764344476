from __future__ import annotations
import math

EARTH_RADIUS_M = 6_371_000.0

def distance_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle (haversine) distance in meters between two lat/lon points in degrees."""
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)
    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(dlon / 2) ** 2
    )
    a = min(a, 1.0)  # rounding near antipodes
    return 2 * EARTH_RADIUS_M * math.atan2(math.sqrt(a), math.sqrt(1 - a))

def round_m(meters: float) -> int:
    # half-up, for display only
    return int(math.floor(meters + 0.5))
