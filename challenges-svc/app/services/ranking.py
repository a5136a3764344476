from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable

from ..core.geo import distance_m, round_m
from ..models import Offer

@dataclass(frozen=True)
class RankedOffer:
    offer: Offer
    distance_m: float  # unrounded

    @property
    def distance_meters(self) -> int:
        return round_m(self.distance_m)

def rank_offers(
    user_lat: float,
    user_lon: float,
    offers: Iterable[Offer],
    radius_m: float,
    *,
    enforce_radius: bool = False,
) -> list[RankedOffer]:
    """
    Annotate active offers with their distance from the user and sort nearest first.

    The sort is stable, so offers at equal distance keep their input order.
    `radius_m` only filters when `enforce_radius` is set; by default every
    active offer is returned.
    """
    ranked = [
        RankedOffer(offer=o, distance_m=distance_m(user_lat, user_lon, o.latitude, o.longitude))
        for o in offers
        if o.active
    ]
    if enforce_radius:
        ranked = [r for r in ranked if r.distance_m <= radius_m]
    return sorted(ranked, key=lambda r: r.distance_m)
