"""
Proximity gate.

One evaluator instance (and therefore one radius) is shared by discovery and answer
checking, so a target shown to a player at a position is always answerable from
that same position.
"""

from __future__ import annotations

from geohunt.core.geo import GeoPoint, haversine_m


class ProximityEvaluator:
    def __init__(self, radius_m: float):
        if float(radius_m) <= 0:
            raise ValueError("radius_m must be > 0")
        self._radius_m = float(radius_m)

    @property
    def radius_m(self) -> float:
        return self._radius_m

    @staticmethod
    def distance_m(a: GeoPoint, b: GeoPoint) -> float:
        return haversine_m(a, b)

    def is_within_radius(self, a: GeoPoint, b: GeoPoint, radius_m: float | None = None) -> bool:
        limit = self._radius_m if radius_m is None else float(radius_m)
        return self.distance_m(a, b) <= limit
