"""
Nearby-target discovery.

Polled every few seconds by moving clients, so it only reads the in-memory index
and never touches a store.
"""

from __future__ import annotations

from geohunt.core.geo import GeoPoint
from geohunt.domain.models import NearbyTarget
from geohunt.engine.geo_index import GeoIndex
from geohunt.engine.proximity import ProximityEvaluator


class TargetFinder:
    def __init__(self, index: GeoIndex, proximity: ProximityEvaluator):
        self._index = index
        self._proximity = proximity

    def find_nearby(self, position: GeoPoint, radius_m: float | None = None) -> list[NearbyTarget]:
        """Return prompt + location of every question within the radius, nearest first."""
        hits: list[tuple[float, NearbyTarget]] = []
        for q in self._index.all():
            if not self._proximity.is_within_radius(q.location, position, radius_m):
                continue
            target = NearbyTarget(id=q.id, title=q.title, question=q.question, lat=q.lat, lng=q.lng)
            hits.append((self._proximity.distance_m(q.location, position), target))
        hits.sort(key=lambda h: (h[0], h[1].id))
        return [t for _, t in hits]
