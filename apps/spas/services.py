"""Spa search services."""

from __future__ import annotations

import logging

from .domain.geo import GeoPoint, NearbyQuery, NearbySpa, SpaLocation, rank_nearby
from .models import Spa

logger = logging.getLogger(__name__)


def find_nearby_spas(lat, lng, radius_km=None) -> list[NearbySpa]:
    """Approved spas with coordinates within ``radius_km`` of (lat, lng), nearest first."""
    query = NearbyQuery.build(lat, lng, radius_km)
    min_lat, max_lat = query.latitude_band()
    rows = (
        Spa.objects.approved()
        .with_coordinates()
        .filter(latitude__gte=min_lat, latitude__lte=max_lat)
        .order_by("name", "id")
        .values_list("id", "name", "latitude", "longitude")
    )
    candidates = [
        SpaLocation(spa_id=spa_id, name=name, point=GeoPoint(float(latitude), float(longitude)))
        for spa_id, name, latitude, longitude in rows
    ]
    results = rank_nearby(query, candidates)
    logger.debug(
        f"Nearby search ({query.origin.latitude}, {query.origin.longitude}) r={query.radius_km}km: "
        f"{len(candidates)} candidates, {len(results)} results"
    )
    return results
