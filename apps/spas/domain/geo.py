"""
Geo Discovery

Great-circle distance search over spa coordinates.

- GeoPoint: validated latitude/longitude pair
- NearbyQuery: origin plus search radius, bounds-checked
- rank_nearby: filter candidates to the radius and order them by distance
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List

from shared.domain.base import ValueObject
from shared.domain.exceptions import ValidationError

EARTH_RADIUS_KM = 6371.0
DEFAULT_RADIUS_KM = 10.0
MIN_RADIUS_KM = 0.1
MAX_RADIUS_KM = 100.0
MAX_RESULTS = 100


class InvalidArgument(ValidationError):
    code = 'invalid_argument'


def _check_range(name: str, value: float, low: float, high: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidArgument(f"{name} must be a number", field=name) from None
    if not math.isfinite(number) or not low <= number <= high:
        raise InvalidArgument(f"{name} must be between {low} and {high}", field=name)
    return number


@dataclass(frozen=True)
class GeoPoint(ValueObject):
    latitude: float
    longitude: float

    def __post_init__(self):
        object.__setattr__(self, 'latitude', _check_range('lat', self.latitude, -90.0, 90.0))
        object.__setattr__(self, 'longitude', _check_range('lng', self.longitude, -180.0, 180.0))


def haversine_km(a: GeoPoint, b: GeoPoint, radius_km: float = EARTH_RADIUS_KM) -> float:
    """d = 2r * asin(sqrt(sin^2(dlat/2) + cos(lat1) * cos(lat2) * sin^2(dlng/2)))"""
    lat1, lat2 = math.radians(a.latitude), math.radians(b.latitude)
    dlat = lat2 - lat1
    dlng = math.radians(b.longitude - a.longitude)
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    # Float error can push h a hair past 1 for antipodal points.
    return 2 * radius_km * math.asin(math.sqrt(min(1.0, h)))


@dataclass(frozen=True)
class NearbyQuery(ValueObject):
    origin: GeoPoint
    radius_km: float = DEFAULT_RADIUS_KM

    @classmethod
    def build(cls, lat, lng, radius_km=None) -> 'NearbyQuery':
        radius = DEFAULT_RADIUS_KM if radius_km is None else radius_km
        return cls(
            origin=GeoPoint(lat, lng),
            radius_km=_check_range('radius', radius, MIN_RADIUS_KM, MAX_RADIUS_KM),
        )

    def latitude_band(self) -> tuple[float, float]:
        """
        Latitudes that can possibly be within the radius

        Great-circle distance is never shorter than r * |dlat|, so spas
        outside this band can be dropped before computing distances.
        """
        delta = math.degrees(self.radius_km / EARTH_RADIUS_KM)
        return max(-90.0, self.origin.latitude - delta), min(90.0, self.origin.latitude + delta)


@dataclass(frozen=True)
class SpaLocation:
    spa_id: int
    name: str
    point: GeoPoint


@dataclass(frozen=True)
class NearbySpa:
    spa_id: int
    name: str
    latitude: float
    longitude: float
    distance_km: Decimal

    @property
    def distance_display(self) -> str:
        return f"{self.distance_km:.2f}"


def round_distance(distance_km: float) -> Decimal:
    return Decimal(repr(distance_km)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)


def rank_nearby(
    query: NearbyQuery,
    candidates: Iterable[SpaLocation],
    limit: int = MAX_RESULTS,
) -> List[NearbySpa]:
    """
    Candidates within ``query.radius_km`` ordered by ascending distance

    The filter uses the exact distance; only the reported value is rounded.
    Sorting is stable, so equidistant spas keep the candidates' order.
    """
    measured = []
    for candidate in candidates:
        distance = haversine_km(query.origin, candidate.point)
        if distance <= query.radius_km:
            measured.append((distance, candidate))
    measured.sort(key=lambda item: item[0])
    return [
        NearbySpa(
            spa_id=candidate.spa_id,
            name=candidate.name,
            latitude=candidate.point.latitude,
            longitude=candidate.point.longitude,
            distance_km=round_distance(distance),
        )
        for distance, candidate in measured[:limit]
    ]
