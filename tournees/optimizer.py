"""Visiting order for a tournee.

Greedy nearest-neighbour tour construction over geocoded addresses, using
straight-line (haversine) distance as a proxy for travel distance. Results
are an approximate ordering, not a travel-time estimate.
"""

from __future__ import annotations

import math
from collections.abc import Hashable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from core.constants import EARTH_RADIUS_KM
from core.exceptions import ValidationError


@dataclass(frozen=True)
class GeoPoint:
    """An address location handed to the optimizer."""

    id: Hashable
    lat: float
    lon: float

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any],
        *,
        lat_key: str = "lat",
        lon_key: str = "lon",
    ) -> GeoPoint:
        """Build a point from a loosely-typed record.

        Coordinates may arrive as decimal strings. Out-of-range or NaN values
        are kept as-is; only a missing id or a non-numeric coordinate is
        rejected.
        """
        if data.get("id") is None:
            msg = "GeoPoint requires an id"
            raise ValidationError(msg, {"record": dict(data)})
        try:
            lat = float(data[lat_key])
            lon = float(data[lon_key])
        except (KeyError, TypeError, ValueError) as e:
            msg = f"GeoPoint {data.get('id')!r} has no numeric coordinates"
            raise ValidationError(msg, {"record": dict(data)}) from e
        return cls(id=data["id"], lat=lat, lon=lon)


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometres between two lat/lon pairs in degrees."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlmb = math.radians(lon2 - lon1)
    a = (
        math.sin(dphi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def distance_between(a: GeoPoint, b: GeoPoint) -> float:
    return haversine_km(a.lat, a.lon, b.lat, b.lon)


def optimize_route(points: Sequence[GeoPoint]) -> list[Hashable]:
    """Order points by repeatedly walking to the closest unvisited one.

    The tour starts at the first input point. Among equally close candidates
    the earliest in input order wins. NaN coordinates never win a comparison,
    so they degrade the order but the result is still a permutation of the
    input ids.

    Args:
        points: Points to visit, in a stable order.

    Returns:
        Point ids in visiting order.
    """
    if len(points) <= 1:
        return [point.id for point in points]

    remaining = list(points)
    current = remaining.pop(0)
    ordered = [current.id]

    while remaining:
        nearest_index = 0
        min_distance = distance_between(current, remaining[0])
        for index in range(1, len(remaining)):
            distance = distance_between(current, remaining[index])
            if distance < min_distance:
                min_distance = distance
                nearest_index = index

        current = remaining.pop(nearest_index)
        ordered.append(current.id)

    return ordered


async def optimize_route_async(points: Sequence[GeoPoint]) -> list[Hashable]:
    """Coroutine wrapper so callers can await the result like other services."""
    return optimize_route(points)


def route_distance_km(points: Iterable[GeoPoint]) -> float:
    """Total straight-line length of an open path visiting points in order."""
    total = 0.0
    previous: GeoPoint | None = None
    for point in points:
        if previous is not None:
            total += distance_between(previous, point)
        previous = point
    return total
