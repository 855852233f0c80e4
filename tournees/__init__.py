"""Tournee planning: visiting order and tournee construction."""

from tournees.optimizer import (
    GeoPoint,
    haversine_km,
    optimize_route,
    optimize_route_async,
    route_distance_km,
)
from tournees.planner import TourneePlan, collect_points, plan_tournee, submit_tournee

__all__ = [
    "GeoPoint",
    "TourneePlan",
    "collect_points",
    "haversine_km",
    "optimize_route",
    "optimize_route_async",
    "plan_tournee",
    "route_distance_km",
    "submit_tournee",
]
