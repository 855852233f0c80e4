"""Build a tournee from a selection of addresses.

Addresses come from the record store with coordinates stored as decimal
strings, sometimes missing. Only addresses with usable coordinates take part
in the tournee; the rest are reported back so the UI can flag them.
"""

from __future__ import annotations

import json
import logging
import math
import re
from collections.abc import Hashable, Iterable, Mapping
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.constants import TOURNEE_STATUS_PLANNED, TOURNEE_STATUSES, TOURNEES_ENDPOINT
from core.exceptions import ExternalServiceError, ValidationError
from offline.interfaces import Transport
from tournees.optimizer import GeoPoint, optimize_route, route_distance_km

logger = logging.getLogger(__name__)


class TourneePlan(BaseModel):
    """Tournee ready to be persisted, addresses already in visiting order."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    pompier_id: int = Field(alias="pompierId")
    scheduled_date: datetime = Field(alias="scheduledDate")
    address_ids: list[str] = Field(alias="addressIds")
    created_by: int = Field(alias="createdBy")
    status: str = TOURNEE_STATUS_PLANNED
    distance_km: float = Field(default=0.0, exclude=True)
    skipped_address_ids: list[str] = Field(default_factory=list, exclude=True)

    @field_validator("status")
    @classmethod
    def _known_status(cls, v: str) -> str:
        if v not in TOURNEE_STATUSES:
            msg = f"Unknown tournee status {v!r}"
            raise ValueError(msg)
        return v

    @property
    def optimized_route(self) -> str:
        """Visiting order as the JSON array stored alongside the tournee."""
        return json.dumps([_restore_id(address_id) for address_id in self.address_ids])

    def to_payload(self) -> dict[str, Any]:
        """Request body for creating the tournee on the server."""
        payload = self.model_dump(by_alias=True, mode="json")
        payload["scheduledDate"] = self.scheduled_date.astimezone(UTC).isoformat()
        payload["optimizedRoute"] = self.optimized_route
        return payload


def _restore_id(address_id: str) -> int | str:
    return int(address_id) if address_id.isdigit() else address_id


# Leading decimal number of a string, read the way a browser's parseFloat does
_LEADING_FLOAT = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def _coordinate(value: Any) -> float:
    """Read a stored coordinate leniently: unset is 0, unparsable is NaN."""
    if value is None or value == "":
        return 0.0
    if isinstance(value, int | float):
        return float(value)
    match = _LEADING_FLOAT.match(str(value))
    return float(match.group(1)) if match else math.nan


def _usable_point(address: Mapping[str, Any]) -> GeoPoint | None:
    if address.get("id") is None:
        return None
    lat = _coordinate(address.get("latitude"))
    lon = _coordinate(address.get("longitude"))
    # Unset coordinates are stored as 0 rather than null
    if lat == 0 or lon == 0:
        return None
    return GeoPoint(id=address["id"], lat=lat, lon=lon)


def collect_points(
    addresses: Iterable[Mapping[str, Any]],
) -> tuple[list[GeoPoint], list[Hashable]]:
    """Split address records into optimizable points and skipped ids."""
    points: list[GeoPoint] = []
    skipped: list[Hashable] = []
    for address in addresses:
        point = _usable_point(address)
        if point is None:
            skipped.append(address.get("id"))
        else:
            points.append(point)
    return points, skipped


def plan_tournee(
    *,
    name: str,
    pompier_id: int,
    scheduled_date: datetime,
    addresses: Iterable[Mapping[str, Any]],
    created_by: int,
) -> TourneePlan:
    """Order the selected addresses and build the tournee to persist.

    Raises:
        ValidationError: When no selected address has usable coordinates.
    """
    points, skipped = collect_points(addresses)
    if skipped:
        logger.info(
            "Tournee %r: %d address(es) without coordinates left out: %s",
            name,
            len(skipped),
            skipped,
        )
    if not points:
        msg = "None of the selected addresses has coordinates"
        raise ValidationError(msg, {"skipped": [str(s) for s in skipped]})

    order = optimize_route(points)
    by_id = {point.id: point for point in points}
    distance = route_distance_km(by_id[point_id] for point_id in order)
    logger.debug(
        "Tournee %r ordered %d addresses over %.2f km", name, len(order), distance
    )

    try:
        return TourneePlan(
            name=name,
            pompier_id=pompier_id,
            scheduled_date=scheduled_date,
            address_ids=[str(point_id) for point_id in order],
            created_by=created_by,
            distance_km=distance,
            skipped_address_ids=[str(s) for s in skipped],
        )
    except ValueError as e:
        msg = f"Invalid tournee {name!r}"
        raise ValidationError(msg, {"error": str(e)}) from e


async def submit_tournee(transport: Transport, plan: TourneePlan) -> str:
    """Create the tournee on the server and return the response body.

    Tournees are planned from the office, so nothing is queued here: a
    ``TransportError`` reaches the caller unchanged.
    """
    response = await transport.send(
        TOURNEES_ENDPOINT,
        "POST",
        {"Content-Type": "application/json"},
        json.dumps(plan.to_payload()),
    )
    if not response.ok:
        msg = f"Server rejected tournee {plan.name!r}: {response.status}"
        raise ExternalServiceError(
            msg, {"status": response.status, "body": response.body}
        )
    logger.info("Tournee %r created with %d stops", plan.name, len(plan.address_ids))
    return response.body
