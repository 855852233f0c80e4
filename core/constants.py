"""Global constants for the core package.

This module contains shared constants used across the application core.
"""

from typing import Final

# HTTP Client Constants
HTTP_CONNECTION_LIMIT: Final[int] = 10
HTTP_TIMEOUT_CONNECT: Final[float] = 10.0
HTTP_TIMEOUT_SOCK_READ: Final[float] = 60.0
HTTP_TIMEOUT_TOTAL: Final[float] = 300.0

# Great-circle distance
EARTH_RADIUS_KM: Final[float] = 6371.0

# Address and visit outcomes
VISIT_STATUS_SOLD: Final[str] = "sold"
VISIT_STATUS_REFUSED: Final[str] = "refused"
VISIT_STATUS_REVISIT: Final[str] = "revisit"
VISIT_STATUS_ABSENT: Final[str] = "absent"
ADDRESS_STATUS_UNVISITED: Final[str] = "unvisited"

VISIT_STATUSES: Final[frozenset[str]] = frozenset(
    {
        VISIT_STATUS_SOLD,
        VISIT_STATUS_REFUSED,
        VISIT_STATUS_REVISIT,
        VISIT_STATUS_ABSENT,
    },
)
ADDRESS_STATUSES: Final[frozenset[str]] = VISIT_STATUSES | {ADDRESS_STATUS_UNVISITED}

# Tournee lifecycle
TOURNEE_STATUS_PLANNED: Final[str] = "planned"
TOURNEE_STATUSES: Final[tuple[str, ...]] = (
    TOURNEE_STATUS_PLANNED,
    "in_progress",
    "completed",
    "cancelled",
)

# API endpoints the field client writes to
SALES_ENDPOINT: Final[str] = "/api/sales"
VISITS_ENDPOINT: Final[str] = "/api/visits"
TOURNEES_ENDPOINT: Final[str] = "/api/tournees"
