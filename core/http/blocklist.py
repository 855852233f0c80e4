"""Host block utilities for HTTP clients.

Third-party geocoding hosts are never contacted by the field client
directly; the server proxies them.
"""

from __future__ import annotations

from collections.abc import Iterable
from urllib.parse import urlparse

DEFAULT_FORBIDDEN_HOSTS = {
    "overpass-api.de",
    "overpass.kumi.systems",
    "nominatim.openstreetmap.org",
    "tile.openstreetmap.org",
}


def is_forbidden_host(
    url: str, forbidden_hosts: Iterable[str] = DEFAULT_FORBIDDEN_HOSTS
) -> bool:
    parsed = urlparse(url)
    host = (parsed.hostname or "").lower()
    if not host:
        return False
    forbidden = {item.lower() for item in forbidden_hosts}
    if host in forbidden:
        return True
    return any(host.endswith(f".{item}") for item in forbidden)
