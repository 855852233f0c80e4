"""
HTTP transport used for direct writes and for replaying queued writes.

Keeps request dispatch and error mapping in one place: connection-level
failures become ``TransportError`` (the caller may queue the write), while
an answered request is always reported back as a ``TransportResponse``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Any
from urllib.parse import urljoin

import aiohttp

from core.exceptions import TransportError
from core.http.blocklist import DEFAULT_FORBIDDEN_HOSTS, is_forbidden_host
from core.http.session import get_session

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransportResponse:
    """Outcome of an answered HTTP request."""

    status: int
    body: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class HttpTransport:
    """Send raw HTTP requests through a shared aiohttp session.

    Args:
        base_url: Prefix for relative URLs such as ``/api/sales``.
        timeout: Total seconds allowed per request.
        session_factory: Coroutine returning the session to use. Defaults to
            the process-wide shared session.
        forbidden_hosts: Hosts this client must never contact.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        session_factory: Callable[[], Awaitable[Any]] = get_session,
        forbidden_hosts: Iterable[str] = DEFAULT_FORBIDDEN_HOSTS,
    ) -> None:
        self.base_url = base_url.rstrip("/") + "/"
        self.timeout = timeout
        self._session_factory = session_factory
        self._forbidden_hosts = set(forbidden_hosts)

    def resolve(self, url: str) -> str:
        """Join a relative URL onto the API base URL."""
        return urljoin(self.base_url, url.lstrip("/")) if "://" not in url else url

    async def send(
        self,
        url: str,
        method: str,
        headers: dict[str, str] | None = None,
        body: str | None = None,
    ) -> TransportResponse:
        full_url = self.resolve(url)
        method_upper = method.upper()

        if is_forbidden_host(full_url, self._forbidden_hosts):
            msg = f"Refusing to contact blocked host: {full_url}"
            raise TransportError(msg, {"url": full_url})

        session = await self._session_factory()
        try:
            async with session.request(
                method_upper,
                full_url,
                headers=headers or {},
                data=body,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                text = await response.text(errors="replace")
                return TransportResponse(status=response.status, body=text)
        except (aiohttp.ClientConnectionError, asyncio.TimeoutError) as e:
            logger.debug("%s %s unreachable: %s", method_upper, full_url, e)
            msg = f"{method_upper} {full_url} failed: {e.__class__.__name__}"
            raise TransportError(msg, {"url": full_url}) from e
