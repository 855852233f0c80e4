"""
Connectivity detection by probing the API server.

Any HTTP answer below 500 means the server is reachable. Anything else,
including a failed connection, means the field client is offline. Subscribers are only told about changes.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import aiohttp

from core.http.session import get_session
from offline.interfaces import ConnectivityListener

logger = logging.getLogger(__name__)


class HttpConnectivityMonitor:
    """Poll a health URL and report online/offline transitions.

    Args:
        check_url: URL probed on every tick.
        interval: Seconds between probes.
        timeout: Seconds allowed for one probe.
        session_factory: Coroutine returning the aiohttp session to use.
    """

    def __init__(
        self,
        check_url: str,
        *,
        interval: float = 15.0,
        timeout: float = 5.0,
        session_factory: Callable[[], Awaitable[Any]] = get_session,
    ) -> None:
        self.check_url = check_url
        self.interval = interval
        self.timeout = timeout
        self._session_factory = session_factory
        self._online = False
        self._listeners: list[ConnectivityListener] = []
        self._task: asyncio.Task | None = None

    @property
    def is_online(self) -> bool:
        return self._online

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def subscribe(self, listener: ConnectivityListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    async def probe(self) -> bool:
        """Single reachability check, without touching the observed state."""
        try:
            session = await self._session_factory()
            async with session.get(
                self.check_url,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                return response.status < 500
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            logger.debug("Connectivity probe to %s failed: %s", self.check_url, e)
            return False

    async def check_now(self) -> bool:
        """Probe and notify subscribers if the state changed."""
        online = await self.probe()
        if online != self._online:
            self._online = online
            logger.info("Connectivity changed: %s", "online" if online else "offline")
            await self._notify(online)
        return online

    async def _notify(self, online: bool) -> None:
        for listener in list(self._listeners):
            try:
                await listener(online)
            except Exception:
                logger.exception("Connectivity listener %r failed", listener)

    async def start(self) -> None:
        """Take the initial reading, then poll in the background."""
        if self.running:
            return
        self._online = await self.probe()
        logger.info(
            "Connectivity monitor started (%s), polling %s every %.0fs",
            "online" if self._online else "offline",
            self.check_url,
            self.interval,
        )
        self._task = asyncio.create_task(self._run())

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.check_now()
            except Exception:
                logger.exception("Connectivity check failed")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Connectivity monitor stopped")
