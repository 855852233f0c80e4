"""Shared aiohttp session for the field client.

One session serves every request made from the running event loop. A
session left over from a previous loop (tests, or ``asyncio.run`` called
again) is closed and replaced.
"""

from __future__ import annotations

import asyncio
import logging

import aiohttp

from core.constants import (
    HTTP_CONNECTION_LIMIT,
    HTTP_TIMEOUT_CONNECT,
    HTTP_TIMEOUT_SOCK_READ,
    HTTP_TIMEOUT_TOTAL,
)

logger = logging.getLogger(__name__)

USER_AGENT = "CalygoField/1.0"


class SessionState:
    """Holder for the shared session."""

    session: aiohttp.ClientSession | None = None


def _new_session() -> aiohttp.ClientSession:
    return aiohttp.ClientSession(
        timeout=aiohttp.ClientTimeout(
            total=HTTP_TIMEOUT_TOTAL,
            connect=HTTP_TIMEOUT_CONNECT,
            sock_read=HTTP_TIMEOUT_SOCK_READ,
        ),
        headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
        connector=aiohttp.TCPConnector(limit=HTTP_CONNECTION_LIMIT),
    )


async def get_session() -> aiohttp.ClientSession:
    """Return the session bound to the running loop, creating it if needed."""
    session = SessionState.session
    if session is not None and not session.closed:
        if session.loop is asyncio.get_running_loop():
            return session
        logger.info("Event loop changed, replacing HTTP session")
        if not session.loop.is_closed():
            await session.close()

    SessionState.session = _new_session()
    logger.debug("Created HTTP session")
    return SessionState.session


async def cleanup_session() -> None:
    """Close the shared session, if any."""
    session, SessionState.session = SessionState.session, None
    if session is not None and not session.closed:
        await session.close()
        logger.info("Closed HTTP session")
