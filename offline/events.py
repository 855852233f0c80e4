"""Application-wide notifications about the offline queue.

Listeners subscribe per event type. Delivery is fire-and-forget: a listener
that raises is logged and skipped, and an event nobody listens to is dropped.
Delivery order across listeners is not part of the contract.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

E = TypeVar("E")
Listener = Callable[[Any], Awaitable[None] | None]


@dataclass(frozen=True)
class ConnectivityChanged:
    """Emitted on every online/offline transition."""

    is_online: bool
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict[str, Any]:
        return {"isOnline": self.is_online, "created_at": self.created_at.isoformat()}


@dataclass(frozen=True)
class PendingCountChanged:
    """Emitted whenever the number of undelivered requests changes."""

    count: int
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict[str, Any]:
        return {"pendingCount": self.count, "created_at": self.created_at.isoformat()}


class EventBus:
    """Explicit observer list keyed by event type."""

    def __init__(self) -> None:
        self._listeners: dict[type, list[Listener]] = {}

    def subscribe(
        self,
        event_type: type[E],
        listener: Callable[[E], Awaitable[None] | None],
    ) -> Callable[[], None]:
        """Register ``listener`` for ``event_type``; returns an unsubscribe callable."""
        listeners = self._listeners.setdefault(event_type, [])
        listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in listeners:
                listeners.remove(listener)

        return _unsubscribe

    def listener_count(self, event_type: type) -> int:
        return len(self._listeners.get(event_type, []))

    async def publish(self, event: Any) -> int:
        """Deliver ``event`` to its listeners. Returns how many were called."""
        listeners = list(self._listeners.get(type(event), []))
        for listener in listeners:
            try:
                result = listener(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception(
                    "Listener %r failed on %s", listener, type(event).__name__
                )
        return len(listeners)
