"""
Interfaces for the collaborators of the offline queue.
"""

from collections.abc import Awaitable, Callable, Sequence
from typing import Protocol

from core.http.transport import TransportResponse
from offline.models import PendingRequest

ConnectivityListener = Callable[[bool], Awaitable[None]]


class ConnectivitySource(Protocol):
    """Observed network reachability of the host environment."""

    @property
    def is_online(self) -> bool:
        """Latest observed state."""
        ...

    def subscribe(self, listener: ConnectivityListener) -> Callable[[], None]:
        """Call ``listener(is_online)`` on every change; returns an unsubscribe."""
        ...


class PendingRequestStore(Protocol):
    """Durable collection holding the queued requests across restarts."""

    async def load_all(self) -> list[PendingRequest]:
        """Read every stored request, in queue order."""
        ...

    async def replace_all(self, requests: Sequence[PendingRequest]) -> None:
        """Clear the collection then insert ``requests`` in order."""
        ...


class Transport(Protocol):
    """Sends one HTTP request."""

    async def send(
        self,
        url: str,
        method: str,
        headers: dict[str, str] | None = None,
        body: str | None = None,
    ) -> TransportResponse:
        ...
