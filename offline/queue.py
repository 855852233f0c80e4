"""OfflineSyncQueue: writes recorded without network, replayed on reconnect.

The queue owns the pending requests. The in-memory list is authoritative;
after every change it is written back in full to the durable store. A store
failure is logged and the session carries on from memory.

On every offline -> online transition each queued request is replayed once,
oldest first, one at a time. Delivered requests (2xx) are dropped, the rest
stay queued for the next reconnect. There is no retry cap.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from offline.events import ConnectivityChanged, EventBus, PendingCountChanged
from offline.interfaces import ConnectivitySource, PendingRequestStore, Transport
from offline.models import PendingRequest, SyncReport, generate_request_id

logger = logging.getLogger(__name__)


class OfflineSyncQueue:
    """Durable queue of undelivered writes with connectivity-triggered replay.

    Args:
        store: Durable collection for the queued requests.
        transport: Sends replayed requests.
        connectivity: Source of online/offline transitions.
        events: Bus used to notify the UI; a private one is created if omitted.
    """

    def __init__(
        self,
        store: PendingRequestStore,
        transport: Transport,
        connectivity: ConnectivitySource,
        events: EventBus | None = None,
    ) -> None:
        self._store = store
        self._transport = transport
        self._connectivity = connectivity
        self.events = events or EventBus()
        self._pending: list[PendingRequest] = []
        self._online = False
        self._started = False
        # True until the stored copy has been read once
        self._restore_failed = False
        self._unsubscribe: Callable[[], None] | None = None
        # Serializes every read-modify-write of the queue and its stored copy
        self._mutation_lock = asyncio.Lock()
        self._sync_lock = asyncio.Lock()

    async def start(self) -> None:
        """Restore queued requests and begin following connectivity changes."""
        if self._started:
            return
        async with self._mutation_lock:
            try:
                self._pending = await self._store.load_all()
            except Exception:
                logger.exception("Could not restore pending requests, starting empty")
                self._pending = []
                self._restore_failed = True
        self._online = self._connectivity.is_online
        self._unsubscribe = self._connectivity.subscribe(
            self.handle_connectivity_change
        )
        self._started = True
        logger.info(
            "Offline queue started (%s) with %d pending request(s)",
            "online" if self._online else "offline",
            len(self._pending),
        )

    async def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._started = False

    @property
    def is_online(self) -> bool:
        return self._online

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def pending(self) -> tuple[PendingRequest, ...]:
        return tuple(self._pending)

    def on_connectivity_change(
        self, listener: Callable[[ConnectivityChanged], Awaitable[None] | None]
    ) -> Callable[[], None]:
        return self.events.subscribe(ConnectivityChanged, listener)

    def on_pending_change(
        self, listener: Callable[[PendingCountChanged], Awaitable[None] | None]
    ) -> Callable[[], None]:
        return self.events.subscribe(PendingCountChanged, listener)

    async def enqueue(
        self,
        url: str,
        method: str,
        headers: dict[str, str] | None = None,
        body: str | None = None,
    ) -> PendingRequest:
        """Queue a write for the next reconnect. Never sends anything itself."""
        request = PendingRequest.create(url, method, headers, body)
        async with self._mutation_lock:
            known_ids = {item.id for item in self._pending}
            while request.id in known_ids:
                request = request.model_copy(
                    update={"id": generate_request_id(request.timestamp)}
                )
            self._pending.append(request)
            await self._persist()
            count = len(self._pending)

        logger.info(
            "Queued %s %s for later delivery (%d pending)",
            request.method,
            request.url,
            count,
        )
        await self.events.publish(PendingCountChanged(count=count))
        return request

    async def handle_connectivity_change(self, online: bool) -> None:
        """Apply a connectivity signal; replays the queue when coming back online."""
        if online == self._online:
            return
        self._online = online
        logger.info("Offline queue is now %s", "online" if online else "offline")
        await self.events.publish(ConnectivityChanged(is_online=online))
        if online:
            await self._replay_pending()

    async def sync_pending(self) -> SyncReport:
        """Replay now if online; a no-op report otherwise."""
        if not self._online:
            logger.info(
                "Sync requested while offline, %d request(s) kept",
                self.pending_count,
            )
            return SyncReport(remaining=self.pending_count)
        return await self._replay_pending()

    async def _replay_pending(self) -> SyncReport:
        async with self._sync_lock:
            snapshot = list(self._pending)
            if not snapshot:
                return SyncReport()

            logger.info("Replaying %d pending request(s)", len(snapshot))
            delivered: set[str] = set()
            for request in snapshot:
                if await self._replay(request):
                    delivered.add(request.id)

            async with self._mutation_lock:
                if delivered:
                    self._pending = [
                        item for item in self._pending if item.id not in delivered
                    ]
                    await self._persist()
                remaining = len(self._pending)

            logger.info(
                "Replay pass done: %d delivered, %d remaining",
                len(delivered),
                remaining,
            )
            if delivered:
                await self.events.publish(PendingCountChanged(count=remaining))
            return SyncReport(
                attempted=len(snapshot),
                delivered=len(delivered),
                remaining=remaining,
            )

    async def _replay(self, request: PendingRequest) -> bool:
        try:
            response = await self._transport.send(
                request.url,
                request.method,
                dict(request.headers),
                request.body,
            )
        except Exception as e:
            logger.warning("Replay of %s %s failed: %s", request.method, request.url, e)
            return False
        if not response.ok:
            logger.warning(
                "Replay of %s %s rejected with status %s, kept for next reconnect",
                request.method,
                request.url,
                response.status,
            )
            return False
        logger.info("Delivered queued %s %s", request.method, request.url)
        return True

    async def _persist(self) -> None:
        """Rewrite the stored copy. Caller holds the mutation lock."""
        if self._restore_failed and not await self._retry_restore():
            logger.warning(
                "Stored queue still unreadable; %d pending request(s) kept in "
                "memory only",
                len(self._pending),
            )
            return
        try:
            await self._store.replace_all(list(self._pending))
        except Exception:
            logger.exception(
                "Could not persist %d pending request(s); keeping them in memory",
                len(self._pending),
            )

    async def _retry_restore(self) -> bool:
        """Read the stored queue that start() missed, ahead of this session's.

        Caller holds the mutation lock.
        """
        try:
            stored = await self._store.load_all()
        except Exception as e:
            logger.warning("Pending requests still cannot be restored: %s", e)
            return False
        known_ids = {item.id for item in stored}
        self._pending = stored + [
            item for item in self._pending if item.id not in known_ids
        ]
        self._restore_failed = False
        logger.info("Restored %d stored pending request(s)", len(stored))
        return True
