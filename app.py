"""Field client wiring and sync agent entry point.

Every shared service is constructed here once and handed to whoever needs
it. Run ``python app.py`` to keep a device's queue replaying in the
background until interrupted.
"""

import asyncio
import contextlib
import logging
import signal
from dataclasses import dataclass

from dotenv import load_dotenv

import config
from core.exceptions import PersistenceError
from core.http.session import cleanup_session
from core.http.transport import HttpTransport
from db.manager import DatabaseManager
from offline.connectivity import HttpConnectivityMonitor
from offline.events import EventBus
from offline.queue import OfflineSyncQueue
from offline.store import MongoPendingRequestStore
from sales.recorder import SaleRecorder

load_dotenv()

logger = logging.getLogger(__name__)


@dataclass
class FieldApp:
    """The services a field device runs for its whole lifetime."""

    db_manager: DatabaseManager
    transport: HttpTransport
    monitor: HttpConnectivityMonitor
    queue: OfflineSyncQueue
    recorder: SaleRecorder
    events: EventBus

    async def start(self) -> None:
        await self.monitor.start()
        await self.queue.start()

    async def shutdown(self) -> None:
        await self.monitor.stop()
        await self.queue.stop()
        await cleanup_session()
        await self.db_manager.cleanup_connections()
        logger.info("Field app stopped")


async def create_field_app() -> FieldApp:
    """Build the field app from configuration. Nothing is started yet."""
    db_manager = DatabaseManager(config.MONGODB_URI, config.MONGODB_DATABASE)
    store = MongoPendingRequestStore(db_manager)
    try:
        await store.ensure_ready()
    except PersistenceError:
        logger.exception(
            "Local store unavailable at startup; queued writes stay in memory "
            "until it answers"
        )
    transport = HttpTransport(
        config.API_BASE_URL, timeout=config.REPLAY_REQUEST_TIMEOUT
    )
    monitor = HttpConnectivityMonitor(
        config.CONNECTIVITY_CHECK_URL,
        interval=config.CONNECTIVITY_POLL_INTERVAL,
        timeout=config.CONNECTIVITY_PROBE_TIMEOUT,
    )
    events = EventBus()
    queue = OfflineSyncQueue(store, transport, monitor, events)
    recorder = SaleRecorder(transport, queue)
    return FieldApp(
        db_manager=db_manager,
        transport=transport,
        monitor=monitor,
        queue=queue,
        recorder=recorder,
        events=events,
    )


async def run_sync_agent() -> None:
    field_app = await create_field_app()

    field_app.queue.on_connectivity_change(
        lambda event: logger.info(
            "Network %s", "available" if event.is_online else "lost"
        )
    )
    field_app.queue.on_pending_change(
        lambda event: logger.info("%d request(s) waiting for sync", event.count)
    )

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop.set)

    await field_app.start()
    try:
        if field_app.queue.is_online and field_app.queue.pending_count:
            await field_app.queue.sync_pending()
        await stop.wait()
    finally:
        await field_app.shutdown()


def main() -> None:
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )
    asyncio.run(run_sync_agent())


__all__ = [
    "FieldApp",
    "create_field_app",
    "main",
    "run_sync_agent",
]


if __name__ == "__main__":
    main()
