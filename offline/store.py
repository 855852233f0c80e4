"""MongoDB-backed durable store for pending requests."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from pymongo.errors import PyMongoError

from core.exceptions import PersistenceError
from db.manager import DatabaseManager
from db.models import PendingRequestDocument
from offline.models import PendingRequest

logger = logging.getLogger(__name__)


class MongoPendingRequestStore:
    """Keep the pending queue in the ``pending_requests`` collection.

    Every write replaces the whole collection so the stored copy is always a
    full snapshot of the in-memory queue. When built with a ``db_manager``,
    Beanie is initialized on first use and again after a failed attempt, so a
    database that comes up late is picked up without a restart.
    """

    def __init__(self, db_manager: DatabaseManager | None = None) -> None:
        self._db_manager = db_manager

    @classmethod
    async def open(cls, db_manager: DatabaseManager) -> MongoPendingRequestStore:
        """Initialize Beanie (creating the collection if needed) and return a store."""
        store = cls(db_manager)
        await store.ensure_ready()
        return store

    async def ensure_ready(self) -> None:
        if self._db_manager is None:
            return
        try:
            await self._db_manager.init_beanie()
        except PyMongoError as e:
            msg = "Could not open the pending request collection"
            raise PersistenceError(msg, {"error": str(e)}) from e

    async def load_all(self) -> list[PendingRequest]:
        await self.ensure_ready()
        try:
            documents = await PendingRequestDocument.find_all().sort(
                "+position"
            ).to_list()
        except PyMongoError as e:
            msg = "Could not read pending requests"
            raise PersistenceError(msg, {"error": str(e)}) from e

        return [
            PendingRequest(
                id=doc.request_id,
                url=doc.url,
                method=doc.method,
                headers=doc.headers,
                body=doc.body,
                timestamp=doc.timestamp,
            )
            for doc in documents
        ]

    async def replace_all(self, requests: Sequence[PendingRequest]) -> None:
        await self.ensure_ready()
        documents = [
            PendingRequestDocument(
                request_id=request.id,
                url=request.url,
                method=request.method,
                headers=request.headers,
                body=request.body,
                timestamp=request.timestamp,
                position=position,
            )
            for position, request in enumerate(requests)
        ]
        try:
            await PendingRequestDocument.delete_all()
            if documents:
                await PendingRequestDocument.insert_many(documents)
        except PyMongoError as e:
            msg = "Could not rewrite pending requests"
            raise PersistenceError(msg, {"error": str(e), "count": len(documents)}) from e
        logger.debug("Persisted %d pending request(s)", len(documents))
