"""
Database connection manager module.

Provides the DatabaseManager class for the local MongoDB connection with
event loop handling and Beanie initialization.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC
from typing import Any

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

logger = logging.getLogger(__name__)


class DatabaseManager:
    """
    Manage the MongoDB client and database connection.

    The manager is constructed explicitly and handed to whatever needs it;
    it reconnects transparently when the running event loop changes.

    Args:
        mongo_uri: MongoDB connection string.
        db_name: Database holding the local collections.
        server_selection_timeout_ms: How long to wait for the server.
    """

    def __init__(
        self,
        mongo_uri: str,
        db_name: str,
        *,
        server_selection_timeout_ms: int = 5000,
    ) -> None:
        self._mongo_uri = mongo_uri
        self._db_name = db_name
        self._server_selection_timeout_ms = server_selection_timeout_ms
        self._client: AsyncIOMotorClient | None = None
        self._db: AsyncIOMotorDatabase | None = None
        self._bound_loop: asyncio.AbstractEventLoop | None = None
        self._beanie_initialized = False

    def _initialize_client(self) -> None:
        try:
            client_kwargs: dict[str, Any] = {
                "tz_aware": True,
                "tzinfo": UTC,
                "serverSelectionTimeoutMS": self._server_selection_timeout_ms,
                "appname": "CalygoField",
            }
            self._client = AsyncIOMotorClient(self._mongo_uri, **client_kwargs)
            self._db = self._client[self._db_name]
            logger.info("MongoDB client initialized for database %s", self._db_name)
        except Exception:
            logger.exception("Failed to initialize MongoDB client")
            raise

    @staticmethod
    def _get_current_loop() -> asyncio.AbstractEventLoop | None:
        try:
            return asyncio.get_running_loop()
        except RuntimeError:
            return None

    def _close_client_sync(self) -> None:
        if self._client:
            try:
                self._client.close()
            except Exception as e:
                logger.warning("Error closing MongoDB client: %s", str(e))
        self._client = None
        self._db = None
        self._bound_loop = None
        self._beanie_initialized = False

    def _check_loop_and_reconnect(self) -> None:
        """Check if event loop has changed and reconnect if necessary."""
        current_loop = self._get_current_loop()
        if self._client is None or self._bound_loop is None:
            return
        if self._bound_loop.is_closed() or (
            current_loop is not None and self._bound_loop is not current_loop
        ):
            logger.info("Event loop changed, reconnecting MongoDB client")
            self._close_client_sync()

    @property
    def db(self) -> AsyncIOMotorDatabase:
        """Get the database instance, initializing if necessary."""
        self._check_loop_and_reconnect()
        if self._db is None:
            self._initialize_client()
            self._bound_loop = self._get_current_loop()
        if self._db is None:
            msg = "Database instance could not be initialized."
            raise RuntimeError(msg)
        return self._db

    async def init_beanie(self) -> None:
        """
        Initialize Beanie ODM with all document models.

        This should be called once during application startup.
        """
        self._check_loop_and_reconnect()
        if self._beanie_initialized:
            return

        from beanie import init_beanie

        from db.models import ALL_DOCUMENT_MODELS

        await init_beanie(database=self.db, document_models=ALL_DOCUMENT_MODELS)
        self._beanie_initialized = True
        logger.info(
            "Beanie ODM initialized with %d document models",
            len(ALL_DOCUMENT_MODELS),
        )

    async def cleanup_connections(self) -> None:
        """Clean up MongoDB client connections."""
        if self._client:
            try:
                logger.info("Closing MongoDB client connections...")
                self._client.close()
            except Exception:
                logger.exception("Error closing MongoDB client")
            finally:
                self._client = None
                self._db = None
                self._bound_loop = None
                self._beanie_initialized = False
