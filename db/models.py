"""Beanie ODM document models for MongoDB collections.

Usage:
    from db.models import PendingRequestDocument

    # Read the queue back in order
    docs = await PendingRequestDocument.find_all().sort("+position").to_list()
"""

from __future__ import annotations

from beanie import Document, Indexed
from pydantic import Field
from pymongo import ASCENDING, IndexModel


class PendingRequestDocument(Document):
    """One write that has not been delivered to the server yet."""

    request_id: Indexed(str, unique=True)
    url: str
    method: str
    headers: dict[str, str] = Field(default_factory=dict)
    body: str | None = None
    timestamp: int
    # Rank in the in-memory queue at the time of the last rewrite
    position: int = 0

    class Settings:
        name = "pending_requests"
        indexes = [
            IndexModel([("position", ASCENDING)], name="pending_position_idx"),
            IndexModel([("timestamp", ASCENDING)], name="pending_timestamp_idx"),
        ]


ALL_DOCUMENT_MODELS = [PendingRequestDocument]
