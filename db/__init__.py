"""Database package for the local durable store using Beanie ODM.

Modules:
    manager: DatabaseManager for connection handling and Beanie init
    models: Beanie Document models for all collections

Usage:
    from db.models import PendingRequestDocument

    documents = await PendingRequestDocument.find_all().to_list()
"""

from db.manager import DatabaseManager
from db.models import ALL_DOCUMENT_MODELS, PendingRequestDocument

__all__ = [
    "ALL_DOCUMENT_MODELS",
    "DatabaseManager",
    "PendingRequestDocument",
]
