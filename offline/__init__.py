"""Offline tolerance: durable queue of undelivered writes and its replay."""

from offline.connectivity import HttpConnectivityMonitor
from offline.events import ConnectivityChanged, EventBus, PendingCountChanged
from offline.models import PendingRequest, SyncReport, generate_request_id
from offline.queue import OfflineSyncQueue
from offline.store import MongoPendingRequestStore

__all__ = [
    "ConnectivityChanged",
    "EventBus",
    "HttpConnectivityMonitor",
    "MongoPendingRequestStore",
    "OfflineSyncQueue",
    "PendingCountChanged",
    "PendingRequest",
    "SyncReport",
    "generate_request_id",
]
