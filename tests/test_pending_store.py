import pytest

from db.models import PendingRequestDocument
from offline.models import PendingRequest
from offline.queue import OfflineSyncQueue
from offline.store import MongoPendingRequestStore
from tests.http_fakes import FakeTransport
from tests.queue_fakes import FakeConnectivity


def _request(request_id: str, url: str, timestamp: int) -> PendingRequest:
    return PendingRequest(
        id=request_id,
        url=url,
        method="POST",
        headers={"Content-Type": "application/json"},
        body='{"addressId": 1}',
        timestamp=timestamp,
    )


@pytest.mark.asyncio
async def test_replace_all_then_load_all_keeps_queue_order(beanie_db) -> None:
    store = MongoPendingRequestStore()
    requests = [
        _request("b", "/api/sales", 2000),
        _request("a", "/api/visits", 1000),
        _request("c", "/api/visits", 3000),
    ]

    await store.replace_all(requests)

    assert await store.load_all() == requests


@pytest.mark.asyncio
async def test_replace_all_clears_previous_contents(beanie_db) -> None:
    store = MongoPendingRequestStore()
    await store.replace_all([_request("a", "/api/sales", 1), _request("b", "/api/sales", 2)])

    await store.replace_all([_request("c", "/api/visits", 3)])

    assert [r.id for r in await store.load_all()] == ["c"]
    assert await PendingRequestDocument.count() == 1


@pytest.mark.asyncio
async def test_replace_all_with_empty_queue_empties_collection(beanie_db) -> None:
    store = MongoPendingRequestStore()
    await store.replace_all([_request("a", "/api/sales", 1)])

    await store.replace_all([])

    assert await store.load_all() == []


@pytest.mark.asyncio
async def test_queue_restart_reloads_from_mongo(beanie_db) -> None:
    store = MongoPendingRequestStore()
    queue = OfflineSyncQueue(store, FakeTransport(), FakeConnectivity())
    await queue.start()
    await queue.enqueue("/api/sales", "POST", {"Content-Type": "application/json"}, "{}")
    await queue.enqueue("/api/visits", "POST", {"Content-Type": "application/json"}, "{}")

    restarted = OfflineSyncQueue(
        MongoPendingRequestStore(), FakeTransport(), FakeConnectivity()
    )
    await restarted.start()

    assert restarted.pending == queue.pending


@pytest.mark.asyncio
async def test_successful_replay_empties_mongo_collection(beanie_db) -> None:
    connectivity = FakeConnectivity()
    queue = OfflineSyncQueue(
        MongoPendingRequestStore(), FakeTransport([200, 200]), connectivity
    )
    await queue.start()
    await queue.enqueue("/api/sales", "POST", None, "{}")
    await queue.enqueue("/api/visits", "POST", None, "{}")

    await connectivity.set_online(True)

    assert queue.pending_count == 0
    assert await PendingRequestDocument.count() == 0


@pytest.mark.asyncio
async def test_open_initializes_collection_through_manager(monkeypatch) -> None:
    from mongomock_motor import AsyncMongoMockClient

    import db.manager
    from db.manager import DatabaseManager

    monkeypatch.setattr(db.manager, "AsyncIOMotorClient", AsyncMongoMockClient)
    manager = DatabaseManager("mongodb://localhost:27017", "field_open_test")

    store = await MongoPendingRequestStore.open(manager)
    await store.replace_all([_request("a", "/api/sales", 1)])

    assert [r.id for r in await store.load_all()] == ["a"]
    assert await manager.db["pending_requests"].count_documents({}) == 1


@pytest.mark.asyncio
async def test_store_picks_up_a_database_that_starts_late(monkeypatch) -> None:
    from mongomock_motor import AsyncMongoMockClient
    from pymongo.errors import ServerSelectionTimeoutError

    import db.manager
    from core.exceptions import PersistenceError
    from db.manager import DatabaseManager

    monkeypatch.setattr(db.manager, "AsyncIOMotorClient", AsyncMongoMockClient)
    real_init_beanie = DatabaseManager.init_beanie
    calls = 0

    async def _late_init(self) -> None:
        nonlocal calls
        calls += 1
        if calls == 1:
            msg = "not up yet"
            raise ServerSelectionTimeoutError(msg)
        await real_init_beanie(self)

    monkeypatch.setattr(DatabaseManager, "init_beanie", _late_init)
    store = MongoPendingRequestStore(
        DatabaseManager("mongodb://localhost:27017", "field_late_test")
    )

    with pytest.raises(PersistenceError):
        await store.load_all()
    await store.replace_all([_request("a", "/api/sales", 1)])

    assert [r.id for r in await store.load_all()] == ["a"]
