from datetime import datetime, timezone

import pytest

from catalog_api.infra.snapshot_store import PostgresSnapshotStore


class _Conn:
	def __init__(self, positions, snapshots):
		self._results = [positions, snapshots]

	async def fetch(self, query, *args):
		return self._results.pop(0)


class _Acquire:
	def __init__(self, conn):
		self._conn = conn

	async def __aenter__(self):
		return self._conn

	async def __aexit__(self, exc_type, exc, tb):
		return False


class _Pool:
	def __init__(self, positions, snapshots, collection=None):
		self._conn = _Conn(positions, snapshots)
		self._collection = collection

	def acquire(self):
		return _Acquire(self._conn)

	async def fetchrow(self, query, *args):
		return self._collection


@pytest.mark.asyncio
async def test_list_positions_sanitises_rows():
	positions = [
		{"item_id": "a", "position": 1, "previous": 2},
		{"item_id": "b", "position": None, "previous": None},
	]
	snapshots = [
		{"item_id": "a", "recorded_at": datetime(2025, 7, 29, 12), "position": 3},
		{"item_id": "a", "recorded_at": None, "position": 1},
		{"item_id": "a", "recorded_at": datetime(2025, 7, 30, tzinfo=timezone.utc), "position": "oops"},
		{"item_id": "c", "recorded_at": datetime(2025, 7, 31, tzinfo=timezone.utc), "position": "2"},
	]
	store = PostgresSnapshotStore(_Pool(positions, snapshots))

	histories = {h.item_id: h for h in await store.list_positions("top-sellers")}

	assert set(histories) == {"a", "b", "c"}
	assert histories["a"].position == 1
	assert histories["a"].previous == 2
	assert [s.position for s in histories["a"].snapshots] == [3]
	assert histories["a"].snapshots[0].date.tzinfo is not None
	assert histories["b"].snapshots == ()
	assert histories["c"].position is None
	assert histories["c"].snapshots[0].position == 2


@pytest.mark.asyncio
async def test_get_collection_missing_returns_none():
	store = PostgresSnapshotStore(_Pool([], []))
	assert await store.get_collection("missing") is None


@pytest.mark.asyncio
async def test_get_collection_normalises_timestamp():
	row = {"id": "top-sellers", "name": "Top Sellers", "updated_at": datetime(2025, 8, 3)}
	store = PostgresSnapshotStore(_Pool([], [], collection=row))

	collection = await store.get_collection("top-sellers")

	assert collection.name == "Top Sellers"
	assert collection.updated_at == datetime(2025, 8, 3, tzinfo=timezone.utc)
