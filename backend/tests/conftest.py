import asyncio
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from fakeredis.aioredis import FakeRedis

# Ensure backend package is importable when tests run from repo root
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
	sys.path.insert(0, str(BACKEND_ROOT))

from catalog_api.domain.collections.container import CollectionsContainer
from catalog_api.domain.collections.models import Collection, ItemPositionHistory, PriceRecord, Snapshot
from catalog_api.infra.redis import RedisCache
from catalog_api.main import create_app
from catalog_api.settings import Settings


def utc(year: int, month: int, day: int, hour: int = 0) -> datetime:
	return datetime(year, month, day, hour, tzinfo=timezone.utc)


def history(item_id: str, *snapshots: tuple[datetime, int], position=None, previous=None) -> ItemPositionHistory:
	return ItemPositionHistory(
		item_id=item_id,
		position=position,
		previous=previous,
		snapshots=tuple(Snapshot(date=date, position=pos) for date, pos in snapshots),
	)


class FakeSnapshotStore:
	def __init__(self) -> None:
		self.collections: dict[str, Collection] = {}
		self.histories: dict[str, list[ItemPositionHistory]] = {}
		self.calls = 0

	async def get_collection(self, slug: str) -> Optional[Collection]:
		self.calls += 1
		return self.collections.get(slug)

	async def list_positions(self, collection_id: str) -> list[ItemPositionHistory]:
		self.calls += 1
		return list(self.histories.get(collection_id, []))


class FakeCatalog:
	def __init__(self) -> None:
		self.offers: dict[str, dict[str, Any]] = {}
		self.delay: float = 0.0
		self.error: Optional[Exception] = None
		self.requested: list[list[str]] = []

	async def get_by_ids(self, ids: Sequence[str]) -> list[Mapping[str, Any]]:
		self.requested.append(list(ids))
		if self.delay:
			await asyncio.sleep(self.delay)
		if self.error is not None:
			raise self.error
		return [self.offers[item_id] for item_id in ids if item_id in self.offers]


class FakePrices:
	def __init__(self) -> None:
		self.prices: dict[tuple[str, str], PriceRecord] = {}
		self.error: Optional[Exception] = None

	async def get_by_ids(self, ids: Sequence[str], region: str) -> list[PriceRecord]:
		if self.error is not None:
			raise self.error
		return [self.prices[(item_id, region)] for item_id in ids if (item_id, region) in self.prices]


class FakeRegistry:
	def __init__(self) -> None:
		self.entries: dict[str, str] = {}
		self.error: Optional[Exception] = None

	async def find_by_hash(self, content_hash: str) -> Optional[str]:
		if self.error is not None:
			raise self.error
		return self.entries.get(content_hash)

	async def upsert(self, content_hash: str, image_id: str) -> None:
		self.entries[content_hash] = image_id


class FakeImageStore:
	def __init__(self) -> None:
		self.uploads: list[str] = []
		self.error: Optional[Exception] = None

	async def upload(self, data: bytes, filename: str) -> str:
		if self.error is not None:
			raise self.error
		self.uploads.append(filename)
		return f"img-{len(self.uploads)}"


class FakeRenderer:
	def __init__(self) -> None:
		self.layouts: list[Any] = []

	def render(self, layout, dimensions, fonts) -> bytes:
		self.layouts.append(layout)
		return b"\x89PNG\r\n\x1a\n" + layout.title.encode("utf-8")


class FailingCache:
	"""Cache whose reads and writes always raise."""

	def __init__(self) -> None:
		self.reads = 0
		self.writes = 0

	async def get(self, key: str) -> Optional[str]:
		self.reads += 1
		raise ConnectionError("redis down")

	async def set(self, key: str, value: str, ttl_seconds: int) -> None:
		self.writes += 1
		raise ConnectionError("redis down")


def price(offer_id: str, original: int, discounted: int, currency: str = "USD") -> PriceRecord:
	return PriceRecord(
		offer_id=offer_id,
		original_price=original,
		discount_price=discounted,
		discount=original - discounted,
		currency_code=currency,
	)


def seed_top_sellers(store: FakeSnapshotStore, catalog: FakeCatalog, prices: FakePrices) -> None:
	"""Top sellers with activity around 2025W31 (2025-07-28 to 2025-08-04)."""
	store.collections["top-sellers"] = Collection(
		id="top-sellers", name="Top Sellers", updated_at=utc(2025, 8, 3, 12)
	)
	store.histories["top-sellers"] = [
		history("a", (utc(2025, 7, 29), 3), (utc(2025, 8, 1), 1), position=1, previous=2),
		history("b", (utc(2025, 7, 30), 2), position=2, previous=1),
		history("c", (utc(2025, 7, 28), 5), (utc(2025, 8, 4), 1), position=3),
		history("d", (utc(2025, 7, 31), 0), position=0, previous=6),
		history("e", (utc(2025, 7, 20), 1)),
		history("f", (utc(2025, 8, 2), 4), position=4, previous=3),
	]
	for item_id in "abcdef":
		catalog.offers[item_id] = {
			"id": item_id,
			"title": f"Game {item_id.upper()}",
			"seller": {"name": "Studio"},
		}
		prices.prices[(item_id, "US")] = price(item_id, 2999, 1999)
	prices.prices[("a", "GB")] = price("a", 2499, 2499, "GBP")


@pytest.fixture
def test_settings() -> Settings:
	config = Settings()
	config.collections_cache_version = "test"
	config.artifact_font_path = None
	return config


@pytest_asyncio.fixture
async def fake_redis():
	client = FakeRedis(decode_responses=True)
	try:
		yield client
	finally:
		await client.flushall()


@pytest.fixture
def store() -> FakeSnapshotStore:
	return FakeSnapshotStore()


@pytest.fixture
def catalog() -> FakeCatalog:
	return FakeCatalog()


@pytest.fixture
def prices() -> FakePrices:
	return FakePrices()


@pytest.fixture
def registry() -> FakeRegistry:
	return FakeRegistry()


@pytest.fixture
def image_store() -> FakeImageStore:
	return FakeImageStore()


@pytest.fixture
def renderer() -> FakeRenderer:
	return FakeRenderer()


@pytest.fixture
def failing_cache() -> FailingCache:
	return FailingCache()


@pytest.fixture
def seeded(store, catalog, prices):
	seed_top_sellers(store, catalog, prices)
	return store


@pytest.fixture
def container(test_settings, fake_redis, store, catalog, prices, registry, image_store, renderer) -> CollectionsContainer:
	return CollectionsContainer.build(
		test_settings,
		store=store,
		catalog=catalog,
		prices=prices,
		cache=RedisCache(fake_redis),
		registry=registry,
		renderer=renderer,
		image_store=image_store,
	)


@pytest.fixture
def service(container):
	return container.service


@pytest_asyncio.fixture
async def api_client(test_settings, container):
	app = create_app(test_settings, container=container)
	transport = ASGITransport(app=app)
	async with AsyncClient(transport=transport, base_url="http://testserver") as client:
		yield client
	await container.cache.drain()
