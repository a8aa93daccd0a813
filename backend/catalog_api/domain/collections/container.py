"""Explicit wiring of the collections engine and its collaborators."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional

import httpx

from catalog_api.domain.collections.artifacts import RenderArtifactRegistry
from catalog_api.domain.collections.assembler import PageAssembler
from catalog_api.domain.collections.cache import ArtifactCache
from catalog_api.domain.collections.interfaces import (
	ArtifactRegistry,
	Cache,
	CatalogService,
	ImageRenderer,
	ImageStore,
	PriceService,
	SnapshotStore,
)
from catalog_api.domain.collections.service import CollectionService
from catalog_api.infra import postgres
from catalog_api.infra.artifact_registry import PostgresArtifactRegistry
from catalog_api.infra.catalog import PostgresCatalogService, PostgresPriceService
from catalog_api.infra.image_store import HttpImageStore
from catalog_api.infra.redis import RedisCache, create_client
from catalog_api.infra.renderer import PillowRenderer
from catalog_api.infra.snapshot_store import PostgresSnapshotStore
from catalog_api.settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class CollectionsContainer:
	"""Holds the service plus the resources that must be closed on shutdown."""

	service: CollectionService
	cache: ArtifactCache
	_closers: List[Callable[[], Awaitable[Any]]] = field(default_factory=list)

	@classmethod
	def build(
		cls,
		config: Settings,
		*,
		store: SnapshotStore,
		catalog: CatalogService,
		prices: PriceService,
		cache: Cache,
		registry: ArtifactRegistry,
		renderer: ImageRenderer,
		image_store: ImageStore,
	) -> "CollectionsContainer":
		"""Assemble the engine from already constructed collaborators (tests, scripts)."""
		page_cache = ArtifactCache(cache, version=config.collections_cache_version)
		fonts = (config.artifact_font_path,) if config.artifact_font_path else ()
		artifacts = RenderArtifactRegistry(
			registry,
			renderer,
			image_store,
			url_template=config.artifact_url_template,
			dimensions=(config.artifact_width, config.artifact_height),
			fonts=fonts,
		)
		service = CollectionService(
			store=store,
			assembler=PageAssembler(catalog, prices, timeout_seconds=config.collaborator_timeout_seconds),
			cache=page_cache,
			artifacts=artifacts,
			config=config,
		)
		return cls(service=service, cache=page_cache)

	@classmethod
	async def create(cls, config: Settings, *, http: Optional[httpx.AsyncClient] = None) -> "CollectionsContainer":
		"""Open the Postgres pool, Redis client and HTTP client and wire the engine."""
		pool = await postgres.init_pool(config)
		redis_cache: Optional[RedisCache] = None
		owns_http = http is None
		try:
			redis_cache = RedisCache(create_client(config))
			http = http or httpx.AsyncClient(timeout=config.image_store_timeout_seconds)
			container = cls.build(
				config,
				store=PostgresSnapshotStore(pool),
				catalog=PostgresCatalogService(pool),
				prices=PostgresPriceService(pool),
				cache=redis_cache,
				registry=PostgresArtifactRegistry(pool),
				renderer=PillowRenderer(),
				image_store=HttpImageStore(
					http=http,
					upload_url=config.image_store_url,
					token=config.image_store_token,
					request_timeout=config.image_store_timeout_seconds,
				),
			)
		except Exception:
			logger.error("collections_container_create_failed", exc_info=True)
			if owns_http and http is not None:
				await http.aclose()
			if redis_cache is not None:
				await redis_cache.aclose()
			await postgres.close_pool()
			raise
		container._closers.append(redis_cache.aclose)
		if owns_http:
			container._closers.append(http.aclose)
		container._closers.append(postgres.close_pool)
		logger.info("collections_container_ready", extra={"environment": config.environment})
		return container

	async def aclose(self) -> None:
		"""Drain pending cache writes, then release every owned resource."""
		await self.cache.drain()
		for close in self._closers:
			try:
				await close()
			except Exception:
				logger.warning("collections_container_close_failed", exc_info=True)
		self._closers.clear()
