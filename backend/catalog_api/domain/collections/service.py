"""Service layer for collection leaderboards."""

from __future__ import annotations

import logging
from typing import List, Optional, Union

from catalog_api.domain.collections import ranking, regions, weeks
from catalog_api.domain.collections.artifacts import RenderArtifactRegistry
from catalog_api.domain.collections.assembler import PageAssembler, clamp_paging
from catalog_api.domain.collections.cache import OP_CURRENT, OP_WEEKLY, ArtifactCache
from catalog_api.domain.collections.exceptions import CollectionNotFound, RegionNotFound, UpstreamUnavailable
from catalog_api.domain.collections.interfaces import SnapshotStore
from catalog_api.domain.collections.layout import build_layout
from catalog_api.domain.collections.models import (
	Collection,
	ItemPositionHistory,
	RenderArtifact,
	SortDirection,
	SortField,
	Window,
)
from catalog_api.domain.collections.schemas import CollectionPageSchema
from catalog_api.settings import Settings

logger = logging.getLogger(__name__)


class CollectionService:
	"""Coordinates week resolution, ranking, page assembly, caching and artifacts."""

	def __init__(
		self,
		*,
		store: SnapshotStore,
		assembler: PageAssembler,
		cache: ArtifactCache,
		artifacts: RenderArtifactRegistry,
		config: Settings,
	) -> None:
		self._store = store
		self._assembler = assembler
		self._cache = cache
		self._artifacts = artifacts
		self._config = config

	def resolve_region(self, country: Optional[str], cookie_country: Optional[str] = None) -> str:
		return regions.resolve_region(country, cookie_country, default_country=self._config.default_country)

	def _paging(self, page: Optional[int], limit: Optional[int]) -> tuple[int, int]:
		return clamp_paging(
			page,
			limit,
			default_limit=self._config.collections_default_limit,
			max_limit=self._config.collections_max_limit,
		)

	async def _load(self, slug: str) -> tuple[Collection, List[ItemPositionHistory]]:
		try:
			collection = await self._store.get_collection(slug)
		except Exception as exc:
			logger.error("collections_store_failed", extra={"slug": slug}, exc_info=True)
			raise UpstreamUnavailable("snapshot_store") from exc
		if collection is None:
			raise CollectionNotFound()
		try:
			histories = await self._store.list_positions(collection.id)
		except Exception as exc:
			logger.error("collections_store_failed", extra={"slug": slug}, exc_info=True)
			raise UpstreamUnavailable("snapshot_store") from exc
		return collection, histories

	async def _compute_weekly(
		self,
		slug: str,
		window: Window,
		region: str,
		page: int,
		limit: int,
	) -> CollectionPageSchema:
		collection, histories = await self._load(slug)
		ranked = ranking.rank_window(histories, window)
		result, _ = await self._assembler.assemble(
			collection, ranked, page=page, limit=limit, region=region, window=window
		)
		logger.info(
			"collections_week_computed",
			extra={"slug": slug, "week": window.week, "region": region, "total": result.total, "rows": len(result.elements)},
		)
		return result

	async def get_weekly_leaderboard(
		self,
		slug: str,
		week: str,
		region: str,
		page: Optional[int] = None,
		limit: Optional[int] = None,
	) -> CollectionPageSchema:
		"""Leaderboard of ``slug`` for an ISO week, one page at a time."""
		window = weeks.resolve_week(week)
		if not regions.is_region(region):
			raise RegionNotFound()
		page, limit = self._paging(page, limit)
		key = self._cache.weekly_key(slug, window.week, region, page, limit)

		async def _compute() -> CollectionPageSchema:
			return await self._compute_weekly(slug, window, region, page, limit)

		return await self._cache.fetch(
			key,
			operation=OP_WEEKLY,
			ttl=self._config.collections_page_ttl_seconds,
			schema=CollectionPageSchema,
			compute=_compute,
		)

	async def get_collection_page(
		self,
		slug: str,
		region: str,
		page: Optional[int] = None,
		limit: Optional[int] = None,
		sort_by: SortField = SortField.POSITION,
		sort_dir: SortDirection = SortDirection.ASC,
	) -> CollectionPageSchema:
		"""Collection ranked by each item's current position."""
		if not regions.is_region(region):
			raise RegionNotFound()
		page, limit = self._paging(page, limit)
		key = self._cache.current_key(slug, region, page, limit, sort_by, sort_dir)

		async def _compute() -> CollectionPageSchema:
			collection, histories = await self._load(slug)
			ranked = ranking.rank_current(histories, sort_by=sort_by, sort_dir=sort_dir)
			result, _ = await self._assembler.assemble(
				collection, ranked, page=page, limit=limit, region=region, require_price=False
			)
			return result

		return await self._cache.fetch(
			key,
			operation=OP_CURRENT,
			ttl=self._config.collections_page_ttl_seconds,
			schema=CollectionPageSchema,
			compute=_compute,
		)

	async def get_leaderboard_artifact(
		self,
		slug: str,
		week: str,
		region: str,
		*,
		force_render: bool = False,
		want_raw_bytes: bool = False,
	) -> Union[RenderArtifact, bytes]:
		"""Image of the top of the weekly leaderboard, reused when its content is unchanged."""
		window = weeks.resolve_week(week)
		if not regions.is_region(region):
			raise RegionNotFound()
		collection, histories = await self._load(slug)
		ranked = ranking.rank_window(histories, window)
		_, rows = await self._assembler.assemble(
			collection,
			ranked,
			page=1,
			limit=self._config.artifact_top_n,
			region=region,
			window=window,
		)
		layout = build_layout(
			rows,
			collection_title=collection.name,
			window=window,
			region=region,
			site_title=self._config.artifact_site_title,
		)
		return await self._artifacts.resolve(
			week=window.week,
			region=region,
			rows=rows,
			layout=layout,
			force_render=force_render,
			want_raw_bytes=want_raw_bytes,
		)
