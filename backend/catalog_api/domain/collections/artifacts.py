"""Content-addressed registry of rendered leaderboard images.

A rendered image is identified by a SHA-256 over exactly the fields that change
what the image shows (week, region, the header title and per-row id, title,
position and prices). Requests whose content hashes the same reuse the stored
image instead of rendering and uploading again.
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
from typing import Any, Awaitable, Sequence, TypeVar, Union

from catalog_api.domain.collections.exceptions import UpstreamUnavailable
from catalog_api.domain.collections.interfaces import ArtifactRegistry, ImageRenderer, ImageStore
from catalog_api.domain.collections.layout import LeaderboardLayout
from catalog_api.domain.collections.models import CatalogRow, RenderArtifact
from catalog_api.obs import metrics

logger = logging.getLogger(__name__)

T = TypeVar("T")


def content_hash(week: str, region: str, rows: Sequence[CatalogRow], *, title: str = "") -> str:
	"""Deterministic hex digest of the visible content of a leaderboard image."""
	payload: dict[str, Any] = {
		"week": week,
		"region": region,
		"header": title,
		"items": [
			{
				"id": row.entry.item_id,
				"title": row.title,
				"pos": row.entry.position,
				"dp": row.price.discount_price,
				"op": row.price.original_price,
				"d": row.price.discount,
			}
			for row in rows
		],
	}
	canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
	return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


class RenderArtifactRegistry:
	"""Render-and-upload guarded by a hash lookup.

	``Unresolved -> hit -> done`` or ``miss -> render -> upload -> registry write -> done``.
	Render or upload failures raise ``UpstreamUnavailable`` and leave the registry
	untouched.
	"""

	def __init__(
		self,
		registry: ArtifactRegistry,
		renderer: ImageRenderer,
		store: ImageStore,
		*,
		url_template: str,
		dimensions: tuple[int, int] = (1200, 630),
		fonts: Sequence[str] = (),
	) -> None:
		self._registry = registry
		self._renderer = renderer
		self._store = store
		self._url_template = url_template
		self._dimensions = dimensions
		self._fonts = tuple(fonts)

	def url_for(self, image_id: str) -> str:
		return self._url_template.format(image_id=image_id)

	async def render(self, layout: LeaderboardLayout) -> bytes:
		try:
			return await asyncio.to_thread(self._renderer.render, layout, self._dimensions, self._fonts)
		except Exception as exc:
			metrics.inc_artifact("render_failed")
			logger.error("leaderboard_render_failed", exc_info=True)
			raise UpstreamUnavailable("renderer", "render_failed") from exc

	async def _registry_call(self, action: str, call: Awaitable[T]) -> T:
		try:
			return await call
		except Exception as exc:
			metrics.inc_artifact(f"registry_{action}_failed")
			logger.error("leaderboard_registry_failed", extra={"action": action}, exc_info=True)
			raise UpstreamUnavailable("artifact_registry", f"registry_{action}_failed") from exc

	async def resolve(
		self,
		*,
		week: str,
		region: str,
		rows: Sequence[CatalogRow],
		layout: LeaderboardLayout,
		force_render: bool = False,
		want_raw_bytes: bool = False,
	) -> Union[RenderArtifact, bytes]:
		"""Return the stored artifact for this content, or render (and upload) it."""
		if want_raw_bytes:
			metrics.inc_artifact("raw")
			return await self.render(layout)

		digest = content_hash(week, region, rows, title=layout.title)
		if not force_render:
			existing = await self._registry_call("find", self._registry.find_by_hash(digest))
			if existing:
				metrics.inc_artifact("hit")
				return RenderArtifact(content_hash=digest, image_id=existing, url=self.url_for(existing))

		png = await self.render(layout)
		try:
			image_id = await self._store.upload(png, f"tops-og/{digest}.png")
		except UpstreamUnavailable:
			metrics.inc_artifact("upload_failed")
			raise
		except Exception as exc:
			metrics.inc_artifact("upload_failed")
			logger.error("leaderboard_upload_failed", extra={"content_hash": digest}, exc_info=True)
			raise UpstreamUnavailable("image_store", "upload_failed") from exc

		await self._registry_call("upsert", self._registry.upsert(digest, image_id))
		metrics.inc_artifact("rendered")
		logger.info("leaderboard_artifact_stored", extra={"content_hash": digest, "image_id": image_id})
		return RenderArtifact(content_hash=digest, image_id=image_id, url=self.url_for(image_id))
