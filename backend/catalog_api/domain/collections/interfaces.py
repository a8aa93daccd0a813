"""Collaborator interfaces consumed by the collections engine."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from catalog_api.domain.collections.models import Collection, ItemPositionHistory, PriceRecord


class SnapshotStore(Protocol):
	"""Read access to collections and the recorded positions of their items."""

	async def get_collection(self, slug: str) -> Optional[Collection]:
		...

	async def list_positions(self, collection_id: str) -> list[ItemPositionHistory]:
		...


class CatalogService(Protocol):
	async def get_by_ids(self, ids: Sequence[str]) -> list[Mapping[str, Any]]:
		...


class PriceService(Protocol):
	async def get_by_ids(self, ids: Sequence[str], region: str) -> list[PriceRecord]:
		...


class Cache(Protocol):
	async def get(self, key: str) -> Optional[str]:
		...

	async def set(self, key: str, value: str, ttl_seconds: int) -> None:
		...


class ImageRenderer(Protocol):
	def render(self, layout: Any, dimensions: tuple[int, int], fonts: Sequence[str]) -> bytes:
		...


class ImageStore(Protocol):
	async def upload(self, data: bytes, filename: str) -> str:
		"""Store ``data`` and return the external image id."""
		...


class ArtifactRegistry(Protocol):
	async def find_by_hash(self, content_hash: str) -> Optional[str]:
		...

	async def upsert(self, content_hash: str, image_id: str) -> None:
		...
