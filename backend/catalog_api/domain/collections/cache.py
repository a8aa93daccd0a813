"""Cache-aside wrapper around computed collection pages."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from catalog_api.domain.collections.interfaces import Cache
from catalog_api.domain.collections.models import SortDirection, SortField
from catalog_api.obs import metrics

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

OP_WEEKLY = "collections_week"
OP_CURRENT = "collections_current"


class ArtifactCache:
	"""Pages cached as JSON under keys that capture the full query identity.

	Reads that fail are treated as misses. Writes run as background tasks so a
	slow or failing cache never delays or fails the response; call ``drain`` to
	wait for them (shutdown, tests).
	"""

	def __init__(self, cache: Cache, *, version: str = "v1") -> None:
		self._cache = cache
		self._version = version
		self._pending: set[asyncio.Task] = set()

	def weekly_key(self, slug: str, week: str, region: str, page: int, limit: int) -> str:
		return f"collections:week:{slug}:{week}:{region}:{page}:{limit}:{self._version}"

	def current_key(
		self,
		slug: str,
		region: str,
		page: int,
		limit: int,
		sort_by: SortField,
		sort_dir: SortDirection,
	) -> str:
		return f"collections:{slug}:{region}:{page}:{limit}:{sort_by.value}:{sort_dir.value}:{self._version}"

	async def lookup(self, key: str) -> Optional[str]:
		try:
			raw = await self._cache.get(key)
		except Exception:
			metrics.inc_cache_error("read")
			logger.warning("collections_cache_read_failed", extra={"key": key}, exc_info=True)
			return None
		if not raw:
			return None
		if isinstance(raw, bytes):
			return raw.decode("utf-8")
		return str(raw)

	async def compute_and_populate(
		self,
		key: str,
		*,
		ttl: int,
		compute: Callable[[], Awaitable[M]],
	) -> M:
		value = await compute()
		self._schedule_write(key, value.model_dump_json(), ttl)
		return value

	async def fetch(
		self,
		key: str,
		*,
		operation: str,
		ttl: int,
		schema: type[M],
		compute: Callable[[], Awaitable[M]],
	) -> M:
		"""Return the cached page for ``key`` or compute, store, and return it."""
		cached = await self.lookup(key)
		if cached is not None:
			try:
				value = schema.model_validate_json(cached)
			except ValidationError:
				logger.warning("collections_cache_payload_invalid", extra={"key": key})
			else:
				metrics.inc_cache(operation, "hit")
				return value
		metrics.inc_cache(operation, "miss")
		return await self.compute_and_populate(key, ttl=ttl, compute=compute)

	def _schedule_write(self, key: str, payload: str, ttl: int) -> None:
		task = asyncio.create_task(self._write(key, payload, ttl))
		self._pending.add(task)
		task.add_done_callback(self._pending.discard)

	async def _write(self, key: str, payload: str, ttl: int) -> None:
		try:
			await self._cache.set(key, payload, ttl)
		except Exception:
			metrics.inc_cache_error("write")
			logger.warning("collections_cache_write_failed", extra={"key": key}, exc_info=True)

	async def drain(self) -> None:
		"""Wait for in-flight cache writes."""
		if self._pending:
			await asyncio.gather(*list(self._pending))
