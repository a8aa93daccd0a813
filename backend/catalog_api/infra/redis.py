"""Redis connection management and the page cache adapter."""

from __future__ import annotations

from typing import Optional

import redis.asyncio as redis

from catalog_api.settings import Settings


def create_client(config: Settings) -> redis.Redis:
	return redis.from_url(config.redis_url, decode_responses=True)


class RedisCache:
	"""``Cache`` over a redis.asyncio client (real or fakeredis)."""

	def __init__(self, client: redis.Redis):
		self._client = client

	async def get(self, key: str) -> Optional[str]:
		value = await self._client.get(key)
		if isinstance(value, bytes):
			return value.decode("utf-8")
		return value

	async def set(self, key: str, value: str, ttl_seconds: int) -> None:
		await self._client.set(key, value, ex=ttl_seconds)

	async def aclose(self) -> None:
		await self._client.aclose()
