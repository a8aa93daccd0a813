"""AsyncPG pool management for the catalog API."""

from __future__ import annotations

from typing import Optional

import asyncpg

from catalog_api.settings import Settings, settings as default_settings

_pool: Optional[asyncpg.pool.Pool] = None


async def init_pool(config: Optional[Settings] = None) -> asyncpg.pool.Pool:
	global _pool
	if _pool is None:
		config = config or default_settings
		_pool = await asyncpg.create_pool(
			dsn=config.postgres_url,
			min_size=config.postgres_min_pool_size,
			max_size=config.postgres_max_pool_size,
		)
	return _pool


async def close_pool() -> None:
	global _pool
	if _pool is not None:
		await _pool.close()
		_pool = None
