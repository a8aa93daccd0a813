"""PostgreSQL-backed registry of rendered leaderboard images."""

from __future__ import annotations

from typing import Optional

import asyncpg


class PostgresArtifactRegistry:
	"""Maps content hashes to uploaded image ids. Upserts are last-writer-wins."""

	def __init__(self, pool: asyncpg.Pool) -> None:
		self._pool = pool

	async def find_by_hash(self, content_hash: str) -> Optional[str]:
		image_id = await self._pool.fetchval(
			"SELECT image_id FROM leaderboard_artifacts WHERE content_hash = $1",
			content_hash,
		)
		return str(image_id) if image_id is not None else None

	async def upsert(self, content_hash: str, image_id: str) -> None:
		await self._pool.execute(
			"""
			INSERT INTO leaderboard_artifacts (content_hash, image_id, created_at, updated_at)
			VALUES ($1, $2, NOW(), NOW())
			ON CONFLICT (content_hash)
			DO UPDATE SET image_id = EXCLUDED.image_id, updated_at = NOW()
			""",
			content_hash,
			image_id,
		)
