"""PostgreSQL-backed snapshot store for collections."""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime
from typing import Any, Optional

import asyncpg

from catalog_api.domain.collections.models import Collection, ItemPositionHistory, Snapshot, ensure_utc
from catalog_api.obs import metrics

logger = logging.getLogger(__name__)


def _as_int(value: Any) -> Optional[int]:
	if value is None or isinstance(value, bool):
		return None
	try:
		return int(value)
	except (TypeError, ValueError):
		return None


def _row_to_snapshot(row: asyncpg.Record) -> Optional[Snapshot]:
	"""Snapshot for a stored row, or None when the row is malformed."""
	recorded_at = row["recorded_at"]
	position = _as_int(row["position"])
	if not isinstance(recorded_at, datetime) or position is None:
		return None
	return Snapshot(date=ensure_utc(recorded_at), position=position)


class PostgresSnapshotStore:
	"""Reads collections and their position history using asyncpg."""

	def __init__(self, pool: asyncpg.Pool) -> None:
		self._pool = pool

	async def get_collection(self, slug: str) -> Optional[Collection]:
		row = await self._pool.fetchrow(
			"SELECT id, name, updated_at FROM collections WHERE id = $1",
			slug,
		)
		if row is None:
			return None
		return Collection(id=str(row["id"]), name=str(row["name"] or ""), updated_at=ensure_utc(row["updated_at"]))

	async def list_positions(self, collection_id: str) -> list[ItemPositionHistory]:
		async with self._pool.acquire() as conn:
			position_rows = await conn.fetch(
				"""
				SELECT item_id, position, previous
				FROM collection_positions
				WHERE collection_id = $1
				""",
				collection_id,
			)
			snapshot_rows = await conn.fetch(
				"""
				SELECT item_id, recorded_at, position
				FROM collection_position_snapshots
				WHERE collection_id = $1
				ORDER BY item_id, recorded_at
				""",
				collection_id,
			)

		snapshots: dict[str, list[Snapshot]] = defaultdict(list)
		malformed = 0
		for row in snapshot_rows:
			snapshot = _row_to_snapshot(row)
			if snapshot is None:
				malformed += 1
				continue
			snapshots[str(row["item_id"])].append(snapshot)
		if malformed:
			metrics.inc_rows_dropped("malformed_snapshot", malformed)
			logger.warning(
				"collections_snapshots_malformed",
				extra={"collection_id": collection_id, "count": malformed},
			)

		histories: list[ItemPositionHistory] = []
		seen: set[str] = set()
		for row in position_rows:
			item_id = str(row["item_id"])
			seen.add(item_id)
			histories.append(
				ItemPositionHistory(
					item_id=item_id,
					position=_as_int(row["position"]),
					previous=_as_int(row["previous"]),
					snapshots=tuple(sorted(snapshots.get(item_id, ()), key=lambda s: s.date)),
				)
			)
		# items with history but no current position row still rank in past weeks
		for item_id, item_snapshots in snapshots.items():
			if item_id not in seen:
				histories.append(
					ItemPositionHistory(item_id=item_id, snapshots=tuple(sorted(item_snapshots, key=lambda s: s.date)))
				)
		return histories
