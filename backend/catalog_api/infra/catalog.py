"""PostgreSQL-backed catalog metadata and regional price lookups."""

from __future__ import annotations

import json
from typing import Any, Mapping, Sequence

import asyncpg

from catalog_api.domain.collections.models import PriceRecord


def _row_to_offer(row: asyncpg.Record) -> dict[str, Any]:
	data = row["data"]
	if isinstance(data, str):
		data = json.loads(data)
	offer: dict[str, Any] = dict(data or {})
	offer["id"] = str(row["id"])
	offer["title"] = row["title"]
	return offer


def _row_to_price(row: asyncpg.Record) -> PriceRecord:
	return PriceRecord(
		offer_id=str(row["offer_id"]),
		original_price=row["original_price"],
		discount_price=row["discount_price"],
		discount=row["discount"],
		currency_code=str(row["currency_code"] or "USD"),
	)


class PostgresCatalogService:
	"""Batch offer metadata lookup."""

	def __init__(self, pool: asyncpg.Pool) -> None:
		self._pool = pool

	async def get_by_ids(self, ids: Sequence[str]) -> list[Mapping[str, Any]]:
		if not ids:
			return []
		rows = await self._pool.fetch(
			"SELECT id, title, data FROM offers WHERE id = ANY($1::text[])",
			list(ids),
		)
		return [_row_to_offer(row) for row in rows]


class PostgresPriceService:
	"""Batch price lookup for one pricing region."""

	def __init__(self, pool: asyncpg.Pool) -> None:
		self._pool = pool

	async def get_by_ids(self, ids: Sequence[str], region: str) -> list[PriceRecord]:
		if not ids:
			return []
		rows = await self._pool.fetch(
			"""
			SELECT offer_id, original_price, discount_price, discount, currency_code
			FROM offer_prices
			WHERE offer_id = ANY($1::text[]) AND region = $2
			""",
			list(ids),
			region,
		)
		return [_row_to_price(row) for row in rows]
