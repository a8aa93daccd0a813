"""Joins ranked entries with catalog metadata and prices into response pages."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, List, Mapping, Optional, Sequence, TypeVar

from catalog_api.domain.collections.exceptions import PartialDataMissing
from catalog_api.domain.collections.interfaces import CatalogService, PriceService
from catalog_api.domain.collections.models import CatalogRow, Collection, PriceRecord, RankedEntry, Window
from catalog_api.domain.collections.ranking import paginate
from catalog_api.domain.collections.schemas import (
	CollectionPageSchema,
	PageElementSchema,
	PriceSchema,
	RankedEntrySchema,
	SnapshotSchema,
)
from catalog_api.obs import metrics

logger = logging.getLogger(__name__)

T = TypeVar("T")


def clamp_paging(page: Optional[int], limit: Optional[int], *, default_limit: int = 10, max_limit: int = 50) -> tuple[int, int]:
	"""Normalise user supplied paging: page >= 1, 1 <= limit <= max_limit."""
	page = max(page or 1, 1)
	limit = default_limit if limit is None else limit
	limit = max(1, min(limit, max_limit))
	return page, limit


def _price_schema(price: PriceRecord) -> PriceSchema:
	return PriceSchema(
		original_price=price.original_price,
		discount_price=price.discount_price,
		discount=price.discount,
		currency_code=price.currency_code,
	)


def _entry_schema(entry: RankedEntry) -> RankedEntrySchema:
	return RankedEntrySchema(
		item_id=entry.item_id,
		position=entry.position,
		previous=entry.previous,
		positions=[SnapshotSchema(date=s.date, position=s.position) for s in entry.snapshots_in_window],
	)


def element_for_row(row: CatalogRow) -> PageElementSchema:
	payload: dict[str, Any] = dict(row.offer)
	payload.update(
		id=row.entry.item_id,
		title=row.title,
		position=row.entry.position,
		previous_position=row.entry.previous,
		price=_price_schema(row.price) if row.price is not None else None,
		metadata=_entry_schema(row.entry),
	)
	return PageElementSchema(**payload)


class PageAssembler:
	"""Slices a ranking, fetches metadata and prices in batch, and builds the page."""

	def __init__(
		self,
		catalog: CatalogService,
		prices: PriceService,
		*,
		timeout_seconds: float = 5.0,
	) -> None:
		self._catalog = catalog
		self._prices = prices
		self._timeout = timeout_seconds

	async def _guarded(self, collaborator: str, call: Awaitable[List[T]]) -> List[T]:
		"""Run a batch lookup; a timeout or failure yields an empty result."""
		try:
			return await asyncio.wait_for(call, timeout=self._timeout)
		except asyncio.TimeoutError:
			metrics.inc_collaborator_failure(collaborator, "timeout")
			logger.warning(
				"collections_lookup_timeout",
				extra={"collaborator": collaborator, "timeout_s": self._timeout},
			)
		except Exception as exc:
			metrics.inc_collaborator_failure(collaborator, "error")
			logger.warning(
				"collections_lookup_failed",
				extra={"collaborator": collaborator, "error": str(exc)},
			)
		return []

	async def join(
		self,
		entries: Sequence[RankedEntry],
		region: str,
		*,
		require_price: bool = True,
	) -> List[CatalogRow]:
		"""Attach metadata and price to each entry.

		Rows without metadata are always dropped. Rows without a price are dropped
		unless ``require_price`` is false, in which case they keep ``price=None``.
		"""
		if not entries:
			return []
		ids = [entry.item_id for entry in entries]
		offers, prices = await asyncio.gather(
			self._guarded("catalog", self._catalog.get_by_ids(ids)),
			self._guarded("price", self._prices.get_by_ids(ids, region)),
		)
		offers_by_id: dict[str, Mapping[str, Any]] = {str(offer.get("id")): offer for offer in offers}
		prices_by_id: dict[str, PriceRecord] = {price.offer_id: price for price in prices}

		rows: List[CatalogRow] = []
		for entry in entries:
			try:
				rows.append(self._join_row(entry, offers_by_id, prices_by_id, require_price))
			except PartialDataMissing as exc:
				metrics.inc_rows_dropped(exc.missing)
				logger.warning(
					"collections_row_dropped",
					extra={"item_id": exc.item_id, "missing": exc.missing, "region": region},
				)
		return rows

	@staticmethod
	def _join_row(
		entry: RankedEntry,
		offers_by_id: Mapping[str, Mapping[str, Any]],
		prices_by_id: Mapping[str, PriceRecord],
		require_price: bool = True,
	) -> CatalogRow:
		offer = offers_by_id.get(entry.item_id)
		if offer is None:
			raise PartialDataMissing(entry.item_id, "metadata")
		price = prices_by_id.get(entry.item_id)
		if price is None and require_price:
			raise PartialDataMissing(entry.item_id, "price")
		return CatalogRow(entry=entry, offer=offer, price=price)

	async def assemble(
		self,
		collection: Collection,
		ranking: Sequence[RankedEntry],
		*,
		page: int,
		limit: int,
		region: str,
		window: Optional[Window] = None,
		require_price: bool = True,
	) -> tuple[CollectionPageSchema, List[CatalogRow]]:
		"""Build one page of ``ranking``. ``total`` counts the full ranking."""
		rows = await self.join(paginate(ranking, page=page, limit=limit), region, require_price=require_price)
		result = CollectionPageSchema(
			elements=[element_for_row(row) for row in rows],
			page=page,
			limit=limit,
			total=len(ranking),
			title=collection.name,
			updated_at=collection.updated_at,
			start=window.start if window else None,
			end=window.end if window else None,
		)
		return result, rows
