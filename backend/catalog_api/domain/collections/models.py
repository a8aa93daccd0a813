"""Domain models for collection leaderboards."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, Optional


class SortField(str, Enum):
	"""Fields the current (non-windowed) collection page can be sorted by."""

	POSITION = "position"
	PREVIOUS = "previous"


class SortDirection(str, Enum):
	ASC = "asc"
	DESC = "desc"


@dataclass(slots=True, frozen=True)
class Collection:
	"""A curated list of catalog items (e.g. top sellers)."""

	id: str
	name: str
	updated_at: datetime


@dataclass(slots=True, frozen=True)
class Snapshot:
	"""One recorded position of an item at an instant. ``position <= 0`` means unranked."""

	date: datetime
	position: int

	@property
	def ranked(self) -> bool:
		return self.position > 0


@dataclass(slots=True, frozen=True)
class ItemPositionHistory:
	"""An item's current position plus every snapshot recorded for it, oldest first."""

	item_id: str
	position: Optional[int] = None
	previous: Optional[int] = None
	snapshots: tuple[Snapshot, ...] = ()


@dataclass(slots=True, frozen=True)
class Window:
	"""Half-open UTC interval ``[start, end)`` covering one ISO week."""

	week: str
	start: datetime
	end: datetime

	def contains(self, instant: datetime) -> bool:
		return self.start <= instant < self.end


@dataclass(slots=True, frozen=True)
class RankedEntry:
	"""An item and its derived position. Computed per request, never stored."""

	item_id: str
	position: int
	snapshots_in_window: tuple[Snapshot, ...] = ()
	previous: Optional[int] = None


@dataclass(slots=True, frozen=True)
class PriceRecord:
	"""Regional price of an offer, amounts in minor currency units."""

	offer_id: str
	original_price: Optional[int]
	discount_price: Optional[int]
	discount: Optional[int]
	currency_code: str = "USD"

	@property
	def discount_percent(self) -> Optional[int]:
		"""Whole percent off, or None when there is no effective discount."""
		op = self.original_price
		dp = self.discount_price
		if not op or dp is None or op == dp:
			return None
		return round((op - dp) / op * 100)


@dataclass(slots=True, frozen=True)
class RenderArtifact:
	"""A rendered leaderboard image, keyed by a hash of the ranked content."""

	content_hash: str
	image_id: str
	url: str


@dataclass(slots=True)
class CatalogRow:
	"""Ranked entry joined with its catalog metadata and regional price, if any."""

	entry: RankedEntry
	offer: Mapping[str, Any]
	price: Optional[PriceRecord]

	@property
	def title(self) -> str:
		return str(self.offer.get("title") or "")


def ensure_utc(value: datetime) -> datetime:
	"""Treat naive datetimes as UTC and convert aware ones to UTC."""
	if value.tzinfo is None:
		return value.replace(tzinfo=timezone.utc)
	return value.astimezone(timezone.utc)
