"""Ranking of collection items for a week window or by current position."""

from __future__ import annotations

import time
from typing import Iterable, List, Optional, Sequence

from catalog_api.domain.collections.models import (
	ItemPositionHistory,
	RankedEntry,
	Snapshot,
	SortDirection,
	SortField,
	Window,
)
from catalog_api.obs import metrics


def snapshots_in_window(history: ItemPositionHistory, window: Window) -> tuple[Snapshot, ...]:
	"""Snapshots of ``history`` inside ``[start, end)`` that carry a real position."""
	return tuple(
		snapshot
		for snapshot in history.snapshots
		if snapshot.ranked and window.contains(snapshot.date)
	)


def representative_snapshot(snapshots: Sequence[Snapshot]) -> Optional[Snapshot]:
	"""Latest snapshot; on equal dates the highest (worst) position wins."""
	if not snapshots:
		return None
	return max(snapshots, key=lambda snapshot: (snapshot.date, snapshot.position))


def rank_window(histories: Iterable[ItemPositionHistory], window: Window) -> List[RankedEntry]:
	"""Rank every item that has a qualifying snapshot in ``window``.

	Each item is represented by its most recent in-window position. Items are
	ordered by that position ascending, ties broken by item id so that pages are
	reproducible across calls.
	"""
	started = time.perf_counter()
	entries: List[RankedEntry] = []
	for history in histories:
		in_window = snapshots_in_window(history, window)
		latest = representative_snapshot(in_window)
		if latest is None:
			continue
		entries.append(
			RankedEntry(
				item_id=history.item_id,
				position=latest.position,
				snapshots_in_window=in_window,
				previous=history.previous,
			)
		)
	entries.sort(key=lambda entry: (entry.position, entry.item_id))
	metrics.RANKING_DURATION.observe(time.perf_counter() - started)
	return entries


def rank_current(
	histories: Iterable[ItemPositionHistory],
	*,
	sort_by: SortField = SortField.POSITION,
	sort_dir: SortDirection = SortDirection.ASC,
) -> List[RankedEntry]:
	"""Rank items by their current position, skipping unranked ones.

	Entries lacking the sort field go last whatever the direction; the item id
	stays ascending as the secondary key.
	"""
	entries = [
		RankedEntry(item_id=history.item_id, position=history.position, previous=history.previous)
		for history in histories
		if history.position is not None and history.position > 0
	]
	descending = sort_dir is SortDirection.DESC

	def _key(entry: RankedEntry) -> tuple[int, int, str]:
		value = entry.position if sort_by is SortField.POSITION else entry.previous
		if value is None:
			return (1, 0, entry.item_id)
		return (0, -value if descending else value, entry.item_id)

	entries.sort(key=_key)
	return entries


def paginate(ranking: Sequence[RankedEntry], *, page: int, limit: int) -> List[RankedEntry]:
	"""Slice ``ranking`` for a 1-based ``page`` of ``limit`` entries."""
	skip = (page - 1) * limit
	return list(ranking[skip : skip + limit])
