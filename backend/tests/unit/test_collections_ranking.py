from datetime import datetime, timezone

import pytest

from catalog_api.domain.collections import ranking
from catalog_api.domain.collections.models import ItemPositionHistory, Snapshot, SortDirection, SortField
from catalog_api.domain.collections.weeks import resolve_week

WINDOW = resolve_week("2025W31")


def _at(month: int, day: int, hour: int = 0) -> datetime:
	return datetime(2025, month, day, hour, tzinfo=timezone.utc)


def _history(item_id, *snapshots, position=None, previous=None):
	return ItemPositionHistory(
		item_id=item_id,
		position=position,
		previous=previous,
		snapshots=tuple(Snapshot(date=date, position=pos) for date, pos in snapshots),
	)


def test_latest_snapshot_wins_even_when_worse():
	histories = [_history("x", (_at(7, 28), 1), (_at(8, 3), 9))]
	entries = ranking.rank_window(histories, WINDOW)
	assert [(e.item_id, e.position) for e in entries] == [("x", 9)]
	assert len(entries[0].snapshots_in_window) == 2


def test_equal_dates_take_the_higher_position():
	histories = [_history("x", (_at(7, 30), 2), (_at(7, 30), 7))]
	assert ranking.rank_window(histories, WINDOW)[0].position == 7


def test_window_bounds_are_half_open():
	histories = [
		_history("start", (_at(7, 28), 3)),
		_history("end", (_at(8, 4), 1)),
		_history("before", (_at(7, 27, 23), 1)),
	]
	entries = ranking.rank_window(histories, WINDOW)
	assert [e.item_id for e in entries] == ["start"]


def test_unranked_snapshots_are_ignored():
	histories = [
		_history("zero", (_at(7, 29), 0)),
		_history("mixed", (_at(7, 29), 4), (_at(7, 30), 0)),
	]
	entries = ranking.rank_window(histories, WINDOW)
	assert [(e.item_id, e.position) for e in entries] == [("mixed", 4)]


def test_ties_break_by_item_id():
	histories = [
		_history("b", (_at(7, 29), 1)),
		_history("a", (_at(7, 30), 1)),
		_history("c", (_at(7, 29), 0), (_at(7, 28), 2)),
	]
	entries = ranking.rank_window(histories, WINDOW)
	assert [e.item_id for e in entries] == ["a", "b", "c"]


def test_ranking_is_sorted_ascending():
	histories = [_history(str(i), (_at(7, 29), pos)) for i, pos in enumerate([8, 3, 5, 1, 13])]
	positions = [e.position for e in ranking.rank_window(histories, WINDOW)]
	assert positions == sorted(positions)


def test_ranking_keeps_previous_position():
	histories = [_history("x", (_at(7, 29), 2), previous=5)]
	assert ranking.rank_window(histories, WINDOW)[0].previous == 5


@pytest.mark.parametrize("limit", [1, 2, 3, 4, 7])
def test_pages_concatenate_to_the_full_ranking(limit):
	histories = [_history(f"item-{i:02d}", (_at(7, 29), i + 1)) for i in range(7)]
	full = ranking.rank_window(histories, WINDOW)
	collected = []
	page = 1
	while True:
		chunk = ranking.paginate(full, page=page, limit=limit)
		if not chunk:
			break
		collected.extend(chunk)
		page += 1
	assert collected == full


def test_paginate_past_the_end_is_empty():
	histories = [_history("a", (_at(7, 29), 1))]
	full = ranking.rank_window(histories, WINDOW)
	assert ranking.paginate(full, page=3, limit=10) == []


def test_rank_current_sorts_by_position_and_skips_unranked():
	histories = [
		_history("c", position=3, previous=1),
		_history("a", position=1, previous=None),
		_history("zero", position=0, previous=2),
		_history("none"),
		_history("b", position=2, previous=4),
	]
	entries = ranking.rank_current(histories)
	assert [e.item_id for e in entries] == ["a", "b", "c"]


def test_rank_current_by_previous_descending_puts_missing_last():
	histories = [
		_history("c", position=3, previous=1),
		_history("a", position=1, previous=None),
		_history("b", position=2, previous=4),
	]
	entries = ranking.rank_current(histories, sort_by=SortField.PREVIOUS, sort_dir=SortDirection.DESC)
	assert [e.item_id for e in entries] == ["b", "c", "a"]
