"""ISO-8601 week identifiers and their UTC boundaries."""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone

from catalog_api.domain.collections.exceptions import InvalidWeekFormat
from catalog_api.domain.collections.models import Window

WEEK_LENGTH = timedelta(days=7)

_WEEK_PATTERN = re.compile(r"^(\d{4})[Ww](\d{2})$", re.ASCII)


def weeks_in_year(year: int) -> int:
	"""Number of ISO weeks in ``year`` (52 or 53). Dec 28 always falls in the last week."""
	return date(year, 12, 28).isocalendar()[1]


def iso_week1_monday(year: int) -> datetime:
	"""Monday 00:00 UTC of ISO week 1. Jan 4 is always in week 1."""
	jan4 = datetime(year, 1, 4, tzinfo=timezone.utc)
	return jan4 - timedelta(days=jan4.weekday())


def parse_week(week: str) -> tuple[int, int]:
	"""Split ``YYYYWNN`` into ``(year, week_number)``."""
	if not isinstance(week, str):
		raise InvalidWeekFormat()
	match = _WEEK_PATTERN.match(week.strip())
	if not match:
		raise InvalidWeekFormat()
	year = int(match.group(1))
	number = int(match.group(2))
	# the last week of 9999 would end past datetime.max
	if not 1 <= year <= 9998 or number < 1 or number > weeks_in_year(year):
		raise InvalidWeekFormat()
	return year, number


def format_week(year: int, number: int) -> str:
	return f"{year:04d}W{number:02d}"


def resolve_week(week: str) -> Window:
	"""Return the half-open UTC window ``[start, end)`` of an ISO week identifier."""
	year, number = parse_week(week)
	start = iso_week1_monday(year) + (number - 1) * WEEK_LENGTH
	return Window(week=format_week(year, number), start=start, end=start + WEEK_LENGTH)


def current_week(now: datetime | None = None) -> str:
	"""Identifier of the ISO week containing ``now`` (UTC)."""
	now = now or datetime.now(timezone.utc)
	if now.tzinfo is not None:
		now = now.astimezone(timezone.utc)
	iso_year, iso_week, _ = now.date().isocalendar()
	return format_week(iso_year, iso_week)
