"""Custom exceptions for the collections leaderboard engine."""

from __future__ import annotations

from fastapi import status


class CollectionsError(Exception):
	"""Base class for collection related errors."""

	status_code: int = status.HTTP_400_BAD_REQUEST
	detail: str = "collections_error"

	def __init__(self, detail: str | None = None) -> None:
		super().__init__(detail or self.detail)
		if detail:
			self.detail = detail


class InvalidWeekFormat(CollectionsError):
	"""Raised when a week identifier is not ``YYYYWNN`` or names a week the year lacks."""

	detail = "invalid_week_format"


class RegionNotFound(CollectionsError):
	"""Raised when a country does not belong to any pricing region."""

	status_code = status.HTTP_404_NOT_FOUND
	detail = "country_not_found"


class CollectionNotFound(CollectionsError):
	status_code = status.HTTP_404_NOT_FOUND
	detail = "collection_not_found"


class UpstreamUnavailable(CollectionsError):
	"""Raised when a collaborator (cache, catalog, price, renderer, image store) fails."""

	status_code = status.HTTP_502_BAD_GATEWAY
	detail = "upstream_unavailable"

	def __init__(self, collaborator: str, detail: str | None = None) -> None:
		super().__init__(detail)
		self.collaborator = collaborator


class PartialDataMissing(CollectionsError):
	"""A single ranked row lacks catalog metadata or price. Recovered by dropping the row."""

	detail = "partial_data_missing"

	def __init__(self, item_id: str, missing: str) -> None:
		super().__init__(f"{missing} missing for {item_id}")
		self.item_id = item_id
		self.missing = missing
