"""Pydantic schemas for collection leaderboard APIs."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PriceSchema(BaseModel):
	original_price: Optional[int] = Field(default=None, alias="originalPrice")
	discount_price: Optional[int] = Field(default=None, alias="discountPrice")
	discount: Optional[int] = None
	currency_code: str = Field(default="USD", alias="currencyCode")

	model_config = {"populate_by_name": True}


class SnapshotSchema(BaseModel):
	date: datetime
	position: int


class RankedEntrySchema(BaseModel):
	item_id: str = Field(..., alias="itemId")
	position: int = Field(..., ge=1)
	previous: Optional[int] = None
	positions: list[SnapshotSchema] = Field(default_factory=list)

	model_config = {"populate_by_name": True}


class PageElementSchema(BaseModel):
	"""Catalog metadata of a ranked offer; unknown catalog fields pass through."""

	model_config = ConfigDict(extra="allow", populate_by_name=True)

	id: str
	title: str = ""
	position: int
	previous_position: Optional[int] = Field(default=None, alias="previousPosition")
	price: Optional[PriceSchema] = None
	metadata: RankedEntrySchema


class CollectionPageSchema(BaseModel):
	elements: list[PageElementSchema]
	page: int = Field(..., ge=1)
	limit: int = Field(..., ge=1)
	total: int = Field(..., ge=0)
	title: str
	updated_at: datetime = Field(..., alias="updatedAt")
	start: Optional[datetime] = None
	end: Optional[datetime] = None

	model_config = {"populate_by_name": True}


class ArtifactSchema(BaseModel):
	id: str
	url: str
