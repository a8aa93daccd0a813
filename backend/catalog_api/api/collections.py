"""FastAPI routes for collection leaderboards."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response

from catalog_api.domain.collections import weeks
from catalog_api.domain.collections.models import SortDirection, SortField
from catalog_api.domain.collections.schemas import ArtifactSchema, CollectionPageSchema
from catalog_api.domain.collections.service import CollectionService
from catalog_api.settings import settings

router = APIRouter(prefix="/collections", tags=["collections"])

PAGE_CACHE_CONTROL = "public, max-age=60"
IMAGE_CACHE_CONTROL = "public, max-age=3600"
CURRENT_WEEK = "current"


def get_service(request: Request) -> CollectionService:
	return request.app.state.collections.service


def cookie_country(request: Request) -> Optional[str]:
	return request.cookies.get(settings.country_cookie_name)


def _week(week: str) -> str:
	if week.strip().lower() == CURRENT_WEEK:
		return weeks.current_week()
	return week


@router.get("/{slug}", response_model=CollectionPageSchema)
async def collection_endpoint(
	slug: str,
	response: Response,
	country: Optional[str] = Query(default=None, description="ISO 3166-1 alpha-2 country code"),
	page: Optional[int] = Query(default=None),
	limit: Optional[int] = Query(default=None),
	sort_by: SortField = Query(default=SortField.POSITION),
	sort_dir: SortDirection = Query(default=SortDirection.ASC),
	country_cookie: Optional[str] = Depends(cookie_country),
	service: CollectionService = Depends(get_service),
) -> CollectionPageSchema:
	region = service.resolve_region(country, country_cookie)
	result = await service.get_collection_page(
		slug,
		region,
		page=page,
		limit=limit,
		sort_by=sort_by,
		sort_dir=sort_dir,
	)
	response.headers["Cache-Control"] = PAGE_CACHE_CONTROL
	return result


@router.get("/{slug}/{week}", response_model=CollectionPageSchema)
async def weekly_leaderboard_endpoint(
	slug: str,
	week: str,
	response: Response,
	country: Optional[str] = Query(default=None, description="ISO 3166-1 alpha-2 country code"),
	page: Optional[int] = Query(default=None),
	limit: Optional[int] = Query(default=None),
	country_cookie: Optional[str] = Depends(cookie_country),
	service: CollectionService = Depends(get_service),
) -> CollectionPageSchema:
	week = _week(week)
	# week errors win over region errors: both are checked before any I/O
	weeks.resolve_week(week)
	region = service.resolve_region(country, country_cookie)
	result = await service.get_weekly_leaderboard(slug, week, region, page=page, limit=limit)
	response.headers["Cache-Control"] = PAGE_CACHE_CONTROL
	return result


@router.get("/{slug}/{week}/og", response_model=ArtifactSchema)
async def leaderboard_image_endpoint(
	slug: str,
	week: str,
	country: Optional[str] = Query(default=None, description="ISO 3166-1 alpha-2 country code"),
	force: bool = Query(default=False, description="Render and upload even when an image exists"),
	direct: bool = Query(default=False, description="Return the PNG instead of the hosted image"),
	country_cookie: Optional[str] = Depends(cookie_country),
	service: CollectionService = Depends(get_service),
):
	week = _week(week)
	weeks.resolve_week(week)
	region = service.resolve_region(country, country_cookie)
	result = await service.get_leaderboard_artifact(
		slug,
		week,
		region,
		force_render=force,
		want_raw_bytes=direct,
	)
	if isinstance(result, bytes):
		return Response(content=result, media_type="image/png", headers={"Cache-Control": IMAGE_CACHE_CONTROL})
	return ArtifactSchema(id=result.image_id, url=result.url)
