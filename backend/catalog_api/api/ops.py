"""Operations endpoints providing health checks and metrics."""

from __future__ import annotations

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from catalog_api.settings import settings

router = APIRouter(prefix="", tags=["ops"])


@router.get("/health")
async def health_live() -> dict[str, str]:
	return {"status": "ok", "service": settings.service_name, "commit": settings.git_commit}


@router.get("/metrics")
async def prometheus_metrics() -> Response:
	payload = generate_latest()
	return Response(content=payload, media_type=CONTENT_TYPE_LATEST)
