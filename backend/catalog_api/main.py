"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from catalog_api.api import collections, ops
from catalog_api.api.errors import install_error_handlers
from catalog_api.domain.collections.container import CollectionsContainer
from catalog_api.obs import init as obs_init
from catalog_api.settings import Settings, settings

logger = logging.getLogger(__name__)


def create_app(
	config: Optional[Settings] = None,
	*,
	container: Optional[CollectionsContainer] = None,
) -> FastAPI:
	"""Build the app. A supplied ``container`` is used as-is and closed on shutdown."""
	config = config or settings

	@asynccontextmanager
	async def lifespan(app: FastAPI):
		if getattr(app.state, "collections", None) is None:
			app.state.collections = await CollectionsContainer.create(config)
		try:
			yield
		finally:
			await app.state.collections.aclose()
			logger.info("collections_container_closed")

	app = FastAPI(title="Catalog Collections API", lifespan=lifespan)
	app.state.collections = container
	install_error_handlers(app)
	obs_init(app)
	app.include_router(collections.router)
	app.include_router(ops.router)
	return app


app = create_app()
