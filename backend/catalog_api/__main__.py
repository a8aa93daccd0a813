"""Run the API with uvicorn: ``python -m catalog_api``."""

from __future__ import annotations

import uvicorn

from catalog_api.settings import settings


def main() -> None:
	uvicorn.run(
		"catalog_api.main:app",
		host=settings.http_host,
		port=settings.http_port,
		log_config=None,
		reload=settings.is_dev(),
	)


if __name__ == "__main__":
	main()
