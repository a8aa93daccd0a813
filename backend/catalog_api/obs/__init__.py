"""Observability package bootstrap."""

from __future__ import annotations

from fastapi import FastAPI

from catalog_api.obs import logging as obs_logging
from catalog_api.obs import middleware
from catalog_api.settings import settings

_logging_configured = False


def init(app: FastAPI) -> None:
	"""Install request instrumentation and, once per process, JSON logging."""
	global _logging_configured
	middleware.install(app)
	if not settings.obs_enabled or _logging_configured:
		return
	obs_logging.configure_logging()
	_logging_configured = True


__all__ = ["init"]
