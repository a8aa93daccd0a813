"""Image hosting upload over HTTP."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from catalog_api.domain.collections.exceptions import UpstreamUnavailable

logger = logging.getLogger(__name__)


@dataclass
class HttpImageStore:
	"""Uploads PNGs as multipart ``file`` and returns the hosted image id."""

	http: httpx.AsyncClient
	upload_url: str
	token: Optional[str] = None
	request_timeout: float = 30.0

	async def upload(self, data: bytes, filename: str) -> str:
		headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
		try:
			response = await self.http.post(
				self.upload_url,
				headers=headers,
				files={"file": (filename, data, "image/png")},
				timeout=self.request_timeout,
			)
		except httpx.HTTPError as exc:
			logger.error("image_store_request_failed", extra={"upload_name": filename, "error": str(exc)})
			raise UpstreamUnavailable("image_store", "upload_failed") from exc

		if response.is_error:
			logger.error(
				"image_store_upload_rejected",
				extra={"upload_name": filename, "status": response.status_code, "body": response.text[:500]},
			)
			raise UpstreamUnavailable("image_store", "upload_failed")

		try:
			image_id = response.json()["result"]["id"]
		except (ValueError, KeyError, TypeError) as exc:
			logger.error("image_store_response_invalid", extra={"upload_name": filename})
			raise UpstreamUnavailable("image_store", "upload_failed") from exc
		return str(image_id)
