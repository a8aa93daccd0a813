import httpx
import pytest

from catalog_api.domain.collections.exceptions import UpstreamUnavailable
from catalog_api.infra.image_store import HttpImageStore


def _client(handler) -> httpx.AsyncClient:
	return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_upload_returns_hosted_id():
	seen = {}

	def handler(request: httpx.Request) -> httpx.Response:
		seen["auth"] = request.headers.get("Authorization")
		seen["body"] = request.content
		return httpx.Response(200, json={"success": True, "result": {"id": "abc-123"}})

	async with _client(handler) as http:
		store = HttpImageStore(http=http, upload_url="https://images.example/v1", token="secret")
		image_id = await store.upload(b"\x89PNG", "tops-og/hash.png")

	assert image_id == "abc-123"
	assert seen["auth"] == "Bearer secret"
	assert b'filename="tops-og/hash.png"' in seen["body"]


@pytest.mark.asyncio
async def test_rejected_upload_raises_upstream_unavailable():
	def handler(request: httpx.Request) -> httpx.Response:
		return httpx.Response(400, json={"success": False, "errors": [{"message": "bad image"}]})

	async with _client(handler) as http:
		store = HttpImageStore(http=http, upload_url="https://images.example/v1")
		with pytest.raises(UpstreamUnavailable) as excinfo:
			await store.upload(b"\x89PNG", "tops-og/hash.png")

	assert excinfo.value.collaborator == "image_store"


@pytest.mark.asyncio
async def test_transport_error_raises_upstream_unavailable():
	def handler(request: httpx.Request) -> httpx.Response:
		raise httpx.ConnectError("refused", request=request)

	async with _client(handler) as http:
		store = HttpImageStore(http=http, upload_url="https://images.example/v1")
		with pytest.raises(UpstreamUnavailable):
			await store.upload(b"\x89PNG", "tops-og/hash.png")
