"""
Async client for the Zenith HTTP API.

Usage:
    async with ZenithClient("http://localhost:3000/api") as client:
        await client.register("a@x.com", "pw", "A")
        bucket = await client.create_bucket("notes")
        await client.put(bucket["bucketId"], "/todo/1", {"done": False})
        data = await client.get(bucket["bucketId"], "/todo/1")

``register`` and ``login`` keep the returned token for later calls.
"""

from __future__ import annotations

import json
from typing import Any, Optional, Sequence
from urllib.parse import quote

import httpx


class ZenithClientError(Exception):
    """A non-2xx answer from the server, or a transport failure (status 0)."""

    def __init__(self, status: int, kind: str, message: str, body: Any = None) -> None:
        super().__init__(f"HTTP {status} {kind}: {message}")
        self.status = status
        self.kind = kind
        self.message = message
        self.body = body


class ZenithClient:
    """Thin async wrapper over ``httpx.AsyncClient``."""

    def __init__(
        self,
        base_url: str = "http://localhost:3000/api",
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout_seconds: float = 10.0,
    ) -> None:
        self.token = token
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout_seconds,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> ZenithClient:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------
    async def request(self, method: str, endpoint: str, data: Any = None, send_body: bool = False) -> Any:
        """Issue one request and decode the JSON answer; errors raise."""
        headers = {"content-type": "application/json"}
        if self.token:
            headers["authorization"] = f"Bearer {self.token}"

        content = None
        if send_body or data is not None:
            content = json.dumps(data).encode()

        try:
            response = await self._client.request(method, endpoint, content=content, headers=headers)
        except httpx.RequestError as exc:
            raise ZenithClientError(0, "Transport", f"Request failed: {exc}") from exc

        try:
            body = response.json() if response.content else {}
        except ValueError as exc:
            raise ZenithClientError(
                response.status_code, "InvalidResponse", f"Failed to parse response: {exc}"
            ) from exc

        if response.is_error:
            body = body if isinstance(body, dict) else {}
            raise ZenithClientError(
                response.status_code,
                body.get("kind", "Unknown"),
                body.get("error", f"HTTP {response.status_code}"),
                body=body,
            )
        return body

    @staticmethod
    def _data_endpoint(bucket_id: str, path: str) -> str:
        return f"/buckets/{bucket_id}/data/{quote(path.lstrip('/'), safe='/')}"

    # -------------------------------------------------------------------------
    # Authentication
    # -------------------------------------------------------------------------
    async def register(self, email: str, password: str, name: Optional[str] = None) -> dict[str, Any]:
        response = await self.request("POST", "/auth/register", {
            "email": email,
            "password": password,
            "name": name,
        })
        self.token = response.get("token") or self.token
        return response

    async def login(self, email: str, password: str) -> dict[str, Any]:
        response = await self.request("POST", "/auth/login", {"email": email, "password": password})
        self.token = response.get("token") or self.token
        return response

    # -------------------------------------------------------------------------
    # Buckets
    # -------------------------------------------------------------------------
    async def create_bucket(
        self,
        name: str,
        durability: Optional[str] = None,
        region: Optional[str] = None,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {"name": name}
        if durability is not None:
            body["durability"] = durability
        if region is not None:
            body["region"] = region
        return await self.request("POST", "/buckets", body)

    async def list_buckets(self) -> list[dict[str, Any]]:
        return (await self.request("GET", "/buckets"))["buckets"]

    # -------------------------------------------------------------------------
    # Documents
    # -------------------------------------------------------------------------
    async def put(self, bucket_id: str, path: str, data: Any) -> dict[str, Any]:
        return await self.request("PUT", self._data_endpoint(bucket_id, path), data, send_body=True)

    async def get(self, bucket_id: str, path: str) -> Any:
        """Return the stored payload itself."""
        return (await self.request("GET", self._data_endpoint(bucket_id, path)))["data"]

    async def delete(self, bucket_id: str, path: str) -> dict[str, Any]:
        return await self.request("DELETE", self._data_endpoint(bucket_id, path))

    async def list_items(self, bucket_id: str) -> dict[str, Any]:
        return await self.request("GET", f"/buckets/{bucket_id}/items")

    async def batch_write(self, bucket_id: str, items: Sequence[dict[str, Any]]) -> dict[str, Any]:
        return await self.request("POST", f"/buckets/{bucket_id}/batch-write", {"items": list(items)})

    async def vector_query(self, bucket_id: str, query: Any = None, top_k: Optional[int] = None) -> dict[str, Any]:
        body: dict[str, Any] = {"query": query}
        if top_k is not None:
            body["topK"] = top_k
        return await self.request("POST", f"/buckets/{bucket_id}/vector-search", body)

    # -------------------------------------------------------------------------
    # System
    # -------------------------------------------------------------------------
    async def stats(self) -> dict[str, Any]:
        return (await self.request("GET", "/stats"))["stats"]

    async def health(self) -> dict[str, Any]:
        return await self.request("GET", "/health")
