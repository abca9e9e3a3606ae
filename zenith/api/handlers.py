"""
API Handlers: Request Processing Logic

Implements:
- AuthHandler: registration and login
- BucketHandler: bucket creation and listing
- DocumentHandler: document reads/writes, listing, batch write, search stub
- SystemHandler: stats, health, metrics

Every handler translates HTTP input into engine calls and Err results
into error responses; no handler touches storage before the bucket
ownership gate has passed.
"""

from __future__ import annotations

from typing import Any

from zenith.api.router import Request, Response
from zenith.core import constants as C
from zenith.core.errors import RequestError, ZenithError
from zenith.core.types import Err, Ok, Result, isoformat, utcnow
from zenith.engine import ZenithEngine
from zenith.storage.buckets import Bucket
from zenith.storage.documents import BatchItem, normalize_path


def parse_body(request: Request, required: bool = True) -> Result[Any, RequestError]:
    """Decode the JSON body; empty bodies are an error when ``required``."""
    if not request.body:
        if required:
            return Err(RequestError.missing_field("body"))
        return Ok(None)
    try:
        return Ok(request.json())
    except (ValueError, RecursionError) as e:
        # Oversized integers raise ValueError, deep nesting RecursionError
        return Err(RequestError.malformed_body(str(e), cause=e))


def parse_object(request: Request) -> Result[dict[str, Any], RequestError]:
    """Decode a body that must be a JSON object (absent body reads as {})."""
    body = parse_body(request, required=False)
    if body.is_err():
        return body
    data = body.unwrap()
    if data is None:
        return Ok({})
    if not isinstance(data, dict):
        return Err(RequestError.invalid_field("body", type(data).__name__, "must be a JSON object"))
    return Ok(data)


class AuthHandler:
    """
    Handler for authentication.

    Endpoints:
    - POST /auth/register
    - POST /auth/login
    """

    __slots__ = ("_engine",)

    def __init__(self, engine: ZenithEngine) -> None:
        self._engine = engine

    async def register(self, request: Request) -> Response:
        """
        Request:
            {"email": "a@x.com", "password": "...", "name": "A"}
        """
        body = parse_object(request)
        if body.is_err():
            return Response.from_error(body.error)
        data = body.unwrap()

        result = await self._engine.authenticator.register(
            data.get("email"), data.get("password"), data.get("name")
        )
        if result.is_err():
            return Response.from_error(result.error)
        return Response.json({"success": True, **result.unwrap().to_dict()}, status=201)

    async def login(self, request: Request) -> Response:
        body = parse_object(request)
        if body.is_err():
            return Response.from_error(body.error)
        data = body.unwrap()

        result = await self._engine.authenticator.login(data.get("email"), data.get("password"))
        if result.is_err():
            return Response.from_error(result.error)
        return Response.json({"success": True, **result.unwrap().to_dict()})


class BucketHandler:
    """
    Handler for bucket management.

    Endpoints:
    - POST /buckets
    - GET /buckets
    """

    __slots__ = ("_engine",)

    def __init__(self, engine: ZenithEngine) -> None:
        self._engine = engine

    async def create(self, request: Request) -> Response:
        """
        Request:
            {"name": "b1", "durability": "standard", "region": "us-east-1"}
        """
        body = parse_object(request)
        if body.is_err():
            return Response.from_error(body.error)
        data = body.unwrap()

        result = await self._engine.buckets.create_bucket(
            request.principal_id,
            data.get("name"),
            durability=data.get("durability"),
            region=data.get("region"),
        )
        if result.is_err():
            return Response.from_error(result.error)

        bucket = result.unwrap()
        return Response.json({
            "success": True,
            "bucketId": str(bucket.bucket_id),
            "name": bucket.name,
            "bucket": bucket.to_dict(),
            "message": "Bucket created successfully",
        }, status=201)

    async def list(self, request: Request) -> Response:
        buckets = await self._engine.buckets.list_buckets(request.principal_id)
        return Response.json({
            "success": True,
            "buckets": [b.to_dict() for b in buckets],
        })


class DocumentHandler:
    """
    Handler for document operations inside one bucket.

    Endpoints:
    - PUT    /buckets/{bucket_id}/data/{path}
    - GET    /buckets/{bucket_id}/data/{path}
    - DELETE /buckets/{bucket_id}/data/{path}
    - GET    /buckets/{bucket_id}/items
    - POST   /buckets/{bucket_id}/batch-write
    - POST   /buckets/{bucket_id}/vector-search
    """

    __slots__ = ("_engine",)

    def __init__(self, engine: ZenithEngine) -> None:
        self._engine = engine

    async def _authorize(self, request: Request) -> Result[Bucket, ZenithError]:
        return await self._engine.buckets.get_bucket_for_access(
            request.path_params.get("bucket_id", ""),
            request.principal_id,
        )

    async def write(self, request: Request) -> Response:
        """The raw JSON body is the payload."""
        access = await self._authorize(request)
        if access.is_err():
            return Response.from_error(access.error)
        bucket = access.unwrap()

        body = parse_body(request)
        if body.is_err():
            return Response.from_error(body.error)

        path = request.path_params["path"]
        result = await self._engine.documents.write(bucket.bucket_id, path, body.unwrap())
        if result.is_err():
            return Response.from_error(result.error)

        return Response.json({
            "success": True,
            "bucketId": str(bucket.bucket_id),
            "path": normalize_path(path).unwrap_or(path),
            "metadata": result.unwrap().to_dict(),
            "message": "Data stored successfully",
        })

    async def read(self, request: Request) -> Response:
        access = await self._authorize(request)
        if access.is_err():
            return Response.from_error(access.error)

        result = await self._engine.documents.read(
            access.unwrap().bucket_id, request.path_params["path"]
        )
        if result.is_err():
            return Response.from_error(result.error)

        document = result.unwrap()
        return Response.json({
            "success": True,
            "path": document.path,
            "data": document.payload,
            "metadata": document.metadata.to_dict(),
        })

    async def delete(self, request: Request) -> Response:
        access = await self._authorize(request)
        if access.is_err():
            return Response.from_error(access.error)

        result = await self._engine.documents.delete(
            access.unwrap().bucket_id, request.path_params["path"]
        )
        if result.is_err():
            return Response.from_error(result.error)

        return Response.json({
            "success": True,
            "path": result.unwrap(),
            "message": "Data deleted successfully",
        })

    async def list_items(self, request: Request) -> Response:
        access = await self._authorize(request)
        if access.is_err():
            return Response.from_error(access.error)
        bucket = access.unwrap()

        result = await self._engine.documents.list_items(bucket.bucket_id)
        if result.is_err():
            return Response.from_error(result.error)

        items = result.unwrap()
        return Response.json({
            "success": True,
            "bucketId": str(bucket.bucket_id),
            "itemCount": len(items),
            "items": [item.to_dict() for item in items],
        })

    async def batch_write(self, request: Request) -> Response:
        """
        Ordered best-effort batch; the response reports every item.

        Request:
            {"items": [{"path": "/a", "payload": 1}, ...]}

        ``data`` is accepted in place of ``payload``.
        """
        access = await self._authorize(request)
        if access.is_err():
            return Response.from_error(access.error)

        body = parse_object(request)
        if body.is_err():
            return Response.from_error(body.error)

        raw_items = body.unwrap().get("items")
        if not isinstance(raw_items, list):
            return Response.from_error(
                RequestError.invalid_field("items", type(raw_items).__name__, "must be an array")
            )

        items = [self._batch_item(raw) for raw in raw_items]
        result = await self._engine.documents.batch_write(access.unwrap().bucket_id, items)
        if result.is_err():
            return Response.from_error(result.error)

        results = result.unwrap()
        written = sum(1 for r in results if r.succeeded)
        return Response.json({
            "success": written == len(results),
            "results": [r.to_dict() for r in results],
            "written": written,
            "failed": len(results) - written,
            "message": f"{written} of {len(results)} items written",
        })

    async def vector_search(self, request: Request) -> Response:
        """Stub: arbitrary items with opaque, non-semantic scores."""
        access = await self._authorize(request)
        if access.is_err():
            return Response.from_error(access.error)

        body = parse_object(request)
        if body.is_err():
            return Response.from_error(body.error)
        data = body.unwrap()

        result = await self._engine.search.search(
            access.unwrap().bucket_id,
            data.get("query"),
            data.get("topK"),
        )
        if result.is_err():
            return Response.from_error(result.error)

        return Response.json({
            "success": True,
            "query": data.get("query"),
            "results": [hit.to_dict() for hit in result.unwrap()],
        })

    @staticmethod
    def _batch_item(raw: Any) -> BatchItem:
        if not isinstance(raw, dict):
            # Fails path validation inside the batch and is reported per item
            return BatchItem(path=None, payload=None)
        payload = raw["payload"] if "payload" in raw else raw.get("data")
        return BatchItem(path=raw.get("path"), payload=payload)


class SystemHandler:
    """
    Handler for service-level endpoints.

    Endpoints:
    - GET /stats   (authenticated)
    - GET /health  (public)
    - GET /metrics (public, Prometheus text)
    """

    __slots__ = ("_engine",)

    def __init__(self, engine: ZenithEngine) -> None:
        self._engine = engine

    async def stats(self, request: Request) -> Response:
        stats = await self._engine.stats(request.principal_id)
        return Response.json({"success": True, "stats": stats.to_dict()})

    async def health(self, request: Request) -> Response:
        return Response.json({
            "status": "healthy",
            "timestamp": isoformat(utcnow()),
            "version": C.API_VERSION,
        })

    async def metrics(self, request: Request) -> Response:
        return Response.text(
            self._engine.metrics.export_prometheus(),
            content_type="text/plain; version=0.0.4",
        )
