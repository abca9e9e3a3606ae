"""
Integration Tests: HTTP Gateway

Drives the full router (middleware included) in process.

Tests:
    - Auth flow and status mapping (401 vs 403)
    - Bucket and document endpoints
    - Cross-tenant isolation
    - Batch write, listing, search, stats, health, metrics
    - Malformed input, unknown routes, CORS
"""

from __future__ import annotations

from datetime import timedelta

import pytest

from zenith.core.types import PrincipalId, utcnow
from zenith.tests.conftest import call


async def register(router, email="a@x.com", password="pw", name="A") -> str:
    response = await call(router, "POST", "/api/auth/register", {
        "email": email, "password": password, "name": name,
    })
    assert response.status == 201, response.json_body()
    return response.json_body()["token"]


async def create_bucket(router, token: str, name: str = "b1") -> str:
    response = await call(router, "POST", "/api/buckets", {"name": name}, token=token)
    assert response.status == 201, response.json_body()
    return response.json_body()["bucketId"]


class TestAuthEndpoints:
    """register / login over HTTP."""

    async def test_register_and_login(self, router):
        response = await call(router, "POST", "/api/auth/register", {
            "email": "a@x.com", "password": "pw", "name": "A",
        })
        assert response.status == 201
        body = response.json_body()
        assert body["success"] is True
        assert body["email"] == "a@x.com"
        assert body["token"] and body["userId"] and body["expiresAt"]

        login = await call(router, "POST", "/api/auth/login", {"email": "a@x.com", "password": "pw"})
        assert login.status == 200
        assert login.json_body()["userId"] == body["userId"]

    async def test_duplicate_register(self, router):
        await register(router)
        response = await call(router, "POST", "/api/auth/register", {"email": "a@x.com", "password": "x"})
        assert response.status == 409
        assert response.json_body()["error"] == "User already exists"
        assert response.json_body()["kind"] == "Conflict"

    async def test_bad_login(self, router):
        await register(router)
        response = await call(router, "POST", "/api/auth/login", {"email": "a@x.com", "password": "no"})
        assert response.status == 401
        assert response.json_body()["success"] is False

    async def test_missing_fields(self, router):
        response = await call(router, "POST", "/api/auth/register", {"email": "a@x.com"})
        assert response.status == 400
        assert response.json_body()["kind"] == "BadRequest"


class TestAuthorizationStatus:
    """Missing credentials answer 401; rejected tokens answer 403."""

    async def test_no_header(self, router):
        response = await call(router, "GET", "/api/buckets")
        assert response.status == 401
        assert response.json_body()["kind"] == "Unauthorized"

    async def test_not_bearer(self, router):
        response = await call(router, "GET", "/api/buckets", headers={"Authorization": "Basic abc"})
        assert response.status == 401

    async def test_empty_bearer(self, router):
        response = await call(router, "GET", "/api/buckets", headers={"Authorization": "Bearer "})
        assert response.status == 401

    async def test_invalid_token(self, router):
        response = await call(router, "GET", "/api/buckets", token="garbage")
        assert response.status == 403

    async def test_expired_token(self, router, engine):
        issued = engine.tokens.mint(PrincipalId.generate(), "x@x.com", now=utcnow() - timedelta(days=2))
        response = await call(router, "GET", "/api/buckets", token=issued.token)
        assert response.status == 403
        assert response.json_body()["code"] == "SECURITY_TOKEN_EXPIRED"


class TestBucketEndpoints:
    """POST/GET /buckets."""

    async def test_create_and_list(self, router):
        token = await register(router)
        response = await call(router, "POST", "/api/buckets", {
            "name": "notes", "durability": "absolute", "region": "eu-west-1",
        }, token=token)
        assert response.status == 201
        body = response.json_body()
        assert body["name"] == "notes"
        assert body["bucket"]["durability"] == "absolute"
        assert body["bucket"]["region"] == "eu-west-1"
        assert body["bucket"]["itemCount"] == 0

        listing = await call(router, "GET", "/api/buckets", token=token)
        assert [b["bucketId"] for b in listing.json_body()["buckets"]] == [body["bucketId"]]

    async def test_name_required(self, router):
        token = await register(router)
        response = await call(router, "POST", "/api/buckets", {}, token=token)
        assert response.status == 400

    async def test_listing_is_per_owner(self, router):
        alice = await register(router, "alice@x.com")
        bob = await register(router, "bob@x.com")
        await create_bucket(router, alice, "a1")
        listing = await call(router, "GET", "/api/buckets", token=bob)
        assert listing.json_body()["buckets"] == []


class TestDocumentEndpoints:
    """PUT/GET/DELETE data, items listing."""

    async def test_write_read_delete(self, router):
        token = await register(router)
        bucket_id = await create_bucket(router, token)
        url = f"/api/buckets/{bucket_id}/data/users/1"

        put = await call(router, "PUT", url, {"name": "Ann"}, token=token)
        assert put.status == 200
        assert put.json_body()["path"] == "/users/1"
        assert put.json_body()["metadata"]["size"] == len('{"name":"Ann"}')

        get = await call(router, "GET", url, token=token)
        assert get.status == 200
        assert get.json_body()["data"] == {"name": "Ann"}
        assert get.json_body()["path"] == "/users/1"

        delete = await call(router, "DELETE", url, token=token)
        assert delete.status == 200
        assert delete.json_body()["path"] == "/users/1"

        again = await call(router, "DELETE", url, token=token)
        assert again.status == 404
        assert again.json_body()["error"] == "Data not found"

    async def test_scalar_payloads(self, router):
        token = await register(router)
        bucket_id = await create_bucket(router, token)
        url = f"/api/buckets/{bucket_id}/data/flag"
        assert (await call(router, "PUT", url, raw=b"null", token=token)).status == 200
        assert (await call(router, "GET", url, token=token)).json_body()["data"] is None

    async def test_empty_body_rejected(self, router):
        token = await register(router)
        bucket_id = await create_bucket(router, token)
        response = await call(router, "PUT", f"/api/buckets/{bucket_id}/data/x", token=token)
        assert response.status == 400

    async def test_malformed_json(self, router):
        token = await register(router)
        bucket_id = await create_bucket(router, token)
        response = await call(router, "PUT", f"/api/buckets/{bucket_id}/data/x", raw=b"{nope", token=token)
        assert response.status == 400
        assert response.json_body()["code"] == "REQUEST_MALFORMED_BODY"

    async def test_oversized_integer_body(self, router):
        token = await register(router)
        bucket_id = await create_bucket(router, token)
        response = await call(router, "PUT", f"/api/buckets/{bucket_id}/data/x", raw=b"1" * 5000, token=token)
        assert response.status == 400
        assert response.json_body()["code"] == "REQUEST_MALFORMED_BODY"

    async def test_deeply_nested_body(self, router):
        token = await register(router)
        bucket_id = await create_bucket(router, token)
        raw = b"[" * 200000 + b"]" * 200000
        response = await call(router, "PUT", f"/api/buckets/{bucket_id}/data/x", raw=raw, token=token)
        assert response.status == 400
        assert response.json_body()["code"] == "REQUEST_MALFORMED_BODY"

    async def test_unknown_bucket(self, router):
        token = await register(router)
        response = await call(router, "GET", "/api/buckets/not-a-bucket/data/x", token=token)
        assert response.status == 404

    async def test_items_listing(self, router):
        token = await register(router)
        bucket_id = await create_bucket(router, token)
        for path in ("a", "b/c"):
            await call(router, "PUT", f"/api/buckets/{bucket_id}/data/{path}", {"p": path}, token=token)

        response = await call(router, "GET", f"/api/buckets/{bucket_id}/items", token=token)
        body = response.json_body()
        assert body["itemCount"] == 2
        assert [i["path"] for i in body["items"]] == ["/a", "/b/c"]

        buckets = (await call(router, "GET", "/api/buckets", token=token)).json_body()["buckets"]
        assert buckets[0]["itemCount"] == 2

    async def test_listing_empty_after_last_delete(self, router):
        token = await register(router)
        bucket_id = await create_bucket(router, token)
        url = f"/api/buckets/{bucket_id}/data/only"
        await call(router, "PUT", url, {"x": 1}, token=token)
        assert (await call(router, "DELETE", url, token=token)).status == 200

        body = (await call(router, "GET", f"/api/buckets/{bucket_id}/items", token=token)).json_body()
        assert body["itemCount"] == 0
        assert body["items"] == []

        buckets = (await call(router, "GET", "/api/buckets", token=token)).json_body()["buckets"]
        assert buckets[0]["itemCount"] == 0

    async def test_listing_after_batch(self, router):
        token = await register(router)
        bucket_id = await create_bucket(router, token)
        await call(router, "POST", f"/api/buckets/{bucket_id}/batch-write", {"items": [
            {"path": "/a", "payload": 1},
            {"path": "/b", "payload": 2},
        ]}, token=token)

        body = (await call(router, "GET", f"/api/buckets/{bucket_id}/items", token=token)).json_body()
        assert body["itemCount"] == 2
        assert [(i["path"], i["size"]) for i in body["items"]] == [("/a", 1), ("/b", 1)]


class TestCrossTenantIsolation:
    """A principal can never touch another principal's bucket."""

    @pytest.mark.parametrize("method, suffix, body", [
        ("GET", "/data/secret", None),
        ("PUT", "/data/secret", {"x": 1}),
        ("DELETE", "/data/secret", None),
        ("GET", "/items", None),
        ("POST", "/batch-write", {"items": [{"path": "/x", "payload": 1}]}),
        ("POST", "/vector-search", {"query": "q"}),
    ])
    async def test_forbidden(self, router, method, suffix, body):
        alice = await register(router, "alice@x.com")
        bob = await register(router, "bob@x.com")
        bucket_id = await create_bucket(router, alice)
        await call(router, "PUT", f"/api/buckets/{bucket_id}/data/secret", {"s": 1}, token=alice)

        response = await call(router, method, f"/api/buckets/{bucket_id}{suffix}", body, token=bob)
        assert response.status == 403

        # Alice's data is untouched
        get = await call(router, "GET", f"/api/buckets/{bucket_id}/data/secret", token=alice)
        assert get.json_body()["data"] == {"s": 1}
        items = await call(router, "GET", f"/api/buckets/{bucket_id}/items", token=alice)
        assert items.json_body()["itemCount"] == 1


class TestBatchAndSearch:
    """batch-write and vector-search."""

    async def test_batch_write(self, router):
        token = await register(router)
        bucket_id = await create_bucket(router, token)
        response = await call(router, "POST", f"/api/buckets/{bucket_id}/batch-write", {"items": [
            {"path": "/a", "payload": 1},
            {"path": "b", "data": {"legacy": True}},
            {"path": "", "payload": 3},
            "not-an-object",
        ]}, token=token)
        assert response.status == 200
        body = response.json_body()
        assert body["written"] == 2
        assert body["failed"] == 2
        assert body["success"] is False
        assert [r["status"] for r in body["results"]] == ["succeeded", "succeeded", "failed", "failed"]

        get = await call(router, "GET", f"/api/buckets/{bucket_id}/data/b", token=token)
        assert get.json_body()["data"] == {"legacy": True}

    async def test_batch_items_must_be_array(self, router):
        token = await register(router)
        bucket_id = await create_bucket(router, token)
        response = await call(router, "POST", f"/api/buckets/{bucket_id}/batch-write", {"items": {}}, token=token)
        assert response.status == 400

    async def test_batch_too_large(self, router, engine):
        token = await register(router)
        bucket_id = await create_bucket(router, token)
        limit = engine.config.storage.max_batch_items
        items = [{"path": f"/i/{n}", "payload": n} for n in range(limit + 1)]
        response = await call(router, "POST", f"/api/buckets/{bucket_id}/batch-write", {"items": items}, token=token)
        assert response.status == 400
        assert response.json_body()["code"] == "REQUEST_BATCH_TOO_LARGE"

    async def test_vector_search(self, router):
        token = await register(router)
        bucket_id = await create_bucket(router, token)
        for i in range(4):
            await call(router, "PUT", f"/api/buckets/{bucket_id}/data/d{i}", {"i": i}, token=token)

        response = await call(router, "POST", f"/api/buckets/{bucket_id}/vector-search", {
            "query": "hello", "topK": 2,
        }, token=token)
        assert response.status == 200
        body = response.json_body()
        assert body["query"] == "hello"
        assert len(body["results"]) == 2
        assert {"path", "data", "score"} <= set(body["results"][0])

    async def test_vector_search_null_top_k(self, router):
        token = await register(router)
        bucket_id = await create_bucket(router, token)
        for i in range(12):
            await call(router, "PUT", f"/api/buckets/{bucket_id}/data/d{i}", {"i": i}, token=token)

        response = await call(router, "POST", f"/api/buckets/{bucket_id}/vector-search", {
            "query": "q", "topK": None,
        }, token=token)
        assert response.status == 200
        assert len(response.json_body()["results"]) == 10

    async def test_vector_search_bad_top_k(self, router):
        token = await register(router)
        bucket_id = await create_bucket(router, token)
        response = await call(router, "POST", f"/api/buckets/{bucket_id}/vector-search", {"topK": 0}, token=token)
        assert response.status == 400


class TestSystemEndpoints:
    """stats, health, metrics, routing fallbacks."""

    async def test_stats(self, router):
        token = await register(router)
        bucket_id = await create_bucket(router, token)
        await call(router, "PUT", f"/api/buckets/{bucket_id}/data/x", {"x": 1}, token=token)

        response = await call(router, "GET", "/api/stats", token=token)
        stats = response.json_body()["stats"]
        assert stats["bucketsCount"] == 1
        assert stats["totalItems"] == 1
        assert stats["regions"] == ["us-east-1"]
        assert stats["uptimeSeconds"] >= 0

    async def test_stats_requires_auth(self, router):
        assert (await call(router, "GET", "/api/stats")).status == 401

    async def test_health_is_public(self, router):
        response = await call(router, "GET", "/api/health")
        assert response.status == 200
        assert response.json_body()["status"] == "healthy"
        assert response.json_body()["version"]

    async def test_metrics_is_public(self, router):
        await call(router, "GET", "/api/health")
        response = await call(router, "GET", "/api/metrics")
        assert response.status == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert b"http_requests_total" in response.body

    async def test_unknown_route(self, router):
        assert (await call(router, "GET", "/api/nothing")).status == 404

    async def test_wrong_method(self, router):
        assert (await call(router, "PATCH", "/api/health")).status == 405

    async def test_request_id_echoed(self, router):
        response = await call(router, "GET", "/api/health", headers={"X-Request-ID": "req-1"})
        assert response.headers["x-request-id"] == "req-1"

    async def test_cors_preflight(self, router):
        response = await call(router, "OPTIONS", "/api/buckets", headers={"Origin": "http://app"})
        assert response.status == 204
        assert response.headers["access-control-allow-origin"] == "*"

    async def test_handler_fault_keeps_response_headers(self, router):
        async def failing(request):
            raise RuntimeError("boom")

        router.add("GET", "/boom", failing, public=True)
        response = await call(router, "GET", "/api/boom", headers={"Origin": "http://app", "X-Request-ID": "req-9"})
        assert response.status == 500
        assert response.json_body()["kind"] == "Internal"
        assert response.headers["x-request-id"] == "req-9"
        assert response.headers["access-control-allow-origin"] == "*"
