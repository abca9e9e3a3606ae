"""
Application assembly: routes and middleware on one router.

Usage:
    engine = ZenithEngine(config)
    app = create_app(engine)          # ASGI callable
    router = build_router(engine)     # in-process dispatch
"""

from __future__ import annotations

from zenith.api.asgi import ZenithASGI
from zenith.api.handlers import AuthHandler, BucketHandler, DocumentHandler, SystemHandler
from zenith.api.middleware import AuthMiddleware, CorsMiddleware, RequestLoggingMiddleware
from zenith.api.router import ZenithRouter
from zenith.engine import ZenithEngine


def build_router(engine: ZenithEngine) -> ZenithRouter:
    """Register every endpoint under the configured API prefix."""
    router = ZenithRouter(prefix=engine.config.server.api_prefix)

    auth = AuthHandler(engine)
    buckets = BucketHandler(engine)
    documents = DocumentHandler(engine)
    system = SystemHandler(engine)

    router.add("POST", "/auth/register", auth.register, public=True)
    router.add("POST", "/auth/login", auth.login, public=True)

    router.add("POST", "/buckets", buckets.create)
    router.add("GET", "/buckets", buckets.list)

    data_path = "/buckets/{bucket_id}/data/{path:path}"
    router.add("PUT", data_path, documents.write)
    router.add("GET", data_path, documents.read)
    router.add("DELETE", data_path, documents.delete)
    router.add("GET", "/buckets/{bucket_id}/items", documents.list_items)
    router.add("POST", "/buckets/{bucket_id}/batch-write", documents.batch_write)
    router.add("POST", "/buckets/{bucket_id}/vector-search", documents.vector_search)

    router.add("GET", "/stats", system.stats)
    router.add("GET", "/health", system.health, public=True)
    if engine.config.observability.metrics_enabled:
        router.add("GET", "/metrics", system.metrics, public=True)

    # Outermost first: every answer, auth failures included, is logged
    router.use(RequestLoggingMiddleware(engine.metrics))
    router.use(CorsMiddleware(engine.config.server.cors_origins))
    router.use(AuthMiddleware(engine.authenticator))
    return router


def create_app(engine: ZenithEngine) -> ZenithASGI:
    return ZenithASGI(build_router(engine))
