"""
API module: HTTP interface for the key-path store.
"""

from zenith.api.router import Request, Response, Route, ZenithRouter
from zenith.api.handlers import AuthHandler, BucketHandler, DocumentHandler, SystemHandler
from zenith.api.middleware import (
    AuthMiddleware,
    CorsMiddleware,
    RequestLoggingMiddleware,
)
from zenith.api.asgi import ZenithASGI
from zenith.api.app import build_router, create_app

__all__ = [
    "Request",
    "Response",
    "Route",
    "ZenithRouter",
    "AuthHandler",
    "BucketHandler",
    "DocumentHandler",
    "SystemHandler",
    "AuthMiddleware",
    "CorsMiddleware",
    "RequestLoggingMiddleware",
    "ZenithASGI",
    "build_router",
    "create_app",
]
