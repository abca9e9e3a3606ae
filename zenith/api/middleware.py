"""
API Middleware: Cross-Cutting Concerns

Provides:
- RequestLoggingMiddleware: request ids, access log, HTTP metrics
- CorsMiddleware: cross-origin headers and preflight answers
- AuthMiddleware: bearer token verification for non-public routes
"""

from __future__ import annotations

import time
from typing import Optional
from uuid import uuid4

from zenith.api.router import Handler, Request, Response
from zenith.auth.authenticator import Authenticator
from zenith.core.errors import AuthError
from zenith.observability.logging import StructuredLogger
from zenith.observability.metrics import MetricsCollector

_BEARER = "bearer "


class RequestLoggingMiddleware:
    """
    Access logging and request metrics.

    Assigns a request id (reusing an inbound X-Request-ID), binds it to the
    log context for everything the request logs, and echoes it back.
    """

    __slots__ = ("_logger", "_request_counter", "_request_latency")

    def __init__(self, metrics: Optional[MetricsCollector] = None) -> None:
        metrics = metrics or MetricsCollector()
        self._logger = StructuredLogger("zenith.access")
        self._request_counter = metrics.counter(
            "http_requests_total",
            label_names=["method", "route", "status"],
            help_text="HTTP requests by route and status",
        )
        self._request_latency = metrics.histogram(
            "http_request_duration_seconds",
            label_names=["method", "route"],
            help_text="HTTP request latency",
        )

    async def __call__(self, request: Request, handler: Handler) -> Response:
        request.request_id = request.header("x-request-id") or uuid4().hex
        # Templates keep the label set bounded
        route = request.route.template if request.route else "unmatched"

        with StructuredLogger.context(request_id=request.request_id):
            start = time.perf_counter()
            status = 500
            try:
                response = await handler(request)
                status = response.status
                response.headers["x-request-id"] = request.request_id
                return response
            finally:
                duration = time.perf_counter() - start
                self._request_counter.inc(method=request.method, route=route, status=str(status))
                self._request_latency.observe(duration, method=request.method, route=route)
                self._logger.info(
                    f"{request.method} {request.path} {status}",
                    method=request.method,
                    route=route,
                    status=status,
                    duration_ms=round(duration * 1000, 3),
                )


class CorsMiddleware:
    """CORS middleware for cross-origin requests."""

    __slots__ = ("_origins", "_methods", "_headers")

    def __init__(
        self,
        allowed_origins: tuple[str, ...] = ("*",),
        allowed_methods: tuple[str, ...] = ("GET", "POST", "PUT", "DELETE", "OPTIONS"),
        allowed_headers: tuple[str, ...] = ("Authorization", "Content-Type", "X-Request-ID"),
    ) -> None:
        self._origins = allowed_origins
        self._methods = allowed_methods
        self._headers = allowed_headers

    async def __call__(self, request: Request, handler: Handler) -> Response:
        origin = request.header("origin")

        if origin and "*" not in self._origins and origin not in self._origins:
            return Response.json({"success": False, "error": "Origin not allowed"}, status=403)

        if request.method == "OPTIONS":
            return Response(status=204, headers=self._cors_headers(origin))

        response = await handler(request)
        response.headers.update(self._cors_headers(origin))
        return response

    def _cors_headers(self, origin: Optional[str]) -> dict[str, str]:
        return {
            "access-control-allow-origin": "*" if "*" in self._origins else (origin or ""),
            "access-control-allow-methods": ", ".join(self._methods),
            "access-control-allow-headers": ", ".join(self._headers),
            "access-control-max-age": "86400",
        }


class AuthMiddleware:
    """
    Bearer token authentication.

    Public routes and unmatched paths pass through untouched. A missing or
    non-bearer Authorization header answers 401; a token that fails
    verification (malformed, expired, bad signature) answers 403.
    """

    __slots__ = ("_authenticator", "_logger")

    def __init__(self, authenticator: Authenticator) -> None:
        self._authenticator = authenticator
        self._logger = StructuredLogger("zenith.auth")

    async def __call__(self, request: Request, handler: Handler) -> Response:
        if request.route is None or request.route.public:
            return await handler(request)

        auth_header = request.header("authorization", "") or ""
        token = ""
        if auth_header.lower().startswith(_BEARER):
            token = auth_header[len(_BEARER):].strip()
        if not token:
            return Response.from_error(AuthError.unauthorized("No token provided"))

        result = self._authenticator.authenticate(token)
        if result.is_err():
            self._logger.warning("Token rejected", code=result.error.code.name)
            return Response.from_error(result.error, status=403)

        request.principal_id = result.unwrap()
        return await handler(request)
