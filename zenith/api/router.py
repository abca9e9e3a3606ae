"""
HTTP Router: Request Routing and Handler Dispatch

Provides lightweight routing without a web framework.
Supports:
- Path parameter extraction, including greedy ``{name:path}`` segments
- Query string parsing
- Method-based dispatch with 404 / 405 answers
- Middleware chains that see every request, matched or not
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, Sequence
from urllib.parse import parse_qs, urlparse

from zenith.core.errors import InternalError, ZenithError
from zenith.core.types import PrincipalId

logger = logging.getLogger(__name__)


@dataclass
class Request:
    """HTTP request representation."""
    method: str
    path: str
    query_params: dict[str, list[str]] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    path_params: dict[str, str] = field(default_factory=dict)
    route: Optional[Route] = None
    principal_id: Optional[PrincipalId] = None
    request_id: Optional[str] = None

    @classmethod
    def from_raw(
        cls,
        method: str,
        url: str,
        headers: Optional[dict[str, str]] = None,
        body: bytes = b"",
    ) -> Request:
        """Parse request from raw HTTP data."""
        parsed = urlparse(url)
        return cls(
            method=method.upper(),
            path=parsed.path,
            query_params=parse_qs(parsed.query),
            headers={k.lower(): v for k, v in (headers or {}).items()},
            body=body,
        )

    def json(self) -> Any:
        """Parse body as JSON; None when the body is empty."""
        if not self.body:
            return None
        return json.loads(self.body)

    def header(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get header value (case-insensitive)."""
        return self.headers.get(key.lower(), default)


@dataclass
class Response:
    """HTTP response representation."""
    status: int = 200
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def json(
        cls,
        data: Any,
        status: int = 200,
        headers: Optional[dict[str, str]] = None,
    ) -> Response:
        body = json.dumps(data, default=str).encode()
        h = dict(headers or {})
        h["content-type"] = "application/json"
        return cls(status=status, body=body, headers=h)

    @classmethod
    def text(cls, text: str, status: int = 200, content_type: str = "text/plain") -> Response:
        return cls(
            status=status,
            body=text.encode(),
            headers={"content-type": f"{content_type}; charset=utf-8"},
        )

    @classmethod
    def from_error(cls, error: ZenithError, status: Optional[int] = None) -> Response:
        """Error response; status defaults to the error kind's HTTP status."""
        return cls.json(
            {"success": False, **error.to_dict()},
            status=status or error.kind.http_status,
        )

    @classmethod
    def not_found(cls) -> Response:
        return cls.json({"success": False, "error": "Not found", "kind": "NotFound"}, status=404)

    @classmethod
    def method_not_allowed(cls) -> Response:
        return cls.json(
            {"success": False, "error": "Method not allowed", "kind": "BadRequest"},
            status=405,
        )

    def json_body(self) -> Any:
        return json.loads(self.body) if self.body else None


# Handler function signature
Handler = Callable[[Request], Awaitable[Response]]

# Middleware function signature
Middleware = Callable[[Request, Handler], Awaitable[Response]]


@dataclass
class Route:
    """Route definition."""
    method: str
    template: str
    pattern: re.Pattern
    handler: Handler
    param_names: list[str]
    public: bool = False

    @classmethod
    def create(cls, method: str, path: str, handler: Handler, public: bool = False) -> Route:
        """
        Create route from path template.

        ``{name}`` matches one segment; ``{name:path}`` matches the rest
        of the path, slashes included.
        """
        param_names: list[str] = []

        def replace_param(match: re.Match) -> str:
            name, converter = match.group(1), match.group(2)
            param_names.append(name)
            expr = ".+" if converter == "path" else "[^/]+"
            return f"(?P<{name}>{expr})"

        pattern_str = re.sub(r"\{(\w+)(?::(\w+))?\}", replace_param, path)

        return cls(
            method=method.upper(),
            template=path,
            pattern=re.compile(f"^{pattern_str}$"),
            handler=handler,
            param_names=param_names,
            public=public,
        )

    def match(self, method: str, path: str) -> Optional[dict[str, str]]:
        if method.upper() != self.method:
            return None
        match = self.pattern.match(path)
        if not match:
            return None
        return match.groupdict()


class ZenithRouter:
    """
    HTTP request router.

    Usage:
        router = ZenithRouter(prefix="/api")

        async def list_items(request: Request) -> Response:
            bucket_id = request.path_params["bucket_id"]
            ...

        router.add("GET", "/buckets/{bucket_id}/items", list_items)

        response = await router.dispatch(request)
    """

    __slots__ = ("_routes", "_middleware", "_prefix")

    def __init__(self, prefix: str = "") -> None:
        self._routes: list[Route] = []
        self._middleware: list[Middleware] = []
        self._prefix = prefix.rstrip("/")

    def route(
        self,
        path: str,
        methods: Sequence[str] = ("GET",),
        public: bool = False,
    ) -> Callable[[Handler], Handler]:
        """Register route decorator."""
        def decorator(handler: Handler) -> Handler:
            full_path = self._prefix + path
            for method in methods:
                self._routes.append(Route.create(method, full_path, handler, public=public))
            return handler
        return decorator

    def add(self, method: str, path: str, handler: Handler, public: bool = False) -> None:
        self.route(path, [method], public=public)(handler)

    def use(self, middleware: Middleware) -> None:
        """Add middleware; the first added runs outermost."""
        self._middleware.append(middleware)

    async def dispatch(self, request: Request) -> Response:
        """Route request through the middleware chain to its handler."""
        for route in self._routes:
            params = route.match(request.method, request.path)
            if params is not None:
                request.path_params = params
                request.route = route
                break

        final_handler: Handler = self._invoke
        for mw in reversed(self._middleware):
            final_handler = self._wrap_middleware(mw, final_handler)

        try:
            return await final_handler(request)
        except Exception as e:
            # Middleware fault; handler faults are converted in _invoke
            return self._unexpected(request, e)

    async def _invoke(self, request: Request) -> Response:
        if request.route is not None:
            try:
                return await request.route.handler(request)
            except Exception as e:
                return self._unexpected(request, e)

        # Path exists but wrong method
        for route in self._routes:
            if route.pattern.match(request.path):
                return Response.method_not_allowed()
        return Response.not_found()

    @staticmethod
    def _unexpected(request: Request, error: Exception) -> Response:
        logger.exception(f"Unhandled error in {request.method} {request.path}")
        return Response.from_error(InternalError.unexpected(error))

    @staticmethod
    def _wrap_middleware(middleware: Middleware, handler: Handler) -> Handler:
        async def wrapped(request: Request) -> Response:
            return await middleware(request, handler)
        return wrapped
