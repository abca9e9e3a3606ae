"""
ASGI adapter: serves a ZenithRouter under uvicorn or any ASGI server.

Translates the http scope into a Request, dispatches it, and writes the
Response back. Lifespan events are acknowledged; websocket scopes are
not served.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, MutableMapping
from urllib.parse import parse_qs

from zenith.api.router import Request, ZenithRouter

logger = logging.getLogger(__name__)

Scope = MutableMapping[str, Any]
Message = MutableMapping[str, Any]
Receive = Callable[[], Awaitable[Message]]
Send = Callable[[Message], Awaitable[None]]


class ZenithASGI:
    """ASGI application wrapping a router."""

    __slots__ = ("router",)

    def __init__(self, router: ZenithRouter) -> None:
        self.router = router

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        scope_type = scope.get("type")
        if scope_type == "lifespan":
            await self._lifespan(receive, send)
            return
        if scope_type != "http":
            raise RuntimeError(f"Unsupported ASGI scope type: {scope_type}")

        request = Request(
            method=scope["method"].upper(),
            path=scope.get("path") or "/",
            query_params=parse_qs((scope.get("query_string") or b"").decode("latin-1")),
            headers={
                k.decode("latin-1").lower(): v.decode("latin-1")
                for k, v in scope.get("headers") or []
            },
            body=await self._read_body(receive),
        )

        response = await self.router.dispatch(request)

        headers = dict(response.headers)
        headers.setdefault("content-length", str(len(response.body)))
        await send({
            "type": "http.response.start",
            "status": response.status,
            "headers": [[k.encode("latin-1"), v.encode("latin-1")] for k, v in headers.items()],
        })
        await send({"type": "http.response.body", "body": response.body})

    @staticmethod
    async def _read_body(receive: Receive) -> bytes:
        chunks: list[bytes] = []
        while True:
            message = await receive()
            if message["type"] == "http.disconnect":
                break
            chunks.append(message.get("body", b""))
            if not message.get("more_body", False):
                break
        return b"".join(chunks)

    @staticmethod
    async def _lifespan(receive: Receive, send: Send) -> None:
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                logger.info("Zenith API starting")
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                logger.info("Zenith API stopping")
                await send({"type": "lifespan.shutdown.complete"})
                return
