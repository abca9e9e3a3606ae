"""Shared fixtures: an isolated engine per test, with cheap bcrypt."""

from __future__ import annotations

import json
from dataclasses import replace
from typing import Any

import pytest

from zenith.api.app import build_router
from zenith.api.router import Request, Response, ZenithRouter
from zenith.core.config import AuthConfig, ZenithConfig
from zenith.core.errors import ErrorKind
from zenith.core.types import Result
from zenith.engine import ZenithEngine

TEST_SECRET = "test-signing-secret-0123456789abcdef"


def assert_ok(result: Result) -> Any:
    assert result.is_ok(), f"expected Ok, got {result!r}"
    return result.unwrap()


def assert_err(result: Result, kind: ErrorKind) -> Any:
    assert result.is_err(), f"expected Err({kind.label}), got {result!r}"
    assert result.error.kind is kind, f"expected {kind.label}, got {result.error.kind.label}"
    return result.error


@pytest.fixture
def config() -> ZenithConfig:
    return replace(
        ZenithConfig(),
        auth=AuthConfig(jwt_secret=TEST_SECRET, bcrypt_rounds=4),
    )


@pytest.fixture
def engine(config: ZenithConfig) -> ZenithEngine:
    return ZenithEngine(config)


@pytest.fixture
def router(engine: ZenithEngine) -> ZenithRouter:
    return build_router(engine)


@pytest.fixture
async def session(engine: ZenithEngine):
    """A registered principal."""
    return assert_ok(await engine.authenticator.register("a@x.com", "pw", "A"))


@pytest.fixture
async def bucket(engine: ZenithEngine, session):
    return assert_ok(await engine.buckets.create_bucket(session.principal_id, "b1"))


async def call(
    router: ZenithRouter,
    method: str,
    url: str,
    body: Any = None,
    token: str | None = None,
    raw: bytes | None = None,
    headers: dict[str, str] | None = None,
) -> Response:
    """Dispatch one in-process request through the full middleware chain."""
    h = dict(headers or {})
    if token is not None:
        h["Authorization"] = f"Bearer {token}"
    if raw is None:
        raw = b"" if body is None else json.dumps(body).encode()
    return await router.dispatch(Request.from_raw(method, url, headers=h, body=raw))
