"""
Engine: Composition Root for the Key-Path Store

Builds every component from one configuration and owns their lifetime.
There are no module-level stores; two engines never share state.

Usage:
    engine = ZenithEngine(config)

    session = (await engine.authenticator.register("a@x.com", "pw", "A")).unwrap()
    bucket = (await engine.buckets.create_bucket(session.principal_id, "b1")).unwrap()
    await engine.documents.write(bucket.bucket_id, "/u/1", {"n": 1})
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Optional

from zenith.auth.authenticator import Authenticator
from zenith.auth.directory import PrincipalDirectory
from zenith.auth.tokens import TokenCodec
from zenith.core.config import ZenithConfig
from zenith.core.types import PrincipalId
from zenith.observability.metrics import MetricsCollector
from zenith.storage.buckets import BucketRegistry, BucketStats
from zenith.storage.documents import DocumentStore
from zenith.storage.search import VectorSearchStub

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class EngineStats:
    """Per-principal aggregate returned by GET /stats."""
    buckets: BucketStats
    uptime_seconds: float

    def to_dict(self) -> dict[str, Any]:
        return {**self.buckets.to_dict(), "uptimeSeconds": round(self.uptime_seconds, 3)}


class ZenithEngine:
    """Wires principal directory, authenticator, registry, store and search."""

    __slots__ = (
        "config",
        "metrics",
        "directory",
        "tokens",
        "authenticator",
        "buckets",
        "documents",
        "search",
        "_started",
    )

    def __init__(
        self,
        config: Optional[ZenithConfig] = None,
        metrics: Optional[MetricsCollector] = None,
    ) -> None:
        self.config = config or ZenithConfig()
        self.metrics = metrics or MetricsCollector()

        self.directory = PrincipalDirectory()
        self.tokens = TokenCodec(self.config.auth)
        self.authenticator = Authenticator(
            self.directory,
            self.tokens,
            self.config.auth,
            metrics=self.metrics,
        )
        self.buckets = BucketRegistry(self.config.storage, metrics=self.metrics)
        self.documents = DocumentStore(self.buckets, self.config.storage, metrics=self.metrics)
        self.search = VectorSearchStub(self.documents, self.config.storage)

        self._started = time.monotonic()
        logger.info("Zenith engine initialized")

    @property
    def uptime_seconds(self) -> float:
        return time.monotonic() - self._started

    async def stats(self, principal_id: PrincipalId) -> EngineStats:
        return EngineStats(
            buckets=await self.buckets.stats_for(principal_id),
            uptime_seconds=self.uptime_seconds,
        )
