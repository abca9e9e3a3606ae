"""
Vector Search Stub

Keeps the shape of the vector-search endpoint without any ranking: it
returns up to ``top_k`` documents of the bucket in insertion order, each
with an opaque random score. No embeddings are computed and the query is
not consulted. Callers must not rely on scores meaning anything.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any, Optional

from zenith.core import constants as C
from zenith.core.config import StorageConfig
from zenith.core.errors import RequestError, ZenithError
from zenith.core.types import BucketId, Err, Ok, Result
from zenith.storage.documents import DocumentStore


@dataclass(frozen=True, slots=True)
class SearchHit:
    path: str
    payload: Any
    score: float

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "data": self.payload, "score": self.score}


class VectorSearchStub:
    """Non-semantic stand-in for similarity search."""

    __slots__ = ("_store", "_config", "_rng")

    def __init__(
        self,
        store: DocumentStore,
        config: Optional[StorageConfig] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._store = store
        self._config = config or StorageConfig()
        self._rng = rng or random.Random()

    async def search(
        self,
        bucket_id: BucketId,
        query: Any,
        top_k: Any = C.DEFAULT_SEARCH_TOP_K,
    ) -> Result[list[SearchHit], ZenithError]:
        if top_k is None:
            top_k = C.DEFAULT_SEARCH_TOP_K
        # bool is an int subclass; reject it explicitly
        if isinstance(top_k, bool) or not isinstance(top_k, int) or top_k < 1:
            return Err(RequestError.invalid_field("topK", top_k, "must be a positive integer"))
        top_k = min(top_k, self._config.max_search_results)

        snapshot = await self._store.snapshot(bucket_id)
        if snapshot.is_err():
            return snapshot

        return Ok([
            SearchHit(path=doc.path, payload=doc.payload, score=self._rng.random())
            for doc in snapshot.unwrap()[:top_k]
        ])
