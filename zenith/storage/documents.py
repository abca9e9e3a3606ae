"""
Document Store: Per-Bucket Path to JSON Document Engine

Implements:
- write / read / delete of a single document addressed by (bucket, path)
- list of document summaries for a bucket
- batch_write: ordered best-effort application of many writes

Storage Model:
    One partition per bucket, each an insertion-ordered mapping
    path -> stored document, guarded by its own asyncio.Lock. Mutations
    to one bucket are serialized; unrelated buckets never contend.

    Payloads are kept in their compact JSON serialization. Reads decode a
    fresh copy, so neither writers nor readers can alias stored state.

Invariants:
    - A path is unique within its bucket
    - created_at survives overwrites; updated_at does not
    - After every mutation the bucket's item_count equals len(partition)

Authorization:
    The store trusts that callers have passed
    BucketRegistry.get_bucket_for_access; it only requires the partition
    to exist.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Sequence

from zenith.core import constants as C
from zenith.core.config import StorageConfig
from zenith.core.errors import RequestError, StorageError, ZenithError
from zenith.core.types import BucketId, Err, Ok, Result, isoformat, utcnow
from zenith.observability.metrics import MetricsCollector
from zenith.storage.protocols import ItemCountSink

logger = logging.getLogger(__name__)


# =============================================================================
# DOCUMENT MODELS
# =============================================================================
@dataclass(frozen=True, slots=True)
class DocumentMetadata:
    """Bookkeeping attached to every stored document."""
    created_at: datetime
    updated_at: datetime
    size_bytes: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
            "size": self.size_bytes,
        }


@dataclass(frozen=True, slots=True)
class Document:
    """A decoded document as returned by read."""
    path: str
    payload: Any
    metadata: DocumentMetadata


@dataclass(frozen=True, slots=True)
class DocumentSummary:
    """One row of a bucket listing."""
    path: str
    size_bytes: int
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "size": self.size_bytes,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }


@dataclass(frozen=True, slots=True)
class BatchItem:
    """One write of a batch."""
    path: Any
    payload: Any


class BatchStatus(Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class BatchItemResult:
    """Per-item outcome of batch_write, reported in input order."""
    index: int
    path: Any
    status: BatchStatus
    metadata: Optional[DocumentMetadata] = None
    error: Optional[ZenithError] = None

    @property
    def succeeded(self) -> bool:
        return self.status is BatchStatus.SUCCEEDED

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "index": self.index,
            "path": self.path,
            "status": self.status.value,
        }
        if self.metadata is not None:
            data["metadata"] = self.metadata.to_dict()
        if self.error is not None:
            data["error"] = self.error.to_dict()
        return data


@dataclass(frozen=True, slots=True)
class _StoredDocument:
    serialized: str
    metadata: DocumentMetadata

    def decode(self, path: str) -> Document:
        return Document(path=path, payload=json.loads(self.serialized), metadata=self.metadata)


class _Partition:
    """Documents of a single bucket plus the lock serializing their mutation."""

    __slots__ = ("documents", "lock")

    def __init__(self) -> None:
        self.documents: dict[str, _StoredDocument] = {}
        self.lock = asyncio.Lock()


# =============================================================================
# PATH AND PAYLOAD HANDLING
# =============================================================================
def normalize_path(path: Any) -> Result[str, RequestError]:
    """
    Canonical form of a document path: exactly one leading '/'.

    "u/1" and "/u/1" address the same document. Nothing else is rewritten.
    """
    if not isinstance(path, str):
        return Err(RequestError.invalid_field("path", path, "must be a string"))
    if not path.startswith(C.PATH_SEPARATOR):
        path = C.PATH_SEPARATOR + path
    if path == C.PATH_SEPARATOR:
        return Err(RequestError.missing_field("path"))
    return Ok(path)


def encode_payload(path: str, payload: Any) -> Result[str, StorageError]:
    """Compact JSON serialization: no whitespace, non-ASCII kept as UTF-8."""
    try:
        return Ok(json.dumps(
            payload,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        ))
    except (TypeError, ValueError, RecursionError) as e:
        return Err(StorageError.invalid_payload(path, str(e), cause=e))


# =============================================================================
# DOCUMENT STORE
# =============================================================================
class DocumentStore:
    """
    Per-bucket document engine.

    Usage:
        registry = BucketRegistry()
        store = DocumentStore(registry)

        meta = (await store.write(bucket_id, "/u/1", {"n": 1})).unwrap()
        doc = (await store.read(bucket_id, "/u/1")).unwrap()
    """

    __slots__ = ("_partitions", "_counts", "_config", "_ops")

    def __init__(
        self,
        registry: ItemCountSink,
        config: Optional[StorageConfig] = None,
        metrics: Optional[MetricsCollector] = None,
    ) -> None:
        self._partitions: dict[BucketId, _Partition] = {}
        self._counts = registry
        self._config = config or StorageConfig()
        self._ops = (metrics or MetricsCollector()).counter(
            "zenith_document_ops_total",
            label_names=["op", "outcome"],
            help_text="Document operations by outcome",
        )
        attach = getattr(registry, "attach_partitions", None)
        if attach is not None:
            attach(self)

    # -------------------------------------------------------------------------
    # PartitionProvisioner
    # -------------------------------------------------------------------------
    def open_partition(self, bucket_id: BucketId) -> None:
        if bucket_id in self._partitions:
            raise KeyError(f"Partition for bucket {bucket_id} already exists")
        self._partitions[bucket_id] = _Partition()

    # -------------------------------------------------------------------------
    # Single-document operations
    # -------------------------------------------------------------------------
    async def write(
        self,
        bucket_id: BucketId,
        path: Any,
        payload: Any,
    ) -> Result[DocumentMetadata, ZenithError]:
        """
        Create or overwrite the document at ``path``.

        Fails only with InvalidPayload (unserializable payload) or
        BadRequest (empty path) once the bucket exists.
        """
        partition = self._partition(bucket_id)
        if partition.is_err():
            return partition

        part = partition.unwrap()
        async with part.lock:
            result = self._put(bucket_id, part, path, payload)

        self._ops.inc(op="write", outcome="ok" if result.is_ok() else "error")
        return result

    async def read(
        self,
        bucket_id: BucketId,
        path: Any,
    ) -> Result[Document, ZenithError]:
        """Exact-path lookup; no prefix or wildcard matching."""
        partition = self._partition(bucket_id)
        if partition.is_err():
            return partition
        normalized = normalize_path(path)
        if normalized.is_err():
            return normalized

        key = normalized.unwrap()
        stored = partition.unwrap().documents.get(key)
        if stored is None:
            self._ops.inc(op="read", outcome="miss")
            return Err(StorageError.document_not_found(str(bucket_id), key))

        self._ops.inc(op="read", outcome="ok")
        return Ok(stored.decode(key))

    async def delete(
        self,
        bucket_id: BucketId,
        path: Any,
    ) -> Result[str, ZenithError]:
        """
        Remove the document at ``path`` and return its normalized path.

        A second delete of the same path fails with NotFound.
        """
        partition = self._partition(bucket_id)
        if partition.is_err():
            return partition
        normalized = normalize_path(path)
        if normalized.is_err():
            return normalized

        key = normalized.unwrap()
        part = partition.unwrap()
        async with part.lock:
            if key not in part.documents:
                self._ops.inc(op="delete", outcome="miss")
                return Err(StorageError.document_not_found(str(bucket_id), key))
            del part.documents[key]
            self._counts.record_item_count(bucket_id, len(part.documents))

        self._ops.inc(op="delete", outcome="ok")
        return Ok(key)

    async def list_items(self, bucket_id: BucketId) -> Result[list[DocumentSummary], ZenithError]:
        """Summaries of every live document, in insertion order."""
        partition = self._partition(bucket_id)
        if partition.is_err():
            return partition

        part = partition.unwrap()
        async with part.lock:
            return Ok([
                DocumentSummary(
                    path=path,
                    size_bytes=stored.metadata.size_bytes,
                    created_at=stored.metadata.created_at,
                    updated_at=stored.metadata.updated_at,
                )
                for path, stored in part.documents.items()
            ])

    async def snapshot(self, bucket_id: BucketId) -> Result[list[Document], ZenithError]:
        """Decoded copies of every live document, in insertion order."""
        partition = self._partition(bucket_id)
        if partition.is_err():
            return partition

        part = partition.unwrap()
        async with part.lock:
            return Ok([stored.decode(path) for path, stored in part.documents.items()])

    # -------------------------------------------------------------------------
    # Batch operations
    # -------------------------------------------------------------------------
    async def batch_write(
        self,
        bucket_id: BucketId,
        items: Sequence[BatchItem],
    ) -> Result[list[BatchItemResult], ZenithError]:
        """
        Apply every item's write in order. Ordered best-effort, NOT atomic.

        A failing item is reported with its error and does not roll back
        earlier items or stop later ones. The whole batch holds the bucket
        lock, so no other writer interleaves with it.
        """
        if len(items) > self._config.max_batch_items:
            return Err(RequestError.batch_too_large(len(items), self._config.max_batch_items))

        partition = self._partition(bucket_id)
        if partition.is_err():
            return partition

        part = partition.unwrap()
        results: list[BatchItemResult] = []
        async with part.lock:
            for index, item in enumerate(items):
                outcome = self._put(bucket_id, part, item.path, item.payload)
                if outcome.is_ok():
                    results.append(BatchItemResult(
                        index=index,
                        path=self._display_path(item.path),
                        status=BatchStatus.SUCCEEDED,
                        metadata=outcome.unwrap(),
                    ))
                else:
                    results.append(BatchItemResult(
                        index=index,
                        path=item.path,
                        status=BatchStatus.FAILED,
                        error=outcome.error,
                    ))

        failed = sum(1 for r in results if not r.succeeded)
        self._ops.inc(len(results) - failed, op="batch_write", outcome="ok")
        self._ops.inc(failed, op="batch_write", outcome="error")
        if failed:
            logger.info(f"Batch write to {bucket_id}: {failed}/{len(results)} items failed")
        return Ok(results)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------
    def _partition(self, bucket_id: BucketId) -> Result[_Partition, StorageError]:
        part = self._partitions.get(bucket_id)
        if part is None:
            return Err(StorageError.bucket_not_found(str(bucket_id)))
        return Ok(part)

    def _put(
        self,
        bucket_id: BucketId,
        part: _Partition,
        path: Any,
        payload: Any,
    ) -> Result[DocumentMetadata, ZenithError]:
        """Write one document; caller holds ``part.lock``."""
        normalized = normalize_path(path)
        if normalized.is_err():
            return normalized
        key = normalized.unwrap()

        encoded = encode_payload(key, payload)
        if encoded.is_err():
            return encoded
        serialized = encoded.unwrap()

        now = utcnow()
        previous = part.documents.get(key)
        metadata = DocumentMetadata(
            created_at=previous.metadata.created_at if previous is not None else now,
            updated_at=now,
            size_bytes=len(serialized.encode("utf-8")),
        )
        part.documents[key] = _StoredDocument(serialized=serialized, metadata=metadata)
        self._counts.record_item_count(bucket_id, len(part.documents))
        return Ok(metadata)

    @staticmethod
    def _display_path(path: Any) -> Any:
        normalized = normalize_path(path)
        return normalized.unwrap() if normalized.is_ok() else path
