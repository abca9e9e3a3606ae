"""
Bucket Registry: Bucket Metadata and the Ownership Gate

Provides:
- Bucket creation with atomic partition provisioning
- Per-owner listing in creation order
- get_bucket_for_access: the single authorization gate every document
  operation passes through
- Item-count bookkeeping fed by the document store

Schema:
    buckets (
        bucket_id    UUID PRIMARY KEY,
        name         STRING,           -- not unique
        owner        UUID,             -- immutable
        durability   STRING,           -- standard | absolute | caller label
        region       STRING,
        item_count   INT,              -- == live documents, always
        created_at   TIMESTAMP
    )
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Optional, Union

from zenith.core.config import StorageConfig
from zenith.core.errors import AuthError, RequestError, StorageError, ZenithError
from zenith.core.types import (
    BucketId,
    Err,
    Ok,
    PrincipalId,
    Result,
    isoformat,
    utcnow,
)
from zenith.observability.metrics import MetricsCollector
from zenith.storage.protocols import PartitionProvisioner

logger = logging.getLogger(__name__)


# =============================================================================
# BUCKET MODEL
# =============================================================================
@dataclass(slots=True)
class Bucket:
    """
    Bucket metadata record.

    The registry hands out copies; only the registry mutates its own
    records, and only ``item_count`` ever changes after creation.
    """
    bucket_id: BucketId
    name: str
    owner: PrincipalId
    durability: str
    region: str
    item_count: int = 0
    created_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "bucketId": str(self.bucket_id),
            "name": self.name,
            "owner": str(self.owner),
            "durability": self.durability,
            "region": self.region,
            "itemCount": self.item_count,
            "createdAt": isoformat(self.created_at),
        }


@dataclass(frozen=True, slots=True)
class BucketStats:
    """Aggregate view of one principal's buckets."""
    buckets_count: int
    total_items: int
    regions: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "bucketsCount": self.buckets_count,
            "totalItems": self.total_items,
            "regions": list(self.regions),
        }


# =============================================================================
# BUCKET REGISTRY
# =============================================================================
class BucketRegistry:
    """
    Owner of all bucket records.

    Usage:
        registry = BucketRegistry(config.storage)
        store = DocumentStore(registry)      # attaches itself as provisioner

        bucket = (await registry.create_bucket(owner, "b1")).unwrap()
        checked = await registry.get_bucket_for_access(bucket.bucket_id, owner)
    """

    __slots__ = ("_config", "_buckets", "_by_owner", "_partitions", "_lock", "_created")

    def __init__(
        self,
        config: Optional[StorageConfig] = None,
        metrics: Optional[MetricsCollector] = None,
    ) -> None:
        self._config = config or StorageConfig()
        # Insertion-ordered: bucket_id -> Bucket
        self._buckets: dict[BucketId, Bucket] = {}
        self._by_owner: dict[PrincipalId, list[BucketId]] = {}
        self._partitions: Optional[PartitionProvisioner] = None
        self._lock = asyncio.Lock()
        self._created = (metrics or MetricsCollector()).counter(
            "zenith_buckets_created_total",
            help_text="Buckets created since start",
        )

    def attach_partitions(self, partitions: PartitionProvisioner) -> None:
        """Bind the document store that backs every bucket."""
        if self._partitions is not None and self._partitions is not partitions:
            raise RuntimeError("BucketRegistry already has a partition provisioner")
        self._partitions = partitions

    async def create_bucket(
        self,
        owner: PrincipalId,
        name: Optional[str],
        durability: Optional[str] = None,
        region: Optional[str] = None,
    ) -> Result[Bucket, ZenithError]:
        """
        Create a bucket owned by ``owner``.

        The registry entry and the empty partition are created in the same
        critical section with no await between them.
        """
        if not name or not isinstance(name, str):
            return Err(RequestError.missing_field("name"))
        for label, value in (("durability", durability), ("region", region)):
            if value is not None and (not isinstance(value, str) or not value):
                return Err(RequestError.invalid_field(label, value, "must be a non-empty string"))
        if self._partitions is None:
            raise RuntimeError("BucketRegistry has no partition provisioner attached")

        async with self._lock:
            bucket = Bucket(
                bucket_id=BucketId.generate(),
                name=name,
                owner=owner,
                durability=durability or self._config.default_durability,
                region=region or self._config.default_region,
            )
            self._partitions.open_partition(bucket.bucket_id)
            self._buckets[bucket.bucket_id] = bucket
            self._by_owner.setdefault(owner, []).append(bucket.bucket_id)

        self._created.inc()
        logger.info(f"Created bucket {bucket.bucket_id} for {owner}")
        return Ok(replace(bucket))

    async def list_buckets(self, principal_id: PrincipalId) -> list[Bucket]:
        """Buckets owned by ``principal_id`` in creation order (maybe empty)."""
        async with self._lock:
            return [
                replace(self._buckets[bucket_id])
                for bucket_id in self._by_owner.get(principal_id, ())
            ]

    async def get_bucket_for_access(
        self,
        bucket_id: Union[BucketId, str],
        principal_id: PrincipalId,
    ) -> Result[Bucket, ZenithError]:
        """
        Authorization gate for document operations.

        NotFound if the bucket is unknown (including unparsable ids),
        Forbidden if ``principal_id`` is not the owner.
        """
        bucket = self._lookup(bucket_id)
        if bucket is None:
            return Err(StorageError.bucket_not_found(str(bucket_id)))
        if bucket.owner != principal_id:
            logger.warning(f"Principal {principal_id} denied access to bucket {bucket.bucket_id}")
            return Err(AuthError.forbidden(f"bucket {bucket.bucket_id}", "access"))
        return Ok(replace(bucket))

    def record_item_count(self, bucket_id: BucketId, count: int) -> None:
        """Called by the document store after each mutation of ``bucket_id``."""
        bucket = self._buckets.get(bucket_id)
        if bucket is None:
            raise KeyError(f"Unknown bucket {bucket_id}")
        bucket.item_count = count

    async def stats_for(self, principal_id: PrincipalId) -> BucketStats:
        buckets = await self.list_buckets(principal_id)
        return BucketStats(
            buckets_count=len(buckets),
            total_items=sum(b.item_count for b in buckets),
            regions=tuple(b.region for b in buckets),
        )

    def _lookup(self, bucket_id: Union[BucketId, str]) -> Optional[Bucket]:
        if isinstance(bucket_id, str):
            parsed = BucketId.from_string(bucket_id)
            if parsed.is_err():
                return None
            bucket_id = parsed.unwrap()
        return self._buckets.get(bucket_id)
