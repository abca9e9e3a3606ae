"""
Storage Protocol Definitions: Seams Between Registry and Document Store

Structural subtyping protocols (PEP 544) that let the bucket registry and
the document store cooperate without importing each other:

- PartitionProvisioner: the registry asks the document store to open an
  empty partition while a bucket is being created
- ItemCountSink: the document store reports a bucket's live document
  count after every mutation

Ownership:
    The registry owns bucket records; the document store owns partitions
    and is the only caller of ItemCountSink.record_item_count.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from zenith.core.types import BucketId


@runtime_checkable
class PartitionProvisioner(Protocol):
    """Creates the empty document partition backing a new bucket."""

    def open_partition(self, bucket_id: BucketId) -> None:
        """
        Create an empty partition for ``bucket_id``.

        Must be synchronous: it runs inside the registry's critical section
        so no caller ever observes a bucket without its partition.
        """
        ...


@runtime_checkable
class ItemCountSink(Protocol):
    """Receives the authoritative live document count of a bucket."""

    def record_item_count(self, bucket_id: BucketId, count: int) -> None:
        ...
