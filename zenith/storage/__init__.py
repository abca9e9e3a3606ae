"""
Storage module: bucket registry, document store, search stub.
"""

from zenith.storage.protocols import ItemCountSink, PartitionProvisioner
from zenith.storage.buckets import Bucket, BucketRegistry, BucketStats
from zenith.storage.documents import (
    BatchItem,
    BatchItemResult,
    BatchStatus,
    Document,
    DocumentMetadata,
    DocumentStore,
    DocumentSummary,
    normalize_path,
)
from zenith.storage.search import SearchHit, VectorSearchStub

__all__ = [
    "ItemCountSink",
    "PartitionProvisioner",
    "Bucket",
    "BucketRegistry",
    "BucketStats",
    "BatchItem",
    "BatchItemResult",
    "BatchStatus",
    "Document",
    "DocumentMetadata",
    "DocumentStore",
    "DocumentSummary",
    "normalize_path",
    "SearchHit",
    "VectorSearchStub",
]
