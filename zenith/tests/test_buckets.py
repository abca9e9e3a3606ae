"""
Unit Tests: Bucket Registry

Tests:
    - Bucket creation defaults and validation
    - Ownership gate (NotFound vs Forbidden)
    - Per-owner listing and stats
"""

from __future__ import annotations

import asyncio

import pytest

from zenith.core.errors import ErrorKind
from zenith.core.types import BucketId, PrincipalId
from zenith.storage.buckets import BucketRegistry
from zenith.storage.documents import DocumentStore
from zenith.tests.conftest import assert_err, assert_ok


@pytest.fixture
def registry() -> BucketRegistry:
    registry = BucketRegistry()
    DocumentStore(registry)
    return registry


class TestCreateBucket:
    """Tests for BucketRegistry.create_bucket."""

    async def test_defaults(self, registry):
        owner = PrincipalId.generate()
        bucket = assert_ok(await registry.create_bucket(owner, "b1"))
        assert bucket.owner == owner
        assert bucket.name == "b1"
        assert bucket.durability == "standard"
        assert bucket.region == "us-east-1"
        assert bucket.item_count == 0

    async def test_explicit_durability_and_region(self, registry):
        bucket = assert_ok(await registry.create_bucket(
            PrincipalId.generate(), "b1", durability="absolute", region="eu-west-1"
        ))
        assert bucket.durability == "absolute"
        assert bucket.region == "eu-west-1"

    async def test_unknown_durability_accepted(self, registry):
        bucket = assert_ok(await registry.create_bucket(PrincipalId.generate(), "b1", durability="glacier"))
        assert bucket.durability == "glacier"

    @pytest.mark.parametrize("name", [None, "", 42])
    async def test_name_required(self, registry, name):
        error = assert_err(await registry.create_bucket(PrincipalId.generate(), name), ErrorKind.BAD_REQUEST)
        assert error.context["field"] == "name"

    async def test_names_not_unique(self, registry):
        owner = PrincipalId.generate()
        first = assert_ok(await registry.create_bucket(owner, "same"))
        second = assert_ok(await registry.create_bucket(owner, "same"))
        assert first.bucket_id != second.bucket_id

    async def test_returned_bucket_is_a_copy(self, registry):
        owner = PrincipalId.generate()
        bucket = assert_ok(await registry.create_bucket(owner, "b1"))
        bucket.item_count = 99
        stored = assert_ok(await registry.get_bucket_for_access(bucket.bucket_id, owner))
        assert stored.item_count == 0

    async def test_requires_partition_provisioner(self):
        with pytest.raises(RuntimeError):
            await BucketRegistry().create_bucket(PrincipalId.generate(), "b1")


class TestAccessGate:
    """Tests for BucketRegistry.get_bucket_for_access."""

    async def test_owner_allowed(self, registry):
        owner = PrincipalId.generate()
        bucket = assert_ok(await registry.create_bucket(owner, "b1"))
        assert assert_ok(await registry.get_bucket_for_access(str(bucket.bucket_id), owner)).name == "b1"

    async def test_other_principal_forbidden(self, registry):
        bucket = assert_ok(await registry.create_bucket(PrincipalId.generate(), "b1"))
        error = assert_err(
            await registry.get_bucket_for_access(bucket.bucket_id, PrincipalId.generate()),
            ErrorKind.FORBIDDEN,
        )
        assert error.message.startswith("Access denied")

    @pytest.mark.parametrize("bucket_id", ["nope", "", str(BucketId.generate())])
    async def test_unknown_bucket_not_found(self, registry, bucket_id):
        assert_err(
            await registry.get_bucket_for_access(bucket_id, PrincipalId.generate()),
            ErrorKind.NOT_FOUND,
        )


class TestListingAndStats:
    """Tests for list_buckets and stats_for."""

    async def test_lists_only_own_buckets_in_creation_order(self, registry):
        alice, bob = PrincipalId.generate(), PrincipalId.generate()
        for name in ("a1", "a2", "a3"):
            assert_ok(await registry.create_bucket(alice, name))
        assert_ok(await registry.create_bucket(bob, "b1"))

        assert [b.name for b in await registry.list_buckets(alice)] == ["a1", "a2", "a3"]
        assert [b.name for b in await registry.list_buckets(bob)] == ["b1"]
        assert await registry.list_buckets(PrincipalId.generate()) == []

    async def test_concurrent_creates_all_land(self, registry):
        owner = PrincipalId.generate()
        results = await asyncio.gather(*[registry.create_bucket(owner, f"b{i}") for i in range(20)])
        assert all(r.is_ok() for r in results)
        assert len({r.unwrap().bucket_id for r in results}) == 20
        assert len(await registry.list_buckets(owner)) == 20

    async def test_stats(self, registry):
        owner = PrincipalId.generate()
        b1 = assert_ok(await registry.create_bucket(owner, "b1"))
        assert_ok(await registry.create_bucket(owner, "b2", region="eu-west-1"))
        registry.record_item_count(b1.bucket_id, 3)

        stats = await registry.stats_for(owner)
        assert stats.buckets_count == 2
        assert stats.total_items == 3
        assert stats.regions == ("us-east-1", "eu-west-1")

    async def test_stats_for_principal_without_buckets(self, registry):
        stats = await registry.stats_for(PrincipalId.generate())
        assert stats.to_dict() == {"bucketsCount": 0, "totalItems": 0, "regions": []}
