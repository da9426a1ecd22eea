"""Integration tests for object store lifecycle operations."""

from __future__ import annotations

import hashlib
from pathlib import Path

import pytest

from fs_object_store.adapters.outbound.filesystem_store import FilesystemStore
from fs_object_store.adapters.outbound.path_resolver import ResourceKind
from fs_object_store.domain.entities.object import StoredObject
from fs_object_store.domain.entities.subresource import Subresource
from fs_object_store.ports.inbound import InvalidKeyError


async def stream(data: bytes, size: int = 3):
    for offset in range(0, len(data), size):
        yield data[offset:offset + size]


@pytest.mark.integration
class TestBuckets:
    """Bucket lifecycle."""

    @pytest.mark.asyncio
    async def test_put_get_list_delete(self, store: FilesystemStore):
        assert await store.get_bucket("photos") is None

        bucket = await store.put_bucket("photos")
        assert bucket.name == "photos"
        assert bucket.created_at.tzinfo is not None

        await store.put_bucket("photos")  # idempotent
        await store.put_bucket("archive")
        assert [b.name for b in await store.list_buckets()] == ["archive", "photos"]

        await store.delete_bucket("photos")
        assert await store.get_bucket("photos") is None
        await store.delete_bucket("photos")

    @pytest.mark.asyncio
    async def test_delete_bucket_is_recursive(self, store: FilesystemStore):
        await store.put_bucket("b")
        await store.put_object(StoredObject("b", "deep/key", b"x"))
        await store.delete_bucket("b")
        assert not store.resolver.bucket_path("b").exists()

    @pytest.mark.asyncio
    async def test_list_buckets_empty_root(self, store: FilesystemStore):
        assert await store.list_buckets() == []

    @pytest.mark.asyncio
    async def test_reset(self, store: FilesystemStore):
        await store.put_bucket("a")
        await store.put_object(StoredObject("b", "k", b"x"))
        await store.reset()
        assert await store.list_buckets() == []


@pytest.mark.integration
class TestObjects:
    """Object round trips, ranges, copies and deletes."""

    @pytest.mark.asyncio
    async def test_round_trip_whole(self, store: FilesystemStore, sample_object_data: bytes):
        await store.put_bucket("b")
        result = await store.put_object(
            StoredObject("b", "greeting.txt", sample_object_data, {"Content-Type": "text/plain", "x-amz-meta-lang": "en"})
        )
        assert result.md5 == hashlib.md5(sample_object_data).hexdigest()

        obj = await store.get_object("b", "greeting.txt")
        assert await obj.read() == sample_object_data
        assert obj.etag == result.md5
        assert obj.size == len(sample_object_data)
        assert obj.content_type == "text/plain"
        assert obj.user_metadata == {"lang": "en"}
        assert obj.last_modified is not None
        assert obj.range is None

    @pytest.mark.asyncio
    async def test_round_trip_streamed(self, store: FilesystemStore, sample_object_data: bytes):
        whole = await store.put_object(StoredObject("b", "whole", sample_object_data))
        streamed = await store.put_object(StoredObject("b", "streamed", stream(sample_object_data)))
        assert streamed == whole
        assert await (await store.get_object("b", "streamed")).read() == sample_object_data

    @pytest.mark.asyncio
    async def test_declared_length_is_ignored(self, store: FilesystemStore):
        await store.put_object(StoredObject("b", "k", b"12345", {"content-length": "999"}))
        assert (await store.get_object("b", "k")).size == 5

    @pytest.mark.asyncio
    async def test_overwrite(self, store: FilesystemStore):
        await store.put_object(StoredObject("b", "k", b"first"))
        await store.put_object(StoredObject("b", "k", b"second"))
        assert await (await store.get_object("b", "k")).read() == b"second"

    @pytest.mark.asyncio
    async def test_missing_object(self, store: FilesystemStore):
        await store.put_bucket("b")
        assert await store.get_object("b", "nope") is None
        assert await store.exists_object("b", "nope") is False

    @pytest.mark.asyncio
    async def test_exists(self, store: FilesystemStore):
        await store.put_object(StoredObject("b", "k", b"x"))
        assert await store.exists_object("b", "k") is True

    @pytest.mark.asyncio
    async def test_range_clamped_to_length(self, store: FilesystemStore):
        await store.put_object(StoredObject("b", "k", b"0123456789"))
        obj = await store.get_object("b", "k", start=5, end=20)
        assert await obj.read() == b"56789"
        assert (obj.range.start, obj.range.end, obj.range.satisfiable) == (5, 9, True)

    @pytest.mark.asyncio
    async def test_range_unsatisfiable(self, store: FilesystemStore):
        await store.put_object(StoredObject("b", "k", b"0123456789"))
        obj = await store.get_object("b", "k", start=20, end=30)
        assert obj.content is None
        assert obj.range.satisfiable is False
        assert obj.size == 10

    @pytest.mark.asyncio
    async def test_negative_start_unsatisfiable(self, store: FilesystemStore):
        await store.put_object(StoredObject("b", "k", b"0123456789"))
        obj = await store.get_object("b", "k", start=-1)
        assert obj.range.satisfiable is False

    @pytest.mark.asyncio
    async def test_open_ended_range(self, store: FilesystemStore):
        await store.put_object(StoredObject("b", "k", b"0123456789"))
        assert await (await store.get_object("b", "k", start=7)).read() == b"789"
        assert await (await store.get_object("b", "k", end=2)).read() == b"012"

    @pytest.mark.asyncio
    async def test_copy_to_new_key(self, store: FilesystemStore):
        await store.put_object(StoredObject("src", "a", b"payload", {"x-amz-meta-tag": "1"}))
        metadata = await store.copy_object("src", "a", "dest", "nested/b")
        assert metadata["etag"] == hashlib.md5(b"payload").hexdigest()
        assert metadata["x-amz-meta-tag"] == "1"
        assert await (await store.get_object("dest", "nested/b")).read() == b"payload"

    @pytest.mark.asyncio
    async def test_copy_with_replacement_metadata(self, store: FilesystemStore):
        await store.put_object(StoredObject("b", "a", b"payload", {"x-amz-meta-old": "1"}))
        metadata = await store.copy_object("b", "a", "b", "c", {"content-type": "text/csv", "x-amz-meta-new": "2"})
        assert metadata["content-type"] == "text/csv"
        assert metadata["x-amz-meta-new"] == "2"
        assert "x-amz-meta-old" not in metadata
        assert metadata["content-length"] == "7"
        assert metadata["etag"] == hashlib.md5(b"payload").hexdigest()

    @pytest.mark.asyncio
    async def test_copy_onto_itself_replaces_metadata(self, store: FilesystemStore):
        await store.put_object(StoredObject("b", "a", b"payload", {"content-type": "text/plain"}))
        metadata = await store.copy_object("b", "a", "b", "a", {"content-type": "application/json"})
        assert metadata["content-type"] == "application/json"
        assert await (await store.get_object("b", "a")).read() == b"payload"

    @pytest.mark.asyncio
    async def test_copy_missing_source(self, store: FilesystemStore):
        assert await store.copy_object("b", "nope", "b", "dest") is None

    @pytest.mark.asyncio
    async def test_delete_prunes_empty_directories(self, store: FilesystemStore):
        await store.put_bucket("b")
        await store.put_object(StoredObject("b", "x/y/z", b"data"))
        await store.delete_object("b", "x/y/z")

        bucket_path = store.resolver.bucket_path("b")
        assert not (bucket_path / "x").exists()
        assert bucket_path.is_dir()
        assert await store.get_object("b", "x/y/z") is None

    @pytest.mark.asyncio
    async def test_delete_keeps_non_empty_directories(self, store: FilesystemStore):
        await store.put_object(StoredObject("b", "x/keep", b"1"))
        await store.put_object(StoredObject("b", "x/y/z", b"2"))
        await store.delete_object("b", "x/y/z")

        bucket_path = store.resolver.bucket_path("b")
        assert not (bucket_path / "x" / "y").exists()
        assert (bucket_path / "x").is_dir()
        assert (await store.list_objects("b")).keys == ["x/keep"]

    @pytest.mark.asyncio
    async def test_delete_tolerates_missing_files(self, store: FilesystemStore):
        await store.put_object(StoredObject("b", "k", b"1"))
        store.resolver.resource_path("b", "k", ResourceKind.DIGEST).unlink()
        await store.delete_object("b", "k")
        await store.delete_object("b", "k")
        assert not await store.exists_object("b", "k")

    @pytest.mark.asyncio
    async def test_copy_over_existing_destination(self, store: FilesystemStore):
        await store.put_object(StoredObject("b", "dest", b"older and longer"))
        await store.put_object(StoredObject("b", "src", b"new"))
        await store.copy_object("b", "src", "b", "dest")

        assert await (await store.get_object("b", "dest")).read() == b"new"
        leftovers = [p.name for p in store.resolver.bucket_path("b").iterdir() if p.name.endswith(".tmp")]
        assert leftovers == []


@pytest.mark.integration
class TestUnsafeKeys:
    """Keys that would resolve outside their own directory."""

    @pytest.mark.asyncio
    async def test_parent_segment_cannot_reach_other_bucket(self, store: FilesystemStore):
        await store.put_bucket("b1")
        await store.put_bucket("b2")
        with pytest.raises(InvalidKeyError):
            await store.put_object(StoredObject("b1", "../b2/k", b"x"))
        assert (await store.list_objects("b2")).keys == []
        assert list(store.resolver.bucket_path("b2").iterdir()) == []

    @pytest.mark.asyncio
    async def test_parent_segments_cannot_leave_root(self, store: FilesystemStore, data_dir: Path):
        with pytest.raises(InvalidKeyError):
            await store.put_object(StoredObject("b", "../../escaped", b"x"))
        assert not (data_dir.parent / "escaped._fs_object").exists()

    @pytest.mark.asyncio
    async def test_empty_segment_does_not_alias(self, store: FilesystemStore):
        await store.put_object(StoredObject("b", "a/b", b"second"))
        with pytest.raises(InvalidKeyError):
            await store.put_object(StoredObject("b", "a//b", b"first"))
        with pytest.raises(InvalidKeyError):
            await store.get_object("b", "a//b")
        assert await (await store.get_object("b", "a/b")).read() == b"second"

    @pytest.mark.asyncio
    async def test_current_dir_segment_rejected(self, store: FilesystemStore):
        with pytest.raises(InvalidKeyError):
            await store.put_object(StoredObject("b", "a/./b", b"x"))
        with pytest.raises(InvalidKeyError):
            await store.delete_object("b", "a/./b")

    @pytest.mark.asyncio
    async def test_trailing_slash_key_round_trips(self, store: FilesystemStore):
        await store.put_object(StoredObject("b", "folder/", b""))
        await store.put_object(StoredObject("b", "folder/..", b"dots"))
        assert (await store.list_objects("b")).keys == ["folder/", "folder/.."]
        assert await (await store.get_object("b", "folder/..")).read() == b"dots"

    @pytest.mark.asyncio
    async def test_rejected_key_counts_as_error(self, store: FilesystemStore, metrics):
        with pytest.raises(InvalidKeyError):
            await store.put_object(StoredObject("b", "../x", b"x"))
        errors = metrics.request_errors.labels(operation="put_object", error_type="InvalidKeyError")
        assert errors._value.get() == 1


@pytest.mark.integration
class TestSubresources:
    """Bucket and object configuration documents."""

    @pytest.mark.asyncio
    async def test_bucket_subresource_lifecycle(self, store: FilesystemStore):
        await store.put_bucket("b")
        assert await store.get_subresource("b", None, "cors") is None

        await store.put_subresource("b", None, Subresource("cors", "<CORSConfiguration/>"))
        resource = await store.get_subresource("b", None, "cors")
        assert resource == Subresource("cors", "<CORSConfiguration/>")
        assert (store.resolver.bucket_path("b") / "._fs_cors.xml").exists()

        await store.delete_subresource("b", None, "cors")
        assert await store.get_subresource("b", None, "cors") is None
        await store.delete_subresource("b", None, "cors")

    @pytest.mark.asyncio
    async def test_object_subresource(self, store: FilesystemStore):
        await store.put_object(StoredObject("b", "dir/k", b"x"))
        await store.put_subresource("b", "dir/k", Subresource("tagging", "<Tagging/>"))
        assert (await store.get_subresource("b", "dir/k", "tagging")).document == "<Tagging/>"
        assert await store.get_subresource("b", "dir/other", "tagging") is None


@pytest.mark.integration
class TestMetrics:
    """Operations are counted."""

    @pytest.mark.asyncio
    async def test_put_and_error_counters(self, store: FilesystemStore, metrics):
        await store.put_object(StoredObject("b", "k", b"abc"))
        assert metrics.objects_created.labels(bucket="b")._value.get() == 1
        assert metrics.bytes_uploaded.labels(bucket="b")._value.get() == 3

        with pytest.raises(FileNotFoundError):
            await store.put_object_multipart("b", "missing", [])
        errors = metrics.request_errors.labels(operation="put_object_multipart", error_type="UploadNotFoundError")
        assert errors._value.get() == 1


def test_store_root_is_path(data_dir: Path):
    from prometheus_client import CollectorRegistry

    from fs_object_store.infrastructure.metrics import ObjectStoreMetrics

    store = FilesystemStore(str(data_dir), metrics=ObjectStoreMetrics(CollectorRegistry()))
    assert store.root == data_dir
