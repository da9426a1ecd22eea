"""Filesystem-backed implementation of the ObjectStorePort.

Buckets are directories below the store root and objects are triples of
content, digest and metadata files (see ``path_resolver`` for the layout).
The store keeps no in-memory state besides its collaborators and holds no
locks; every operation can run concurrently with any other.

Usage:
    store = FilesystemStore("/var/lib/objects")
    await store.put_bucket("photos")
    await store.put_object(StoredObject("photos", "cat.jpg", data, {"content-type": "image/jpeg"}))
    obj = await store.get_object("photos", "cat.jpg", start=0, end=1023)
"""

from __future__ import annotations

import asyncio
import contextlib
import errno
import os
import shutil
import stat as stat_module
import time
from collections.abc import Iterator
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import aiofiles.os
import structlog
from opentelemetry import trace

from fs_object_store.adapters.outbound.content_writer import DEFAULT_CHUNK_SIZE, ContentWriter, copy_atomic
from fs_object_store.adapters.outbound.listing_service import ListingService
from fs_object_store.adapters.outbound.metadata_store import MetadataStore
from fs_object_store.adapters.outbound.multipart_assembler import MultipartAssembler
from fs_object_store.adapters.outbound.path_resolver import PathResolver, ResourceKind
from fs_object_store.adapters.outbound.replication import ReplicationDispatcher
from fs_object_store.adapters.outbound.subresource_store import SubresourceStore
from fs_object_store.domain.entities.bucket import Bucket
from fs_object_store.domain.entities.object import (
    ByteRange,
    ContentSource,
    ListObjectsResult,
    PutResult,
    StoredObject,
    normalize_metadata,
)
from fs_object_store.domain.entities.subresource import Subresource
from fs_object_store.domain.entities.upload import Part
from fs_object_store.domain.services.key_codec import IdentityKeyCodec
from fs_object_store.infrastructure.logging import get_logger
from fs_object_store.infrastructure.metrics import ObjectStoreMetrics, get_metrics
from fs_object_store.ports.outbound.blob_mirror import BlobMirror
from fs_object_store.ports.outbound.key_codec import KeyCodec

OBJECT_FILES = (ResourceKind.OBJECT, ResourceKind.DIGEST, ResourceKind.METADATA)


def _bucket_from_stat(name: str, stat: os.stat_result) -> Bucket:
    # st_birthtime is not available on every platform
    created = getattr(stat, "st_birthtime", stat.st_ctime)
    return Bucket(name=name, created_at=datetime.fromtimestamp(created, timezone.utc))


class FilesystemStore:
    """S3-style object store on a local directory tree.

    Attributes:
        root: Directory holding one subdirectory per bucket.
    """

    def __init__(
        self,
        root: str | Path,
        key_codec: KeyCodec | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        mirror: BlobMirror | None = None,
        metrics: ObjectStoreMetrics | None = None,
        tracer: trace.Tracer | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            root: Store root directory. Created on first write.
            key_codec: Key to path segment mapping (identity by default).
            chunk_size: Buffer size for streaming reads and writes.
            mirror: Optional best-effort replica for written files.
            metrics: Metrics collector (process-wide default if None).
            tracer: OpenTelemetry tracer.
            logger: Structured logger.
        """
        self.root = Path(root)
        self._resolver = PathResolver(self.root, key_codec or IdentityKeyCodec())
        self._writer = ContentWriter(chunk_size)
        self._metadata = MetadataStore(self._resolver)
        self._listing = ListingService(self._resolver, self._metadata)
        self._uploads = MultipartAssembler(self._resolver, self._writer)
        self._subresources = SubresourceStore(self._resolver)
        self._metrics = metrics or get_metrics()
        self._tracer = tracer or trace.get_tracer("fs_object_store")
        self._logger = logger or get_logger(__name__)
        self._replication = (
            ReplicationDispatcher(mirror, self._metrics, self._logger) if mirror is not None else None
        )

    @property
    def resolver(self) -> PathResolver:
        return self._resolver

    @contextlib.contextmanager
    def _operation(self, name: str, **attributes: str) -> Iterator[trace.Span]:
        """Trace an operation and count the error it fails with, if any."""
        with self._tracer.start_as_current_span(f"object_store.{name}") as span:
            for attr, value in attributes.items():
                span.set_attribute(f"object_store.{attr}", value)
            try:
                yield span
            except Exception as e:
                self._metrics.request_errors.labels(operation=name, error_type=type(e).__name__).inc()
                raise

    def _mirror(self, *paths: Path) -> None:
        if self._replication is None:
            return
        for path in paths:
            self._replication.submit(self._resolver.relative(path), path)

    def _object_paths(self, bucket: str, key: str) -> list[Path]:
        return [self._resolver.resource_path(bucket, key, kind) for kind in OBJECT_FILES]

    async def close(self) -> None:
        """Wait for outstanding mirror writes."""
        if self._replication is not None:
            await self._replication.drain()

    async def reset(self) -> None:
        """Remove every bucket and everything in it."""
        with self._operation("reset"):
            try:
                entries = await aiofiles.os.listdir(self.root)
            except FileNotFoundError:
                return
            for name in entries:
                path = self.root / name
                if await aiofiles.os.path.isdir(path):
                    await asyncio.to_thread(shutil.rmtree, path)
                else:
                    await aiofiles.os.remove(path)
            self._logger.info("store_reset", root=str(self.root), removed=len(entries))

    # =========================================================================
    # Buckets
    # =========================================================================

    async def list_buckets(self) -> list[Bucket]:
        with self._operation("list_buckets"):
            try:
                names = await aiofiles.os.listdir(self.root)
            except FileNotFoundError:
                names = []
            buckets = await asyncio.gather(*(self.get_bucket(name) for name in sorted(names)))
            result = [b for b in buckets if b is not None]
            self._metrics.buckets_count.set(len(result))
            return result

    async def get_bucket(self, name: str) -> Optional[Bucket]:
        try:
            stat = await aiofiles.os.stat(self._resolver.bucket_path(name))
        except (FileNotFoundError, NotADirectoryError):
            return None
        if not stat_module.S_ISDIR(stat.st_mode):
            return None
        return _bucket_from_stat(name, stat)

    async def put_bucket(self, name: str) -> Bucket:
        with self._operation("put_bucket", bucket=name):
            path = self._resolver.bucket_path(name)
            await aiofiles.os.makedirs(path, exist_ok=True)
            self._logger.info("bucket_created", bucket=name)
            return _bucket_from_stat(name, await aiofiles.os.stat(path))

    async def delete_bucket(self, name: str) -> None:
        with self._operation("delete_bucket", bucket=name):
            try:
                await asyncio.to_thread(shutil.rmtree, self._resolver.bucket_path(name))
            except FileNotFoundError:
                return
            self._logger.info("bucket_deleted", bucket=name)

    # =========================================================================
    # Objects
    # =========================================================================

    async def list_objects(
        self,
        bucket: str,
        prefix: str = "",
        delimiter: str = "",
        start_after: str = "",
        max_keys: int | None = None,
    ) -> ListObjectsResult:
        with self._operation("list_objects", bucket=bucket, prefix=prefix):
            started = time.perf_counter()
            result = await self._listing.list_objects(
                bucket,
                prefix=prefix,
                delimiter=delimiter,
                start_after=start_after,
                max_keys=max_keys,
            )
            self._metrics.list_objects_latency.labels(bucket=bucket).observe(time.perf_counter() - started)
            return result

    async def exists_object(self, bucket: str, key: str) -> bool:
        return await aiofiles.os.path.isfile(self._resolver.resource_path(bucket, key, ResourceKind.OBJECT))

    async def get_object(
        self,
        bucket: str,
        key: str,
        start: int | None = None,
        end: int | None = None,
    ) -> Optional[StoredObject]:
        """Get an object, streaming only the requested inclusive byte window.

        The end of the range is clamped to the last byte. A negative start or
        a window that is empty after clamping is unsatisfiable: the result
        then has metadata, no content and ``range.satisfiable`` False.
        ``range`` is only set when a bound was requested.
        """
        with self._operation("get_object", bucket=bucket, key=key):
            object_path = self._resolver.resource_path(bucket, key, ResourceKind.OBJECT)
            try:
                metadata = await self._metadata.get(bucket, key)
            except FileNotFoundError:
                return None
            if not await aiofiles.os.path.isfile(object_path):
                return None

            last_byte = max(0, int(metadata["content-length"]) - 1)
            byte_range = ByteRange(
                start=start if start is not None else 0,
                end=min(end if end is not None else last_byte, last_byte),
            )
            requested = start is not None or end is not None

            if byte_range.start < 0 or byte_range.end < byte_range.start:
                byte_range.satisfiable = False
                self._metrics.unsatisfiable_ranges.labels(bucket=bucket).inc()
                return StoredObject(bucket, key, None, metadata, byte_range)

            self._metrics.objects_read.labels(bucket=bucket).inc()
            self._metrics.bytes_downloaded.labels(bucket=bucket).inc(
                min(byte_range.length, int(metadata["content-length"]))
            )
            content = self._writer.read(object_path, byte_range.start, byte_range.end)
            return StoredObject(bucket, key, content, metadata, byte_range if requested else None)

    async def put_object(self, obj: StoredObject) -> PutResult:
        """Write content, then its digest and metadata sidecars.

        ``content-length`` in the stored metadata is the number of bytes
        actually written, whatever the caller declared.
        """
        with self._operation("put_object", bucket=obj.bucket, key=obj.key):
            object_path = self._resolver.resource_path(obj.bucket, obj.key, ResourceKind.OBJECT)
            content = obj.content if obj.content is not None else b""

            result = await self._writer.write(object_path, content)
            metadata = {**obj.metadata, "content-length": str(result.size)}
            await self._metadata.put(obj.bucket, obj.key, metadata, result.md5)

            self._mirror(*self._object_paths(obj.bucket, obj.key))
            self._metrics.objects_created.labels(bucket=obj.bucket).inc()
            self._metrics.bytes_uploaded.labels(bucket=obj.bucket).inc(result.size)
            self._logger.info("object_put", bucket=obj.bucket, key=obj.key, size=result.size, etag=result.md5)
            return result

    async def copy_object(
        self,
        src_bucket: str,
        src_key: str,
        dest_bucket: str,
        dest_key: str,
        replacement_metadata: dict[str, str] | None = None,
    ) -> Optional[dict[str, str]]:
        """Copy an object, or rewrite its metadata in place.

        Returns:
            Metadata of the destination, or None if the source is absent.
        """
        with self._operation("copy_object", bucket=dest_bucket, key=dest_key):
            try:
                src_metadata = await self._metadata.get(src_bucket, src_key)
            except FileNotFoundError:
                return None

            src_path = self._resolver.resource_path(src_bucket, src_key, ResourceKind.OBJECT)
            dest_path = self._resolver.resource_path(dest_bucket, dest_key, ResourceKind.OBJECT)
            content_copied = src_path != dest_path

            if content_copied:
                await aiofiles.os.makedirs(dest_path.parent, exist_ok=True)
                await copy_atomic(src_path, dest_path)

            if replacement_metadata is not None:
                metadata = {
                    **normalize_metadata(replacement_metadata),
                    "content-length": src_metadata["content-length"],
                }
                # same bytes, same digest: only a new destination needs one
                md5 = src_metadata["etag"] if content_copied else None
                await self._metadata.put(dest_bucket, dest_key, metadata, md5)
            elif content_copied:
                await self._metadata.copy(src_bucket, src_key, dest_bucket, dest_key)

            result = await self._metadata.get(dest_bucket, dest_key)
            self._mirror(*self._object_paths(dest_bucket, dest_key))
            self._metrics.objects_copied.labels(bucket=dest_bucket).inc()
            self._logger.info(
                "object_copied",
                src_bucket=src_bucket,
                src_key=src_key,
                bucket=dest_bucket,
                key=dest_key,
                metadata_replaced=replacement_metadata is not None,
            )
            return result

    async def delete_object(self, bucket: str, key: str) -> None:
        """Delete an object's files and any directories left empty.

        Missing files are ignored. Pruning walks up from the key's parent
        directory and stops at the first non-empty directory or at the
        bucket root, which is never removed.
        """
        with self._operation("delete_object", bucket=bucket, key=key):
            for path in self._object_paths(bucket, key):
                with contextlib.suppress(FileNotFoundError):
                    await aiofiles.os.remove(path)
            await asyncio.to_thread(self._prune_empty_dirs, bucket, key)

            self._metrics.objects_deleted.labels(bucket=bucket).inc()
            self._logger.info("object_deleted", bucket=bucket, key=key)

    def _prune_empty_dirs(self, bucket: str, key: str) -> None:
        bucket_path = self._resolver.bucket_path(bucket)
        # the last segment is part of the file name, not a directory
        parts = self._resolver.key_segments(key)[:-1]
        while parts:
            try:
                bucket_path.joinpath(*parts).rmdir()
            except FileNotFoundError:
                pass
            except OSError as e:
                if e.errno in (errno.ENOTEMPTY, errno.EEXIST):
                    return
                raise
            parts.pop()

    # =========================================================================
    # Multipart uploads
    # =========================================================================

    async def initiate_upload(
        self,
        bucket: str,
        key: str,
        upload_id: str,
        metadata: dict[str, str],
    ) -> None:
        with self._operation("initiate_upload", bucket=bucket, key=key):
            await self._uploads.initiate(bucket, key, upload_id, normalize_metadata(metadata))
            self._metrics.multipart_uploads_started.labels(bucket=bucket).inc()
            self._logger.info("multipart_initiated", bucket=bucket, key=key, upload_id=upload_id)

    async def put_part(
        self,
        bucket: str,
        upload_id: str,
        part_number: int,
        content: ContentSource,
    ) -> PutResult:
        with self._operation("put_part", bucket=bucket):
            result = await self._uploads.put_part(bucket, upload_id, part_number, content)
            self._metrics.multipart_parts_uploaded.labels(bucket=bucket).inc()
            self._logger.debug(
                "multipart_part_stored",
                bucket=bucket,
                upload_id=upload_id,
                part_number=part_number,
                size=result.size,
            )
            return result

    async def put_object_multipart(
        self,
        bucket: str,
        upload_id: str,
        parts: list[Part],
    ) -> PutResult:
        with self._operation("put_object_multipart", bucket=bucket):
            result = await self._uploads.complete(bucket, upload_id, parts, self.put_object)
            self._metrics.multipart_uploads_completed.labels(bucket=bucket).inc()
            self._logger.info(
                "multipart_completed",
                bucket=bucket,
                upload_id=upload_id,
                parts=len(parts),
                size=result.size,
            )
            return result

    async def abort_upload(self, bucket: str, upload_id: str) -> None:
        with self._operation("abort_upload", bucket=bucket):
            await self._uploads.abort(bucket, upload_id)
            self._metrics.multipart_uploads_aborted.labels(bucket=bucket).inc()
            self._logger.info("multipart_aborted", bucket=bucket, upload_id=upload_id)

    async def list_parts(self, bucket: str, upload_id: str) -> list[Part]:
        return await self._uploads.list_parts(bucket, upload_id)

    # =========================================================================
    # Sub-resources
    # =========================================================================

    async def get_subresource(
        self,
        bucket: str,
        key: str | None,
        resource_type: str,
    ) -> Optional[Subresource]:
        return await self._subresources.get(bucket, key, resource_type)

    async def put_subresource(
        self,
        bucket: str,
        key: str | None,
        resource: Subresource,
    ) -> None:
        with self._operation("put_subresource", bucket=bucket, resource_type=resource.type):
            await self._subresources.put(bucket, key, resource)
            self._logger.info("subresource_put", bucket=bucket, key=key, resource_type=resource.type)

    async def delete_subresource(
        self,
        bucket: str,
        key: str | None,
        resource_type: str,
    ) -> None:
        with self._operation("delete_subresource", bucket=bucket, resource_type=resource_type):
            await self._subresources.delete(bucket, key, resource_type)
            self._logger.info("subresource_deleted", bucket=bucket, key=key, resource_type=resource_type)
