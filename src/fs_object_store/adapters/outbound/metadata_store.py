"""Digest and metadata sidecar files for stored objects."""

from __future__ import annotations

from datetime import datetime, timezone

import aiofiles
import aiofiles.os
from pydantic import BaseModel, Field

from fs_object_store.adapters.outbound.content_writer import copy_atomic, write_atomic
from fs_object_store.adapters.outbound.path_resolver import PathResolver, ResourceKind
from fs_object_store.domain.entities.object import (
    DEFAULT_CONTENT_TYPE,
    is_persisted_header,
    normalize_metadata,
)


class MetadataDocument(BaseModel):
    """Serialized form of an object's metadata sidecar."""

    size: int = 0
    mtime: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    headers: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_metadata(cls, metadata: dict[str, str]) -> "MetadataDocument":
        metadata = normalize_metadata(metadata)
        return cls(
            size=int(metadata.get("content-length", 0)),
            headers={k: v for k, v in metadata.items() if is_persisted_header(k)},
        )


class MetadataStore:
    """Read and write the ``.md5`` and ``metadata.json`` sidecars.

    The digest and document are separate files written one after the other;
    each write is atomic on its own but the pair is not.
    """

    def __init__(self, resolver: PathResolver) -> None:
        self._resolver = resolver

    async def put(
        self,
        bucket: str,
        key: str,
        metadata: dict[str, str],
        md5: str | None = None,
    ) -> None:
        """Write the sidecars for an object.

        Args:
            bucket: Bucket name.
            key: Object key.
            metadata: Request headers; only standard and ``x-amz-meta-*``
                headers plus ``content-length`` are kept.
            md5: Content digest. When None the existing digest file is kept.
        """
        md5_path = self._resolver.resource_path(bucket, key, ResourceKind.DIGEST)
        metadata_path = self._resolver.resource_path(bucket, key, ResourceKind.METADATA)
        await aiofiles.os.makedirs(metadata_path.parent, exist_ok=True)

        document = MetadataDocument.from_metadata(metadata)
        if md5:
            await write_atomic(md5_path, md5.encode("ascii"))
        await write_atomic(metadata_path, document.model_dump_json(indent=2).encode("utf-8"))

    async def get(self, bucket: str, key: str) -> dict[str, str]:
        """Read an object's externally visible metadata.

        Raises:
            FileNotFoundError: If either sidecar is missing.
        """
        md5_path = self._resolver.resource_path(bucket, key, ResourceKind.DIGEST)
        metadata_path = self._resolver.resource_path(bucket, key, ResourceKind.METADATA)

        async with aiofiles.open(metadata_path, "r", encoding="utf-8") as f:
            document = MetadataDocument.model_validate_json(await f.read())
        async with aiofiles.open(md5_path, "r", encoding="ascii") as f:
            md5 = (await f.read()).strip()

        return {
            **document.headers,
            "content-type": document.headers.get("content-type", DEFAULT_CONTENT_TYPE),
            "etag": md5,
            "last-modified": document.mtime.isoformat(),
            "content-length": str(document.size),
        }

    async def copy(self, src_bucket: str, src_key: str, dest_bucket: str, dest_key: str) -> None:
        """Copy both sidecars unchanged."""
        for kind in (ResourceKind.METADATA, ResourceKind.DIGEST):
            await copy_atomic(
                self._resolver.resource_path(src_bucket, src_key, kind),
                self._resolver.resource_path(dest_bucket, dest_key, kind),
            )
