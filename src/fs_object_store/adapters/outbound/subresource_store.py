"""Storage of opaque bucket and object configuration documents."""

from __future__ import annotations

import contextlib

import aiofiles
import aiofiles.os

from fs_object_store.adapters.outbound.content_writer import write_atomic
from fs_object_store.adapters.outbound.path_resolver import PathResolver, subresource_kind
from fs_object_store.domain.entities.subresource import Subresource


class SubresourceStore:
    """One ``<type>.xml`` document per (bucket, key, resource type)."""

    def __init__(self, resolver: PathResolver) -> None:
        self._resolver = resolver

    async def get(self, bucket: str, key: str | None, resource_type: str) -> Subresource | None:
        path = self._resolver.resource_path(bucket, key, subresource_kind(resource_type))
        try:
            async with aiofiles.open(path, "r", encoding="utf-8") as f:
                return Subresource(type=resource_type, document=await f.read())
        except FileNotFoundError:
            return None

    async def put(self, bucket: str, key: str | None, resource: Subresource) -> None:
        path = self._resolver.resource_path(bucket, key, subresource_kind(resource.type))
        await aiofiles.os.makedirs(path.parent, exist_ok=True)
        await write_atomic(path, resource.document.encode("utf-8"))

    async def delete(self, bucket: str, key: str | None, resource_type: str) -> None:
        path = self._resolver.resource_path(bucket, key, subresource_kind(resource_type))
        with contextlib.suppress(FileNotFoundError):
            await aiofiles.os.remove(path)
