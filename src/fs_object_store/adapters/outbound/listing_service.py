"""List-objects queries answered from a pruned walk of a bucket directory.

The walk visits entries in key order: object files sort by their decoded key
segment and directories by their decoded name plus ``/``. Pages therefore
come out in the same lexicographic order an S3 service would use, and
``start_after`` and ``max_keys`` cut at the same boundaries.

Directories are compared as key prefixes (``"photos/"`` for the directory
``photos``) and skipped when no key below them can be part of the page:

* everything below sorts before ``start_after``;
* they fall outside ``prefix``;
* they collapse into a common prefix that has already been recorded.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from fs_object_store.adapters.outbound.directory_walker import walk
from fs_object_store.adapters.outbound.metadata_store import MetadataStore
from fs_object_store.adapters.outbound.path_resolver import (
    RESOURCE_MARKER,
    PathResolver,
    ResourceKind,
    resource_suffix,
)
from fs_object_store.domain.entities.object import ListObjectsResult, StoredObject

OBJECT_SUFFIX = resource_suffix(ResourceKind.OBJECT.value)


def common_prefix_of(key: str, prefix: str, delimiter: str) -> str | None:
    """Grouping key for ``key``, or None if it is listed individually."""
    if not delimiter:
        return None
    idx = key.find(delimiter, len(prefix))
    if idx == -1:
        return None
    return key[: idx + len(delimiter)]


class ListingService:
    """Answer list-objects queries for buckets below a resolver's root."""

    def __init__(self, resolver: PathResolver, metadata_store: MetadataStore) -> None:
        self._resolver = resolver
        self._metadata = metadata_store

    async def list_objects(
        self,
        bucket: str,
        prefix: str = "",
        delimiter: str = "",
        start_after: str = "",
        max_keys: int | None = None,
    ) -> ListObjectsResult:
        keys, common_prefixes, is_truncated = await asyncio.to_thread(
            self.scan, bucket, prefix, delimiter, start_after, max_keys
        )
        metadata = await asyncio.gather(*(self._fetch_metadata(bucket, key) for key in keys))
        return ListObjectsResult(
            objects=[
                StoredObject(bucket, key, None, md)
                for key, md in zip(keys, metadata)
                if md is not None
            ],
            common_prefixes=sorted(common_prefixes),
            is_truncated=is_truncated,
        )

    async def _fetch_metadata(self, bucket: str, key: str) -> dict[str, str] | None:
        try:
            return await self._metadata.get(bucket, key)
        except FileNotFoundError:
            # deleted since the walk saw it
            return None

    def scan(
        self,
        bucket: str,
        prefix: str = "",
        delimiter: str = "",
        start_after: str = "",
        max_keys: int | None = None,
    ) -> tuple[list[str], set[str], bool]:
        """Walk a bucket and select one page of keys.

        Returns:
            Accepted keys in key order, the common prefixes seen and whether
            more keys remained past ``max_keys``.
        """
        bucket_path = self._resolver.bucket_path(bucket)
        codec = self._resolver.codec
        common_prefixes: set[str] = set()

        def sort_key(name: str, is_dir: bool) -> str:
            if is_dir:
                return codec.decode(name) + "/"
            if name.endswith(OBJECT_SUFFIX):
                return codec.decode(name[: -len(OBJECT_SUFFIX)])
            return codec.decode(name)

        def should_descend(dir_path: Path) -> bool:
            if dir_path.name.startswith(RESOURCE_MARKER):
                return False
            dir_key = codec.decode(dir_path.relative_to(bucket_path).as_posix()) + "/"
            if dir_key < start_after and not start_after.startswith(dir_key):
                return False
            if dir_key.startswith(prefix):
                group = common_prefix_of(dir_key, prefix, delimiter)
                if group is not None and group in common_prefixes:
                    return False
            elif not prefix.startswith(dir_key):
                return False
            return True

        keys: list[str] = []
        is_truncated = False
        for path in walk(bucket_path, should_descend, sort_key):
            if not path.name.endswith(OBJECT_SUFFIX):
                continue
            key = codec.decode(path.relative_to(bucket_path).as_posix()[: -len(OBJECT_SUFFIX)])
            if key <= start_after or not key.startswith(prefix):
                continue

            group = common_prefix_of(key, prefix, delimiter)
            if group is not None:
                common_prefixes.add(group)
                continue

            if max_keys is not None and len(keys) >= max_keys:
                is_truncated = True
                break
            keys.append(key)

        return keys, common_prefixes, is_truncated
