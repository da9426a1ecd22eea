"""Staging and assembly of multipart uploads.

Each upload gets a staging directory holding::

    key            target key, raw text
    metadata       JSON headers captured at initiation
    <n>            content of part n
    <n>.md5        digest of part n

Parts are independent files, so they can be uploaded concurrently and in
any order. Completion streams the referenced parts in ascending part number
through the ordinary object write path.
"""

from __future__ import annotations

import asyncio
import json
import shutil
from collections.abc import Awaitable, Callable
from pathlib import Path

import aiofiles
import aiofiles.os

from fs_object_store.adapters.outbound.content_writer import ContentWriter, write_atomic
from fs_object_store.adapters.outbound.path_resolver import PathResolver
from fs_object_store.domain.entities.object import ContentSource, PutResult, StoredObject
from fs_object_store.domain.entities.upload import Part
from fs_object_store.ports.inbound import UploadNotFoundError

KEY_FILE = "key"
METADATA_FILE = "metadata"
DIGEST_SUFFIX = ".md5"

ObjectWriter = Callable[[StoredObject], Awaitable[PutResult]]


class MultipartAssembler:
    """Manage per-upload staging directories."""

    def __init__(self, resolver: PathResolver, writer: ContentWriter) -> None:
        self._resolver = resolver
        self._writer = writer

    async def _require_upload(self, bucket: str, upload_id: str) -> Path:
        upload_dir = self._resolver.upload_dir(bucket, upload_id)
        if not await aiofiles.os.path.isdir(upload_dir):
            raise UploadNotFoundError(bucket, upload_id)
        return upload_dir

    async def initiate(
        self,
        bucket: str,
        key: str,
        upload_id: str,
        metadata: dict[str, str],
    ) -> None:
        upload_dir = self._resolver.upload_dir(bucket, upload_id)
        await aiofiles.os.makedirs(upload_dir, exist_ok=True)
        await asyncio.gather(
            write_atomic(upload_dir / KEY_FILE, key.encode("utf-8")),
            write_atomic(upload_dir / METADATA_FILE, json.dumps(metadata).encode("utf-8")),
        )

    async def put_part(
        self,
        bucket: str,
        upload_id: str,
        part_number: int,
        content: ContentSource,
    ) -> PutResult:
        """Stage one part, replacing any earlier upload of the same number."""
        if part_number < 1:
            raise ValueError(f"Part numbers start at 1, got {part_number}")
        upload_dir = await self._require_upload(bucket, upload_id)
        part_path = upload_dir / str(part_number)

        result = await self._writer.write(part_path, content)
        await write_atomic(part_path.with_name(part_path.name + DIGEST_SUFFIX), result.md5.encode("ascii"))
        return result

    async def list_parts(self, bucket: str, upload_id: str) -> list[Part]:
        upload_dir = await self._require_upload(bucket, upload_id)
        parts = []
        for name in await aiofiles.os.listdir(upload_dir):
            if not name.isdigit():
                continue
            part_path = upload_dir / name
            try:
                async with aiofiles.open(part_path.with_name(name + DIGEST_SUFFIX), "r") as f:
                    etag = (await f.read()).strip()
                size = (await aiofiles.os.stat(part_path)).st_size
            except FileNotFoundError:
                # part still being written
                continue
            parts.append(Part(number=int(name), etag=etag, size=size))
        return sorted(parts, key=lambda p: p.number)

    async def complete(
        self,
        bucket: str,
        upload_id: str,
        parts: list[Part],
        write_object: ObjectWriter,
    ) -> PutResult:
        """Assemble ``parts`` into the upload's target object.

        Args:
            bucket: Bucket name.
            upload_id: Upload to complete.
            parts: Parts to include; their order in the list is irrelevant.
            write_object: The store's object write path.

        Raises:
            UploadNotFoundError: If the upload does not exist.
            FileNotFoundError: If a referenced part was never staged. The
                staging directory is kept in that case.
        """
        upload_dir = await self._require_upload(bucket, upload_id)
        async with aiofiles.open(upload_dir / KEY_FILE, "r", encoding="utf-8") as f:
            key = await f.read()
        async with aiofiles.open(upload_dir / METADATA_FILE, "r", encoding="utf-8") as f:
            metadata = json.loads(await f.read())

        ordered = sorted(parts, key=lambda p: p.number)
        content = self._writer.concat([upload_dir / str(p.number) for p in ordered])
        result = await write_object(StoredObject(bucket, key, content, metadata))

        await asyncio.to_thread(shutil.rmtree, upload_dir)
        return result

    async def abort(self, bucket: str, upload_id: str) -> None:
        upload_dir = self._resolver.upload_dir(bucket, upload_id)
        await asyncio.to_thread(shutil.rmtree, upload_dir, True)
