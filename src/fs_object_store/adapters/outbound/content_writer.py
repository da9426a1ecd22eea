"""Streaming content persistence with incremental MD5 digests.

Content is written to a temporary sibling file and renamed into place, so
readers only ever see a complete previous or complete new file. If a write
is interrupted outside the process's control (crash, power loss) the
temporary file is left behind; its name never matches a resource suffix, so
listings ignore it.
"""

from __future__ import annotations

import asyncio
import contextlib
import hashlib
import os
import shutil
import uuid
from collections.abc import AsyncIterator
from pathlib import Path

import aiofiles
import aiofiles.os

from fs_object_store.domain.entities.object import ContentSource, PutResult, iter_content

DEFAULT_CHUNK_SIZE = 64 * 1024

TEMP_SUFFIX = ".tmp"


def temp_path_for(path: Path) -> Path:
    return path.with_name(f"{path.name}.{uuid.uuid4().hex}{TEMP_SUFFIX}")


async def write_atomic(path: Path, data: bytes) -> None:
    """Replace ``path`` with ``data`` in a single rename."""
    tmp = temp_path_for(path)
    try:
        async with aiofiles.open(tmp, "wb") as f:
            await f.write(data)
        await aiofiles.os.replace(tmp, path)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            os.remove(tmp)
        raise


async def copy_atomic(src: Path, dest: Path) -> None:
    """Replace ``dest`` with a copy of ``src`` in a single rename."""
    tmp = temp_path_for(dest)
    try:
        await asyncio.to_thread(shutil.copyfile, src, tmp)
        await aiofiles.os.replace(tmp, dest)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            os.remove(tmp)
        raise


class ContentWriter:
    """Write and read object content in bounded-size chunks.

    Attributes:
        chunk_size: Largest buffer held in memory while copying or reading.
    """

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.chunk_size = chunk_size

    async def write(self, path: str | Path, content: ContentSource) -> PutResult:
        """Persist ``content`` to ``path``.

        Args:
            path: Destination file. Parent directories are created.
            content: Bytes, or a sync or async iterable of byte chunks.

        Returns:
            Number of bytes written and their hex MD5 digest. Both are the
            same whether the content arrived whole or in chunks.
        """
        path = Path(path)
        await aiofiles.os.makedirs(path.parent, exist_ok=True)

        md5 = hashlib.md5()
        size = 0
        tmp = temp_path_for(path)
        try:
            async with aiofiles.open(tmp, "wb") as f:
                async for chunk in iter_content(content):
                    for offset in range(0, len(chunk), self.chunk_size):
                        piece = chunk[offset:offset + self.chunk_size]
                        await f.write(piece)
                        md5.update(piece)
                        size += len(piece)
            await aiofiles.os.replace(tmp, path)
        except BaseException:
            with contextlib.suppress(FileNotFoundError):
                os.remove(tmp)
            raise

        return PutResult(size=size, md5=md5.hexdigest())

    async def read(
        self,
        path: str | Path,
        start: int = 0,
        end: int | None = None,
    ) -> AsyncIterator[bytes]:
        """Stream the inclusive byte window ``[start, end]`` of ``path``.

        ``end`` of None reads to end of file.
        """
        async with aiofiles.open(path, "rb") as f:
            if start:
                await f.seek(start)
            remaining = None if end is None else end - start + 1
            while remaining is None or remaining > 0:
                size = self.chunk_size if remaining is None else min(self.chunk_size, remaining)
                chunk = await f.read(size)
                if not chunk:
                    break
                if remaining is not None:
                    remaining -= len(chunk)
                yield chunk

    async def concat(self, paths: list[Path]) -> AsyncIterator[bytes]:
        """Stream several files back to back, opening each lazily."""
        for path in paths:
            async for chunk in self.read(path):
                yield chunk
