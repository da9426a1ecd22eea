"""Best-effort background replication of written files to a mirror."""

from __future__ import annotations

import asyncio
from pathlib import Path

import aiofiles
import aiofiles.os
import structlog

from fs_object_store.adapters.outbound.content_writer import write_atomic
from fs_object_store.infrastructure.logging import get_logger
from fs_object_store.infrastructure.metrics import ObjectStoreMetrics
from fs_object_store.ports.outbound.blob_mirror import BlobMirror


class LocalDirectoryMirror:
    """Mirror files into a second directory tree (e.g. a mounted volume)."""

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)

    async def mirror(self, path: str, data: bytes) -> None:
        target = self._root / path
        await aiofiles.os.makedirs(target.parent, exist_ok=True)
        await write_atomic(target, data)


class ReplicationDispatcher:
    """Schedule mirror calls without ever failing the caller.

    Each submitted file is read and handed to the mirror in its own task.
    Failures are logged and counted; they never reach the store operation
    that triggered them.
    """

    def __init__(
        self,
        mirror: BlobMirror,
        metrics: ObjectStoreMetrics | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._mirror = mirror
        self._metrics = metrics
        self._logger = logger or get_logger(__name__)
        self._pending: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def submit(self, relative_path: str, local_path: Path) -> None:
        """Queue ``local_path`` for mirroring under ``relative_path``."""
        task = asyncio.create_task(self._replicate(relative_path, local_path))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _replicate(self, relative_path: str, local_path: Path) -> None:
        try:
            async with aiofiles.open(local_path, "rb") as f:
                data = await f.read()
            await self._mirror.mirror(relative_path, data)
        except Exception:
            self._logger.warning("mirror_failed", path=relative_path, exc_info=True)
            if self._metrics is not None:
                self._metrics.replication_failures.inc()

    async def drain(self) -> None:
        """Wait for every queued mirror call to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending))
