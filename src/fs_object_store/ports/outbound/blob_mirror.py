"""Blob mirror port for best-effort replication of stored files.

A mirror receives a copy of each file the store writes, addressed by its
path relative to the store root. Mirrors are never required for local
correctness: the store schedules mirror calls in the background and only
logs their failures.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Protocol


class BlobMirror(Protocol):
    """Protocol for a secondary blob store."""

    @abstractmethod
    async def mirror(self, path: str, data: bytes) -> None:
        """Store ``data`` under ``path``.

        Args:
            path: POSIX-style path relative to the store root.
            data: File contents.

        Raises:
            Exception: Any failure; callers swallow and count it.
        """
        ...
