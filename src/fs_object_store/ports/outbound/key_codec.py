"""Key codec port for mapping object keys onto path segments.

Object keys may contain characters the host filesystem refuses in file
names. A codec turns a key into a filesystem-safe string and back. The
mapping is chosen once when the store is built rather than checked per call.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Protocol


class KeyCodec(Protocol):
    """Protocol for reversible key <-> path segment encoding.

    Implementations must satisfy ``decode(encode(key)) == key`` for every
    valid key and must leave ``/`` untouched so the key hierarchy survives
    as a directory hierarchy.
    """

    @abstractmethod
    def encode(self, key: str) -> str:
        """Encode a key into a filesystem-safe path string."""
        ...

    @abstractmethod
    def decode(self, key_path: str) -> str:
        """Reverse ``encode``."""
        ...
