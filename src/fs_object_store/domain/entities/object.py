"""Object entity for object storage."""

from __future__ import annotations

from collections.abc import AsyncIterable, AsyncIterator, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Union

# Standard headers persisted alongside an object.
ALLOWED_METADATA = (
    "cache-control",
    "content-disposition",
    "content-encoding",
    "content-language",
    "content-type",
    "expires",
)

USER_METADATA_PREFIX = "x-amz-meta-"

DEFAULT_CONTENT_TYPE = "binary/octet-stream"

ContentSource = Union[bytes, Iterable[bytes], AsyncIterable[bytes]]


def is_persisted_header(name: str) -> bool:
    """Check whether a metadata header is stored in the metadata document."""
    return name in ALLOWED_METADATA or name.startswith(USER_METADATA_PREFIX)


def normalize_metadata(metadata: dict[str, str] | None) -> dict[str, str]:
    """Lowercase header names and stringify values."""
    return {str(k).lower(): str(v) for k, v in (metadata or {}).items()}


@dataclass
class ByteRange:
    """An inclusive byte window requested from an object.

    ``satisfiable`` is False when the window cannot be served; the object
    then carries metadata only and the caller decides how to respond.
    """

    start: int
    end: int
    satisfiable: bool = True

    @property
    def length(self) -> int:
        return max(0, self.end - self.start + 1) if self.satisfiable else 0


@dataclass
class StoredObject:
    """An object in the store.

    ``content`` is whatever the caller supplies on write (bytes or a sync or
    async iterable of chunks) and an async iterator of chunks on read. It is
    None for metadata-only results.
    """

    bucket: str
    key: str
    content: ContentSource | None = None
    metadata: dict[str, str] = field(default_factory=dict)
    range: ByteRange | None = None

    def __post_init__(self) -> None:
        self.metadata = normalize_metadata(self.metadata)

    @property
    def content_type(self) -> str:
        return self.metadata.get("content-type", DEFAULT_CONTENT_TYPE)

    @property
    def etag(self) -> str | None:
        return self.metadata.get("etag")

    @property
    def size(self) -> int:
        return int(self.metadata.get("content-length", 0))

    @property
    def last_modified(self) -> datetime | None:
        value = self.metadata.get("last-modified")
        return datetime.fromisoformat(value) if value else None

    @property
    def user_metadata(self) -> dict[str, str]:
        """Custom metadata with the reserved prefix stripped."""
        return {
            k[len(USER_METADATA_PREFIX):]: v
            for k, v in self.metadata.items()
            if k.startswith(USER_METADATA_PREFIX)
        }

    async def read(self) -> bytes:
        """Drain the content into a single buffer."""
        content = self.content
        if content is None:
            return b""
        if isinstance(content, (bytes, bytearray, memoryview)):
            return bytes(content)
        if isinstance(content, AsyncIterable):
            return b"".join([chunk async for chunk in content])
        return b"".join(content)


@dataclass(frozen=True)
class PutResult:
    """Size and MD5 digest of a written object or part."""

    size: int
    md5: str


@dataclass
class ListObjectsResult:
    """A single page of a list-objects query."""

    objects: list[StoredObject] = field(default_factory=list)
    common_prefixes: list[str] = field(default_factory=list)
    is_truncated: bool = False

    @property
    def keys(self) -> list[str]:
        return [obj.key for obj in self.objects]


async def iter_content(content: ContentSource) -> AsyncIterator[bytes]:
    """Present any supported content source as an async stream of chunks."""
    if isinstance(content, (bytes, bytearray, memoryview)):
        yield bytes(content)
    elif isinstance(content, AsyncIterable):
        async for chunk in content:
            yield chunk
    else:
        for chunk in content:
            yield chunk
