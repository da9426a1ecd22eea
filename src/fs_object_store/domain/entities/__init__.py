"""Domain entities."""

from fs_object_store.domain.entities.bucket import Bucket
from fs_object_store.domain.entities.object import (
    ALLOWED_METADATA,
    USER_METADATA_PREFIX,
    ByteRange,
    ListObjectsResult,
    PutResult,
    StoredObject,
)
from fs_object_store.domain.entities.subresource import Subresource
from fs_object_store.domain.entities.upload import Part

__all__ = [
    "ALLOWED_METADATA",
    "USER_METADATA_PREFIX",
    "Bucket",
    "ByteRange",
    "ListObjectsResult",
    "Part",
    "PutResult",
    "StoredObject",
    "Subresource",
]
