"""Inbound ports - API contracts for the object store.

Inbound ports define the interface the request layer (an S3-compatible
HTTP front end, not part of this package) uses to interact with buckets,
objects, multipart uploads and sub-resource documents.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Optional, Protocol

from fs_object_store.domain.entities.bucket import Bucket
from fs_object_store.domain.entities.object import (
    ContentSource,
    ListObjectsResult,
    PutResult,
    StoredObject,
)
from fs_object_store.domain.entities.subresource import Subresource
from fs_object_store.domain.entities.upload import Part


# =============================================================================
# Errors
# =============================================================================


class StoreError(Exception):
    """Base class for errors raised by the object store."""

    pass


class UploadNotFoundError(StoreError, FileNotFoundError):
    """Raised when a multipart upload id has no staging directory."""

    def __init__(self, bucket: str, upload_id: str):
        super().__init__(f"No such upload: {bucket}/{upload_id}")
        self.bucket = bucket
        self.upload_id = upload_id


class InvalidKeyError(StoreError, ValueError):
    """Raised when a bucket, key or upload id cannot be mapped to a path
    below its own directory.
    """

    def __init__(self, name: str | None, reason: str):
        super().__init__(f"Invalid name {name!r}: {reason}")
        self.name = name
        self.reason = reason


# =============================================================================
# Object Store Port
# =============================================================================


class ObjectStorePort(Protocol):
    """Protocol for S3-style bucket, object and upload operations.

    Not-found conditions are reported as ``None``/``False`` results, never
    as exceptions, to every read-style operation. Unexpected I/O errors
    propagate unchanged.

    Concurrency:
        All methods are coroutines and may be issued concurrently. The
        store holds no locks; a reader racing a writer on the same key may
        observe content without matching metadata.

    Example:
        await store.put_bucket("photos")
        await store.put_object(StoredObject("photos", "2024/cat.jpg", data))
        page = await store.list_objects("photos", delimiter="/")
    """

    # -- buckets ------------------------------------------------------------

    @abstractmethod
    async def list_buckets(self) -> list[Bucket]:
        """List all buckets, sorted by name."""
        ...

    @abstractmethod
    async def get_bucket(self, name: str) -> Optional[Bucket]:
        """Get a bucket by name, or None if it does not exist."""
        ...

    @abstractmethod
    async def put_bucket(self, name: str) -> Bucket:
        """Create a bucket. Creating an existing bucket is not an error."""
        ...

    @abstractmethod
    async def delete_bucket(self, name: str) -> None:
        """Delete a bucket and everything stored in it."""
        ...

    # -- objects ------------------------------------------------------------

    @abstractmethod
    async def list_objects(
        self,
        bucket: str,
        prefix: str = "",
        delimiter: str = "",
        start_after: str = "",
        max_keys: int | None = None,
    ) -> ListObjectsResult:
        """List one page of objects.

        Args:
            bucket: Bucket name.
            prefix: Only keys starting with this string.
            delimiter: Collapse keys containing it (after the prefix) into
                common prefixes. Empty disables grouping.
            start_after: Exclusive lower bound on returned keys.
            max_keys: Page size; None is unbounded.

        Returns:
            Objects in key order, sorted common prefixes and a truncation flag.
        """
        ...

    @abstractmethod
    async def exists_object(self, bucket: str, key: str) -> bool:
        """Check whether an object's content file exists."""
        ...

    @abstractmethod
    async def get_object(
        self,
        bucket: str,
        key: str,
        start: int | None = None,
        end: int | None = None,
    ) -> Optional[StoredObject]:
        """Get an object, optionally restricted to an inclusive byte range.

        Returns:
            The object with streamed content, a metadata-only object whose
            ``range.satisfiable`` is False, or None if the object is absent.
        """
        ...

    @abstractmethod
    async def put_object(self, obj: StoredObject) -> PutResult:
        """Write an object's content and metadata."""
        ...

    @abstractmethod
    async def copy_object(
        self,
        src_bucket: str,
        src_key: str,
        dest_bucket: str,
        dest_key: str,
        replacement_metadata: dict[str, str] | None = None,
    ) -> Optional[dict[str, str]]:
        """Copy an object, optionally replacing its metadata.

        Returns:
            The destination object's metadata, or None if the source is absent.
        """
        ...

    @abstractmethod
    async def delete_object(self, bucket: str, key: str) -> None:
        """Delete an object and prune directories it leaves empty."""
        ...

    # -- multipart uploads ----------------------------------------------------

    @abstractmethod
    async def initiate_upload(
        self,
        bucket: str,
        key: str,
        upload_id: str,
        metadata: dict[str, str],
    ) -> None:
        """Create a staging area for a multipart upload."""
        ...

    @abstractmethod
    async def put_part(
        self,
        bucket: str,
        upload_id: str,
        part_number: int,
        content: ContentSource,
    ) -> PutResult:
        """Stage one part of a multipart upload."""
        ...

    @abstractmethod
    async def put_object_multipart(
        self,
        bucket: str,
        upload_id: str,
        parts: list[Part],
    ) -> PutResult:
        """Assemble staged parts into the target object.

        Raises:
            FileNotFoundError: If a referenced part was never staged.
        """
        ...

    @abstractmethod
    async def abort_upload(self, bucket: str, upload_id: str) -> None:
        """Discard a multipart upload and its staged parts."""
        ...

    @abstractmethod
    async def list_parts(self, bucket: str, upload_id: str) -> list[Part]:
        """List the parts staged so far, by ascending part number."""
        ...

    # -- sub-resources --------------------------------------------------------

    @abstractmethod
    async def get_subresource(
        self,
        bucket: str,
        key: str | None,
        resource_type: str,
    ) -> Optional[Subresource]:
        """Read a configuration document, or None if absent."""
        ...

    @abstractmethod
    async def put_subresource(
        self,
        bucket: str,
        key: str | None,
        resource: Subresource,
    ) -> None:
        """Write a configuration document."""
        ...

    @abstractmethod
    async def delete_subresource(
        self,
        bucket: str,
        key: str | None,
        resource_type: str,
    ) -> None:
        """Delete a configuration document if present."""
        ...


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    "InvalidKeyError",
    "ObjectStorePort",
    "StoreError",
    "UploadNotFoundError",
]
