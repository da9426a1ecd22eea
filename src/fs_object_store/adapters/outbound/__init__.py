"""Outbound adapters for the Object Store.

Filesystem implementations of path resolution, content and sidecar
persistence, listing, multipart staging and best-effort replication.
"""

from fs_object_store.adapters.outbound.content_writer import ContentWriter
from fs_object_store.adapters.outbound.directory_walker import walk
from fs_object_store.adapters.outbound.filesystem_store import FilesystemStore
from fs_object_store.adapters.outbound.listing_service import ListingService
from fs_object_store.adapters.outbound.metadata_store import MetadataDocument, MetadataStore
from fs_object_store.adapters.outbound.multipart_assembler import MultipartAssembler
from fs_object_store.adapters.outbound.path_resolver import PathResolver, ResourceKind
from fs_object_store.adapters.outbound.replication import LocalDirectoryMirror, ReplicationDispatcher
from fs_object_store.adapters.outbound.subresource_store import SubresourceStore

__all__ = [
    "ContentWriter",
    "FilesystemStore",
    "ListingService",
    "LocalDirectoryMirror",
    "MetadataDocument",
    "MetadataStore",
    "MultipartAssembler",
    "PathResolver",
    "ReplicationDispatcher",
    "ResourceKind",
    "SubresourceStore",
    "walk",
]
