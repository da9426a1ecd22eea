"""Outbound ports - interfaces for collaborators the store depends on."""

from fs_object_store.ports.outbound.blob_mirror import BlobMirror
from fs_object_store.ports.outbound.key_codec import KeyCodec

__all__ = [
    "BlobMirror",
    "KeyCodec",
]
