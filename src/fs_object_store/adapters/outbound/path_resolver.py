"""Resolve bucket/key/resource triples to backing file paths.

Layout under the store root::

    <bucket>/
        ._fs_cors.xml                    bucket sub-resource
        ._fs_uploads/<upload_id>/        multipart staging area
        photos/
            cat.jpg._fs_object           content
            cat.jpg._fs_object.md5       digest sidecar
            cat.jpg._fs_metadata.json    metadata sidecar

The resource kind is folded into the final file name, so the key
``report`` (``report._fs_object``) never collides with the directory
``report/`` created for the key ``report/summary``.
"""

from __future__ import annotations

import enum
from pathlib import Path

from fs_object_store.ports.inbound import InvalidKeyError
from fs_object_store.ports.outbound.key_codec import KeyCodec

RESOURCE_MARKER = "._fs_"

# Segments the filesystem would resolve instead of storing.
RELATIVE_SEGMENTS = frozenset({"", ".", ".."})


class ResourceKind(str, enum.Enum):
    """Backing files that can exist for an object or bucket."""

    OBJECT = "object"
    DIGEST = "object.md5"
    METADATA = "metadata.json"
    UPLOADS = "uploads"


def subresource_kind(resource_type: str) -> str:
    """Resource kind of a sub-resource document such as ``cors``."""
    return f"{resource_type}.xml"


def resource_suffix(kind: str) -> str:
    """File name suffix that marks a resource kind."""
    return f"{RESOURCE_MARKER}{kind}"


def _check_name(name: str, what: str) -> None:
    if name in RELATIVE_SEGMENTS or "/" in name or name.startswith(RESOURCE_MARKER):
        raise InvalidKeyError(name, f"unsupported {what}")


class PathResolver:
    """Map store addresses onto paths below a root directory."""

    def __init__(self, root: str | Path, codec: KeyCodec) -> None:
        self._root = Path(root)
        self._codec = codec

    @property
    def root(self) -> Path:
        return self._root

    @property
    def codec(self) -> KeyCodec:
        return self._codec

    def bucket_path(self, bucket: str) -> Path:
        _check_name(bucket, "bucket")
        return self._root / bucket

    def key_segments(self, key: str | None) -> list[str]:
        """Encoded path segments of ``key``; the last one names the file.

        Raises:
            InvalidKeyError: If a directory segment is empty, ``.``, ``..``
                or starts with the resource marker. Such keys would resolve
                outside their own directory or onto another key's files.
        """
        *dirs, last = self._codec.encode(key or "").split("/")
        for segment in dirs:
            if segment in RELATIVE_SEGMENTS or segment.startswith(RESOURCE_MARKER):
                raise InvalidKeyError(key, f"unsupported path segment {segment!r}")
        return [*dirs, last]

    def resource_path(self, bucket: str, key: str | None, kind: str | ResourceKind) -> Path:
        """Path of the file backing ``kind`` for ``key`` in ``bucket``.

        An empty or None key addresses a bucket-level resource.
        """
        kind = kind.value if isinstance(kind, ResourceKind) else kind
        *dirs, last = self.key_segments(key)
        return self.bucket_path(bucket).joinpath(*dirs, last + resource_suffix(kind))

    def upload_dir(self, bucket: str, upload_id: str) -> Path:
        _check_name(upload_id, "upload id")
        return self.resource_path(bucket, None, ResourceKind.UPLOADS) / upload_id

    def relative(self, path: Path) -> str:
        """POSIX path of ``path`` relative to the root (mirror addressing)."""
        return path.relative_to(self._root).as_posix()
