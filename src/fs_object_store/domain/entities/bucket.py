"""Bucket entity for object storage."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Bucket:
    """A bucket (namespace) for objects.

    Buckets map one-to-one onto directories below the store root, so the
    name must be usable as a single directory name.
    """

    name: str
    created_at: datetime
