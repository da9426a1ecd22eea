"""Bucket and object sub-resource documents."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Subresource:
    """An opaque serialized configuration document (CORS, website, policy...).

    The store never parses ``document``; validation belongs to the request
    layer.
    """

    type: str
    document: str
