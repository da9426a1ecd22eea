"""Multipart upload entities."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Part:
    """A part referenced when completing a multipart upload.

    Only ``number`` is needed for assembly; ``etag`` and ``size`` are filled
    in when parts are listed back from the staging area.
    """

    number: int
    etag: str = ""
    size: int = 0
