"""Domain services."""

from fs_object_store.domain.services.key_codec import (
    EscapingKeyCodec,
    IdentityKeyCodec,
    select_key_codec,
)

__all__ = [
    "EscapingKeyCodec",
    "IdentityKeyCodec",
    "select_key_codec",
]
