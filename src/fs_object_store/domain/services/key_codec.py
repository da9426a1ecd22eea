"""Key codecs mapping object keys onto filesystem-safe path strings."""

from __future__ import annotations

import re
import sys

from fs_object_store.ports.outbound.key_codec import KeyCodec

ESCAPE_MARKER = "&"

# Characters Windows refuses in file names, plus the marker itself.
WINDOWS_RESERVED = '<>:"\\|?*'

_ESCAPE_RE = re.compile("[" + re.escape(WINDOWS_RESERVED + ESCAPE_MARKER) + "]")
_UNESCAPE_RE = re.compile(re.escape(ESCAPE_MARKER) + "([0-9a-f]{2})")


class IdentityKeyCodec:
    """Pass keys through unchanged (POSIX filesystems)."""

    def encode(self, key: str) -> str:
        return key

    def decode(self, key_path: str) -> str:
        return key_path


class EscapingKeyCodec:
    """Escape reserved characters as ``&`` + two hex digits.

    ``"a:b"`` becomes ``"a&3ab"``. The marker is escaped too, so a key that
    already contains ``&3a`` still decodes to itself.
    """

    def encode(self, key: str) -> str:
        return _ESCAPE_RE.sub(lambda m: ESCAPE_MARKER + m.group(0).encode("utf-8").hex(), key)

    def decode(self, key_path: str) -> str:
        return _UNESCAPE_RE.sub(lambda m: bytes.fromhex(m.group(1)).decode("utf-8"), key_path)


def select_key_codec(mode: str = "auto", platform: str = sys.platform) -> KeyCodec:
    """Pick the codec for a store.

    Args:
        mode: ``identity``, ``escaped`` or ``auto`` (escaped on Windows).
        platform: Platform string to decide ``auto`` against.

    Raises:
        ValueError: If ``mode`` is unknown.
    """
    if mode == "auto":
        mode = "escaped" if platform == "win32" else "identity"
    if mode == "identity":
        return IdentityKeyCodec()
    if mode == "escaped":
        return EscapingKeyCodec()
    raise ValueError(f"Unknown key codec: {mode}")
