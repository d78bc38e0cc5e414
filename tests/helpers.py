"""Helpers shared by the test modules."""

from __future__ import annotations


def words_to_bytes(*words: int) -> bytes:
    """Pack 16-bit instructions big-endian."""
    out = bytearray()
    for word in words:
        out.append((word >> 8) & 0xFF)
        out.append(word & 0xFF)
    return bytes(out)
