from __future__ import annotations

from Cryptodome.Hash import SHA256


def content_digest(data: bytes) -> str:
    """Hex SHA-256 of raw file bytes; used only as a dedup key."""
    return SHA256.new(data).hexdigest()
