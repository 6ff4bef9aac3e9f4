from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from .codec import Codec
from .constants import MAX_U32
from .context import PathContext
from .errors import ErrorWritingMetadata, FailedToCompressData, wrap_context
from .hashutil import content_digest
from .model import Compression


@dataclass(frozen=True)
class StoredBlob:
    offset: int
    size: int
    compression: Compression


class ContentStore:
    """Deduplicating data region for a single pack run.

    Blobs are keyed by the digest of their *raw* bytes; the first time a
    digest is seen its (possibly compressed) bytes are appended to the data
    buffer, later occurrences reuse the recorded location and flag.
    """

    def __init__(self, compression: Compression = Compression.GZIP):
        self.codec = Codec(compression)
        self.data = bytearray()
        self.blobs: Dict[str, StoredBlob] = {}

    @property
    def compression(self) -> Compression:
        return self.codec.compression

    def __len__(self) -> int:
        return len(self.blobs)

    def __contains__(self, raw: bytes) -> bool:
        return content_digest(raw) in self.blobs

    def add(self, raw: bytes, context: PathContext) -> StoredBlob:
        key = content_digest(raw)
        blob = self.blobs.get(key)
        if blob is not None:
            return blob
        with wrap_context(context.push(str(self.compression)), FailedToCompressData):
            payload = self.codec.compress(raw)
        offset = len(self.data)
        if offset > MAX_U32:
            raise ErrorWritingMetadata(context.push("file offset"), f"data region offset {offset} exceeds u32")
        if len(payload) > MAX_U32:
            raise ErrorWritingMetadata(context.push("file size"), f"blob of {len(payload)} bytes exceeds u32")
        blob = StoredBlob(offset=offset, size=len(payload), compression=self.compression)
        self.data += payload
        self.blobs[key] = blob
        return blob
