from __future__ import annotations

import gzip
from typing import Optional

from .constants import GZIP_LEVEL
from .model import Compression


class Codec:
    def __init__(self, compression: Compression, level: Optional[int] = None):
        self.compression = compression
        self.level = level

    def compress(self, data: bytes) -> bytes:
        if self.compression == Compression.NONE:
            return data
        if self.compression == Compression.GZIP:
            # mtime=0 keeps identical inputs producing identical archives
            return gzip.compress(data, compresslevel=self.level if self.level is not None else GZIP_LEVEL, mtime=0)
        raise RuntimeError(f"unsupported compression: {self.compression!r}")

    def decompress(self, data: bytes) -> bytes:
        """Raises OSError/EOFError/zlib.error on corrupt gzip streams."""
        if self.compression == Compression.NONE:
            return data
        if self.compression == Compression.GZIP:
            return gzip.decompress(data)
        raise RuntimeError(f"unsupported compression: {self.compression!r}")
