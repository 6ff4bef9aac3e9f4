"""
Cats — pack a directory tree into a single .cats archive and back.

Features:

- Compact versioned header: a recursive File/Directory tree with big-endian
  fixed-width fields, followed by one shared data region.
- Content-addressed deduplication: byte-identical files are stored once
  (keyed by SHA-256 of the raw bytes) and referenced by offset/size.
- Optional per-blob gzip compression.
- Every failure carries a slash-joined context naming the field or file
  that failed, plus a stable process exit code.

Archive layout: ``b"CATS" || header || data region``.
"""

__version__ = "1.0.0"

__all__ = [
    "constants",
    "context",
    "errors",
    "metadata",
    "writer",
    "reader",
]

# Programmatic API: cats.writer.pack / cats.reader.unpack, or ArchiveWriter /
# ArchiveReader for finer control. The CLI lives in cats.cli.
