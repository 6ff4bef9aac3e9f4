from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterator, List, Tuple, Union

from .constants import COMPRESSION_GZIP, COMPRESSION_NONE, FORMAT_VERSION


class Compression(enum.IntEnum):
    """Per-blob compression flag; the value is the on-disk sentinel byte."""

    GZIP = COMPRESSION_GZIP
    NONE = COMPRESSION_NONE

    def __str__(self) -> str:
        return self.name.lower()


@dataclass
class FileEntry:
    name: str
    offset: int  # into the data region, not the archive file
    size: int
    compression: Compression = Compression.NONE


@dataclass
class DirectoryEntry:
    name: str
    entries: List["Entry"] = field(default_factory=list)


Entry = Union[FileEntry, DirectoryEntry]


@dataclass
class Header:
    entries: List[Entry] = field(default_factory=list)
    version: int = FORMAT_VERSION


def walk_entries(entries: List[Entry], prefix: str = "") -> Iterator[Tuple[str, Entry]]:
    """Yield ``(path, entry)`` depth-first in archive order.

    Paths are slash-joined names relative to the packed root.
    """
    for e in entries:
        path = f"{prefix}/{e.name}" if prefix else e.name
        yield path, e
        if isinstance(e, DirectoryEntry):
            yield from walk_entries(e.entries, path)
