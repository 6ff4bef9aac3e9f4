"""
Header encoding for .cats archives.

Layout (all integers big-endian)
- Header: version u8 || entry_count u16 || entry_count entries
- Entry:  type u8 (0 = file, 1 = directory) || name (len u8 || bytes)
  - file:      offset u32 || size u32 || compression u8 (0xFE gzip, 0xFF none)
  - directory: child_count u16 || child_count entries (recursive)

Every field is read or written under its own PathContext segment, and
descending into an entry pushes the entry's name, so a failure renders as
e.g. ``header/docs/img/logo.png/file offset``.
"""

from __future__ import annotations

from typing import BinaryIO, List

from .binio import read_string, read_u16, read_u32, read_u8, write_string, write_u16, write_u32, write_u8
from .constants import ENTRY_DIRECTORY, ENTRY_FILE, FORMAT_VERSION, MAX_CHILDREN, MAX_DEPTH, MAX_NAME_BYTES
from .context import PathContext
from .errors import (
    ErrorReadingMetadata,
    ErrorWritingMetadata,
    InvalidEntryData,
    InvalidEntryName,
    InvalidEntryType,
    InvalidMetadata,
    UnknownVersion,
    wrap_context,
)
from .model import Compression, DirectoryEntry, Entry, FileEntry, Header


def write_compression(f: BinaryIO, compression: Compression, context: PathContext) -> None:
    with wrap_context(context, ErrorWritingMetadata):
        write_u8(f, int(compression))


def read_compression(f: BinaryIO, context: PathContext) -> Compression:
    with wrap_context(context, ErrorReadingMetadata):
        value = read_u8(f)
    try:
        return Compression(value)
    except ValueError:
        raise InvalidEntryData(context, f"unknown compression byte 0x{value:02x}") from None


def _write_count(f: BinaryIO, count: int, context: PathContext) -> None:
    if count > MAX_CHILDREN:
        raise ErrorWritingMetadata(context, f"{count} entries exceed the limit of {MAX_CHILDREN}")
    with wrap_context(context, ErrorWritingMetadata):
        write_u16(f, count)


def _write_name(f: BinaryIO, name: str, context: PathContext) -> None:
    if len(name.encode("utf-8")) > MAX_NAME_BYTES:
        raise InvalidEntryName(context)
    with wrap_context(context, ErrorWritingMetadata):
        write_string(f, name)


def write_entry(f: BinaryIO, entry: Entry, context: PathContext, depth: int = 1) -> None:
    if depth > MAX_DEPTH:
        raise InvalidMetadata(context, f"nesting deeper than {MAX_DEPTH}")
    if isinstance(entry, FileEntry):
        with wrap_context(context.push("entry type"), ErrorWritingMetadata):
            write_u8(f, ENTRY_FILE)
        _write_name(f, entry.name, context.push("file name"))
        fctx = context.push(entry.name)
        with wrap_context(fctx.push("file offset"), ErrorWritingMetadata):
            write_u32(f, entry.offset)
        with wrap_context(fctx.push("file size"), ErrorWritingMetadata):
            write_u32(f, entry.size)
        write_compression(f, entry.compression, fctx.push("compression"))
    elif isinstance(entry, DirectoryEntry):
        with wrap_context(context.push("entry type"), ErrorWritingMetadata):
            write_u8(f, ENTRY_DIRECTORY)
        _write_name(f, entry.name, context.push("directory name"))
        dctx = context.push(entry.name)
        _write_count(f, len(entry.entries), dctx.push("entry length"))
        for child in entry.entries:
            write_entry(f, child, dctx, depth + 1)
    else:
        raise TypeError(f"not an archive entry: {entry!r}")


def read_entry(f: BinaryIO, context: PathContext, depth: int = 1) -> Entry:
    if depth > MAX_DEPTH:
        raise InvalidMetadata(context, f"nesting deeper than {MAX_DEPTH}")
    tctx = context.push("entry type")
    with wrap_context(tctx, ErrorReadingMetadata):
        kind = read_u8(f)
    if kind == ENTRY_FILE:
        with wrap_context(context.push("file name"), ErrorReadingMetadata):
            name = read_string(f)
        fctx = context.push(name)
        with wrap_context(fctx.push("file offset"), ErrorReadingMetadata):
            offset = read_u32(f)
        with wrap_context(fctx.push("file size"), ErrorReadingMetadata):
            size = read_u32(f)
        compression = read_compression(f, fctx.push("compression"))
        return FileEntry(name=name, offset=offset, size=size, compression=compression)
    if kind == ENTRY_DIRECTORY:
        with wrap_context(context.push("directory name"), ErrorReadingMetadata):
            name = read_string(f)
        dctx = context.push(name)
        with wrap_context(dctx.push("entry length"), ErrorReadingMetadata):
            count = read_u16(f)
        children: List[Entry] = [read_entry(f, dctx, depth + 1) for _ in range(count)]
        return DirectoryEntry(name=name, entries=children)
    raise InvalidEntryType(tctx, kind)


def write_header(f: BinaryIO, header: Header, context: PathContext) -> None:
    with wrap_context(context.push("version"), ErrorWritingMetadata):
        write_u8(f, header.version)
    _write_count(f, len(header.entries), context.push("entries length"))
    for entry in header.entries:
        write_entry(f, entry, context)


def read_header(f: BinaryIO, context: PathContext) -> Header:
    """Decode a header; only FORMAT_VERSION is accepted, checked before any entry."""
    with wrap_context(context.push("version"), ErrorReadingMetadata):
        version = read_u8(f)
    if version != FORMAT_VERSION:
        raise UnknownVersion(version)
    with wrap_context(context.push("entries length"), ErrorReadingMetadata):
        count = read_u16(f)
    entries = [read_entry(f, context) for _ in range(count)]
    return Header(entries=entries, version=version)
