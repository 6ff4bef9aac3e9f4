from __future__ import annotations

import struct
from typing import BinaryIO

from .constants import MAX_NAME_BYTES

# Big-endian fixed-width fields
_U8 = struct.Struct(">B")
_U16 = struct.Struct(">H")
_U32 = struct.Struct(">I")


def read_exact(f: BinaryIO, n: int) -> bytes:
    b = f.read(n)
    if len(b) != n:
        raise EOFError("Unexpected EOF")
    return b


def write_all(f: BinaryIO, data: bytes) -> None:
    written = f.write(data)
    # Raw (unbuffered) sinks may accept fewer bytes than requested
    if written is not None and written != len(data):
        raise OSError(f"short write ({written} of {len(data)} bytes)")


def write_u8(f: BinaryIO, value: int) -> None:
    write_all(f, _U8.pack(value))


def write_u16(f: BinaryIO, value: int) -> None:
    write_all(f, _U16.pack(value))


def write_u32(f: BinaryIO, value: int) -> None:
    write_all(f, _U32.pack(value))


def read_u8(f: BinaryIO) -> int:
    return _U8.unpack(read_exact(f, 1))[0]


def read_u16(f: BinaryIO) -> int:
    return _U16.unpack(read_exact(f, 2))[0]


def read_u32(f: BinaryIO) -> int:
    return _U32.unpack(read_exact(f, 4))[0]


def write_string(f: BinaryIO, s: str) -> None:
    """Write ``len(u8) || utf-8 bytes``; names longer than 255 bytes are refused."""
    raw = s.encode("utf-8")
    if len(raw) > MAX_NAME_BYTES:
        raise ValueError(f"string of {len(raw)} bytes exceeds {MAX_NAME_BYTES}-byte limit")
    write_all(f, _U8.pack(len(raw)) + raw)


def read_string(f: BinaryIO) -> str:
    n = read_u8(f)
    return read_exact(f, n).decode("utf-8", errors="replace")
