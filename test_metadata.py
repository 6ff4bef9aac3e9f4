from __future__ import annotations

import io
import unittest

from cats.binio import read_string, read_u16, read_u32, write_string, write_u16, write_u32
from cats.constants import MAGIC, MAX_DEPTH
from cats.context import PathContext
from cats.errors import (
    ErrorReadingMetadata,
    ErrorWritingMetadata,
    InvalidEntryData,
    InvalidEntryName,
    InvalidEntryType,
    InvalidMetadata,
    UnknownVersion,
    wrap_context,
)
from cats.metadata import read_entry, read_header, write_entry, write_header
from cats.model import Compression, DirectoryEntry, FileEntry, Header
from cats.pathutil import is_valid_name


def _nested_header() -> Header:
    return Header(
        entries=[
            FileEntry("top.txt", 0, 3, Compression.NONE),
            DirectoryEntry(
                "outer",
                [DirectoryEntry("inner", [FileEntry("c.txt", 3, 7, Compression.GZIP)])],
            ),
        ]
    )


def _encode(header: Header) -> bytes:
    buf = io.BytesIO()
    write_header(buf, header, PathContext("pack"))
    return buf.getvalue()


class PathContextTests(unittest.TestCase):
    def test_push_does_not_mutate(self):
        root = PathContext("header")
        a = root.push("docs")
        b = root.push("img")
        self.assertEqual(root.render(), "header")
        self.assertEqual(a.render(), "header/docs")
        self.assertEqual(b.render(), "header/img")
        self.assertIs(a.parent, root)
        self.assertEqual(str(a.push("a.txt").push("file offset")), "header/docs/a.txt/file offset")
        self.assertEqual(a.push("x").depth(), 2)


class ErrorTests(unittest.TestCase):
    def test_exit_codes(self):
        from cats import errors as e

        ctx = PathContext("x")
        cases = [
            (e.UnknownArgument(), -1),
            (e.InvalidInputPath("p"), -1),
            (e.FailedToOpenInput("p", "m"), -1),
            (e.InvalidFileType(), -1),
            (e.UnknownVersion(), 1),
            (e.InvalidMetadata(ctx), 2),
            (e.FailedToCompressData(ctx, "m"), -2),
            (e.InvalidEntryName(ctx), 100),
            (e.InvalidEntryData(ctx), 101),
            (e.InvalidEntryType(ctx, 9), 102),
            (e.UnableToCreateDirectory("p"), 200),
            (e.ErrorWritingFile("p", "m"), 201),
            (e.ErrorReadingFile("p", "m"), 202),
            (e.ErrorWritingMetadata(ctx, "m"), 203),
            (e.ErrorReadingMetadata(ctx, "m"), 204),
        ]
        for err, code in cases:
            self.assertEqual(err.exit_code, code, type(err).__name__)

    def test_rendering(self):
        ctx = PathContext("pack").push("docs").push("bad name")
        self.assertEqual(str(InvalidEntryName(ctx)), "Invalid filename at 'pack/docs/bad name'")
        self.assertEqual(str(InvalidEntryType(PathContext("header"), 7)), "Invalid entry type 7 at 'header'")
        self.assertEqual(
            str(ErrorReadingMetadata(PathContext("header").push("version"), "Unexpected EOF")),
            "Failed to read metadata for 'header/version' reason: Unexpected EOF",
        )

    def test_wrap_context_converts_low_level_errors(self):
        ctx = PathContext("pack").push("file size")
        with self.assertRaises(ErrorWritingMetadata) as cm:
            with wrap_context(ctx, ErrorWritingMetadata):
                raise OSError("disk full")
        self.assertIs(cm.exception.context, ctx)
        self.assertEqual(cm.exception.reason, "disk full")
        self.assertIsInstance(cm.exception.__cause__, OSError)

    def test_wrap_context_keeps_inner_error(self):
        inner = PathContext("header").push("deep")
        with self.assertRaises(InvalidEntryData) as cm:
            with wrap_context(PathContext("outer"), ErrorReadingMetadata):
                raise InvalidEntryData(inner)
        self.assertIs(cm.exception.context, inner)


class BinioTests(unittest.TestCase):
    def test_big_endian_fields(self):
        buf = io.BytesIO()
        write_u16(buf, 0x0102)
        write_u32(buf, 0x03040506)
        self.assertEqual(buf.getvalue(), b"\x01\x02\x03\x04\x05\x06")
        buf.seek(0)
        self.assertEqual(read_u16(buf), 0x0102)
        self.assertEqual(read_u32(buf), 0x03040506)

    def test_string_is_length_prefixed_and_lossy(self):
        buf = io.BytesIO()
        write_string(buf, "abc")
        self.assertEqual(buf.getvalue(), b"\x03abc")
        self.assertEqual(read_string(io.BytesIO(b"\x02\xff\xfe")), "\ufffd\ufffd")

    def test_string_limit(self):
        with self.assertRaises(ValueError):
            write_string(io.BytesIO(), "a" * 256)

    def test_short_read(self):
        with self.assertRaises(EOFError):
            read_u32(io.BytesIO(b"\x00\x01"))
        with self.assertRaises(EOFError):
            read_string(io.BytesIO(b"\x05ab"))


class NameValidationTests(unittest.TestCase):
    def test_rules(self):
        for good in ("a.txt", "README", ".hidden", "x" * 255, "a-b_c~!"):
            self.assertTrue(is_valid_name(good), good)
        for bad in ("", "..", ".", "a/b", "a\\b", "a b", "tab\t", "café", "x" * 256, "nul\x00"):
            self.assertFalse(is_valid_name(bad), repr(bad))


class HeaderCodecTests(unittest.TestCase):
    def test_exact_layout(self):
        header = Header(entries=[FileEntry("a", 1, 2, Compression.NONE), DirectoryEntry("d", [])])
        self.assertEqual(
            _encode(header),
            b"\x01\x00\x02"
            b"\x00\x01a\x00\x00\x00\x01\x00\x00\x00\x02\xff"
            b"\x01\x01d\x00\x00",
        )

    def test_decode_matches_encode(self):
        header = _nested_header()
        decoded = read_header(io.BytesIO(_encode(header)), PathContext("header"))
        self.assertEqual(decoded, header)

    def test_unknown_version_rejected_before_entries(self):
        # Entry bytes are garbage; the version gate must fire first
        with self.assertRaises(UnknownVersion) as cm:
            read_header(io.BytesIO(b"\x02\x00\x01\x07"), PathContext("header"))
        self.assertEqual(cm.exception.version, 2)
        self.assertEqual(cm.exception.exit_code, 1)

    def test_truncated_offset_names_every_ancestor(self):
        raw = _encode(_nested_header())
        pos = raw.index(b"\x05c.txt") + len(b"\x05c.txt")
        with self.assertRaises(ErrorReadingMetadata) as cm:
            read_header(io.BytesIO(raw[: pos + 2]), PathContext("header"))
        self.assertEqual(cm.exception.context.render(), "header/outer/inner/c.txt/file offset")

    def test_invalid_entry_type(self):
        with self.assertRaises(InvalidEntryType) as cm:
            read_header(io.BytesIO(b"\x01\x00\x01\x07"), PathContext("header"))
        self.assertEqual(cm.exception.value, 7)
        self.assertEqual(cm.exception.context.render(), "header/entry type")

    def test_invalid_compression_byte(self):
        raw = bytearray(_encode(Header(entries=[FileEntry("f", 0, 0, Compression.NONE)])))
        self.assertEqual(raw[-1], 0xFF)
        raw[-1] = 0x00
        with self.assertRaises(InvalidEntryData) as cm:
            read_header(io.BytesIO(bytes(raw)), PathContext("header"))
        self.assertEqual(cm.exception.context.render(), "header/f/compression")

    def test_too_many_children(self):
        big = DirectoryEntry("big", [FileEntry(f"f{i}", 0, 0) for i in range(0x10000)])
        with self.assertRaises(ErrorWritingMetadata) as cm:
            write_entry(io.BytesIO(), big, PathContext("pack"))
        self.assertEqual(cm.exception.context.render(), "pack/big/entry length")

    def test_overlong_name_is_invalid_name(self):
        with self.assertRaises(InvalidEntryName):
            write_entry(io.BytesIO(), FileEntry("a" * 256, 0, 0), PathContext("pack"))

    def test_offset_out_of_u32_range(self):
        with self.assertRaises(ErrorWritingMetadata) as cm:
            write_entry(io.BytesIO(), FileEntry("f", 1 << 32, 0), PathContext("pack"))
        self.assertEqual(cm.exception.context.render(), "pack/f/file offset")

    def test_depth_limit(self):
        raw = b"\x01\x00\x01" + b"\x01\x01d\x00\x01" * (MAX_DEPTH + 2)
        with self.assertRaises(InvalidMetadata):
            read_header(io.BytesIO(raw), PathContext("header"))
        deep = DirectoryEntry("d")
        for _ in range(MAX_DEPTH + 1):
            deep = DirectoryEntry("d", [deep])
        with self.assertRaises(InvalidMetadata):
            write_entry(io.BytesIO(), deep, PathContext("pack"))

    def test_read_entry_directory(self):
        buf = io.BytesIO()
        write_entry(buf, DirectoryEntry("d", [FileEntry("x", 5, 6, Compression.GZIP)]), PathContext("pack"))
        buf.seek(0)
        self.assertEqual(
            read_entry(buf, PathContext("header")),
            DirectoryEntry("d", [FileEntry("x", 5, 6, Compression.GZIP)]),
        )

    def test_magic(self):
        self.assertEqual(MAGIC, bytes([0x43, 0x41, 0x54, 0x53]))


if __name__ == "__main__":
    unittest.main()
