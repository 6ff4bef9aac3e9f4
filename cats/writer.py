from __future__ import annotations

import io
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from .constants import MAGIC, MAX_DEPTH
from .context import PathContext
from .errors import ErrorReadingFile, ErrorWritingFile, InvalidInputPath, InvalidMetadata
from .metadata import write_header
from .model import Compression, DirectoryEntry, Entry, FileEntry, Header
from .pathutil import validate_name
from .store import ContentStore

PathLike = Union[str, "os.PathLike[str]"]


@dataclass
class PackOptions:
    verbose: bool = False
    compress: bool = True


class ArchiveWriter:
    """Collects a directory tree into a header plus a deduplicated data region.

    Usage::

        with ArchiveWriter("out.cats", compress=True) as w:
            w.add_tree("some/dir")

    Leaving the block without an error finalizes the archive.
    """

    def __init__(self, out_path: PathLike, compress: bool = True, verbose: bool = False):
        self.out_path = Path(out_path)
        self.verbose = verbose
        self.store = ContentStore(Compression.GZIP if compress else Compression.NONE)
        self.entries: List[Entry] = []
        self.header: Optional[Header] = None
        self._skip: Optional[Path] = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.finalize()

    def add_tree(self, directory: PathLike) -> None:
        """Add the *contents* of ``directory`` as top-level entries."""
        root = Path(directory)
        if not root.is_dir():
            raise InvalidInputPath(str(root))
        # Never pack the archive being written (e.g. `cats pack out.cats .`)
        self._skip = self.out_path.resolve()
        self.entries.extend(self._children(root, PathContext("pack"), 1))

    def add_dir(self, fs_path: Path, context: PathContext, depth: int = 1) -> DirectoryEntry:
        """Add a directory sitting ``depth`` levels below the archive root."""
        if depth > MAX_DEPTH:
            raise InvalidMetadata(context, f"nesting deeper than {MAX_DEPTH}")
        name = validate_name(fs_path.name, context)
        return DirectoryEntry(name=name, entries=self._children(fs_path, context, depth + 1))

    def add_file(self, fs_path: Path, context: PathContext) -> FileEntry:
        """Read a file and resolve it against the content store."""
        name = validate_name(fs_path.name, context)
        if self.verbose:
            print(f"Serializing file {fs_path}")
        try:
            raw = fs_path.read_bytes()
        except OSError as exc:
            raise ErrorReadingFile(str(fs_path), str(exc)) from exc
        blob = self.store.add(raw, context)
        return FileEntry(name=name, offset=blob.offset, size=blob.size, compression=blob.compression)

    def finalize(self) -> Header:
        """Write ``MAGIC || header || data region`` to the target (truncating)."""
        if self.header is not None:
            return self.header
        header = Header(entries=self.entries)
        buf = io.BytesIO()
        write_header(buf, header, PathContext("pack"))
        try:
            with open(self.out_path, "wb") as f:
                f.write(MAGIC)
                f.write(buf.getvalue())
                f.write(self.store.data)
                f.flush()
        except OSError as exc:
            raise ErrorWritingFile(str(self.out_path), str(exc)) from exc
        self.header = header
        return header

    # internals
    def _children(self, fs_dir: Path, context: PathContext, depth: int) -> List[Entry]:
        if self.verbose:
            print(f"Serializing directory {fs_dir}")
        try:
            names = sorted(os.listdir(fs_dir))
        except OSError as exc:
            raise ErrorReadingFile(str(fs_dir), str(exc)) from exc
        out: List[Entry] = []
        for name in names:
            child = fs_dir / name
            ctx = context.push(name)
            if child.is_dir():
                out.append(self.add_dir(child, ctx, depth))
            elif child.is_file():
                if self._skip is not None and child.resolve() == self._skip:
                    continue
                if depth > MAX_DEPTH:
                    raise InvalidMetadata(ctx, f"nesting deeper than {MAX_DEPTH}")
                out.append(self.add_file(child, ctx))
            else:
                raise ErrorReadingFile(str(child), "not a regular file or directory")
        return out


def pack(source_directory: PathLike, target_file: PathLike, options: Optional[PackOptions] = None) -> Header:
    """Pack the contents of ``source_directory`` into ``target_file``.

    Returns the header that was written.
    """
    opts = options or PackOptions()
    with ArchiveWriter(target_file, compress=opts.compress, verbose=opts.verbose) as writer:
        writer.add_tree(source_directory)
    return writer.header
