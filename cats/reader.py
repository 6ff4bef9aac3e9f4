from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from .codec import Codec
from .constants import MAGIC
from .context import PathContext
from .errors import (
    ErrorReadingFile,
    ErrorWritingFile,
    FailedToOpenInput,
    InvalidEntryData,
    InvalidFileType,
    InvalidInputPath,
    UnableToCreateDirectory,
    wrap_context,
)
from .metadata import read_header
from .model import DirectoryEntry, Entry, FileEntry, Header, walk_entries
from .pathutil import validate_name

PathLike = Union[str, "os.PathLike[str]"]


@dataclass
class UnpackOptions:
    verbose: bool = False


def _make_dirs(path: Path) -> None:
    try:
        os.makedirs(path, exist_ok=True)
    except OSError as exc:
        raise UnableToCreateDirectory(str(path), str(exc)) from exc


class ArchiveReader:
    """Loads a .cats archive fully into memory and serves its entries.

    ``open`` checks the magic, decodes the header (rejecting unknown
    versions before any entry is read), keeps the trailing bytes as the
    data region and indexes every entry by its slash-joined path.
    """

    def __init__(self, path: PathLike):
        self.path = Path(path)
        self.header: Optional[Header] = None
        self.data: bytes = b""
        self._index: Dict[str, Entry] = {}

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def open(self):
        if self.header is not None:
            return
        if not self.path.is_file():
            raise InvalidInputPath(str(self.path))
        try:
            f = open(self.path, "rb")
        except OSError as exc:
            raise FailedToOpenInput(str(self.path), str(exc)) from exc
        with f:
            try:
                magic = f.read(len(MAGIC))
            except OSError as exc:
                raise ErrorReadingFile(str(self.path), str(exc)) from exc
            if magic != MAGIC:
                raise InvalidFileType()
            header = read_header(f, PathContext("header"))
            try:
                data = f.read()
            except OSError as exc:
                raise ErrorReadingFile(str(self.path), str(exc)) from exc
        index: Dict[str, Entry] = {}
        self._index_entries(header.entries, "", PathContext("index"), index)
        self.header = header
        self.data = data
        self._index = index

    def close(self):
        self.header = None
        self.data = b""
        self._index = {}

    def list(self) -> List[Tuple[str, Entry]]:
        if self.header is None:
            raise RuntimeError("Archive not open")
        return list(walk_entries(self.header.entries))

    def get_entry(self, path: str) -> Optional[Entry]:
        if self.header is None:
            raise RuntimeError("Archive not open")
        return self._index.get(path.strip("/"))

    def read(self, entry: Union[str, FileEntry], context: Optional[PathContext] = None) -> bytes:
        """Return the decompressed content of a file entry.

        Raises:
            KeyError: If ``entry`` is a path that does not name a file.
            InvalidEntryData: If the entry's range lies outside the data
                region or its gzip stream is corrupt.
        """
        if self.header is None:
            raise RuntimeError("Archive not open")
        if isinstance(entry, str):
            found = self.get_entry(entry)
            if not isinstance(found, FileEntry):
                raise KeyError(f"no file entry {entry!r}")
            context = context or PathContext("read").push(entry.strip("/"))
            entry = found
        context = context or PathContext("read").push(entry.name)
        end = entry.offset + entry.size
        if end > len(self.data):
            raise InvalidEntryData(
                context, f"range {entry.offset}..{end} outside data region of {len(self.data)} bytes"
            )
        blob = self.data[entry.offset:end]
        with wrap_context(context, InvalidEntryData):
            return Codec(entry.compression).decompress(blob)

    def extract_all(self, outdir: PathLike, verbose: bool = False) -> None:
        """Materialize every entry under ``outdir``, depth-first in archive order."""
        if self.header is None:
            raise RuntimeError("Archive not open")
        _make_dirs(Path(outdir))
        self._extract(self.header.entries, Path(outdir), PathContext("unpacking"), verbose)

    # internals
    def _index_entries(self, entries: List[Entry], prefix: str, context: PathContext, out: Dict[str, Entry]):
        for e in entries:
            ctx = context.push(e.name)
            validate_name(e.name, ctx)
            path = f"{prefix}/{e.name}" if prefix else e.name
            out[path] = e
            if isinstance(e, DirectoryEntry):
                self._index_entries(e.entries, path, ctx, out)

    def _extract(self, entries: List[Entry], dest: Path, context: PathContext, verbose: bool):
        for e in entries:
            ctx = context.push(e.name)
            target = dest / validate_name(e.name, ctx)
            if isinstance(e, DirectoryEntry):
                if verbose:
                    print(f"Unpacking {target}")
                _make_dirs(target)
                self._extract(e.entries, target, ctx, verbose)
                continue
            content = self.read(e, ctx)
            if verbose:
                print(f"Unpacking {target}")
            _make_dirs(target.parent)
            try:
                with open(target, "wb") as wf:
                    wf.write(content)
            except OSError as exc:
                raise ErrorWritingFile(str(target), str(exc)) from exc


def unpack(target_directory: PathLike, source_archive: PathLike, options: Optional[UnpackOptions] = None) -> Header:
    """Unpack ``source_archive`` into ``target_directory``; returns the decoded header."""
    opts = options or UnpackOptions()
    with ArchiveReader(source_archive) as r:
        header = r.header
        r.extract_all(target_directory, verbose=opts.verbose)
    return header
