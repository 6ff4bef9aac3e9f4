from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from cats.errors import CatError, UnknownArgument
from cats.model import DirectoryEntry, walk_entries
from cats.reader import ArchiveReader, UnpackOptions, unpack
from cats.writer import ArchiveWriter


class _ArgumentParser(argparse.ArgumentParser):
    """argparse parser that reports usage errors as ``UnknownArgument``."""

    def error(self, message: str):
        self.print_usage(sys.stderr)
        raise UnknownArgument(message)


def cmd_pack(archive: str, input_dir: str = ".", *, verbose: bool = False, gzip: bool = True) -> bool:
    """Pack the contents of ``input_dir`` into ``archive``.

    Args:
        archive: Output .cats path (truncated if it exists).
        input_dir: Directory whose contents become the archive's top level.
        verbose: Print every directory and file as it is visited.
        gzip: Compress each unique blob with gzip (level 9).
    """
    with ArchiveWriter(archive, compress=gzip, verbose=verbose) as writer:
        writer.add_tree(input_dir)
    header = writer.header
    files = sum(1 for _p, e in walk_entries(header.entries) if not isinstance(e, DirectoryEntry))
    print(
        f"Packed {files} file(s) into {archive} "
        f"({len(writer.store)} unique blob(s), {len(writer.store.data)} data bytes, {str(writer.store.compression)})"
    )
    return True


def cmd_unpack(archive: str, destination: Optional[str] = None, *, verbose: bool = False) -> bool:
    """Unpack ``archive`` into ``destination``.

    When ``destination`` is omitted the archive path without its extension is used
    (``backup.cats`` -> ``backup``).
    """
    if destination is None:
        destination = str(Path(archive).with_suffix(""))
    unpack(destination, archive, UnpackOptions(verbose=verbose))
    return True


def cmd_list(archive: str) -> bool:
    """List archive entries depth-first."""
    with ArchiveReader(archive) as r:
        entries = r.list()
    for path, e in entries:
        if isinstance(e, DirectoryEntry):
            print(f"dir\t{path}/")
        else:
            print(f"file\t{e.size}\t{str(e.compression)}\t{path}")
    return True


def main(argv: List[str] | None = None):
    ap = _ArgumentParser(
        prog="cats",
        description="Pack a directory tree into a single .cats archive and unpack it again",
    )
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_pack = sub.add_parser("pack", help="Pack a directory into an archive")
    ap_pack.add_argument("archive", help="Output archive path")
    ap_pack.add_argument("input_dir", nargs="?", default=".", help="Directory to pack (default: .)")
    ap_pack.add_argument("-v", "--verbose", action="store_true", help="Print every visited path")
    ap_pack.add_argument("-n", "--no-gzip", dest="gzip", action="store_false", help="Store file contents uncompressed")

    ap_unpack = sub.add_parser("unpack", help="Unpack an archive")
    ap_unpack.add_argument("archive", help="Archive path")
    ap_unpack.add_argument("destination", nargs="?", help="Output directory (default: archive name without extension)")
    ap_unpack.add_argument("-v", "--verbose", action="store_true", help="Print every written path")

    ap_list = sub.add_parser("list", help="List archive contents")
    ap_list.add_argument("archive", help="Archive path")

    try:
        args = ap.parse_args(argv)
        if args.cmd == "pack":
            cmd_pack(args.archive, args.input_dir, verbose=args.verbose, gzip=args.gzip)
        elif args.cmd == "unpack":
            cmd_unpack(args.archive, args.destination, verbose=args.verbose)
        elif args.cmd == "list":
            cmd_list(args.archive)
        else:
            raise UnknownArgument(args.cmd)
    except CatError as e:
        print(f"An error occurred!\n{e}", file=sys.stderr)
        sys.exit(e.exit_code)
    sys.exit(0)


if __name__ == "__main__":
    main()
