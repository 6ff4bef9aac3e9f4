from __future__ import annotations

import struct
import zlib
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from .context import PathContext


class CatError(Exception):
    """Base class for every failure a pack/unpack run can surface.

    Each subclass carries a fixed ``exit_code`` that the CLI hands back to
    the shell, so scripted callers can branch on the kind of failure.
    """

    exit_code = -1

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# Argument / input validation
class UnknownArgument(CatError):
    exit_code = -1

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail
        super().__init__("Unknown Argument" + (f": {detail}" if detail else ""))


class InvalidInputPath(CatError):
    exit_code = -1

    def __init__(self, path: str):
        self.path = str(path)
        super().__init__(f"Invalid input path '{self.path}'")


class FailedToOpenInput(CatError):
    exit_code = -1

    def __init__(self, path: str, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Failed to read '{self.path}' reason: {reason}")


class InvalidFileType(CatError):
    exit_code = -1

    def __init__(self):
        super().__init__("Invalid filetype")


class UnknownVersion(CatError):
    exit_code = 1

    def __init__(self, version: Optional[int] = None):
        self.version = version
        super().__init__("Unknown Version" + (f" {version}" if version is not None else ""))


# Metadata / layout errors; these always carry a PathContext
class ContextError(CatError):
    label = "Invalid data at"

    def __init__(self, context: PathContext, reason: Optional[str] = None):
        self.context = context
        self.reason = reason
        msg = f"{self.label} '{context.render()}'"
        if reason:
            msg += f" reason: {reason}"
        super().__init__(msg)


class InvalidMetadata(ContextError):
    exit_code = 2
    label = "Invalid Metadata at"


class FailedToCompressData(ContextError):
    exit_code = -2
    label = "Failed to compress data for"


class InvalidEntryName(ContextError):
    exit_code = 100
    label = "Invalid filename at"


class InvalidEntryData(ContextError):
    exit_code = 101
    label = "Invalid entry data at"


class InvalidEntryType(ContextError):
    exit_code = 102

    def __init__(self, context: PathContext, value: int):
        self.value = value
        self.label = f"Invalid entry type {value} at"
        super().__init__(context)


class ErrorWritingMetadata(ContextError):
    exit_code = 203
    label = "Failed to write metadata for"


class ErrorReadingMetadata(ContextError):
    exit_code = 204
    label = "Failed to read metadata for"


# Filesystem errors outside the tree; these carry a raw path
class UnableToCreateDirectory(CatError):
    exit_code = 200

    def __init__(self, path: str, reason: Optional[str] = None):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Unable to create directory '{self.path}'")


class ErrorWritingFile(CatError):
    exit_code = 201

    def __init__(self, path: str, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Failed to write '{self.path}' reason: {reason}")


class ErrorReadingFile(CatError):
    exit_code = 202

    def __init__(self, path: str, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Failed to read '{self.path}' reason: {reason}")


# Failures of the byte-level collaborators (file objects, struct, zlib/gzip)
LOW_LEVEL_ERRORS = (OSError, EOFError, struct.error, zlib.error, OverflowError, ValueError)


@contextmanager
def wrap_context(context: PathContext, error_type: Callable[[PathContext, str], CatError]) -> Iterator[None]:
    """Re-raise any low-level failure inside the block as ``error_type``.

    ``CatError`` instances pass through untouched, so nested wraps keep the
    innermost (most precise) context.
    """
    try:
        yield
    except CatError:
        raise
    except LOW_LEVEL_ERRORS as exc:
        raise error_type(context, str(exc) or type(exc).__name__) from exc
