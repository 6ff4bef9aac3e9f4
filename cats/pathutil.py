from __future__ import annotations

from .constants import MAX_NAME_BYTES
from .context import PathContext
from .errors import InvalidEntryName


def is_valid_name(name: str) -> bool:
    """Return True when ``name`` is safe to use as one on-disk path segment.

    Rules:
    - Non-empty and at most 255 bytes
    - Printable ASCII only (0x21..0x7E; space is not allowed)
    - No '/' or '\\'
    - Not '.' or '..'
    """
    if not name or name in (".", ".."):
        return False
    if len(name) > MAX_NAME_BYTES:
        return False
    return all("!" <= c <= "~" and c not in "/\\" for c in name)


def validate_name(name: str, context: PathContext) -> str:
    if not is_valid_name(name):
        raise InvalidEntryName(context)
    return name
