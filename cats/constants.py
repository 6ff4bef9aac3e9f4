# Magic and version
MAGIC = b"CATS"   # 4 bytes: 0x43 0x41 0x54 0x53
FORMAT_VERSION = 1

# Entry type tags
ENTRY_FILE = 0
ENTRY_DIRECTORY = 1

# Compression sentinels (single byte per file entry)
COMPRESSION_GZIP = 0xFE
COMPRESSION_NONE = 0xFF

GZIP_LEVEL = 9

# Field limits imposed by the on-disk widths
MAX_NAME_BYTES = 0xFF
MAX_CHILDREN = 0xFFFF
MAX_U32 = 0xFFFFFFFF

# Nesting bound for the recursive walks (pack, decode, unpack)
MAX_DEPTH = 128
