"""Constants used throughout the package."""

# First two bytes of every gzip member (RFC 1952)
GZIP_MAGIC = b"\x1f\x8b"

# Bytes read from a stream to decide whether it is gzip-encoded
PROBE_SIZE = 3

# Lookahead bound passed to mark() before probing
MARK_READ_LIMIT = 5

# zlib window bits selecting gzip framing
GZIP_WBITS = 16 + 15

# Default chunk size for file compression (in bytes)
DEFAULT_IO_BUFFER_SIZE = 1024 * 1024

# Bytes requested from the source per read while inflating a stream
SOURCE_READ_SIZE = 64 * 1024
