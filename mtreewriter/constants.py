# Output signature written once at the top of every stream
MTREE_SIGNATURE = b"#mtree\n"

# Line layout
INDENT_NAME_LEN = 15  # entry names are padded to this column
MAX_LINE_LEN = 80
CONTINUATION = b" \\\n"

# Output buffer is handed to the sink once it grows past this many bytes
FLUSH_THRESHOLD = 32768

# Mode bits kept in mode= values (permissions + setuid/setgid/sticky)
MODE_MASK = 0o7777

# Link count written into the /set directive
DEFAULT_NLINK = 1

# CLI read size when streaming file content
DEFAULT_READ_CHUNK = 65536

# Sink compression names (POC mapping; none, gzip/deflate, zstd)
COMPRESS_NONE = "none"
COMPRESS_GZIP = "gzip"
COMPRESS_ZSTD = "zstd"
