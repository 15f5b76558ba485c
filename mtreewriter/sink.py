from __future__ import annotations

import gzip
import sys
from typing import BinaryIO, Optional, Protocol

from .constants import COMPRESS_GZIP, COMPRESS_NONE, COMPRESS_ZSTD
from .errors import SinkWriteError

_HAS_ZSTD = False
_zstd_mod = None
try:
    import zstandard as _zstd_mod  # type: ignore
    _HAS_ZSTD = True
except ImportError:
    _zstd_mod = None
    _HAS_ZSTD = False


class ByteSink(Protocol):
    def write(self, data: bytes) -> Optional[int]:
        ...


def check_written(expected: int, written: Optional[int]) -> None:
    """Raise on a short write. ``None`` means the sink took everything."""
    if written is not None and written != expected:
        raise SinkWriteError(f"short write: {written} of {expected} bytes")


class FileSink:
    """Sink over a binary file object, optionally wrapped in a compressor."""

    def __init__(self, fh: BinaryIO, *, compression: str = COMPRESS_NONE, level: Optional[int] = None, owns: bool = False):
        self.fh = fh
        self.compression = compression
        self.owns = owns
        self.bytes_in = 0
        self._stream = None
        self._zctx = None
        if compression == COMPRESS_NONE:
            pass
        elif compression == COMPRESS_GZIP:
            self._stream = gzip.GzipFile(fileobj=fh, mode="wb", compresslevel=level if level is not None else 6)
        elif compression == COMPRESS_ZSTD:
            if not (_HAS_ZSTD and _zstd_mod is not None):
                raise RuntimeError("zstd compression selected but zstandard module is not available")
            cctx = _zstd_mod.ZstdCompressor(level=level if level is not None else 3)
            self._zctx = cctx.compressobj()
        else:
            raise RuntimeError(f"unsupported compression: {compression}")

    def write(self, data: bytes) -> int:
        if not data:
            return 0
        if self._stream is not None:
            self._stream.write(data)
        elif self._zctx is not None:
            self.fh.write(self._zctx.compress(data))
        else:
            check_written(len(data), self.fh.write(data))
        self.bytes_in += len(data)
        return len(data)

    def close(self) -> None:
        if self._stream is not None:
            self._stream.close()
            self._stream = None
        if self._zctx is not None:
            self.fh.write(self._zctx.flush())
            self._zctx = None
        self.fh.flush()
        if self.owns:
            self.fh.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def open_sink(path: str, compression: str = COMPRESS_NONE, level: Optional[int] = None) -> FileSink:
    """Open ``path`` for writing; ``-`` selects standard output."""
    if path == "-":
        return FileSink(sys.stdout.buffer, compression=compression, level=level, owns=False)
    return FileSink(open(path, "wb"), compression=compression, level=level, owns=True)
