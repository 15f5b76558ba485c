from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Tuple

from .constants import DEFAULT_NLINK, FLUSH_THRESHOLD, MODE_MASK, MTREE_SIGNATURE
from .digests import DIGEST_TABLE, DigestAlgorithm, DigestPipeline, supported_keywords
from .entry import Entry, FileType
from .errors import SequencingError, SessionFailedError
from .escape import escape
from .keywords import DEFAULT_KEYWORDS, SET_KEYWORDS, Keyword, KeywordSet, OptionStatus
from .lineformat import LineFormatter
from .sink import ByteSink, check_written


_TYPE_NAMES = {
    FileType.REGULAR: b"file",
    FileType.DIRECTORY: b"dir",
    FileType.SYMLINK: b"link",
    FileType.FIFO: b"fifo",
    FileType.SOCKET: b"socket",
    FileType.CHAR_DEVICE: b"char",
    FileType.BLOCK_DEVICE: b"block",
}


@dataclass
class GlobalDefaults:
    """Baseline captured from the first regular file and written as /set."""

    uid: Optional[int] = None
    gid: Optional[int] = None
    mode: Optional[int] = None
    fflags_set: Optional[int] = None
    fflags_clear: Optional[int] = None


class MtreeWriter:
    """Streaming encoder producing an mtree specification.

    Call order per entry is ``write_header`` -> ``write_data``* ->
    ``finish_entry``; ``finish`` flushes everything after the last entry.
    Finished lines are buffered and handed to ``sink`` in large writes.
    """

    def __init__(
        self,
        sink: ByteSink,
        options: Optional[Mapping[str, Optional[str]]] = None,
        *,
        digest_table: Tuple[DigestAlgorithm, ...] = DIGEST_TABLE,
        flush_threshold: int = FLUSH_THRESHOLD,
    ):
        self.sink = sink
        self.keys = KeywordSet(DEFAULT_KEYWORDS, supported=supported_keywords(digest_table))
        self.defaults = GlobalDefaults()
        self.flush_threshold = flush_threshold
        self.entry: Optional[Entry] = None
        self.entry_bytes_remaining = 0
        self._first = True
        self._need_global_set = True
        self._digests = DigestPipeline(digest_table)
        self._line = LineFormatter()
        self._buf = bytearray()
        self._failed = False
        self._finished = False
        self._closed = False
        if options:
            for key, value in options.items():
                self.set_option(key, value)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @property
    def buffered(self) -> int:
        return len(self._buf)

    @property
    def failed(self) -> bool:
        return self._failed

    # configuration

    def set_option(self, key: str, value: Optional[str]) -> OptionStatus:
        """Enable (``value`` given) or disable (``value`` None) a keyword."""
        self._check_usable()
        return self.keys.set_option(key, value)

    def set_options(self, options: Iterable[Tuple[str, Optional[str]]]) -> List[str]:
        """Apply several options; return the keys that were not supported."""
        return [k for k, v in options if self.set_option(k, v) is OptionStatus.UNSUPPORTED]

    # entry protocol

    def write_header(self, entry: Entry) -> None:
        self._check_usable()
        if self.entry is not None:
            self._fail(SequencingError("Header written while previous entry is still open."))
        try:
            self.entry = entry.clone()
        except MemoryError:
            self._failed = True
            raise
        is_regular = self.entry.filetype == FileType.REGULAR

        if self._first:
            self._first = False
            self._buf += MTREE_SIGNATURE
        if self._need_global_set and is_regular:
            self._need_global_set = False
            self._write_global_set(self.entry)

        self._buf += self._line.begin(escape(self.entry.pathname))

        self.entry_bytes_remaining = max(0, int(self.entry.size or 0))
        if is_regular:
            self._digests.start(self.keys)
        else:
            self._digests.reset()

    def write_data(self, data: bytes) -> int:
        """Feed entry content to the digests; returns the bytes consumed.

        Input beyond the entry's declared size is not consumed. Clipping
        never raises, but the session checks still do: calling this after a
        fatal error raises ``SessionFailedError``, and after ``finish`` or
        ``close`` it raises ``SequencingError``.
        """
        self._check_usable()
        n = min(len(data), self.entry_bytes_remaining)
        if n:
            self._digests.update(memoryview(data)[:n])
            self.entry_bytes_remaining -= n
        return n

    def finish_entry(self) -> None:
        self._check_usable()
        entry = self.entry
        if entry is None:
            self._fail(SequencingError("Finished entry without being open first."))
        self.entry = None
        self.entry_bytes_remaining = 0

        self._line.extend(self._attribute_tokens(entry))
        self._line.extend(self._type_tokens(entry))
        self._line.extend(self._digests.finalize())
        self._buf += self._line.flush()

        if len(self._buf) > self.flush_threshold:
            self._flush()

    def finish(self) -> None:
        """Hand all remaining output to the sink."""
        self._check_usable()
        if self.entry is not None:
            self._fail(SequencingError("Finish called while an entry is still open."))
        self._flush()
        self._finished = True

    def close(self) -> None:
        """Release buffers and any open entry; nothing further is written."""
        self.entry = None
        self.entry_bytes_remaining = 0
        self._digests.reset()
        self._line.clear()
        self._buf = bytearray()
        self._closed = True

    # internals

    def _check_usable(self) -> None:
        if self._failed:
            raise SessionFailedError("Session is unusable after a fatal error; close it.")
        if self._closed:
            raise SequencingError("Session is closed.")
        if self._finished:
            raise SequencingError("Session already finished.")

    def _fail(self, exc: Exception):
        self._failed = True
        raise exc

    def _flush(self) -> None:
        data = bytes(self._buf)
        try:
            check_written(len(data), self.sink.write(data))
        except Exception:
            self._failed = True
            raise
        self._buf.clear()

    def _write_global_set(self, entry: Entry) -> None:
        d = self.defaults
        d.uid = entry.uid
        d.gid = entry.gid
        d.mode = entry.mode & MODE_MASK
        d.fflags_set, d.fflags_clear = entry.fflags
        if not self.keys.any_of(SET_KEYWORDS):
            return

        tokens: List[bytes] = []
        if Keyword.TYPE in self.keys:
            tokens.append(b"type=" + _TYPE_NAMES[FileType.REGULAR])
        if Keyword.UNAME in self.keys and entry.uname is not None:
            tokens.append(b"uname=" + escape(entry.uname))
        if Keyword.UID in self.keys:
            tokens.append(b"uid=%d" % d.uid)
        if Keyword.GNAME in self.keys and entry.gname is not None:
            tokens.append(b"gname=" + escape(entry.gname))
        if Keyword.GID in self.keys:
            tokens.append(b"gid=%d" % d.gid)
        if Keyword.MODE in self.keys:
            tokens.append(b"mode=%o" % d.mode)
        if Keyword.NLINK in self.keys:
            tokens.append(b"nlink=%d" % DEFAULT_NLINK)
        if Keyword.FLAGS in self.keys and entry.fflags_text is not None:
            tokens.append(b"flags=" + escape(entry.fflags_text))
        if tokens:
            self._buf += b"/set " + b" ".join(tokens) + b"\n"

    def _attribute_tokens(self, entry: Entry) -> List[bytes]:
        keys = self.keys
        d = self.defaults
        tokens: List[bytes] = []
        if Keyword.NLINK in keys and entry.nlink != 1 and entry.filetype != FileType.DIRECTORY:
            tokens.append(b"nlink=%d" % entry.nlink)
        if Keyword.GNAME in keys and d.gid != entry.gid and entry.gname is not None:
            tokens.append(b"gname=" + escape(entry.gname))
        if Keyword.UNAME in keys and d.uid != entry.uid and entry.uname is not None:
            tokens.append(b"uname=" + escape(entry.uname))
        if Keyword.FLAGS in keys:
            if (d.fflags_set, d.fflags_clear) != entry.fflags and entry.fflags_text is not None:
                tokens.append(b"flags=" + escape(entry.fflags_text))
        if Keyword.TIME in keys:
            tokens.append(b"time=%d.%d" % (entry.mtime, entry.mtime_nsec))
        perm = entry.mode & MODE_MASK
        if Keyword.MODE in keys and d.mode != perm:
            tokens.append(b"mode=%o" % perm)
        if Keyword.GID in keys and d.gid != entry.gid:
            tokens.append(b"gid=%d" % entry.gid)
        if Keyword.UID in keys and d.uid != entry.uid:
            tokens.append(b"uid=%d" % entry.uid)
        return tokens

    def _type_tokens(self, entry: Entry) -> List[bytes]:
        keys = self.keys
        ftype = entry.filetype
        tokens: List[bytes] = []
        if ftype == FileType.SYMLINK:
            if Keyword.TYPE in keys:
                tokens.append(b"type=link")
            if Keyword.LINK in keys:
                tokens.append(b"link=" + escape(entry.symlink or b""))
        elif ftype in (
            FileType.SOCKET,
            FileType.CHAR_DEVICE,
            FileType.BLOCK_DEVICE,
            FileType.DIRECTORY,
            FileType.FIFO,
        ):
            if Keyword.TYPE in keys:
                tokens.append(b"type=" + _TYPE_NAMES[FileType(ftype)])
            if ftype in (FileType.CHAR_DEVICE, FileType.BLOCK_DEVICE) and Keyword.DEVICE in keys:
                tokens.append(b"device=native,%d,%d" % (entry.rdevmajor, entry.rdevminor))
        else:
            # regular files and unknown types carry only their size
            if Keyword.SIZE in keys:
                tokens.append(b"size=%d" % entry.size)
        return tokens


def open_writer(sink: ByteSink, options: Optional[Mapping[str, Optional[str]]] = None) -> MtreeWriter:
    return MtreeWriter(sink, options)
