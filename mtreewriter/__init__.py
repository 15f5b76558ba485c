"""
mtreewriter: streaming writer for mtree-style manifests.

Features:

- One pass over entry metadata and content; nothing but the current line and
  a bounded output buffer is held in memory.
- Names and values are octal-escaped so every token is free of whitespace,
  '#', '=' and '\\'.
- POSIX cksum plus MD5, RIPEMD-160 and SHA-1/256/384/512 digests (via
  PyCryptodomex), computed incrementally as content is written.
- A /set directive captured from the first regular file; later entries only
  carry the attributes that differ from it.
- Lines wrapped at 80 columns with backslash continuations.
"""

__version__ = "0.1"

from .entry import Entry, FileType, entry_from_path
from .errors import MtreeError, SequencingError, SessionFailedError, SinkWriteError
from .escape import escape, unescape
from .keywords import Keyword, OptionStatus
from .writer import MtreeWriter, open_writer

__all__ = [
    "Entry",
    "FileType",
    "entry_from_path",
    "MtreeError",
    "SequencingError",
    "SessionFailedError",
    "SinkWriteError",
    "escape",
    "unescape",
    "Keyword",
    "OptionStatus",
    "MtreeWriter",
    "open_writer",
]
