from __future__ import annotations

import copy
import enum
import os
import stat
from dataclasses import dataclass
from typing import Optional, Tuple, Union

try:  # POSIX only
    import grp
    import pwd
except ImportError:  # pragma: no cover - platform dependent
    grp = None  # type: ignore
    pwd = None  # type: ignore

from .constants import MODE_MASK


class FileType(enum.IntEnum):
    REGULAR = stat.S_IFREG
    DIRECTORY = stat.S_IFDIR
    SYMLINK = stat.S_IFLNK
    FIFO = stat.S_IFIFO
    SOCKET = stat.S_IFSOCK
    CHAR_DEVICE = stat.S_IFCHR
    BLOCK_DEVICE = stat.S_IFBLK


# BSD file flags and their textual names, in rendering order
_FFLAG_NAMES: Tuple[Tuple[str, int], ...] = (
    ("nodump", stat.UF_NODUMP),
    ("uappnd", stat.UF_APPEND),
    ("uchg", stat.UF_IMMUTABLE),
    ("uunlnk", stat.UF_NOUNLINK),
    ("opaque", stat.UF_OPAQUE),
    ("hidden", stat.UF_HIDDEN),
    ("arch", stat.SF_ARCHIVED),
    ("sappnd", stat.SF_APPEND),
    ("schg", stat.SF_IMMUTABLE),
    ("sunlnk", stat.SF_NOUNLINK),
    ("snapshot", stat.SF_SNAPSHOT),
)


def fflags_to_text(fset: int, fclear: int = 0) -> Optional[str]:
    """Render file flag masks as a comma separated list.

    Cleared flags are written with a ``no`` prefix (``nodump`` inverts to
    ``dump``). Returns None when neither mask names a known flag.
    """
    names = []
    for name, bit in _FFLAG_NAMES:
        if fset & bit:
            names.append(name)
        elif fclear & bit:
            names.append(name[2:] if name.startswith("no") else "no" + name)
    return ",".join(names) if names else None


@dataclass
class Entry:
    """Metadata of one archive member as the writer reads it."""

    pathname: Union[bytes, str]
    filetype: int = FileType.REGULAR
    size: int = 0
    uid: int = 0
    gid: int = 0
    uname: Optional[Union[bytes, str]] = None
    gname: Optional[Union[bytes, str]] = None
    mode: int = 0o644
    nlink: int = 1
    mtime: int = 0
    mtime_nsec: int = 0
    rdevmajor: int = 0
    rdevminor: int = 0
    symlink: Optional[Union[bytes, str]] = None
    fflags_set: int = 0
    fflags_clear: int = 0
    fflags_text: Optional[Union[bytes, str]] = None

    def clone(self) -> "Entry":
        return copy.deepcopy(self)

    @property
    def perm(self) -> int:
        return self.mode & MODE_MASK

    @property
    def fflags(self) -> Tuple[int, int]:
        return self.fflags_set, self.fflags_clear

    @classmethod
    def from_stat(
        cls,
        pathname: Union[bytes, str],
        st: os.stat_result,
        *,
        symlink: Optional[Union[bytes, str]] = None,
        uname: Optional[str] = None,
        gname: Optional[str] = None,
    ) -> "Entry":
        ftype = stat.S_IFMT(st.st_mode)
        ns_val = getattr(st, "st_mtime_ns", None)
        if ns_val is not None:
            m_sec, m_nsec = int(ns_val // 1_000_000_000), int(ns_val % 1_000_000_000)
        else:
            m_sec, m_nsec = int(st.st_mtime), 0
        rdev = getattr(st, "st_rdev", 0) or 0
        if ftype in (stat.S_IFCHR, stat.S_IFBLK):
            major, minor = os.major(rdev), os.minor(rdev)
        else:
            major, minor = 0, 0
        fset = getattr(st, "st_flags", 0) or 0
        return cls(
            pathname=pathname,
            filetype=ftype,
            size=st.st_size if ftype == stat.S_IFREG else 0,
            uid=st.st_uid,
            gid=st.st_gid,
            uname=uname,
            gname=gname,
            mode=st.st_mode & MODE_MASK,
            nlink=st.st_nlink,
            mtime=m_sec,
            mtime_nsec=m_nsec,
            rdevmajor=major,
            rdevminor=minor,
            symlink=symlink,
            fflags_set=fset,
            fflags_clear=0,
            fflags_text=fflags_to_text(fset),
        )


def _user_name(uid: int) -> Optional[str]:
    if pwd is None:
        return None
    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return None


def _group_name(gid: int) -> Optional[str]:
    if grp is None:
        return None
    try:
        return grp.getgrgid(gid).gr_name
    except KeyError:
        return None


def entry_from_path(fs_path: str, arc_path: Optional[str] = None) -> Entry:
    """Describe ``fs_path`` without following a final symlink."""
    st = os.lstat(fs_path)
    target = os.readlink(fs_path) if stat.S_ISLNK(st.st_mode) else None
    return Entry.from_stat(
        arc_path if arc_path is not None else fs_path,
        st,
        symlink=target,
        uname=_user_name(st.st_uid),
        gname=_group_name(st.st_gid),
    )
