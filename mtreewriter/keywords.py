from __future__ import annotations

import enum
from typing import Dict, FrozenSet, Iterable, Optional, Set


class Keyword(enum.Enum):
    CKSUM = "cksum"
    DEVICE = "device"
    FLAGS = "flags"
    GID = "gid"
    GNAME = "gname"
    LINK = "link"
    MD5 = "md5"
    MODE = "mode"
    NLINK = "nlink"
    RMD160 = "rmd160"
    SHA1 = "sha1"
    SHA256 = "sha256"
    SHA384 = "sha384"
    SHA512 = "sha512"
    SIZE = "size"
    TIME = "time"
    TYPE = "type"
    UID = "uid"
    UNAME = "uname"


class OptionStatus(enum.Enum):
    OK = "ok"
    UNSUPPORTED = "unsupported"


ALL_KEYWORD = "all"

_ALIASES: Dict[str, Keyword] = {
    "md5digest": Keyword.MD5,
    "rmd160digest": Keyword.RMD160,
    "ripemd160digest": Keyword.RMD160,
    "sha1digest": Keyword.SHA1,
    "sha256digest": Keyword.SHA256,
    "sha384digest": Keyword.SHA384,
    "sha512digest": Keyword.SHA512,
}

DIGEST_KEYWORDS: FrozenSet[Keyword] = frozenset(
    {
        Keyword.CKSUM,
        Keyword.MD5,
        Keyword.RMD160,
        Keyword.SHA1,
        Keyword.SHA256,
        Keyword.SHA384,
        Keyword.SHA512,
    }
)

DEFAULT_KEYWORDS: FrozenSet[Keyword] = frozenset(
    {
        Keyword.DEVICE,
        Keyword.FLAGS,
        Keyword.GID,
        Keyword.GNAME,
        Keyword.LINK,
        Keyword.MODE,
        Keyword.NLINK,
        Keyword.SIZE,
        Keyword.TIME,
        Keyword.TYPE,
        Keyword.UID,
        Keyword.UNAME,
    }
)

# Keywords that make the first regular file produce a /set directive
SET_KEYWORDS: FrozenSet[Keyword] = frozenset(
    {
        Keyword.FLAGS,
        Keyword.GID,
        Keyword.GNAME,
        Keyword.NLINK,
        Keyword.MODE,
        Keyword.TYPE,
        Keyword.UID,
        Keyword.UNAME,
    }
)


def lookup_keyword(name: str) -> Optional[Keyword]:
    try:
        return Keyword(name)
    except ValueError:
        return _ALIASES.get(name)


class KeywordSet:
    """Enabled attributes and digests for one writer session.

    ``supported`` restricts which keywords may be toggled; digest keywords
    whose algorithm is unavailable are reported as unsupported instead of
    being enabled.
    """

    def __init__(
        self,
        enabled: Iterable[Keyword] = DEFAULT_KEYWORDS,
        *,
        supported: Optional[Iterable[Keyword]] = None,
    ):
        self.supported: FrozenSet[Keyword] = frozenset(supported) if supported is not None else frozenset(Keyword)
        self._enabled: Set[Keyword] = {k for k in enabled if k in self.supported}

    def __contains__(self, key: object) -> bool:
        return key in self._enabled

    def __iter__(self):
        return iter(sorted(self._enabled, key=lambda k: k.value))

    def __len__(self) -> int:
        return len(self._enabled)

    def enabled(self) -> FrozenSet[Keyword]:
        return frozenset(self._enabled)

    def any_of(self, keys: Iterable[Keyword]) -> bool:
        return any(k in self._enabled for k in keys)

    def set_option(self, name: str, value: Optional[str]) -> OptionStatus:
        """Enable ``name`` when ``value`` is not None, otherwise disable it."""
        if name == ALL_KEYWORD:
            targets = set(self.supported)
        else:
            kw = lookup_keyword(name)
            if kw is None or kw not in self.supported:
                return OptionStatus.UNSUPPORTED
            targets = {kw}
        if value is not None:
            self._enabled |= targets
        else:
            self._enabled -= targets
        return OptionStatus.OK
