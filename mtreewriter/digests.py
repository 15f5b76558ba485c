"""
Content digests computed while entry data streams through the writer.

Each algorithm is registered in :data:`DIGEST_TABLE` in the order its value
appears on an entry line. Algorithms backed by PyCryptodomex are left out of
the table when the library is not importable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Container, FrozenSet, List, Tuple

from .cksum import Cksum
from .keywords import DIGEST_KEYWORDS, Keyword

try:  # pragma: no cover - availability depends on environment
    from Cryptodome.Hash import MD5, RIPEMD160, SHA1, SHA256, SHA384, SHA512  # type: ignore
    _HAS_CRYPTODOME = True
except ImportError:  # pragma: no cover
    MD5 = RIPEMD160 = SHA1 = SHA256 = SHA384 = SHA512 = None  # type: ignore
    _HAS_CRYPTODOME = False


def _render_cksum(label: bytes, h: Cksum) -> bytes:
    return b"%s=%d" % (label, h.value())


def _render_hex(label: bytes, h: Any) -> bytes:
    return label + b"=" + h.digest().hex().encode("ascii")


@dataclass(frozen=True)
class DigestAlgorithm:
    keyword: Keyword
    label: bytes
    new: Callable[[], Any]
    render: Callable[[bytes, Any], bytes] = _render_hex

    def token(self, h: Any) -> bytes:
        return self.render(self.label, h)


def _build_table() -> Tuple[DigestAlgorithm, ...]:
    table = [DigestAlgorithm(Keyword.CKSUM, b"cksum", Cksum, _render_cksum)]
    if _HAS_CRYPTODOME:
        table += [
            DigestAlgorithm(Keyword.MD5, b"md5digest", MD5.new),
            DigestAlgorithm(Keyword.RMD160, b"rmd160digest", RIPEMD160.new),
            DigestAlgorithm(Keyword.SHA1, b"sha1digest", SHA1.new),
            DigestAlgorithm(Keyword.SHA256, b"sha256digest", SHA256.new),
            DigestAlgorithm(Keyword.SHA384, b"sha384digest", SHA384.new),
            DigestAlgorithm(Keyword.SHA512, b"sha512digest", SHA512.new),
        ]
    return tuple(table)


DIGEST_TABLE: Tuple[DigestAlgorithm, ...] = _build_table()


def supported_keywords(table: Tuple[DigestAlgorithm, ...] = DIGEST_TABLE) -> FrozenSet[Keyword]:
    """Every keyword a writer can honour with the given digest table."""
    present = {alg.keyword for alg in table}
    return frozenset(k for k in Keyword if k not in DIGEST_KEYWORDS or k in present)


class DigestPipeline:
    """Runs the enabled digests side by side over one entry's content."""

    def __init__(self, table: Tuple[DigestAlgorithm, ...] = DIGEST_TABLE):
        self.table = table
        self._active: List[Tuple[DigestAlgorithm, Any]] = []

    @property
    def active(self) -> List[Keyword]:
        return [alg.keyword for alg, _ in self._active]

    def start(self, keys: Container[Keyword]) -> None:
        self._active = [(alg, alg.new()) for alg in self.table if alg.keyword in keys]

    def reset(self) -> None:
        self._active = []

    def update(self, data: bytes) -> None:
        if not data:
            return
        for _, h in self._active:
            h.update(data)

    def finalize(self) -> List[bytes]:
        """Return ``label=value`` tokens in table order and drop all state."""
        tokens = [alg.token(h) for alg, h in self._active]
        self._active = []
        return tokens
