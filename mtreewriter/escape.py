"""
Quoting of names and values for the mtree line grammar.

Bytes outside a conservative printable set are written as a backslash
followed by three octal digits, so an escaped token never contains
whitespace, '#', '=' or '\\'.
"""

from __future__ import annotations

from typing import Union


def _build_safe_table():
    tbl = [False] * 256
    for lo, hi in (
        (ord("a"), ord("z")),
        (ord("A"), ord("Z")),
        (ord("0"), ord("9")),
        (33, 47),  # !"#$%&'()*+,-./
        (58, 64),  # :;<=>?@
        (91, 96),  # [\]^_`
        (123, 126),  # {|}~
    ):
        for c in range(lo, hi + 1):
            tbl[c] = True
    # '#', '=' and '\' are always quoted
    for c in b"#=\\":
        tbl[c] = False
    return tuple(tbl)


_SAFE = _build_safe_table()


def to_bytes(value: Union[bytes, str]) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8", "surrogateescape")
    return bytes(value)


def is_safe_byte(c: int) -> bool:
    return _SAFE[c]


def escape(raw: Union[bytes, str]) -> bytes:
    data = to_bytes(raw)
    out = bytearray()
    start = 0
    for i, c in enumerate(data):
        if _SAFE[c]:
            continue
        if start != i:
            out += data[start:i]
        out += bytes((0x5C, 0x30 + c // 64, 0x30 + c // 8 % 8, 0x30 + c % 8))
        start = i + 1
    out += data[start:]
    return bytes(out)


def unescape(token: bytes) -> bytes:
    """Invert :func:`escape`.

    Only the ``\\ooo`` form produced by the writer is recognised; a backslash
    not followed by three octal digits raises ``ValueError``.
    """
    out = bytearray()
    i = 0
    n = len(token)
    while i < n:
        c = token[i]
        if c != 0x5C:
            out.append(c)
            i += 1
            continue
        digits = token[i + 1 : i + 4]
        if len(digits) != 3 or any(d < 0x30 or d > 0x37 for d in digits):
            raise ValueError(f"invalid escape at offset {i}")
        value = (digits[0] - 0x30) * 64 + (digits[1] - 0x30) * 8 + (digits[2] - 0x30)
        if value > 0xFF:
            raise ValueError(f"escape out of range at offset {i}")
        out.append(value)
        i += 4
    return bytes(out)
