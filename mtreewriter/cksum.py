"""
POSIX 1003.2 ``cksum`` checksum with a precomputed table.

This is CRC-32 with polynomial 0x04C11DB7 processed MSB first, seeded with 0,
followed by the input length (low byte first, only while non-zero) and a
final complement. It matches the output of the ``cksum`` utility.
"""

_POLY = 0x04C11DB7
_MASK = 0xFFFFFFFF


def _make_table():
    tbl = []
    for n in range(256):
        c = n << 24
        for _ in range(8):
            if c & 0x80000000:
                c = (c << 1) ^ _POLY
            else:
                c <<= 1
        tbl.append(c & _MASK)
    return tuple(tbl)


CRC_TABLE = _make_table()


def _crc_update(crc: int, data) -> int:
    tbl = CRC_TABLE
    for b in data:
        crc = ((crc << 8) & _MASK) ^ tbl[(crc >> 24) ^ b]
    return crc


class Cksum:
    """Streaming cksum accumulator; same update/digest shape as the hash objects."""

    def __init__(self) -> None:
        self.crc = 0
        self.length = 0

    def update(self, data: bytes) -> None:
        self.crc = _crc_update(self.crc, data)
        self.length += len(data)

    def value(self) -> int:
        crc = self.crc
        n = self.length
        while n:
            crc = _crc_update(crc, (n & 0xFF,))
            n >>= 8
        return (~crc) & _MASK

    def digest(self) -> bytes:
        return self.value().to_bytes(4, "big")


def cksum(data: bytes) -> int:
    c = Cksum()
    c.update(data)
    return c.value()
