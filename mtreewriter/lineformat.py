"""
Wrapping of logical entry lines into physical lines.

A logical line is an entry name padded to the name column followed by
space-separated ``key=value`` tokens. :func:`tokenize` turns it into
unbreakable units with their widths and :func:`pack` fills physical lines
greedily, breaking only between units. Every line but the last ends in
``" \\"`` and continuation lines are indented one column past the name.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from .constants import CONTINUATION, INDENT_NAME_LEN, MAX_LINE_LEN

Unit = Tuple[bytes, int]


def tokenize(head: bytes, tokens: Sequence[bytes]) -> List[Unit]:
    # The first attribute always shares the line with the name column
    if tokens:
        units = [head + b" " + tokens[0]]
        units.extend(tokens[1:])
    else:
        units = [head]
    return [(u, len(u)) for u in units]


def _line_end(units: Sequence[Unit], start: int, base: int, budget: int) -> int:
    width = base
    fit = None
    last = len(units) - 1
    for k in range(start, len(units)):
        width += units[k][1] + (1 if k > start else 0)
        if k == last:
            # the trailing newline counts against the final remainder
            if fit is not None and width + 1 > budget:
                return fit
            return len(units)
        if width <= budget:
            fit = k + 1
        else:
            return fit if fit is not None else k + 1
    return len(units)


def pack(
    units: Sequence[Unit],
    *,
    indent: int = INDENT_NAME_LEN + 1,
    width: int = MAX_LINE_LEN,
) -> List[List[bytes]]:
    """Group units into physical lines.

    The budget for each line leaves room for the continuation marker. A unit
    that does not fit even on a line of its own is still placed alone on a
    line, so packing always makes progress.
    """
    budget = width - len(CONTINUATION)
    lines: List[List[bytes]] = []
    start = 0
    base = 0
    while start < len(units):
        end = _line_end(units, start, base, budget)
        lines.append([u for u, _ in units[start:end]])
        start = end
        base = indent
    return lines


def render(lines: Sequence[Sequence[bytes]], *, indent: int = INDENT_NAME_LEN + 1) -> bytes:
    pad = b" " * indent
    out = bytearray()
    for i, line in enumerate(lines):
        if i:
            out += CONTINUATION + pad
        out += b" ".join(line)
    out += b"\n"
    return bytes(out)


class LineFormatter:
    """Collects the tokens of one logical line and emits it wrapped."""

    def __init__(self, indent: int = INDENT_NAME_LEN, width: int = MAX_LINE_LEN):
        self.indent = indent
        self.width = width
        self.head = b""
        self.tokens: List[bytes] = []
        self._open = False

    @property
    def pending(self) -> bool:
        return self._open

    def begin(self, name: bytes) -> bytes:
        """Start a new logical line with an already escaped name.

        Returns bytes that belong in the output right away: a name longer
        than the name column goes out on its own continued line and the
        attributes start on a blank, indented line.
        """
        self.tokens = []
        self._open = True
        if len(name) > self.indent:
            self.head = b" " * self.indent
            return name + CONTINUATION
        self.head = name.ljust(self.indent)
        return b""

    def add(self, token: bytes) -> None:
        self.tokens.append(token)

    def extend(self, tokens: Sequence[bytes]) -> None:
        self.tokens.extend(tokens)

    def flush(self) -> bytes:
        units = tokenize(self.head, self.tokens)
        lines = pack(units, indent=self.indent + 1, width=self.width)
        text = render(lines, indent=self.indent + 1)
        self.clear()
        return text

    def clear(self) -> None:
        self.head = b""
        self.tokens = []
        self._open = False
