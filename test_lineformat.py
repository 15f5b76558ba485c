from __future__ import annotations

import unittest

from mtreewriter.lineformat import LineFormatter, pack, render, tokenize


def _physical_lines(text: bytes):
    assert text.endswith(b"\n")
    return text[:-1].split(b"\n")


class PackTests(unittest.TestCase):
    def test_first_token_stays_with_name(self):
        units = tokenize(b"name".ljust(15), [b"a=1", b"b=2"])
        self.assertEqual(units[0], (b"name".ljust(15) + b" a=1", 19))
        self.assertEqual(units[1], (b"b=2", 3))

    def test_no_tokens(self):
        units = tokenize(b"x".ljust(15), [])
        self.assertEqual(pack(units), [[b"x".ljust(15)]])

    def test_break_at_last_fitting_token(self):
        head = b"x".ljust(15)
        units = tokenize(head, [b"a" * 30, b"b" * 30, b"c" * 30])
        lines = pack(units)
        self.assertEqual(lines, [[head + b" " + b"a" * 30, b"b" * 30], [b"c" * 30]])

    def test_final_remainder_counts_newline(self):
        head = b"x".ljust(15)
        # 15 + 1 + 30 + 1 + 30 == 77 leaves no room for the newline
        units = tokenize(head, [b"a" * 30, b"b" * 30])
        self.assertEqual(pack(units), [[head + b" " + b"a" * 30], [b"b" * 30]])
        # one column shorter fits on a single line
        units = tokenize(head, [b"a" * 30, b"b" * 29])
        self.assertEqual(len(pack(units)), 1)

    def test_oversized_token_forces_progress(self):
        head = b"x".ljust(15)
        big = b"k=" + b"z" * 120
        units = tokenize(head, [b"a=1", big, b"b=2"])
        lines = pack(units)
        self.assertEqual(lines, [[head + b" a=1"], [big], [b"b=2"]])

    def test_render_marks_continuations(self):
        text = render([[b"one"], [b"two", b"three"]], indent=16)
        self.assertEqual(text, b"one \\\n" + b" " * 16 + b"two three\n")


class LineFormatterTests(unittest.TestCase):
    def test_short_name_padded_to_column(self):
        lf = LineFormatter()
        self.assertEqual(lf.begin(b"abc"), b"")
        self.assertTrue(lf.pending)
        lf.add(b"size=1")
        self.assertEqual(lf.flush(), b"abc" + b" " * 12 + b" size=1\n")
        self.assertFalse(lf.pending)

    def test_name_exactly_at_column_is_not_split(self):
        lf = LineFormatter()
        name = b"n" * 15
        self.assertEqual(lf.begin(name), b"")
        lf.add(b"size=1")
        self.assertEqual(lf.flush(), name + b" size=1\n")

    def test_long_name_goes_on_its_own_line(self):
        lf = LineFormatter()
        name = b"some/longer/name.txt"
        self.assertEqual(lf.begin(name), name + b" \\\n")
        lf.add(b"size=1")
        self.assertEqual(lf.flush(), b" " * 15 + b" size=1\n")

    def test_wrapped_lines_respect_width(self):
        lf = LineFormatter()
        lf.begin(b"file")
        tokens = [b"key%02d=%s" % (i, b"v" * (i % 7 + 3)) for i in range(40)]
        lf.extend(tokens)
        text = lf.flush()
        lines = _physical_lines(text)
        self.assertGreater(len(lines), 1)
        for i, line in enumerate(lines):
            self.assertLessEqual(len(line), 80)
            if i < len(lines) - 1:
                self.assertTrue(line.endswith(b" \\"))
            if i:
                self.assertTrue(line.startswith(b" " * 16))
                self.assertNotEqual(line[16:17], b" ")
        rejoined = text.replace(b" \\\n" + b" " * 16, b" ").split()
        self.assertEqual(rejoined, [b"file"] + tokens)

    def test_clear_discards_pending_tokens(self):
        lf = LineFormatter()
        lf.begin(b"a")
        lf.add(b"x=1")
        lf.clear()
        lf.begin(b"b")
        self.assertEqual(lf.flush(), b"b".ljust(15) + b"\n")


if __name__ == "__main__":
    unittest.main()
