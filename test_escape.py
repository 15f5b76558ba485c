from __future__ import annotations

import os
import unittest

from mtreewriter.escape import escape, is_safe_byte, unescape


class EscapeTests(unittest.TestCase):
    def test_space_is_octal_escaped(self):
        self.assertEqual(escape(b"a b"), b"a\\040b")

    def test_reserved_characters_always_quoted(self):
        self.assertEqual(escape(b"#=\\"), b"\\043\\075\\134")

    def test_safe_punctuation_passes_through(self):
        safe = b"!\"$%&'()*+,-./:;<>?@[]^_`{|}~"
        self.assertEqual(escape(safe), safe)
        self.assertEqual(escape(b"Az09"), b"Az09")

    def test_control_and_high_bytes(self):
        self.assertEqual(escape(b"\x00"), b"\\000")
        self.assertEqual(escape(b"\n\t"), b"\\012\\011")
        self.assertEqual(escape(b"\x7f"), b"\\177")
        self.assertEqual(escape(b"\xff"), b"\\377")

    def test_text_is_utf8_encoded(self):
        self.assertEqual(escape("é"), b"\\303\\251")

    def test_output_never_contains_separators(self):
        data = bytes(range(256)) + os.urandom(512)
        token = escape(data)
        for forbidden in (b" ", b"#", b"=", b"\t", b"\n"):
            self.assertNotIn(forbidden, token)
        # every backslash starts an escape sequence
        self.assertEqual(token.count(b"\\"), sum(1 for c in data if not is_safe_byte(c)))

    def test_roundtrip(self):
        samples = [b"", b"plain", b"with space", bytes(range(256)), os.urandom(1024)]
        for s in samples:
            self.assertEqual(unescape(escape(s)), s)

    def test_single_bytes_do_not_collide(self):
        tokens = {escape(bytes([c])) for c in range(256)}
        self.assertEqual(len(tokens), 256)

    def test_unescape_rejects_malformed(self):
        for bad in (b"\\", b"\\04", b"\\09x", b"\\400"):
            with self.assertRaises(ValueError):
                unescape(bad)


if __name__ == "__main__":
    unittest.main()
