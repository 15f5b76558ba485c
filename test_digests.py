from __future__ import annotations

import hashlib
import os
import unittest

from mtreewriter.cksum import cksum
from mtreewriter.digests import _HAS_CRYPTODOME, DIGEST_TABLE, DigestPipeline, supported_keywords
from mtreewriter.keywords import DIGEST_KEYWORDS, Keyword


def _tokens_by_label(tokens):
    return dict(t.split(b"=", 1) for t in tokens)


class DigestTableTests(unittest.TestCase):
    def test_cksum_always_present_and_first(self):
        self.assertEqual(DIGEST_TABLE[0].keyword, Keyword.CKSUM)

    @unittest.skipUnless(_HAS_CRYPTODOME, "PyCryptodomex required")
    def test_emission_order(self):
        self.assertEqual(
            [alg.label for alg in DIGEST_TABLE],
            [b"cksum", b"md5digest", b"rmd160digest", b"sha1digest", b"sha256digest", b"sha384digest", b"sha512digest"],
        )
        self.assertTrue(DIGEST_KEYWORDS <= supported_keywords())

    def test_missing_algorithms_are_unsupported(self):
        only_cksum = DIGEST_TABLE[:1]
        supported = supported_keywords(only_cksum)
        self.assertIn(Keyword.CKSUM, supported)
        self.assertIn(Keyword.SIZE, supported)
        self.assertNotIn(Keyword.MD5, supported)
        self.assertNotIn(Keyword.SHA512, supported)


class DigestPipelineTests(unittest.TestCase):
    def test_only_selected_digests_run(self):
        p = DigestPipeline()
        p.start({Keyword.CKSUM, Keyword.SIZE})
        self.assertEqual(p.active, [Keyword.CKSUM])
        p.update(b"123456789")
        self.assertEqual(p.finalize(), [b"cksum=930766865"])
        self.assertEqual(p.active, [])

    def test_nothing_selected(self):
        p = DigestPipeline()
        p.start(set())
        p.update(b"ignored")
        self.assertEqual(p.finalize(), [])

    def test_empty_content_checksum(self):
        p = DigestPipeline()
        p.start({Keyword.CKSUM})
        self.assertEqual(p.finalize(), [b"cksum=4294967295"])

    @unittest.skipUnless(_HAS_CRYPTODOME, "PyCryptodomex required")
    def test_digests_match_reference(self):
        data = os.urandom(10000)
        p = DigestPipeline()
        p.start(set(Keyword))
        for i in range(0, len(data), 4096):
            p.update(data[i : i + 4096])
        tokens = p.finalize()
        self.assertEqual(
            [t.split(b"=", 1)[0] for t in tokens],
            [alg.label for alg in DIGEST_TABLE],
        )
        got = _tokens_by_label(tokens)
        self.assertEqual(got[b"cksum"], str(cksum(data)).encode())
        self.assertEqual(got[b"md5digest"], hashlib.md5(data).hexdigest().encode())
        self.assertEqual(got[b"sha1digest"], hashlib.sha1(data).hexdigest().encode())
        self.assertEqual(got[b"sha256digest"], hashlib.sha256(data).hexdigest().encode())
        self.assertEqual(got[b"sha384digest"], hashlib.sha384(data).hexdigest().encode())
        self.assertEqual(got[b"sha512digest"], hashlib.sha512(data).hexdigest().encode())
        self.assertEqual(len(got[b"rmd160digest"]), 40)

    @unittest.skipUnless(_HAS_CRYPTODOME, "PyCryptodomex required")
    def test_ripemd160_vectors(self):
        for data, expected in (
            (b"", b"9c1185a5c5e9fc54612808977ee8f548b2258d31"),
            (b"abc", b"8eb208f7e05d987a9b044a8e98c6b087f15a0bfc"),
        ):
            p = DigestPipeline()
            p.start({Keyword.RMD160})
            p.update(data)
            self.assertEqual(p.finalize(), [b"rmd160digest=" + expected])

    @unittest.skipUnless(_HAS_CRYPTODOME, "PyCryptodomex required")
    def test_split_feeding_is_equivalent(self):
        data = os.urandom(3000)
        whole = DigestPipeline()
        whole.start(set(Keyword))
        whole.update(data)
        split = DigestPipeline()
        split.start(set(Keyword))
        for i in range(0, len(data), 7):
            split.update(data[i : i + 7])
        self.assertEqual(whole.finalize(), split.finalize())


if __name__ == "__main__":
    unittest.main()
