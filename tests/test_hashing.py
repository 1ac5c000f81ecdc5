"""
fipsgate Hashing Helpers Test Suite
"""

import hashlib
import io
import unittest

from fipsgate import (
    ALGORITHMS_GUARANTEED,
    DigestContext,
    DigestUsageError,
    StaticProvider,
    file_digest,
    hexdigest,
    prefixed_hash,
    verify_hash,
)


def make_context(mode):
    constructors = {name: getattr(hashlib, name) for name in ALGORITHMS_GUARANTEED}
    return DigestContext([
        StaticProvider({"sha256": hashlib.sha256}, mode=mode, name="openssl"),
        StaticProvider(constructors, audited=False, name="builtin"),
    ])


class TestHexdigest(unittest.TestCase):

    def setUp(self):
        self.ctx = make_context(mode=0)

    def test_bytes_and_str(self):
        expected = hashlib.sha256(b"payload").hexdigest()
        self.assertEqual(hexdigest("sha256", b"payload", context=self.ctx), expected)
        self.assertEqual(hexdigest("sha256", "payload", context=self.ctx), expected)

    def test_utf8_encoding(self):
        self.assertEqual(
            hexdigest("sha1", "café", context=self.ctx),
            hashlib.sha1("café".encode("utf-8")).hexdigest()
        )

    def test_shake_length(self):
        h = hexdigest("shake_128", b"payload", length=8, context=self.ctx)
        self.assertEqual(len(h), 16)


class TestPrefixedHash(unittest.TestCase):

    def setUp(self):
        self.ctx = make_context(mode=0)

    def test_format(self):
        h = prefixed_hash("SHA256", b"payload", context=self.ctx)
        self.assertEqual(h, "sha256:" + hashlib.sha256(b"payload").hexdigest())

    def test_verify_roundtrip(self):
        declared = prefixed_hash("blake2b", b"payload", context=self.ctx)
        self.assertTrue(verify_hash(declared, b"payload", context=self.ctx))
        self.assertFalse(verify_hash(declared, b"tampered", context=self.ctx))

    def test_verify_uppercase_hex(self):
        declared = "sha256:" + hashlib.sha256(b"payload").hexdigest().upper()
        self.assertTrue(verify_hash(declared, b"payload", context=self.ctx))

    def test_verify_shake(self):
        declared = prefixed_hash("shake_256", b"payload", length=20, context=self.ctx)
        self.assertTrue(verify_hash(declared, b"payload", context=self.ctx))

    def test_verify_malformed(self):
        self.assertFalse(verify_hash("no-prefix", b"payload", context=self.ctx))
        self.assertFalse(verify_hash("sha256:", b"payload", context=self.ctx))
        self.assertFalse(verify_hash("content:sha256:abcd", b"payload", context=self.ctx))
        self.assertFalse(verify_hash("sha256:\u00e9\u00e9", b"payload", context=self.ctx))
        self.assertFalse(verify_hash("sha256:\udcff", b"payload", context=self.ctx))


class TestHelpersUnderFips(unittest.TestCase):
    """Helpers go through the gate like any other caller."""

    def setUp(self):
        self.ctx = make_context(mode=1)

    def test_audited_algorithm_allowed(self):
        self.assertTrue(verify_hash(
            "sha256:" + hashlib.sha256(b"payload").hexdigest(), b"payload", context=self.ctx
        ))

    def test_security_use_rejected(self):
        with self.assertRaises(DigestUsageError):
            hexdigest("md5", b"payload", context=self.ctx)

    def test_verify_is_security_use(self):
        with self.assertRaises(DigestUsageError):
            verify_hash("md5:" + hashlib.md5(b"payload").hexdigest(), b"payload", context=self.ctx)

    def test_non_security_use_allowed(self):
        self.assertEqual(
            hexdigest("md5", b"payload", usedforsecurity=False, context=self.ctx),
            hashlib.md5(b"payload", usedforsecurity=False).hexdigest()
        )


class TestFileDigest(unittest.TestCase):

    def test_streams_in_chunks(self):
        ctx = make_context(mode=0)
        data = b"0123456789" * 1000
        h = file_digest(io.BytesIO(data), "sha512", context=ctx, chunk_size=7)
        self.assertEqual(h.digest(), hashlib.sha512(data).digest())

    def test_gated(self):
        ctx = make_context(mode=1)
        with self.assertRaises(DigestUsageError):
            file_digest(io.BytesIO(b"data"), "sha1", context=ctx)
        h = file_digest(io.BytesIO(b"data"), "sha1", usedforsecurity=False, context=ctx)
        self.assertEqual(h.hexdigest(), hashlib.sha1(b"data", usedforsecurity=False).hexdigest())


if __name__ == "__main__":
    unittest.main()
