"""
fipsgate Compliance Mode Test Suite

Mode resolution is best-effort: anything short of a clear answer from the
audited provider must leave digests unrestricted.
"""

import hashlib
import types
import unittest

from fipsgate import (
    ComplianceMode,
    DigestContext,
    OpenSSLProvider,
    StaticProvider,
    mode_from_value,
    resolve_mode,
)


class TestModeFromValue(unittest.TestCase):

    def test_known_values(self):
        self.assertEqual(mode_from_value(1), ComplianceMode.ACTIVE)
        self.assertEqual(mode_from_value(0), ComplianceMode.INACTIVE)
        self.assertEqual(mode_from_value(True), ComplianceMode.ACTIVE)
        self.assertEqual(mode_from_value(False), ComplianceMode.INACTIVE)

    def test_out_of_range_is_inactive(self):
        for value in (2, -1, 42):
            with self.subTest(value=value):
                self.assertEqual(mode_from_value(value), ComplianceMode.INACTIVE)

    def test_non_integer_is_unknown(self):
        for value in (None, "1", 1.0, object()):
            with self.subTest(value=value):
                self.assertEqual(mode_from_value(value), ComplianceMode.UNKNOWN)

    def test_only_active_restricts(self):
        self.assertTrue(ComplianceMode.ACTIVE.restricts())
        self.assertFalse(ComplianceMode.INACTIVE.restricts())
        self.assertFalse(ComplianceMode.UNKNOWN.restricts())


class TestResolveMode(unittest.TestCase):

    def test_no_provider(self):
        resolution = resolve_mode(None)
        self.assertEqual(resolution.mode, ComplianceMode.UNKNOWN)
        self.assertIsNone(resolution.source)

    def test_pinned_provider(self):
        resolution = resolve_mode(StaticProvider(mode=1, name="pinned-openssl"))
        self.assertEqual(resolution.mode, ComplianceMode.ACTIVE)
        self.assertEqual(resolution.source, "pinned-openssl")
        self.assertEqual(resolution.raw_value, 1)
        self.assertFalse(resolution.out_of_range())

    def test_query_failure_is_unknown(self):
        resolution = resolve_mode(StaticProvider(mode=None))
        self.assertEqual(resolution.mode, ComplianceMode.UNKNOWN)
        self.assertIn("no pinned mode", resolution.detail)

    def test_out_of_range_flagged(self):
        resolution = resolve_mode(StaticProvider(mode=7))
        self.assertEqual(resolution.mode, ComplianceMode.INACTIVE)
        self.assertTrue(resolution.out_of_range())

    def test_unavailable_provider(self):
        class Missing(StaticProvider):
            def available(self):
                return False

        resolution = resolve_mode(Missing(mode=1))
        self.assertEqual(resolution.mode, ComplianceMode.UNKNOWN)
        self.assertEqual(resolution.detail, "provider unavailable")

    def test_unexpected_query_exception_is_unknown(self):
        class Crashing(StaticProvider):
            def compliance_mode(self):
                raise RuntimeError("provider crashed")

        with self.assertLogs("fipsgate.modes", level="WARNING"):
            resolution = resolve_mode(Crashing(mode=1, name="crashing"))
        self.assertEqual(resolution.mode, ComplianceMode.UNKNOWN)
        self.assertEqual(resolution.source, "crashing")
        self.assertEqual(resolution.detail, "provider crashed")

    def test_availability_check_exception_is_unknown(self):
        class Broken(StaticProvider):
            def available(self):
                raise OSError("cannot load provider")

        with self.assertLogs("fipsgate.modes", level="WARNING"):
            resolution = resolve_mode(Broken(mode=1))
        self.assertEqual(resolution.mode, ComplianceMode.UNKNOWN)
        self.assertIn("cannot load provider", resolution.detail)

    def test_crashing_audited_provider_leaves_context_usable(self):
        class Crashing(StaticProvider):
            def compliance_mode(self):
                raise RuntimeError("provider crashed")

        ctx = DigestContext([
            Crashing(name="openssl"),
            StaticProvider({"md5": hashlib.md5}, audited=False, name="builtin"),
        ])
        with self.assertLogs("fipsgate.modes", level="WARNING"):
            digest = ctx.md5(b"x").digest()
        self.assertEqual(digest, hashlib.md5(b"x").digest())
        self.assertEqual(ctx.mode, ComplianceMode.UNKNOWN)
        self.assertFalse(ctx.constructor("md5").gated)

    def test_to_dict(self):
        d = resolve_mode(StaticProvider(mode=0, name="openssl")).to_dict()
        self.assertEqual(d, {"mode": "INACTIVE", "source": "openssl", "raw_value": 0})


class TestOpenSSLModeQuery(unittest.TestCase):
    """OpenSSLProvider against stand-ins for _hashlib."""

    def test_fips_mode_reported(self):
        module = types.SimpleNamespace(get_fips_mode=lambda: 1)
        self.assertEqual(resolve_mode(OpenSSLProvider(module)).mode, ComplianceMode.ACTIVE)

    def test_missing_get_fips_mode(self):
        module = types.SimpleNamespace()
        resolution = resolve_mode(OpenSSLProvider(module))
        self.assertEqual(resolution.mode, ComplianceMode.UNKNOWN)
        self.assertIn("get_fips_mode", resolution.detail)

    def test_get_fips_mode_error(self):
        def get_fips_mode():
            raise ValueError("[digital envelope routines] unsupported")

        resolution = resolve_mode(OpenSSLProvider(types.SimpleNamespace(get_fips_mode=get_fips_mode)))
        self.assertEqual(resolution.mode, ComplianceMode.UNKNOWN)

    def test_get_fips_mode_os_error(self):
        def get_fips_mode():
            raise OSError("cannot read /proc/sys/crypto/fips_enabled")

        with self.assertLogs("fipsgate.modes", level="WARNING"):
            resolution = resolve_mode(OpenSSLProvider(types.SimpleNamespace(get_fips_mode=get_fips_mode)))
        self.assertEqual(resolution.mode, ComplianceMode.UNKNOWN)
        self.assertEqual(resolution.source, "openssl")


if __name__ == "__main__":
    unittest.main()
