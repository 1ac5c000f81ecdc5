"""
fipsgate

FIPS-aware digest constructors.

fipsgate hands out hashlib-style constructors by algorithm name. Each name
is served by the first provider that implements it:

    openssl  (audited)      CPython's _hashlib
    builtin  (non-audited)  CPython's bundled _md5, _sha1, _sha2, _blake2, _sha3
    sodium   (non-audited)  libsodium via PyNaCl

When OpenSSL reports FIPS mode, every non-audited constructor is gated:
calling it without usedforsecurity=False raises DigestUsageError before
any hashing happens.

Usage:
    from fipsgate import DigestContext, DigestUsageError

    ctx = DigestContext()
    ctx.sha256(b"payload").hexdigest()

    # Non-security use of a non-approved digest
    ctx.md5(b"cache-key", usedforsecurity=False).hexdigest()

    # Module-level functions use a lazily created default context
    import fipsgate
    fipsgate.sha256(b"payload").digest()
"""

__version__ = "1.0.0"
__license__ = "Apache-2.0"

from .gate import DigestUsageError, fips_gate, is_gated
from .modes import ComplianceMode, ModeResolution, mode_from_value, resolve_mode
from .providers import (
    ALGORITHMS_GUARANTEED,
    BuiltinProvider,
    DigestProvider,
    OpenSSLProvider,
    ProviderError,
    ProviderQueryError,
    ProviderUnavailableError,
    SodiumProvider,
    StaticProvider,
    default_providers,
    normalize_name,
)
from .registry import (
    DigestContext,
    ResolvedConstructor,
    UnsupportedDigestError,
    default_context,
    set_default_context,
    new,
    md5,
    sha1,
    sha224,
    sha256,
    sha384,
    sha512,
    blake2b,
    blake2s,
    sha3_224,
    sha3_256,
    sha3_384,
    sha3_512,
    shake_128,
    shake_256,
)
from .hashing import file_digest, hexdigest, prefixed_hash, verify_hash


__all__ = [
    "__version__",

    # Gate
    "DigestUsageError",
    "fips_gate",
    "is_gated",

    # Modes
    "ComplianceMode",
    "ModeResolution",
    "mode_from_value",
    "resolve_mode",

    # Providers
    "ALGORITHMS_GUARANTEED",
    "DigestProvider",
    "OpenSSLProvider",
    "BuiltinProvider",
    "SodiumProvider",
    "StaticProvider",
    "ProviderError",
    "ProviderQueryError",
    "ProviderUnavailableError",
    "default_providers",
    "normalize_name",

    # Registry
    "DigestContext",
    "ResolvedConstructor",
    "UnsupportedDigestError",
    "default_context",
    "set_default_context",
    "new",
    "md5",
    "sha1",
    "sha224",
    "sha256",
    "sha384",
    "sha512",
    "blake2b",
    "blake2s",
    "sha3_224",
    "sha3_256",
    "sha3_384",
    "sha3_512",
    "shake_128",
    "shake_256",

    # Hashing helpers
    "hexdigest",
    "prefixed_hash",
    "verify_hash",
    "file_digest",
]
