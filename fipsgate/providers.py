"""
fipsgate Digest Providers

A provider maps algorithm names to digest constructors. Providers come in
two kinds:

- audited: OpenSSL. Its constructors enforce FIPS restrictions internally,
  and it is the only provider that can answer the compliance mode query.
- non-audited: CPython's bundled builtin modules and libsodium. These
  compute digests without any policy of their own and are the ones the
  FIPS gate wraps.

Every constructor returned by lookup() accepts
    (data=b"", *, usedforsecurity=True, **config)
so the gate can forward calls unchanged.
"""

import importlib
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple

try:
    import _hashlib
except ImportError:
    _hashlib = None

try:
    import nacl.encoding
    import nacl.hash
    import nacl.hashlib
    NACL_AVAILABLE = True
except ImportError:
    NACL_AVAILABLE = False


logger = logging.getLogger(__name__)

Constructor = Callable[..., Any]


ALGORITHMS_GUARANTEED: FrozenSet[str] = frozenset({
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
})


def normalize_name(name: str) -> str:
    """
    Normalise an algorithm name to its hashlib spelling.

    Accepts OpenSSL spellings such as "SHA256" or "sha3-256".
    """
    if not isinstance(name, str):
        raise TypeError(f"algorithm name must be str, not {type(name).__name__}")
    return name.strip().lower().replace("-", "_")


class ProviderError(Exception):
    """Base class for provider failures."""


class ProviderUnavailableError(ProviderError):
    """The provider's backing library is not present in this process."""


class ProviderQueryError(ProviderError):
    """The provider could not answer the compliance mode query."""


class DigestProvider(ABC):
    """Abstract source of digest constructors."""

    name: str = "abstract"
    audited: bool = False

    def available(self) -> bool:
        return True

    @abstractmethod
    def lookup(self, algorithm: str) -> Optional[Constructor]:
        """Return the constructor for a normalised name, or None."""
        pass

    def compliance_mode(self) -> int:
        """Return the raw compliance mode. Non-audited providers cannot answer."""
        raise ProviderQueryError(f"provider {self.name} does not report a compliance mode")

    def algorithms(self) -> FrozenSet[str]:
        if not self.available():
            return frozenset()
        return frozenset(a for a in ALGORITHMS_GUARANTEED if self.lookup(a) is not None)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r} audited={self.audited}>"


class OpenSSLProvider(DigestProvider):
    """
    Audited provider backed by CPython's _hashlib (OpenSSL).

    A constructor is only offered if OpenSSL can actually instantiate it:
    builds without a given digest raise ValueError from the probe call.
    """

    name = "openssl"
    audited = True

    def __init__(self, module: Any = None):
        self._module = module if module is not None else _hashlib

    def available(self) -> bool:
        return self._module is not None

    def lookup(self, algorithm: str) -> Optional[Constructor]:
        if self._module is None:
            return None
        constructor = getattr(self._module, f"openssl_{algorithm}", None)
        if constructor is None:
            return None
        try:
            constructor(usedforsecurity=False)
        except ValueError:
            logger.debug("OpenSSL cannot construct %s", algorithm)
            return None
        return constructor

    def compliance_mode(self) -> int:
        if self._module is None:
            raise ProviderUnavailableError("_hashlib is not available")
        get_fips_mode = getattr(self._module, "get_fips_mode", None)
        if get_fips_mode is None:
            raise ProviderQueryError("_hashlib does not expose get_fips_mode")
        try:
            return get_fips_mode()
        except ValueError as e:
            raise ProviderQueryError(f"get_fips_mode failed: {e}") from e


# Builtin module candidates per algorithm, newest interpreter layout first.
BUILTIN_SOURCES: Dict[str, Tuple[Tuple[str, str], ...]] = {
    "md5": (("_md5", "md5"),),
    "sha1": (("_sha1", "sha1"),),
    "sha224": (("_sha2", "sha224"), ("_sha256", "sha224")),
    "sha256": (("_sha2", "sha256"), ("_sha256", "sha256")),
    "sha384": (("_sha2", "sha384"), ("_sha512", "sha384")),
    "sha512": (("_sha2", "sha512"), ("_sha512", "sha512")),
    "blake2b": (("_blake2", "blake2b"),),
    "blake2s": (("_blake2", "blake2s"),),
    "sha3_224": (("_sha3", "sha3_224"),),
    "sha3_256": (("_sha3", "sha3_256"),),
    "sha3_384": (("_sha3", "sha3_384"),),
    "sha3_512": (("_sha3", "sha3_512"),),
    "shake_128": (("_sha3", "shake_128"),),
    "shake_256": (("_sha3", "shake_256"),),
}


class BuiltinProvider(DigestProvider):
    """Non-audited provider backed by CPython's bundled digest modules."""

    name = "builtin"
    audited = False

    def lookup(self, algorithm: str) -> Optional[Constructor]:
        for module_name, attr in BUILTIN_SOURCES.get(algorithm, ()):
            try:
                module = importlib.import_module(module_name)
            except ImportError:
                continue
            constructor = getattr(module, attr, None)
            if constructor is not None:
                return constructor
        return None


class SodiumDigest:
    """
    hashlib-style wrapper around libsodium's one-shot SHA-2 functions.

    PyNaCl exposes no incremental SHA-2 interface, so all input is held in
    memory until digest() is called: hashing a file through this object
    costs memory proportional to the file size. Prefer the openssl or
    builtin providers for large inputs.
    """

    def __init__(self, name: str, func: Callable[..., bytes], digest_size: int,
                 block_size: int, data: bytes = b""):
        self.name = name
        self.digest_size = digest_size
        self.block_size = block_size
        self._func = func
        self._chunks: List[bytes] = []
        if data:
            self.update(data)

    def update(self, data: bytes) -> None:
        self._chunks.append(bytes(memoryview(data)))

    def _buffer(self) -> bytes:
        if len(self._chunks) != 1:
            self._chunks = [b"".join(self._chunks)]
        return self._chunks[0]

    def digest(self) -> bytes:
        return self._func(self._buffer(), encoder=nacl.encoding.RawEncoder)

    def hexdigest(self) -> str:
        return self.digest().hex()

    def copy(self) -> "SodiumDigest":
        other = SodiumDigest(self.name, self._func, self.digest_size, self.block_size)
        other._chunks = list(self._chunks)
        return other


def _sodium_sha2(name: str, func_name: str, digest_size: int, block_size: int) -> Constructor:
    def constructor(data: bytes = b"", *, usedforsecurity: bool = True) -> SodiumDigest:
        return SodiumDigest(name, getattr(nacl.hash, func_name), digest_size, block_size, data)
    constructor.__name__ = f"sodium_{name}"
    return constructor


def _sodium_blake2b(data: bytes = b"", *, usedforsecurity: bool = True, **config: Any) -> Any:
    return nacl.hashlib.blake2b(data, **config)


class SodiumProvider(DigestProvider):
    """
    Non-audited provider backed by libsodium through PyNaCl.

    libsodium has no notion of FIPS mode; usedforsecurity is accepted and
    ignored so the gate can forward it.
    """

    name = "sodium"
    audited = False

    def __init__(self):
        self._constructors: Dict[str, Constructor] = {}
        if NACL_AVAILABLE:
            self._constructors = {
                "sha256": _sodium_sha2("sha256", "sha256", 32, 64),
                "sha512": _sodium_sha2("sha512", "sha512", 64, 128),
                "blake2b": _sodium_blake2b,
            }

    def available(self) -> bool:
        return NACL_AVAILABLE

    def lookup(self, algorithm: str) -> Optional[Constructor]:
        return self._constructors.get(algorithm)


class StaticProvider(DigestProvider):
    """
    In-memory provider with a pinned mode and an explicit constructor table.

    Used to run a DigestContext under a known compliance mode, for example
    FIPS-active tests on a host whose OpenSSL is not in FIPS mode.
    """

    def __init__(
        self,
        constructors: Optional[Mapping[str, Constructor]] = None,
        mode: Optional[int] = None,
        audited: bool = True,
        name: str = "static",
    ):
        self.name = name
        self.audited = audited
        self._mode = mode
        self._constructors = {normalize_name(k): v for k, v in (constructors or {}).items()}

    def lookup(self, algorithm: str) -> Optional[Constructor]:
        return self._constructors.get(algorithm)

    def compliance_mode(self) -> int:
        if self._mode is None:
            raise ProviderQueryError(f"provider {self.name} has no pinned mode")
        return self._mode


PROVIDER_TYPES: Dict[str, type] = {
    "openssl": OpenSSLProvider,
    "builtin": BuiltinProvider,
    "sodium": SodiumProvider,
}


def default_providers(names: Optional[Sequence[str]] = None) -> List[DigestProvider]:
    """
    Build providers in lookup order.

    Defaults to the FIPSGATE_BACKENDS setting.
    """
    if names is None:
        from .config import configured_backends
        names = configured_backends()

    providers = []
    for name in names:
        if name not in PROVIDER_TYPES:
            raise ValueError(f"Unknown digest provider: {name}")
        providers.append(PROVIDER_TYPES[name]())
    return providers


def first_audited(providers: Iterable[DigestProvider]) -> Optional[DigestProvider]:
    """Return the first audited provider, if any. Availability is left to resolve_mode."""
    for provider in providers:
        if provider.audited:
            return provider
    return None
