"""
fipsgate Digest Registry

A DigestContext owns everything that is process-wide in hashlib: the
compliance mode and the per-algorithm constructor cache. Contexts are
explicit objects so a test run can hold an ACTIVE and an INACTIVE context
side by side.

Resolution of an algorithm:
1. Normalise the name and check the memo table.
2. Under the context lock, ask providers in order for a constructor.
3. If the winning provider is non-audited and the mode is ACTIVE, wrap it
   with the FIPS gate.
4. Memoize. Each algorithm is resolved at most once per context, so
   concurrent first use sees the same object and the same wrapping decision.

Failures are not memoized: an unknown algorithm raises on every request.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Optional

from .gate import fips_gate
from .logging_config import audit_log
from .modes import ComplianceMode, ModeResolution, resolve_mode
from .providers import (
    ALGORITHMS_GUARANTEED,
    DigestProvider,
    default_providers,
    first_audited,
    normalize_name,
)


logger = logging.getLogger(__name__)


class UnsupportedDigestError(ValueError):
    """No provider can construct the requested algorithm."""

    def __init__(self, algorithm: str):
        super().__init__(f"unsupported hash type {algorithm}")
        self.algorithm = algorithm


@dataclass(frozen=True)
class ResolvedConstructor:
    """A memoized constructor together with how it was chosen."""
    algorithm: str
    provider: str
    audited: bool
    gated: bool
    constructor: Callable[..., Any]

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.constructor(*args, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "algorithm": self.algorithm,
            "provider": self.provider,
            "audited": self.audited,
            "gated": self.gated,
        }


class DigestContext:
    """
    Injectable digest configuration.

    Args:
        providers: Providers in lookup order. Defaults to FIPSGATE_BACKENDS.
        mode: Pin the compliance mode instead of querying the audited
              provider.
    """

    def __init__(
        self,
        providers: Optional[Iterable[DigestProvider]] = None,
        mode: Optional[ComplianceMode] = None,
    ):
        self._providers: List[DigestProvider] = (
            list(providers) if providers is not None else default_providers()
        )
        self._lock = threading.RLock()
        self._constructors: Dict[str, ResolvedConstructor] = {}
        self._resolution: Optional[ModeResolution] = None
        if mode is not None:
            self._resolution = ModeResolution(ComplianceMode(mode), source="pinned")

    @property
    def providers(self) -> List[DigestProvider]:
        return list(self._providers)

    @property
    def resolution(self) -> ModeResolution:
        """The compliance mode resolution, computed on first access."""
        resolution = self._resolution
        if resolution is not None:
            return resolution

        with self._lock:
            if self._resolution is None:
                resolution = resolve_mode(first_audited(self._providers))
                if resolution.out_of_range():
                    audit_log.mode_out_of_range(resolution.source, resolution.raw_value)
                audit_log.mode_resolved(
                    resolution.mode.value,
                    resolution.source,
                    raw_value=resolution.raw_value,
                    detail=resolution.detail,
                )
                self._resolution = resolution
            return self._resolution

    @property
    def mode(self) -> ComplianceMode:
        return self.resolution.mode

    def constructor(self, name: str) -> ResolvedConstructor:
        """Return the memoized (possibly gated) constructor for an algorithm."""
        algorithm = normalize_name(name)
        resolved = self._constructors.get(algorithm)
        if resolved is not None:
            return resolved

        with self._lock:
            resolved = self._constructors.get(algorithm)
            if resolved is None:
                resolved = self._resolve(algorithm)
                self._constructors[algorithm] = resolved
            return resolved

    def _resolve(self, algorithm: str) -> ResolvedConstructor:
        if algorithm not in ALGORITHMS_GUARANTEED:
            audit_log.unsupported_digest(algorithm)
            raise UnsupportedDigestError(algorithm)

        restricts = self.mode.restricts()
        for provider in self._providers:
            if not provider.available():
                audit_log.provider_unavailable(provider.name)
                continue
            constructor = provider.lookup(algorithm)
            if constructor is None:
                continue

            gated = restricts and not provider.audited
            if gated:
                constructor = fips_gate(algorithm, constructor)
            audit_log.constructor_resolved(algorithm, provider.name, provider.audited, gated)
            return ResolvedConstructor(
                algorithm=algorithm,
                provider=provider.name,
                audited=provider.audited,
                gated=gated,
                constructor=constructor,
            )

        audit_log.unsupported_digest(algorithm)
        raise UnsupportedDigestError(algorithm)

    def new(self, name: str, data: bytes = b"", **kwargs: Any) -> Any:
        """hashlib.new() equivalent."""
        return self.constructor(name)(data, **kwargs)

    def algorithms_available(self) -> FrozenSet[str]:
        available = set()
        for provider in self._providers:
            available |= provider.algorithms()
        return frozenset(available & ALGORITHMS_GUARANTEED)

    def resolved(self) -> List[ResolvedConstructor]:
        """Constructors resolved so far, sorted by algorithm."""
        with self._lock:
            return [self._constructors[k] for k in sorted(self._constructors)]

    def describe(self) -> Dict[str, Any]:
        return {
            "mode": self.resolution.to_dict(),
            "providers": [
                {"name": p.name, "audited": p.audited, "available": p.available()}
                for p in self._providers
            ],
            "constructors": [r.to_dict() for r in self.resolved()],
        }

    def __getattr__(self, name: str) -> ResolvedConstructor:
        if name in ALGORITHMS_GUARANTEED:
            return self.constructor(name)
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    def __repr__(self) -> str:
        mode = self._resolution.mode.value if self._resolution else "UNRESOLVED"
        return f"<DigestContext mode={mode} providers={[p.name for p in self._providers]}>"


# ============================================================
# Default context
# ============================================================

_default_context: Optional[DigestContext] = None
_default_lock = threading.Lock()


def default_context() -> DigestContext:
    """Return the process default context, creating it on first use."""
    global _default_context
    context = _default_context
    if context is not None:
        return context
    with _default_lock:
        if _default_context is None:
            _default_context = DigestContext()
        return _default_context


def set_default_context(context: Optional[DigestContext]) -> None:
    """Replace the default context. None resets it to lazy creation."""
    global _default_context
    with _default_lock:
        _default_context = context


def new(name: str, data: bytes = b"", **kwargs: Any) -> Any:
    return default_context().new(name, data, **kwargs)


def _bind(algorithm: str) -> Callable[..., Any]:
    def constructor(*args: Any, **kwargs: Any) -> Any:
        return default_context().constructor(algorithm)(*args, **kwargs)
    constructor.__name__ = algorithm
    constructor.__qualname__ = algorithm
    constructor.__doc__ = f"Return a new {algorithm} digest object from the default context."
    return constructor


md5 = _bind("md5")
sha1 = _bind("sha1")
sha224 = _bind("sha224")
sha256 = _bind("sha256")
sha384 = _bind("sha384")
sha512 = _bind("sha512")
blake2b = _bind("blake2b")
blake2s = _bind("blake2s")
sha3_224 = _bind("sha3_224")
sha3_256 = _bind("sha3_256")
sha3_384 = _bind("sha3_384")
sha3_512 = _bind("sha3_512")
shake_128 = _bind("shake_128")
shake_256 = _bind("shake_256")
