"""
fipsgate FIPS Digest Gate

Wraps a non-audited digest constructor so that, under active compliance
mode, it refuses to serve security-relevant callers.

Call contract of a gated constructor:
- usedforsecurity omitted  -> treated as True
- usedforsecurity truthy   -> DigestUsageError, the constructor is never called
- usedforsecurity falsy    -> call forwarded unchanged, result returned

The gate is a pure, synchronous check: it does not log, retry, or keep state.
"""

import functools
from typing import Any, Callable


class DigestUsageError(ValueError):
    """A non-approved digest was requested for a security purpose in FIPS mode."""

    def __init__(self, algorithm: str):
        super().__init__(f"{algorithm} is not allowed for security purposes in FIPS mode")
        self.algorithm = algorithm


def fips_gate(algorithm: str, constructor: Callable[..., Any]) -> Callable[..., Any]:
    """Return constructor wrapped with the usedforsecurity check."""

    @functools.wraps(constructor)
    def gated(*args: Any, **kwargs: Any) -> Any:
        if kwargs.get("usedforsecurity", True):
            raise DigestUsageError(algorithm)
        return constructor(*args, **kwargs)

    gated.algorithm = algorithm
    gated.gated = True
    return gated


def is_gated(constructor: Callable[..., Any]) -> bool:
    return getattr(constructor, "gated", False) is True
