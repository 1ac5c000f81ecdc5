"""
fipsgate Hashing Helpers

Convenience functions on top of a DigestContext. Every helper goes through
the context's constructors, so FIPS gating applies to them exactly as it
does to direct constructor calls.

Prefixed hashes use the format "<algorithm>:<lowercase hex>".
"""

import hmac
from typing import Any, BinaryIO, Optional, Union

from .providers import normalize_name
from .registry import DigestContext, UnsupportedDigestError, default_context


def _context(context: Optional[DigestContext]) -> DigestContext:
    return context if context is not None else default_context()


def _as_bytes(data: Union[bytes, str]) -> bytes:
    if isinstance(data, str):
        return data.encode('utf-8')
    return data


def _hex(digest_obj: Any, length: Optional[int]) -> str:
    # shake_* digests need an explicit output length
    if length is not None:
        return digest_obj.hexdigest(length)
    return digest_obj.hexdigest()


def hexdigest(
    algorithm: str,
    data: Union[bytes, str],
    *,
    usedforsecurity: bool = True,
    length: Optional[int] = None,
    context: Optional[DigestContext] = None,
) -> str:
    """Compute a lowercase hex digest of data."""
    h = _context(context).new(algorithm, _as_bytes(data), usedforsecurity=usedforsecurity)
    return _hex(h, length)


def prefixed_hash(
    algorithm: str,
    data: Union[bytes, str],
    *,
    usedforsecurity: bool = True,
    length: Optional[int] = None,
    context: Optional[DigestContext] = None,
) -> str:
    """
    Compute a hash in prefixed format.

    Returns:
        Hash string in format "sha256:abcdef..."
    """
    algorithm = normalize_name(algorithm)
    digest = hexdigest(
        algorithm, data, usedforsecurity=usedforsecurity, length=length, context=context
    )
    return f"{algorithm}:{digest}"


def verify_hash(
    declared_hash: str,
    data: Union[bytes, str],
    *,
    context: Optional[DigestContext] = None,
) -> bool:
    """
    Verify that data matches a declared prefixed hash.

    Verification is a security use: under FIPS mode a non-approved
    algorithm raises DigestUsageError rather than returning False.
    """
    algorithm, sep, declared = declared_hash.partition(":")
    if not sep or not declared:
        return False

    length = None
    if normalize_name(algorithm).startswith("shake_"):
        length = len(declared) // 2

    try:
        computed = hexdigest(algorithm, data, length=length, context=context)
    except UnsupportedDigestError:
        return False

    # declared is untrusted input and may hold non-ASCII text
    return hmac.compare_digest(computed.encode("ascii"), declared.lower().encode("utf-8", "surrogatepass"))


def file_digest(
    fileobj: BinaryIO,
    algorithm: str,
    *,
    usedforsecurity: bool = True,
    context: Optional[DigestContext] = None,
    chunk_size: int = 65536,
) -> Any:
    """
    Stream a binary file object into a new digest object.

    Returns the digest object so the caller chooses digest() or hexdigest().
    """
    h = _context(context).new(algorithm, usedforsecurity=usedforsecurity)
    while True:
        chunk = fileobj.read(chunk_size)
        if not chunk:
            break
        h.update(chunk)
    return h
