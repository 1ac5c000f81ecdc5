#!/usr/bin/env python3
"""
fipsgate Example - FIPS-active and unrestricted contexts side by side

The FIPS-active context is pinned so this runs the same on any host.

Run with: python examples/fips_mode_example.py
"""

from fipsgate import (
    BuiltinProvider,
    ComplianceMode,
    DigestContext,
    OpenSSLProvider,
    prefixed_hash,
)


def attempt(label: str, compute) -> None:
    try:
        print(f"  {label:<21}{compute()}")
    except ValueError as e:
        print(f"  {label:<21}BLOCKED - {e}")


def show(title: str, ctx: DigestContext) -> None:
    print("=" * 60)
    print(f"{title}: mode={ctx.mode.value}")
    print("=" * 60)

    attempt("md5 (security)", lambda: ctx.md5(b"payload").hexdigest())

    # Non-security use, e.g. a cache key
    h = ctx.md5(b"payload", usedforsecurity=False)
    print(f"  md5 (non-security):  {h.hexdigest()}")

    attempt("sha256 (security)", lambda: prefixed_hash("sha256", b"payload", context=ctx))

    for resolved in ctx.resolved():
        print(f"    {resolved.algorithm:<8} via {resolved.provider:<8} gated={resolved.gated}")
    print()


def main():
    show("Host", DigestContext())

    # Builtin first so md5 comes from the non-audited provider
    show("Pinned FIPS", DigestContext(
        [BuiltinProvider(), OpenSSLProvider()],
        mode=ComplianceMode.ACTIVE,
    ))


if __name__ == "__main__":
    main()
