#!/usr/bin/env python3
"""
fipsgate Command Line Interface

Usage:
    fipsgate mode
    fipsgate algorithms
    fipsgate digest -a <algorithm> [--not-for-security] [--prefixed] <file>...
    fipsgate verify -H <algorithm:hex> <file>
"""

import argparse
import json
import sys
from typing import BinaryIO, List, Optional

from . import config
from .gate import DigestUsageError
from .hashing import file_digest, prefixed_hash, verify_hash
from .logging_config import configure_logging
from .providers import default_providers, normalize_name
from .registry import DigestContext, UnsupportedDigestError

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_UNSUPPORTED = 2
EXIT_FORBIDDEN = 3


def _open_input(path: str) -> BinaryIO:
    if path == "-":
        return sys.stdin.buffer
    return open(path, "rb")


def _read_input(path: str) -> bytes:
    f = _open_input(path)
    try:
        return f.read()
    finally:
        if f is not sys.stdin.buffer:
            f.close()


def cmd_mode(args, context: DigestContext) -> int:
    """Print the observed compliance mode."""
    print(json.dumps(context.resolution.to_dict(), indent=2))
    return EXIT_OK


def cmd_algorithms(args, context: DigestContext) -> int:
    """List algorithms and how each one is served."""
    for name in sorted(context.algorithms_available()):
        context.constructor(name)
    print(json.dumps(context.describe(), indent=2))
    return EXIT_OK


def cmd_digest(args, context: DigestContext) -> int:
    """Digest files."""
    usedforsecurity = not args.not_for_security
    algorithm = normalize_name(args.algorithm)
    for path in args.files:
        f = _open_input(path)
        try:
            h = file_digest(f, algorithm, usedforsecurity=usedforsecurity, context=context)
        finally:
            if f is not sys.stdin.buffer:
                f.close()

        if algorithm.startswith("shake_"):
            digest = h.hexdigest(args.length)
        else:
            digest = h.hexdigest()

        if args.prefixed:
            print(f"{algorithm}:{digest}  {path}")
        else:
            print(f"{digest}  {path}")
    return EXIT_OK


def cmd_verify(args, context: DigestContext) -> int:
    """Verify a file against a prefixed hash."""
    data = _read_input(args.file)
    if verify_hash(args.hash, data, context=context):
        print(f"✓ {args.file}: OK")
        return EXIT_OK
    print(f"✗ {args.file}: MISMATCH")
    return EXIT_FAILED


COMMANDS = {
    "mode": cmd_mode,
    "algorithms": cmd_algorithms,
    "digest": cmd_digest,
    "verify": cmd_verify,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fipsgate",
        description="FIPS-aware digest CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  fipsgate mode                                Show compliance mode
  fipsgate algorithms                          List algorithms and providers
  fipsgate digest -a sha256 file.bin           Digest a file
  fipsgate digest -a md5 --not-for-security -  Non-security digest of stdin
  fipsgate verify -H sha256:ab12... file.bin   Verify a file
        """
    )
    parser.add_argument("--log-level", default=config.LOG_LEVEL, help="Log level")
    parser.add_argument("--no-json-logs", action="store_true", help="Plain text logs")
    parser.add_argument("--backends", help="Comma list of providers in lookup order")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("mode", help="Show compliance mode")
    subparsers.add_parser("algorithms", help="List available algorithms")

    digest_parser = subparsers.add_parser("digest", help="Digest files")
    digest_parser.add_argument("-a", "--algorithm", required=True, help="Algorithm name")
    digest_parser.add_argument("--not-for-security", action="store_true",
                               help="Declare the digest is not used for security")
    digest_parser.add_argument("-p", "--prefixed", action="store_true",
                               help="Print <algorithm>:<hex>")
    digest_parser.add_argument("-l", "--length", type=int, default=32,
                               help="Output length in bytes for shake algorithms")
    digest_parser.add_argument("files", nargs="+", help="Files to digest ('-' for stdin)")

    verify_parser = subparsers.add_parser("verify", help="Verify a file against a hash")
    verify_parser.add_argument("-H", "--hash", required=True, help="Expected <algorithm>:<hex>")
    verify_parser.add_argument("file", help="File to verify ('-' for stdin)")

    return parser


def main(argv: Optional[List[str]] = None, context: Optional[DigestContext] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command not in COMMANDS:
        parser.print_help()
        return EXIT_FAILED

    configure_logging(
        level=args.log_level,
        json_format=config.LOG_JSON and not args.no_json_logs,
        log_file=config.LOG_FILE,
    )

    try:
        if context is None:
            backends = config.parse_backends(args.backends) if args.backends else None
            context = DigestContext(default_providers(backends))
        return COMMANDS[args.command](args, context)
    except DigestUsageError as e:
        print(f"✗ {e}", file=sys.stderr)
        return EXIT_FORBIDDEN
    except UnsupportedDigestError as e:
        print(f"✗ {e}", file=sys.stderr)
        return EXIT_UNSUPPORTED
    except (OSError, ValueError) as e:
        print(f"✗ {e}", file=sys.stderr)
        return EXIT_FAILED


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
