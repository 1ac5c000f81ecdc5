"""
Configuration module for fipsgate.

Environment-driven settings. The compliance mode is deliberately absent:
it is observed from OpenSSL, whose own configuration decides it.
"""

import os
from typing import Dict, List

# ============================================================
# Environment Configuration
# ============================================================

ENV = os.getenv("FIPSGATE_ENV", "dev")  # dev|stage|prod

# Provider lookup order
DEFAULT_BACKENDS = "openssl,builtin,sodium"
BACKENDS = os.getenv("FIPSGATE_BACKENDS", DEFAULT_BACKENDS)

# Logging
LOG_LEVEL = os.getenv("FIPSGATE_LOG_LEVEL", "INFO")
LOG_JSON = os.getenv("FIPSGATE_LOG_JSON", "1").lower() in ("1", "true", "yes")
LOG_FILE = os.getenv("FIPSGATE_LOG_FILE") or None

KNOWN_BACKENDS = ("openssl", "builtin", "sodium")


def parse_backends(value: str) -> List[str]:
    """Split a comma list of provider names, dropping blanks and duplicates."""
    names: List[str] = []
    for part in value.split(","):
        name = part.strip().lower()
        if name and name not in names:
            names.append(name)
    return names


def configured_backends() -> List[str]:
    """Provider names in lookup order, from FIPSGATE_BACKENDS."""
    return parse_backends(os.getenv("FIPSGATE_BACKENDS", BACKENDS))


# ============================================================
# Validation
# ============================================================

def validate_config() -> Dict[str, bool]:
    """
    Validate configured backends.
    Returns dict of backend name -> known.
    """
    return {name: name in KNOWN_BACKENDS for name in configured_backends()}


# ============================================================
# Feature Flags
# ============================================================

def is_production() -> bool:
    """Check if running in production mode."""
    return ENV == "prod"


def is_debug() -> bool:
    """Check if debug mode is enabled."""
    return os.getenv("FIPSGATE_DEBUG", "").lower() in ("1", "true", "yes")
