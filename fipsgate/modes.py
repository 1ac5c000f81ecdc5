"""
fipsgate Compliance Mode

The compliance (FIPS) mode is observed, never configured: it is read once
from the audited provider and then treated as fixed for the lifetime of the
DigestContext that asked for it.

State machine:
    UNRESOLVED -> RESOLVED(ACTIVE | INACTIVE | UNKNOWN)

UNKNOWN means the audited provider could not answer. It is treated exactly
like INACTIVE by the gate (fail-open): without an audited provider there is
no FIPS boundary to protect.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from .providers import DigestProvider


logger = logging.getLogger(__name__)


class ComplianceMode(str, Enum):
    """Observed compliance mode of the audited provider."""
    UNKNOWN = "UNKNOWN"     # Provider missing or query failed
    INACTIVE = "INACTIVE"   # No restriction
    ACTIVE = "ACTIVE"       # Approved algorithms only

    def restricts(self) -> bool:
        return self == ComplianceMode.ACTIVE


def mode_from_value(value: Any) -> ComplianceMode:
    """
    Map a raw provider answer to a ComplianceMode.

    OpenSSL reports 1 for FIPS mode and 0 otherwise. Any other integer is
    treated as INACTIVE. Anything that is not an integer is UNKNOWN.
    """
    if isinstance(value, bool):
        return ComplianceMode.ACTIVE if value else ComplianceMode.INACTIVE
    if isinstance(value, int):
        return ComplianceMode.ACTIVE if value == 1 else ComplianceMode.INACTIVE
    return ComplianceMode.UNKNOWN


@dataclass(frozen=True)
class ModeResolution:
    """Outcome of the one-time mode query."""
    mode: ComplianceMode
    source: Optional[str] = None
    raw_value: Any = None
    detail: Optional[str] = None

    def out_of_range(self) -> bool:
        return (
            isinstance(self.raw_value, int)
            and not isinstance(self.raw_value, bool)
            and self.raw_value not in (0, 1)
        )

    def to_dict(self) -> Dict[str, Any]:
        d = {"mode": self.mode.value, "source": self.source}
        if self.raw_value is not None:
            d["raw_value"] = self.raw_value
        if self.detail:
            d["detail"] = self.detail
        return d


def resolve_mode(provider: Optional[DigestProvider]) -> ModeResolution:
    """
    Query a provider for its compliance mode.

    Never raises: an absent provider or any failure while querying it
    resolves to UNKNOWN.
    """
    if provider is None:
        return ModeResolution(ComplianceMode.UNKNOWN, detail="no audited provider")

    try:
        if not provider.available():
            return ModeResolution(
                ComplianceMode.UNKNOWN,
                source=provider.name,
                detail="provider unavailable",
            )
        raw = provider.compliance_mode()
    except Exception as e:
        logger.warning("Compliance mode query to %s failed: %s", provider.name, e, exc_info=True)
        return ModeResolution(ComplianceMode.UNKNOWN, source=provider.name, detail=str(e))

    return ModeResolution(mode_from_value(raw), source=provider.name, raw_value=raw)
