"""
Logging configuration for fipsgate.

Provides structured JSON logging and an audit logger for the one-time
decisions a DigestContext makes (mode resolution, constructor selection).
The gate's call path never logs.
"""

import json
import logging
import sys
import time
from typing import Any, Dict, Optional


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    One JSON object per line, suitable for log aggregation.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": time.strftime('%Y-%m-%dT%H:%M:%SZ', time.gmtime(record.created)),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, 'extra_fields'):
            log_data.update(record.extra_fields)

        return json.dumps(log_data, default=str)


class GateAuditLogger:
    """
    Audit events for digest resolution.

    Every event is emitted at most once per algorithm per context, since
    resolution results are memoized.
    """

    def __init__(self, name: str = "fipsgate.audit"):
        self._logger = logging.getLogger(name)

    def _log(self, level: int, event_type: str, **kwargs) -> None:
        if not self._logger.isEnabledFor(level):
            return
        extra = {"event_type": event_type, **kwargs}
        record = self._logger.makeRecord(
            self._logger.name,
            level,
            "",
            0,
            f"{event_type}: {kwargs.get('message', '')}",
            (),
            None
        )
        record.extra_fields = extra
        self._logger.handle(record)

    def mode_resolved(self, mode: str, source: Optional[str], raw_value: Any = None,
                      detail: Optional[str] = None) -> None:
        """Log the compliance mode observed for a context."""
        self._log(
            logging.INFO,
            "MODE_RESOLVED",
            mode=mode,
            source=source,
            raw_value=raw_value,
            detail=detail,
            message=f"Compliance mode {mode} (source: {source or 'none'})"
        )

    def mode_out_of_range(self, source: str, raw_value: Any) -> None:
        self._log(
            logging.WARNING,
            "MODE_OUT_OF_RANGE",
            source=source,
            raw_value=raw_value,
            message=f"Provider {source} reported unrecognised mode {raw_value!r}, treating as INACTIVE"
        )

    def constructor_resolved(self, algorithm: str, provider: str, audited: bool, gated: bool) -> None:
        """Log which provider serves an algorithm and whether it is gated."""
        self._log(
            logging.DEBUG,
            "CONSTRUCTOR_RESOLVED",
            algorithm=algorithm,
            provider=provider,
            audited=audited,
            gated=gated,
            message=f"{algorithm} served by {provider}{' (gated)' if gated else ''}"
        )

    def provider_unavailable(self, provider: str) -> None:
        self._log(
            logging.DEBUG,
            "PROVIDER_UNAVAILABLE",
            provider=provider,
            message=f"Provider {provider} is not available"
        )

    def unsupported_digest(self, algorithm: str) -> None:
        self._log(
            logging.WARNING,
            "UNSUPPORTED_DIGEST",
            algorithm=algorithm,
            message=f"No provider serves {algorithm}"
        )


def configure_logging(
    level: str = "INFO",
    json_format: bool = True,
    log_file: Optional[str] = None
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON formatting
        log_file: Optional file path for log output
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if json_format:
        formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


# Global audit logger instance
audit_log = GateAuditLogger()
