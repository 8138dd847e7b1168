"""
Logging setup shared by the app and uvicorn: quiet polling access logs, redact tokens
"""

import logging
import re
from typing import Any, Dict

# Polled once per second by the login modal; not worth an access log line each.
QUIET_PATHS = ("/health", "/healthz", "/api/auth/check-token")

_BEARER_RE = re.compile(r"(?i)(bearer\s+)[A-Za-z0-9\-._~+/]+=*")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class HealthCheckFilter(logging.Filter):
    """Drop uvicorn access lines for health checks and token polling."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name != "uvicorn.access":
            return True
        line = record.getMessage()
        return not any(path in line for path in QUIET_PATHS)


class SecretRedactionFilter(logging.Filter):
    """Mask bearer token values in log messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        original = record.getMessage()
        masked = redact(original)
        if masked != original:
            record.msg = masked
            record.args = None
        return True


def redact(text: str) -> str:
    """Replace bearer credentials in text with a fixed marker."""
    return _BEARER_RE.sub(r"\1[REDACTED]", text)


def _stdout_handler(formatter: str, log_filter: str) -> Dict[str, Any]:
    return {
        "class": "logging.StreamHandler",
        "stream": "ext://sys.stdout",
        "formatter": formatter,
        "filters": [log_filter],
    }


def _isolated(handler: str, level: str = "INFO") -> Dict[str, Any]:
    return {"handlers": [handler], "level": level, "propagate": False}


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """Build a dictConfig for the application and uvicorn loggers."""
    level = level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "health_check_filter": {"()": HealthCheckFilter},
            "redaction_filter": {"()": SecretRedactionFilter},
        },
        "formatters": {
            "default": {"format": LOG_FORMAT},
            "access": {"format": "%(message)s"},
        },
        "handlers": {
            "default": _stdout_handler("default", "redaction_filter"),
            "access": _stdout_handler("access", "health_check_filter"),
        },
        "loggers": {
            "uvicorn": _isolated("default"),
            "uvicorn.error": _isolated("default"),
            "uvicorn.access": _isolated("access"),
            "draftdash": _isolated("default", level),
        },
        "root": {"level": "INFO", "handlers": ["default"]},
    }
