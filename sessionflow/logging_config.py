"""
Logging configuration: session id masking and health check suppression
"""

import logging
import logging.config
import re
from typing import Any, Dict

SESSION_ID_RE = re.compile(r"\b([0-9a-f]{8})[0-9a-f]{32}\b")


class SessionIdMaskFilter(logging.Filter):
    """Mask session identifiers down to their first 8 characters."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = SESSION_ID_RE.sub(r"\1...", message)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


class HealthCheckFilter(logging.Filter):
    """Filter to suppress health check endpoint logs."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Filter out health check requests from uvicorn access logs."""
        if record.name == "uvicorn.access":
            message = record.getMessage()
            if "/health" in message and "GET" in message:
                return False
        return True


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """Get logging configuration with id masking and health check suppression."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "session_id_mask": {"()": SessionIdMaskFilter},
            "health_check_filter": {"()": HealthCheckFilter},
        },
        "formatters": {
            "default": {"format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"},
            "access": {"format": "%(message)s"},
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout",
                "filters": ["session_id_mask"],
            },
            "access": {
                "class": "logging.StreamHandler",
                "formatter": "access",
                "stream": "ext://sys.stdout",
                "filters": ["health_check_filter", "session_id_mask"],
            },
        },
        "loggers": {
            "uvicorn": {"handlers": ["default"], "level": level, "propagate": False},
            "uvicorn.error": {"handlers": ["default"], "level": level, "propagate": False},
            "uvicorn.access": {"handlers": ["access"], "level": level, "propagate": False},
            "sessionflow": {"handlers": ["default"], "level": level, "propagate": False},
        },
        "root": {"level": level, "handlers": ["default"]},
    }


def configure_logging(level: str = "INFO") -> None:
    logging.config.dictConfig(get_logging_config(level))
