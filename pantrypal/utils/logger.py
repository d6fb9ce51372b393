"""Logging infrastructure for PantryPal.

Provides centralized logging with configurable format (rich text or JSON) and level.
Configured via environment variables:
- LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
- LOG_TYPE: text, json (default: text)

Records may carry a session_id (one user interaction) and a recipe_id;
session_logger() stamps the session id on every record it emits.
"""

import json
import logging
import os
import sys
from typing import Any

from rich.logging import RichHandler

# Extra record attributes copied into JSON output when present
CONTEXT_FIELDS = ("session_id", "recipe_id", "request_id")


class JSONFormatter(logging.Formatter):
    """Formatter that outputs structured JSON."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format.

        Returns:
            JSON string with timestamp, level, logger name, message, context fields
            and optional traceback.
        """
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for field in CONTEXT_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


class SessionFormatter(logging.Formatter):
    """Message formatter for RichHandler, prefixed with the session id if any.

    RichHandler renders time, level and colors itself.
    """

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        session = getattr(record, "session_id", None)
        return f"[{session}] {message}" if session else message


def get_logger(name: str) -> logging.Logger:
    """Create and configure logger instance.

    Args:
        name: Logger name, typically module name.

    Returns:
        Configured logger instance (handlers are attached only once).
    """
    logger_instance = logging.getLogger(name)

    if logger_instance.handlers:
        return logger_instance

    log_level_str = os.getenv("LOG_LEVEL", "INFO").upper()
    log_type = os.getenv("LOG_TYPE", "text").lower()

    log_level = getattr(logging, log_level_str, logging.INFO)
    logger_instance.setLevel(log_level)

    if log_type == "json":
        handler: logging.Handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter())
    else:
        handler = RichHandler(show_path=False, markup=False)
        handler.setFormatter(SessionFormatter())
    handler.setLevel(log_level)
    logger_instance.addHandler(handler)

    return logger_instance


def session_logger(session_id: str) -> logging.LoggerAdapter:
    """Return an adapter over the service logger that tags records with session_id."""
    return logging.LoggerAdapter(logger, {"session_id": session_id})


# Create module-level logger instance
logger = get_logger("pantrypal")

# Gemini SDK debug output is noise for this service
logging.getLogger("google.genai").setLevel(logging.WARNING)
