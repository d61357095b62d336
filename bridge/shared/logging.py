"""
Logging configuration for the application.

Sets up structured logging with a consistent format. Records emitted by
the error pipeline carry a ``context`` mapping (method, url, client
address, user id) which is appended to the message line.
Never logs request bodies or raw payloads.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s%(request_context)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_CONTEXT_KEYS = ("method", "url", "ip", "user_id")


class RequestContextFilter(logging.Filter):
    """Render the request context of a record into ``request_context``."""

    def filter(self, record: logging.LogRecord) -> bool:
        context = getattr(record, "context", None)
        parts = []
        if isinstance(context, dict):
            parts = [
                f"{key}={context[key]}"
                for key in _CONTEXT_KEYS
                if context.get(key) is not None
            ]
        record.request_context = f" | {' '.join(parts)}" if parts else ""
        return True


def configure_logging(level: str = "INFO") -> None:
    """Configure structured logging for the application.

    Args:
        level: The log level string (DEBUG, INFO, WARNING, ERROR).
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestContextFilter())
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=[handler],
        force=True,
    )

    # Suppress noisy third-party loggers
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").setLevel(logging.WARNING)
