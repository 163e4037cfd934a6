"""
Logging setup for the web app.

Records carry an optional ``extra_data`` dict (session id, matrix size, error
text). ``LOG_FORMAT=json`` writes one JSON object per line for log shippers;
``LOG_FORMAT=text`` writes a readable line for local development.
"""

import sys
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .config import settings


def _extra_data(record: logging.LogRecord) -> Dict[str, Any]:
    return getattr(record, "extra_data", None) or {}


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, with ``extra_data`` merged in"""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_data.update(_extra_data(record))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """``time level logger: message key=value ...``"""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
            datefmt="%H:%M:%S"
        )

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        pairs = " ".join(f"{key}={value}" for key, value in _extra_data(record).items())
        return f"{text} {pairs}" if pairs else text


FORMATTERS = {
    "json": StructuredFormatter,
    "text": TextFormatter,
}


def setup_logging(level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Send all logs to stdout in the configured format"""
    level_name = (level or settings.LOG_LEVEL).upper()
    formatter_class = FORMATTERS.get(log_format or settings.LOG_FORMAT, StructuredFormatter)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter_class())

    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        handlers=[handler],
        force=True
    )

    # One line per request is too much at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


class ContextLogger(logging.LoggerAdapter):
    """Logger adapter that accepts ``extra_data=`` and merges fixed context into it"""

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        extra_data = kwargs.pop("extra_data", {})
        kwargs.setdefault("extra", {})["extra_data"] = {**self.extra, **extra_data}
        return msg, kwargs


def get_logger(name: str) -> ContextLogger:
    """Get a logger for a module"""
    return ContextLogger(logging.getLogger(name), {})


def get_context_logger(name: str, **context) -> ContextLogger:
    """Get a logger whose records always include ``context``, e.g. a session id"""
    return ContextLogger(logging.getLogger(name), context)
