"""
Logging setup for dockersave.

Every module logs through ``logging.getLogger(__name__)``. This module
installs a single stdout handler on the ``dockersave`` logger, emitting
either one JSON object per line (for log shippers) or plain text.

Usage:
    from dockersave.logger import configure_logging

    configure_logging(level="debug", fmt="json")
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import IO, Any, Dict, Optional

_ROOT_LOGGER_NAME = "dockersave"

# Attributes every LogRecord carries; anything else came in through ``extra``
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}

_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """Formats records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Add extra fields
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                entry[key] = value

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class _DockerSaveHandler(logging.StreamHandler):
    """Marker type so repeated setup replaces instead of stacking handlers."""


def configure_logging(
    level: str = "info",
    fmt: str = "text",
    stream: Optional[IO[str]] = None,
) -> logging.Logger:
    """
    Configure the ``dockersave`` logger.

    Args:
        level: debug, info, warning or error
        fmt: json or text
        stream: Output stream (defaults to stdout)

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(_ROOT_LOGGER_NAME)
    logger.setLevel(level.upper())

    for handler in list(logger.handlers):
        if isinstance(handler, _DockerSaveHandler):
            logger.removeHandler(handler)

    handler = _DockerSaveHandler(stream or sys.stdout)
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT))
    logger.addHandler(handler)
    return logger
