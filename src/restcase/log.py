"""Logging setup for the ``restcase`` logger hierarchy.

Modules log through ``logging.getLogger("restcase.<area>")``. Nothing is
emitted until the application configures handlers, either its own or via
:func:`configure_logging`.
"""

from __future__ import annotations

import logging
import sys
from datetime import UTC, datetime
from typing import TextIO

import orjson

from .config import LoggingSettings, get_settings

ROOT_LOGGER = "restcase"
_HANDLER_NAME = "restcase-default"
_TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": record.getMessage(),
        }
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return orjson.dumps(entry, option=orjson.OPT_NON_STR_KEYS, default=str).decode()


def configure_logging(
    settings: LoggingSettings | None = None,
    *,
    stream: TextIO | None = None,
    debug: bool | None = None,
) -> logging.Logger:
    """Attach a single stream handler to the ``restcase`` logger.

    Calling it again replaces the previous handler instead of stacking a new one.
    """
    root = get_settings()
    settings = settings or root.logging
    debug = root.debug if debug is None else debug

    logger = logging.getLogger(ROOT_LOGGER)
    for handler in [h for h in logger.handlers if h.get_name() == _HANDLER_NAME]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(JsonFormatter() if settings.format == "json" else logging.Formatter(_TEXT_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if debug else settings.level)
    return logger
