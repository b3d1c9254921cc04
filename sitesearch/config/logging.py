"""Logging setup for the ``sitesearch`` logger tree.

Modules log through ``logging.getLogger(__name__)``, so every record from the
package passes through the handlers installed here. Ingestion and retrieval
attach request details with ``extra=``; the JSON formatter lifts the known
keys into the log entry.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any

ROOT_LOGGER = "sitesearch"

# HTTP and SDK clients log every request at INFO; an ingestion run makes
# thousands of them.
NOISY_LOGGERS = ("httpx", "httpcore", "qdrant_client", "google_genai")

CONTEXT_FIELDS = ("url", "lang", "tenant_id", "batch", "strategy")

TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s | %(message)s"


class JSONLogFormatter(logging.Formatter):
    """One JSON object per line, for log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "severity": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }

        context = {
            field: getattr(record, field) for field in CONTEXT_FIELDS if hasattr(record, field)
        }
        if context:
            entry["context"] = context

        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(
    level: str = "INFO",
    log_file: Path | None = None,
    json_format: bool = False,
) -> logging.Logger:
    """Install handlers on the ``sitesearch`` logger.

    Calling it again replaces the handlers, so the app lifespan can run it
    on every startup.

    Args:
        level: Level name for the package logger (DEBUG, INFO, ...).
        log_file: Also write to this file, creating parent directories.
        json_format: Emit JSON lines instead of the text format.

    Returns:
        The package root logger.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.handlers.clear()

    formatter: logging.Formatter
    if json_format:
        formatter = JSONLogFormatter()
    else:
        formatter = logging.Formatter(TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger
