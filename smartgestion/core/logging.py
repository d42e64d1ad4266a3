"""Smart Gestion — JSON Log Lines.

One JSON object per line on stdout, stamped with the time the event was
recorded. Analytics context (view, data source, row count, timings) passed
through `extra=` is lifted onto the line.
"""

import logging
import json
import sys
from datetime import datetime, timezone
from smartgestion.config import settings

CONTEXT_FIELDS = ("view", "source", "count", "duration_ms", "status_code")


class JSONFormatter(logging.Formatter):
    """Render a record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            {key: getattr(record, key) for key in CONTEXT_FIELDS if hasattr(record, key)}
        )
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        # Participant and activity names are often accented
        return json.dumps(entry, ensure_ascii=False, default=str)


LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def get_logger(name: str) -> logging.Logger:
    """Logger under the `smartgestion.` namespace, writing JSON to stdout."""
    logger = logging.getLogger(f"smartgestion.{name}")
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)
    logger.setLevel(LEVELS.get(settings.log_level.upper(), logging.INFO))
    return logger
