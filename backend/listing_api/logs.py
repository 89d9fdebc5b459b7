"""Process-wide logging for the API: our loggers, uvicorn's, and noisy libraries."""

from __future__ import annotations

import json
import logging
import logging.config
from datetime import datetime, timezone
from typing import Any

TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Libraries that log every request/statement at INFO.
QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "urllib3")

_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """
    One JSON object per line. Fields passed through `extra=` (property_id,
    user_id, ...) are emitted as top-level keys.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS and not key.startswith("_"):
                entry[key] = value
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _level_name(level: str) -> str:
    name = (level or "").upper()
    return name if isinstance(logging.getLevelName(name), int) else "INFO"


def logging_config(level: str = "INFO", format_type: str = "text") -> dict[str, Any]:
    level = _level_name(level)
    formatter = "json" if format_type == "json" else "text"
    loggers: dict[str, Any] = {
        "listing_api": {"level": level},
        # uvicorn installs its own handlers; route it through ours instead.
        "uvicorn": {"level": level, "handlers": ["console"], "propagate": False},
    }
    for name in QUIET_LOGGERS:
        loggers[name] = {"level": "WARNING"}
    loggers["uvicorn.access"].update(handlers=["console"], propagate=False)
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "text": {"format": TEXT_FORMAT},
            "json": {"()": JsonFormatter},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stdout",
                "formatter": formatter,
            },
        },
        "root": {"level": level, "handlers": ["console"]},
        "loggers": loggers,
    }


def setup_logging(level: str = "INFO", format_type: str = "text") -> None:
    """Configure logging from LOG_LEVEL / LOG_FORMAT ("text" or "json")."""
    logging.config.dictConfig(logging_config(level, format_type))
