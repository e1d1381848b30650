"""Logging setup for corent.

Modules log through ``logging.getLogger(__name__)`` and attach ledger
context with ``extra={"user_id": ..., "property_id": ..., "period": ...}``.
The JSON format emits that context as top-level fields.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from corent.exceptions import ConfigurationError

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
FORMATS = ("standard", "json")

STANDARD_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Record attributes copied to JSON output when set through ``extra``
CONTEXT_FIELDS = ("user_id", "property_id", "roommate_id", "period")

# Client libraries kept at WARNING whatever the corent level
QUIET_LOGGERS = ("confluent_kafka", "psycopg", "faker")


def setup_logging(level: str = "INFO", format_type: str = "standard") -> None:
    """Configure the root logger for a corent process.

    Parameters
    ----------
    level : str
        Log level name, case-insensitive.
    format_type : str
        ``standard`` (human readable) or ``json`` (one object per line).

    Raises
    ------
    ConfigurationError
        If the level or format type is unknown.
    """
    level_name = level.upper()
    if level_name not in LEVELS:
        raise ConfigurationError(f"Unknown log level: {level}")
    if format_type not in FORMATS:
        raise ConfigurationError(f"Unknown log format: {format_type}")
    log_level = getattr(logging, level_name)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    if format_type == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(STANDARD_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    root = logging.getLogger()
    for existing in root.handlers[:]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(log_level)

    logging.getLogger("corent").setLevel(log_level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


class JsonFormatter(logging.Formatter):
    """Render records as JSON objects carrying the ledger context."""

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                data[name] = value
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False, default=str)
