import json
import logging
import os
import sys
from datetime import datetime
from typing import Optional, Union

# Fields copied from extra={} into JSON log lines
STRUCTURED_KEYS = (
    "run_id",
    "register",
    "year",
    "column",
    "event",
    "status",
    "rows",
    "row_count",
    "persons",
    "contacts",
    "files",
    "duration_seconds",
    "error",
)

# Third-party loggers that are chatty below WARNING
QUIET_LOGGERS = ("faker",)


class JsonFormatter(logging.Formatter):
    """One JSON object per log line, with run/register/year context when given."""

    def format(self, record: logging.LogRecord) -> str:
        data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in STRUCTURED_KEYS:
            if hasattr(record, key):
                data[key] = getattr(record, key)

        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)

        return json.dumps(data, default=str)


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "0").lower() in ("1", "true", "yes")


def configure_logging(
    level: Union[int, str, None] = None, json_format: Optional[bool] = None
) -> None:
    """
    Configure the root logger for the CLI.

    Args:
        level: Logging level. If None, CDEF_LOG_LEVEL or INFO.
        json_format: Whether to use JSON formatting.
                     If None, checks CDEF_JSON_LOGS env var.
    """
    if level is None:
        level = os.environ.get("CDEF_LOG_LEVEL", "INFO").upper()
    if json_format is None:
        json_format = _env_flag("CDEF_JSON_LOGS")

    root = logging.getLogger()
    root.setLevel(level)

    # Repeated main() calls in one process must not stack handlers
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    if json_format:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
            )
        )
    root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a configured logger."""
    return logging.getLogger(name)
