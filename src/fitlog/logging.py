"""Structured logging for fitlog.

Controlled via FITLOG_LOG_FORMAT ("text" or "json") and FITLOG_LOG_LEVEL.
Request context travels on records as `fitlog_*` extras; both formats render
the known ones in a fixed order so lines from the REST client line up.
"""

import json
import logging
import sys
import traceback
from datetime import datetime, timezone

from .errors import ConfigError

LOG_FORMATS = ("text", "json")

CONTEXT_FIELDS = (
    "fitlog_operation",
    "fitlog_status",
    "fitlog_duration_ms",
    "fitlog_user_id",
)

_PREFIX = "fitlog_"


def resolve_level(level: int | str) -> int:
    """Numeric level for an int or a level name such as "debug"."""
    if isinstance(level, int):
        return level
    levels = logging.getLevelNamesMapping()
    try:
        return levels[level.strip().upper()]
    except KeyError:
        raise ConfigError(
            f"FITLOG_LOG_LEVEL must be one of {', '.join(sorted(levels))}"
        ) from None


def check_format(log_format: str) -> str:
    if log_format not in LOG_FORMATS:
        raise ConfigError(f"FITLOG_LOG_FORMAT must be one of {', '.join(LOG_FORMATS)}")
    return log_format


def record_context(record: logging.LogRecord) -> dict:
    """Known context fields first, then any other fitlog_* extras by name."""
    context = {key: record.__dict__[key] for key in CONTEXT_FIELDS if key in record.__dict__}
    for key in sorted(record.__dict__):
        if key.startswith(_PREFIX) and key not in context:
            context[key] = record.__dict__[key]
    return context


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
        }
        entry.update(record_context(record))
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = "".join(traceback.format_exception(*record.exc_info))
        return json.dumps(entry, default=str)


class ContextFormatter(logging.Formatter):
    """Plain text with the request context appended as key=value pairs.

    e.g. `... WARNING fitlog.rest_client: GET sessions failed with HTTP 500
    [operation=List status=500 duration_ms=12.5 user_id=u1]`
    """

    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        pairs = [
            f"{key[len(_PREFIX):]}={value}"
            for key, value in record_context(record).items()
            if value is not None
        ]
        if not pairs:
            return line
        head, sep, rest = line.partition("\n")
        return f"{head} [{' '.join(pairs)}]{sep}{rest}"


def setup_logging(log_format: str, level: int | str = logging.INFO) -> None:
    """Replace the root handlers with one stderr handler.

    Raises ConfigError for an unknown format or level name.
    """
    numeric = resolve_level(level)
    formatter = JSONFormatter() if check_format(log_format) == "json" else ContextFormatter()

    root = logging.getLogger()
    root.setLevel(numeric)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric)
    handler.setFormatter(formatter)
    root.addHandler(handler)
