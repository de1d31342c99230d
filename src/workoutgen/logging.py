"""Log output for the workoutgen CLI.

WORKOUTGEN_LOG_FORMAT selects "text" (default) or "json". Only the
``workoutgen`` logger tree is configured; the root logger is left alone.
Records logged with a WorkoutError attached carry its code, class and
details, so failed generations and replacements can be filtered by code.
"""

import json
import logging
import sys
from datetime import datetime, timezone

from workoutgen.errors import WorkoutError

LOG_FORMATS = ("text", "json")
EXTRA_PREFIX = "workoutgen_"


def _workout_error(record: logging.LogRecord) -> WorkoutError | None:
    if record.exc_info and isinstance(record.exc_info[1], WorkoutError):
        return record.exc_info[1]
    return None


def _context(record: logging.LogRecord) -> dict:
    """``workoutgen_*`` extras with the prefix stripped."""
    return {
        key[len(EXTRA_PREFIX):]: value
        for key, value in record.__dict__.items()
        if key.startswith(EXTRA_PREFIX)
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per line: message, context extras and any WorkoutError payload."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = _context(record)
        if context:
            entry["context"] = context

        error = _workout_error(record)
        if error is not None:
            # the payload replaces the traceback; these are expected domain failures
            entry["error"] = error.to_dict()
        elif record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Plain lines; WorkoutError records get a ``[CODE/class]`` tag instead of a traceback."""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        error = _workout_error(record)
        if error is None:
            return super().format(record)
        line = super().format(_without_exc_info(record))
        return f"{line} [{error.code}/{error.error_class}]"


def _without_exc_info(record: logging.LogRecord) -> logging.LogRecord:
    clone = logging.makeLogRecord(record.__dict__)
    clone.exc_info = None
    clone.exc_text = None
    return clone


def setup_logging(log_format: str, level: int | str = logging.WARNING) -> logging.Logger:
    """Attach a single stderr handler to the ``workoutgen`` logger and return it."""
    if log_format not in LOG_FORMATS:
        raise ValueError(f"log_format must be one of {', '.join(LOG_FORMATS)}, got {log_format!r}")

    logger = logging.getLogger("workoutgen")
    logger.setLevel(level)
    logger.propagate = False
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if log_format == "json" else TextFormatter())
    logger.addHandler(handler)
    return logger
