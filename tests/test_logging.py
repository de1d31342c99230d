"""Tests for log formatting and setup."""

import json
import logging
import sys

import pytest

from workoutgen.errors import WorkoutError
from workoutgen.logging import JSONFormatter, TextFormatter, setup_logging


def _record(exc: BaseException | None = None, **extra) -> logging.LogRecord:
    exc_info = None
    if exc is not None:
        try:
            raise exc
        except BaseException:
            exc_info = sys.exc_info()
    record = logging.LogRecord(
        name="workoutgen.generator",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Generated workout of %d exercises",
        args=(10,),
        exc_info=exc_info,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def _timeout() -> WorkoutError:
    return WorkoutError(code="GENERATION_TIMEOUT", message="gave up", details={"attempts": 100})


class TestJSONFormatter:
    def test_basic_fields(self):
        entry = json.loads(JSONFormatter().format(_record()))
        assert entry["level"] == "INFO"
        assert entry["logger"] == "workoutgen.generator"
        assert entry["message"] == "Generated workout of 10 exercises"
        assert "timestamp" in entry
        assert "context" not in entry

    def test_extras_grouped_under_context(self):
        entry = json.loads(JSONFormatter().format(_record(workoutgen_attempts=3, other_field="x")))
        assert entry["context"] == {"attempts": 3}

    def test_workout_error_payload(self):
        entry = json.loads(JSONFormatter().format(_record(_timeout())))
        assert entry["error"] == {
            "code": "GENERATION_TIMEOUT",
            "class": "generation",
            "message": "gave up",
            "details": {"attempts": 100},
        }
        assert "exception" not in entry

    def test_other_exceptions_keep_traceback(self):
        entry = json.loads(JSONFormatter().format(_record(ValueError("boom"))))
        assert "ValueError: boom" in entry["exception"]
        assert "error" not in entry


class TestTextFormatter:
    def test_workout_error_tagged_without_traceback(self):
        line = TextFormatter().format(_record(_timeout()))
        assert line.endswith("[GENERATION_TIMEOUT/generation]")
        assert "Traceback" not in line

    def test_plain_record(self):
        line = TextFormatter().format(_record())
        assert "INFO workoutgen.generator: Generated workout of 10 exercises" in line


class TestSetupLogging:
    @pytest.fixture(autouse=True)
    def _restore(self):
        package = logging.getLogger("workoutgen")
        handlers, level, propagate = package.handlers[:], package.level, package.propagate
        yield
        package.handlers[:] = handlers
        package.setLevel(level)
        package.propagate = propagate

    def test_json(self):
        logger = setup_logging("json", logging.DEBUG)
        assert logger.name == "workoutgen"
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)
        assert logger.level == logging.DEBUG
        assert logger.propagate is False

    def test_text_replaces_previous_handler(self):
        setup_logging("json")
        logger = setup_logging("text", "INFO")
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, TextFormatter)
        assert logger.level == logging.INFO

    def test_root_logger_untouched(self):
        root_handlers = logging.getLogger().handlers[:]
        setup_logging("text")
        assert logging.getLogger().handlers == root_handlers

    def test_unknown_format(self):
        with pytest.raises(ValueError):
            setup_logging("xml")
