"""
Tests for cdef_core.logger_utils.
"""

import json
import logging
import os
import sys

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cdef_core.logger_utils import JsonFormatter, configure_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def make_record(**extra):
    record = logging.LogRecord("cdef_core.runner", logging.INFO, __file__, 1, "wrote %s", ("bef",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_structured_keys():
    line = JsonFormatter().format(make_record(register="bef", year=2000, rows=40, unrelated="x"))
    data = json.loads(line)
    assert data["message"] == "wrote bef"
    assert data["level"] == "INFO"
    assert data["register"] == "bef"
    assert data["year"] == 2000
    assert data["rows"] == 40
    assert "unrelated" not in data


def test_configure_logging_json_from_env(monkeypatch):
    monkeypatch.setenv("CDEF_JSON_LOGS", "true")
    monkeypatch.setenv("CDEF_LOG_LEVEL", "debug")
    configure_logging()
    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, JsonFormatter)
    assert logging.getLogger("faker").level == logging.WARNING


def test_configure_logging_does_not_stack_handlers():
    configure_logging(logging.INFO, json_format=False)
    configure_logging(logging.INFO, json_format=False)
    root = logging.getLogger()
    assert len(root.handlers) == 1
    assert not isinstance(root.handlers[0].formatter, JsonFormatter)
