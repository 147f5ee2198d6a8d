"""
tests/test_logging_config.py — JSON and readable log formatters.
"""

import json
import logging

from safetyforms.middleware.logging_config import JSONFormatter, ReadableFormatter


def _record(msg="Imported: %s", args=("Daily Check",), **extra):
    record = logging.LogRecord(
        name="safetyforms.services.form_import_service",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=args,
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_lifts_importer_extras():
    line = JSONFormatter().format(_record(form_code="daily-01", company_id="acme", template_id="t-1"))
    entry = json.loads(line)

    assert entry["message"] == "Imported: Daily Check"
    assert entry["level"] == "INFO"
    assert entry["form_code"] == "daily-01"
    assert entry["company_id"] == "acme"
    assert entry["template_id"] == "t-1"
    assert "stage" not in entry


def test_readable_formatter_shows_form_code():
    line = ReadableFormatter().format(_record(form_code="daily-01"))
    assert "[daily-01]" in line
    assert "Imported: Daily Check" in line


def test_readable_formatter_without_form_code():
    line = ReadableFormatter().format(_record())
    assert "[" not in line.split("safetyforms.services.form_import_service:")[1]
