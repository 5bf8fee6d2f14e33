import json
import logging
import sys

from model_engine.core.logging.formatters import ColorFormatter, JsonFormatter


def make_record(**extra):
    record = logging.LogRecord("model_engine.models.model", logging.INFO, __file__, 10, "model.find.success", (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_standard_and_extra_fields():
    formatter = JsonFormatter(env="testing", service="svc")
    record = make_record(table="users", rows=2, correlation_id="abc")

    payload = json.loads(formatter.format(record))

    assert payload["message"] == "model.find.success"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "model_engine.models.model"
    assert payload["env"] == "testing"
    assert payload["service"] == "svc"
    assert payload["correlation_id"] == "abc"
    assert payload["table"] == "users"
    assert payload["rows"] == 2
    assert "version" in payload
    # LogRecord internals are not repeated as extras
    assert "args" not in payload
    assert "levelno" not in payload


def test_json_formatter_never_raises_on_unserializable_extra():
    formatter = JsonFormatter()
    record = make_record(blob=object())

    payload = json.loads(formatter.format(record))
    assert payload["blob"].startswith("<object object")


def test_json_formatter_includes_exception():
    formatter = JsonFormatter()
    try:
        raise ValueError("boom")
    except ValueError:
        record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())

    payload = json.loads(formatter.format(record))
    assert "ValueError: boom" in payload["exc_info"]


def test_color_formatter_colors_the_level_only():
    formatter = ColorFormatter()
    line = formatter.format(make_record(correlation_id="abc"))

    assert ColorFormatter.COLOR_CODES["INFO"] in line
    assert ColorFormatter.COLOR_CODES["RESET"] in line
    assert "| abc" in line
    assert line.endswith("model.find.success")
