import logging

from model_engine.core.logging.filters import (
    CorrelationIdFilter,
    RedactFilter,
    get_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)


def make_record():
    # name, level, pathname, lineno, msg, args, exc_info
    return logging.LogRecord("test", logging.INFO, __file__, 1, "hello %s", ("world",), None)


def test_correlation_id_defaults_to_dash():
    token = set_correlation_id(None)
    try:
        rec = make_record()
        assert CorrelationIdFilter().filter(rec) is True
        assert rec.correlation_id == "-"
    finally:
        reset_correlation_id(token)


def test_correlation_id_uses_contextvar():
    token = set_correlation_id("job-42")
    try:
        rec = make_record()
        CorrelationIdFilter().filter(rec)
        assert rec.correlation_id == "job-42"
    finally:
        reset_correlation_id(token)


def test_correlation_id_respects_record_extra():
    token = set_correlation_id("context-id")
    try:
        rec = make_record()
        rec.correlation_id = "explicit"
        CorrelationIdFilter().filter(rec)
        assert rec.correlation_id == "explicit"
    finally:
        reset_correlation_id(token)


def test_reset_restores_previous_id():
    outer = set_correlation_id("outer")
    inner = set_correlation_id("inner")
    reset_correlation_id(inner)
    assert get_correlation_id() == "outer"
    reset_correlation_id(outer)


def test_redact_filter_masks_sensitive_extras():
    rec = make_record()
    rec.password = "hunter2"
    rec.Authorization = "Bearer x"
    rec.table = "users"

    assert RedactFilter().filter(rec) is True
    assert rec.password == RedactFilter.MASK
    assert rec.Authorization == RedactFilter.MASK
    assert rec.table == "users"
