"""
Unit tests for log filters.
"""

import logging

from sessionflow.logging_config import HealthCheckFilter, SessionIdMaskFilter, get_logging_config

SID = "0123456789abcdef" * 2 + "01234567"


def make_record(name: str, msg: str, *args) -> logging.LogRecord:
    return logging.LogRecord(name, logging.INFO, __file__, 1, msg, args, None)


def test_session_id_is_masked():
    record = make_record("sessionflow", f"Regenerated session {SID}")

    assert SessionIdMaskFilter().filter(record) is True
    assert record.getMessage() == "Regenerated session 01234567..."


def test_session_id_in_args_is_masked():
    record = make_record("sessionflow", "Session %s not saved", SID)

    SessionIdMaskFilter().filter(record)

    assert SID not in record.getMessage()
    assert "01234567..." in record.getMessage()


def test_other_messages_untouched():
    record = make_record("sessionflow", "Session gc pass removed %d record(s)", 3)

    SessionIdMaskFilter().filter(record)

    assert record.args == (3,)
    assert record.getMessage() == "Session gc pass removed 3 record(s)"


def test_health_check_access_logs_suppressed():
    health = make_record("uvicorn.access", '127.0.0.1 - "GET /health HTTP/1.1" 200')
    other = make_record("uvicorn.access", '127.0.0.1 - "GET /session HTTP/1.1" 200')
    app = make_record("sessionflow", "GET /health")

    assert HealthCheckFilter().filter(health) is False
    assert HealthCheckFilter().filter(other) is True
    assert HealthCheckFilter().filter(app) is True


def test_logging_config_levels():
    config = get_logging_config("DEBUG")

    assert config["loggers"]["sessionflow"]["level"] == "DEBUG"
    assert "session_id_mask" in config["handlers"]["default"]["filters"]
    assert config["disable_existing_loggers"] is False
