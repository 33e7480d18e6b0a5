"""Focused tests for completion_stream.base.logging.

Covers:
- _parse_level string parsing
- normalized_log_event emits required keys
- JsonFormatter hoists event payloads
- configure_logger attaches and removes the rotating file handler
"""
from __future__ import annotations

import json
import logging

from completion_stream.base.log_support import JsonFormatter, LogContext
from completion_stream.base.logging import (
    _FILE_HANDLER_ATTR,
    REQUIRED_NORMALIZED_KEYS,
    _parse_level,  # type: ignore[attr-defined]
    configure_logger,
    get_logger,
    normalized_log_event,
)


def test_parse_level_variants():
    assert _parse_level(None) == logging.INFO  # nosec B101
    assert _parse_level("debug") == logging.DEBUG  # nosec B101
    assert _parse_level("WARN") == logging.WARNING  # nosec B101
    assert _parse_level("unknown", default=logging.ERROR) == logging.ERROR  # nosec B101


def test_normalized_log_event_emits_required_keys(log_capture):
    logger = get_logger("test.logging")
    ctx = LogContext(endpoint="http://e/v1", model="m", request_id="r-1", extra={"user": None, "mode": "x"})
    normalized_log_event(logger, "completion.end", ctx, phase="finalize", emitted=True, tokens=12, chars=40)

    payload = log_capture.named("completion.end")[0]
    for key in REQUIRED_NORMALIZED_KEYS:
        if key == "error_code":
            assert key not in payload  # nosec B101
        else:
            assert key in payload  # nosec B101
    assert payload["tokens"] == {"completion": 12}  # nosec B101
    assert payload["request_id"] == "r-1" and payload["chars"] == 40  # nosec B101
    assert "user" not in payload  # nosec B101


def test_extra_fields_never_override_normalized_values(log_capture):
    logger = get_logger("test.logging")
    normalized_log_event(logger, "x", phase="p", emitted=True, structured=True, **{"phase_extra": 1})
    payload = log_capture.named("x")[0]
    assert payload["phase"] == "p" and payload["phase_extra"] == 1  # nosec B101


def test_json_formatter_hoists_event_payload():
    record = logging.LogRecord("completion_stream.t", logging.INFO, __file__, 1, json.dumps({"event": "e", "a": 1}), None, None)
    out = json.loads(JsonFormatter().format(record))
    assert out["event"] == "e" and out["a"] == 1  # nosec B101
    assert "msg" not in out and out["level"] == "INFO"  # nosec B101


def test_json_formatter_keeps_plain_messages():
    record = logging.LogRecord("completion_stream.t", logging.WARNING, __file__, 1, "plain %s", ("text",), None)
    out = json.loads(JsonFormatter().format(record))
    assert out["msg"] == "plain text"  # nosec B101


def test_configure_logger_file_handler(tmp_path):
    path = tmp_path / "logs" / "completion.log"
    logger = configure_logger(level="DEBUG", file_path=str(path))
    try:
        get_logger("test.file").info("hello file")
        for h in logger.handlers:
            h.flush()
        assert "hello file" in path.read_text(encoding="utf-8")  # nosec B101
    finally:
        configure_logger(level="INFO", file_path=None)
    assert not any(getattr(h, _FILE_HANDLER_ATTR, False) for h in logger.handlers)  # nosec B101
