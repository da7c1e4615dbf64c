import io
import logging
import sys

import pytest

from sparrowsql._serialization import decode_json, encode_json
from sparrowsql.exceptions import SerializationError
from sparrowsql.utils.logging import StructuredFormatter, configure_logging, get_logger


def _record(message: str, **extra: object) -> logging.LogRecord:
    record = logging.LogRecord("sparrowsql.test", logging.INFO, __file__, 10, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_get_logger_namespaces_names() -> None:
    assert get_logger("driver").name == "sparrowsql.driver"
    assert get_logger("sparrowsql.cache").name == "sparrowsql.cache"
    assert get_logger("sparrowsqlish").name == "sparrowsql.sparrowsqlish"
    assert get_logger().name == "sparrowsql"
    assert get_logger("sparrowsql") is get_logger()


def test_structured_formatter_emits_json() -> None:
    payload = decode_json(StructuredFormatter().format(_record("hello", extra_fields={"sql": "SELECT 1"})))
    assert payload["message"] == "hello"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "sparrowsql.test"
    assert payload["sql"] == "SELECT 1"


def test_structured_formatter_includes_exception() -> None:
    try:
        msg = "boom"
        raise ValueError(msg)
    except ValueError:
        record = _record("failed", exc_info=sys.exc_info())
    payload = decode_json(StructuredFormatter().format(record))
    assert "ValueError: boom" in payload["exception"]


def test_configure_logging_structured_output() -> None:
    stream = io.StringIO()
    configure_logging(level="debug", format_style="structured", stream=stream)
    get_logger("driver").debug("Executing statement", extra={"extra_fields": {"sql": "SELECT 1"}})

    lines = [decode_json(line) for line in stream.getvalue().splitlines()]
    assert lines[-1]["message"] == "Executing statement"
    assert lines[-1]["sql"] == "SELECT 1"
    assert logging.getLogger("sparrowsql").propagate is False


def test_configure_logging_replaces_handlers() -> None:
    first, second = io.StringIO(), io.StringIO()
    configure_logging(stream=first)
    configure_logging(level="INFO", stream=second)
    get_logger("cache").info("stored")

    assert len(logging.getLogger("sparrowsql").handlers) == 1
    assert first.getvalue() == ""
    assert "INFO [sparrowsql.cache] stored" in second.getvalue()


def test_encode_json_falls_back_to_str() -> None:
    class Thing:
        def __str__(self) -> str:
            return "thing"

    assert encode_json({"a": Thing()}) == '{"a":"thing"}'
    assert encode_json([1], as_bytes=True) == b"[1]"


def test_decode_json_error() -> None:
    with pytest.raises(SerializationError):
        decode_json("{not json")
