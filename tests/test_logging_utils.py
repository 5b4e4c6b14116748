import json
import logging
import sys

from jyotish_dasha.astro.errors import QueryOutOfBoundsError
from jyotish_dasha.logging_config import ColoredFormatter, JsonFormatter
from jyotish_dasha.logging_utils import safe_str, sanitize_dict


def test_birth_data_is_redacted():
    data = {
        "datetime": "1991-03-25T09:46:00",
        "moonLongitude": 231.5,
        "depth": 3,
        "token": "abc",
    }
    assert sanitize_dict(data) == {
        "datetime": "[REDACTED]",
        "moonLongitude": "[REDACTED]",
        "depth": 3,
    }


def test_nested_values_are_sanitized():
    data = {"birth": {"place": "Pune"}, "items": [{"email": "a@b.c", "n": 1}]}
    assert sanitize_dict(data) == {"birth": "[REDACTED]", "items": [{"email": "[REDACTED]", "n": 1}]}
    assert sanitize_dict(data, redact_pii=False)["items"][0]["email"] == "a@b.c"


def test_safe_str_truncates():
    assert safe_str("x" * 300).endswith("...")
    assert len(safe_str("x" * 300)) == 203
    assert "1991" not in safe_str({"datetime": "1991-03-25"})


def test_json_formatter_outputs_extra_data():
    record = logging.LogRecord("jyotish_dasha", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    record.extra_data = {"endpoint": "dasha"}
    payload = json.loads(JsonFormatter().format(record))
    assert payload["message"] == "hello world"
    assert payload["level"] == "INFO"
    assert payload["extra"] == {"endpoint": "dasha"}
    assert "request" not in payload


def test_colored_formatter_appends_structured_fields():
    record = logging.LogRecord("jyotish_dasha", logging.INFO, __file__, 1, "done", (), None)
    record.extra_data = {"endpoint": "dasha", "depth": 6}
    line = ColoredFormatter().format(record)
    assert line.endswith("endpoint=dasha depth=6")


def test_json_formatter_reports_domain_error_code():
    try:
        raise QueryOutOfBoundsError("before birth")
    except QueryOutOfBoundsError:
        record = logging.LogRecord("jyotish_dasha", logging.INFO, __file__, 1, "failed", (), sys.exc_info())
    payload = json.loads(JsonFormatter().format(record))
    assert payload["errorCode"] == "QUERY_OUT_OF_BOUNDS"
    assert "QueryOutOfBoundsError" in payload["exception"]
