import json
import logging

from journal_relay.logging_config import JsonFormatter


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("relay", logging.INFO, __file__, 1, "reply generated", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_keeps_zero_valued_extras():
    payload = json.loads(JsonFormatter().format(make_record(client_ip="1.2.3.4", remaining=0)))

    assert payload["message"] == "reply generated"
    assert payload["client_ip"] == "1.2.3.4"
    assert payload["remaining"] == 0
    assert "model" not in payload
