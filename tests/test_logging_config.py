"""Tests for structured JSON logging configuration."""

import json
import logging
from unittest.mock import patch

from pythonjsonlogger.json import JsonFormatter

from mj_relay.logging_config import LOGGING_CONFIG, configure_logging


def test_configure_logging_sets_root_level():
    with patch("mj_relay.logging_config.logging.config.dictConfig") as mock_config:
        configure_logging("debug")

    applied = mock_config.call_args.args[0]
    assert applied["root"]["level"] == "DEBUG"
    assert applied["formatters"]["json"]["()"] == "pythonjsonlogger.json.JsonFormatter"
    # The module-level template is not mutated
    assert LOGGING_CONFIG["root"]["level"] == "INFO"


def test_json_formatter_emits_gcp_fields():
    formatter_config = LOGGING_CONFIG["formatters"]["json"]
    formatter = JsonFormatter(
        formatter_config["format"],
        rename_fields=formatter_config["rename_fields"],
        static_fields=formatter_config["static_fields"],
    )
    record = logging.LogRecord(
        name="mj_relay.runner",
        level=logging.ERROR,
        pathname=__file__,
        lineno=1,
        msg="Job failed in state %s",
        args=("detecting_reply",),
        exc_info=None,
    )
    record.failure_kind = "REPLY_TIMEOUT"

    payload = json.loads(formatter.format(record))

    assert payload["severity"] == "ERROR"
    assert payload["logger"] == "mj_relay.runner"
    assert payload["message"] == "Job failed in state detecting_reply"
    assert payload["service"] == "mj-relay"
    assert payload["failure_kind"] == "REPLY_TIMEOUT"
