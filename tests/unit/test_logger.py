"""Unit tests for structured logging."""

import json
import logging

import pytest

from dnsbl_client.services.logger import (
    RUN_ID,
    CustomJsonFormatter,
    log_query_completed,
    setup_logging,
)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_formatter_adds_standard_fields():
    """Test JSON output carries run_id, level and logger name."""
    formatter = CustomJsonFormatter("%(message)s")
    record = logging.LogRecord(
        "dnsbl_client.test", logging.WARNING, __file__, 1, "hello", None, None
    )
    record.ip = "127.0.0.2"

    payload = json.loads(formatter.format(record))

    assert payload["message"] == "hello"
    assert payload["run_id"] == RUN_ID
    assert payload["level"] == "WARNING"
    assert payload["logger"] == "dnsbl_client.test"
    assert payload["ip"] == "127.0.0.2"
    assert payload["timestamp"].endswith("Z")


def test_setup_logging_single_handler(restore_root_logger):
    """Test repeated setup does not duplicate handlers."""
    setup_logging()
    root = setup_logging(verbose=True)

    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, CustomJsonFormatter)
    assert root.level == logging.DEBUG


def test_log_query_completed_extra_fields(caplog):
    """Test completion log carries structured fields."""
    with caplog.at_level(logging.INFO):
        log_query_completed(
            "127.0.0.2",
            hit_domains=["d1"],
            unanswered_domains=["d2"],
            duration_ms=12,
        )

    record = caplog.records[-1]
    assert record.message == "DNSBL check completed"
    assert record.listed is True
    assert record.unanswered_domains == ["d2"]
