from __future__ import annotations

import io
import json
import logging
import sys
from decimal import Decimal

import pytest

from sitepay.core.exceptions import ConflictError
from sitepay.logging_config import StructuredFormatter, configure_logging


@pytest.fixture
def stream():
    buf = io.StringIO()
    configure_logging("INFO", stream=buf)
    yield buf
    root = logging.getLogger("sitepay")
    for h in list(root.handlers):
        root.removeHandler(h)
    root.propagate = True
    root.setLevel(logging.NOTSET)


def _lines(buf):
    return [json.loads(line) for line in buf.getvalue().splitlines()]


def test_extra_fields_are_written(stream):
    logging.getLogger("sitepay.payments.service").info(
        "payment_request_created",
        extra={"request_id": "PAY-1", "user_id": 1, "total_amount": Decimal("5160.00")},
    )

    assert "PAY-1" in stream.getvalue()
    [line] = _lines(stream)
    assert line["message"] == "payment_request_created"
    assert line["logger"] == "sitepay.payments.service"
    assert line["level"] == "INFO"
    assert line["request_id"] == "PAY-1"
    assert line["user_id"] == 1
    assert line["total_amount"] == "5160.00"


def test_level_filters_and_reconfigure_does_not_duplicate(stream):
    configure_logging("INFO", stream=stream)
    log = logging.getLogger("sitepay.attendance.service")
    log.debug("hidden")
    log.info("attendance_recorded", extra={"attendance_id": 7})

    lines = _lines(stream)
    assert [line["message"] for line in lines] == ["attendance_recorded"]
    assert lines[0]["attendance_id"] == 7


def test_exception_details_are_included():
    try:
        raise ConflictError("Payment request changed concurrently", retryable=True)
    except ConflictError:
        record = logging.getLogger("sitepay.test").makeRecord(
            "sitepay.test", logging.ERROR, __file__, 1, "batch_failed", (), exc_info=sys.exc_info()
        )

    line = json.loads(StructuredFormatter().format(record))
    assert line["exc_type"] == "ConflictError"
    assert line["exc_code"] == "CONFLICT"
    assert "Traceback" in line["traceback"]
