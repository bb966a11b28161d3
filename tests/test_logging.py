"""Tests for the structured logging system (payroll_kernel/logging_config.py)."""

import json
import logging
from decimal import Decimal
from io import StringIO

import pytest

from payroll_kernel.exceptions import StorageError
from payroll_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests, then restore the suite's config."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()
    configure_logging(level=logging.DEBUG)


def _make_handler() -> tuple[logging.Handler, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    return handler, stream


def _parse_all_logs(stream: StringIO) -> list[dict]:
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


class TestStructuredFormatter:
    def test_basic_json_output(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("hello")

        (record,) = _parse_all_logs(stream)
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "payroll_kernel.test"
        assert "ts" in record

    def test_extra_fields_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info(
            "top_up_applied", extra={"record_id": 7, "amount": Decimal("12.50")}
        )

        (record,) = _parse_all_logs(stream)
        assert record["record_id"] == 7
        assert record["amount"] == "12.50"

    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        LogContext.set(request_id="req-1", operation="withdraw", employee_id="3")
        get_logger("test").info("salary_withdrawn")

        (record,) = _parse_all_logs(stream)
        assert record["request_id"] == "req-1"
        assert record["operation"] == "withdraw"
        assert record["employee_id"] == "3"

    def test_kernel_exception_fields(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        try:
            raise StorageError("top up balance", "disk I/O error")
        except StorageError:
            get_logger("test").error("request_failed", exc_info=True)

        (record,) = _parse_all_logs(stream)
        assert record["exc_type"] == "StorageError"
        assert record["exc_code"] == "STORAGE_ERROR"
        assert record["exc_operation"] == "top up balance"
        assert "traceback" in record


class TestLogContext:
    def test_bind_restores_previous_values(self):
        LogContext.set(request_id="outer")
        with LogContext.bind(request_id="inner", operation="deduct"):
            assert LogContext.get_all() == {
                "request_id": "inner",
                "operation": "deduct",
            }
        assert LogContext.get_all() == {"request_id": "outer"}

    def test_bind_ignores_none(self):
        with LogContext.bind(request_id=None, employee_id="9"):
            assert LogContext.get_all() == {"employee_id": "9"}

    def test_clear(self):
        LogContext.set(request_id="r", operation="top_up")
        LogContext.clear()
        assert LogContext.get_all() == {}


class TestConfigureLogging:
    def test_idempotent(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        configure_logging(handler=logging.StreamHandler(StringIO()))

        root = logging.getLogger("payroll_kernel")
        assert root.handlers == [handler]

    def test_level_respected(self):
        handler, stream = _make_handler()
        configure_logging(level="WARNING", handler=handler)
        logger = get_logger("test")
        logger.info("dropped")
        logger.warning("kept")

        assert [r["message"] for r in _parse_all_logs(stream)] == ["kept"]
