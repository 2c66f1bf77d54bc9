"""Tests for the structured logging system (stock_kernel/logging_config.py)."""

import json
import logging
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from stock_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


def _make_handler() -> tuple[logging.Handler, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    return handler, stream


def _parse_log(stream: StringIO) -> dict:
    """Parse the first JSON log line from a stream."""
    line = stream.getvalue().strip().split("\n")[0]
    return json.loads(line)


def _parse_all_logs(stream: StringIO) -> list[dict]:
    """Parse all JSON log lines from a stream."""
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


# ---------------------------------------------------------------------------
# StructuredFormatter tests
# ---------------------------------------------------------------------------


class TestStructuredFormatter:
    """Tests for JSON log output format."""

    def test_basic_json_output(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("hello")

        record = _parse_log(stream)
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "stock_kernel.test"
        assert "ts" in record

    def test_extra_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("saved", extra={"quantity": -2, "movement_type": "sale"})

        record = _parse_log(stream)
        assert record["quantity"] == -2
        assert record["movement_type"] == "sale"

    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        LogContext.set(correlation_id="abc-123", movement_id="mv-456")
        logger.info("test_msg")

        record = _parse_log(stream)
        assert record["correlation_id"] == "abc-123"
        assert record["movement_id"] == "mv-456"

    def test_exception_fields(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        try:
            raise ValueError("boom")
        except ValueError:
            logger.error("failed", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_type"] == "ValueError"
        assert record["exc_message"] == "boom"
        assert "traceback" in record

    def test_stock_exception_code_extracted(self):
        """Stock kernel exceptions carry a .code attribute."""
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        from stock_kernel.exceptions import CurrencyMismatchError

        try:
            raise CurrencyMismatchError("DKK", "SEK")
        except CurrencyMismatchError:
            logger.error("currency_error", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_code"] == "CURRENCY_MISMATCH"
        assert record["exc_type"] == "CurrencyMismatchError"
        assert record["exc_expected"] == "DKK"
        assert record["exc_actual"] == "SEK"

    def test_validation_error_rules_extracted(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        from stock_kernel.domain.validation import Violation
        from stock_kernel.exceptions import ValidationError
        from stock_kernel.invariants import StockMovementRule

        violation = Violation(StockMovementRule.QUANTITY_NON_ZERO, "Quantity can never be 0")
        try:
            raise ValidationError([violation])
        except ValidationError:
            logger.error("invalid", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_rules"] == ["quantity_non_zero"]
        assert "exc_violations" not in record

    def test_no_context_fields_when_empty(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("bare_message")

        record = _parse_log(stream)
        assert "correlation_id" not in record
        assert "movement_id" not in record

    def test_uuid_and_decimal_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        uid = uuid4()
        logger.info("with_values", extra={"movement_id": uid, "vat": Decimal("25.00")})

        record = _parse_log(stream)
        assert record["movement_id"] == str(uid)
        assert record["vat"] == "25.00"

    def test_enums_serialized_by_value(self):
        from stock_kernel.domain.enums import MovementType
        from stock_kernel.invariants import StockMovementRule

        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info(
            "with_enums",
            extra={
                "movement_type": MovementType.RETURN,
                "rule": StockMovementRule.VAT_PERCENTAGE_PRECISION,
            },
        )

        record = _parse_log(stream)
        assert record["movement_type"] == "return"
        assert record["rule"] == "vat_percentage_precision"

    def test_valid_json_every_line(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("first")
        logger.warning("second", extra={"k": "v"})
        logger.debug("third")

        logs = _parse_all_logs(stream)
        # INFO is the default level, so the debug line is dropped
        assert len(logs) == 2
        for record in logs:
            assert "ts" in record
            assert "level" in record
            assert "logger" in record
            assert "message" in record


# ---------------------------------------------------------------------------
# LogContext tests
# ---------------------------------------------------------------------------


class TestLogContext:
    """Tests for context propagation."""

    def test_set_and_get(self):
        LogContext.set(correlation_id="x", product_id="y")
        ctx = LogContext.get_all()
        assert ctx == {"correlation_id": "x", "product_id": "y"}

    def test_clear(self):
        LogContext.set(correlation_id="x")
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_bind_context_manager(self):
        LogContext.set(correlation_id="outer")
        with LogContext.bind(correlation_id="inner"):
            assert LogContext.get_all()["correlation_id"] == "inner"
        assert LogContext.get_all()["correlation_id"] == "outer"

    def test_bind_restores_none(self):
        """bind() restores to None if there was no previous value."""
        assert "movement_id" not in LogContext.get_all()
        with LogContext.bind(movement_id="temp"):
            assert LogContext.get_all()["movement_id"] == "temp"
        assert "movement_id" not in LogContext.get_all()

    def test_bind_stringifies_values(self):
        uid = uuid4()
        with LogContext.bind(movement_id=uid):
            assert LogContext.get_all()["movement_id"] == str(uid)

    def test_bind_ignores_unknown_fields(self):
        with LogContext.bind(warehouse="north"):
            assert LogContext.get_all() == {}

    def test_additive_set(self):
        LogContext.set(correlation_id="a")
        LogContext.set(order_id="b")
        ctx = LogContext.get_all()
        assert ctx["correlation_id"] == "a"
        assert ctx["order_id"] == "b"

    def test_set_rejects_unknown_fields(self):
        with pytest.raises(TypeError, match="warehouse"):
            LogContext.set(warehouse="north")

    def test_set_stringifies_values(self):
        uid = uuid4()
        LogContext.set(product_id=uid)
        assert LogContext.get_all() == {"product_id": str(uid)}

    def test_all_fields(self):
        LogContext.set(
            correlation_id="c",
            movement_id="m",
            product_id="p",
            order_id="o",
            order_line_id="l",
        )
        ctx = LogContext.get_all()
        assert len(ctx) == 5
        assert ctx["correlation_id"] == "c"
        assert ctx["order_line_id"] == "l"


class TestBindMovement:
    """Binding the ids of a stock movement."""

    def test_sale_binds_order_ids(self, make_order_line):
        from stock_kernel.domain.stock_movement import StockMovement

        order_line = make_order_line()
        movement = StockMovement.from_order_line(order_line)
        movement.id = uuid4()

        with LogContext.bind_movement(movement):
            ctx = LogContext.get_all()

        assert ctx == {
            "movement_id": str(movement.id),
            "product_id": str(order_line.product.id),
            "order_id": str(order_line.order.id),
            "order_line_id": str(order_line.id),
        }
        assert LogContext.get_all() == {}

    def test_unsaved_delivery_keeps_outer_context(self, make_movement):
        movement = make_movement()
        LogContext.set(correlation_id="batch-7", movement_id="outer")

        with LogContext.bind_movement(movement):
            ctx = LogContext.get_all()

        assert ctx == {
            "correlation_id": "batch-7",
            "movement_id": "outer",
            "product_id": str(movement.product_id),
        }

    def test_validation_failure_logged_with_movement_ids(self, make_order_line):
        from stock_kernel.domain.stock_movement import StockMovement
        from stock_kernel.exceptions import ValidationError

        handler, stream = _make_handler()
        configure_logging(handler=handler, level=logging.DEBUG)
        order_line = make_order_line()
        movement = StockMovement.from_order_line(order_line)
        movement.quantity = 0

        with pytest.raises(ValidationError):
            movement.validate()

        record = next(
            r for r in _parse_all_logs(stream)
            if r["message"] == "stock_movement_validation_failed"
        )
        assert record["order_line_id"] == str(order_line.id)
        assert record["order_id"] == str(order_line.order.id)
        assert record["rules"] == ["sale_quantity_negative", "quantity_non_zero"]


# ---------------------------------------------------------------------------
# configure_logging tests
# ---------------------------------------------------------------------------


class TestConfigureLogging:
    """Tests for initialization."""

    def test_idempotent(self):
        h1, _ = _make_handler()
        configure_logging(handler=h1)
        h2, _ = _make_handler()
        configure_logging(handler=h2)  # second call is no-op
        root = logging.getLogger("stock_kernel")
        assert len(root.handlers) == 1

    def test_get_logger_returns_child(self):
        logger = get_logger("repositories.stock_movement")
        assert logger.name == "stock_kernel.repositories.stock_movement"

    def test_logger_hierarchy(self):
        """Child loggers inherit the stock_kernel root config."""
        handler, stream = _make_handler()
        configure_logging(handler=handler, level=logging.DEBUG)
        child = get_logger("deep.nested.module")
        child.debug("hierarchy_test")

        record = _parse_log(stream)
        assert record["message"] == "hierarchy_test"
        assert record["logger"] == "stock_kernel.deep.nested.module"

    def test_reset_restores_defaults(self):
        handler, _ = _make_handler()
        configure_logging(handler=handler, level=logging.DEBUG)
        reset_logging()

        root = logging.getLogger("stock_kernel")
        assert root.handlers == []
        assert root.level == logging.WARNING
        assert root.propagate is True
