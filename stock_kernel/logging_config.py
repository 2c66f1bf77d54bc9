"""
Structured JSON logging for the stock kernel.

Every record is one JSON line. Identifiers of the stock movement being
worked on (movement, product, order, order line) travel in ``LogContext``
so a save, a validation failure and the order line bookkeeping around it
can be correlated without threading ids through every call.
"""

__all__ = [
    "CONTEXT_FIELDS",
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from contextvars import ContextVar, Token
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

# ---------------------------------------------------------------------------
# Context propagation
# ---------------------------------------------------------------------------

CONTEXT_FIELDS: tuple[str, ...] = (
    "correlation_id",
    "movement_id",
    "product_id",
    "order_id",
    "order_line_id",
)

_CONTEXT: dict[str, ContextVar[str | None]] = {
    name: ContextVar(f"stock_log_{name}", default=None) for name in CONTEXT_FIELDS
}


def _movement_ids(movement: Any) -> dict[str, Any]:
    """The context identifiers a stock movement (domain or row) carries."""
    order_line = getattr(movement, "order_line", None)
    order = getattr(order_line, "order", None)
    return {
        "movement_id": getattr(movement, "id", None),
        "product_id": getattr(movement, "product_id", None),
        "order_line_id": getattr(movement, "order_line_id", None),
        "order_id": getattr(order, "id", None),
    }


class LogContext:
    """Thread-safe / async-safe holder for the ids of the movement in flight."""

    @classmethod
    def set(cls, **fields: Any) -> None:
        """Set context fields. None values are skipped, others stringified."""
        unknown = set(fields) - set(CONTEXT_FIELDS)
        if unknown:
            raise TypeError(f"Unknown log context fields: {sorted(unknown)}")
        for name, val in fields.items():
            if val is not None:
                _CONTEXT[name].set(str(val))

    @classmethod
    def get_all(cls) -> dict[str, str]:
        """Return all non-None context fields as a dict."""
        ctx: dict[str, str] = {}
        for name, var in _CONTEXT.items():
            val = var.get()
            if val is not None:
                ctx[name] = val
        return ctx

    @classmethod
    def clear(cls) -> None:
        for var in _CONTEXT.values():
            var.set(None)

    @classmethod
    def bind(cls, **fields: Any) -> "_LogContextManager":
        """Context manager that sets fields on entry and restores on exit.

        Unknown field names are ignored so callers can pass through whatever
        identifiers they hold.
        """
        return _LogContextManager(fields)

    @classmethod
    def bind_movement(cls, movement: Any) -> "_LogContextManager":
        """Bind the ids of a ``StockMovement`` or ``StockMovementModel``.

        Ids the movement does not have yet (an unsaved movement has no id,
        a delivery has no order line) leave the outer context in place.
        """
        return _LogContextManager(_movement_ids(movement))


class _LogContextManager:
    def __init__(self, fields: dict[str, Any]):
        self._fields = {
            name: str(val)
            for name, val in fields.items()
            if name in _CONTEXT and val is not None
        }
        self._tokens: dict[str, Token] = {}

    def __enter__(self) -> type[LogContext]:
        for name, val in self._fields.items():
            self._tokens[name] = _CONTEXT[name].set(val)
        return LogContext

    def __exit__(self, *exc: Any) -> None:
        for name, token in self._tokens.items():
            _CONTEXT[name].reset(token)
        self._tokens.clear()


# ---------------------------------------------------------------------------
# JSON Formatter
# ---------------------------------------------------------------------------

_STDLIB_KEYS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "taskName"}

# Exception attributes that are either noise or already flattened elsewhere
_SKIPPED_EXC_ATTRS = frozenset({"args", "code", "violations"})


class _JSONEncoder(json.JSONEncoder):
    """Handle UUID, Decimal, datetime and enums (movement types, rules)."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, (UUID, Decimal)):
            return str(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        return super().default(obj)


class StructuredFormatter(logging.Formatter):
    """Formats each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        payload.update(LogContext.get_all())

        for key, val in vars(record).items():
            if key not in _STDLIB_KEYS and key not in payload:
                payload[key] = val

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(self._exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, cls=_JSONEncoder, default=str)

    @staticmethod
    def _exception_fields(exc: BaseException) -> dict[str, Any]:
        fields: dict[str, Any] = {
            "exc_type": type(exc).__name__,
            "exc_message": str(exc),
        }
        code = getattr(exc, "code", None)
        if code is not None:
            fields["exc_code"] = code
        # StockKernelError subclasses keep their details as attributes
        for key, val in vars(exc).items():
            if not key.startswith("_") and key not in _SKIPPED_EXC_ATTRS:
                fields[f"exc_{key}"] = val
        return fields


# ---------------------------------------------------------------------------
# Logger factory
# ---------------------------------------------------------------------------

_LOGGER_PREFIX = "stock_kernel"


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the stock_kernel namespace."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


# ---------------------------------------------------------------------------
# Initialization
# ---------------------------------------------------------------------------

_configured = False
_lock = threading.Lock()


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """Configure the stock_kernel logger hierarchy (idempotent)."""
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    root_logger = logging.getLogger(_LOGGER_PREFIX)
    root_logger.setLevel(level)
    root_logger.propagate = False

    h = handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
    h.setFormatter(StructuredFormatter())
    root_logger.addHandler(h)


def reset_logging() -> None:
    """Reset logging configuration. FOR TESTING ONLY."""
    global _configured
    with _lock:
        _configured = False
    logger = logging.getLogger(_LOGGER_PREFIX)
    logger.handlers.clear()
    logger.setLevel(logging.WARNING)
    logger.propagate = True
