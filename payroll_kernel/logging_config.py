"""
Structured JSON logging for the payroll kernel.

Each record is written as one JSON object per line:

    {"ts": "...", "level": "INFO", "logger": "payroll_kernel.services.payroll",
     "message": "top_up_applied", "request_id": "9f1c...", "operation": "top_up",
     "record_id": 12, "amount": "500.00", "balance": "1500.00", ...}

Request-scoped fields (request id, operation, employee id) live in a
ContextVar, so they follow a request across threads started with a copied
context (FastAPI's threadpool does this) and never leak between requests.
Values passed through ``extra=`` become top-level keys.  Messages are
snake_case event names; the data goes in the fields.
"""

__all__ = [
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
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any

_EMPTY: Mapping[str, str] = MappingProxyType({})

_context: ContextVar[Mapping[str, str]] = ContextVar(
    "payroll_log_context", default=_EMPTY
)


class LogContext:
    """Request-scoped fields added to every record formatted in this context."""

    FIELDS = frozenset({"request_id", "operation", "employee_id"})

    @classmethod
    def _merged(cls, fields: Mapping[str, str | None]) -> Mapping[str, str]:
        unknown = set(fields) - cls.FIELDS
        if unknown:
            raise TypeError(f"Unknown log context field(s): {sorted(unknown)}")
        merged = dict(_context.get())
        merged.update({k: v for k, v in fields.items() if v is not None})
        return MappingProxyType(merged)

    @classmethod
    def set(
        cls,
        *,
        request_id: str | None = None,
        operation: str | None = None,
        employee_id: str | None = None,
    ) -> None:
        """Set fields for the rest of the current context.  None is skipped."""
        _context.set(
            cls._merged(
                {
                    "request_id": request_id,
                    "operation": operation,
                    "employee_id": employee_id,
                }
            )
        )

    @classmethod
    def get_all(cls) -> dict[str, str]:
        return dict(_context.get())

    @classmethod
    def clear(cls) -> None:
        _context.set(_EMPTY)

    @classmethod
    @contextmanager
    def bind(cls, **fields: str | None) -> Iterator[type["LogContext"]]:
        """Set fields inside a ``with`` block; the previous values come back after."""
        token = _context.set(cls._merged(fields))
        try:
            yield cls
        finally:
            _context.reset(token)


# Attributes every LogRecord has; anything else on a record came from extra=
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}


def _json_default(obj: Any) -> Any:
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    return str(obj)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    # Kernel errors carry their data as attributes (employee_id, operation...)
    for name, value in vars(exc).items():
        if not name.startswith("_") and name != "code":
            fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """Render a LogRecord as a single line of JSON."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context.get(),
        }
        for name, value in vars(record).items():
            if name not in _RECORD_ATTRS:
                payload.setdefault(name, value)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_json_default)


_ROOT = "payroll_kernel"


def get_logger(name: str) -> logging.Logger:
    """``get_logger("services.payroll")`` -> ``payroll_kernel.services.payroll``."""
    return logging.getLogger(f"{_ROOT}.{name}")


_configure_lock = threading.Lock()


def _is_configured(logger: logging.Logger) -> bool:
    return any(getattr(h, "_payroll_structured", False) for h in logger.handlers)


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach a JSON handler to the ``payroll_kernel`` logger.

    Only the first call has an effect; later calls (the CLI and the app
    factory both call this) leave the existing configuration alone.

    Args:
        level: Level name or number for the whole hierarchy.
        stream: Where the default StreamHandler writes (stderr if omitted).
        handler: Use this handler instead of a StreamHandler.
    """
    root = logging.getLogger(_ROOT)
    with _configure_lock:
        if _is_configured(root):
            return
        target = handler if handler is not None else logging.StreamHandler(
            stream or sys.stderr
        )
        target.setFormatter(StructuredFormatter())
        target._payroll_structured = True  # type: ignore[attr-defined]
        root.addHandler(target)
        root.setLevel(level.upper() if isinstance(level, str) else level)
        root.propagate = False


def reset_logging() -> None:
    """Remove all handlers and restore the WARNING level.  Tests only."""
    root = logging.getLogger(_ROOT)
    with _configure_lock:
        for h in list(root.handlers):
            root.removeHandler(h)
        root.setLevel(logging.WARNING)
        root.propagate = True
