"""
One-line JSON logs for the adoption kernel.

Every logger lives under ``adoption_kernel.*`` and writes through a single
handler installed by configure_logging().  Request-scoped fields such as
the acting user or the pet under decision ride along in LogContext and are
stamped onto every line emitted while they are bound.
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
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from enum import Enum
from typing import Any

NAMESPACE = "adoption_kernel"

# Fields LogContext carries, in the order they appear in a log line
CONTEXT_FIELDS = ("correlation_id", "actor_id", "pet_id", "application_id")

_context_vars: dict[str, ContextVar[str | None]] = {
    field: ContextVar(f"adoption_log_{field}", default=None)
    for field in CONTEXT_FIELDS
}


class LogContext:
    """Request-scoped log fields, isolated per thread and per asyncio task."""

    @staticmethod
    def set(**fields: str | None) -> None:
        """Assign the given fields.  ``None`` leaves a field untouched."""
        unknown = fields.keys() - _context_vars.keys()
        if unknown:
            raise TypeError(f"unknown log context field(s): {sorted(unknown)}")
        for field, value in fields.items():
            if value is not None:
                _context_vars[field].set(value)

    @staticmethod
    def get_all() -> dict[str, str]:
        """Fields currently bound, skipping unset ones."""
        bound = ((field, var.get()) for field, var in _context_vars.items())
        return {field: value for field, value in bound if value is not None}

    @staticmethod
    def clear() -> None:
        for var in _context_vars.values():
            var.set(None)

    @staticmethod
    @contextmanager
    def bind(**fields: str | None) -> Iterator[type["LogContext"]]:
        """
        Bind fields for the duration of a ``with`` block.

        Previous values come back on exit, even if the block raises.
        Names LogContext does not carry are ignored.
        """
        tokens = [
            (_context_vars[field], _context_vars[field].set(value))
            for field, value in fields.items()
            if value is not None and field in _context_vars
        ]
        try:
            yield LogContext
        finally:
            for var, token in reversed(tokens):
                var.reset(token)


# Attributes every LogRecord has; anything else on a record came from extra=
_RECORD_ATTRS = frozenset(
    vars(logging.makeLogRecord({}))
) | {"message", "asctime", "taskName"}


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    # Decimal and anything unrecognised render as text
    return str(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    # Kernel errors keep their context (pet_id, status, ...) as attributes
    fields.update(
        (f"exc_{name}", value)
        for name, value in vars(exc).items()
        if name not in ("args", "code") and not name.startswith("_")
    )
    return fields


class StructuredFormatter(logging.Formatter):
    """Render a record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        line: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        for name, value in vars(record).items():
            if name not in _RECORD_ATTRS:
                line.setdefault(name, value)

        exc = record.exc_info[1] if record.exc_info else None
        if exc is not None:
            line.update(_exception_fields(exc))
            line["traceback"] = self.formatException(record.exc_info)

        return json.dumps(line, default=_json_default)


def get_logger(name: str) -> logging.Logger:
    """Logger ``adoption_kernel.<name>``."""
    return logging.getLogger(f"{NAMESPACE}.{name}")


_setup_lock = threading.Lock()
_handler: logging.Handler | None = None


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Install the JSON handler on the ``adoption_kernel`` logger.

    Only the first call has any effect; later calls return immediately
    until reset_logging() runs.  Records do not propagate to the root
    logger, so host applications keep their own formatting.
    """
    global _handler
    with _setup_lock:
        if _handler is not None:
            return
        _handler = handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
        _handler.setFormatter(StructuredFormatter())

        kernel_logger = logging.getLogger(NAMESPACE)
        kernel_logger.setLevel(level)
        kernel_logger.propagate = False
        kernel_logger.addHandler(_handler)


def reset_logging() -> None:
    """Undo configure_logging().  Used by the test suite between tests."""
    global _handler
    with _setup_lock:
        _handler = None
        kernel_logger = logging.getLogger(NAMESPACE)
        kernel_logger.handlers.clear()
        kernel_logger.setLevel(logging.WARNING)
