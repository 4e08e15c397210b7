"""
Structured logging for the admissions engine.

Every record leaves the ``admissions_kernel`` logger tree as one JSON
object per line.  Request-scoped fields (which admission, which actor,
which workflow action) live in a ContextVar so that every line written
while an operation runs carries them without threading them through
call signatures.

Usage::

    configure_logging()
    logger = get_logger("modules.admission.service")

    with LogContext.bind(admission_id=str(admission.id), operation="admit"):
        logger.info("admission_transition", extra={"to_status": "admitted"})
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
from uuid import UUID

ROOT_LOGGER_NAME = "admissions_kernel"

CONTEXT_FIELDS: tuple[str, ...] = (
    "correlation_id",
    "admission_id",
    "student_id",
    "actor_id",
    "operation",
    "trace_id",
)

_EMPTY: Mapping[str, str] = MappingProxyType({})
_context: ContextVar[Mapping[str, str]] = ContextVar("admissions_log_context", default=_EMPTY)


def _merged(updates: Mapping[str, Any]) -> Mapping[str, str]:
    unknown = set(updates) - set(CONTEXT_FIELDS)
    if unknown:
        raise TypeError(f"Unknown log context field(s): {', '.join(sorted(unknown))}")
    fields = dict(_context.get())
    fields.update({k: str(v) for k, v in updates.items() if v is not None})
    return MappingProxyType(fields)


class LogContext:
    """
    Request-scoped log fields, one immutable snapshot per context.

    ``set`` overwrites fields for the rest of the current context;
    ``bind`` overwrites them only for the ``with`` block.  ``None``
    values are ignored by both.
    """

    @staticmethod
    def set(**fields: str | None) -> None:
        _context.set(_merged(fields))

    @staticmethod
    def get_all() -> dict[str, str]:
        current = _context.get()
        return {name: current[name] for name in CONTEXT_FIELDS if name in current}

    @staticmethod
    def clear() -> None:
        _context.set(_EMPTY)

    @staticmethod
    @contextmanager
    def bind(**fields: str | None) -> Iterator[type["LogContext"]]:
        token = _context.set(_merged(fields))
        try:
            yield LogContext
        finally:
            _context.reset(token)


# Attributes every LogRecord has; anything else on a record came from ``extra``.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "taskName"}


def _json_default(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    # UUID, Decimal and anything else unknown
    return str(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    # AdmissionsError subclasses keep their structured detail as attributes.
    for name, value in vars(exc).items():
        if name.startswith("_") or name in ("args", "code"):
            continue
        fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per record: envelope, context, extras, exception."""

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
    """Logger for ``name`` inside the admissions tree."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


_setup_lock = threading.Lock()
_installed_handler: logging.Handler | None = None


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach a JSON handler to the admissions logger tree.

    Only the first call has an effect until ``reset_logging`` runs.
    The tree does not propagate to the root logger.
    """
    global _installed_handler
    with _setup_lock:
        if _installed_handler is not None:
            return
        _installed_handler = handler or logging.StreamHandler(stream or sys.stderr)

    _installed_handler.setFormatter(StructuredFormatter())
    tree = logging.getLogger(ROOT_LOGGER_NAME)
    tree.setLevel(level)
    tree.propagate = False
    tree.addHandler(_installed_handler)


def reset_logging() -> None:
    """Detach handlers so tests can configure again."""
    global _installed_handler
    with _setup_lock:
        _installed_handler = None
    tree = logging.getLogger(ROOT_LOGGER_NAME)
    tree.handlers.clear()
    tree.setLevel(logging.WARNING)
