"""Structured logging helpers for configuration lifecycle events.

Purpose
    Keep every diagnostic the engine emits (file reads, decode failures, context
    switches, saves) predictable and machine-readable without forcing the host
    CLI to adopt a specific logging backend.

Contents
    - ``TRACE_ID``: context variable storing the active invocation identifier.
    - ``get_logger``: returns the shared package logger (quiet by default).
    - ``bind_trace_id``: binds or clears the active identifier.
    - ``log_debug`` / ``log_info`` / ``log_error``: emit structured entries via a
      single private emitter.
    - ``make_event``: builder for event payloads keyed by context and path.
    - ``SECRET_FIELDS``: field names whose values never reach a handler.

System Integration
    Used by the codecs, the locator and the resolver. Fields named in
    ``SECRET_FIELDS`` are redacted on emission; richer views of a context go
    through :meth:`ClientConfiguration.describe`, which masks secrets itself.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any, Final, Mapping

TRACE_ID: ContextVar[str | None] = ContextVar("lenses_config_trace_id", default=None)
"""Identifier of the current CLI invocation, attached to every log entry."""

_LOGGER: Final[logging.Logger] = logging.getLogger("lenses_config")
_LOGGER.addHandler(logging.NullHandler())

#: Field names whose values are replaced before a record is emitted.
SECRET_FIELDS: Final[frozenset[str]] = frozenset({"password", "token"})
_REDACTED: Final[str] = "<redacted>"


def get_logger() -> logging.Logger:
    """Expose the package logger so applications may attach handlers."""

    return _LOGGER


def bind_trace_id(trace_id: str | None) -> None:
    """Bind (or with ``None`` clear) the identifier of the running invocation.

    Examples
    --------
    >>> bind_trace_id('cli-7f3a')
    >>> TRACE_ID.get()
    'cli-7f3a'
    >>> bind_trace_id(None)
    >>> TRACE_ID.get() is None
    True
    """

    TRACE_ID.set(trace_id)


def log_debug(message: str, **fields: Any) -> None:
    _emit(logging.DEBUG, message, fields)


def log_info(message: str, **fields: Any) -> None:
    _emit(logging.INFO, message, fields)


def log_error(message: str, **fields: Any) -> None:
    _emit(logging.ERROR, message, fields)


def make_event(
    context: str | None,
    path: str | None,
    extra: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a structured payload naming the context and file involved.

    Examples
    --------
    >>> make_event('dev', None, {'source': 'flags'})
    {'context': 'dev', 'path': None, 'source': 'flags'}
    """

    return {"context": context, "path": path, **(extra or {})}


def _emit(level: int, message: str, fields: Mapping[str, Any]) -> None:
    _LOGGER.log(level, message, extra={"context": _record_context(fields)})


def _record_context(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Prefix *fields* with the trace id and redact credential values.

    Examples
    --------
    >>> fields = _record_context({'context': 'dev', 'token': 'abc', 'password': ''})
    >>> fields['context'], fields['token'], fields['password']
    ('dev', '<redacted>', '')
    """

    record: dict[str, Any] = {"trace_id": TRACE_ID.get()}
    for key, value in fields.items():
        record[key] = _REDACTED if key in SECRET_FIELDS and value else value
    return record
