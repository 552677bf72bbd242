"""Structured logging for resolution events.

Purpose
    Emit predictable, machine-readable log records from the aggregator,
    middleware and adapters while staying silent unless the host application
    configures logging.

Contents
    - ``TRACE_ID``: per-task trace identifier attached to every record.
    - ``get_logger``: the package logger, carrying a ``NullHandler``.
    - ``bind_trace_id``: set or clear ``TRACE_ID``.
    - ``log_debug`` / ``log_info`` / ``log_error``: level shortcuts; fields are
      attached as ``record.context``.
    - ``make_event``: standard ``key`` / ``source`` payload for an event.

System Integration
    Resolution events (registration changes, cache hits and expiries, winning
    values) are debug level; ``read_config`` summaries are info level and file
    parse failures error level. A key resolving to nothing is routine and
    produces no record.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from functools import partial
from typing import Any, Final, Mapping

LOGGER_NAME: Final[str] = "lib_config_aggregator"

TRACE_ID: ContextVar[str | None] = ContextVar("lib_config_aggregator_trace_id", default=None)
"""Trace identifier of the current task; ``None`` when unbound."""

_LOGGER: Final[logging.Logger] = logging.getLogger(LOGGER_NAME)
_LOGGER.addHandler(logging.NullHandler())


def get_logger() -> logging.Logger:
    """Return the package logger so applications can attach handlers or set levels."""

    return _LOGGER


def bind_trace_id(trace_id: str | None) -> None:
    """Set the trace identifier for the current context; ``None`` clears it.

    >>> bind_trace_id("req-42")
    >>> TRACE_ID.get()
    'req-42'
    >>> bind_trace_id(None)
    >>> TRACE_ID.get() is None
    True
    """

    TRACE_ID.set(trace_id)


def make_event(
    key: str | None,
    source: str | None,
    payload: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Return the fields of one resolution event.

    ``key`` and ``source`` are always present so log consumers can filter on
    them; *payload* adds event specific detail.

    >>> make_event("db.host", "EnvSource", {"priority": 3})
    {'key': 'db.host', 'source': 'EnvSource', 'priority': 3}
    """

    event: dict[str, Any] = {"key": key, "source": source}
    if payload:
        event.update(payload)
    return event


def _log(level: int, message: str, /, **fields: Any) -> None:
    if _LOGGER.isEnabledFor(level):
        _LOGGER.log(level, message, extra={"context": {"trace_id": TRACE_ID.get(), **fields}})


log_debug = partial(_log, logging.DEBUG)
log_info = partial(_log, logging.INFO)
log_error = partial(_log, logging.ERROR)
